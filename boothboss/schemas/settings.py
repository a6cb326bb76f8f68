"""Pydantic schemas for booth settings."""

from datetime import datetime
from typing import Annotated, Any, Literal
from uuid import UUID

from pydantic import BeforeValidator, ConfigDict, Field, field_validator

from boothboss.constants import HEX_COLOR_PATTERN
from boothboss.schemas.common import BaseSchema
from boothboss.services.normalize import (
    ensure_boolean,
    parse_filter_list,
    process_settings_for_client,
)

# Accepts 0/1, "true"/"false", "1"/"0" and real booleans
LooseBool = Annotated[bool, BeforeValidator(ensure_boolean)]
HexColor = Annotated[str, Field(pattern=HEX_COLOR_PATTERN)]

ThemeName = Literal["midnight", "pastel", "bw", "custom"]
CaptureMode = Literal["photo", "video"]
StorageProviderName = Literal["auto", "local", "vercel"]


class JourneyPage(BaseSchema):
    """A single page of a custom journey."""

    id: str = ""
    title: str = ""
    content: str = ""
    background_image: str | None = None
    button_text: str = "Continue"
    button_image: str | None = None


class SettingsUpdate(BaseSchema):
    """Partial settings update. Only provided fields are written."""

    model_config = ConfigDict(extra="ignore")

    # General
    event_name: str | None = Field(default=None, min_length=1, max_length=255)
    admin_email: str | None = Field(default=None, max_length=255)
    countdown_time: int | None = Field(default=None, ge=1, le=10)
    reset_time: int | None = Field(default=None, ge=10, le=300)

    # Email
    email_subject: str | None = Field(default=None, min_length=1, max_length=255)
    email_template: str | None = Field(default=None, min_length=1)
    smtp_host: str | None = Field(default=None, min_length=1, max_length=255)
    smtp_port: int | None = Field(default=None, ge=1, le=65535)
    smtp_user: str | None = Field(default=None, min_length=1, max_length=255)
    smtp_password: str | None = Field(default=None, min_length=1)

    # Brand & theme
    company_name: str | None = Field(default=None, min_length=1, max_length=255)
    company_logo: str | None = None
    theme: ThemeName | None = None
    primary_color: HexColor | None = None
    secondary_color: HexColor | None = None
    background_color: HexColor | None = None
    border_color: HexColor | None = None
    button_color: HexColor | None = None
    text_color: HexColor | None = None

    # Custom journey
    custom_journey_enabled: LooseBool | None = None
    journey_name: str | None = None
    journey_pages: list[JourneyPage] | None = None
    active_journey_id: str | None = None

    # Splash page
    splash_page_enabled: LooseBool | None = None
    splash_page_title: str | None = None
    splash_page_content: str | None = None
    splash_page_image: str | None = None
    splash_page_button_text: str | None = None

    # Capture
    capture_mode: CaptureMode | None = None
    photo_orientation: str | None = None
    photo_device: str | None = None
    photo_resolution: str | None = None
    photo_effect: str | None = None
    printer_enabled: LooseBool | None = None
    ai_image_correction: LooseBool | None = None
    video_orientation: str | None = None
    video_device: str | None = None
    video_resolution: str | None = None
    video_effect: str | None = None
    video_duration: int | None = Field(default=None, ge=5, le=60)

    # Filters
    filters_enabled: LooseBool | None = None
    enabled_filters: list[str] | None = None

    # Storage
    storage_provider: StorageProviderName | None = None
    blob_vercel_enabled: LooseBool | None = None
    local_upload_path: str | None = None
    storage_base_url: str | None = None

    # Misc
    show_booth_boss_logo: LooseBool | None = None
    custom_css: str | None = None
    notes: str | None = None
    is_default: LooseBool | None = None

    @field_validator("enabled_filters", mode="before")
    @classmethod
    def _split_filters(cls, value: object) -> object:
        if value is None or isinstance(value, list):
            return value
        return parse_filter_list(value)


class SettingsResponse(BaseSchema):
    """Full settings as seen by the owner's dashboard."""

    id: UUID
    user_id: UUID

    event_name: str
    admin_email: str
    countdown_time: int
    reset_time: int

    email_subject: str
    email_template: str
    smtp_host: str
    smtp_port: int
    smtp_user: str
    smtp_password: str

    company_name: str
    company_logo: str | None = None
    theme: str
    primary_color: str
    secondary_color: str
    background_color: str | None = None
    border_color: str | None = None
    button_color: str | None = None
    text_color: str | None = None

    custom_journey_enabled: bool
    journey_name: str | None = None
    journey_pages: list[JourneyPage] = []
    active_journey_id: str | None = None

    splash_page_enabled: bool
    splash_page_title: str | None = None
    splash_page_content: str | None = None
    splash_page_image: str | None = None
    splash_page_button_text: str | None = None

    capture_mode: str
    photo_orientation: str
    photo_device: str
    photo_resolution: str
    photo_effect: str
    printer_enabled: bool
    ai_image_correction: bool
    video_orientation: str
    video_device: str
    video_resolution: str
    video_effect: str
    video_duration: int

    filters_enabled: bool
    enabled_filters: list[str] = []

    storage_provider: str
    blob_vercel_enabled: bool
    local_upload_path: str
    storage_base_url: str | None = None

    show_booth_boss_logo: bool
    custom_css: str | None = None
    notes: str | None = None
    is_default: bool

    cache_version: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Any, cache_version: int | None = None) -> "SettingsResponse":
        """Normalize a settings row for clients and validate it."""
        return cls.model_validate(process_settings_for_client(row, cache_version))


class BoothSettingsResponse(BaseSchema):
    """Public-facing subset served to the booth itself."""

    event_name: str
    countdown_time: int
    reset_time: int
    company_name: str
    company_logo: str | None = None
    theme: str
    primary_color: str
    secondary_color: str
    background_color: str | None = None
    border_color: str | None = None
    button_color: str | None = None
    text_color: str | None = None
    custom_journey_enabled: bool
    journey_pages: list[JourneyPage] = []
    splash_page_enabled: bool
    splash_page_title: str | None = None
    splash_page_content: str | None = None
    splash_page_image: str | None = None
    splash_page_button_text: str | None = None
    capture_mode: str
    photo_orientation: str
    photo_device: str
    photo_resolution: str
    photo_effect: str
    printer_enabled: bool
    ai_image_correction: bool
    video_orientation: str
    video_device: str
    video_resolution: str
    video_effect: str
    video_duration: int
    filters_enabled: bool
    enabled_filters: list[str] = []
    show_booth_boss_logo: bool
    custom_css: str | None = None
    cache_version: int

    @classmethod
    def from_row(cls, row: Any, cache_version: int | None = None) -> "BoothSettingsResponse":
        return cls.model_validate(process_settings_for_client(row, cache_version))


class LinkSettingsRequest(BaseSchema):
    """Point an event URL at an existing settings row."""

    settings_id: UUID
