"""Application-wide constants."""

from typing import Any

# Values used when a settings row is created lazily for a user
DEFAULT_SETTINGS: dict[str, Any] = {
    "event_name": "Photo Booth Event",
    "admin_email": "",
    "countdown_time": 3,
    "reset_time": 30,
    "email_subject": "Your Photo Booth Pictures",
    "email_template": "Thank you for using our photo booth! Here's your picture.",
    "smtp_host": "smtp.example.com",
    "smtp_port": 587,
    "smtp_user": "user",
    "smtp_password": "password",
    "company_name": "Bureau of Internet Culture",
    "primary_color": "#3B82F6",
    "secondary_color": "#1E40AF",
    "theme": "custom",
    "background_color": "#FFFFFF",
    "border_color": "#E5E7EB",
    "button_color": "#3B82F6",
    "text_color": "#111827",
    "custom_journey_enabled": False,
    "splash_page_enabled": False,
    "printer_enabled": False,
    "filters_enabled": True,
    "ai_image_correction": False,
    "show_booth_boss_logo": True,
    "capture_mode": "photo",
    "photo_device": "ipad",
    "photo_orientation": "portrait-standard",
    "photo_resolution": "medium",
    "photo_effect": "none",
    "video_device": "ipad",
    "video_duration": 10,
    "video_orientation": "portrait-standard",
    "video_resolution": "medium",
    "video_effect": "none",
    "blob_vercel_enabled": True,
    "local_upload_path": "uploads",
    "storage_provider": "auto",
    "is_default": False,
}

# Paths that collide with application routes and cannot be claimed by a booth
RESERVED_URL_PATHS: frozenset[str] = frozenset(
    {
        "admin",
        "api",
        "auth",
        "booth",
        "dashboard",
        "login",
        "logout",
        "register",
        "setup",
        "settings",
        "subscription",
        "support",
        "verify",
        "verify-email",
        "verify-success",
        "e",
    }
)

URL_PATH_PATTERN = r"^[a-z0-9-]+$"
HEX_COLOR_PATTERN = r"^#([0-9A-Fa-f]{3}){1,2}$"
