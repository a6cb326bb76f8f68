"""Booth email delivery over each tenant's own SMTP server.

Outside production, or whenever delivery is switched off, messages are kept
in an in-memory preview store instead of being sent.
"""

import logging
import ssl
import uuid
from abc import ABC, abstractmethod
from collections import OrderedDict
from dataclasses import dataclass, field
from datetime import UTC, datetime
from email.mime.application import MIMEApplication
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import make_msgid
from pathlib import Path
from typing import Any

import aiosmtplib
from cryptography.fernet import InvalidToken
from jinja2 import Environment, FileSystemLoader
from jinja2.sandbox import SandboxedEnvironment
from markupsafe import Markup

from boothboss.core.config import settings
from boothboss.core.encryption import decrypt_secret
from boothboss.core.errors import EmailDeliveryError
from boothboss.models.settings import Settings

logger = logging.getLogger(__name__)

# Jinja2 template environment
TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "email"
_jinja_env = Environment(loader=FileSystemLoader(str(TEMPLATE_DIR)), autoescape=True)

# Tenant-authored bodies only get the variables below
_sandbox = SandboxedEnvironment(autoescape=True)

IMPLICIT_TLS_PORT = 465


@dataclass
class EmailAttachment:
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"


@dataclass
class EmailPreview:
    """A message captured instead of (or as well as) being sent."""

    id: str
    to: str
    from_address: str
    subject: str
    html: str
    attachments: list[EmailAttachment] = field(default_factory=list)
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    sent: bool = False


@dataclass
class EmailResult:
    message_id: str
    success: bool
    preview_id: str | None = None


class EmailPreviewStore:
    """Bounded in-memory store of email previews. Oldest entries are evicted first."""

    def __init__(self, max_entries: int = 50) -> None:
        self.max_entries = max_entries
        self._emails: OrderedDict[str, EmailPreview] = OrderedDict()

    def __len__(self) -> int:
        return len(self._emails)

    def store_email(
        self,
        *,
        to: str,
        from_address: str,
        subject: str,
        html: str,
        attachments: list[EmailAttachment] | None = None,
        sent: bool = False,
    ) -> EmailPreview:
        preview = EmailPreview(
            id=f"email-{uuid.uuid4().hex[:16]}",
            to=to,
            from_address=from_address,
            subject=subject,
            html=html,
            attachments=list(attachments or []),
            sent=sent,
        )
        self._emails[preview.id] = preview
        while len(self._emails) > self.max_entries:
            self._emails.popitem(last=False)
        return preview

    def get_all_emails(self) -> list[EmailPreview]:
        """Newest first."""
        return list(reversed(self._emails.values()))

    def get_email_by_id(self, email_id: str) -> EmailPreview | None:
        return self._emails.get(email_id)

    def mark_as_sent(self, email_id: str) -> bool:
        preview = self._emails.get(email_id)
        if preview is None:
            return False
        preview.sent = True
        return True

    def clear_all_emails(self) -> None:
        self._emails.clear()


email_preview_store = EmailPreviewStore(max_entries=settings.email_preview_limit)


def is_email_enabled() -> bool:
    """Whether messages should actually leave the process."""
    if settings.email_force_disabled:
        return False
    if settings.is_development:
        return settings.email_enabled_in_dev
    return True


class BaseEmailProvider(ABC):
    """Abstract base class for email delivery providers."""

    @abstractmethod
    async def send(self, message: MIMEMultipart) -> str:
        """Deliver ``message`` and return its Message-ID.

        Raises:
            EmailDeliveryError: Delivery failed.
        """
        ...


class SMTPEmailProvider(BaseEmailProvider):
    """Send emails via SMTP using aiosmtplib."""

    def __init__(self, host: str, port: int, username: str, password: str) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password

    @classmethod
    def from_settings(cls, booth_settings: Settings) -> "SMTPEmailProvider":
        try:
            password = decrypt_secret(booth_settings.smtp_password)
        except InvalidToken as e:
            raise EmailDeliveryError(
                "Stored SMTP password could not be decrypted. Re-enter it in your settings."
            ) from e
        return cls(
            host=booth_settings.smtp_host,
            port=booth_settings.smtp_port,
            username=booth_settings.smtp_user,
            password=password,
        )

    async def send(self, message: MIMEMultipart) -> str:
        implicit_tls = self.port == IMPLICIT_TLS_PORT
        try:
            await aiosmtplib.send(
                message,
                hostname=self.host,
                port=self.port,
                username=self.username or None,
                password=self.password or None,
                use_tls=implicit_tls,
                start_tls=not implicit_tls,
                tls_context=ssl.create_default_context(),
                timeout=30,
            )
        except aiosmtplib.SMTPAuthenticationError as e:
            raise EmailDeliveryError(
                "SMTP authentication failed. Check your username and password."
            ) from e
        except (ssl.SSLError, ssl.CertificateError) as e:
            raise EmailDeliveryError(
                "SSL certificate issue with SMTP server. Check the host and port settings."
            ) from e
        except (aiosmtplib.SMTPConnectError, ConnectionRefusedError) as e:
            raise EmailDeliveryError(
                "Failed to connect to SMTP server. Check your SMTP host and port settings."
            ) from e
        except (aiosmtplib.SMTPException, OSError) as e:
            raise EmailDeliveryError(f"Failed to send email: {e}") from e

        logger.info("Email sent via %s:%s to %s", self.host, self.port, message["To"])
        return str(message["Message-ID"])


def build_message(
    *,
    from_address: str,
    to: str,
    subject: str,
    html: str,
    attachments: list[EmailAttachment] | None = None,
) -> MIMEMultipart:
    msg = MIMEMultipart("mixed")
    msg["From"] = from_address
    msg["To"] = to
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid(domain="boothboss")
    msg.attach(MIMEText(html, "html", "utf-8"))
    for attachment in attachments or []:
        _, _, subtype = attachment.content_type.partition("/")
        part = MIMEApplication(attachment.content, _subtype=subtype or "octet-stream")
        part.add_header("Content-Disposition", "attachment", filename=attachment.filename)
        msg.attach(part)
    return msg


def render_booth_email(
    booth_settings: Settings,
    *,
    user_name: str,
    media_url: str,
    media_type: str = "photo",
    event_name: str | None = None,
) -> str:
    """Render the tenant template inside the standard layout."""
    event = event_name or booth_settings.event_name
    variables: dict[str, Any] = {
        "userName": user_name,
        "eventName": event,
        "photoUrl": media_url,
        "mediaUrl": media_url,
    }
    try:
        body = _sandbox.from_string(booth_settings.email_template or "").render(**variables)
    except Exception:
        logger.warning("Invalid email template for settings %s", booth_settings.id, exc_info=True)
        body = str(Markup.escape(booth_settings.email_template or ""))

    template = _jinja_env.get_template("booth_media.html")
    return template.render(
        subject=booth_settings.email_subject,
        body=Markup(body),
        user_name=user_name,
        event_name=event,
        media_url=media_url,
        media_type=media_type,
        company_name=booth_settings.company_name,
        company_logo=booth_settings.company_logo,
        primary_color=booth_settings.primary_color,
    )


class BoothEmailService:
    """Sends booth emails with the owner's SMTP settings."""

    def __init__(
        self,
        preview_store: EmailPreviewStore | None = None,
        provider: BaseEmailProvider | None = None,
    ) -> None:
        self.preview_store = preview_store if preview_store is not None else email_preview_store
        self._provider = provider

    def _provider_for(self, booth_settings: Settings) -> BaseEmailProvider:
        return self._provider or SMTPEmailProvider.from_settings(booth_settings)

    async def send_email(
        self,
        booth_settings: Settings,
        *,
        to: str,
        subject: str,
        html: str,
        attachments: list[EmailAttachment] | None = None,
    ) -> EmailResult:
        """Send (or preview) a message from the booth owner's mailbox.

        Raises:
            EmailDeliveryError: SMTP delivery failed.
        """
        from_address = f'"{booth_settings.company_name}" <{booth_settings.smtp_user}>'

        if not is_email_enabled():
            preview = self.preview_store.store_email(
                to=to,
                from_address=from_address,
                subject=subject,
                html=html,
                attachments=attachments,
                sent=False,
            )
            logger.info("Email delivery disabled, stored preview %s for %s", preview.id, to)
            return EmailResult(
                message_id=f"preview-{preview.id}", success=True, preview_id=preview.id
            )

        message = build_message(
            from_address=from_address,
            to=to,
            subject=subject,
            html=html,
            attachments=attachments,
        )
        message_id = await self._provider_for(booth_settings).send(message)

        preview_id = None
        if settings.is_development:
            preview_id = self.preview_store.store_email(
                to=to,
                from_address=from_address,
                subject=subject,
                html=html,
                attachments=attachments,
                sent=True,
            ).id

        return EmailResult(message_id=message_id, success=True, preview_id=preview_id)

    async def send_booth_media(
        self,
        booth_settings: Settings,
        *,
        to: str,
        user_name: str,
        media_url: str,
        media_type: str = "photo",
        event_name: str | None = None,
        attachments: list[EmailAttachment] | None = None,
    ) -> EmailResult:
        """Email a guest their photo or video."""
        html = render_booth_email(
            booth_settings,
            user_name=user_name,
            media_url=media_url,
            media_type=media_type,
            event_name=event_name,
        )
        return await self.send_email(
            booth_settings,
            to=to,
            subject=booth_settings.email_subject,
            html=html,
            attachments=attachments,
        )
