"""Development-only endpoints for inspecting captured email previews."""

from fastapi import APIRouter, Depends, HTTPException, status

from boothboss.core.config import settings
from boothboss.schemas.common import SuccessResponse
from boothboss.schemas.email import EmailAttachmentInfo, EmailPreviewDetail, EmailPreviewSummary
from boothboss.services.email_service import EmailPreview, email_preview_store


def require_development() -> None:
    """Hide these routes outside development."""
    if not settings.is_development:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")


router = APIRouter(dependencies=[Depends(require_development)])


def _summary(preview: EmailPreview) -> EmailPreviewSummary:
    return EmailPreviewSummary(
        id=preview.id,
        to=preview.to,
        from_address=preview.from_address,
        subject=preview.subject,
        created_at=preview.created_at,
        sent=preview.sent,
    )


@router.get(
    "/emails",
    response_model=list[EmailPreviewSummary],
    summary="List email previews",
)
async def list_emails() -> list[EmailPreviewSummary]:
    """Captured emails, newest first."""
    return [_summary(p) for p in email_preview_store.get_all_emails()]


@router.get(
    "/emails/{email_id}",
    response_model=EmailPreviewDetail,
    summary="Get email preview",
)
async def get_email(email_id: str) -> EmailPreviewDetail:
    preview = email_preview_store.get_email_by_id(email_id)
    if preview is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Email preview not found",
        )
    return EmailPreviewDetail(
        **_summary(preview).model_dump(),
        html=preview.html,
        attachments=[
            EmailAttachmentInfo(
                filename=a.filename,
                content_type=a.content_type,
                size=len(a.content),
            )
            for a in preview.attachments
        ],
    )


@router.delete(
    "/emails",
    response_model=SuccessResponse,
    summary="Clear email previews",
)
async def clear_emails() -> SuccessResponse:
    count = len(email_preview_store)
    email_preview_store.clear_all_emails()
    return SuccessResponse(message=f"Cleared {count} email previews")
