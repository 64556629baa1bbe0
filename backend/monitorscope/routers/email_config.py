"""Email configuration API - read-only view and self-test."""
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..config import Settings
from ..models.observation import STATUS_DOWN
from ..models import Target
from ..schemas.email_config import EmailConfigResponse, EmailTestRequest, EmailTestResponse
from ..services.notifier import Notifier, recipients_from_addresses
from ..services.probe import ProbeResult
from .deps import get_notifier, get_settings, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/email-config",
    tags=["email"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=EmailConfigResponse)
async def get_email_config(settings: Settings = Depends(get_settings)):
    """Email settings come from the environment; the password is masked."""
    return EmailConfigResponse(
        smtp_host=settings.smtp_host or "",
        smtp_port=settings.smtp_port,
        smtp_username=settings.smtp_username or "",
        smtp_password="********",
        smtp_use_tls=settings.smtp_use_tls,
        from_email=settings.email_from or "",
        from_name=settings.email_from_name,
        enabled=settings.email_enabled,
    )


@router.post("/test", response_model=EmailTestResponse)
async def test_email_config(
    payload: EmailTestRequest = EmailTestRequest(),
    notifier: Notifier = Depends(get_notifier),
):
    """Verify the SMTP configuration, then optionally send a sample alert."""
    success, message = await notifier.test_config()
    if not success:
        raise HTTPException(status_code=400, detail=message)

    if not payload.test_email:
        return EmailTestResponse(success=True, message=message)

    sample_target = Target(id=0, name="Test API", url="https://api.example.com/test")
    sample_result = ProbeResult(
        status=STATUS_DOWN,
        response_time_ms=5000,
        error_message="This is a test alert email",
    )
    sent = await notifier.send_alert(
        sample_target,
        sample_result,
        recipients_from_addresses([payload.test_email]),
    )
    if not sent:
        raise HTTPException(status_code=500, detail="Failed to send test email. Check server logs for details.")
    return EmailTestResponse(success=True, message=f"Test email sent to {payload.test_email}")
