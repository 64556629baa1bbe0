"""Notifier - renders alert emails and sends them to a target's recipients."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from html import escape
from typing import List, Optional, Protocol, Sequence, Tuple

from ..models import Recipient, Target
from ..models.observation import STATUS_UP
from ..utils.clock import isoformat_utc, utcnow
from .email_sender import EmailConfig, SmtpMailTransport
from .probe import ProbeResult

logger = logging.getLogger(__name__)


class MailTransport(Protocol):
    async def send(self, to: str, subject: str, html: str, text: str) -> bool: ...

    async def verify(self) -> Tuple[bool, str]: ...


@dataclass
class AlertEmail:
    """Values rendered into an alert email."""
    target_name: str
    target_url: str
    status: str
    timestamp: str
    response_time: Optional[int] = None
    error_message: Optional[str] = None

    @property
    def status_icon(self) -> str:
        return "✅" if self.status == STATUS_UP else "❌"


def build_subject(data: AlertEmail) -> str:
    return f"API Alert: {data.target_name} - {data.status}"


def render_alert_text(data: AlertEmail) -> str:
    lines = [
        f"API Health Alert - {data.target_name}",
        "",
        f"{data.status_icon} Status: {data.status}",
        f"URL: {data.target_url}",
    ]
    if data.response_time is not None:
        lines.append(f"Response Time: {data.response_time}ms")
    if data.error_message:
        lines.append(f"Error: {data.error_message}")
    lines.append(f"Timestamp: {data.timestamp}")
    lines.append("")
    lines.append("This alert was sent by MonitorScope API Health Monitoring System.")
    lines.append("To manage your alert settings, please log in to your MonitorScope dashboard.")
    return "\n".join(lines)


def _detail_row(label: str, value: str) -> str:
    return (
        '<div class="detail-row">'
        f'<span class="detail-label">{label}:</span> {value}'
        "</div>"
    )


def render_alert_html(data: AlertEmail) -> str:
    status_class = "up" if data.status == STATUS_UP else "down"
    rows = [
        _detail_row("API Name", escape(data.target_name)),
        _detail_row("URL", escape(data.target_url)),
        _detail_row(
            "Status",
            f'<span class="status {status_class}">{escape(data.status)}</span>',
        ),
    ]
    if data.response_time is not None:
        rows.append(_detail_row("Response Time", f"{data.response_time}ms"))
    if data.error_message:
        rows.append(_detail_row("Error Message", escape(data.error_message)))
    rows.append(_detail_row("Timestamp", escape(data.timestamp)))

    details = "\n".join(rows)
    return f"""<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>API Alert - {escape(data.target_name)}</title>
<style>
  body {{ font-family: Arial, sans-serif; line-height: 1.6; color: #333; }}
  .container {{ max-width: 600px; margin: 0 auto; padding: 20px; }}
  .header {{ background: #f8f9fa; padding: 20px; border-radius: 8px; margin-bottom: 20px; }}
  .status {{ display: inline-block; padding: 8px 16px; border-radius: 4px; color: white; font-weight: bold; }}
  .status.up {{ background-color: #10B981; }}
  .status.down {{ background-color: #EF4444; }}
  .details {{ background: #f8f9fa; padding: 20px; border-radius: 8px; }}
  .detail-row {{ margin-bottom: 10px; }}
  .detail-label {{ font-weight: bold; color: #666; }}
  .footer {{ margin-top: 20px; padding-top: 20px; border-top: 1px solid #eee; font-size: 12px; color: #666; }}
</style>
</head>
<body>
<div class="container">
  <div class="header">
    <h1>{data.status_icon} API Health Alert</h1>
    <p>MonitorScope has detected a change in your API status</p>
  </div>
  <div class="details">
{details}
  </div>
  <div class="footer">
    <p>This alert was sent by MonitorScope API Health Monitoring System.</p>
    <p>To manage your alert settings, please log in to your MonitorScope dashboard.</p>
  </div>
</div>
</body>
</html>"""


class Notifier:
    """Sends alert emails for a target to its enabled recipients."""

    def __init__(self, config: EmailConfig, transport: Optional[MailTransport] = None):
        self.config = config
        self.transport = transport or SmtpMailTransport(config)

    def build_email(
        self,
        target: Target,
        result: ProbeResult,
        timestamp: Optional[datetime] = None,
    ) -> AlertEmail:
        return AlertEmail(
            target_name=target.name,
            target_url=target.url,
            status=result.status,
            timestamp=isoformat_utc(timestamp or utcnow()),
            response_time=result.response_time_ms,
            error_message=result.error_message,
        )

    async def send_alert(
        self,
        target: Target,
        result: ProbeResult,
        recipients: Sequence[Recipient],
        timestamp: Optional[datetime] = None,
    ) -> bool:
        """Email every recipient; True only when all sends succeeded.

        Disabled email and an empty recipient list are logged no-ops that
        return False without contacting the relay.
        """
        if not self.config.enabled:
            logger.info("Email alerts not configured or disabled")
            return False

        if not recipients:
            logger.info(f"No alert recipients configured for API {target.id}")
            return False

        data = self.build_email(target, result, timestamp)
        subject = build_subject(data)
        html = render_alert_html(data)
        text = render_alert_text(data)

        results = await asyncio.gather(
            *[self.transport.send(r.email, subject, html, text) for r in recipients],
            return_exceptions=True,
        )

        delivered = True
        for recipient, sent in zip(recipients, results):
            if isinstance(sent, BaseException):
                logger.error(
                    f"Error sending alert email for API {target.id} to {recipient.email}: "
                    f"{type(sent).__name__}: {sent}"
                )
                delivered = False
            elif not sent:
                delivered = False

        if not delivered:
            logger.error(f"Alert emails for API {target.id} failed for some recipients")
            return False

        logger.info(f"Alert emails sent for API {target.name} to {len(recipients)} recipients")
        return True

    async def test_config(self) -> Tuple[bool, str]:
        """Validate the configuration and handshake with the relay."""
        if not self.config.host:
            return False, "Email configuration not found"

        if not self.config.enabled:
            return False, "Email alerts are disabled"

        missing = self.config.missing_fields()
        if missing:
            return False, f"Missing required email configuration fields: {', '.join(missing)}"

        return await self.transport.verify()


def recipients_from_addresses(addresses: List[str]) -> List[Recipient]:
    """Transient recipients for ad-hoc sends such as test emails."""
    return [Recipient(email=address, name="Test Recipient", enabled=1) for address in addresses]
