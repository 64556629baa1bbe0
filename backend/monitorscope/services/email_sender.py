"""Email sender - SMTP mail transport for alert emails."""
import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr
from typing import Tuple

from ..config import Settings

logger = logging.getLogger(__name__)

SMTP_TIMEOUT_SECONDS = 30
IMPLICIT_TLS_PORT = 465


@dataclass
class EmailConfig:
    """SMTP configuration for sending emails."""
    host: str
    port: int
    username: str
    password: str
    use_tls: bool = True
    from_address: str = ""
    from_name: str = "MonitorScope Alerts"
    enabled: bool = False

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailConfig":
        return cls(
            host=settings.smtp_host or "",
            port=settings.smtp_port,
            username=settings.smtp_username or "",
            password=settings.smtp_password or "",
            use_tls=settings.smtp_use_tls,
            from_address=settings.email_from or "",
            from_name=settings.email_from_name,
            enabled=settings.email_enabled,
        )

    @property
    def sender(self) -> str:
        """From header value, e.g. '"MonitorScope Alerts" <alerts@example.com>'."""
        return formataddr((self.from_name, self.from_address or self.username))

    def missing_fields(self) -> list:
        """Names of required fields that are empty."""
        required = {
            "host": self.host,
            "username": self.username,
            "password": self.password,
            "from_address": self.from_address,
        }
        return [name for name, value in required.items() if not value]


class SmtpMailTransport:
    """Sends individual messages through an SMTP relay.

    smtplib is blocking, so every call runs in the default executor.
    """

    def __init__(self, config: EmailConfig):
        self.config = config

    def _connect(self) -> smtplib.SMTP:
        """Open an authenticated connection to the relay."""
        config = self.config
        context = ssl.create_default_context()

        if config.port == IMPLICIT_TLS_PORT:
            logger.debug(f"Connecting to {config.host}:{config.port} with implicit TLS...")
            server = smtplib.SMTP_SSL(
                config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS, context=context
            )
        else:
            logger.debug(f"Connecting to {config.host}:{config.port}...")
            server = smtplib.SMTP(config.host, config.port, timeout=SMTP_TIMEOUT_SECONDS)
            if config.use_tls:
                server.starttls(context=context)

        try:
            if config.username and config.password:
                server.login(config.username, config.password)
        except Exception:
            server.close()
            raise
        return server

    def _send_sync(self, to: str, subject: str, html: str, text: str):
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = self.config.sender
        msg["To"] = to

        # multipart/alternative: the last part is the preferred one
        msg.attach(MIMEText(text, "plain", "utf-8"))
        msg.attach(MIMEText(html, "html", "utf-8"))

        with self._connect() as server:
            server.sendmail(self.config.from_address or self.config.username, [to], msg.as_string())

    def _verify_sync(self):
        with self._connect() as server:
            server.noop()

    async def send(self, to: str, subject: str, html: str, text: str) -> bool:
        """Send one message. Returns True on success, False on failure."""
        config = self.config
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._send_sync, to, subject, html, text)
            logger.info(f"Email sent to {to}: {subject}")
            return True
        except smtplib.SMTPAuthenticationError as e:
            logger.error(f"SMTP authentication failed for user '{config.username}': {e}")
            return False
        except smtplib.SMTPConnectError as e:
            logger.error(f"Failed to connect to SMTP server {config.host}:{config.port}: {e}")
            return False
        except smtplib.SMTPServerDisconnected as e:
            logger.error(f"SMTP server unexpectedly disconnected: {e}")
            return False
        except smtplib.SMTPRecipientsRefused as e:
            logger.error(f"Recipient {to} refused by server: {e}")
            return False
        except smtplib.SMTPSenderRefused as e:
            logger.error(f"Sender address refused: {e}")
            return False
        except smtplib.SMTPException as e:
            logger.error(f"SMTP error: {type(e).__name__}: {e}")
            return False
        except (ConnectionRefusedError, TimeoutError) as e:
            logger.error(f"Cannot reach {config.host}:{config.port}: {type(e).__name__}: {e}")
            return False
        except OSError as e:
            logger.error(f"Network error sending email: {type(e).__name__}: {e}")
            return False

    async def verify(self) -> Tuple[bool, str]:
        """Handshake and authenticate with the relay without sending mail."""
        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, self._verify_sync)
            return True, "Email configuration is valid"
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email configuration test failed: {type(e).__name__}: {e}")
            return False, f"SMTP connection failed: {str(e) or type(e).__name__}"
