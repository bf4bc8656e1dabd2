"""
Build notification mails.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage

from sitebuild.core.config import Settings
from sitebuild.core.exceptions import MailDeliveryError
from sitebuild.core.logging import get_logger
from sitebuild.models.build import BuildTranscript, TriggerSource

logger = get_logger(__name__)

SUBJECT_SUCCESS = "Build successful"
SUBJECT_FAILURE = "ERROR: Error building website"


class MailNotifier:
    """Mails build transcripts through an SMTP relay."""

    def __init__(
        self,
        host: str | None,
        port: int,
        sender: str | None,
        recipients: list[str],
        username: str | None = None,
        password: str | None = None,
        notify_on_success: dict[TriggerSource, bool] | None = None,
        timeout: float = 30.0,
    ):
        self._host = host
        self._port = port
        self._sender = sender or ""
        self._recipients = recipients
        self._username = username
        self._password = password
        self._notify_on_success = notify_on_success or {}
        self._timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "MailNotifier":
        return cls(
            host=settings.mail_smtp_server,
            port=settings.mail_smtp_port,
            sender=settings.mail_sender,
            recipients=settings.mail_recipient_list,
            username=settings.mail_smtp_username,
            password=settings.mail_smtp_password,
            notify_on_success={
                TriggerSource.WEBHOOK: settings.mail_push_success,
                TriggerSource.SCHEDULED: settings.mail_cron_success,
            },
            timeout=settings.mail_timeout,
        )

    @property
    def enabled(self) -> bool:
        """Mail needs a relay and at least one recipient."""
        return bool(self._host) and bool(self._recipients)

    def should_send(self, source: TriggerSource, succeeded: bool) -> bool:
        """Failures are always mailed, successes only when opted in for the source."""
        if not self.enabled:
            return False
        if not succeeded:
            return True
        return self._notify_on_success.get(source, False)

    def compose(self, transcript: BuildTranscript, succeeded: bool) -> EmailMessage:
        msg = EmailMessage()
        msg["Subject"] = SUBJECT_SUCCESS if succeeded else SUBJECT_FAILURE
        msg["From"] = self._sender
        msg["To"] = ", ".join(self._recipients)
        msg.set_content(transcript.text + "\n")
        return msg

    async def notify(self, transcript: BuildTranscript, source: TriggerSource, succeeded: bool) -> None:
        """Send the transcript if policy allows. Never raises on delivery problems."""
        if not self.should_send(source, succeeded):
            return

        logger.info(f"Sending build mail to {', '.join(self._recipients)}")
        msg = self.compose(transcript, succeeded)
        try:
            await asyncio.to_thread(self._deliver, msg)
        except MailDeliveryError as e:
            logger.error(f"Error sending mail: {e}")

    def _deliver(self, msg: EmailMessage) -> None:
        try:
            with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as server:
                server.ehlo()
                if server.has_extn("starttls"):
                    server.starttls(context=ssl.create_default_context())
                    server.ehlo()
                if self._username:
                    server.login(self._username, self._password or "")
                server.send_message(msg, from_addr=self._sender, to_addrs=self._recipients)
        except (smtplib.SMTPException, OSError) as e:
            raise MailDeliveryError(f"{self._host}:{self._port}: {e}") from e
