"""
SMTP notifier

smtplib is blocking, so each message is sent from a worker thread. Delivery failures are
logged and swallowed: an account flow must not fail because the mail server is down, the
user can ask for a new code.
"""

from email.mime.text import MIMEText
import smtplib

import anyio

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_notifier import INotifier


class SmtpEmailNotifier(INotifier):
    def __init__(
        self,
        *,
        host: str = settings.SMTP_HOST,
        port: int = settings.SMTP_PORT,
        user: str = settings.SMTP_USER,
        password: str = settings.SMTP_PASSWORD.get_secret_value(),
        from_email: str = settings.SMTP_FROM_EMAIL,
        timeout: float = settings.SMTP_TIMEOUT_SECONDS,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.from_email = from_email
        self.timeout = timeout

    def _send_blocking(self, *, to: str, subject: str, body: str) -> None:
        msg = MIMEText(body, 'plain', 'utf-8')
        msg['Subject'] = subject
        msg['From'] = f'{settings.PROJECT_NAME} <{self.from_email}>'
        msg['To'] = to

        with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)

    async def _send(self, *, to: str, subject: str, body: str) -> None:
        try:
            await anyio.to_thread.run_sync(
                lambda: self._send_blocking(to=to, subject=subject, body=body)
            )
            Logger.base.info(f'📧 [SMTP] sent {subject!r} to {to}')
        except (smtplib.SMTPException, OSError) as e:
            Logger.base.error(f'📧 [SMTP] failed to send {subject!r} to {to}: {e}')

    @Logger.io
    async def send_verification_code(self, *, email: str, name: str, code: str) -> None:
        await self._send(
            to=email,
            subject='Verify your Joki Events account',
            body=(
                f'Hello {name},\n\n'
                f'Your verification code is {code}. '
                f'It expires in {settings.VERIFICATION_CODE_EXPIRE_MINUTES} minutes.\n'
            ),
        )

    @Logger.io
    async def send_recovery_code(self, *, email: str, username: str, code: str) -> None:
        await self._send(
            to=email,
            subject='Joki Events password recovery',
            body=(
                f'Hello {username},\n\n'
                f'Your password recovery code is {code}. '
                f'It expires in {settings.RECOVERY_CODE_EXPIRE_MINUTES} minutes.\n'
            ),
        )
