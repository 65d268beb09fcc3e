"""Mock email notifier that logs instead of sending real emails."""

from typing import List

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.interface.i_notifier import INotifier


class MockEmailNotifier(INotifier):
    def __init__(self):
        self.sent_emails: List[dict] = []  # Store sent emails for testing

    async def _send(self, *, to: str, subject: str, body: str) -> None:
        self.sent_emails.append(
            {'to': to, 'subject': subject, 'body': body, 'sent_at': utc_now()}
        )
        Logger.base.info(f'📧 [MOCK_EMAIL] to={to} subject={subject!r}')

    @Logger.io
    async def send_verification_code(self, *, email: str, name: str, code: str) -> None:
        await self._send(
            to=email,
            subject='Verify your Joki Events account',
            body=f'Hello {name}, your verification code is {code}',
        )

    @Logger.io
    async def send_recovery_code(self, *, email: str, username: str, code: str) -> None:
        await self._send(
            to=email,
            subject='Joki Events password recovery',
            body=f'Hello {username}, your password recovery code is {code}',
        )
