from datetime import datetime, timedelta
import secrets

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError


@attrs.frozen
class VerificationCode:
    """Six digit one-time code with an absolute expiry (account verification, password recovery)."""

    code: str
    expires_at: datetime

    @classmethod
    def issue(cls, *, now: datetime, ttl: timedelta) -> 'VerificationCode':
        return cls(code=f'{secrets.randbelow(1_000_000):06d}', expires_at=now + ttl)

    def check(self, *, code: str, now: datetime) -> None:
        if not secrets.compare_digest(self.code, code.strip()):
            raise AuthenticationError(
                'Verification code is not valid', ErrorKind.VERIFICATION_BAD_CODE
            )
        if now > self.expires_at:
            raise AuthenticationError(
                'Verification code has expired', ErrorKind.VERIFICATION_EXPIRED
            )
