from datetime import datetime, timedelta
from typing import Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.domain.value_object.verification_code import VerificationCode


@attrs.define
class AdminEntity:
    username: str
    email: str
    password_hash: str
    verification: Optional[VerificationCode] = None
    id: Optional[int] = None

    @property
    def role(self) -> UserRole:
        return UserRole.ADMIN

    def issue_recovery_code(self, *, now: datetime, ttl: timedelta) -> 'AdminEntity':
        return attrs.evolve(self, verification=VerificationCode.issue(now=now, ttl=ttl))

    def reset_password(self, *, code: str, new_password_hash: str, now: datetime) -> 'AdminEntity':
        if self.verification is None:
            raise AuthenticationError(
                'No recovery is pending for this account', ErrorKind.VERIFICATION_BAD_CODE
            )
        self.verification.check(code=code, now=now)
        return attrs.evolve(self, password_hash=new_password_hash, verification=None)

    def change_email(self, *, email: str) -> 'AdminEntity':
        """The username is the login handle and never changes."""
        return attrs.evolve(self, email=email.strip().lower())
