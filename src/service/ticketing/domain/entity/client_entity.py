from datetime import datetime, timedelta
from typing import List, Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError, ConflictError, DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.domain.value_object.verification_code import VerificationCode


def _normalize_email(value: str) -> str:
    return value.strip().lower()


def _validate_email(instance, attribute, value):
    if not value or '@' not in value:
        raise DomainError('A valid email is required')


@attrs.define
class ClientEntity:
    email: str = attrs.field(converter=_normalize_email, validator=_validate_email)
    name: str
    password_hash: str
    phone: str = ''
    address: str = ''
    is_active: bool = False
    verification: Optional[VerificationCode] = None
    used_coupons: List[str] = attrs.field(factory=list)
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def role(self) -> UserRole:
        return UserRole.CLIENT

    @classmethod
    @Logger.io
    def register(
        cls,
        *,
        email: str,
        name: str,
        password_hash: str,
        phone: str,
        address: str,
        now: datetime,
        code_ttl: timedelta,
    ) -> 'ClientEntity':
        if not name or not name.strip():
            raise DomainError('Name is required')
        return cls(
            email=email,
            name=name.strip(),
            password_hash=password_hash,
            phone=phone,
            address=address,
            is_active=False,
            verification=VerificationCode.issue(now=now, ttl=code_ttl),
        )

    def validate_active(self) -> None:
        if not self.is_active:
            raise AuthenticationError('Account is not active', ErrorKind.ACCOUNT_INACTIVE)

    @Logger.io
    def verify(self, *, code: str, now: datetime) -> 'ClientEntity':
        if self.verification is None:
            raise AuthenticationError(
                'No verification is pending for this account', ErrorKind.VERIFICATION_BAD_CODE
            )
        self.verification.check(code=code, now=now)
        return attrs.evolve(self, is_active=True, verification=None)

    def has_used_coupon(self, coupon_name: str) -> bool:
        return coupon_name in self.used_coupons

    def validate_coupon_unused(self, coupon_name: str) -> None:
        if self.has_used_coupon(coupon_name):
            raise ConflictError(
                f'Coupon {coupon_name} was already used by this client',
                ErrorKind.COUPON_ALREADY_USED_BY_CLIENT,
            )

    def record_used_coupon(self, coupon_name: str) -> 'ClientEntity':
        if self.has_used_coupon(coupon_name):
            return self
        return attrs.evolve(self, used_coupons=[*self.used_coupons, coupon_name])

    @Logger.io
    def update_profile(
        self,
        *,
        name: Optional[str],
        phone: Optional[str],
        address: Optional[str],
        email: Optional[str],
        now: datetime,
        code_ttl: timedelta,
    ) -> 'ClientEntity':
        """A new email must be verified again, so the account goes back to inactive."""
        updated = attrs.evolve(
            self,
            name=name.strip() if name else self.name,
            phone=phone if phone is not None else self.phone,
            address=address if address is not None else self.address,
        )
        if email is not None and _normalize_email(email) != self.email:
            updated = attrs.evolve(
                updated,
                email=email,
                is_active=False,
                verification=VerificationCode.issue(now=now, ttl=code_ttl),
            )
        return updated

    def deactivate(self) -> 'ClientEntity':
        return attrs.evolve(self, is_active=False)
