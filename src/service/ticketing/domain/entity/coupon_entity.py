from datetime import datetime
from decimal import Decimal
from typing import Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import DomainError
from src.service.ticketing.domain.value_object.money import to_money


def _validate_discount(instance, attribute, value):
    if not Decimal('0') <= value <= Decimal('100'):
        raise DomainError('Discount must be between 0 and 100')
    # Stored with two decimal places
    if value != value.quantize(Decimal('0.01')):
        raise DomainError('Discount cannot have more than 2 decimal places')


def _validate_min_purchase(instance, attribute, value):
    if value < 0:
        raise DomainError('Minimum purchase amount must be greater than or equal to 0')


def _validate_name(instance, attribute, value):
    if not value or not value.strip():
        raise DomainError('Coupon name is required')


@attrs.define
class Coupon:
    name: str = attrs.field(validator=_validate_name)
    discount_percent: Decimal = attrs.field(converter=Decimal, validator=_validate_discount)
    expiration_date: datetime
    min_purchase_amount: Decimal = attrs.field(converter=to_money, validator=_validate_min_purchase)
    used: bool = False
    id: Optional[int] = None
    created_at: Optional[datetime] = None

    @classmethod
    def create(
        cls,
        *,
        name: str,
        discount_percent: Decimal,
        expiration_date: datetime,
        min_purchase_amount: Decimal,
    ) -> 'Coupon':
        return cls(
            name=name.strip(),
            discount_percent=discount_percent,
            expiration_date=expiration_date,
            min_purchase_amount=min_purchase_amount,
        )

    @property
    def discount_factor(self) -> Decimal:
        return Decimal('1') - self.discount_percent / Decimal('100')

    def validate_not_expired(self, *, now: datetime) -> None:
        if now > self.expiration_date:
            raise DomainError(f'Coupon {self.name} has expired', ErrorKind.COUPON_EXPIRED)

    def validate_minimum_met(self, *, total_price: Decimal) -> None:
        if total_price < self.min_purchase_amount:
            raise DomainError(
                f'Coupon {self.name} needs a minimum purchase of {self.min_purchase_amount}',
                ErrorKind.COUPON_MIN_NOT_MET,
            )

    def revise(
        self, *, discount_percent: Decimal, expiration_date: datetime, min_purchase_amount: Decimal
    ) -> 'Coupon':
        return attrs.evolve(
            self,
            discount_percent=discount_percent,
            expiration_date=expiration_date,
            min_purchase_amount=min_purchase_amount,
        )
