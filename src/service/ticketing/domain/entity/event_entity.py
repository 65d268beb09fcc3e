from datetime import datetime
from decimal import Decimal
from typing import List, Optional

import attrs

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.enum.event_type import EventType
from src.service.ticketing.domain.value_object.money import to_money


def _validate_non_empty_string(instance, attribute, value):
    if not value or not value.strip():
        raise DomainError(f'{attribute.name.replace("_", " ").capitalize()} is required')


def _validate_non_negative(instance, attribute, value):
    if value < 0:
        raise DomainError(f'{attribute.name.replace("_", " ").capitalize()} must not be negative')


@attrs.define
class Locality:
    name: str = attrs.field(validator=_validate_non_empty_string)
    price: Decimal = attrs.field(converter=to_money, validator=_validate_non_negative)
    total_capacity: int = attrs.field(validator=_validate_non_negative)
    remaining_capacity: int = attrs.field(validator=_validate_non_negative)
    id: Optional[int] = None

    def __attrs_post_init__(self) -> None:
        if self.remaining_capacity > self.total_capacity:
            raise DomainError(
                f'Locality {self.name} cannot have more remaining places than its capacity'
            )

    @classmethod
    def create(cls, *, name: str, price: Decimal, total_capacity: int) -> 'Locality':
        return cls(
            name=name.strip(),
            price=price,
            total_capacity=total_capacity,
            remaining_capacity=total_capacity,
        )

    @property
    def sold(self) -> int:
        return self.total_capacity - self.remaining_capacity

    def resized(self, *, price: Decimal, total_capacity: int) -> 'Locality':
        """New price/capacity that keeps every ticket already held by carts."""
        if total_capacity < self.sold:
            raise DomainError(
                f'Locality {self.name} already has {self.sold} tickets taken, '
                f'capacity cannot drop to {total_capacity}'
            )
        return attrs.evolve(
            self,
            price=price,
            total_capacity=total_capacity,
            remaining_capacity=total_capacity - self.sold,
        )


@attrs.define
class Event:
    name: str = attrs.field(validator=_validate_non_empty_string)
    city: str = attrs.field(validator=_validate_non_empty_string)
    address: str
    event_date: datetime
    event_type: EventType
    localities: List[Locality] = attrs.field(factory=list)
    image_url: Optional[str] = None
    available_for_purchase: bool = True
    total_available_places: int = 0
    id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @classmethod
    @Logger.io
    def create(
        cls,
        *,
        name: str,
        city: str,
        address: str,
        event_date: datetime,
        event_type: EventType,
        localities: List[Locality],
        image_url: Optional[str] = None,
        available_for_purchase: bool = True,
    ) -> 'Event':
        cls._validate_localities(localities)
        return cls(
            name=name.strip(),
            city=city.strip(),
            address=address,
            event_date=event_date,
            event_type=event_type,
            localities=localities,
            image_url=image_url,
            available_for_purchase=available_for_purchase,
            total_available_places=sum(loc.remaining_capacity for loc in localities),
        )

    @staticmethod
    def _validate_localities(localities: List[Locality]) -> None:
        if not localities:
            raise DomainError('An event needs at least one locality')
        names = [loc.name for loc in localities]
        if len(names) != len(set(names)):
            raise DomainError('Locality names must be unique within an event')

    def get_locality(self, name: str) -> Locality:
        for locality in self.localities:
            if locality.name == name:
                return locality
        raise NotFoundError(
            f'Locality {name} not found in event {self.id}', ErrorKind.LOCALITY_NOT_FOUND
        )

    def validate_open_for_purchase(self, *, now: datetime) -> None:
        if not self.available_for_purchase:
            raise DomainError(
                f'Event {self.id} is not available for purchase', ErrorKind.EVENT_CLOSED
            )
        if self.event_date <= now:
            raise DomainError(
                f'Event {self.id} has already taken place', ErrorKind.EVENT_CLOSED
            )

    @Logger.io
    def revise(
        self,
        *,
        name: str,
        city: str,
        address: str,
        event_date: datetime,
        event_type: EventType,
        localities: List[Locality],
        image_url: Optional[str],
        available_for_purchase: bool,
    ) -> 'Event':
        """
        Administrative update. Localities are matched by name: existing ones are resized
        keeping the tickets already taken, new ones start full, missing ones may only be
        dropped while none of their tickets are taken.
        """
        self._validate_localities(localities)
        current = {loc.name: loc for loc in self.localities}
        incoming = {loc.name for loc in localities}

        for dropped in set(current) - incoming:
            if current[dropped].sold:
                raise DomainError(f'Locality {dropped} has tickets taken and cannot be removed')

        revised: List[Locality] = []
        for loc in localities:
            existing = current.get(loc.name)
            if existing is None:
                revised.append(
                    Locality.create(
                        name=loc.name, price=loc.price, total_capacity=loc.total_capacity
                    )
                )
            else:
                revised.append(existing.resized(price=loc.price, total_capacity=loc.total_capacity))

        return attrs.evolve(
            self,
            name=name.strip(),
            city=city.strip(),
            address=address,
            event_date=event_date,
            event_type=event_type,
            localities=revised,
            image_url=image_url,
            available_for_purchase=available_for_purchase,
            total_available_places=sum(loc.remaining_capacity for loc in revised),
        )
