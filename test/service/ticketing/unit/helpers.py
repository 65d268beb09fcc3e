"""
Test doubles for unit tests

``UnitOfWorkMock`` behaves like a unit of work: usable in ``async with`` any number of
times, every repository is an ``AsyncMock`` built from its port so a misspelled method
fails the test instead of silently returning a mock.
"""

from datetime import timedelta
from decimal import Decimal
from typing import Any, Optional, Sequence, Tuple
from unittest.mock import AsyncMock

import attrs

from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.interface.i_admin_repo import IAdminRepo
from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
from src.service.ticketing.app.interface.i_client_repo import IClientRepo
from src.service.ticketing.app.interface.i_coupon_repo import ICouponRepo
from src.service.ticketing.app.interface.i_event_repo import IEventRepo
from src.service.ticketing.app.interface.i_payment_attempt_repo import IPaymentAttemptRepo
from src.service.ticketing.app.interface.i_purchase_repo import IPurchaseRepo
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.entity.client_entity import ClientEntity
from src.service.ticketing.domain.entity.coupon_entity import Coupon
from src.service.ticketing.domain.entity.event_entity import Event, Locality
from src.service.ticketing.domain.enum.event_type import EventType


class UnitOfWorkMock:
    def __init__(self) -> None:
        self.events = AsyncMock(spec=IEventRepo)
        self.carts = AsyncMock(spec=ICartRepo)
        self.coupons = AsyncMock(spec=ICouponRepo)
        self.clients = AsyncMock(spec=IClientRepo)
        self.admins = AsyncMock(spec=IAdminRepo)
        self.purchases = AsyncMock(spec=IPurchaseRepo)
        self.payment_attempts = AsyncMock(spec=IPaymentAttemptRepo)
        self.commit = AsyncMock()
        self.rollback = AsyncMock()

        # Saves hand back what they were given, like the real repositories
        self.carts.save.side_effect = _echo('cart')
        self.carts.create.side_effect = _echo('cart', id=99)
        self.clients.update.side_effect = _echo('client')
        self.payment_attempts.create.side_effect = _echo('attempt')
        # No checkout attempt has been settled yet
        self.payment_attempts.get_by_checkout_attempt_id.return_value = None

    async def __aenter__(self) -> 'UnitOfWorkMock':
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.rollback()


def _echo(key: str, **changes: Any):
    def side_effect(**kwargs: Any) -> Any:
        value = kwargs[key]
        return attrs.evolve(value, **changes) if changes else value

    return side_effect


def make_event(
    *,
    event_id: int = 1,
    localities: Sequence[Tuple[str, str, int]] = (('GEN', '20.0', 10),),
    days_ahead: int = 30,
    available_for_purchase: bool = True,
) -> Event:
    event = Event.create(
        name='E1',
        city='Armenia',
        address='Calle 10',
        event_date=utc_now() + timedelta(days=days_ahead),
        event_type=EventType.CONCERT,
        localities=[
            Locality.create(name=name, price=Decimal(price), total_capacity=capacity)
            for name, price, capacity in localities
        ],
        available_for_purchase=available_for_purchase,
    )
    return attrs.evolve(event, id=event_id)


def make_cart(
    *, client_id: int = 1, cart_id: int = 10, orders: Optional[Sequence[tuple]] = None
) -> Cart:
    cart = Cart(client_id=client_id, id=cart_id)
    for event_id, locality_name, tickets, unit_price in orders or ():
        cart = cart.add_tickets(
            event_id=event_id,
            locality_name=locality_name,
            tickets=tickets,
            unit_price=Decimal(unit_price),
        )
    return cart


def make_client(*, client_id: int = 1, used_coupons: Sequence[str] = ()) -> ClientEntity:
    return ClientEntity(
        id=client_id,
        email='c1@test.com',
        name='Client One',
        password_hash='hash',
        is_active=True,
        used_coupons=list(used_coupons),
    )


def make_coupon(
    *,
    name: str = 'SAVE10',
    discount_percent: str = '10',
    min_purchase_amount: str = '50',
    days_valid: int = 30,
) -> Coupon:
    return Coupon.create(
        name=name,
        discount_percent=Decimal(discount_percent),
        expiration_date=utc_now() + timedelta(days=days_valid),
        min_purchase_amount=Decimal(min_purchase_amount),
    )
