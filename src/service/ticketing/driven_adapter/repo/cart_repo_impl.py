from datetime import datetime
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder
from src.service.ticketing.driven_adapter.model.cart_model import CartModel


class CartRepoImpl(ICartRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: CartModel) -> Cart:
        return Cart(
            id=model.id,
            client_id=model.client_id,
            orders=tuple(LocalityOrder.from_dict(order) for order in model.orders or []),
            total_price=model.total_price,
            coupon_claimed=model.coupon_claimed,
            applied_coupon_name=model.applied_coupon_name,
            applied_discount_factor=model.applied_discount_factor,
            total_price_with_discount=model.total_price_with_discount,
            status=CartStatus(model.status),
            checkout_attempt_id=model.checkout_attempt_id,
            checkout_started_at=as_utc(model.checkout_started_at),
            settled_outcome=PaymentOutcome(model.settled_outcome)
            if model.settled_outcome
            else None,
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    @staticmethod
    def _write_fields(model: CartModel, cart: Cart) -> None:
        model.client_id = cart.client_id
        model.status = cart.status.value
        model.orders = [order.to_dict() for order in cart.orders]
        model.total_price = cart.total_price
        model.coupon_claimed = cart.coupon_claimed
        model.applied_coupon_name = cart.applied_coupon_name
        model.applied_discount_factor = cart.applied_discount_factor
        model.total_price_with_discount = cart.total_price_with_discount
        model.checkout_attempt_id = cart.checkout_attempt_id
        model.checkout_started_at = cart.checkout_started_at
        model.settled_outcome = cart.settled_outcome.value if cart.settled_outcome else None

    async def _fetch_one(self, stmt, *, for_update: bool) -> Optional[Cart]:
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.session.execute(stmt.execution_options(populate_existing=True))
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_id(self, *, cart_id: int, for_update: bool = False) -> Optional[Cart]:
        stmt = select(CartModel).where(CartModel.id == cart_id)
        return await self._fetch_one(stmt, for_update=for_update)

    @Logger.io
    async def get_by_client_id(self, *, client_id: int, for_update: bool = False) -> Optional[Cart]:
        stmt = select(CartModel).where(
            CartModel.client_id == client_id,
            CartModel.status.in_([status.value for status in CartStatus.active()]),
        )
        return await self._fetch_one(stmt, for_update=for_update)

    @Logger.io
    async def get_by_checkout_attempt_id(
        self, *, checkout_attempt_id: str, for_update: bool = False
    ) -> Optional[Cart]:
        stmt = select(CartModel).where(CartModel.checkout_attempt_id == checkout_attempt_id)
        return await self._fetch_one(stmt, for_update=for_update)

    @Logger.io
    async def create(self, *, cart: Cart) -> Cart:
        model = CartModel()
        self._write_fields(model, cart)
        self.session.add(model)
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def save(self, *, cart: Cart) -> Cart:
        model = await self.session.get(CartModel, cart.id) if cart.id is not None else None
        if model is None:
            raise NotFoundError(f'Cart {cart.id} not found', ErrorKind.CART_NOT_FOUND)
        self._write_fields(model, cart)
        # Flushed right away so a PAID cart leaves the active index before its successor is added
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def list_pending_started_before(
        self, *, started_before: datetime, limit: int
    ) -> List[Cart]:
        stmt = (
            select(CartModel)
            .where(
                CartModel.status == CartStatus.PENDING_PAYMENT.value,
                CartModel.checkout_started_at < started_before,
            )
            .order_by(CartModel.checkout_started_at.asc())
            .limit(limit)
        )
        models = (await self.session.execute(stmt)).scalars().all()
        return [self._model_to_entity(m) for m in models]
