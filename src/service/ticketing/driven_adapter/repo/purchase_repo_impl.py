from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.app.interface.i_purchase_repo import IPurchaseRepo
from src.service.ticketing.domain.entity.purchase_entity import Purchase
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder
from src.service.ticketing.driven_adapter.model.purchase_model import PurchaseModel


class PurchaseRepoImpl(IPurchaseRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: PurchaseModel) -> Purchase:
        return Purchase(
            id=model.id,
            client_id=model.client_id,
            cart_id=model.cart_id,
            checkout_attempt_id=model.checkout_attempt_id,
            orders=tuple(LocalityOrder.from_dict(order) for order in model.orders),
            total_price=model.total_price,
            total_price_with_discount=model.total_price_with_discount,
            coupon_name=model.coupon_name,
            purchased_at=as_utc(model.purchased_at),
        )

    @Logger.io
    async def create(self, *, purchase: Purchase) -> Purchase:
        model = PurchaseModel(
            client_id=purchase.client_id,
            cart_id=purchase.cart_id,
            checkout_attempt_id=purchase.checkout_attempt_id,
            orders=[order.to_dict() for order in purchase.orders],
            total_price=purchase.total_price,
            total_price_with_discount=purchase.total_price_with_discount,
            coupon_name=purchase.coupon_name,
            purchased_at=purchase.purchased_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_checkout_attempt_id(self, *, checkout_attempt_id: str) -> Optional[Purchase]:
        result = await self.session.execute(
            select(PurchaseModel).where(PurchaseModel.checkout_attempt_id == checkout_attempt_id)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_by_client(self, *, client_id: int, page: int, size: int) -> Page[Purchase]:
        total = await self.session.scalar(
            select(func.count())
            .select_from(PurchaseModel)
            .where(PurchaseModel.client_id == client_id)
        )
        result = await self.session.execute(
            select(PurchaseModel)
            .where(PurchaseModel.client_id == client_id)
            .order_by(PurchaseModel.purchased_at.desc(), PurchaseModel.id.desc())
            .offset(page * size)
            .limit(size)
        )
        return Page(
            content=[self._model_to_entity(m) for m in result.scalars().all()],
            page=page,
            size=size,
            total_elements=total or 0,
        )
