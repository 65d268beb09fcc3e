from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.interface.i_coupon_repo import ICouponRepo
from src.service.ticketing.domain.entity.coupon_entity import Coupon
from src.service.ticketing.driven_adapter.model.coupon_model import CouponModel


class CouponRepoImpl(ICouponRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: CouponModel) -> Coupon:
        return Coupon(
            id=model.id,
            name=model.name,
            discount_percent=model.discount_percent,
            expiration_date=as_utc(model.expiration_date),
            min_purchase_amount=model.min_purchase_amount,
            used=model.used,
            created_at=as_utc(model.created_at),
        )

    @Logger.io
    async def get_by_name(self, *, name: str) -> Optional[Coupon]:
        result = await self.session.execute(
            select(CouponModel)
            .where(CouponModel.name == name)
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_id(self, *, coupon_id: int) -> Optional[Coupon]:
        model = await self.session.get(CouponModel, coupon_id, populate_existing=True)
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def list_all(self) -> List[Coupon]:
        result = await self.session.execute(select(CouponModel).order_by(CouponModel.name))
        return [self._model_to_entity(m) for m in result.scalars().all()]

    @Logger.io
    async def create(self, *, coupon: Coupon) -> Coupon:
        model = CouponModel(
            name=coupon.name,
            discount_percent=coupon.discount_percent,
            expiration_date=coupon.expiration_date,
            min_purchase_amount=coupon.min_purchase_amount,
            used=coupon.used,
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f'Coupon {coupon.name} already exists', ErrorKind.COUPON_ALREADY_EXISTS
            ) from e
        return self._model_to_entity(model)

    @Logger.io
    async def update(self, *, coupon: Coupon) -> Coupon:
        model = await self.session.get(CouponModel, coupon.id) if coupon.id is not None else None
        if model is None:
            raise NotFoundError(f'Coupon {coupon.id} not found', ErrorKind.COUPON_NOT_FOUND)
        model.discount_percent = coupon.discount_percent
        model.expiration_date = coupon.expiration_date
        model.min_purchase_amount = coupon.min_purchase_amount
        model.used = coupon.used
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def delete(self, *, coupon_id: int) -> bool:
        result = await self.session.execute(
            delete(CouponModel)
            .where(CouponModel.id == coupon_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    @Logger.io
    async def delete_all(self) -> int:
        result = await self.session.execute(
            delete(CouponModel).execution_options(synchronize_session=False)
        )
        return result.rowcount

    @Logger.io
    async def mark_consumed(self, *, name: str) -> None:
        await self.session.execute(
            update(CouponModel)
            .where(CouponModel.name == name, CouponModel.used.is_(False))
            .values(used=True)
            .execution_options(synchronize_session=False)
        )
