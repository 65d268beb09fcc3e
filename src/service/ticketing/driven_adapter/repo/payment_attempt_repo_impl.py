from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.interface.i_payment_attempt_repo import IPaymentAttemptRepo
from src.service.ticketing.domain.entity.payment_attempt_entity import PaymentAttempt
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome
from src.service.ticketing.driven_adapter.model.payment_attempt_model import PaymentAttemptModel


class PaymentAttemptRepoImpl(IPaymentAttemptRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: PaymentAttemptModel) -> PaymentAttempt:
        return PaymentAttempt(
            id=model.id,
            checkout_attempt_id=model.checkout_attempt_id,
            cart_id=model.cart_id,
            client_id=model.client_id,
            outcome=PaymentOutcome(model.outcome),
            settled_at=as_utc(model.settled_at),
        )

    @Logger.io
    async def create(self, *, attempt: PaymentAttempt) -> PaymentAttempt:
        model = PaymentAttemptModel(
            checkout_attempt_id=attempt.checkout_attempt_id,
            cart_id=attempt.cart_id,
            client_id=attempt.client_id,
            outcome=attempt.outcome.value,
            settled_at=attempt.settled_at,
        )
        self.session.add(model)
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def get_by_checkout_attempt_id(
        self, *, checkout_attempt_id: str
    ) -> Optional[PaymentAttempt]:
        result = await self.session.execute(
            select(PaymentAttemptModel).where(
                PaymentAttemptModel.checkout_attempt_id == checkout_attempt_id
            )
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None
