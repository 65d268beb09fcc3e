from datetime import datetime, timedelta
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.result import Ok
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.ordering_metrics import metrics
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome


class ExpirePendingCartsUseCase:
    """
    Reaper: settle EXPIRED every cart that has waited for its payment longer than
    PAYMENT_EXPIRATION_MINUTES. Each cart is settled in its own transaction, so one
    failure only skips that cart.
    """

    def __init__(
        self,
        *,
        uow: AbstractUnitOfWork,
        expiration: timedelta = timedelta(minutes=settings.PAYMENT_EXPIRATION_MINUTES),
        batch_size: int = 100,
    ) -> None:
        self.uow = uow
        self.expiration = expiration
        self.batch_size = batch_size
        self.settle_payment = SettlePaymentUseCase(uow=uow)

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, now: Optional[datetime] = None) -> int:
        started_before = (now or utc_now()) - self.expiration
        async with self.uow:
            pending = await self.uow.carts.list_pending_started_before(
                started_before=started_before, limit=self.batch_size
            )

        expired = 0
        for cart in pending:
            assert cart.checkout_attempt_id is not None
            result = await self.settle_payment.execute(
                checkout_attempt_id=cart.checkout_attempt_id, outcome=PaymentOutcome.EXPIRED
            )
            if isinstance(result, Ok):
                expired += 0 if result.value.duplicate else 1
            else:
                Logger.base.warning(
                    f'⚠️ [REAPER] attempt={cart.checkout_attempt_id} not expired: '
                    f'{result.kind} {result.message}'
                )

        metrics.record_reaper_pass(expired=expired)
        if pending:
            Logger.base.info(f'⏰ [REAPER] expired {expired}/{len(pending)} pending carts')
        return expired
