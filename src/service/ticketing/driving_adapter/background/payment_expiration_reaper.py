from typing import Callable

import anyio
from anyio.abc import TaskGroup

from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.command.expire_pending_carts_use_case import (
    ExpirePendingCartsUseCase,
)


class PaymentExpirationReaper:
    """Periodically expire PENDING_PAYMENT carts whose payment never arrived"""

    def __init__(
        self,
        *,
        uow_factory: Callable[[], AbstractUnitOfWork],
        interval_seconds: float,
    ) -> None:
        self.uow_factory = uow_factory
        self.interval_seconds = interval_seconds

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._reap_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'⏰ [Reaper] Started, interval {self.interval_seconds}s')

    async def run_once(self) -> int:
        return await ExpirePendingCartsUseCase(uow=self.uow_factory()).execute()

    async def _reap_loop(self) -> None:
        while True:
            try:
                expired = await self.run_once()
                if expired:
                    Logger.base.info(f'⏰ [Reaper] Expired {expired} pending carts')
            except Exception as e:
                # Keep the loop alive; the next pass retries the same carts
                Logger.base.error(f'❌ [Reaper] Pass failed: {e}')
            await anyio.sleep(self.interval_seconds)
