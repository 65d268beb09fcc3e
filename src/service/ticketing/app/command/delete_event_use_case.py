from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger


class DeleteEventUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, event_id: int) -> None:
        async with self.uow:
            if not await self.uow.events.delete(event_id=event_id):
                raise NotFoundError(f'Event {event_id} not found', ErrorKind.EVENT_NOT_FOUND)
            await self.uow.commit()
        Logger.base.info(f'🗑️ [EVENT] Deleted event {event_id}')

    @Logger.io
    async def execute_all(self) -> int:
        """Events with tickets taken stay in place."""
        async with self.uow:
            deleted = await self.uow.events.delete_all_without_tickets_taken()
            await self.uow.commit()
        Logger.base.info(f'🗑️ [EVENT] Deleted {deleted} events without tickets taken')
        return deleted
