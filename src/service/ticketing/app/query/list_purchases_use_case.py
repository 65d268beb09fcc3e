from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.app.query.search_events_use_case import MAX_PAGE_SIZE
from src.service.ticketing.domain.entity.purchase_entity import Purchase


class ListPurchasesUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def list_for_client(
        self, *, client_id: int, page: int = 0, size: int = 20
    ) -> Page[Purchase]:
        """Purchase history, newest first."""
        if page < 0 or not 1 <= size <= MAX_PAGE_SIZE:
            raise DomainError(f'Page must be >= 0 and size between 1 and {MAX_PAGE_SIZE}')
        async with self.uow:
            return await self.uow.purchases.list_by_client(
                client_id=client_id, page=page, size=size
            )
