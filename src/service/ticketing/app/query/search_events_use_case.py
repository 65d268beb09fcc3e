from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.exceptions import DomainError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.event_search_criteria import EventSearchCriteria
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.domain.entity.event_entity import Event


MAX_PAGE_SIZE = 100


class SearchEventsUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def search(
        self, *, criteria: EventSearchCriteria, page: int = 0, size: int = 20
    ) -> Page[Event]:
        if page < 0:
            raise DomainError('Page index must not be negative')
        if not 1 <= size <= MAX_PAGE_SIZE:
            raise DomainError(f'Page size must be between 1 and {MAX_PAGE_SIZE}')
        if criteria.date_from and criteria.date_to and criteria.date_from > criteria.date_to:
            raise DomainError('Date range start must not be after its end')

        async with self.uow:
            result = await self.uow.events.search(criteria=criteria, page=page, size=size)

        Logger.base.info(
            f'🔎 [SEARCH_EVENTS] page={page} size={size} total={result.total_elements}'
        )
        return result
