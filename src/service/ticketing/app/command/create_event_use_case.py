from datetime import datetime
from typing import List, Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.dto.locality_input import LocalityInput
from src.service.ticketing.domain.entity.event_entity import Event, Locality
from src.service.ticketing.domain.enum.event_type import EventType


class CreateEventUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(
        self,
        *,
        name: str,
        city: str,
        address: str,
        event_date: datetime,
        event_type: EventType,
        localities: List[LocalityInput],
        image_url: Optional[str] = None,
        available_for_purchase: bool = True,
    ) -> Event:
        event = Event.create(
            name=name,
            city=city,
            address=address,
            event_date=event_date,
            event_type=event_type,
            localities=[
                Locality.create(name=loc.name, price=loc.price, total_capacity=loc.total_capacity)
                for loc in localities
            ],
            image_url=image_url,
            available_for_purchase=available_for_purchase,
        )
        async with self.uow:
            event = await self.uow.events.create(event=event)
            await self.uow.commit()
        return event
