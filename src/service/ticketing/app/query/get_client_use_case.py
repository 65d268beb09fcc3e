from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.client_entity import ClientEntity


class GetClientUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def get_by_id(self, *, client_id: int) -> ClientEntity:
        async with self.uow:
            client = await self.uow.clients.get_by_id(client_id=client_id)
        if client is None:
            raise NotFoundError(f'Client {client_id} not found', ErrorKind.ACCOUNT_NOT_FOUND)
        return client
