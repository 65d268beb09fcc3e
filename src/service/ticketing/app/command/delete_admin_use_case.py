from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger


class DeleteAdminUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, admin_id: int) -> None:
        async with self.uow:
            if not await self.uow.admins.delete(admin_id=admin_id):
                raise NotFoundError(f'Admin {admin_id} not found', ErrorKind.ACCOUNT_NOT_FOUND)
            await self.uow.commit()
        Logger.base.info(f'🗑️ [ADMIN] Deleted admin {admin_id}')
