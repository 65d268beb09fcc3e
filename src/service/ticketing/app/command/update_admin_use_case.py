from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.domain.entity.admin_entity import AdminEntity


class UpdateAdminUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork) -> None:
        self.uow = uow

    @classmethod
    @inject
    def depends(cls, uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work])) -> Self:
        return cls(uow=uow)

    @Logger.io
    async def execute(self, *, admin_id: int, email: str) -> AdminEntity:
        async with self.uow:
            admin = await self.uow.admins.get_by_id(admin_id=admin_id)
            if admin is None:
                raise NotFoundError(f'Admin {admin_id} not found', ErrorKind.ACCOUNT_NOT_FOUND)
            admin = await self.uow.admins.update(admin=admin.change_email(email=email))
            await self.uow.commit()
        return admin
