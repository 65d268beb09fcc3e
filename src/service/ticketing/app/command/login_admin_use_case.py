from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from pydantic import SecretStr

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError
from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher
from src.service.ticketing.domain.entity.admin_entity import AdminEntity


class LoginAdminUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, password_hasher: IPasswordHasher) -> None:
        self.uow = uow
        self.password_hasher = password_hasher

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        password_hasher: IPasswordHasher = Depends(Provide[Container.password_hasher]),
    ) -> Self:
        return cls(uow=uow, password_hasher=password_hasher)

    @Logger.io
    async def execute(self, *, username: str, password: SecretStr) -> AdminEntity:
        async with self.uow:
            admin = await self.uow.admins.get_by_username(username=username)

        hashed_password = admin.password_hash if admin is not None else None
        if not self.password_hasher.verify_password(
            plain_password=password, hashed_password=hashed_password
        ) or admin is None:
            raise AuthenticationError(
                'Invalid username or password', ErrorKind.INVALID_CREDENTIALS
            )
        return admin
