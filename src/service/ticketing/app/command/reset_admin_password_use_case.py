from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from pydantic import SecretStr

from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.command.register_client_use_case import MIN_PASSWORD_LENGTH
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher


class ResetAdminPasswordUseCase:
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
    async def execute(self, *, email: str, code: str, new_password: SecretStr) -> None:
        if len(new_password.get_secret_value()) < MIN_PASSWORD_LENGTH:
            raise DomainError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

        async with self.uow:
            admin = await self.uow.admins.get_by_email(email=email)
            if admin is None:
                raise NotFoundError(f'No admin account for {email}', ErrorKind.ACCOUNT_NOT_FOUND)
            admin = admin.reset_password(
                code=code,
                new_password_hash=self.password_hasher.hash_password(plain_password=new_password),
                now=utc_now(),
            )
            await self.uow.admins.update(admin=admin)
            await self.uow.commit()
        Logger.base.info(f'🔑 [ADMIN] password reset for {admin.username}')
