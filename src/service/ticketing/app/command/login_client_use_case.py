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
from src.service.ticketing.domain.entity.client_entity import ClientEntity


class LoginClientUseCase:
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
    async def execute(self, *, email: str, password: SecretStr) -> ClientEntity:
        async with self.uow:
            client = await self.uow.clients.get_by_email(email=email)

        hashed_password = client.password_hash if client is not None else None
        if not self.password_hasher.verify_password(
            plain_password=password, hashed_password=hashed_password
        ) or client is None:
            raise AuthenticationError('Invalid email or password', ErrorKind.INVALID_CREDENTIALS)
        client.validate_active()
        return client
