from datetime import timedelta
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from pydantic import SecretStr

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, DomainError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.interface.i_notifier import INotifier
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.entity.client_entity import ClientEntity


MIN_PASSWORD_LENGTH = 8


class RegisterClientUseCase:
    """
    Create an inactive client together with its cart, then email the verification code.

    The code is sent after commit; a mail failure leaves a registered account that can
    ask for verification again by updating its email.
    """

    def __init__(
        self, *, uow: AbstractUnitOfWork, password_hasher: IPasswordHasher, notifier: INotifier
    ) -> None:
        self.uow = uow
        self.password_hasher = password_hasher
        self.notifier = notifier

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        password_hasher: IPasswordHasher = Depends(Provide[Container.password_hasher]),
        notifier: INotifier = Depends(Provide[Container.notifier]),
    ) -> Self:
        return cls(uow=uow, password_hasher=password_hasher, notifier=notifier)

    @Logger.io
    async def execute(
        self, *, email: str, password: SecretStr, name: str, phone: str, address: str
    ) -> ClientEntity:
        if len(password.get_secret_value()) < MIN_PASSWORD_LENGTH:
            raise DomainError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

        client = ClientEntity.register(
            email=email,
            name=name,
            password_hash=self.password_hasher.hash_password(plain_password=password),
            phone=phone,
            address=address,
            now=utc_now(),
            code_ttl=timedelta(minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES),
        )

        async with self.uow:
            if await self.uow.clients.get_by_email(email=client.email):
                raise ConflictError(
                    f'An account with email {client.email} already exists',
                    ErrorKind.ACCOUNT_ALREADY_EXISTS,
                )
            client = await self.uow.clients.create(client=client)
            assert client.id is not None
            await self.uow.carts.create(cart=Cart.open_for(client_id=client.id))
            await self.uow.commit()

        assert client.verification is not None
        await self.notifier.send_verification_code(
            email=client.email, name=client.name, code=client.verification.code
        )
        Logger.base.info(f'👤 [REGISTER] client {client.id} registered')
        return client
