from datetime import timedelta
from typing import Optional, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.interface.i_notifier import INotifier
from src.service.ticketing.domain.entity.client_entity import ClientEntity


class UpdateClientUseCase:
    def __init__(self, *, uow: AbstractUnitOfWork, notifier: INotifier) -> None:
        self.uow = uow
        self.notifier = notifier

    @classmethod
    @inject
    def depends(
        cls,
        uow: AbstractUnitOfWork = Depends(Provide[Container.unit_of_work]),
        notifier: INotifier = Depends(Provide[Container.notifier]),
    ) -> Self:
        return cls(uow=uow, notifier=notifier)

    @Logger.io
    async def execute(
        self,
        *,
        client_id: int,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        email: Optional[str] = None,
    ) -> ClientEntity:
        async with self.uow:
            client = await self.uow.clients.get_by_id(client_id=client_id)
            if client is None:
                raise NotFoundError(f'Client {client_id} not found', ErrorKind.ACCOUNT_NOT_FOUND)

            updated = client.update_profile(
                name=name,
                phone=phone,
                address=address,
                email=email,
                now=utc_now(),
                code_ttl=timedelta(minutes=settings.VERIFICATION_CODE_EXPIRE_MINUTES),
            )
            email_changed = updated.email != client.email
            if email_changed and await self.uow.clients.get_by_email(email=updated.email):
                raise ConflictError(
                    f'An account with email {updated.email} already exists',
                    ErrorKind.ACCOUNT_ALREADY_EXISTS,
                )
            updated = await self.uow.clients.update(client=updated)
            await self.uow.commit()

        if email_changed and updated.verification is not None:
            await self.notifier.send_verification_code(
                email=updated.email, name=updated.name, code=updated.verification.code
            )
        return updated
