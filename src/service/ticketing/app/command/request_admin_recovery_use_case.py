from datetime import timedelta
from typing import Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.database.unit_of_work import AbstractUnitOfWork
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.interface.i_notifier import INotifier


class RequestAdminRecoveryUseCase:
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
    async def execute(self, *, email: str) -> None:
        async with self.uow:
            admin = await self.uow.admins.get_by_email(email=email)
            if admin is None:
                raise NotFoundError(f'No admin account for {email}', ErrorKind.ACCOUNT_NOT_FOUND)
            admin = await self.uow.admins.update(
                admin=admin.issue_recovery_code(
                    now=utc_now(), ttl=timedelta(minutes=settings.RECOVERY_CODE_EXPIRE_MINUTES)
                )
            )
            await self.uow.commit()

        assert admin.verification is not None
        await self.notifier.send_recovery_code(
            email=admin.email, username=admin.username, code=admin.verification.code
        )
