from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.interface.i_admin_repo import IAdminRepo
from src.service.ticketing.domain.entity.admin_entity import AdminEntity
from src.service.ticketing.domain.value_object.verification_code import VerificationCode
from src.service.ticketing.driven_adapter.model.admin_model import AdminModel


class AdminRepoImpl(IAdminRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: AdminModel) -> AdminEntity:
        verification = None
        if model.verification_code and model.verification_code_expires_at:
            verification = VerificationCode(
                code=model.verification_code,
                expires_at=as_utc(model.verification_code_expires_at),
            )
        return AdminEntity(
            id=model.id,
            username=model.username,
            email=model.email,
            password_hash=model.hashed_password,
            verification=verification,
        )

    async def _get_one(self, *criteria) -> Optional[AdminEntity]:
        result = await self.session.execute(
            select(AdminModel).where(*criteria).execution_options(populate_existing=True)
        )
        model = result.scalars().first()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_id(self, *, admin_id: int) -> Optional[AdminEntity]:
        return await self._get_one(AdminModel.id == admin_id)

    @Logger.io
    async def get_by_username(self, *, username: str) -> Optional[AdminEntity]:
        return await self._get_one(AdminModel.username == username)

    @Logger.io
    async def get_by_email(self, *, email: str) -> Optional[AdminEntity]:
        return await self._get_one(AdminModel.email == email.strip().lower())

    @Logger.io
    async def create(self, *, admin: AdminEntity) -> AdminEntity:
        model = AdminModel(
            username=admin.username,
            email=admin.email.strip().lower(),
            hashed_password=admin.password_hash,
        )
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f'Admin {admin.username} already exists', ErrorKind.ACCOUNT_ALREADY_EXISTS
            ) from e
        return self._model_to_entity(model)

    @Logger.io
    async def update(self, *, admin: AdminEntity) -> AdminEntity:
        model = await self.session.get(AdminModel, admin.id) if admin.id is not None else None
        if model is None:
            raise NotFoundError(f'Admin {admin.id} not found', ErrorKind.ACCOUNT_NOT_FOUND)
        model.email = admin.email.strip().lower()
        model.hashed_password = admin.password_hash
        model.verification_code = admin.verification.code if admin.verification else None
        model.verification_code_expires_at = (
            admin.verification.expires_at if admin.verification else None
        )
        await self.session.flush()
        return self._model_to_entity(model)

    @Logger.io
    async def delete(self, *, admin_id: int) -> bool:
        model = await self.session.get(AdminModel, admin_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True
