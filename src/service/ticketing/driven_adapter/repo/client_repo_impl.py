from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.interface.i_client_repo import IClientRepo
from src.service.ticketing.domain.entity.client_entity import ClientEntity
from src.service.ticketing.domain.value_object.verification_code import VerificationCode
from src.service.ticketing.driven_adapter.model.client_model import ClientModel


class ClientRepoImpl(IClientRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _model_to_entity(model: ClientModel) -> ClientEntity:
        verification = None
        if model.verification_code and model.verification_code_expires_at:
            verification = VerificationCode(
                code=model.verification_code,
                expires_at=as_utc(model.verification_code_expires_at),
            )
        return ClientEntity(
            id=model.id,
            email=model.email,
            name=model.name,
            password_hash=model.hashed_password,
            phone=model.phone,
            address=model.address,
            is_active=model.is_active,
            verification=verification,
            used_coupons=list(model.used_coupons or []),
            created_at=as_utc(model.created_at),
        )

    @staticmethod
    def _write_fields(model: ClientModel, client: ClientEntity) -> None:
        model.email = client.email
        model.name = client.name
        model.hashed_password = client.password_hash
        model.phone = client.phone
        model.address = client.address
        model.is_active = client.is_active
        model.verification_code = client.verification.code if client.verification else None
        model.verification_code_expires_at = (
            client.verification.expires_at if client.verification else None
        )
        model.used_coupons = list(client.used_coupons)

    @Logger.io
    async def get_by_id(self, *, client_id: int) -> Optional[ClientEntity]:
        model = await self.session.get(ClientModel, client_id, populate_existing=True)
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def get_by_email(self, *, email: str) -> Optional[ClientEntity]:
        result = await self.session.execute(
            select(ClientModel)
            .where(ClientModel.email == email.strip().lower())
            .execution_options(populate_existing=True)
        )
        model = result.scalar_one_or_none()
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def create(self, *, client: ClientEntity) -> ClientEntity:
        model = ClientModel()
        self._write_fields(model, client)
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f'An account with email {client.email} already exists',
                ErrorKind.ACCOUNT_ALREADY_EXISTS,
            ) from e
        return self._model_to_entity(model)

    @Logger.io
    async def update(self, *, client: ClientEntity) -> ClientEntity:
        model = await self.session.get(ClientModel, client.id) if client.id is not None else None
        if model is None:
            raise NotFoundError(f'Client {client.id} not found', ErrorKind.ACCOUNT_NOT_FOUND)
        self._write_fields(model, client)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ConflictError(
                f'An account with email {client.email} already exists',
                ErrorKind.ACCOUNT_ALREADY_EXISTS,
            ) from e
        return self._model_to_entity(model)
