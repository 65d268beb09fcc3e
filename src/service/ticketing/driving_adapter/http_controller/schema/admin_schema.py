from pydantic import EmailStr

from src.service.ticketing.domain.entity.admin_entity import AdminEntity
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class AdminUpdateRequest(CamelModel):
    """Only the email can change; a ``username`` in the body is rejected."""

    email: EmailStr

    model_config = CamelModel.model_config | {'extra': 'forbid'}


class AdminResponse(CamelModel):
    id: int
    username: str
    email: str

    @classmethod
    def from_entity(cls, admin: AdminEntity) -> 'AdminResponse':
        return cls(id=admin.id or 0, username=admin.username, email=admin.email)
