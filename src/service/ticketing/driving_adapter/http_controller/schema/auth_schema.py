"""
Auth API Schemas - account registration, login, recovery and token refresh
"""

from pydantic import EmailStr, Field, SecretStr

from src.service.ticketing.domain.enum.user_role import UserRole
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class RegisterClientRequest(CamelModel):
    email: EmailStr
    password: SecretStr = Field(
        ...,
        min_length=8,
        max_length=72,
        description='Password must be 8-72 characters (bcrypt limit)',
    )
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field('', max_length=30)
    address: str = Field('', max_length=200)

    model_config = CamelModel.model_config | {
        'json_schema_extra': {
            'example': {
                'email': 'ana@example.com',
                'password': 'P@ssw0rd',
                'name': 'Ana',
                'phone': '3001234567',
                'address': 'Calle 1 # 2-3',
            }
        }
    }


class VerifyClientRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)


class LoginClientRequest(CamelModel):
    email: EmailStr
    password: SecretStr = Field(..., min_length=1, max_length=72)


class LoginAdminRequest(CamelModel):
    username: str = Field(..., min_length=1)
    password: SecretStr = Field(..., min_length=1, max_length=72)


class AdminRecoveryRequest(CamelModel):
    email: EmailStr


class AdminResetPasswordRequest(CamelModel):
    email: EmailStr
    code: str = Field(..., min_length=6, max_length=6)
    new_password: SecretStr = Field(..., min_length=8, max_length=72)


class TokenResponse(CamelModel):
    token: str
    token_type: str = 'Bearer'
    role: UserRole
    user_id: int
