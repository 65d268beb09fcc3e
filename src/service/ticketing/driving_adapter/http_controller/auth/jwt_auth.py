"""
Identity gate

Tokens are HS256 JWTs carrying ``sub`` (email or username), ``role`` and ``uid`` and live
for ACCESS_TOKEN_EXPIRE_MINUTES. An expired token can still be exchanged for a fresh one
as long as its signature verifies.
"""

from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import jwt

from src.platform.config.core_setting import settings
from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.domain.enum.user_role import UserRole


class JwtAuth:
    def __init__(self) -> None:
        self.secret = settings.SECRET_KEY.get_secret_value()
        self.algorithm = settings.ALGORITHM
        self.token_expire = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    def create_token(
        self, *, subject: str, role: UserRole, user_id: int, now: Optional[datetime] = None
    ) -> str:
        issued_at = now or utc_now()
        payload = {
            'sub': subject,
            'role': role.value,
            'uid': user_id,
            'iat': issued_at,
            'exp': issued_at + self.token_expire,
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def decode_token(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError('Token has expired', ErrorKind.AUTH_EXPIRED)
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def _decode_ignoring_expiry(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(
                token, self.secret, algorithms=[self.algorithm], options={'verify_exp': False}
            )
        except jwt.PyJWTError:
            raise AuthenticationError('Invalid token')

    def extract_subject(self, token: str) -> str:
        return self.decode_token(token)['sub']

    def is_token_valid(self, token: str, subject: str) -> bool:
        try:
            return self.decode_token(token).get('sub') == subject
        except AuthenticationError:
            return False

    def refresh_token(self, token: str, *, now: Optional[datetime] = None) -> str:
        payload = self._decode_ignoring_expiry(token)
        try:
            role = UserRole(payload['role'])
            return self.create_token(
                subject=payload['sub'], role=role, user_id=int(payload['uid']), now=now
            )
        except (KeyError, TypeError, ValueError):
            raise AuthenticationError('Invalid token')
