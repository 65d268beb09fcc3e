from functools import cached_property
from typing import Optional

import bcrypt
from pydantic import SecretStr

from src.platform.logging.loguru_io import Logger
from src.service.ticketing.app.interface.i_password_hasher import IPasswordHasher


class BcryptPasswordHasher(IPasswordHasher):
    """bcrypt hashes for client and admin passwords"""

    def __init__(self, *, rounds: int = 12) -> None:
        self.rounds = rounds

    @cached_property
    def _dummy_hash(self) -> bytes:
        return bcrypt.hashpw(b'joki-events-dummy-password', bcrypt.gensalt(self.rounds))

    @Logger.io
    def hash_password(self, *, plain_password: SecretStr) -> str:
        hashed = bcrypt.hashpw(
            plain_password.get_secret_value().encode('utf-8'), bcrypt.gensalt(self.rounds)
        )
        return hashed.decode('utf-8')

    @Logger.io
    def verify_password(
        self, *, plain_password: SecretStr, hashed_password: Optional[str]
    ) -> bool:
        candidate = plain_password.get_secret_value().encode('utf-8')
        if not hashed_password:
            bcrypt.checkpw(candidate, self._dummy_hash)
            return False
        try:
            return bcrypt.checkpw(candidate, hashed_password.encode('utf-8'))
        except ValueError:
            # Malformed stored hash
            return False
