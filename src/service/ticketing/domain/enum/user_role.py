from enum import StrEnum


class UserRole(StrEnum):
    CLIENT = 'CLIENT'
    ADMIN = 'ADMIN'
