from src.platform.exception.error_kind import ErrorKind


class CustomBaseError(Exception):
    """Base class for all custom exceptions - controls logging behavior in @Logger.io"""

    def __init__(self, message: str, kind: ErrorKind, status_code: int | None = None) -> None:
        self.message = message
        self.kind = kind
        self.status_code = status_code if status_code is not None else kind.http_status
        super().__init__(message)


class DomainError(CustomBaseError):
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.VALIDATION_ERROR) -> None:
        super().__init__(message, kind, 400)


class ForbiddenError(CustomBaseError):
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.AUTH_FORBIDDEN) -> None:
        super().__init__(message, kind, 403)


class NotFoundError(CustomBaseError):
    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message, kind, 404)


class ConflictError(CustomBaseError):
    def __init__(self, message: str, kind: ErrorKind) -> None:
        super().__init__(message, kind, 409)


class AuthenticationError(CustomBaseError):
    def __init__(self, message: str, kind: ErrorKind = ErrorKind.AUTH_UNAUTHORIZED) -> None:
        super().__init__(message, kind, 401)


class PaymentGatewayError(CustomBaseError):
    def __init__(
        self, message: str, kind: ErrorKind = ErrorKind.PAYMENT_GATEWAY_UNREACHABLE
    ) -> None:
        super().__init__(message, kind)
