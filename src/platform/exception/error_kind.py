from enum import StrEnum

from fastapi import status


class ErrorKind(StrEnum):
    """Stable error identifiers exposed to API clients."""

    # Identity
    AUTH_UNAUTHORIZED = 'AUTH_UNAUTHORIZED'
    AUTH_EXPIRED = 'AUTH_EXPIRED'
    AUTH_FORBIDDEN = 'AUTH_FORBIDDEN'
    INVALID_CREDENTIALS = 'INVALID_CREDENTIALS'

    # Accounts
    ACCOUNT_NOT_FOUND = 'ACCOUNT_NOT_FOUND'
    ACCOUNT_INACTIVE = 'ACCOUNT_INACTIVE'
    ACCOUNT_ALREADY_EXISTS = 'ACCOUNT_ALREADY_EXISTS'
    VERIFICATION_BAD_CODE = 'VERIFICATION_BAD_CODE'
    VERIFICATION_EXPIRED = 'VERIFICATION_EXPIRED'

    # Inventory
    EVENT_NOT_FOUND = 'EVENT_NOT_FOUND'
    EVENT_CLOSED = 'EVENT_CLOSED'
    LOCALITY_NOT_FOUND = 'LOCALITY_NOT_FOUND'
    INSUFFICIENT_CAPACITY = 'INSUFFICIENT_CAPACITY'
    PRICE_STALE = 'PRICE_STALE'

    # Cart
    CART_NOT_FOUND = 'CART_NOT_FOUND'
    CART_NOT_OPEN = 'CART_NOT_OPEN'
    CART_NOT_PENDING_PAYMENT = 'CART_NOT_PENDING_PAYMENT'
    EMPTY_CART = 'EMPTY_CART'
    LOCALITY_ORDER_NOT_FOUND = 'LOCALITY_ORDER_NOT_FOUND'
    INSUFFICIENT_ORDER_QUANTITY = 'INSUFFICIENT_ORDER_QUANTITY'
    CHECKOUT_ATTEMPT_NOT_FOUND = 'CHECKOUT_ATTEMPT_NOT_FOUND'

    # Coupons
    COUPON_NOT_FOUND = 'COUPON_NOT_FOUND'
    COUPON_EXPIRED = 'COUPON_EXPIRED'
    COUPON_MIN_NOT_MET = 'COUPON_MIN_NOT_MET'
    COUPON_ALREADY_APPLIED = 'COUPON_ALREADY_APPLIED'
    COUPON_ALREADY_USED_BY_CLIENT = 'COUPON_ALREADY_USED_BY_CLIENT'
    COUPON_ALREADY_EXISTS = 'COUPON_ALREADY_EXISTS'

    # Payment
    PAYMENT_GATEWAY_UNREACHABLE = 'PAYMENT_GATEWAY_UNREACHABLE'
    PAYMENT_REJECTED = 'PAYMENT_REJECTED'

    VALIDATION_ERROR = 'VALIDATION_ERROR'
    INTERNAL = 'INTERNAL'

    @property
    def http_status(self) -> int:
        return _HTTP_STATUS.get(self, status.HTTP_400_BAD_REQUEST)


_HTTP_STATUS: dict[ErrorKind, int] = {
    ErrorKind.AUTH_UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTH_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.AUTH_FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.INVALID_CREDENTIALS: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ACCOUNT_INACTIVE: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.ACCOUNT_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.VERIFICATION_BAD_CODE: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.VERIFICATION_EXPIRED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.LOCALITY_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.INSUFFICIENT_CAPACITY: status.HTTP_409_CONFLICT,
    ErrorKind.PRICE_STALE: status.HTTP_409_CONFLICT,
    ErrorKind.CART_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CART_NOT_OPEN: status.HTTP_409_CONFLICT,
    ErrorKind.CART_NOT_PENDING_PAYMENT: status.HTTP_409_CONFLICT,
    ErrorKind.LOCALITY_ORDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CHECKOUT_ATTEMPT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.COUPON_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.COUPON_ALREADY_APPLIED: status.HTTP_409_CONFLICT,
    ErrorKind.COUPON_ALREADY_USED_BY_CLIENT: status.HTTP_409_CONFLICT,
    ErrorKind.COUPON_ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.PAYMENT_GATEWAY_UNREACHABLE: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}
