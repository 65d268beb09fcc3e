from decimal import Decimal
from typing import Iterable, List, Optional

from pydantic import Field

from src.service.ticketing.app.dto.payment_dto import CheckoutResult
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.value_object.locality_order import LocalityOrder
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class ReserveTicketsRequest(CamelModel):
    event_id: int
    locality_name: str = Field(..., min_length=1)
    tickets_selected: int = Field(..., ge=1)
    expected_unit_price: Decimal = Field(..., ge=0)

    model_config = CamelModel.model_config | {
        'json_schema_extra': {
            'example': {
                'eventId': 1,
                'localityName': 'VIP',
                'ticketsSelected': 2,
                'expectedUnitPrice': 100,
            }
        }
    }


class CancelTicketsRequest(CamelModel):
    event_id: int
    locality_name: str = Field(..., min_length=1)
    tickets_selected: int = Field(..., ge=1)
    expected_unit_price: Optional[Decimal] = None  # accepted for symmetry with reserve


class ApplyCouponRequest(CamelModel):
    coupon_name: str = Field(..., min_length=1)


class LocalityOrderResponse(CamelModel):
    event_id: int
    locality_name: str
    tickets_selected: int
    unit_price: Decimal
    subtotal: Decimal
    paying_order_id: Optional[str] = None

    @classmethod
    def from_order(cls, order: LocalityOrder) -> 'LocalityOrderResponse':
        return cls(
            event_id=order.event_id,
            locality_name=order.locality_name,
            tickets_selected=order.tickets_selected,
            unit_price=order.unit_price,
            subtotal=order.subtotal,
            paying_order_id=order.paying_order_id,
        )


class CartResponse(CamelModel):
    id: Optional[int]
    client_id: int
    status: CartStatus
    orders: List[LocalityOrderResponse]
    total_price: Decimal
    coupon_claimed: bool
    applied_coupon_name: Optional[str] = None
    applied_discount_factor: Decimal
    total_price_with_discount: Decimal
    checkout_attempt_id: Optional[str] = None

    @classmethod
    def from_entity(
        cls, cart: Cart, *, orders: Optional[Iterable[LocalityOrder]] = None
    ) -> 'CartResponse':
        return cls(
            id=cart.id,
            client_id=cart.client_id,
            status=cart.status,
            orders=[
                LocalityOrderResponse.from_order(o)
                for o in (cart.orders if orders is None else orders)
            ],
            total_price=cart.total_price,
            coupon_claimed=cart.coupon_claimed,
            applied_coupon_name=cart.applied_coupon_name,
            applied_discount_factor=cart.applied_discount_factor,
            total_price_with_discount=cart.total_price_with_discount,
            checkout_attempt_id=cart.checkout_attempt_id,
        )


class CheckoutResponse(CamelModel):
    preference_id: str
    checkout_attempt_id: str
    init_point: Optional[str] = None

    @classmethod
    def from_result(cls, result: CheckoutResult) -> 'CheckoutResponse':
        return cls(
            preference_id=result.preference_id,
            checkout_attempt_id=result.checkout_attempt_id,
            init_point=result.init_point,
        )
