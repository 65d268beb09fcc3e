from datetime import datetime
from decimal import Decimal

from pydantic import Field

from src.service.ticketing.domain.entity.coupon_entity import Coupon
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class CouponUpdateRequest(CamelModel):
    discount_percent: Decimal = Field(..., ge=0, le=100)
    expiration_date: datetime
    min_purchase_amount: Decimal = Field(Decimal('0'), ge=0)


class CouponCreateRequest(CouponUpdateRequest):
    name: str = Field(..., min_length=1, max_length=100)

    model_config = CouponUpdateRequest.model_config | {
        'json_schema_extra': {
            'example': {
                'name': 'WELCOME10',
                'discountPercent': 10,
                'expirationDate': '2030-12-31T23:59:59Z',
                'minPurchaseAmount': 50,
            }
        }
    }


class CouponResponse(CamelModel):
    id: int
    name: str
    discount_percent: Decimal
    expiration_date: datetime
    min_purchase_amount: Decimal
    used: bool

    @classmethod
    def from_entity(cls, coupon: Coupon) -> 'CouponResponse':
        return cls(
            id=coupon.id or 0,
            name=coupon.name,
            discount_percent=coupon.discount_percent,
            expiration_date=coupon.expiration_date,
            min_purchase_amount=coupon.min_purchase_amount,
            used=coupon.used,
        )
