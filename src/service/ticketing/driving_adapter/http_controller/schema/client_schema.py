from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field

from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.domain.entity.client_entity import ClientEntity
from src.service.ticketing.domain.entity.purchase_entity import Purchase
from src.service.ticketing.driving_adapter.http_controller.schema.cart_schema import (
    LocalityOrderResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class ClientUpdateRequest(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    phone: Optional[str] = Field(None, max_length=30)
    address: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None


class ClientResponse(CamelModel):
    id: int
    email: str
    name: str
    phone: str
    address: str
    is_active: bool
    used_coupons: List[str]

    @classmethod
    def from_entity(cls, client: ClientEntity) -> 'ClientResponse':
        return cls(
            id=client.id or 0,
            email=client.email,
            name=client.name,
            phone=client.phone,
            address=client.address,
            is_active=client.is_active,
            used_coupons=list(client.used_coupons),
        )


class PurchaseResponse(CamelModel):
    id: int
    checkout_attempt_id: str
    orders: List[LocalityOrderResponse]
    total_price: Decimal
    total_price_with_discount: Decimal
    coupon_name: Optional[str] = None
    purchased_at: datetime

    @classmethod
    def from_entity(cls, purchase: Purchase) -> 'PurchaseResponse':
        return cls(
            id=purchase.id or 0,
            checkout_attempt_id=purchase.checkout_attempt_id,
            orders=[LocalityOrderResponse.from_order(o) for o in purchase.orders],
            total_price=purchase.total_price,
            total_price_with_discount=purchase.total_price_with_discount,
            coupon_name=purchase.coupon_name,
            purchased_at=purchase.purchased_at,
        )


class PurchasePageResponse(CamelModel):
    content: List[PurchaseResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Purchase]) -> 'PurchasePageResponse':
        return cls(
            content=[PurchaseResponse.from_entity(p) for p in page.content],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )
