from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from src.service.ticketing.app.dto.locality_input import LocalityInput
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.domain.entity.event_entity import Event, Locality
from src.service.ticketing.domain.enum.event_type import EventType
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    CamelModel,
)


class LocalityRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    price: Decimal = Field(..., ge=0)
    total_capacity: int = Field(..., ge=0)

    def to_input(self) -> LocalityInput:
        return LocalityInput(
            name=self.name, price=self.price, total_capacity=self.total_capacity
        )


class EventRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    city: str = Field(..., min_length=1, max_length=100)
    address: str = ''
    event_date: datetime
    event_type: EventType
    image_url: Optional[str] = None
    available_for_purchase: bool = True
    localities: List[LocalityRequest] = Field(..., min_length=1)

    model_config = CamelModel.model_config | {
        'json_schema_extra': {
            'example': {
                'name': 'Rock Fest',
                'city': 'Bogota',
                'address': 'Parque Simon Bolivar',
                'eventDate': '2030-03-01T20:00:00Z',
                'eventType': 'FESTIVAL',
                'availableForPurchase': True,
                'localities': [
                    {'name': 'VIP', 'price': 250, 'totalCapacity': 100},
                    {'name': 'General', 'price': 80, 'totalCapacity': 2000},
                ],
            }
        }
    }


class LocalityResponse(CamelModel):
    name: str
    price: Decimal
    total_capacity: int
    remaining_capacity: int

    @classmethod
    def from_entity(cls, locality: Locality) -> 'LocalityResponse':
        return cls(
            name=locality.name,
            price=locality.price,
            total_capacity=locality.total_capacity,
            remaining_capacity=locality.remaining_capacity,
        )


class EventResponse(CamelModel):
    id: int
    name: str
    city: str
    address: str
    event_date: datetime
    event_type: EventType
    image_url: Optional[str] = None
    available_for_purchase: bool
    total_available_places: int
    localities: List[LocalityResponse]

    @classmethod
    def from_entity(cls, event: Event) -> 'EventResponse':
        return cls(
            id=event.id or 0,
            name=event.name,
            city=event.city,
            address=event.address,
            event_date=event.event_date,
            event_type=event.event_type,
            image_url=event.image_url,
            available_for_purchase=event.available_for_purchase,
            total_available_places=event.total_available_places,
            localities=[LocalityResponse.from_entity(loc) for loc in event.localities],
        )


class EventPageResponse(CamelModel):
    content: List[EventResponse]
    page: int
    size: int
    total_elements: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[Event]) -> 'EventPageResponse':
        return cls(
            content=[EventResponse.from_entity(event) for event in page.content],
            page=page.page,
            size=page.size,
            total_elements=page.total_elements,
            total_pages=page.total_pages,
        )
