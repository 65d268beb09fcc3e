from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.dto.event_search_criteria import EventSearchCriteria
from src.service.ticketing.app.query.get_event_use_case import GetEventUseCase
from src.service.ticketing.app.query.search_events_use_case import SearchEventsUseCase
from src.service.ticketing.domain.enum.event_type import EventType
from src.service.ticketing.driving_adapter.http_controller.auth.role_auth import (
    Principal,
    get_current_principal,
)
from src.service.ticketing.driving_adapter.http_controller.result_response import success
from src.service.ticketing.driving_adapter.http_controller.schema.event_schema import (
    EventPageResponse,
    EventResponse,
)
from src.service.ticketing.driving_adapter.http_controller.schema.response_schema import (
    ApiResponse,
)


router = APIRouter()


@router.get('', response_model=ApiResponse[EventPageResponse])
@Logger.io
async def search_events(
    name: Optional[str] = None,
    city: Optional[str] = None,
    date_from: Optional[datetime] = Query(None, alias='from'),
    date_to: Optional[datetime] = Query(None, alias='to'),
    event_type: Optional[EventType] = Query(None, alias='type'),
    page: int = 0,
    size: int = 20,
    principal: Principal = Depends(get_current_principal),
    use_case: SearchEventsUseCase = Depends(SearchEventsUseCase.depends),
) -> JSONResponse:
    criteria = EventSearchCriteria(
        name=name or None,
        city=city or None,
        date_from=as_utc(date_from),
        date_to=as_utc(date_to),
        event_type=event_type,
    )
    result = await use_case.search(criteria=criteria, page=page, size=size)
    return success(EventPageResponse.from_page(result), message='Events found')


@router.get('/{event_id}', response_model=ApiResponse[EventResponse])
@Logger.io
async def get_event(
    event_id: int,
    principal: Principal = Depends(get_current_principal),
    use_case: GetEventUseCase = Depends(GetEventUseCase.depends),
) -> JSONResponse:
    event = await use_case.get_by_id(event_id=event_id)
    return success(EventResponse.from_entity(event), message='Event found')
