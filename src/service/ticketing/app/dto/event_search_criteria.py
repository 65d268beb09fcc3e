from datetime import datetime
from typing import Optional

import attrs

from src.service.ticketing.domain.enum.event_type import EventType


@attrs.frozen
class EventSearchCriteria:
    """Conjunction of optional filters; an unset field matches every event."""

    name: Optional[str] = None  # case-insensitive substring
    city: Optional[str] = None  # case-insensitive substring
    date_from: Optional[datetime] = None  # inclusive
    date_to: Optional[datetime] = None  # inclusive
    event_type: Optional[EventType] = None
