"""
Inventory Store Interface

Events and their localities. Capacity only moves through ``adjust_locality_capacity``,
which is atomic per locality and keeps ``event.total_available_places`` in step.
"""

from abc import ABC, abstractmethod
from typing import Optional

from src.service.ticketing.app.dto.event_search_criteria import EventSearchCriteria
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.domain.entity.event_entity import Event, Locality


class IEventRepo(ABC):
    @abstractmethod
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        """Get event with its localities, None when absent"""
        pass

    @abstractmethod
    async def search(
        self, *, criteria: EventSearchCriteria, page: int, size: int
    ) -> Page[Event]:
        """
        Filter events, sorted by event date ascending then name

        Args:
            criteria: optional filters combined with AND
            page: zero-based page index
            size: page size

        Returns:
            Page with the matching events and the total count
        """
        pass

    @abstractmethod
    async def create(self, *, event: Event) -> Event:
        pass

    @abstractmethod
    async def save(self, *, event: Event) -> Event:
        """Persist event fields and localities (matched by name)"""
        pass

    @abstractmethod
    async def delete(self, *, event_id: int) -> bool:
        pass

    @abstractmethod
    async def adjust_locality_capacity(
        self, *, event_id: int, locality_name: str, delta: int
    ) -> Locality:
        """
        Atomically add ``delta`` (negative to take tickets) to a locality's remaining capacity

        Raises:
            NotFoundError: EVENT_NOT_FOUND / LOCALITY_NOT_FOUND
            ConflictError: INSUFFICIENT_CAPACITY when remaining would go below zero
        """
        pass

    @abstractmethod
    async def delete_all_without_tickets_taken(self) -> int:
        """
        Delete every event none of whose localities has sold or reserved a ticket

        Returns:
            Number of events deleted; events with tickets taken are kept
        """
        pass
