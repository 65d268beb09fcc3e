"""
Inventory Store - SQLAlchemy implementation

Capacity is never written back from a loaded entity. Every change goes through a
conditional UPDATE so two transactions racing for the last tickets cannot both succeed:
the row either satisfies ``0 <= remaining + delta <= total`` at write time or no row is
touched.
"""

from typing import List, Optional

from sqlalchemy import Select, delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError
from src.platform.logging.loguru_io import Logger
from src.platform.types.utc_datetime import as_utc
from src.service.ticketing.app.dto.event_search_criteria import EventSearchCriteria
from src.service.ticketing.app.dto.page import Page
from src.service.ticketing.app.interface.i_event_repo import IEventRepo
from src.service.ticketing.domain.entity.event_entity import Event, Locality
from src.service.ticketing.domain.enum.event_type import EventType
from src.service.ticketing.driven_adapter.model.event_model import EventModel, LocalityModel


class EventRepoImpl(IEventRepo):
    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def _locality_to_entity(model: LocalityModel) -> Locality:
        return Locality(
            id=model.id,
            name=model.name,
            price=model.price,
            total_capacity=model.total_capacity,
            remaining_capacity=model.remaining_capacity,
        )

    @classmethod
    def _model_to_entity(cls, model: EventModel) -> Event:
        return Event(
            id=model.id,
            name=model.name,
            city=model.city,
            address=model.address,
            event_date=as_utc(model.event_date),
            event_type=EventType(model.event_type),
            image_url=model.image_url,
            available_for_purchase=model.available_for_purchase,
            total_available_places=model.total_available_places,
            localities=[cls._locality_to_entity(loc) for loc in model.localities],
            created_at=as_utc(model.created_at),
            updated_at=as_utc(model.updated_at),
        )

    def _select_event(self) -> Select:
        # Capacity is changed through bulk UPDATEs, so cached rows are always reloaded
        return (
            select(EventModel)
            .options(selectinload(EventModel.localities))
            .execution_options(populate_existing=True)
        )

    async def _get_model(self, event_id: int) -> Optional[EventModel]:
        result = await self.session.execute(self._select_event().where(EventModel.id == event_id))
        return result.scalar_one_or_none()

    @Logger.io
    async def get_by_id(self, *, event_id: int) -> Optional[Event]:
        model = await self._get_model(event_id)
        return self._model_to_entity(model) if model else None

    @Logger.io
    async def search(
        self, *, criteria: EventSearchCriteria, page: int, size: int
    ) -> Page[Event]:
        stmt = select(EventModel)
        if criteria.name:
            stmt = stmt.where(func.lower(EventModel.name).contains(criteria.name.strip().lower()))
        if criteria.city:
            stmt = stmt.where(func.lower(EventModel.city).contains(criteria.city.strip().lower()))
        if criteria.date_from:
            stmt = stmt.where(EventModel.event_date >= criteria.date_from)
        if criteria.date_to:
            stmt = stmt.where(EventModel.event_date <= criteria.date_to)
        if criteria.event_type:
            stmt = stmt.where(EventModel.event_type == criteria.event_type.value)

        total = await self.session.scalar(select(func.count()).select_from(stmt.subquery()))

        page_stmt = (
            stmt.options(selectinload(EventModel.localities))
            .execution_options(populate_existing=True)
            .order_by(EventModel.event_date.asc(), EventModel.name.asc(), EventModel.id.asc())
            .offset(page * size)
            .limit(size)
        )
        models = (await self.session.execute(page_stmt)).scalars().all()
        return Page(
            content=[self._model_to_entity(m) for m in models],
            page=page,
            size=size,
            total_elements=total or 0,
        )

    @Logger.io
    async def create(self, *, event: Event) -> Event:
        model = EventModel(
            name=event.name,
            city=event.city,
            address=event.address,
            event_date=event.event_date,
            event_type=event.event_type.value,
            image_url=event.image_url,
            available_for_purchase=event.available_for_purchase,
            total_available_places=sum(loc.remaining_capacity for loc in event.localities),
            localities=[
                LocalityModel(
                    name=loc.name,
                    price=loc.price,
                    total_capacity=loc.total_capacity,
                    remaining_capacity=loc.remaining_capacity,
                    position=position,
                )
                for position, loc in enumerate(event.localities)
            ],
        )
        self.session.add(model)
        await self.session.flush()
        Logger.base.info(
            f'🎫 [EVENT] Created event {model.id} with {len(event.localities)} localities'
        )
        return self._model_to_entity(model)

    @Logger.io
    async def save(self, *, event: Event) -> Event:
        """
        Localities are written relative to what the database holds right now: the tickets a
        locality has given out (total - remaining) are preserved even if carts moved them
        after the event was read.
        """
        if event.id is None or await self._get_model(event.id) is None:
            raise NotFoundError(f'Event {event.id} not found', ErrorKind.EVENT_NOT_FOUND)

        await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event.id)
            .values(
                name=event.name,
                city=event.city,
                address=event.address,
                event_date=event.event_date,
                event_type=event.event_type.value,
                image_url=event.image_url,
                available_for_purchase=event.available_for_purchase,
            )
            .execution_options(synchronize_session=False)
        )

        existing_names = set(
            (
                await self.session.execute(
                    select(LocalityModel.name).where(LocalityModel.event_id == event.id)
                )
            ).scalars()
        )
        incoming_names = {loc.name for loc in event.localities}

        try:
            for position, loc in enumerate(event.localities):
                if loc.name in existing_names:
                    await self.session.execute(
                        update(LocalityModel)
                        .where(LocalityModel.event_id == event.id, LocalityModel.name == loc.name)
                        .values(
                            price=loc.price,
                            position=position,
                            total_capacity=loc.total_capacity,
                            remaining_capacity=LocalityModel.remaining_capacity
                            + (loc.total_capacity - LocalityModel.total_capacity),
                        )
                        .execution_options(synchronize_session=False)
                    )
                else:
                    self.session.add(
                        LocalityModel(
                            event_id=event.id,
                            name=loc.name,
                            price=loc.price,
                            total_capacity=loc.total_capacity,
                            remaining_capacity=loc.total_capacity,
                            position=position,
                        )
                    )

            dropped = existing_names - incoming_names
            if dropped:
                removed = await self.session.execute(
                    delete(LocalityModel)
                    .where(
                        LocalityModel.event_id == event.id,
                        LocalityModel.name.in_(dropped),
                        LocalityModel.remaining_capacity == LocalityModel.total_capacity,
                    )
                    .execution_options(synchronize_session=False)
                )
                if removed.rowcount != len(dropped):
                    raise DomainError('A removed locality has tickets taken')

            await self.session.flush()
        except IntegrityError as e:
            raise DomainError(
                'Locality capacity cannot drop below the tickets already taken'
            ) from e

        await self._sync_total_available_places(event.id)
        model = await self._get_model(event.id)
        assert model is not None
        return self._model_to_entity(model)

    @Logger.io
    async def delete(self, *, event_id: int) -> bool:
        model = await self._get_model(event_id)
        if model is None:
            return False
        await self.session.delete(model)
        await self.session.flush()
        return True

    @Logger.io
    async def delete_all_without_tickets_taken(self) -> int:
        tickets_taken = (
            select(LocalityModel.id)
            .where(
                LocalityModel.event_id == EventModel.id,
                LocalityModel.remaining_capacity < LocalityModel.total_capacity,
            )
            .exists()
        )
        result = await self.session.execute(
            select(EventModel).where(~tickets_taken).options(selectinload(EventModel.localities))
        )
        models = result.scalars().all()
        # ORM deletes so the locality cascade also runs on SQLite
        for model in models:
            await self.session.delete(model)
        await self.session.flush()
        return len(models)

    @Logger.io
    async def adjust_locality_capacity(
        self, *, event_id: int, locality_name: str, delta: int
    ) -> Locality:
        new_remaining = LocalityModel.remaining_capacity + delta
        row = (
            await self.session.execute(
                update(LocalityModel)
                .where(
                    LocalityModel.event_id == event_id,
                    LocalityModel.name == locality_name,
                    new_remaining >= 0,
                    new_remaining <= LocalityModel.total_capacity,
                )
                .values(remaining_capacity=new_remaining)
                .returning(
                    LocalityModel.id,
                    LocalityModel.name,
                    LocalityModel.price,
                    LocalityModel.total_capacity,
                    LocalityModel.remaining_capacity,
                )
                .execution_options(synchronize_session=False)
            )
        ).one_or_none()

        if row is None:
            await self._raise_adjust_failure(
                event_id=event_id, locality_name=locality_name, delta=delta
            )

        await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(total_available_places=EventModel.total_available_places + delta)
            .execution_options(synchronize_session=False)
        )
        Logger.base.info(
            f'🎟️ [INVENTORY] event={event_id} locality={locality_name} '
            f'delta={delta:+d} remaining={row.remaining_capacity}'
        )
        return Locality(
            id=row.id,
            name=row.name,
            price=row.price,
            total_capacity=row.total_capacity,
            remaining_capacity=row.remaining_capacity,
        )

    async def _raise_adjust_failure(self, *, event_id: int, locality_name: str, delta: int):
        event_exists = await self.session.scalar(
            select(func.count()).select_from(EventModel).where(EventModel.id == event_id)
        )
        if not event_exists:
            raise NotFoundError(f'Event {event_id} not found', ErrorKind.EVENT_NOT_FOUND)

        remaining: List[int] = list(
            (
                await self.session.execute(
                    select(LocalityModel.remaining_capacity).where(
                        LocalityModel.event_id == event_id, LocalityModel.name == locality_name
                    )
                )
            ).scalars()
        )
        if not remaining:
            raise NotFoundError(
                f'Locality {locality_name} not found in event {event_id}',
                ErrorKind.LOCALITY_NOT_FOUND,
            )
        if delta < 0:
            raise ConflictError(
                f'Only {remaining[0]} tickets left in locality {locality_name}',
                ErrorKind.INSUFFICIENT_CAPACITY,
            )
        raise DomainError(
            f'Releasing {delta} tickets would exceed the capacity of locality {locality_name}'
        )

    async def _sync_total_available_places(self, event_id: int) -> None:
        remaining_sum = (
            select(func.coalesce(func.sum(LocalityModel.remaining_capacity), 0))
            .where(LocalityModel.event_id == event_id)
            .scalar_subquery()
        )
        await self.session.execute(
            update(EventModel)
            .where(EventModel.id == event_id)
            .values(total_available_places=remaining_sum)
            .execution_options(synchronize_session=False)
        )
