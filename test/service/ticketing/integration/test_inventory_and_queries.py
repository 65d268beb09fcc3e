from datetime import timedelta
from decimal import Decimal

import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import ConflictError, DomainError, NotFoundError
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.command.reserve_tickets_use_case import ReserveTicketsUseCase
from src.service.ticketing.app.dto.event_search_criteria import EventSearchCriteria
from src.service.ticketing.app.query.get_cart_use_case import GetCartUseCase
from src.service.ticketing.app.query.search_events_use_case import SearchEventsUseCase
from src.service.ticketing.domain.enum.event_type import EventType
from test.shared.given import given_client, given_event, load_event


@pytest.mark.integration
class TestEventSearch:
    async def test_filters_combine_and_results_are_date_ordered(self, uow_factory):
        """
        Given: three events in two cities on different dates
        When: searching by city
        Then: only that city's events come back, soonest first, with the total count
        """
        # Arrange
        now = utc_now()
        later = await given_event(
            uow_factory, name='Rock Night', city='Armenia', event_date=now + timedelta(days=40)
        )
        sooner = await given_event(
            uow_factory, name='Jazz Night', city='armenia', event_date=now + timedelta(days=10)
        )
        await given_event(uow_factory, name='Rock Night', city='Pereira')

        # Act
        page = await SearchEventsUseCase(uow=uow_factory()).search(
            criteria=EventSearchCriteria(city='ARMENIA'), page=0, size=10
        )

        # Assert
        assert [e.id for e in page.content] == [sooner.id, later.id]
        assert page.total_elements == 2
        assert page.total_pages == 1

    async def test_name_type_and_date_range(self, uow_factory):
        now = utc_now()
        wanted = await given_event(
            uow_factory,
            name='Summer Festival',
            event_type=EventType.FESTIVAL,
            event_date=now + timedelta(days=20),
        )
        await given_event(uow_factory, name='Summer Concert', event_date=now + timedelta(days=20))
        await given_event(
            uow_factory,
            name='Summer Festival II',
            event_type=EventType.FESTIVAL,
            event_date=now + timedelta(days=90),
        )

        page = await SearchEventsUseCase(uow=uow_factory()).search(
            criteria=EventSearchCriteria(
                name='summer',
                event_type=EventType.FESTIVAL,
                date_from=now,
                date_to=now + timedelta(days=30),
            )
        )

        assert [e.id for e in page.content] == [wanted.id]

    async def test_pagination(self, uow_factory):
        for i in range(5):
            await given_event(
                uow_factory, name=f'E{i}', event_date=utc_now() + timedelta(days=i + 1)
            )

        second = await SearchEventsUseCase(uow=uow_factory()).search(
            criteria=EventSearchCriteria(), page=1, size=2
        )

        assert [e.name for e in second.content] == ['E2', 'E3']
        assert second.total_elements == 5
        assert second.total_pages == 3

    async def test_inverted_date_range_is_rejected(self, uow_factory):
        now = utc_now()

        with pytest.raises(DomainError):
            await SearchEventsUseCase(uow=uow_factory()).search(
                criteria=EventSearchCriteria(date_from=now, date_to=now - timedelta(days=1))
            )


@pytest.mark.integration
class TestLocalityCapacity:
    async def test_adjust_keeps_event_total_in_step(self, uow_factory):
        event = await given_event(uow_factory, localities=(('GEN', '20', 10), ('VIP', '90', 4)))

        uow = uow_factory()
        async with uow:
            await uow.events.adjust_locality_capacity(
                event_id=event.id, locality_name='VIP', delta=-3
            )
            await uow.commit()

        stored = await load_event(uow_factory, event.id)
        assert stored.get_locality('VIP').remaining_capacity == 1
        assert stored.total_available_places == 11

    async def test_adjust_below_zero_is_insufficient_capacity(self, uow_factory):
        event = await given_event(uow_factory)

        uow = uow_factory()
        async with uow:
            with pytest.raises(ConflictError) as exc_info:
                await uow.events.adjust_locality_capacity(
                    event_id=event.id, locality_name='GEN', delta=-11
                )

        assert exc_info.value.kind == ErrorKind.INSUFFICIENT_CAPACITY
        stored = await load_event(uow_factory, event.id)
        assert stored.get_locality('GEN').remaining_capacity == 10

    async def test_adjust_unknown_locality(self, uow_factory):
        event = await given_event(uow_factory)

        uow = uow_factory()
        async with uow:
            with pytest.raises(NotFoundError) as exc_info:
                await uow.events.adjust_locality_capacity(
                    event_id=event.id, locality_name='BALCONY', delta=-1
                )

        assert exc_info.value.kind == ErrorKind.LOCALITY_NOT_FOUND


@pytest.mark.integration
class TestCartView:
    async def test_orders_for_imminent_events_are_hidden(self, uow_factory):
        """
        Given: a cart with tickets for an event next month and one tomorrow
        When: the cart is read with a two day cutoff
        Then: only next month's order is listed, the totals still include both
        """
        # Arrange
        client = await given_client(uow_factory)
        far = await given_event(uow_factory, name='Far')
        near = await given_event(
            uow_factory, name='Near', event_date=utc_now() + timedelta(days=3)
        )
        for event in (far, near):
            await ReserveTicketsUseCase(uow=uow_factory()).execute(
                client_id=client.id,
                event_id=event.id,
                locality_name='GEN',
                tickets_selected=1,
                expected_unit_price=Decimal('20'),
            )

        # Act
        view = await GetCartUseCase(uow=uow_factory(), cutoff=timedelta(days=5)).get_for_client(
            client_id=client.id
        )

        # Assert
        assert [o.event_id for o in view.visible_orders] == [far.id]
        assert view.cart.total_price == Decimal('40.00')
