"""
Cart & ordering engine against real repositories (SQLite)

Scenarios:
1. Reserve, apply coupon, checkout, approve: purchase recorded, coupon consumed
2. Contention: concurrent reservations never oversell a locality
3. A consumed coupon cannot be claimed again by the same client
4. An unpaid checkout is expired by the reaper and the inventory comes back; a replayed
   callback for an older attempt is a duplicate
5. A price change between reservation and checkout fails with PRICE_STALE
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.result import Err, Ok
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.command.apply_coupon_use_case import ApplyCouponUseCase
from src.service.ticketing.app.command.cancel_tickets_use_case import CancelTicketsUseCase
from src.service.ticketing.app.command.checkout_cart_use_case import CheckoutCartUseCase
from src.service.ticketing.app.command.expire_pending_carts_use_case import (
    ExpirePendingCartsUseCase,
)
from src.service.ticketing.app.command.reserve_tickets_use_case import ReserveTicketsUseCase
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGateway,
)
from test.constants import ANOTHER_CLIENT_EMAIL, COUPON_SAVE10
from test.shared.given import (
    given_client,
    given_coupon,
    given_event,
    load_cart,
    load_client,
    load_event,
)


async def _reserve(uow_factory, *, client_id, event_id, tickets, price='20.0', locality='GEN'):
    return await ReserveTicketsUseCase(uow=uow_factory()).execute(
        client_id=client_id,
        event_id=event_id,
        locality_name=locality,
        tickets_selected=tickets,
        expected_unit_price=Decimal(price),
    )


async def _checkout(uow_factory, *, client_id, gateway=None):
    return await CheckoutCartUseCase(
        uow=uow_factory(), payment_gateway=gateway or MockPaymentGateway()
    ).execute(client_id=client_id)


async def _settle(uow_factory, *, attempt_id, outcome):
    return await SettlePaymentUseCase(uow=uow_factory()).execute(
        checkout_attempt_id=attempt_id, outcome=outcome
    )


@pytest.mark.integration
class TestHappyPath:
    async def test_reserve_coupon_checkout_and_approve(self, uow_factory):
        """
        Given: event E1 with GEN 20.0 x 10, client C1, coupon SAVE10 (10%, min 50)
        When: C1 reserves 3 GEN, applies SAVE10, checks out and the payment is approved
        Then: GEN has 7 left, C1 paid 54.00, SAVE10 is recorded as used and C1 has a new
              empty OPEN cart
        """
        # Arrange
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await given_coupon(uow_factory)

        # Act
        reserved = await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        couponed = await ApplyCouponUseCase(uow=uow_factory()).execute(
            client_id=client.id, coupon_name=COUPON_SAVE10
        )
        checkout = await _checkout(uow_factory, client_id=client.id)
        settled = await _settle(
            uow_factory,
            attempt_id=checkout.value.checkout_attempt_id,
            outcome=PaymentOutcome.APPROVED,
        )

        # Assert
        assert isinstance(reserved, Ok)
        assert reserved.value.total_price == Decimal('60.00')
        assert isinstance(couponed, Ok)
        assert couponed.value.total_price_with_discount == Decimal('54.00')
        assert isinstance(settled, Ok)
        assert settled.value.purchase.total_price_with_discount == Decimal('54.00')

        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 7
        assert stored_event.total_available_places == 7

        stored_client = await load_client(uow_factory, client.id)
        assert stored_client.used_coupons == [COUPON_SAVE10]

        current_cart = await load_cart(uow_factory, client.id)
        assert current_cart.status == CartStatus.OPEN
        assert current_cart.is_empty
        assert current_cart.id != reserved.value.id

    async def test_duplicate_approval_records_a_single_purchase(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=2)
        checkout = await _checkout(uow_factory, client_id=client.id)
        attempt_id = checkout.value.checkout_attempt_id

        first = await _settle(uow_factory, attempt_id=attempt_id, outcome=PaymentOutcome.APPROVED)
        second = await _settle(
            uow_factory, attempt_id=attempt_id, outcome=PaymentOutcome.APPROVED
        )

        assert first.value.duplicate is False
        assert second.value.duplicate is True
        uow = uow_factory()
        async with uow:
            purchases = await uow.purchases.list_by_client(client_id=client.id, page=0, size=10)
        assert purchases.total_elements == 1

    async def test_reserve_then_cancel_restores_inventory_and_cart(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)

        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=4)
        canceled = await CancelTicketsUseCase(uow=uow_factory()).execute(
            client_id=client.id, event_id=event.id, locality_name='GEN', tickets_selected=4
        )

        assert isinstance(canceled, Ok)
        assert canceled.value.is_empty
        assert canceled.value.total_price == Decimal('0.00')
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 10
        assert stored_event.total_available_places == 10


@pytest.mark.integration
class TestContention:
    async def test_concurrent_reservations_never_oversell(self, uow_factory):
        """
        Given: GEN with 10 places and five clients
        When: every client tries to reserve 3 GEN tickets at the same time
        Then: exactly three succeed, the others get INSUFFICIENT_CAPACITY and 1 place is left
        """
        # Arrange
        event = await given_event(uow_factory)
        clients = [
            await given_client(uow_factory, email=f'c{i}@contention.test') for i in range(5)
        ]

        # Act
        results = await asyncio.gather(
            *(
                _reserve(uow_factory, client_id=c.id, event_id=event.id, tickets=3)
                for c in clients
            )
        )

        # Assert
        succeeded = [r for r in results if isinstance(r, Ok)]
        failed = [r for r in results if isinstance(r, Err)]
        assert len(succeeded) == 3
        assert {r.kind for r in failed} == {ErrorKind.INSUFFICIENT_CAPACITY}
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 1

        held = 0
        for c in clients:
            held += sum(o.tickets_selected for o in (await load_cart(uow_factory, c.id)).orders)
        assert held + stored_event.get_locality('GEN').remaining_capacity == 10

    async def test_reserving_the_exact_remainder_empties_the_locality(self, uow_factory):
        """
        Given: GEN with 10 places
        When: C1 reserves all 10 and C2 then asks for 1 more
        Then: GEN sits at 0 and C2 gets INSUFFICIENT_CAPACITY with nothing taken
        """
        # Arrange
        event = await given_event(uow_factory)
        first = await given_client(uow_factory)
        second = await given_client(uow_factory, email=ANOTHER_CLIENT_EMAIL)

        # Act
        everything = await _reserve(uow_factory, client_id=first.id, event_id=event.id, tickets=10)
        one_more = await _reserve(uow_factory, client_id=second.id, event_id=event.id, tickets=1)

        # Assert
        assert isinstance(everything, Ok)
        assert isinstance(one_more, Err)
        assert one_more.kind == ErrorKind.INSUFFICIENT_CAPACITY
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 0
        assert stored_event.total_available_places == 0
        assert (await load_cart(uow_factory, second.id)).is_empty


@pytest.mark.integration
class TestCouponReuse:
    async def test_coupon_used_in_a_paid_cart_cannot_be_claimed_again(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await given_coupon(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        await ApplyCouponUseCase(uow=uow_factory()).execute(
            client_id=client.id, coupon_name=COUPON_SAVE10
        )
        checkout = await _checkout(uow_factory, client_id=client.id)
        await _settle(
            uow_factory,
            attempt_id=checkout.value.checkout_attempt_id,
            outcome=PaymentOutcome.APPROVED,
        )
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)

        result = await ApplyCouponUseCase(uow=uow_factory()).execute(
            client_id=client.id, coupon_name=COUPON_SAVE10
        )

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_ALREADY_USED_BY_CLIENT

    async def test_another_client_may_still_use_the_coupon(self, uow_factory):
        event = await given_event(uow_factory)
        first = await given_client(uow_factory)
        second = await given_client(uow_factory, email=ANOTHER_CLIENT_EMAIL)
        await given_coupon(uow_factory)
        for client in (first, second):
            await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)

        results = [
            await ApplyCouponUseCase(uow=uow_factory()).execute(
                client_id=client.id, coupon_name=COUPON_SAVE10
            )
            for client in (first, second)
        ]

        assert all(isinstance(r, Ok) for r in results)

    async def test_zero_percent_coupon_is_claimed_without_changing_the_total(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await given_coupon(
            uow_factory, name='FREEBIE0', discount_percent='0', min_purchase_amount='0'
        )
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)

        result = await ApplyCouponUseCase(uow=uow_factory()).execute(
            client_id=client.id, coupon_name='FREEBIE0'
        )

        assert isinstance(result, Ok)
        cart = result.value
        assert cart.coupon_claimed is True
        assert cart.applied_coupon_name == 'FREEBIE0'
        assert cart.total_price == Decimal('60.00')
        assert cart.total_price_with_discount == cart.total_price


@pytest.mark.integration
class TestPaymentExpiry:
    async def test_reaper_expires_unpaid_checkout_and_releases_inventory(self, uow_factory):
        """
        Given: C1 checked out 3 GEN with SAVE10 applied and never paid
        When: the reaper runs after the payment window
        Then: GEN is back to 10, the cart is OPEN, empty and without coupon
        """
        # Arrange
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await given_coupon(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        await ApplyCouponUseCase(uow=uow_factory()).execute(
            client_id=client.id, coupon_name=COUPON_SAVE10
        )
        await _checkout(uow_factory, client_id=client.id)
        reaper = ExpirePendingCartsUseCase(uow=uow_factory(), expiration=timedelta(minutes=15))

        # Act
        too_early = await reaper.execute(now=utc_now())
        expired = await reaper.execute(now=utc_now() + timedelta(minutes=16))

        # Assert
        assert too_early == 0
        assert expired == 1
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 10
        cart = await load_cart(uow_factory, client.id)
        assert cart.status == CartStatus.OPEN
        assert cart.is_empty
        assert cart.coupon_claimed is False
        assert (await load_client(uow_factory, client.id)).used_coupons == []

    async def test_rejected_payment_keeps_tickets_for_retry(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        checkout = await _checkout(uow_factory, client_id=client.id)

        await _settle(
            uow_factory,
            attempt_id=checkout.value.checkout_attempt_id,
            outcome=PaymentOutcome.REJECTED,
        )
        retry = await _checkout(uow_factory, client_id=client.id)

        assert isinstance(retry, Ok)
        assert retry.value.checkout_attempt_id != checkout.value.checkout_attempt_id
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 7

    async def test_replayed_rejection_after_retry_is_a_duplicate(self, uow_factory):
        """
        Given: C1's first checkout was rejected and C1 checked out again
        When: the gateway repeats the rejection of the first attempt
        Then: it is acknowledged as a duplicate and the retry stays PENDING_PAYMENT
        """
        # Arrange
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        first = await _checkout(uow_factory, client_id=client.id)
        first_attempt = first.value.checkout_attempt_id
        await _settle(uow_factory, attempt_id=first_attempt, outcome=PaymentOutcome.REJECTED)
        retry = await _checkout(uow_factory, client_id=client.id)

        # Act
        replay = await _settle(
            uow_factory, attempt_id=first_attempt, outcome=PaymentOutcome.REJECTED
        )

        # Assert
        assert isinstance(replay, Ok)
        assert replay.value.duplicate is True
        cart = await load_cart(uow_factory, client.id)
        assert cart.status == CartStatus.PENDING_PAYMENT
        assert cart.checkout_attempt_id == retry.value.checkout_attempt_id
        assert (await load_event(uow_factory, event.id)).get_locality('GEN').remaining_capacity == 7

    async def test_replayed_expiry_after_new_checkout_releases_nothing(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)
        first = await _checkout(uow_factory, client_id=client.id)
        first_attempt = first.value.checkout_attempt_id
        await _settle(uow_factory, attempt_id=first_attempt, outcome=PaymentOutcome.EXPIRED)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=2)
        await _checkout(uow_factory, client_id=client.id)

        replay = await _settle(
            uow_factory, attempt_id=first_attempt, outcome=PaymentOutcome.EXPIRED
        )
        approve_old = await _settle(
            uow_factory, attempt_id=first_attempt, outcome=PaymentOutcome.APPROVED
        )

        assert isinstance(replay, Ok)
        assert replay.value.duplicate is True
        assert isinstance(approve_old, Err)
        assert approve_old.kind == ErrorKind.CART_NOT_PENDING_PAYMENT
        assert (await load_event(uow_factory, event.id)).get_locality('GEN').remaining_capacity == 8
        cart = await load_cart(uow_factory, client.id)
        assert cart.status == CartStatus.PENDING_PAYMENT
        assert cart.orders[0].tickets_selected == 2

    async def test_gateway_failure_leaves_cart_open_with_inventory_held(self, uow_factory):
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=3)

        result = await _checkout(
            uow_factory, client_id=client.id, gateway=MockPaymentGateway(fail_with='timeout')
        )

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PAYMENT_GATEWAY_UNREACHABLE
        cart = await load_cart(uow_factory, client.id)
        assert cart.status == CartStatus.OPEN
        assert cart.orders[0].tickets_selected == 3
        assert (await load_event(uow_factory, event.id)).get_locality('GEN').remaining_capacity == 7


@pytest.mark.integration
class TestPriceChange:
    async def test_price_change_after_reservation_blocks_checkout(self, uow_factory):
        """
        Given: C1 holds 2 GEN reserved at 20.0
        When: the admin raises GEN to 25.0 and C1 checks out
        Then: PRICE_STALE and the cart stays OPEN with its orders at 20.0
        """
        # Arrange
        event = await given_event(uow_factory)
        client = await given_client(uow_factory)
        await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=2)
        uow = uow_factory()
        async with uow:
            stored = await uow.events.get_by_id(event_id=event.id)
            gen = stored.get_locality('GEN')
            await uow.events.save(
                event=stored.revise(
                    name=stored.name,
                    city=stored.city,
                    address=stored.address,
                    event_date=stored.event_date,
                    event_type=stored.event_type,
                    localities=[
                        gen.resized(price=Decimal('25.0'), total_capacity=gen.total_capacity)
                    ],
                    image_url=stored.image_url,
                    available_for_purchase=stored.available_for_purchase,
                )
            )
            await uow.commit()

        # Act
        result = await _checkout(uow_factory, client_id=client.id)

        # Assert
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PRICE_STALE
        cart = await load_cart(uow_factory, client.id)
        assert cart.status == CartStatus.OPEN
        assert cart.orders[0].unit_price == Decimal('20.00')
        stored_event = await load_event(uow_factory, event.id)
        assert stored_event.get_locality('GEN').remaining_capacity == 8

    async def test_reserving_at_old_price_is_price_stale(self, uow_factory):
        event = await given_event(uow_factory, localities=(('GEN', '25.0', 10),))
        client = await given_client(uow_factory)

        result = await _reserve(uow_factory, client_id=client.id, event_id=event.id, tickets=1)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PRICE_STALE
