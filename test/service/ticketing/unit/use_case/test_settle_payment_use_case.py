"""
Unit tests for SettlePaymentUseCase and ExpirePendingCartsUseCase

Settlement is keyed by checkout attempt id and must be idempotent per outcome.
"""

from datetime import timedelta
from decimal import Decimal

import attrs
import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.result import Err, Ok
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.app.command.expire_pending_carts_use_case import (
    ExpirePendingCartsUseCase,
)
from src.service.ticketing.app.command.settle_payment_use_case import SettlePaymentUseCase
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.entity.payment_attempt_entity import PaymentAttempt
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.domain.enum.payment_outcome import PaymentOutcome
from test.service.ticketing.unit.helpers import UnitOfWorkMock, make_cart, make_client


ATTEMPT = 'attempt-1'


def _pending_cart(*, with_coupon: bool = False) -> Cart:
    cart = make_cart(orders=[(1, 'GEN', 3, '20'), (1, 'VIP', 1, '100')])
    if with_coupon:
        cart = cart.apply_coupon(coupon_name='SAVE10', discount_factor=Decimal('0.9'))
    return cart.start_checkout(checkout_attempt_id=ATTEMPT, now=utc_now())


def _settled(outcome: PaymentOutcome) -> PaymentAttempt:
    return PaymentAttempt(
        checkout_attempt_id=ATTEMPT, cart_id=10, client_id=1, outcome=outcome, settled_at=utc_now()
    )


@pytest.fixture
def uow() -> UnitOfWorkMock:
    uow = UnitOfWorkMock()
    uow.carts.get_by_checkout_attempt_id.return_value = _pending_cart()
    uow.clients.get_by_id.return_value = make_client()
    uow.purchases.create.side_effect = lambda *, purchase: attrs.evolve(purchase, id=500)
    return uow


async def _settle(uow: UnitOfWorkMock, outcome: PaymentOutcome):
    return await SettlePaymentUseCase(uow=uow).execute(
        checkout_attempt_id=ATTEMPT, outcome=outcome
    )


@pytest.mark.unit
class TestSettlePayment:
    async def test_approved_records_purchase_and_opens_new_cart(self, uow: UnitOfWorkMock):
        """
        Given: a PENDING_PAYMENT cart worth 160.00
        When: the gateway approves the payment
        Then: the cart is PAID, a purchase is stored and a fresh OPEN cart is issued
        """
        # Act
        result = await _settle(uow, PaymentOutcome.APPROVED)

        # Assert
        assert isinstance(result, Ok)
        settlement = result.value
        assert settlement.duplicate is False
        assert settlement.cart.status == CartStatus.PAID
        assert settlement.purchase.id == 500
        assert settlement.purchase.total_price == Decimal('160.00')
        assert settlement.purchase.checkout_attempt_id == ATTEMPT
        assert settlement.new_cart.status == CartStatus.OPEN
        assert settlement.new_cart.is_empty
        uow.events.adjust_locality_capacity.assert_not_awaited()
        uow.coupons.mark_consumed.assert_not_awaited()
        uow.commit.assert_awaited_once()

    async def test_approved_with_coupon_consumes_it_for_the_client(self, uow: UnitOfWorkMock):
        uow.carts.get_by_checkout_attempt_id.return_value = _pending_cart(with_coupon=True)

        result = await _settle(uow, PaymentOutcome.APPROVED)

        assert isinstance(result, Ok)
        assert result.value.purchase.coupon_name == 'SAVE10'
        assert result.value.purchase.total_price_with_discount == Decimal('144.00')
        updated_client = uow.clients.update.await_args.kwargs['client']
        assert updated_client.used_coupons == ['SAVE10']
        uow.coupons.mark_consumed.assert_awaited_once_with(name='SAVE10')

    async def test_rejected_keeps_tickets_reserved(self, uow: UnitOfWorkMock):
        result = await _settle(uow, PaymentOutcome.REJECTED)

        assert isinstance(result, Ok)
        cart = result.value.cart
        assert cart.status == CartStatus.OPEN
        assert cart.total_price == Decimal('160.00')
        uow.events.adjust_locality_capacity.assert_not_awaited()
        uow.purchases.create.assert_not_awaited()

    async def test_expired_releases_every_order(self, uow: UnitOfWorkMock):
        """
        Given: a pending cart holding 3 GEN and 1 VIP with a coupon applied
        When: the payment expires
        Then: both localities get their tickets back, the cart is OPEN, empty and couponless
        """
        # Arrange
        uow.carts.get_by_checkout_attempt_id.return_value = _pending_cart(with_coupon=True)

        # Act
        result = await _settle(uow, PaymentOutcome.EXPIRED)

        # Assert
        assert isinstance(result, Ok)
        cart = result.value.cart
        assert cart.status == CartStatus.OPEN
        assert cart.is_empty
        assert cart.coupon_claimed is False
        released = {
            call.kwargs['locality_name']: call.kwargs['delta']
            for call in uow.events.adjust_locality_capacity.await_args_list
        }
        assert released == {'GEN': 3, 'VIP': 1}
        uow.coupons.mark_consumed.assert_not_awaited()

    async def test_settlement_is_written_to_the_attempt_ledger(self, uow: UnitOfWorkMock):
        result = await _settle(uow, PaymentOutcome.REJECTED)

        assert isinstance(result, Ok)
        attempt = uow.payment_attempts.create.await_args.kwargs['attempt']
        assert attempt.checkout_attempt_id == ATTEMPT
        assert attempt.cart_id == 10
        assert attempt.outcome == PaymentOutcome.REJECTED

    async def test_repeated_approval_is_a_duplicate_no_op(self, uow: UnitOfWorkMock):
        paid = _pending_cart().mark_paid()
        uow.payment_attempts.get_by_checkout_attempt_id.return_value = _settled(
            PaymentOutcome.APPROVED
        )
        uow.carts.get_by_id.return_value = paid

        result = await _settle(uow, PaymentOutcome.APPROVED)

        assert isinstance(result, Ok)
        assert result.value.duplicate is True
        assert result.value.cart == paid
        uow.carts.get_by_checkout_attempt_id.assert_not_awaited()
        uow.purchases.create.assert_not_awaited()
        uow.carts.create.assert_not_awaited()
        uow.payment_attempts.create.assert_not_awaited()
        uow.commit.assert_not_awaited()

    async def test_old_rejection_replayed_after_a_new_checkout_is_a_duplicate(
        self, uow: UnitOfWorkMock
    ):
        """
        Given: attempt-1 was rejected and the cart is pending again under attempt-2
        When: the gateway repeats the attempt-1 rejection
        Then: it is reported as a duplicate and the newer checkout is left alone
        """
        # Arrange
        retried = attrs.evolve(_pending_cart(), checkout_attempt_id='attempt-2')
        uow.payment_attempts.get_by_checkout_attempt_id.return_value = _settled(
            PaymentOutcome.REJECTED
        )
        uow.carts.get_by_id.return_value = retried

        # Act
        result = await _settle(uow, PaymentOutcome.REJECTED)

        # Assert
        assert isinstance(result, Ok)
        assert result.value.duplicate is True
        assert result.value.cart.status == CartStatus.PENDING_PAYMENT
        uow.carts.save.assert_not_awaited()
        uow.events.adjust_locality_capacity.assert_not_awaited()

    async def test_concurrent_settlement_found_after_the_lock_is_a_duplicate(
        self, uow: UnitOfWorkMock
    ):
        uow.carts.get_by_checkout_attempt_id.return_value = _pending_cart().reject_payment()
        uow.payment_attempts.get_by_checkout_attempt_id.side_effect = [
            None,
            _settled(PaymentOutcome.REJECTED),
        ]
        uow.carts.get_by_id.return_value = _pending_cart().reject_payment()

        result = await _settle(uow, PaymentOutcome.REJECTED)

        assert isinstance(result, Ok)
        assert result.value.duplicate is True
        uow.payment_attempts.create.assert_not_awaited()

    async def test_conflicting_outcome_after_settlement_fails(self, uow: UnitOfWorkMock):
        uow.payment_attempts.get_by_checkout_attempt_id.return_value = _settled(
            PaymentOutcome.APPROVED
        )

        result = await _settle(uow, PaymentOutcome.EXPIRED)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.CART_NOT_PENDING_PAYMENT
        uow.carts.get_by_id.assert_not_awaited()

    async def test_settled_cart_without_ledger_entry_is_not_pending(self, uow: UnitOfWorkMock):
        uow.carts.get_by_checkout_attempt_id.return_value = _pending_cart().mark_paid()

        result = await _settle(uow, PaymentOutcome.APPROVED)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.CART_NOT_PENDING_PAYMENT

    async def test_unknown_attempt(self, uow: UnitOfWorkMock):
        uow.carts.get_by_checkout_attempt_id.return_value = None

        result = await _settle(uow, PaymentOutcome.APPROVED)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.CHECKOUT_ATTEMPT_NOT_FOUND


@pytest.mark.unit
class TestExpirePendingCarts:
    async def test_reaper_expires_carts_past_the_window(self, uow: UnitOfWorkMock):
        """
        Given: one cart pending for longer than the payment window
        When: the reaper runs
        Then: that cart is settled EXPIRED and counted
        """
        # Arrange
        now = utc_now()
        uow.carts.list_pending_started_before.return_value = [_pending_cart()]
        use_case = ExpirePendingCartsUseCase(uow=uow, expiration=timedelta(minutes=15))

        # Act
        expired = await use_case.execute(now=now)

        # Assert
        assert expired == 1
        uow.carts.list_pending_started_before.assert_awaited_once_with(
            started_before=now - timedelta(minutes=15), limit=100
        )
        assert uow.carts.save.await_args.kwargs['cart'].status == CartStatus.OPEN

    async def test_one_failing_cart_does_not_stop_the_pass(self, uow: UnitOfWorkMock):
        stale = attrs.evolve(_pending_cart(), checkout_attempt_id='gone')
        uow.carts.list_pending_started_before.return_value = [stale, _pending_cart()]
        uow.carts.get_by_checkout_attempt_id.side_effect = lambda *, checkout_attempt_id, **kw: (
            None if checkout_attempt_id == 'gone' else _pending_cart()
        )

        expired = await ExpirePendingCartsUseCase(uow=uow).execute()

        assert expired == 1

    async def test_nothing_pending(self, uow: UnitOfWorkMock):
        uow.carts.list_pending_started_before.return_value = []

        assert await ExpirePendingCartsUseCase(uow=uow).execute() == 0
        uow.commit.assert_not_awaited()
