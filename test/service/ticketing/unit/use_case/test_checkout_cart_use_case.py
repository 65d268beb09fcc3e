from decimal import Decimal

import attrs
import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.result import Err, Ok
from src.service.ticketing.app.command.checkout_cart_use_case import CheckoutCartUseCase
from src.service.ticketing.domain.entity.cart_entity import Cart
from src.service.ticketing.domain.enum.cart_status import CartStatus
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGateway,
)
from test.service.ticketing.unit.helpers import (
    UnitOfWorkMock,
    make_cart,
    make_client,
    make_event,
)


@pytest.fixture
def uow() -> UnitOfWorkMock:
    uow = UnitOfWorkMock()
    uow.carts.get_by_client_id.return_value = make_cart(orders=[(1, 'GEN', 3, '20')])
    uow.clients.get_by_id.return_value = make_client()
    uow.events.get_by_id.return_value = make_event()

    # Later transactions look the cart up by attempt id and see what was last saved
    saved: list[Cart] = []

    def save(*, cart: Cart) -> Cart:
        saved.append(cart)
        return cart

    uow.carts.save.side_effect = save
    uow.carts.get_by_checkout_attempt_id.side_effect = lambda **kwargs: saved[-1]
    uow.saved = saved
    return uow


@pytest.mark.unit
class TestCheckoutCart:
    async def test_checkout_creates_preference_and_tags_orders(self, uow: UnitOfWorkMock):
        """
        Given: an OPEN cart with 3 GEN tickets at the current price
        When: the client checks out
        Then: the cart is PENDING_PAYMENT under a new attempt id and every order carries
              the preference id
        """
        # Arrange
        gateway = MockPaymentGateway()

        # Act
        result = await CheckoutCartUseCase(uow=uow, payment_gateway=gateway).execute(client_id=1)

        # Assert
        assert isinstance(result, Ok)
        checkout = result.value
        pending, tagged = uow.saved
        assert pending.status == CartStatus.PENDING_PAYMENT
        assert pending.checkout_attempt_id == checkout.checkout_attempt_id
        assert pending.checkout_started_at is not None
        assert {o.paying_order_id for o in tagged.orders} == {checkout.preference_id}
        assert gateway.created[0].checkout_attempt_id == checkout.checkout_attempt_id
        assert uow.commit.await_count == 2

    async def test_snapshot_uses_discounted_unit_prices(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart(
            orders=[(1, 'GEN', 3, '20')]
        ).apply_coupon(coupon_name='SAVE10', discount_factor=Decimal('0.9'))
        gateway = MockPaymentGateway()

        await CheckoutCartUseCase(uow=uow, payment_gateway=gateway).execute(client_id=1)

        snapshot = gateway.created[0]
        assert snapshot.items[0].unit_price == Decimal('18.00')
        assert snapshot.total_price_with_discount == Decimal('54.00')
        assert snapshot.coupon_name == 'SAVE10'
        assert snapshot.client_email == 'c1@test.com'

    async def test_snapshot_lines_add_up_to_the_discounted_total(self, uow: UnitOfWorkMock):
        """
        Given: 3 GEN tickets at 0.05 with 50% off, a cart total of 0.08
        When: the client checks out
        Then: the items sent to the gateway add up to exactly 0.08
        """
        # Arrange
        uow.events.get_by_id.return_value = make_event(localities=(('GEN', '0.05', 10),))
        uow.carts.get_by_client_id.return_value = make_cart(
            orders=[(1, 'GEN', 3, '0.05')]
        ).apply_coupon(coupon_name='HALF', discount_factor=Decimal('0.5'))
        gateway = MockPaymentGateway()

        # Act
        await CheckoutCartUseCase(uow=uow, payment_gateway=gateway).execute(client_id=1)

        # Assert
        snapshot = gateway.created[0]
        assert snapshot.total_price_with_discount == Decimal('0.08')
        billed = sum(item.quantity * item.unit_price for item in snapshot.items)
        assert billed == snapshot.total_price_with_discount
        assert sum(item.quantity for item in snapshot.items) == 3
        assert {item.locality_name for item in snapshot.items} == {'GEN'}

    async def test_gateway_failure_reverts_cart_to_open(self, uow: UnitOfWorkMock):
        """
        Given: a payment gateway that cannot be reached
        When: the client checks out
        Then: Err PAYMENT_GATEWAY_UNREACHABLE, the cart is back to OPEN with its orders and
              inventory is left untouched
        """
        # Arrange
        gateway = MockPaymentGateway(fail_with='connect timeout')

        # Act
        result = await CheckoutCartUseCase(uow=uow, payment_gateway=gateway).execute(client_id=1)

        # Assert
        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PAYMENT_GATEWAY_UNREACHABLE
        reverted = uow.saved[-1]
        assert reverted.status == CartStatus.OPEN
        assert reverted.checkout_attempt_id is None
        assert reverted.orders[0].tickets_selected == 3
        uow.events.adjust_locality_capacity.assert_not_awaited()

    async def test_unexpected_gateway_exception_is_reported_as_unreachable(
        self, uow: UnitOfWorkMock
    ):
        gateway = MockPaymentGateway()
        gateway.create_preference = _raise(RuntimeError('boom'))

        result = await CheckoutCartUseCase(uow=uow, payment_gateway=gateway).execute(client_id=1)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PAYMENT_GATEWAY_UNREACHABLE
        assert uow.saved[-1].status == CartStatus.OPEN

    async def test_price_change_since_reservation_is_price_stale(self, uow: UnitOfWorkMock):
        uow.events.get_by_id.return_value = make_event(localities=(('GEN', '25.0', 10),))

        result = await CheckoutCartUseCase(
            uow=uow, payment_gateway=MockPaymentGateway()
        ).execute(client_id=1)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.PRICE_STALE
        uow.carts.save.assert_not_awaited()

    async def test_empty_cart_cannot_check_out(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart()

        result = await CheckoutCartUseCase(
            uow=uow, payment_gateway=MockPaymentGateway()
        ).execute(client_id=1)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.EMPTY_CART

    async def test_pending_cart_cannot_check_out_twice(self, uow: UnitOfWorkMock):
        cart = make_cart(orders=[(1, 'GEN', 3, '20')])
        uow.carts.get_by_client_id.return_value = attrs.evolve(
            cart, status=CartStatus.PENDING_PAYMENT
        )

        result = await CheckoutCartUseCase(
            uow=uow, payment_gateway=MockPaymentGateway()
        ).execute(client_id=1)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.CART_NOT_OPEN


def _raise(error: Exception):
    async def create_preference(*, snapshot):
        raise error

    return create_preference

