from decimal import Decimal

import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.result import Err, Ok
from src.service.ticketing.app.command.apply_coupon_use_case import ApplyCouponUseCase
from src.service.ticketing.app.command.remove_coupon_use_case import RemoveCouponUseCase
from test.service.ticketing.unit.helpers import (
    UnitOfWorkMock,
    make_cart,
    make_client,
    make_coupon,
)


@pytest.fixture
def uow() -> UnitOfWorkMock:
    uow = UnitOfWorkMock()
    uow.carts.get_by_client_id.return_value = make_cart(orders=[(1, 'GEN', 3, '20')])
    uow.coupons.get_by_name.return_value = make_coupon()
    uow.clients.get_by_id.return_value = make_client()
    return uow


async def _apply(uow: UnitOfWorkMock, coupon_name: str = 'SAVE10'):
    return await ApplyCouponUseCase(uow=uow).execute(client_id=1, coupon_name=coupon_name)


@pytest.mark.unit
class TestApplyCoupon:
    async def test_valid_coupon_discounts_cart(self, uow: UnitOfWorkMock):
        """
        Given: a 60.00 cart and a 10% coupon with a 50.00 minimum
        When: the client applies it
        Then: Ok with totalPriceWithDiscount 54.00; the coupon is not consumed yet
        """
        # Act
        result = await _apply(uow, ' SAVE10 ')

        # Assert
        assert isinstance(result, Ok)
        assert result.value.total_price_with_discount == Decimal('54.00')
        assert result.value.applied_coupon_name == 'SAVE10'
        uow.coupons.get_by_name.assert_awaited_once_with(name='SAVE10')
        uow.coupons.mark_consumed.assert_not_awaited()
        uow.clients.update.assert_not_awaited()
        uow.commit.assert_awaited_once()

    async def test_empty_cart_is_checked_before_coupon_lookup(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart()

        result = await _apply(uow, 'DOES-NOT-EXIST')

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.EMPTY_CART
        uow.coupons.get_by_name.assert_not_awaited()

    async def test_unknown_coupon(self, uow: UnitOfWorkMock):
        uow.coupons.get_by_name.return_value = None

        result = await _apply(uow)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_NOT_FOUND

    async def test_expired_coupon(self, uow: UnitOfWorkMock):
        uow.coupons.get_by_name.return_value = make_coupon(days_valid=-1)

        result = await _apply(uow)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_EXPIRED

    async def test_coupon_already_used_by_client(self, uow: UnitOfWorkMock):
        uow.clients.get_by_id.return_value = make_client(used_coupons=['SAVE10'])

        result = await _apply(uow)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_ALREADY_USED_BY_CLIENT
        uow.commit.assert_not_awaited()

    async def test_minimum_purchase_not_met(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart(orders=[(1, 'GEN', 2, '20')])

        result = await _apply(uow)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_MIN_NOT_MET

    async def test_second_coupon_on_same_cart(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart(
            orders=[(1, 'GEN', 3, '20')]
        ).apply_coupon(coupon_name='OTHER', discount_factor=Decimal('0.5'))

        result = await _apply(uow)

        assert isinstance(result, Err)
        assert result.kind == ErrorKind.COUPON_ALREADY_APPLIED


@pytest.mark.unit
class TestRemoveCoupon:
    async def test_remove_restores_full_price(self, uow: UnitOfWorkMock):
        uow.carts.get_by_client_id.return_value = make_cart(
            orders=[(1, 'GEN', 3, '20')]
        ).apply_coupon(coupon_name='SAVE10', discount_factor=Decimal('0.9'))

        result = await RemoveCouponUseCase(uow=uow).execute(client_id=1)

        assert isinstance(result, Ok)
        assert result.value.coupon_claimed is False
        assert result.value.total_price_with_discount == Decimal('60.00')
