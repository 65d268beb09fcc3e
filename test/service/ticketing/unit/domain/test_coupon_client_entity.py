from datetime import timedelta
from decimal import Decimal

import pytest

from src.platform.exception.error_kind import ErrorKind
from src.platform.exception.exceptions import AuthenticationError, ConflictError, DomainError
from src.platform.types.utc_datetime import utc_now
from src.service.ticketing.domain.entity.admin_entity import AdminEntity
from src.service.ticketing.domain.entity.client_entity import ClientEntity
from src.service.ticketing.domain.entity.coupon_entity import Coupon
from test.service.ticketing.unit.helpers import make_client, make_coupon


CODE_TTL = timedelta(minutes=15)


@pytest.mark.unit
class TestCoupon:
    def test_discount_factor_follows_percentage(self):
        assert make_coupon(discount_percent='10').discount_factor == Decimal('0.9')
        assert make_coupon(discount_percent='100').discount_factor == Decimal('0')
        assert make_coupon(discount_percent='0').discount_factor == Decimal('1')

    @pytest.mark.parametrize('discount', ['-1', '100.01'])
    def test_discount_outside_range_is_rejected(self, discount):
        with pytest.raises(DomainError):
            make_coupon(discount_percent=discount)

    @pytest.mark.parametrize('discount', ['33.333', '12.005'])
    def test_discount_with_more_than_two_decimals_is_rejected(self, discount):
        with pytest.raises(DomainError):
            make_coupon(discount_percent=discount)

    def test_discount_with_two_decimals_or_trailing_zeros_is_kept(self):
        assert make_coupon(discount_percent='33.33').discount_percent == Decimal('33.33')
        assert make_coupon(discount_percent='12.500').discount_percent == Decimal('12.5')

    def test_negative_minimum_is_rejected(self):
        with pytest.raises(DomainError):
            make_coupon(min_purchase_amount='-5')

    def test_expired_coupon_fails_validation(self):
        coupon = make_coupon()

        with pytest.raises(DomainError) as exc_info:
            coupon.validate_not_expired(now=coupon.expiration_date + timedelta(seconds=1))

        assert exc_info.value.kind == ErrorKind.COUPON_EXPIRED

    def test_minimum_purchase_is_inclusive(self):
        coupon = make_coupon(min_purchase_amount='50')

        coupon.validate_minimum_met(total_price=Decimal('50.00'))
        with pytest.raises(DomainError) as exc_info:
            coupon.validate_minimum_met(total_price=Decimal('49.99'))

        assert exc_info.value.kind == ErrorKind.COUPON_MIN_NOT_MET

    def test_revise_replaces_terms_but_keeps_name(self):
        coupon = make_coupon()
        new_expiry = utc_now() + timedelta(days=90)

        revised = coupon.revise(
            discount_percent=Decimal('25'),
            expiration_date=new_expiry,
            min_purchase_amount=Decimal('10'),
        )

        assert revised.name == coupon.name
        assert revised.discount_factor == Decimal('0.75')
        assert revised.expiration_date == new_expiry
        assert revised.min_purchase_amount == Decimal('10.00')

    def test_blank_name_is_rejected(self):
        with pytest.raises(DomainError):
            Coupon.create(
                name='  ',
                discount_percent=Decimal('10'),
                expiration_date=utc_now(),
                min_purchase_amount=Decimal('0'),
            )


@pytest.mark.unit
class TestClient:
    def test_registered_client_starts_inactive_with_code(self):
        """
        Given: a registration request
        When: the client entity is registered
        Then: the account is inactive, email normalized, and a six digit code issued
        """
        # Arrange
        now = utc_now()

        # Act
        client = ClientEntity.register(
            email='  C1@Test.COM ',
            name='Client One',
            password_hash='hash',
            phone='300',
            address='Calle 1',
            now=now,
            code_ttl=CODE_TTL,
        )

        # Assert
        assert client.is_active is False
        assert client.email == 'c1@test.com'
        assert client.verification is not None
        assert len(client.verification.code) == 6
        assert client.verification.expires_at == now + CODE_TTL

    def test_verify_with_right_code_activates(self):
        now = utc_now()
        client = ClientEntity.register(
            email='c1@test.com',
            name='Client One',
            password_hash='hash',
            phone='',
            address='',
            now=now,
            code_ttl=CODE_TTL,
        )

        verified = client.verify(code=client.verification.code, now=now)

        assert verified.is_active is True
        assert verified.verification is None

    def test_verify_with_wrong_or_late_code_fails(self):
        now = utc_now()
        client = ClientEntity.register(
            email='c1@test.com',
            name='Client One',
            password_hash='hash',
            phone='',
            address='',
            now=now,
            code_ttl=CODE_TTL,
        )
        wrong = '000000' if client.verification.code != '000000' else '111111'

        with pytest.raises(AuthenticationError) as bad:
            client.verify(code=wrong, now=now)
        with pytest.raises(AuthenticationError) as late:
            client.verify(code=client.verification.code, now=now + CODE_TTL + timedelta(seconds=1))

        assert bad.value.kind == ErrorKind.VERIFICATION_BAD_CODE
        assert late.value.kind == ErrorKind.VERIFICATION_EXPIRED

    def test_used_coupon_is_recorded_once(self):
        client = make_client()

        client = client.record_used_coupon('SAVE10').record_used_coupon('SAVE10')

        assert client.used_coupons == ['SAVE10']
        with pytest.raises(ConflictError) as exc_info:
            client.validate_coupon_unused('SAVE10')
        assert exc_info.value.kind == ErrorKind.COUPON_ALREADY_USED_BY_CLIENT

    def test_changing_email_requires_new_verification(self):
        client = make_client()

        updated = client.update_profile(
            name=None,
            phone='311',
            address=None,
            email='new@test.com',
            now=utc_now(),
            code_ttl=CODE_TTL,
        )

        assert updated.email == 'new@test.com'
        assert updated.phone == '311'
        assert updated.name == client.name
        assert updated.is_active is False
        assert updated.verification is not None

    def test_inactive_client_fails_active_check(self):
        with pytest.raises(AuthenticationError) as exc_info:
            make_client().deactivate().validate_active()

        assert exc_info.value.kind == ErrorKind.ACCOUNT_INACTIVE


@pytest.mark.unit
class TestAdminRecovery:
    def test_recovery_code_resets_password(self):
        now = utc_now()
        admin = AdminEntity(username='admin', email='admin@test.com', password_hash='old')
        admin = admin.issue_recovery_code(now=now, ttl=CODE_TTL)

        reset = admin.reset_password(
            code=admin.verification.code, new_password_hash='new', now=now
        )

        assert reset.password_hash == 'new'
        assert reset.verification is None

    def test_reset_without_pending_recovery_fails(self):
        admin = AdminEntity(username='admin', email='admin@test.com', password_hash='old')

        with pytest.raises(AuthenticationError):
            admin.reset_password(code='123456', new_password_hash='new', now=utc_now())
