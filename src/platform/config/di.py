"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi-sqlalchemy.html
"""

from dependency_injector import containers, providers

from src.platform.config.core_setting import Settings
from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.service.ticketing.driven_adapter.notification.mock_email_notifier_impl import (
    MockEmailNotifier,
)
from src.service.ticketing.driven_adapter.notification.smtp_email_notifier_impl import (
    SmtpEmailNotifier,
)
from src.service.ticketing.driven_adapter.payment.mercadopago_payment_gateway_impl import (
    MercadoPagoPaymentGateway,
)
from src.service.ticketing.driven_adapter.payment.mock_payment_gateway_impl import (
    MockPaymentGateway,
)
from src.service.ticketing.driven_adapter.security.bcrypt_password_hasher import (
    BcryptPasswordHasher,
)
from src.service.ticketing.driving_adapter.http_controller.auth.jwt_auth import JwtAuth


class Container(containers.DeclarativeContainer):
    # Configuration
    config_service = providers.Singleton(Settings)

    # Database (uses AsyncEngineManager with settings from config_service)
    database = providers.Singleton(Database)

    # One UoW per use case; each `async with uow` opens its own session
    unit_of_work = providers.Factory(
        SqlAlchemyUnitOfWork, session_factory=database.provided.session
    )

    # Payment adapter (PAYMENT_GATEWAY=mock|mercadopago)
    payment_gateway = providers.Selector(
        config_service.provided.PAYMENT_GATEWAY,
        mock=providers.Singleton(MockPaymentGateway),
        mercadopago=providers.Singleton(MercadoPagoPaymentGateway),
    )

    # Notifier (EMAIL_BACKEND=mock|smtp)
    notifier = providers.Selector(
        config_service.provided.EMAIL_BACKEND,
        mock=providers.Singleton(MockEmailNotifier),
        smtp=providers.Singleton(SmtpEmailNotifier),
    )

    # Auth services
    password_hasher = providers.Singleton(BcryptPasswordHasher)
    jwt_auth = providers.Singleton(JwtAuth)


container = Container()


def setup() -> None:
    container.config_service()


def cleanup() -> None:
    container.reset_singletons()
