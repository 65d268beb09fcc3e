"""
Unit of Work Pattern - one database transaction per use case

Architecture:
- UoW owns the session lifecycle (opened on enter, closed on exit)
- UoW decides commit/rollback; leaving the block without commit() rolls back
- Repositories receive the shared session from the UoW
- Use cases coordinate inventory, carts, coupons, clients, purchases and settlements through one UoW
"""

from __future__ import annotations

import abc
from contextlib import AbstractAsyncContextManager
from typing import TYPE_CHECKING, Callable

from sqlalchemy.ext.asyncio import AsyncSession


if TYPE_CHECKING:
    from src.service.ticketing.app.interface.i_admin_repo import IAdminRepo
    from src.service.ticketing.app.interface.i_cart_repo import ICartRepo
    from src.service.ticketing.app.interface.i_client_repo import IClientRepo
    from src.service.ticketing.app.interface.i_coupon_repo import ICouponRepo
    from src.service.ticketing.app.interface.i_event_repo import IEventRepo
    from src.service.ticketing.app.interface.i_payment_attempt_repo import IPaymentAttemptRepo
    from src.service.ticketing.app.interface.i_purchase_repo import IPurchaseRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Abstract Unit of Work for the ticketing service

    Usage:
        async with uow:
            event = await uow.events.get_by_id(event_id=...)
            await uow.carts.save(cart=...)
            await uow.commit()
    """

    events: IEventRepo
    carts: ICartRepo
    coupons: ICouponRepo
    clients: IClientRepo
    admins: IAdminRepo
    purchases: IPurchaseRepo
    payment_attempts: IPaymentAttemptRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        await self.rollback()

    async def commit(self) -> None:
        """Commit the transaction"""
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    """
    SQLAlchemy implementation of Unit of Work

    A new session is opened per ``async with`` block, so one instance can be reused
    for sequential transactions (checkout commits, calls the gateway, then commits again).
    """

    def __init__(
        self, session_factory: Callable[[], AbstractAsyncContextManager[AsyncSession]]
    ) -> None:
        self.session_factory = session_factory
        self._session_cm: AbstractAsyncContextManager[AsyncSession] | None = None
        self.session: AsyncSession | None = None

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.ticketing.driven_adapter.repo.admin_repo_impl import AdminRepoImpl
        from src.service.ticketing.driven_adapter.repo.cart_repo_impl import CartRepoImpl
        from src.service.ticketing.driven_adapter.repo.client_repo_impl import ClientRepoImpl
        from src.service.ticketing.driven_adapter.repo.coupon_repo_impl import CouponRepoImpl
        from src.service.ticketing.driven_adapter.repo.event_repo_impl import EventRepoImpl
        from src.service.ticketing.driven_adapter.repo.payment_attempt_repo_impl import (
            PaymentAttemptRepoImpl,
        )
        from src.service.ticketing.driven_adapter.repo.purchase_repo_impl import (
            PurchaseRepoImpl,
        )

        self._session_cm = self.session_factory()
        self.session = await self._session_cm.__aenter__()

        # Create repositories with shared session
        self.events = EventRepoImpl(self.session)
        self.carts = CartRepoImpl(self.session)
        self.coupons = CouponRepoImpl(self.session)
        self.clients = ClientRepoImpl(self.session)
        self.admins = AdminRepoImpl(self.session)
        self.purchases = PurchaseRepoImpl(self.session)
        self.payment_attempts = PaymentAttemptRepoImpl(self.session)

        return await super().__aenter__()

    async def __aexit__(self, *args) -> None:
        try:
            await super().__aexit__(*args)
        finally:
            session_cm, self._session_cm, self.session = self._session_cm, None, None
            if session_cm is not None:
                await session_cm.__aexit__(*args)

    async def _commit(self) -> None:
        assert self.session is not None, 'commit() called outside of `async with uow`'
        await self.session.commit()

    async def rollback(self) -> None:
        if self.session is not None:
            await self.session.rollback()
