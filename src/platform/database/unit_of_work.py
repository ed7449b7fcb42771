"""
Unit of Work Pattern - 統一管理 database session 和 repositories

Architecture:
- UoW 負責 session 生命週期管理
- UoW 負責 commit/rollback
- Repositories 透過 UoW 取得 shared session
- Use cases 透過 UoW 協調多個 repositories

A UoW may be entered more than once; each `async with` block is one
transaction (payment initiation commits, calls the gateway with no
transaction open, then opens a second block).
"""

from __future__ import annotations

import abc
from typing import TYPE_CHECKING

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.platform.database.orm_db_setting import get_async_session


if TYPE_CHECKING:
    from src.service.concert_ticketing.app.interface.i_catalog_repo import ICatalogRepo
    from src.service.concert_ticketing.app.interface.i_inventory_ledger_repo import (
        IInventoryLedgerRepo,
    )
    from src.service.concert_ticketing.app.interface.i_order_repo import IOrderRepo
    from src.service.concert_ticketing.app.interface.i_payment_repo import IPaymentRepo
    from src.service.concert_ticketing.app.interface.i_ticket_repo import ITicketRepo


class AbstractUnitOfWork(abc.ABC):
    """
    Usage:
        async with uow:
            order = await uow.order_repo.create(order=...)
            await uow.commit()
    """

    catalog_repo: ICatalogRepo
    inventory_ledger_repo: IInventoryLedgerRepo
    order_repo: IOrderRepo
    payment_repo: IPaymentRepo
    ticket_repo: ITicketRepo

    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args) -> None:
        # No-op after a commit; discards the transaction otherwise
        await self.rollback()

    async def commit(self) -> None:
        await self._commit()

    @abc.abstractmethod
    async def _commit(self) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def rollback(self) -> None:
        raise NotImplementedError


class SqlAlchemyUnitOfWork(AbstractUnitOfWork):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def __aenter__(self) -> AbstractUnitOfWork:
        from src.service.concert_ticketing.driven_adapter.repo.catalog_repo_impl import (
            CatalogRepoImpl,
        )
        from src.service.concert_ticketing.driven_adapter.repo.inventory_ledger_repo_impl import (
            InventoryLedgerRepoImpl,
        )
        from src.service.concert_ticketing.driven_adapter.repo.order_repo_impl import (
            OrderRepoImpl,
        )
        from src.service.concert_ticketing.driven_adapter.repo.payment_repo_impl import (
            PaymentRepoImpl,
        )
        from src.service.concert_ticketing.driven_adapter.repo.ticket_repo_impl import (
            TicketRepoImpl,
        )

        # Create repositories with shared session
        self.catalog_repo = CatalogRepoImpl(session=self.session)
        self.inventory_ledger_repo = InventoryLedgerRepoImpl(session=self.session)
        self.order_repo = OrderRepoImpl(session=self.session)
        self.payment_repo = PaymentRepoImpl(session=self.session)
        self.ticket_repo = TicketRepoImpl(session=self.session)

        return await super().__aenter__()

    async def _commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()


def get_unit_of_work(
    session: AsyncSession = Depends(get_async_session),
) -> AbstractUnitOfWork:
    """
    FastAPI dependency for Unit of Work

    Usage:
        async def create_order(uow: AbstractUnitOfWork = Depends(get_unit_of_work)):
            async with uow:
                order = await uow.order_repo.create(...)
                await uow.commit()
    """
    return SqlAlchemyUnitOfWork(session)
