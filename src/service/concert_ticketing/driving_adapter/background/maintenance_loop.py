import anyio
from anyio.abc import TaskGroup

from src.platform.database.orm_db_setting import Database
from src.platform.database.unit_of_work import SqlAlchemyUnitOfWork
from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.command.run_maintenance_use_case import (
    RunMaintenanceUseCase,
)
from src.service.concert_ticketing.app.dto.maintenance_report import MaintenanceReport
from src.service.concert_ticketing.app.interface.i_payment_gateway import IPaymentGateway
from src.service.concert_ticketing.app.service.settlement_reconciler import (
    SettlementReconciler,
)
from src.service.concert_ticketing.app.service.ticket_issuer import TicketIssuer


class MaintenanceLoop:
    """Run the recovery sweeps every interval for the lifetime of the app"""

    def __init__(
        self,
        *,
        database: Database,
        payment_gateway: IPaymentGateway,
        settlement_reconciler: SettlementReconciler,
        ticket_issuer: TicketIssuer,
        interval_seconds: float = 60.0,
    ) -> None:
        self.database = database
        self.payment_gateway = payment_gateway
        self.settlement_reconciler = settlement_reconciler
        self.ticket_issuer = ticket_issuer
        self._interval = interval_seconds

    async def start(self, *, task_group: TaskGroup) -> None:
        task_group.start_soon(self._run_loop)  # pyrefly: ignore[bad-argument-type]
        Logger.base.info(f'🧹 [Maintenance] Started, every {self._interval}s')

    async def run_once(self) -> MaintenanceReport:
        # Fresh session per run; a broken connection never outlives one sweep
        async with self.database.session() as session:
            use_case = RunMaintenanceUseCase(
                uow=SqlAlchemyUnitOfWork(session),
                payment_gateway=self.payment_gateway,
                settlement_reconciler=self.settlement_reconciler,
                ticket_issuer=self.ticket_issuer,
            )
            return await use_case.execute()

    async def _run_loop(self) -> None:
        while True:
            await anyio.sleep(self._interval)
            try:
                await self.run_once()
            except Exception as e:
                Logger.base.opt(exception=e).error(f'❌ [Maintenance] Sweep failed: {e}')
