from fastapi import APIRouter, Depends

from src.platform.logging.loguru_io import Logger
from src.service.concert_ticketing.app.command.run_maintenance_use_case import (
    RunMaintenanceUseCase,
)
from src.service.concert_ticketing.domain.entity.user_entity import UserEntity
from src.service.concert_ticketing.driving_adapter.http_controller.auth.role_auth import (
    require_admin,
)
from src.service.concert_ticketing.driving_adapter.http_controller.schema.maintenance_schema import (
    MaintenanceReportResponse,
)


router = APIRouter()


@router.post('/reconcile')
@Logger.io
async def run_maintenance(
    current_user: UserEntity = Depends(require_admin),
    use_case: RunMaintenanceUseCase = Depends(RunMaintenanceUseCase.depends),
) -> MaintenanceReportResponse:
    """Run the recovery sweeps now instead of waiting for the background loop."""
    report = await use_case.execute()
    return MaintenanceReportResponse(
        expired_orders=report.expired_orders,
        recovered_orders=report.recovered_orders,
        unfulfilled_orders=report.unfulfilled_orders,
        synced_orders=report.synced_orders,
        sync_failures=report.sync_failures,
        failed_sweeps=report.failed_sweeps,
    )
