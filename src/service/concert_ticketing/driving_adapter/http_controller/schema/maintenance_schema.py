from typing import List

from pydantic import BaseModel


class MaintenanceReportResponse(BaseModel):
    expired_orders: int
    recovered_orders: int
    unfulfilled_orders: int
    synced_orders: int
    sync_failures: int
    failed_sweeps: List[str] = []

    class Config:
        json_schema_extra = {
            'example': {
                'expired_orders': 3,
                'recovered_orders': 1,
                'unfulfilled_orders': 0,
                'synced_orders': 2,
                'sync_failures': 0,
                'failed_sweeps': [],
            }
        }
