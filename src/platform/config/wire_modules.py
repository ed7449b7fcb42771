"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.concert_ticketing.app.command import (
    handle_payment_notification_use_case,
    initiate_payment_use_case,
    run_maintenance_use_case,
    sync_payment_status_use_case,
)
from src.service.concert_ticketing.driving_adapter.http_controller.auth import role_auth


WIRE_MODULES: list[ModuleType] = [
    initiate_payment_use_case,
    handle_payment_notification_use_case,
    sync_payment_status_use_case,
    run_maintenance_use_case,
    role_auth,
]
