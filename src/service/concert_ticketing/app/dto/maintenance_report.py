import attrs


@attrs.define
class MaintenanceReport:
    expired_orders: int = 0
    recovered_orders: int = 0
    unfulfilled_orders: int = 0
    synced_orders: int = 0
    sync_failures: int = 0
    # Names of sweeps that raised; the remaining sweeps still ran
    failed_sweeps: list[str] = attrs.field(factory=list)
