from enum import StrEnum


class SettlementOutcome(StrEnum):
    """How a settlement report (webhook or status pull) was handled. All of them are acked."""

    APPLIED = 'applied'
    DUPLICATE = 'duplicate'
    IGNORED = 'ignored'
    ORDER_NOT_FOUND = 'order_not_found'
    UNRECOGNIZED_STATUS = 'unrecognized_status'
