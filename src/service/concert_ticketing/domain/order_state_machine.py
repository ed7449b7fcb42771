"""
Order status transition table

Every status change of an Order, whatever the entry point (HTTP cancel,
payment initiation, webhook, sweeps), is validated here and nowhere else.

    PENDING          -> AWAITING_PAYMENT | CANCELLED | EXPIRED
    AWAITING_PAYMENT -> PAID | CANCELLED | EXPIRED
    PAID             -> REFUNDED
    CANCELLED, EXPIRED, REFUNDED are terminal
"""

from typing import Mapping

from src.service.concert_ticketing.domain.enum.order_status import OrderStatus


ORDER_TRANSITIONS: Mapping[OrderStatus, frozenset[OrderStatus]] = {
    OrderStatus.PENDING: frozenset(
        {OrderStatus.AWAITING_PAYMENT, OrderStatus.CANCELLED, OrderStatus.EXPIRED}
    ),
    OrderStatus.AWAITING_PAYMENT: frozenset(
        {OrderStatus.PAID, OrderStatus.CANCELLED, OrderStatus.EXPIRED}
    ),
    OrderStatus.PAID: frozenset({OrderStatus.REFUNDED}),
    OrderStatus.CANCELLED: frozenset(),
    OrderStatus.EXPIRED: frozenset(),
    OrderStatus.REFUNDED: frozenset(),
}

# Statuses whose expiresAt still matters: those with a legal step to EXPIRED
EXPIRABLE_STATUSES = frozenset(
    status for status, targets in ORDER_TRANSITIONS.items() if OrderStatus.EXPIRED in targets
)

# Intermediate statuses a multi-step transition path may pass through
_PASS_THROUGH = frozenset({OrderStatus.AWAITING_PAYMENT})


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in ORDER_TRANSITIONS[current]


def is_terminal(status: OrderStatus) -> bool:
    return not ORDER_TRANSITIONS[status]


def transition_path(current: OrderStatus, target: OrderStatus) -> list[OrderStatus] | None:
    """
    Chain of legal single-step transitions from current to target.

    Returns [] when already at target and None when target is unreachable.
    A multi-step path may only pass through AWAITING_PAYMENT: a settlement
    that overtakes our own AWAITING_PAYMENT commit resolves to
    [AWAITING_PAYMENT, PAID], while a refund for an unpaid order stays
    unreachable instead of walking through PAID.
    """
    if current == target:
        return []
    if can_transition(current, target):
        return [target]
    for step in sorted(ORDER_TRANSITIONS[current] & _PASS_THROUGH):
        if can_transition(step, target):
            return [step, target]
    return None
