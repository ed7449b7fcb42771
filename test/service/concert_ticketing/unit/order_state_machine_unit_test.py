import pytest

from src.service.concert_ticketing.domain.enum.order_status import OrderStatus
from src.service.concert_ticketing.domain.order_state_machine import (
    EXPIRABLE_STATUSES,
    ORDER_TRANSITIONS,
    can_transition,
    is_terminal,
    transition_path,
)


class TestTransitionTable:
    @pytest.mark.parametrize(
        ('current', 'target'),
        [
            (OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT),
            (OrderStatus.PENDING, OrderStatus.CANCELLED),
            (OrderStatus.PENDING, OrderStatus.EXPIRED),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.PAID),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.CANCELLED),
            (OrderStatus.AWAITING_PAYMENT, OrderStatus.EXPIRED),
            (OrderStatus.PAID, OrderStatus.REFUNDED),
        ],
    )
    def test_legal_transitions(self, current: OrderStatus, target: OrderStatus) -> None:
        assert can_transition(current, target)

    def test_exactly_seven_legal_transitions(self) -> None:
        assert sum(len(targets) for targets in ORDER_TRANSITIONS.values()) == 7

    @pytest.mark.parametrize(
        ('current', 'target'),
        [
            (OrderStatus.PAID, OrderStatus.AWAITING_PAYMENT),
            (OrderStatus.PAID, OrderStatus.CANCELLED),
            (OrderStatus.PENDING, OrderStatus.PAID),
            (OrderStatus.EXPIRED, OrderStatus.PAID),
            (OrderStatus.CANCELLED, OrderStatus.PENDING),
        ],
    )
    def test_illegal_transitions(self, current: OrderStatus, target: OrderStatus) -> None:
        assert not can_transition(current, target)

    def test_terminal_statuses(self) -> None:
        assert {status for status in OrderStatus if is_terminal(status)} == {
            OrderStatus.CANCELLED,
            OrderStatus.EXPIRED,
            OrderStatus.REFUNDED,
        }

    def test_expirable_statuses_follow_the_table(self) -> None:
        """The bulk expiry sweep filters on this set instead of calling transition_to"""
        assert EXPIRABLE_STATUSES == {OrderStatus.PENDING, OrderStatus.AWAITING_PAYMENT}
        assert all(can_transition(status, OrderStatus.EXPIRED) for status in EXPIRABLE_STATUSES)


class TestTransitionPath:
    def test_same_status_is_empty_path(self) -> None:
        assert transition_path(OrderStatus.PAID, OrderStatus.PAID) == []

    def test_direct_step(self) -> None:
        assert transition_path(OrderStatus.AWAITING_PAYMENT, OrderStatus.PAID) == [
            OrderStatus.PAID
        ]

    def test_settlement_overtaking_initiation_walks_through_awaiting_payment(self) -> None:
        """
        Given: 訂單仍是 PENDING (initiation 尚未 commit)
        When: settlement 先到
        Then: PENDING -> AWAITING_PAYMENT -> PAID
        """
        assert transition_path(OrderStatus.PENDING, OrderStatus.PAID) == [
            OrderStatus.AWAITING_PAYMENT,
            OrderStatus.PAID,
        ]

    def test_refund_of_unpaid_order_is_unreachable(self) -> None:
        assert transition_path(OrderStatus.AWAITING_PAYMENT, OrderStatus.REFUNDED) is None
        assert transition_path(OrderStatus.PENDING, OrderStatus.REFUNDED) is None

    def test_terminal_never_regresses(self) -> None:
        assert transition_path(OrderStatus.PAID, OrderStatus.AWAITING_PAYMENT) is None
        assert transition_path(OrderStatus.PAID, OrderStatus.CANCELLED) is None
        assert transition_path(OrderStatus.EXPIRED, OrderStatus.PAID) is None
