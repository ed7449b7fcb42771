from enum import StrEnum


class OrderStatus(StrEnum):
    PENDING = 'pending'
    AWAITING_PAYMENT = 'awaiting_payment'
    PAID = 'paid'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'
    REFUNDED = 'refunded'
