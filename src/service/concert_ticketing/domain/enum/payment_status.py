from enum import StrEnum


class PaymentStatus(StrEnum):
    PENDING = 'pending'
    SETTLED = 'settled'
    FAILED = 'failed'
    CANCELLED = 'cancelled'
    EXPIRED = 'expired'


class PaymentProvider(StrEnum):
    MIDTRANS = 'midtrans'
