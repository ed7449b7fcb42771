from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import attrs

from src.platform.exception.exceptions import InvalidInputError


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


@attrs.frozen
class PaymentStatusReport:
    """
    A provider's statement about one transaction.

    Comes either from a signed webhook notification or from a status pull;
    both feed the same settlement state machine.
    """

    order_ref: str
    transaction_status: str
    fraud_status: Optional[str] = None
    status_code: Optional[str] = None
    gross_amount: Optional[str] = None
    signature_key: Optional[str] = attrs.field(default=None, repr=False)
    transaction_id: Optional[str] = None
    payment_type: Optional[str] = None
    raw: dict[str, Any] = attrs.field(factory=dict, repr=False)

    @classmethod
    def from_payload(cls, payload: Any) -> 'PaymentStatusReport':
        if not isinstance(payload, dict):
            raise InvalidInputError('Notification body must be a JSON object')

        order_ref = _optional_str(payload.get('order_id'))
        transaction_status = _optional_str(payload.get('transaction_status'))
        if not order_ref:
            raise InvalidInputError('Notification is missing order_id')
        if not transaction_status:
            raise InvalidInputError('Notification is missing transaction_status')

        report = cls(
            order_ref=order_ref,
            transaction_status=transaction_status.lower(),
            fraud_status=_optional_str(payload.get('fraud_status')),
            status_code=_optional_str(payload.get('status_code')),
            gross_amount=_optional_str(payload.get('gross_amount')),
            signature_key=_optional_str(payload.get('signature_key')),
            transaction_id=_optional_str(payload.get('transaction_id')),
            payment_type=_optional_str(payload.get('payment_type')),
            raw=dict(payload),
        )
        # Fail on an unparseable amount before anything is written
        report.gross_amount_decimal()
        return report

    def gross_amount_decimal(self) -> Optional[Decimal]:
        if self.gross_amount is None:
            return None
        try:
            return Decimal(self.gross_amount)
        except InvalidOperation:
            raise InvalidInputError(f'Invalid gross_amount: {self.gross_amount}')

    def amount_matches(self, expected: int) -> bool:
        """An absent amount is not a mismatch; status pulls may omit it."""
        amount = self.gross_amount_decimal()
        return amount is None or amount == Decimal(expected)
