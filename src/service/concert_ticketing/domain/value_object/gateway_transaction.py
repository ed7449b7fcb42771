from typing import List, Optional

import attrs


@attrs.frozen
class GatewayLineItem:
    id: str
    price: int
    quantity: int
    name: str


@attrs.frozen
class GatewayTransactionRequest:
    """Provider-neutral payload for opening a payment transaction."""

    order_ref: str
    gross_amount: int
    items: List[GatewayLineItem]
    customer_name: str
    customer_email: str
    expiry_minutes: int
    customer_phone: Optional[str] = None


@attrs.frozen
class GatewayTransaction:
    token: str
    redirect_url: Optional[str] = None
