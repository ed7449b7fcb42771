from datetime import datetime
from typing import Optional

import attrs


@attrs.define
class Concert:
    id: int
    title: str
    venue: str = ''
    starts_at: Optional[datetime] = None


@attrs.define
class TicketType:
    """
    Catalog entry plus its inventory ledger counters.

    Invariant: 0 <= quota_sold <= quota_total. quota_sold only moves through
    InventoryLedgerRepo.increment_sold.
    """

    id: int
    concert_id: int
    name: str
    price: int  # smallest currency unit (IDR has no minor unit)
    quota_total: int
    quota_sold: int = 0
    sales_start_at: Optional[datetime] = None
    sales_end_at: Optional[datetime] = None

    @property
    def remaining(self) -> int:
        return max(self.quota_total - self.quota_sold, 0)

    def has_capacity_for(self, qty: int) -> bool:
        return self.remaining >= qty

    def is_on_sale(self, now: datetime) -> bool:
        """Sales window is [sales_start_at, sales_end_at); an open end means unbounded."""
        if self.sales_start_at is not None and now < self.sales_start_at:
            return False
        if self.sales_end_at is not None and now >= self.sales_end_at:
            return False
        return True
