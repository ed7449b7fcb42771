"""
Timezone helpers

All timestamps are handled as aware UTC datetimes. Drivers that drop the
offset on the way back (sqlite) hand us naive values, which are UTC.
"""

from datetime import datetime, timezone
from typing import Optional, overload


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@overload
def ensure_utc(value: datetime) -> datetime: ...


@overload
def ensure_utc(value: None) -> None: ...


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
