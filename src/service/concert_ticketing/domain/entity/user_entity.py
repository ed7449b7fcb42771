from enum import StrEnum
from typing import Optional

import attrs


class UserRole(StrEnum):
    BUYER = 'buyer'
    ADMIN = 'admin'


@attrs.define
class UserEntity:
    """Authenticated principal, rebuilt from the JWT on every request (no DB lookup)."""

    id: int
    email: str = ''
    name: str = ''
    role: UserRole = UserRole.BUYER
    is_active: bool = True
    phone: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
