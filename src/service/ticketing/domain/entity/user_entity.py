from enum import Enum

import attrs

from src.platform.exception.exceptions import ForbiddenError


class UserRole(str, Enum):
    CUSTOMER = 'customer'
    MANAGER = 'manager'
    ADMIN = 'admin'


@attrs.define
class UserEntity:
    """Caller identity decoded from the bearer token; users are managed elsewhere."""

    id: str
    role: UserRole = UserRole.CUSTOMER
    email: str = ''

    def ensure_role(self, *roles: UserRole) -> None:
        if self.role not in roles:
            allowed = ', '.join(role.value for role in roles)
            raise ForbiddenError(f'Requires role: {allowed}')

    def can_access_booking_of(self, owner_id: str) -> bool:
        return self.id == owner_id or self.role == UserRole.ADMIN
