from enum import StrEnum
from typing import Optional

import attrs

from eventbook.platform.exception.exceptions import AuthenticationError


class UserRole(StrEnum):
    USER = 'user'
    ADMIN = 'admin'


@attrs.define
class UserEntity:
    """Authenticated caller as asserted by the identity provider. Users are not stored here."""

    id: int
    role: UserRole = UserRole.USER
    email: Optional[str] = None
    name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def validate_exists(self) -> None:
        if not self.id:
            raise AuthenticationError('Not authenticated')
