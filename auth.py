"""Identity handed to the booking service by the authentication layer.

Login and password handling live outside this service. The gateway in
front of it authenticates the caller and forwards the identity in the
``X-User-Id`` and ``X-User-Role`` headers.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from fastapi import Header

from errors import AdminRequired, NotAuthenticated


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


@dataclass(frozen=True)
class UserIdentity:
    id: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


async def current_user(
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
) -> UserIdentity:
    if not x_user_id:
        raise NotAuthenticated()
    try:
        role = Role((x_user_role or Role.USER.value).lower())
    except ValueError:
        raise NotAuthenticated("Unknown role: %s" % x_user_role)
    return UserIdentity(id=x_user_id, role=role)


def require_admin(user: UserIdentity) -> UserIdentity:
    if not user.is_admin:
        raise AdminRequired()
    return user
