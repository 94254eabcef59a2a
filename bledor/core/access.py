# bledor/core/access.py
"""
Role gate shared by every mutating operation.

Operations take the acting identity as an explicit ``Actor`` argument
instead of reading it from the request, and each one checks it on its own.
"""
from dataclasses import dataclass
from typing import Optional

from bledor.core.errors import Unauthenticated, Forbidden
from bledor.models.users import Role


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


STAFF_ROLES = (Role.MANAGER, Role.OWNER)


def require_role(actor: Optional[Actor], *allowed_roles: Role) -> Actor:
    """Return the actor when it holds one of ``allowed_roles``.

    Raises ``Unauthenticated`` when there is no actor and ``Forbidden`` when
    its role is not allowed. No role gets a reduced version of the operation.
    """
    if actor is None:
        raise Unauthenticated()
    if allowed_roles and actor.role not in allowed_roles:
        raise Forbidden()
    return actor


def require_staff(actor: Optional[Actor]) -> Actor:
    return require_role(actor, *STAFF_ROLES)
