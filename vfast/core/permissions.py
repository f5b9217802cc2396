"""
Role gate.

The authentication layer upstream identifies the user; the service layer
receives a ``Principal`` and checks it against the roles each action
allows before touching any row.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from vfast.core.exceptions import NotAuthorizedError
from vfast.models.enums import UserRole


@dataclass(frozen=True)
class Principal:
    """
    Represents an authenticated user in the service layer.

    Attributes:
        user_id: Unique identifier for the user
        role: User's workflow role
        department_id: Department of the user, if any
        name: Display name, used in log lines and notes
    """
    user_id: int
    role: UserRole
    department_id: Optional[int] = None
    name: Optional[str] = None

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        """Check if principal has any of the specified roles."""
        return self.role in set(roles)

    @classmethod
    def from_user(cls, user) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            department_id=user.department_id,
            name=user.name,
        )


def actor_has_role(principal: Principal, allowed_roles: Iterable[UserRole]) -> bool:
    """
    Check if principal's role is in the allowed set.

    Example:
        >>> if actor_has_role(principal, [UserRole.ADMIN, UserRole.VFAST]):
        ...     # Allow access
    """
    return principal.has_any_role(allowed_roles)


def require_role(
    principal: Principal,
    allowed_roles: Iterable[UserRole],
    *,
    error_message: Optional[str] = None,
) -> None:
    """
    Assert that principal has one of the allowed roles.

    Raises:
        NotAuthorizedError: If principal lacks required role
    """
    allowed = list(allowed_roles)
    if not actor_has_role(principal, allowed):
        roles_str = ", ".join(r.value for r in allowed)
        msg = error_message or (
            f"User {principal.user_id} with role '{principal.role.value}' "
            f"does not have one of required roles: {roles_str}"
        )
        raise NotAuthorizedError(
            msg,
            required_roles=[r.value for r in allowed],
            user_id=principal.user_id,
        )


__all__ = [
    "Principal",
    "actor_has_role",
    "require_role",
]
