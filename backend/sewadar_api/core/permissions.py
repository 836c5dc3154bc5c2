"""
Role matrix for the three permission tiers.

Routes never compare role strings directly; they declare one of the
unions below and the authorization gate checks membership.
"""

from enum import Enum
from typing import FrozenSet, Iterable, Union


class UserRole(str, Enum):
    """Closed role enumeration, persisted by value"""
    ADMINISTRATOR = "ADMIN"
    EDITOR = "EDITOR"
    VIEWER = "VIEWER"

    @classmethod
    def parse(cls, value: Union[str, "UserRole"]) -> "UserRole":
        """Coerce a stored or claimed role value, raising ValueError if unknown."""
        if isinstance(value, cls):
            return value
        return cls(str(value).upper())


RoleSet = FrozenSet[UserRole]

CAN_EDIT: RoleSet = frozenset({UserRole.ADMINISTRATOR, UserRole.EDITOR})
IS_ADMIN: RoleSet = frozenset({UserRole.ADMINISTRATOR})
ANY_ROLE: RoleSet = frozenset(UserRole)


def role_set(roles: Iterable[Union[str, UserRole]]) -> RoleSet:
    return frozenset(UserRole.parse(role) for role in roles)


def has_role(role: Union[str, UserRole], allowed: RoleSet) -> bool:
    try:
        return UserRole.parse(role) in allowed
    except ValueError:
        return False


def can_edit(role: Union[str, UserRole]) -> bool:
    return has_role(role, CAN_EDIT)


def is_admin(role: Union[str, UserRole]) -> bool:
    return has_role(role, IS_ADMIN)
