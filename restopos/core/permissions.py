"""
Roles, pages and the static role → page permission table.
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

from restopos.core.exceptions import ValidationError


class Role(str, Enum):
    OWNER = "owner"
    CHEF = "chef"
    STAFF = "staff"
    # Customers never log in; the role only exists in the permission table.
    CUSTOMER = "customer"


class Page(str, Enum):
    HOME = "home"
    SELECT_TABLE = "select-table"
    KDS = "kds"
    ACCOUNTING = "accounting"
    MENU_MANAGEMENT = "menu-management"
    INGREDIENTS = "ingredients"
    USERS = "users"
    CUSTOMERS = "customers"


# Roles an account row may carry.
LOGIN_ROLES = frozenset({Role.OWNER, Role.CHEF, Role.STAFF})

_OPERATIONAL = frozenset({Page.HOME, Page.SELECT_TABLE, Page.KDS})

ROLE_PERMISSIONS = MappingProxyType(
    {
        Role.OWNER: frozenset(Page),
        Role.CHEF: _OPERATIONAL,
        Role.STAFF: _OPERATIONAL,
        Role.CUSTOMER: frozenset({Page.HOME}),
    }
)


def parse_role(value: str) -> Role:
    """Map a raw role string to a Role, rejecting anything unrecognised."""
    try:
        return Role(value)
    except ValueError:
        raise ValidationError(f"Unknown role: {value!r}") from None


def pages_for(role: Role | str) -> frozenset[Page]:
    try:
        return ROLE_PERMISSIONS[Role(role)]
    except ValueError:
        return frozenset()


def can_access(role: Role | str, page: Page | str) -> bool:
    """True iff ``page`` is in the permission set of ``role``.

    Unknown roles and unknown pages are never allowed.
    """
    try:
        page = Page(page)
    except ValueError:
        return False
    return page in pages_for(role)
