"""
Caller roles.

Authentication and session management live outside the ledger.  The kernel
only needs the current user's role, supplied through a RoleProvider, and
only when a caller asks LedgerService.require_role to gate an operation.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Protocol


class UserRole(str, Enum):
    ADMIN = "Admin"
    ACCOUNTANT = "Accountant"
    EMPLOYEE = "Employee"


# Roles allowed onto the debt and transaction screens
LEDGER_ROLES: tuple[UserRole, ...] = (UserRole.ADMIN, UserRole.ACCOUNTANT)


class RoleProvider(Protocol):
    def current_user_role(self) -> UserRole: ...


@dataclass(frozen=True)
class StaticRoleProvider:
    """RoleProvider returning a fixed role (scripts and tests)."""

    role: UserRole

    def current_user_role(self) -> UserRole:
        return self.role
