"""Permission catalogue and the default grant set for each role."""
from __future__ import annotations

from enum import Enum

from .roles import Role


class PermissionType(str, Enum):
    """Capability tag attached to a user account."""

    VIEW_ACCOUNT = "VIEW_ACCOUNT"
    VIEW_ACCOUNTS = "VIEW_ACCOUNTS"
    EDIT_MY_DETAILS = "EDIT_MY_DETAILS"
    UPDATE_MY_PASSWORD = "UPDATE_MY_PASSWORD"
    CREATE_USER = "CREATE_USER"
    EDIT_USER = "EDIT_USER"
    DELETE_USER = "DELETE_USER"
    EDIT_EMPLOYEE = "EDIT_EMPLOYEE"
    CREATE_EMPLOYEE = "CREATE_EMPLOYEE"
    UPDATE_OTHER_PASSWORD = "UPDATE_OTHER_PASSWORD"
    CREATE_CLIENT = "CREATE_CLIENT"
    EDIT_CLIENT = "EDIT_CLIENT"
    VIEW_CLIENT = "VIEW_CLIENT"
    VIEW_CLIENTS = "VIEW_CLIENTS"
    ASSIGN_CLIENT = "ASSIGN_CLIENT"
    CREATE_INVESTMENT = "CREATE_INVESTMENT"
    EDIT_INVESTMENT = "EDIT_INVESTMENT"
    VIEW_EMPLOYEES = "VIEW_EMPLOYEES"
    VIEW_EMPLOYEE = "VIEW_EMPLOYEE"
    VIEW_INVESTMENT = "VIEW_INVESTMENT"
    MESSAGE_PARTNER = "MESSAGE_PARTNER"
    REQUEST_CLIENT_ACCOUNT = "REQUEST_CLIENT_ACCOUNT"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    PermissionType.VIEW_ACCOUNT: "View the details of your own user account.",
    PermissionType.VIEW_ACCOUNTS: "View all user accounts and their details.",
    PermissionType.EDIT_MY_DETAILS: "Edit the details of your own user account.",
    PermissionType.UPDATE_MY_PASSWORD: "Update the password of your own user account.",
    PermissionType.CREATE_USER: "Create a new user account.",
    PermissionType.EDIT_USER: "Edit the details of a specific user account.",
    PermissionType.DELETE_USER: "Remove a user account from the system.",
    PermissionType.EDIT_EMPLOYEE: "Edit the details of a specific employee.",
    PermissionType.CREATE_EMPLOYEE: "Create a new employee account.",
    PermissionType.UPDATE_OTHER_PASSWORD: "Update the password of another user account.",
    PermissionType.CREATE_CLIENT: "Create a client account by upgrading a guest account.",
    PermissionType.EDIT_CLIENT: "Edit the details of an existing client.",
    PermissionType.VIEW_CLIENT: "View the details of a specific client.",
    PermissionType.VIEW_CLIENTS: "List all clients.",
    PermissionType.ASSIGN_CLIENT: "Assign a client to an employee partner.",
    PermissionType.CREATE_INVESTMENT: "Create a new investment for a client.",
    PermissionType.EDIT_INVESTMENT: "Edit an existing investment of a client.",
    PermissionType.VIEW_EMPLOYEES: "List all employees.",
    PermissionType.VIEW_EMPLOYEE: "View the details of a specific employee.",
    PermissionType.VIEW_INVESTMENT: "View the details of your own investments.",
    PermissionType.MESSAGE_PARTNER: "Exchange messages with your assigned partner.",
    PermissionType.REQUEST_CLIENT_ACCOUNT: "Request an upgrade to client status with the firm.",
}

_BASE = frozenset(
    {
        PermissionType.VIEW_ACCOUNT,
        PermissionType.EDIT_MY_DETAILS,
        PermissionType.UPDATE_MY_PASSWORD,
        PermissionType.CREATE_USER,
    }
)

_ROLE_PERMISSIONS: dict[Role, frozenset[PermissionType]] = {
    Role.GUEST: _BASE | {PermissionType.REQUEST_CLIENT_ACCOUNT},
    Role.CLIENT: _BASE | {PermissionType.VIEW_INVESTMENT, PermissionType.MESSAGE_PARTNER},
    Role.EMPLOYEE: _BASE
    | {
        PermissionType.CREATE_INVESTMENT,
        PermissionType.EDIT_INVESTMENT,
        PermissionType.CREATE_CLIENT,
        PermissionType.EDIT_CLIENT,
        PermissionType.VIEW_CLIENT,
        PermissionType.VIEW_CLIENTS,
        PermissionType.ASSIGN_CLIENT,
        PermissionType.VIEW_EMPLOYEE,
        PermissionType.VIEW_EMPLOYEES,
    },
    Role.ADMIN: frozenset(PermissionType),
}


def permissions_for_role(role: Role) -> frozenset[PermissionType]:
    """Return the permissions granted by default to ``role``."""

    return _ROLE_PERMISSIONS[role]


def role_has_permission(role: Role, permission: PermissionType) -> bool:
    return permission in _ROLE_PERMISSIONS[role]


__all__ = ["PermissionType", "permissions_for_role", "role_has_permission"]
