"""Service layer entrypoints for domain logic."""

from .admin import AdminService
from .auth import AuthService
from .clients import ClientService
from .employees import EmployeeService
from .guests import GuestService
from .investments import InvestmentService
from .notifications import NotificationService
from .user_accounts import UserAccountService

__all__ = [
    "AdminService",
    "AuthService",
    "ClientService",
    "EmployeeService",
    "GuestService",
    "InvestmentService",
    "NotificationService",
    "UserAccountService",
]
