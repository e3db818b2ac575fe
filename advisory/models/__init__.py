"""Database models for the advisory domain."""
from __future__ import annotations

from .base import Base, utcnow
from .accounts import Permission, UserAccount, UserActivityLog, user_account_permission
from .profiles import Admin, Client, Employee, Guest, GuestUpgradeRequest
from .portfolio import Portfolio, StockHolding
from .investments import Investment
from .transactions import Transaction
from .messaging import ContactRequest, Message, Notification, NotificationTemplate
from .system import SYSTEM_CONFIG_KEY, SystemConfig

__all__ = [
    "Base",
    "utcnow",
    "Permission",
    "UserAccount",
    "UserActivityLog",
    "user_account_permission",
    "Admin",
    "Client",
    "Employee",
    "Guest",
    "GuestUpgradeRequest",
    "Portfolio",
    "StockHolding",
    "Investment",
    "Transaction",
    "ContactRequest",
    "Message",
    "Notification",
    "NotificationTemplate",
    "SYSTEM_CONFIG_KEY",
    "SystemConfig",
]
