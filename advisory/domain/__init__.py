"""Framework-free domain vocabulary: roles, permissions, statuses and calculations."""

from .investment_types import InvestmentType
from .permissions import PermissionType, permissions_for_role, role_has_permission
from .roles import Role
from .statuses import (
    ContactStatus,
    InvestmentStatus,
    RiskLevel,
    RiskProfile,
    TransactionStatus,
    TransactionType,
    UpgradeRequestStatus,
    risk_level_for_sector,
)

__all__ = [
    "ContactStatus",
    "InvestmentStatus",
    "InvestmentType",
    "PermissionType",
    "RiskLevel",
    "RiskProfile",
    "Role",
    "TransactionStatus",
    "TransactionType",
    "UpgradeRequestStatus",
    "permissions_for_role",
    "risk_level_for_sector",
    "role_has_permission",
]
