"""Pydantic schemas for request and response payloads."""

from .admin import (
    ActivityRead,
    AssignClientRequest,
    BulkOperationRequest,
    BulkOperationResponse,
    EmployeeCreate,
    MaintenanceRequest,
    MaintenanceResponse,
    PermissionChangeResponse,
    PermissionIdsRequest,
    RejectRequest,
    SystemConfigRead,
    SystemConfigUpdate,
    SystemStatsRead,
    TemplateCreate,
    TemplatePreviewRead,
    TemplatePreviewRequest,
    TemplateRead,
    TemplateUpdate,
)
from .auth import (
    ChangePasswordRequest,
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    TokenValidationResponse,
)
from .clients import (
    ClientDetail,
    InvestmentRequestCreate,
    PerformanceReportRead,
    PortfolioSummaryRead,
)
from .common import MessageCreate, MessageRead, MessageResponse, UserPage, UserSummary
from .employees import (
    ClientNotesUpdate,
    EmployeeDetail,
    EmployeeMetricsRead,
    InvestmentCreate,
    InvestmentStatusUpdate,
)
from .guests import (
    ContactRequestCreate,
    ContactRequestRead,
    EligibilityRead,
    GuestDetail,
    GuestProfileUpdate,
    ProjectionRequest,
    ProjectionResponse,
    UpgradeRequestCreate,
    UpgradeRequestRead,
    UpgradeSubmitted,
)
from .investments import (
    DividendRequest,
    InvestmentAnalyticsRead,
    InvestmentPerformanceRead,
    InvestmentRead,
    InvestmentUpdateRequest,
    PriceRefreshResponse,
    TransactionRead,
)
from .users import PasswordUpdateRequest, RoleUpdateRequest, UserDetail, UserUpdateRequest

__all__ = [
    "ActivityRead",
    "AssignClientRequest",
    "BulkOperationRequest",
    "BulkOperationResponse",
    "ChangePasswordRequest",
    "ClientDetail",
    "ClientNotesUpdate",
    "ContactRequestCreate",
    "ContactRequestRead",
    "DividendRequest",
    "EligibilityRead",
    "EmployeeCreate",
    "EmployeeDetail",
    "EmployeeMetricsRead",
    "GuestDetail",
    "GuestProfileUpdate",
    "InvestmentAnalyticsRead",
    "InvestmentCreate",
    "InvestmentPerformanceRead",
    "InvestmentRead",
    "InvestmentRequestCreate",
    "InvestmentStatusUpdate",
    "InvestmentUpdateRequest",
    "LoginRequest",
    "MaintenanceRequest",
    "MaintenanceResponse",
    "MessageCreate",
    "MessageRead",
    "MessageResponse",
    "PasswordUpdateRequest",
    "PerformanceReportRead",
    "PermissionChangeResponse",
    "PermissionIdsRequest",
    "PortfolioSummaryRead",
    "PriceRefreshResponse",
    "ProjectionRequest",
    "ProjectionResponse",
    "RefreshRequest",
    "RegisterRequest",
    "RejectRequest",
    "RoleUpdateRequest",
    "SystemConfigRead",
    "SystemConfigUpdate",
    "SystemStatsRead",
    "TemplateCreate",
    "TemplatePreviewRead",
    "TemplatePreviewRequest",
    "TemplateRead",
    "TemplateUpdate",
    "TokenResponse",
    "TokenValidationResponse",
    "TransactionRead",
    "UpgradeRequestCreate",
    "UpgradeRequestRead",
    "UpgradeSubmitted",
    "UserDetail",
    "UserPage",
    "UserSummary",
    "UserUpdateRequest",
]
