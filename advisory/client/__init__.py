"""HTTP client for the advisory API."""

from .config import ClientSettings
from .helpers import build_query_string, extract_error_message, retry_request
from .http import ApiClient, ApiError, TokenStore, error_message_for_status, get_api_client
from .services import (
    AdminService,
    AuthService,
    ClientService,
    EmployeeService,
    GuestService,
    InvestmentService,
    UserService,
    get_admin_service,
    get_auth_service,
    get_client_service,
    get_employee_service,
    get_guest_service,
    get_investment_service,
    get_user_service,
)

__all__ = [
    "AdminService",
    "ApiClient",
    "ApiError",
    "AuthService",
    "ClientService",
    "ClientSettings",
    "EmployeeService",
    "GuestService",
    "InvestmentService",
    "TokenStore",
    "UserService",
    "build_query_string",
    "error_message_for_status",
    "extract_error_message",
    "get_admin_service",
    "get_api_client",
    "get_auth_service",
    "get_client_service",
    "get_employee_service",
    "get_guest_service",
    "get_investment_service",
    "get_user_service",
    "retry_request",
]
