"""FastAPI routers for the advisory API."""

from .admin import router as admin_router
from .auth import router as auth_router
from .clients import router as clients_router
from .employees import router as employees_router
from .guests import router as guests_router
from .health import router as health_router
from .investments import router as investments_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "clients_router",
    "employees_router",
    "guests_router",
    "health_router",
    "investments_router",
    "users_router",
]
