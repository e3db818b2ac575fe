"""Repositories wrapping SQLAlchemy queries per aggregate."""

from .base import BaseRepository
from .clients import ClientRepository, EmployeeRepository, GuestRepository
from .investments import InvestmentRepository
from .messaging import ContactRepository, MessageRepository, TemplateRepository
from .system import SystemConfigRepository
from .users import UserRepository

__all__ = [
    "BaseRepository",
    "ClientRepository",
    "ContactRepository",
    "EmployeeRepository",
    "GuestRepository",
    "InvestmentRepository",
    "MessageRepository",
    "SystemConfigRepository",
    "TemplateRepository",
    "UserRepository",
]
