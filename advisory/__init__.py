"""Role-based financial advisory platform."""

__version__ = "0.1.0"
