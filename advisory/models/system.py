"""Application-wide settings editable by administrators."""
from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from advisory.models.base import ID_TYPE, Base, utcnow

SYSTEM_CONFIG_KEY = "SYSTEM_CONFIG"

# Inclusive bounds checked by SystemConfig.is_valid.
CONFIG_RANGES = {
    "session_timeout": (5, 480),
    "password_min_length": (6, 128),
    "max_login_attempts": (3, 10),
    "login_lockout_minutes": (5, 1440),
}


class SystemConfig(Base):
    __tablename__ = "system_config"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    config_key: Mapped[str] = mapped_column(
        String(64), unique=True, nullable=False, default=SYSTEM_CONFIG_KEY
    )
    config_value: Mapped[str | None] = mapped_column(String(500))
    maintenance_mode: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    maintenance_message: Mapped[str | None] = mapped_column(String(500))
    max_upload_size: Mapped[int] = mapped_column(BigInteger, nullable=False, default=10485760)
    session_timeout: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    password_min_length: Mapped[int] = mapped_column(Integer, nullable=False, default=8)
    password_require_special_char: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_require_number: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_require_uppercase: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    password_expiry_days: Mapped[int] = mapped_column(Integer, nullable=False, default=90)
    max_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=5)
    login_lockout_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    two_factor_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    email_notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    sms_notifications_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    backup_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    backup_frequency: Mapped[str] = mapped_column(String(16), nullable=False, default="DAILY")
    backup_retention_days: Mapped[int] = mapped_column(Integer, nullable=False, default=30)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
    last_modified: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, default=utcnow, onupdate=utcnow
    )
    modified_by: Mapped[str | None] = mapped_column(String(255))

    def invalid_fields(self) -> list[str]:
        """Names of settings outside their allowed range."""

        bad = []
        for name, (low, high) in CONFIG_RANGES.items():
            value = getattr(self, name)
            if value is None or not low <= value <= high:
                bad.append(name)
        return bad

    def is_valid(self) -> bool:
        return not self.invalid_fields()
