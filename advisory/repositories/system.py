"""Data access for the system configuration row."""
from __future__ import annotations

from sqlalchemy import select

from advisory.models import SYSTEM_CONFIG_KEY, SystemConfig

from .base import BaseRepository


class SystemConfigRepository(BaseRepository):
    def get(self) -> SystemConfig | None:
        statement = select(SystemConfig).where(SystemConfig.config_key == SYSTEM_CONFIG_KEY)
        return self._session.execute(statement).scalars().first()

    def get_or_create(self) -> SystemConfig:
        """Return the configuration row, creating it with defaults when missing."""

        config = self.get()
        if config is None:
            config = SystemConfig(config_key=SYSTEM_CONFIG_KEY)
            self._session.add(config)
            self._session.flush()
        return config
