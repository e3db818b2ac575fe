"""Settings for talking to a running advisory API."""
from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_API_URL = "http://localhost:8000/api"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(slots=True)
class ClientSettings:
    """Base URL and timeout used by :class:`~advisory.client.http.ApiClient`."""

    base_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls) -> "ClientSettings":
        base_url = os.getenv("ADVISORY_API_URL", DEFAULT_API_URL).rstrip("/")
        try:
            timeout = float(os.getenv("ADVISORY_API_TIMEOUT", str(DEFAULT_TIMEOUT_SECONDS)))
        except ValueError:
            timeout = DEFAULT_TIMEOUT_SECONDS
        return cls(base_url=base_url, timeout=timeout)


__all__ = ["ClientSettings", "DEFAULT_API_URL", "DEFAULT_TIMEOUT_SECONDS"]
