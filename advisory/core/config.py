"""Configuration loaded from the environment (and an optional ``.env`` file)."""
from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy.engine import make_url

# Load .env file from project root
env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

_FALSE_VALUES = {"0", "false", "False", "no", "off"}


@dataclass(slots=True)
class DatabaseSettings:
    """Connection details for the transactional database."""

    driver: str
    host: str
    port: int
    user: str
    password: str
    name: str
    url: str | None = None

    @property
    def sqlalchemy_url(self) -> str:
        """Build a SQLAlchemy compatible URL."""

        if self.url:
            return self.url
        if self.driver.startswith("sqlite"):
            return f"{self.driver}:///{self.name}"
        if self.password:
            credentials = f"{self.user}:{self.password}"
        else:
            credentials = self.user
        return f"{self.driver}://{credentials}@{self.host}:{self.port}/{self.name}"

    @property
    def masked_url(self) -> str:
        """Return the URL with the password hidden, for logging."""

        if self.url or self.driver.startswith("sqlite"):
            return make_url(self.sqlalchemy_url).render_as_string(hide_password=True)
        return "{driver}://{user}:{pwd}@{host}:{port}/{name}".format(
            driver=self.driver,
            user=self.user,
            pwd="***" if self.password else "",
            host=self.host,
            port=self.port,
            name=self.name,
        )


@dataclass(slots=True)
class AuthSettings:
    """Authentication settings loaded from environment variables."""

    secret_key: str
    algorithm: str
    access_token_expire_minutes: int
    refresh_token_expire_minutes: int
    bootstrap_admin_email: str | None = None
    bootstrap_admin_password: str | None = None
    enabled: bool = True


@dataclass(slots=True)
class LogSettings:
    """Options forwarded to :func:`advisory.core.log.init_logging`."""

    level: str = "INFO"
    log_dir: str | None = "logs"
    console: bool = True


@dataclass(slots=True)
class MarketDataSettings:
    """Which quote provider backs price lookups."""

    provider: str = "static"
    variation: float = 0.0


@dataclass(slots=True)
class Settings:
    """Top-level application configuration container."""

    database: DatabaseSettings
    auth: AuthSettings
    logging: LogSettings
    market_data: MarketDataSettings
    sqlalchemy_echo: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load configuration values from environment variables."""

        def _get_env(name: str, default: str) -> str:
            return os.getenv(name, default)

        db = DatabaseSettings(
            driver=_get_env("DB_DRIVER", "sqlite"),
            host=_get_env("DB_HOST", "127.0.0.1"),
            port=int(_get_env("DB_PORT", "3306")),
            user=_get_env("DB_USER", "advisory"),
            password=_get_env("DB_PASSWORD", "advisory"),
            name=_get_env("DB_NAME", "advisory.db"),
            url=_get_env("DATABASE_URL", "") or None,
        )
        echo_flag = _get_env("SQLALCHEMY_ECHO", "0")
        auth = AuthSettings(
            secret_key=_get_env("JWT_SECRET_KEY", "change-me-advisory-development-secret-key"),
            algorithm=_get_env("JWT_ALGORITHM", "HS256"),
            access_token_expire_minutes=int(_get_env("JWT_EXPIRE_MINUTES", "1440")),
            refresh_token_expire_minutes=int(_get_env("JWT_REFRESH_EXPIRE_MINUTES", "10080")),
            bootstrap_admin_email=_get_env("BOOTSTRAP_ADMIN_EMAIL", "") or None,
            bootstrap_admin_password=_get_env("BOOTSTRAP_ADMIN_PASSWORD", "") or None,
            enabled=_get_env("AUTH_ENABLED", "1") not in _FALSE_VALUES,
        )
        log_dir = _get_env("LOG_DIR", "logs")
        logging_settings = LogSettings(
            level=_get_env("LOG_LEVEL", "INFO"),
            log_dir=log_dir or None,
            console=_get_env("LOG_CONSOLE", "1") not in _FALSE_VALUES,
        )
        market_data = MarketDataSettings(
            provider=_get_env("MARKET_DATA_PROVIDER", "static").lower(),
            variation=float(_get_env("MARKET_DATA_VARIATION", "0")),
        )
        return cls(
            database=db,
            auth=auth,
            logging=logging_settings,
            market_data=market_data,
            sqlalchemy_echo=echo_flag not in _FALSE_VALUES,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return a cached ``Settings`` instance."""

    settings = Settings.from_env()

    # Import locally to avoid circular dependencies during module import time.
    from .logger import get_logger

    logger = get_logger(__name__)
    logger.debug(
        "Settings initialised",
        extra={
            "sqlalchemy_echo": settings.sqlalchemy_echo,
            "database": settings.database.masked_url,
            "auth": {
                "token_ttl": settings.auth.access_token_expire_minutes,
                "refresh_ttl": settings.auth.refresh_token_expire_minutes,
                "enabled": settings.auth.enabled,
            },
            "market_data": settings.market_data.provider,
        },
    )
    return settings
