"""Logging for the API and scripts.

Records are pushed onto a queue by the calling thread and written by a
single :class:`~logging.handlers.QueueListener`, so request handlers never
block on console or file I/O. Output goes to a rich console on stderr and,
when a log directory is configured, to a file rotated at midnight.

The listener thread lives until :func:`shutdown_logging`; the FastAPI
lifespan calls it on shutdown.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from logging.handlers import QueueHandler, QueueListener, TimedRotatingFileHandler
from pathlib import Path
from queue import SimpleQueue
from threading import RLock

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install as install_rich_traceback

from advisory.core.config import LogSettings

from .context import ContextFilter, log_context
from .progress import progress_manager
from .timing import timeit

__all__ = [
    "LoggingConfig",
    "get_logger",
    "init_logging",
    "log_context",
    "progress_manager",
    "shutdown_logging",
    "timeit",
]

FILE_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(context)s%(message)s"
CONSOLE_FORMAT = "%(context)s%(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that only speak up at WARNING unless the app runs at DEBUG.
QUIET_LOGGERS = ("httpx", "httpcore", "multipart", "yfinance", "urllib3")


@dataclass(frozen=True)
class LoggingConfig:
    app_name: str = "advisory"
    level: int = logging.INFO
    log_dir: Path | None = Path("logs")
    console: bool = True
    backup_days: int = 14
    rich_tracebacks: bool = True

    @classmethod
    def from_settings(cls, settings: LogSettings | None = None, **overrides: object) -> "LoggingConfig":
        settings = settings or LogSettings()
        config = cls(
            level=_parse_level(settings.level),
            log_dir=Path(settings.log_dir) if settings.log_dir else None,
            console=settings.console,
        )
        if "level" in overrides:
            overrides["level"] = _parse_level(overrides["level"])  # type: ignore[arg-type]
        if overrides.get("log_dir") is not None:
            overrides["log_dir"] = Path(overrides["log_dir"])  # type: ignore[arg-type]
        return replace(config, **overrides)


def _parse_level(level: str | int) -> int:
    if isinstance(level, int):
        return level
    parsed = getattr(logging, str(level).upper(), None)
    return parsed if isinstance(parsed, int) else logging.INFO


class _LoggingState:
    """The active configuration plus the listener that drains the record queue."""

    def __init__(self) -> None:
        self.lock = RLock()
        self.config: LoggingConfig | None = None
        self.listener: QueueListener | None = None
        self.context_filter = ContextFilter()

    def _handlers(self, config: LoggingConfig) -> list[logging.Handler]:
        handlers: list[logging.Handler] = []
        console = Console(stderr=True)
        progress_manager.use_console(console)

        if config.console:
            console_handler = RichHandler(
                console=console,
                rich_tracebacks=config.rich_tracebacks,
                show_path=False,
                markup=False,
                log_time_format=DATE_FORMAT,
            )
            console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
            handlers.append(console_handler)

        if config.log_dir is not None:
            config.log_dir.mkdir(parents=True, exist_ok=True)
            file_handler = TimedRotatingFileHandler(
                config.log_dir / f"{config.app_name}.log",
                when="midnight",
                backupCount=config.backup_days,
                encoding="utf-8",
                delay=True,
            )
            file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=DATE_FORMAT))
            handlers.append(file_handler)

        for handler in handlers:
            handler.setLevel(config.level)
        return handlers

    def configure(self, config: LoggingConfig) -> None:
        with self.lock:
            if self.config == config:
                return
            self.stop()
            if config.rich_tracebacks:
                install_rich_traceback(show_locals=False)

            root = logging.getLogger()
            root.setLevel(logging.NOTSET)
            handlers = self._handlers(config)
            if handlers:
                records: SimpleQueue = SimpleQueue()
                queue_handler = QueueHandler(records)
                queue_handler.setLevel(config.level)
                # The filter runs on the calling thread, where the context variables are set.
                queue_handler.addFilter(self.context_filter)
                root.addHandler(queue_handler)
                self.listener = QueueListener(records, *handlers, respect_handler_level=True)
                self.listener.start()

            quiet_level = logging.DEBUG if config.level <= logging.DEBUG else logging.WARNING
            for name in QUIET_LOGGERS:
                logging.getLogger(name).setLevel(quiet_level)
            self.config = config

    def stop(self) -> None:
        with self.lock:
            if self.listener is not None:
                self.listener.stop()
                for handler in self.listener.handlers:
                    handler.close()
            self.listener = None
            self.config = None
            progress_manager.reset_console()
            root = logging.getLogger()
            for handler in list(root.handlers):
                root.removeHandler(handler)


_state = _LoggingState()


def init_logging(settings: LogSettings | None = None, **overrides: object) -> LoggingConfig:
    """Configure logging from ``settings``; keyword overrides win over the settings.

    Calling again with the same resulting configuration is a no-op.
    """

    config = LoggingConfig.from_settings(settings, **overrides)
    _state.configure(config)
    return config


def shutdown_logging() -> None:
    """Flush pending records, stop the listener thread and detach the handlers."""

    _state.stop()


def get_logger(name: str | None = None) -> logging.Logger:
    with _state.lock:
        if _state.config is None:
            init_logging()
        return logging.getLogger(name or _state.config.app_name)
