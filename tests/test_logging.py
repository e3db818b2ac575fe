import logging
from logging.handlers import QueueHandler
from pathlib import Path

import pytest

from advisory.core.config import LogSettings
from advisory.core.log import LoggingConfig, init_logging, log_context, shutdown_logging


@pytest.fixture()
def stop_logging():
    yield
    shutdown_logging()


def _queue_handlers() -> list[logging.Handler]:
    return [handler for handler in logging.getLogger().handlers if isinstance(handler, QueueHandler)]


def test_config_from_settings_and_overrides() -> None:
    config = LoggingConfig.from_settings(LogSettings(level="bogus", log_dir=None, console=False))

    assert config.level == logging.INFO
    assert config.log_dir is None
    assert not config.console

    override = LoggingConfig.from_settings(LogSettings(), level="debug", log_dir="var/log", app_name="jobs")
    assert override.level == logging.DEBUG
    assert override.log_dir == Path("var/log")
    assert override.app_name == "jobs"


def test_records_reach_the_log_file_with_context(tmp_path, stop_logging) -> None:
    settings = LogSettings(level="DEBUG", log_dir=str(tmp_path), console=False)
    init_logging(settings, app_name="audit")
    init_logging(settings, app_name="audit")
    assert len(_queue_handlers()) == 1

    with log_context.scope(request_id="req-1"):
        logging.getLogger("advisory.audit").info("Client onboarded")
    shutdown_logging()

    contents = (tmp_path / "audit.log").read_text(encoding="utf-8")
    assert "INFO" in contents
    assert "request_id=req-1 Client onboarded" in contents
    assert _queue_handlers() == []


def test_reconfiguring_replaces_the_listener(tmp_path, stop_logging) -> None:
    init_logging(LogSettings(log_dir=str(tmp_path / "first"), console=False))
    init_logging(LogSettings(log_dir=str(tmp_path / "second"), console=False))

    logging.getLogger("advisory.audit").warning("Second destination")
    shutdown_logging()

    assert not (tmp_path / "first" / "advisory.log").exists()
    assert "Second destination" in (tmp_path / "second" / "advisory.log").read_text(encoding="utf-8")
