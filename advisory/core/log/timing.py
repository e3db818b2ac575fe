"""Timing helpers to log duration and throughput of operations."""
from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from time import perf_counter
from typing import Any, Iterator, Optional

from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session


class DatabaseCallTracker:
    """Count SQL statements issued on a session's engine while attached."""

    def __init__(self) -> None:
        self.call_count = 0
        self._engine: Engine | None = None

    def _on_execute(self, *_args: Any, **_kwargs: Any) -> None:
        self.call_count += 1

    def attach(self, session: Session) -> None:
        engine = session.get_bind()
        if isinstance(engine, Engine):
            event.listen(engine, "before_cursor_execute", self._on_execute)
            self._engine = engine

    def detach(self) -> None:
        if self._engine is not None:
            event.remove(self._engine, "before_cursor_execute", self._on_execute)
            self._engine = None


@dataclass
class _Timer:
    label: str
    logger: logging.Logger
    level: int
    unit: str
    expected_total: Optional[int]
    count: int = 0
    start: float = field(default_factory=perf_counter)
    db_call_tracker: Optional[DatabaseCallTracker] = None

    def add(self, amount: int = 1) -> None:
        self.count += amount

    def set_total(self, total: int) -> None:
        self.expected_total = total

    def _resolved_total(self) -> Optional[int]:
        return self.expected_total if self.expected_total is not None else self.count

    @property
    def db_calls(self) -> int:
        return self.db_call_tracker.call_count if self.db_call_tracker else 0

    @property
    def elapsed(self) -> float:
        return perf_counter() - self.start

    def finish(self, success: bool = True) -> None:
        elapsed = self.elapsed
        total = self._resolved_total()
        db_calls = self.db_calls

        if success:
            message = f"{self.label} completed in {elapsed:.2f}s"
            if total:
                message += f" ({total:,} {self.unit}"
                if elapsed > 0:
                    message += f" @ {total / elapsed:,.0f} {self.unit}/s"
                message += ")"
            if db_calls:
                message += f" ({db_calls:,} DB calls)"
            self.logger.log(self.level, message)
        else:
            fail_message = f"{self.label} failed after {elapsed:.2f}s"
            if total:
                fail_message += f" ({total:,} {self.unit})"
            if db_calls:
                fail_message += f" ({db_calls:,} DB calls)"
            self.logger.error(fail_message)


@contextmanager
def timeit(
    label: str,
    *,
    logger: Optional[logging.Logger] = None,
    level: int = logging.INFO,
    unit: str = "items",
    total: Optional[int] = None,
    session: Optional[Session] = None,
) -> Iterator[_Timer]:
    """Time the enclosed block and log the outcome.

    Args:
        label: Description of the operation being timed
        logger: Logger instance to use (defaults to "advisory.timer")
        level: Logging level for the timing message
        unit: Unit for throughput calculation (e.g., "items", "rows")
        total: Expected total count for throughput calculation
        session: When given, SQL statements issued through its engine are counted
    """
    log = logger or logging.getLogger("advisory.timer")
    tracker = DatabaseCallTracker() if session is not None else None

    timer = _Timer(
        label=label,
        logger=log,
        level=level,
        unit=unit,
        expected_total=total,
        db_call_tracker=tracker,
    )
    if tracker is not None and session is not None:
        tracker.attach(session)

    try:
        yield timer
    except Exception:
        timer.finish(success=False)
        raise
    else:
        timer.finish(success=True)
    finally:
        if tracker is not None:
            tracker.detach()
