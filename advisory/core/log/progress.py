"""Rich progress bars that share the logging console."""
from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, TypeVar

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

T = TypeVar("T")


@dataclass
class ProgressTask:
    progress: Progress
    task_id: TaskID

    def advance(self, amount: float = 1.0) -> None:
        self.progress.advance(self.task_id, amount)

    def describe(self, description: str) -> None:
        self.progress.update(self.task_id, description=description)


class ProgressManager:
    """Create progress bars bound to the console used by ``RichHandler``."""

    def __init__(self) -> None:
        self._console: Console = Console()

    def use_console(self, console: Console) -> None:
        self._console = console

    def reset_console(self) -> None:
        self._console = Console()

    @contextmanager
    def task(self, description: str, *, total: Optional[float] = None) -> Iterator[ProgressTask]:
        progress = Progress(
            TextColumn("[bold blue]{task.description}[/]"),
            BarColumn(bar_width=None),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        with progress:
            yield ProgressTask(progress, progress.add_task(description, total=total))

    def track(self, items: Iterable[T], *, description: str, total: Optional[int] = None) -> Iterator[T]:
        with self.task(description, total=total) as task:
            for item in items:
                yield item
                task.advance()


progress_manager = ProgressManager()
