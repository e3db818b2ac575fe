"""Shared helpers for pagination and query parameter parsing."""
from __future__ import annotations

from dataclasses import dataclass, field
from math import ceil
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")

DEFAULT_PAGE_SIZE_OPTIONS: tuple[int, ...] = (10, 20, 50, 100)


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a larger result set."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE_OPTIONS[1]

    @property
    def total_pages(self) -> int:
        if self.total == 0:
            return 1
        return ceil(self.total / self.page_size)

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def parse_positive_int(value: str | int | None, *, default: int) -> int:
    """Parse a positive integer; invalid or non-positive values fall back to ``default``."""

    try:
        parsed = int(value) if value is not None else default
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def normalize_page_size(
    value: str | int | None,
    *,
    options: Sequence[int] | None = None,
) -> int:
    """Return the closest allowed page size for the requested value."""

    allowed: Sequence[int] = options or DEFAULT_PAGE_SIZE_OPTIONS
    try:
        parsed = int(value) if value is not None else allowed[1]
    except (TypeError, ValueError):
        return allowed[1]

    for option in allowed:
        if parsed <= option:
            return option
    return allowed[-1]


def clamp_page(page: int, page_size: int, total: int) -> tuple[int, int]:
    """Return ``(page, offset)`` with ``page`` clamped into the available range."""

    if page_size < 1:
        raise ValueError("page_size must be greater than zero")
    max_page = max(1, ceil(total / page_size)) if total else 1
    page = min(max(page, 1), max_page)
    return page, (page - 1) * page_size


__all__ = [
    "DEFAULT_PAGE_SIZE_OPTIONS",
    "Page",
    "clamp_page",
    "normalize_page_size",
    "parse_positive_int",
]
