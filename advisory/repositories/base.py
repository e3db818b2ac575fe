"""Shared helpers for repositories."""
from __future__ import annotations

from decimal import Decimal
from typing import Any, TypeVar

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from advisory.models import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository:
    """Base repository providing convenience helpers."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    def add(self, instance: ModelT) -> ModelT:
        self._session.add(instance)
        return instance

    def delete(self, instance: Base) -> None:
        self._session.delete(instance)

    def flush(self) -> None:
        self._session.flush()

    def _get(self, model: type[ModelT], identifier: int) -> ModelT | None:
        return self._session.get(model, identifier)

    def _scalar(self, statement: Select[Any]) -> int:
        """Execute ``statement`` and return the scalar integer result."""

        value = self._session.execute(statement).scalar() or 0
        return int(value)

    def _count(self, statement: Select[Any]) -> int:
        return self._scalar(select(func.count()).select_from(statement.subquery()))

    @staticmethod
    def _to_decimal(value: Any) -> Decimal:
        if isinstance(value, Decimal):
            return value
        if value is None:
            return Decimal(0)
        return Decimal(str(value))

    @staticmethod
    def _search_pattern(value: str | None) -> str | None:
        if not value or not value.strip():
            return None
        return f"%{value.strip().lower()}%"
