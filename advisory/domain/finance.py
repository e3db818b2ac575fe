"""Decimal helpers shared by the portfolio and investment calculations."""
from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

ZERO = Decimal("0")
HUNDRED = Decimal("100")
_CENT = Decimal("0.01")


def to_decimal(value: object, default: Decimal | None = ZERO) -> Decimal | None:
    """Coerce ints, floats and strings into ``Decimal`` (floats via ``str``)."""

    if value is None:
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError) as exc:
        raise ValueError(f"Not a decimal value: {value!r}") from exc


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(_CENT, rounding=ROUND_HALF_UP)


def ratio(part: Decimal, whole: Decimal, places: int = 4) -> Decimal:
    """Divide ``part`` by ``whole`` rounding HALF_UP to ``places`` decimals."""

    exponent = Decimal(1).scaleb(-places)
    return (part / whole).quantize(exponent, rounding=ROUND_HALF_UP)


def ratio_percent(part: Decimal | None, whole: Decimal | None, places: int = 4) -> float:
    """Return ``part / whole * 100`` as a float, or ``0.0`` when ``whole`` is empty."""

    if part is None or not whole:
        return 0.0
    return float(ratio(part, whole, places) * HUNDRED)


__all__ = ["HUNDRED", "ZERO", "quantize_money", "ratio", "ratio_percent", "to_decimal"]
