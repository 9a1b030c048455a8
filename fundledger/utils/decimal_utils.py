"""Helpers for Decimal normalization."""

from decimal import Decimal, InvalidOperation


def coerce_decimal(value) -> Decimal:
    """Normalize numeric values to Decimal.

    Args:
        value: Raw numeric value from storage, JSON payloads, or callers.

    Returns:
        Decimal: Normalized numeric value.

    Raises:
        ValueError: If the value is not a finite number.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValueError(f"Not a finite amount: {value!r}")
        return value
    if isinstance(value, bool):
        raise ValueError(f"Not a numeric amount: {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise ValueError(f"Not a numeric amount: {value!r}") from exc
    if not result.is_finite():
        raise ValueError(f"Not a finite amount: {value!r}")
    return result


def format_decimal(value: Decimal) -> str:
    """Render a Decimal as a plain string for storage."""
    return str(coerce_decimal(value))


__all__ = ["coerce_decimal", "format_decimal"]
