"""Helpers for two-decimal money values."""

from __future__ import annotations

from decimal import ROUND_DOWN, ROUND_HALF_UP, Decimal, InvalidOperation

CENT = Decimal("0.01")

# Mayor valor que admite una columna Numeric(12, 2)
MAX_MONEY = Decimal("9999999999.99")


def to_money(value: object) -> Decimal:
    """Convert ``value`` into a :class:`~decimal.Decimal` rounded to cents.

    Floats go through ``str`` first so ``0.1`` becomes ``Decimal("0.10")``
    instead of its binary expansion. Raises ``ValueError`` on garbage input
    and on values too large to be expressed in cents.
    """

    if isinstance(value, bool):
        raise ValueError("boolean is not a money value")
    try:
        dec = value if isinstance(value, Decimal) else Decimal(str(value).strip())
        if not dec.is_finite():
            raise ValueError(f"invalid money value: {value!r}")
        return dec.quantize(CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"invalid money value: {value!r}") from exc


def truncate_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_DOWN)


def money_str(value: Decimal | None) -> str | None:
    if value is None:
        return None
    return str(to_money(value))
