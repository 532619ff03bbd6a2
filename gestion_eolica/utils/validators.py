"""Validadores reutilizables para la aplicación."""

from __future__ import annotations

import re
from datetime import date
from decimal import Decimal
from typing import Any, Mapping

from gestion_eolica.services.errors import ValidationError
from gestion_eolica.utils.money import MAX_MONEY, to_money


_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_valid_email(email: str) -> bool:
    """Valida que el email tenga un formato básico correcto."""

    return bool(_EMAIL_RE.match((email or "").strip()))


def require_int(
    data: Mapping[str, Any],
    field: str,
    *,
    minimum: int | None = None,
    maximum: int | None = None,
) -> int:
    raw = data.get(field)
    # bool es subclase de int, no lo aceptamos como número
    if isinstance(raw, bool) or raw is None:
        raise ValidationError(f"Field '{field}' must be an integer.")
    try:
        value = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"Field '{field}' must be an integer.") from None
    if minimum is not None and value < minimum:
        raise ValidationError(f"Field '{field}' must be >= {minimum}.")
    if maximum is not None and value > maximum:
        raise ValidationError(f"Field '{field}' must be <= {maximum}.")
    return value


def require_bool(data: Mapping[str, Any], field: str) -> bool:
    raw = data.get(field)
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, int) and raw in (0, 1):
        return bool(raw)
    if isinstance(raw, str) and raw.strip().lower() in {"true", "false", "1", "0"}:
        return raw.strip().lower() in {"true", "1"}
    raise ValidationError(f"Field '{field}' must be a boolean.")


def optional_bool(data: Mapping[str, Any], field: str, default: bool = False) -> bool:
    if data.get(field) is None:
        return default
    return require_bool(data, field)


def require_string(
    data: Mapping[str, Any],
    field: str,
    *,
    min_len: int = 1,
    max_len: int = 255,
) -> str:
    raw = data.get(field)
    if not isinstance(raw, str):
        raise ValidationError(f"Field '{field}' is required and must be a string.")
    value = raw.strip()
    if not min_len <= len(value) <= max_len:
        raise ValidationError(
            f"Field '{field}' must have between {min_len} and {max_len} characters."
        )
    return value


def optional_string(data: Mapping[str, Any], field: str, *, max_len: int = 255) -> str | None:
    raw = data.get(field)
    if raw is None:
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"Field '{field}' must be a string.")
    value = raw.strip()
    if len(value) > max_len:
        raise ValidationError(f"Field '{field}' must have at most {max_len} characters.")
    return value or None


def money_field(
    data: Mapping[str, Any],
    field: str,
    *,
    required: bool = False,
    positive: bool = False,
    default: Decimal | None = None,
) -> Decimal | None:
    raw = data.get(field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        if required:
            raise ValidationError(f"Field '{field}' is required.")
        return default
    try:
        value = to_money(raw)
    except ValueError:
        raise ValidationError(f"Field '{field}' must be a decimal amount.") from None
    if positive and value <= 0:
        raise ValidationError(f"Field '{field}' must be greater than zero.")
    if value < 0:
        raise ValidationError(f"Field '{field}' must not be negative.")
    if value > MAX_MONEY:
        raise ValidationError(f"Field '{field}' must be at most {MAX_MONEY}.")
    return value


def optional_date(data: Mapping[str, Any], field: str) -> date | None:
    raw = data.get(field)
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return None
    if not isinstance(raw, str):
        raise ValidationError(f"Field '{field}' must be an ISO date (YYYY-MM-DD).")
    try:
        # Acepta también timestamps ISO y se queda con la fecha
        return date.fromisoformat(raw.strip()[:10])
    except ValueError:
        raise ValidationError(f"Field '{field}' must be an ISO date (YYYY-MM-DD).") from None
