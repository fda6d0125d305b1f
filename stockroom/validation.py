from __future__ import annotations

from decimal import Decimal, InvalidOperation

from stockroom.errors import ValidationError


def _label(field: str) -> str:
    return field.replace("_", " ")


def require_text(value, field: str) -> str:
    if value is None:
        raise ValidationError(f"{_label(field).capitalize()} is required.", field)
    text = str(value).strip()
    if not text:
        raise ValidationError(f"{_label(field).capitalize()} is required.", field)
    return text


def optional_text(value) -> str:
    if value is None:
        return ""
    return str(value).strip()


def coerce_count(value, field: str, *, minimum: int = 0) -> int:
    """Return ``value`` as an ``int`` no smaller than ``minimum``.

    Accepts ints, integral floats/decimals and numeric strings. Booleans are
    rejected so that ``True`` is never read as one unit.
    """

    if value is None or isinstance(value, bool):
        raise ValidationError(f"Enter a whole number for {_label(field)}.", field)

    if isinstance(value, int):
        number = value
    else:
        try:
            parsed = Decimal(str(value).strip())
        except (InvalidOperation, ValueError):
            raise ValidationError(f"Enter a whole number for {_label(field)}.", field)
        if not parsed.is_finite() or parsed != parsed.to_integral_value():
            raise ValidationError(f"Enter a whole number for {_label(field)}.", field)
        number = int(parsed)

    if number < minimum:
        if minimum == 1:
            raise ValidationError(f"{_label(field).capitalize()} must be greater than zero.", field)
        raise ValidationError(
            f"{_label(field).capitalize()} cannot be less than {minimum}.", field
        )
    return number


def coerce_money(value, field: str) -> Decimal:
    if value is None or isinstance(value, bool):
        raise ValidationError(f"Enter a valid amount for {_label(field)}.", field)
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Enter a valid amount for {_label(field)}.", field)
    if not amount.is_finite():
        raise ValidationError(f"Enter a valid amount for {_label(field)}.", field)
    if amount < 0:
        raise ValidationError(f"{_label(field).capitalize()} cannot be negative.", field)
    return amount
