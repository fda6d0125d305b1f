from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CURRENCY_SYMBOL = "₹"


def _group_indian(digits: str) -> str:
    # Last three digits form one group, the rest are grouped in pairs.
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_currency(amount) -> str:
    """Render ``amount`` as whole Indian Rupees, e.g. ``2500000`` -> ``₹25,00,000``."""

    # quantize would fail once the amount needs more digits than the context precision.
    value = Decimal(str(amount)).to_integral_value(rounding=ROUND_HALF_UP)
    digits = format(abs(value), "f")
    sign = "-" if value < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_group_indian(digits)}"
