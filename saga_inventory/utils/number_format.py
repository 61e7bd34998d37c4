"""Decimal helpers for money and quantities."""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

from saga_inventory.exceptions import ValidationError

CENTS = Decimal('0.01')
# Numeric(10, 2): at most 8 integer digits
MAX_MONEY = Decimal('100000000')


def to_money(value, field_name: str = 'Amount') -> Decimal:
    """Coerce to Decimal rounded to cents (half up) within the column range."""
    try:
        if not isinstance(value, Decimal):
            value = Decimal(str(value))
        in_range = value.is_finite() and abs(value) < MAX_MONEY
        money = value.quantize(CENTS, rounding=ROUND_HALF_UP) if in_range else None
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field_name} must be a valid number', field=field_name)
    if money is None or abs(money) >= MAX_MONEY:
        raise ValidationError(f'{field_name} is out of range', field=field_name)
    return money


def format_money(value) -> str:
    """Plain two-decimal rendering used in CSV exports, e.g. 1234.50."""
    if value is None:
        return ''
    return f"{to_money(value):.2f}"
