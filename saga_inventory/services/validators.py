"""
Field validators shared by CSV import and the JSON API.

Each validator takes the raw value and a human readable field name and
returns the normalized value, or raises ValidationError with a message
that names the field.
"""
import re
from decimal import Decimal, InvalidOperation
from typing import Optional

from saga_inventory.exceptions import ValidationError
from saga_inventory.utils.number_format import MAX_MONEY

EMAIL_PATTERN = re.compile(r'^[^\s@]+@[^\s@]+\.[^\s@]+$')
INTEGER_PATTERN = re.compile(r'^[+-]?\d+$')

# Integer columns are 32-bit
MAX_INTEGER = 2 ** 31 - 1


def _as_text(value) -> str:
    if value is None:
        return ''
    return str(value)


def require_non_empty(value, field_name: str) -> str:
    text = _as_text(value).strip()
    if not text:
        raise ValidationError(f'{field_name} is required', field=field_name)
    return text


def optional_text(value, field_name: str = None) -> Optional[str]:
    """Trimmed value, or None for a blank cell."""
    text = _as_text(value).strip()
    return text or None


def parse_decimal(value, field_name: str) -> Decimal:
    """Parse a floating point number; NaN and infinities are rejected."""
    if isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a valid number', field=field_name)
    try:
        number = Decimal(_as_text(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError(f'{field_name} must be a valid number', field=field_name)
    if not number.is_finite():
        raise ValidationError(f'{field_name} must be a valid number', field=field_name)
    if abs(number) >= MAX_MONEY:
        raise ValidationError(f'{field_name} is out of range', field=field_name)
    return number


def parse_whole_number(value, field_name: str) -> int:
    """Parse an integer; '3.5' and '3.0' are both rejected."""
    if isinstance(value, bool):
        raise ValidationError(f'{field_name} must be a valid integer', field=field_name)
    if isinstance(value, int):
        number = value
    else:
        text = _as_text(value).strip()
        if not INTEGER_PATTERN.match(text):
            raise ValidationError(f'{field_name} must be a valid integer', field=field_name)
        number = int(text)
    if abs(number) > MAX_INTEGER:
        raise ValidationError(f'{field_name} is out of range', field=field_name)
    return number


def parse_email(value, field_name: str) -> str:
    email = _as_text(value).strip()
    if not EMAIL_PATTERN.match(email):
        raise ValidationError(f'{field_name} must be a valid email address', field=field_name)
    return email


def require_non_negative(number, field_name: str):
    if number < 0:
        raise ValidationError(f'{field_name} cannot be negative', field=field_name)
    return number
