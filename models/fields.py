"""Conversions shared by the model ``to_dict``/``from_dict`` methods.

Snapshot documents are JSON: money is a plain number, dates are
``YYYY-MM-DD`` strings and timestamps are ISO strings.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from dates import format_timestamp, parse_date, parse_timestamp


def to_money(value) -> Decimal:
    """Convert an int, float, str or Decimal to Decimal without float noise."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def money_to_json(value: Decimal) -> Union[int, float]:
    """Emit whole amounts as ints and everything else as floats."""
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def optional_money(value) -> Optional[Decimal]:
    return None if value is None else to_money(value)


def optional_date(value) -> Optional[date]:
    if value is None or value == "":
        return None
    return parse_date(value)


def date_to_json(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


def timestamp(value) -> datetime:
    return parse_timestamp(value)


def timestamp_to_json(value: datetime) -> str:
    return format_timestamp(value)


def put_optional(data: dict, key: str, value) -> None:
    """Set ``key`` only when the value is present, like JSON.stringify does."""
    if value is not None:
        data[key] = value
