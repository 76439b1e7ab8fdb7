"""Asset and liability models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from dates import parse_date
from models.fields import (
    date_to_json,
    money_to_json,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)

ASSET_TYPES = ("cash", "savings", "investment", "gold", "property", "other")
LIABILITY_TYPES = ("debt", "loan", "other")


@dataclass(frozen=True)
class AssetValue:
    """One entry of an asset's value history."""

    date: date
    value: Decimal

    def to_dict(self) -> dict:
        return {"date": date_to_json(self.date), "value": money_to_json(self.value)}

    @classmethod
    def from_dict(cls, data: dict) -> "AssetValue":
        return cls(date=parse_date(data["date"]), value=to_money(data["value"]))


@dataclass(frozen=True)
class Asset:
    """Something owned (or, with is_liability, owed).

    Attributes:
        value_history: Every recorded value, oldest first. Updating the
            current value appends here; history is never rewritten.
    """

    id: str
    name: str
    type: str
    is_liability: bool
    initial_value: Decimal
    current_value: Decimal
    created_at: datetime
    updated_at: datetime
    value_history: Tuple[AssetValue, ...] = ()
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "isLiability": self.is_liability,
            "initialValue": money_to_json(self.initial_value),
            "currentValue": money_to_json(self.current_value),
            "valueHistory": [v.to_dict() for v in self.value_history],
        }
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Asset":
        created_at = timestamp(data["createdAt"])
        return cls(
            id=data["id"],
            name=data["name"],
            type=data["type"],
            is_liability=bool(data.get("isLiability", False)),
            initial_value=to_money(data.get("initialValue", 0)),
            current_value=to_money(data.get("currentValue", 0)),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            value_history=tuple(
                AssetValue.from_dict(v) for v in data.get("valueHistory") or ()
            ),
            note=data.get("note"),
        )
