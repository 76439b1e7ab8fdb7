from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from models.fields import (
    date_to_json,
    money_to_json,
    optional_date,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)

PRIORITIES = ("high", "medium", "low")
WISHLIST_STATUSES = ("planned", "saving", "bought")


@dataclass(frozen=True)
class WishlistItem:
    id: str
    name: str
    target_price: Decimal
    priority: str  # 'high', 'medium' or 'low'
    created_at: datetime
    updated_at: datetime
    current_saved: Decimal = Decimal("0")
    status: str = "planned"
    target_date: Optional[date] = None
    linked_savings_id: Optional[str] = None  # weak reference to a savings goal
    category: Optional[str] = None
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "targetPrice": money_to_json(self.target_price),
            "priority": self.priority,
        }
        put_optional(data, "targetDate", date_to_json(self.target_date))
        data["currentSaved"] = money_to_json(self.current_saved)
        data["status"] = self.status
        put_optional(data, "linkedSavingsId", self.linked_savings_id)
        put_optional(data, "category", self.category)
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "WishlistItem":
        created_at = timestamp(data["createdAt"])
        return cls(
            id=data["id"],
            name=data["name"],
            target_price=to_money(data["targetPrice"]),
            priority=data.get("priority", "medium"),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            current_saved=to_money(data.get("currentSaved", 0)),
            status=data.get("status", "planned"),
            target_date=optional_date(data.get("targetDate")),
            linked_savings_id=data.get("linkedSavingsId"),
            category=data.get("category"),
            note=data.get("note"),
        )
