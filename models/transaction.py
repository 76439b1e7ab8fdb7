from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from models.fields import (
    date_to_json,
    money_to_json,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)
from dates import parse_date

TRANSACTION_TYPES = ("income", "expense", "transfer")
PAYMENT_METHODS = ("cash", "bank", "e-wallet")


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    type: str  # 'income', 'expense', or 'transfer'
    amount: Decimal  # always positive
    category_id: str
    created_at: datetime
    updated_at: datetime
    subcategory_id: Optional[str] = None
    note: Optional[str] = None
    payment_method: Optional[str] = None  # 'cash', 'bank' or 'e-wallet'
    tags: Tuple[str, ...] = ()

    def to_dict(self) -> dict:
        """Convert transaction to its snapshot representation."""
        data = {
            "id": self.id,
            "date": date_to_json(self.date),
            "type": self.type,
            "amount": money_to_json(self.amount),
            "categoryId": self.category_id,
        }
        put_optional(data, "subcategoryId", self.subcategory_id)
        put_optional(data, "note", self.note)
        put_optional(data, "paymentMethod", self.payment_method)
        if self.tags:
            data["tags"] = list(self.tags)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        """Create a Transaction from its snapshot representation."""
        created_at = timestamp(data["createdAt"])
        return cls(
            id=data["id"],
            date=parse_date(data["date"]),
            type=data["type"],
            amount=to_money(data["amount"]),
            category_id=data.get("categoryId", ""),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            subcategory_id=data.get("subcategoryId"),
            note=data.get("note"),
            payment_method=data.get("paymentMethod"),
            tags=tuple(data.get("tags") or ()),
        )
