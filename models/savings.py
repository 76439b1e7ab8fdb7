"""Savings goal and deposit models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from dates import parse_date
from models.fields import (
    date_to_json,
    money_to_json,
    optional_date,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)


@dataclass(frozen=True)
class SavingsDeposit:
    id: str
    savings_id: str
    amount: Decimal
    date: date
    created_at: datetime
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "savingsId": self.savings_id,
            "amount": money_to_json(self.amount),
            "date": date_to_json(self.date),
        }
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SavingsDeposit":
        return cls(
            id=data["id"],
            savings_id=data["savingsId"],
            amount=to_money(data["amount"]),
            date=parse_date(data["date"]),
            created_at=timestamp(data["createdAt"]),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class SavingsGoal:
    """A savings target. The goal owns its deposits.

    Attributes:
        linked_wishlist_id: Weak reference to a wishlist item, may not resolve.
        deposits: Deposits in the order they were made.
    """

    id: str
    name: str
    target_amount: Decimal
    created_at: datetime
    updated_at: datetime
    target_date: Optional[date] = None
    linked_wishlist_id: Optional[str] = None
    deposits: Tuple[SavingsDeposit, ...] = ()
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "targetAmount": money_to_json(self.target_amount),
        }
        put_optional(data, "targetDate", date_to_json(self.target_date))
        put_optional(data, "linkedWishlistId", self.linked_wishlist_id)
        data["deposits"] = [d.to_dict() for d in self.deposits]
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "SavingsGoal":
        created_at = timestamp(data["createdAt"])
        return cls(
            id=data["id"],
            name=data["name"],
            target_amount=to_money(data["targetAmount"]),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            target_date=optional_date(data.get("targetDate")),
            linked_wishlist_id=data.get("linkedWishlistId"),
            deposits=tuple(
                SavingsDeposit.from_dict(d) for d in data.get("deposits") or ()
            ),
            note=data.get("note"),
        )
