"""Monthly need (recurring budget line) and its per-month payment."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Optional

from dates import year_month_of
from models.fields import (
    money_to_json,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)

# forever: every month from start_month on
# monthly: the 12 consecutive months starting at start_month
# yearly: the calendar month of start_month, every year from its year on
RECURRENCE_PERIODS = ("forever", "monthly", "yearly")


@dataclass(frozen=True)
class MonthlyNeed:
    id: str
    name: str
    budget_amount: Decimal
    start_month: str  # YYYY-MM
    created_at: datetime
    updated_at: datetime
    recurrence_period: str = "forever"
    due_day: Optional[int] = None  # 1-31
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    auto_generate_transaction: bool = False
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "budgetAmount": money_to_json(self.budget_amount),
        }
        put_optional(data, "dueDay", self.due_day)
        put_optional(data, "categoryId", self.category_id)
        put_optional(data, "subcategoryId", self.subcategory_id)
        data["recurrencePeriod"] = self.recurrence_period
        data["startMonth"] = self.start_month
        data["autoGenerateTransaction"] = self.auto_generate_transaction
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyNeed":
        created_at = timestamp(data["createdAt"])
        due_day = data.get("dueDay")
        return cls(
            id=data["id"],
            name=data["name"],
            budget_amount=to_money(data["budgetAmount"]),
            start_month=data.get("startMonth") or year_month_of(created_at.date()),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            recurrence_period=data.get("recurrencePeriod") or "forever",
            due_day=int(due_day) if due_day is not None else None,
            category_id=data.get("categoryId"),
            subcategory_id=data.get("subcategoryId"),
            auto_generate_transaction=bool(data.get("autoGenerateTransaction", False)),
            note=data.get("note"),
        )


@dataclass(frozen=True)
class MonthlyNeedPayment:
    """Payment of a need for one month. At most one exists per (need_id, year_month)."""

    id: str
    need_id: str
    year_month: str  # YYYY-MM
    actual_amount: Decimal
    paid_at: datetime
    transaction_id: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "needId": self.need_id,
            "yearMonth": self.year_month,
            "actualAmount": money_to_json(self.actual_amount),
            "paidAt": timestamp_to_json(self.paid_at),
        }
        put_optional(data, "transactionId", self.transaction_id)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "MonthlyNeedPayment":
        return cls(
            id=data["id"],
            need_id=data["needId"],
            year_month=data["yearMonth"],
            actual_amount=to_money(data["actualAmount"]),
            paid_at=timestamp(data["paidAt"]),
            transaction_id=data.get("transactionId"),
        )
