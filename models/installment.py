"""Installment loan and payment models."""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Tuple

from dates import parse_date
from models.fields import (
    date_to_json,
    money_to_json,
    optional_money,
    put_optional,
    timestamp,
    timestamp_to_json,
    to_money,
)

INSTALLMENT_STATUSES = ("active", "paid_off")


@dataclass(frozen=True)
class InstallmentPayment:
    id: str
    installment_id: str
    amount: Decimal
    date: date
    created_at: datetime
    note: Optional[str] = None
    transaction_id: Optional[str] = None  # set when a transaction was generated

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "installmentId": self.installment_id,
            "amount": money_to_json(self.amount),
            "date": date_to_json(self.date),
        }
        put_optional(data, "note", self.note)
        put_optional(data, "transactionId", self.transaction_id)
        data["createdAt"] = timestamp_to_json(self.created_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "InstallmentPayment":
        return cls(
            id=data["id"],
            installment_id=data["installmentId"],
            amount=to_money(data["amount"]),
            date=parse_date(data["date"]),
            created_at=timestamp(data["createdAt"]),
            note=data.get("note"),
            transaction_id=data.get("transactionId"),
        )


@dataclass(frozen=True)
class Installment:
    """An installment loan paid off in monthly amounts.

    Progress is derived from ``payments`` (see calculations.installments);
    ``status`` only records the terminal ``paid_off`` transition.
    """

    id: str
    name: str
    total_amount: Decimal
    monthly_amount: Decimal
    total_tenor: int  # months
    start_date: date
    created_at: datetime
    updated_at: datetime
    status: str = "active"
    payments: Tuple[InstallmentPayment, ...] = ()
    category_id: Optional[str] = None
    subcategory_id: Optional[str] = None
    auto_generate_transaction: bool = False
    note: Optional[str] = None

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "name": self.name,
            "totalAmount": money_to_json(self.total_amount),
            "monthlyAmount": money_to_json(self.monthly_amount),
            "totalTenor": self.total_tenor,
            "startDate": date_to_json(self.start_date),
            "status": self.status,
            "payments": [p.to_dict() for p in self.payments],
        }
        put_optional(data, "categoryId", self.category_id)
        put_optional(data, "subcategoryId", self.subcategory_id)
        data["autoGenerateTransaction"] = self.auto_generate_transaction
        put_optional(data, "note", self.note)
        data["createdAt"] = timestamp_to_json(self.created_at)
        data["updatedAt"] = timestamp_to_json(self.updated_at)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Installment":
        monthly_amount = to_money(data["monthlyAmount"])
        total_tenor = int(data["totalTenor"])
        total_amount = optional_money(data.get("totalAmount"))
        if total_amount is None:
            # Older documents only carried the monthly amount and tenor
            total_amount = monthly_amount * total_tenor
        created_at = timestamp(data["createdAt"])
        return cls(
            id=data["id"],
            name=data["name"],
            total_amount=total_amount,
            monthly_amount=monthly_amount,
            total_tenor=total_tenor,
            start_date=parse_date(data["startDate"]),
            created_at=created_at,
            updated_at=timestamp(data.get("updatedAt") or created_at),
            status=data.get("status", "active"),
            payments=tuple(
                InstallmentPayment.from_dict(p) for p in data.get("payments") or ()
            ),
            category_id=data.get("categoryId"),
            subcategory_id=data.get("subcategoryId"),
            auto_generate_transaction=bool(
                data.get(
                    "autoGenerateTransaction",
                    data.get("autoCreateTransaction", False),
                )
            ),
            note=data.get("note"),
        )
