"""Category model for transaction categorization."""

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple

from models.fields import timestamp, timestamp_to_json

CATEGORY_TYPES = ("income", "expense", "asset", "liability")


@dataclass(frozen=True)
class Subcategory:
    """A named subdivision of a category. IDs are unique within the parent only."""

    id: str
    name: str

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: dict) -> "Subcategory":
        return cls(id=data["id"], name=data["name"])


@dataclass(frozen=True)
class Category:
    """Represents a transaction category.

    Attributes:
        id: Unique identifier.
        name: Category name (unique, case-insensitive).
        type: One of CATEGORY_TYPES.
        subcategories: Ordered subcategories.
        is_default: True for categories created on first run.
        created_at: Creation timestamp.
    """

    id: str
    name: str
    type: str
    created_at: datetime
    subcategories: Tuple[Subcategory, ...] = ()
    is_default: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "subcategories": [s.to_dict() for s in self.subcategories],
            "isDefault": self.is_default,
            "createdAt": timestamp_to_json(self.created_at),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(
            id=data["id"],
            name=data["name"],
            type=data["type"],
            created_at=timestamp(data["createdAt"]),
            subcategories=tuple(
                Subcategory.from_dict(s) for s in data.get("subcategories") or ()
            ),
            is_default=bool(data.get("isDefault", False)),
        )
