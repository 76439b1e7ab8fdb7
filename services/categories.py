"""Category store."""

import dataclasses
import json
from typing import List, Optional

from dates import now_utc, parse_timestamp
from errors import NotFoundError
from ids import generate_id
from logger import get_logger
from models.category import Category, Subcategory
from models.fields import timestamp_to_json
from seed.defaults import load_default_categories
from services.records import RecordStore

logger = get_logger()


class CategoryService(RecordStore[Category]):
    """Service for managing categories and their subcategories."""

    TABLE = "categories"
    ENTITY = "Category"
    COLUMNS = ("id", "name", "category_type", "subcategories", "is_default", "created_at")
    UPDATABLE = frozenset({"name", "type"})

    def _to_row(self, c: Category) -> tuple:
        return (
            c.id,
            c.name,
            c.type,
            json.dumps([s.to_dict() for s in c.subcategories]),
            int(c.is_default),
            timestamp_to_json(c.created_at),
        )

    def _from_row(self, row) -> Category:
        return Category(
            id=row[0],
            name=row[1],
            type=row[2],
            subcategories=tuple(Subcategory.from_dict(s) for s in json.loads(row[3])),
            is_default=bool(row[4]),
            created_at=parse_timestamp(row[5]),
        )

    def _coerce(self, changes: dict) -> dict:
        changes = super()._coerce(changes)
        if changes.get("name"):
            changes["name"] = changes["name"].strip()
        return changes

    def ensure_defaults(self) -> int:
        """Create the default categories if there are none yet.

        Returns:
            Number of categories created.
        """
        if self._records:
            return 0
        defaults = load_default_categories()
        with self._write("seed") as conn:
            self.insert_many(conn, defaults)
        for category in defaults:
            self._records[category.id] = category
        logger.info(f"Created {len(defaults)} default categories")
        self._notify()
        return len(defaults)

    def add(self, name: str, type: str) -> Category:
        """Create a new category without subcategories.

        Args:
            name: Category name, trimmed before saving.
            type: 'income', 'expense', 'asset' or 'liability'.

        Returns:
            The created Category.
        """
        return self._store(
            Category(
                id=generate_id(),
                name=name.strip(),
                type=type,
                created_at=now_utc(),
            )
        )

    def find_by_type(self, type: str) -> List[Category]:
        return [c for c in self._records.values() if c.type == type]

    def find_by_name(self, name: str, type: Optional[str] = None) -> Optional[Category]:
        """Find a category by name, ignoring case and surrounding whitespace."""
        wanted = name.strip().lower()
        for category in self._records.values():
            if category.name.strip().lower() == wanted and type in (None, category.type):
                return category
        return None

    def names(self, type: Optional[str] = None, exclude_id: Optional[str] = None) -> List[str]:
        """Existing names, for uniqueness checks in validators.validate_category."""
        return [
            c.name
            for c in self._records.values()
            if c.id != exclude_id and type in (None, c.type)
        ]

    def name_map(self) -> dict:
        """Category ID to name."""
        return {c.id: c.name for c in self._records.values()}

    def add_subcategory(self, category_id: str, name: str) -> Subcategory:
        """Append a subcategory to a category.

        Raises:
            NotFoundError: If the category doesn't exist.
        """
        category = self.get(category_id)
        subcategory = Subcategory(id=generate_id(), name=name.strip())
        self._replace(
            dataclasses.replace(
                category, subcategories=category.subcategories + (subcategory,)
            )
        )
        return subcategory

    def delete_subcategory(self, category_id: str, subcategory_id: str) -> None:
        """Remove a subcategory from a category.

        Raises:
            NotFoundError: If the category or the subcategory doesn't exist.
        """
        category = self.get(category_id)
        remaining = tuple(s for s in category.subcategories if s.id != subcategory_id)
        if len(remaining) == len(category.subcategories):
            raise NotFoundError("Subcategory", subcategory_id)
        self._replace(dataclasses.replace(category, subcategories=remaining))
