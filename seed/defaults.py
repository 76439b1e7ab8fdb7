"""Default data created on first run."""

from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

import yaml

from dates import now_utc
from ids import generate_id
from logger import get_logger
from models.category import CATEGORY_TYPES, Category, Subcategory

logger = get_logger()


def get_default_categories_path() -> Path:
    return Path(__file__).parent / "default_categories.yaml"


def load_default_categories(
    path: Optional[Path] = None,
    new_id: Callable[[], str] = generate_id,
    now: Optional[datetime] = None,
) -> List[Category]:
    """Build the default category set from its YAML definition.

    Every call generates fresh IDs unless ``new_id`` is deterministic.

    Args:
        path: YAML file to read. Defaults to seed/default_categories.yaml.
        new_id: ID factory, replaced by the seed generator to get stable IDs.
        now: Creation timestamp shared by every category.

    Returns:
        Categories in definition order, grouped by type.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        yaml.YAMLError: If the YAML is invalid.
        ValueError: If the file uses an unknown category type.
    """
    path = path or get_default_categories_path()
    logger.debug(f"Loading default categories from {path}")

    with open(path, "r") as f:
        definitions = yaml.safe_load(f) or {}

    unknown = set(definitions) - set(CATEGORY_TYPES)
    if unknown:
        raise ValueError(f"Unknown category types in {path.name}: {sorted(unknown)}")

    now = now or now_utc()
    categories = []
    for category_type in CATEGORY_TYPES:
        for entry in definitions.get(category_type) or []:
            categories.append(
                Category(
                    id=new_id(),
                    name=entry["name"],
                    type=category_type,
                    created_at=now,
                    subcategories=tuple(
                        Subcategory(id=new_id(), name=name)
                        for name in entry.get("subcategories") or []
                    ),
                    is_default=True,
                )
            )
    return categories
