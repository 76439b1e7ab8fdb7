"""Asset and liability store."""

import dataclasses
import json
from datetime import date
from typing import List, Optional

from calculations.assets import (
    NetWorthPoint,
    ValueChange,
    net_worth,
    net_worth_history,
    total_assets,
    total_liabilities,
    value_change,
)
from dates import current_date, now_utc, parse_timestamp
from ids import generate_id
from models.asset import Asset, AssetValue
from models.fields import optional_date, timestamp_to_json, to_money
from services.records import RecordStore


class AssetService(RecordStore[Asset]):
    """Service for managing assets and liabilities.

    Value history is append-only: ``update_value`` adds an entry and moves
    ``current_value``; ``update`` never touches either.
    """

    TABLE = "assets"
    ENTITY = "Asset"
    COLUMNS = (
        "id",
        "name",
        "asset_type",
        "is_liability",
        "initial_value",
        "current_value",
        "value_history",
        "note",
        "created_at",
        "updated_at",
    )
    UPDATABLE = frozenset({"name", "type", "is_liability", "note"})

    def _to_row(self, a: Asset) -> tuple:
        return (
            a.id,
            a.name,
            a.type,
            int(a.is_liability),
            str(a.initial_value),
            str(a.current_value),
            json.dumps(
                [{"date": v.date.isoformat(), "value": str(v.value)} for v in a.value_history]
            ),
            a.note,
            timestamp_to_json(a.created_at),
            timestamp_to_json(a.updated_at),
        )

    def _from_row(self, row) -> Asset:
        return Asset(
            id=row[0],
            name=row[1],
            type=row[2],
            is_liability=bool(row[3]),
            initial_value=to_money(row[4]),
            current_value=to_money(row[5]),
            value_history=tuple(AssetValue.from_dict(v) for v in json.loads(row[6])),
            note=row[7],
            created_at=parse_timestamp(row[8]),
            updated_at=parse_timestamp(row[9]),
        )

    def add(
        self,
        name: str,
        type: str,
        initial_value,
        is_liability: bool = False,
        current_value=None,
        note: Optional[str] = None,
    ) -> Asset:
        """Create a new asset, or a liability with ``is_liability``.

        The value history starts with one entry for today.

        Args:
            name: Display name.
            type: One of ASSET_TYPES, or LIABILITY_TYPES for liabilities.
            initial_value: Value when first recorded.
            is_liability: True for something owed.
            current_value: Defaults to the initial value.
            note: Optional free text.

        Returns:
            The created Asset.
        """
        initial_value = to_money(initial_value)
        current = to_money(current_value) if current_value is not None else initial_value
        now = now_utc()
        return self._store(
            Asset(
                id=generate_id(),
                name=name.strip(),
                type=type,
                is_liability=is_liability,
                initial_value=initial_value,
                current_value=current,
                created_at=now,
                updated_at=now,
                value_history=(AssetValue(date=current_date(), value=current),),
                note=note,
            )
        )

    def update_value(self, asset_id: str, value, on=None) -> Asset:
        """Record a new current value.

        Every call appends to the value history, even for a date that
        already has an entry.

        Args:
            asset_id: Asset to revalue.
            value: New value.
            on: Date of the valuation, defaults to today.

        Raises:
            NotFoundError: If the asset doesn't exist.
        """
        asset = self.get(asset_id)
        value = to_money(value)
        entry = AssetValue(date=optional_date(on) or current_date(), value=value)
        return self._replace(
            dataclasses.replace(
                asset,
                current_value=value,
                value_history=asset.value_history + (entry,),
                updated_at=now_utc(),
            )
        )

    def find_assets(self) -> List[Asset]:
        return [a for a in self._records.values() if not a.is_liability]

    def find_liabilities(self) -> List[Asset]:
        return [a for a in self._records.values() if a.is_liability]

    def total_assets(self):
        return total_assets(self._records.values())

    def total_liabilities(self):
        return total_liabilities(self._records.values())

    def net_worth(self):
        return net_worth(self._records.values())

    def value_change(self, asset_id: str) -> ValueChange:
        return value_change(self.get(asset_id))

    def net_worth_history(
        self, months: int = 6, today: Optional[date] = None
    ) -> List[NetWorthPoint]:
        return net_worth_history(self._records.values(), months, today or current_date())
