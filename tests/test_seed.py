from datetime import date

import pytest

from seed.defaults import load_default_categories
from seed.generator import generate_seed_snapshot
from services.snapshots import validate_snapshot

TODAY = date(2024, 3, 15)


class TestLoadDefaultCategories:
    """Tests for load_default_categories."""

    def test_loads_every_type(self):
        categories = load_default_categories()

        assert {c.type for c in categories} == {"income", "expense", "asset", "liability"}
        assert all(c.is_default for c in categories)
        assert len({c.id for c in categories}) == len(categories)

    def test_unknown_type_rejected(self, tmp_path):
        path = tmp_path / "categories.yaml"
        path.write_text("gifts:\n  - name: Hadiah\n")

        with pytest.raises(ValueError):
            load_default_categories(path)


class TestGenerateSeedSnapshot:
    """Tests for generate_seed_snapshot."""

    def test_deterministic(self):
        """Test the same seed and date give the same document."""
        assert generate_seed_snapshot(7, TODAY) == generate_seed_snapshot(7, TODAY)

    def test_seed_changes_data(self):
        first = generate_seed_snapshot(1, TODAY)
        second = generate_seed_snapshot(2, TODAY)

        assert first["transactions"] != second["transactions"]

    def test_valid_document(self):
        snapshot = generate_seed_snapshot(today=TODAY)

        assert validate_snapshot(snapshot) == []
        assert "settings" not in snapshot

    def test_references_resolve(self):
        """Test every reference points at a generated record."""
        snapshot = generate_seed_snapshot(today=TODAY)
        category_ids = {c["id"] for c in snapshot["categories"]}
        need_ids = {n["id"] for n in snapshot["monthlyNeeds"]}
        wishlist_ids = {w["id"] for w in snapshot["wishlist"]}

        assert all(t["categoryId"] in category_ids for t in snapshot["transactions"])
        assert all(i["categoryId"] in category_ids for i in snapshot["installments"])
        assert all(p["needId"] in need_ids for p in snapshot["monthlyNeedPayments"])
        linked = [s["linkedWishlistId"] for s in snapshot["savings"] if "linkedWishlistId" in s]
        assert linked and set(linked) <= wishlist_ids

    def test_no_future_transactions(self):
        snapshot = generate_seed_snapshot(today=TODAY)

        assert max(t["date"] for t in snapshot["transactions"]) <= TODAY.isoformat()

    def test_imports_cleanly(self, services):
        """Test the generated document replaces the local data."""
        snapshot = generate_seed_snapshot(today=TODAY)

        result = services.snapshots.import_snapshot(snapshot, "replace")

        assert result.inserted["transactions"] == len(snapshot["transactions"])
        assert services.assets.net_worth() > 0
        assert len(services.installments.find_active()) == 2
