import pytest

from errors import NotFoundError


class TestCategoryService:
    """Tests for CategoryService."""

    def test_defaults_created_on_first_run(self, services):
        """Test initialize() creates the default categories once."""
        categories = services.categories.find_all()

        assert len(categories) > 0
        assert all(c.is_default for c in categories)
        assert services.categories.find_by_name("Gaji", "income") is not None
        assert services.categories.ensure_defaults() == 0

    def test_defaults_are_persisted(self, services):
        """Test default categories are loaded back from disk."""
        before = {c.id for c in services.categories.find_all()}

        services.categories.reload()

        assert {c.id for c in services.categories.find_all()} == before

    def test_default_subcategories(self, services):
        """Test default categories carry their subcategories in order."""
        needs = services.categories.find_by_name("Kebutuhan Bulanan")

        assert [s.name for s in needs.subcategories] == ["Listrik", "Air", "Internet", "Pulsa"]

    def test_add_category(self, services):
        """Test creating a category trims the name."""
        category = services.categories.add("  Hadiah ", "income")

        assert category.name == "Hadiah"
        assert category.type == "income"
        assert category.subcategories == ()
        assert category.is_default is False

    def test_find_by_name_case_insensitive(self, services):
        """Test that category name lookup ignores case."""
        services.categories.add("Pendidikan", "expense")

        found = services.categories.find_by_name("pendidikan")

        assert found is not None
        assert found.name == "Pendidikan"

    def test_find_by_name_with_type(self, services):
        """Test names shared across types are told apart by type."""
        income = services.categories.find_by_name("Lainnya", "income")
        expense = services.categories.find_by_name("Lainnya", "expense")

        assert income.id != expense.id
        assert income.type == "income"
        assert expense.type == "expense"

    def test_find_by_name_not_found(self, services):
        """Test finding a non-existent category by name returns None."""
        assert services.categories.find_by_name("Nonexistent") is None

    def test_find_by_type(self, services):
        """Test filtering categories by type."""
        assets = services.categories.find_by_type("asset")

        assert {c.name for c in assets} == {"Tabungan", "Investasi", "Emas"}

    def test_names_excludes_own_id(self, services):
        """Test names() can leave out the category being renamed."""
        category = services.categories.add("Donasi", "expense")

        assert "Donasi" in services.categories.names(type="expense")
        assert "Donasi" not in services.categories.names(type="expense", exclude_id=category.id)

    def test_add_subcategory(self, services):
        """Test appending a subcategory persists it."""
        category = services.categories.add("Pendidikan", "expense")

        subcategory = services.categories.add_subcategory(category.id, "Buku")
        services.categories.reload()

        reloaded = services.categories.get(category.id)
        assert reloaded.subcategories == (subcategory,)

    def test_add_subcategory_missing_category(self, services):
        """Test adding a subcategory to a missing category raises NotFoundError."""
        with pytest.raises(NotFoundError):
            services.categories.add_subcategory("missing", "Buku")

    def test_delete_subcategory(self, services):
        """Test removing one subcategory keeps the others."""
        category = services.categories.add("Pendidikan", "expense")
        books = services.categories.add_subcategory(category.id, "Buku")
        course = services.categories.add_subcategory(category.id, "Kursus")

        services.categories.delete_subcategory(category.id, books.id)

        assert services.categories.get(category.id).subcategories == (course,)

    def test_delete_missing_subcategory(self, services):
        """Test removing an unknown subcategory raises NotFoundError."""
        category = services.categories.add("Pendidikan", "expense")

        with pytest.raises(NotFoundError):
            services.categories.delete_subcategory(category.id, "missing")

    def test_delete_category(self, services):
        """Test deleting a category."""
        category = services.categories.add("Pendidikan", "expense")

        services.categories.delete(category.id)

        assert services.categories.find(category.id) is None

    def test_rename_category(self, services):
        """Test update() trims the new name."""
        category = services.categories.add("Pendidikan", "expense")

        renamed = services.categories.update(category.id, name=" Sekolah ")

        assert renamed.name == "Sekolah"
