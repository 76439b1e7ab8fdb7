from cli.migrate import apply_pending, get_applied_migrations, get_available_migrations


class TestMigrations:
    """Tests for applying schema migrations."""

    def test_all_migrations_recorded(self, db_manager_with_schema, test_db):
        available = get_available_migrations(db_manager_with_schema)

        assert available == ["001_initial_schema.sql", "002_sync_state.sql"]
        assert get_applied_migrations(test_db) == set(available)

    def test_apply_pending_is_idempotent(self, db_manager_with_schema):
        assert apply_pending(db_manager_with_schema) == 0

    def test_tables_created(self, db_manager_with_schema, test_db):
        tables = {
            row[0]
            for row in test_db.execute("SELECT name FROM sqlite_master WHERE type = 'table'")
        }

        assert {
            "transactions",
            "categories",
            "savings_goals",
            "savings_deposits",
            "installments",
            "installment_payments",
            "monthly_needs",
            "monthly_need_payments",
            "wishlist",
            "assets",
            "settings",
            "sync_state",
        } <= tables
