"""Tests for the fixture lifecycle orchestrator."""

from pathlib import Path
from unittest.mock import Mock

import pytest

from sqlfixture.config.models import DEFAULT_DATABASE, FixtureConfig
from sqlfixture.exceptions import ConfigurationError, ModuleError
from sqlfixture.fixture.module import DatabaseModule


@pytest.fixture
def multi_config(project_dir: Path, sqlite_dsn: str) -> FixtureConfig:
    """Default database plus a 'reporting' database loaded once per suite."""
    (project_dir / "reporting.sql").write_text(
        "CREATE TABLE events (id INTEGER PRIMARY KEY, name TEXT);\n"
        "INSERT INTO events (name) VALUES ('signup');\n",
        encoding="utf-8",
    )
    return FixtureConfig(
        dsn=sqlite_dsn,
        password="",
        dump="dump.sql",
        populate=True,
        cleanup=True,
        project_dir=str(project_dir),
        databases={
            "reporting": {
                "dsn": f"sqlite:{project_dir / 'reporting.db'}",
                "password": "",
                "dump": "reporting.sql",
                "populate": True,
            },
        },
    )


@pytest.fixture
def multi_module(multi_config: FixtureConfig):
    db_module = DatabaseModule(multi_config)
    db_module.before_suite()
    try:
        yield db_module
    finally:
        db_module.after_suite()


class TestLifecycle:
    """Suite and test hooks."""

    def test_before_suite_populates(self, module: DatabaseModule):
        assert module.is_populated()
        module.see_num_records(3, "users")

    def test_inserted_rows_removed_after_test(self, module: DatabaseModule):
        module.before_test()
        module.have_in_database("tags", {"label": "red", "weight": 1})
        module.have_in_database("memberships", {"user_id": 1, "group_id": 2})
        user_id = module.have_in_database("users", {"name": "dave"})

        assert user_id == 4
        assert len(module.inserted_rows()) == 3

        module.after_test()

        module.see_num_records(0, "tags")
        module.see_num_records(0, "memberships")
        module.see_num_records(3, "users")
        assert module.inserted_rows() == []

    def test_text_keyed_row_removed_after_test(self, module: DatabaseModule):
        module.before_test()
        module.get_driver().load_statements(["CREATE TABLE codes (code TEXT PRIMARY KEY, label TEXT);"])
        module.have_in_database("codes", {"code": "abc", "label": "first"})

        assert module.inserted_rows()[0].primary == {"code": "abc"}

        module.after_test()

        module.dont_see_in_database("codes", {"code": "abc"})

    def test_explicit_integer_key_removed_after_test(self, module: DatabaseModule):
        module.before_test()
        module.have_in_database("users", {"id": 10, "name": "eve"})

        module.after_test()

        module.dont_see_in_database("users", {"name": "eve"})
        module.see_num_records(3, "users")

    def test_insert_without_tracking(self, module: DatabaseModule):
        module.before_test()
        module.insert_in_database("tags", {"label": "blue", "weight": 2})

        module.after_test()

        module.see_num_records(1, "tags")

    def test_update_in_database(self, module: DatabaseModule):
        module.before_test()

        changed = module.update_in_database("users", {"email": "x@example.com"}, {"email": None})

        assert changed == 1
        module.see_in_database("users", {"name": "carol", "email": "x@example.com"})

    def test_cleanup_restores_dump_between_tests(self, module: DatabaseModule):
        module.before_test()
        module.insert_in_database("users", {"name": "temporary"})
        module.after_test()

        module.before_test()

        module.see_num_records(3, "users")
        module.dont_see_in_database("users", {"name": "temporary"})

    def test_populate_only_database_loaded_once(self, multi_module: DatabaseModule):
        with multi_module.using_database("reporting"):
            multi_module.see_num_records(1, "events")
            multi_module.insert_in_database("events", {"name": "login"})

        multi_module.before_test()

        with multi_module.using_database("reporting"):
            multi_module.see_num_records(2, "events")

    def test_after_test_visits_every_database(self, multi_module: DatabaseModule):
        multi_module.before_test()
        multi_module.use_database("reporting")
        multi_module.have_in_database("events", {"name": "login"})

        multi_module.after_test()

        with multi_module.using_database("reporting"):
            multi_module.see_num_records(1, "events")
        assert multi_module.current_database == "reporting"

    def test_before_test_selects_default(self, multi_module: DatabaseModule):
        multi_module.use_database("reporting")

        multi_module.before_test()

        assert multi_module.current_database == DEFAULT_DATABASE

    def test_after_suite_closes_connections(self, fixture_config: FixtureConfig):
        db_module = DatabaseModule(fixture_config)
        db_module.before_suite()

        db_module.after_suite()

        assert db_module.registry.connected_keys() == []

    def test_reconnect(self, fixture_config: FixtureConfig):
        config = fixture_config.model_copy(update={"reconnect": True})
        db_module = DatabaseModule(config)
        db_module.before_suite()
        try:
            first = db_module.get_driver()
            db_module.before_test()
            assert db_module.get_driver() is not first
            db_module.see_num_records(3, "users")
        finally:
            db_module.after_suite()

    def test_broken_dump_aborts_suite(self, fixture_config: FixtureConfig, project_dir: Path):
        (project_dir / "dump.sql").write_text("CREATE TABLE ok (id INTEGER);\nINSERT INTO missing VALUES (1);\n")
        db_module = DatabaseModule(fixture_config)
        try:
            with pytest.raises(ModuleError, match="SQL query being executed"):
                db_module.before_suite()
            assert not db_module.is_populated()
        finally:
            db_module.after_suite()

    def test_missing_dump_aborts_suite(self, fixture_config: FixtureConfig):
        config = fixture_config.model_copy(update={"dump": "absent.sql"})

        with pytest.raises(ConfigurationError, match="File with dump doesn't exist"):
            DatabaseModule(config).before_suite()

    def test_initialize_connects(self, fixture_config: FixtureConfig):
        db_module = DatabaseModule(fixture_config)
        db_module.initialize()
        try:
            assert db_module.get_connection().exec_driver_sql("SELECT 1").scalar() == 1
        finally:
            db_module.after_suite()


class TestDatabaseSelection:
    """Switching the current database."""

    def test_unknown_database(self, multi_module: DatabaseModule):
        with pytest.raises(ConfigurationError, match="No database analytics in the key databases"):
            multi_module.use_database("analytics")
        assert multi_module.current_database == DEFAULT_DATABASE

    def test_block_form_returns_value_and_restores(self, multi_module: DatabaseModule):
        result = multi_module.use_database("reporting", lambda db: db.grab_num_records("events"))

        assert result == 1
        assert multi_module.current_database == DEFAULT_DATABASE

    def test_scoped_switch_restores_on_exception(self, multi_module: DatabaseModule):
        with pytest.raises(RuntimeError):
            with multi_module.using_database("reporting"):
                raise RuntimeError("boom")

        assert multi_module.current_database == DEFAULT_DATABASE

    def test_nested_switches(self, multi_module: DatabaseModule):
        multi_module.use_database("reporting")

        with multi_module.using_database(DEFAULT_DATABASE):
            assert multi_module.current_database == DEFAULT_DATABASE

        assert multi_module.current_database == "reporting"

    def test_databases_and_descriptor(self, multi_module: DatabaseModule):
        assert list(multi_module.databases()) == [DEFAULT_DATABASE, "reporting"]
        assert multi_module.descriptor("reporting").dump == "reporting.sql"
        with pytest.raises(ConfigurationError):
            multi_module.descriptor("analytics")

    def test_status(self, multi_module: DatabaseModule):
        status = multi_module.status()

        assert status[DEFAULT_DATABASE]["connected"] is True
        assert status[DEFAULT_DATABASE]["populated"] is True
        assert status["reporting"]["dump_lines"] == 2


class TestTeardownWithoutConnection:
    def test_pending_rows_dropped_when_connection_is_gone(self, module: DatabaseModule):
        module.before_test()
        module.have_in_database("tags", {"label": "red", "weight": 1})
        module.registry.close(DEFAULT_DATABASE)

        module.after_test()

        assert module.inserted_rows() == []

    def test_delete_failures_are_logged(self, module: DatabaseModule, caplog):
        module.before_test()
        module.have_in_database("tags", {"label": "red", "weight": 1})
        module.get_driver().delete_by_criteria = Mock(side_effect=RuntimeError("locked"))

        with caplog.at_level("WARNING"):
            module.after_test()

        assert "couldn't delete record" in caplog.text
        assert module.inserted_rows() == []
