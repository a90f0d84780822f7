"""
Shared fixtures for the SQLFixture test suite.

Databases are file-backed SQLite databases under ``tmp_path`` so every test
starts from a fresh file.
"""
from pathlib import Path
from typing import Iterator

import pytest

from sqlfixture.config.models import FixtureConfig
from sqlfixture.db.driver import Driver
from sqlfixture.fixture.module import DatabaseModule

DUMP_SQL = """/* Fixture dump for the users table */
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT
);
-- seed rows
INSERT INTO users (name, email) VALUES ('alice', 'alice@example.com');
INSERT INTO users (name, email) VALUES ('bob', 'bob@example.com');
INSERT INTO users (name, email) VALUES ('carol', NULL);

CREATE TABLE tags (label TEXT, weight INTEGER);
CREATE TABLE memberships (
    user_id INTEGER,
    group_id INTEGER,
    PRIMARY KEY (user_id, group_id)
);
"""


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Project directory holding ``dump.sql``."""
    (tmp_path / "dump.sql").write_text(DUMP_SQL, encoding="utf-8")
    return tmp_path


@pytest.fixture
def sqlite_dsn(project_dir: Path) -> str:
    return f"sqlite:{project_dir / 'app.db'}"


@pytest.fixture
def fixture_config(project_dir: Path, sqlite_dsn: str) -> FixtureConfig:
    """Default database that reloads its dump before every test."""
    return FixtureConfig(
        dsn=sqlite_dsn,
        user="",
        password="",
        dump="dump.sql",
        populate=True,
        cleanup=True,
        project_dir=str(project_dir),
    )


@pytest.fixture
def module(fixture_config: FixtureConfig) -> Iterator[DatabaseModule]:
    """Module after suite setup; closed at teardown."""
    db_module = DatabaseModule(fixture_config)
    db_module.before_suite()
    try:
        yield db_module
    finally:
        db_module.after_suite()


@pytest.fixture
def driver(tmp_path: Path) -> Iterator[Driver]:
    """Driver on an empty SQLite file."""
    sqlite_driver = Driver.create(f"sqlite:{tmp_path / 'driver.db'}", "", "", {})
    try:
        yield sqlite_driver
    finally:
        sqlite_driver.close()
