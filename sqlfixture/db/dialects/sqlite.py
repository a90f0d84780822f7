"""SQLite dialect."""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, URL

from sqlfixture.db.dialects.base import Dialect
from sqlfixture.db.dsn import DSN
from sqlfixture.db.query import quote_name

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ':memory:'


def build_url(dsn: DSN, user: str, password: str, options: Dict[str, Any]) -> URL:
    """``sqlite:/path/to/file.db`` or ``sqlite::memory:``.

    SQLite ignores credentials.
    """
    path = dsn.body
    if not path or path == MEMORY_DATABASE:
        database = None
    else:
        db_path = Path(path)
        if not db_path.is_absolute():
            db_path = Path.cwd() / db_path
        # Create directory if it doesn't exist
        db_path.parent.mkdir(parents=True, exist_ok=True)
        database = str(db_path)

    query = {key: str(value) for key, value in options.items()}
    return URL.create("sqlite", database=database, query=query)


def connect_args(tls: Dict[str, str]) -> Dict[str, Any]:
    if tls:
        logger.debug("SQLite ignores TLS options %s", sorted(tls))
    return {}


def wipe(connection: Connection) -> None:
    """Drop every view and table, leaving an empty database file."""
    foreign_keys = connection.execute(text("PRAGMA foreign_keys")).scalar()
    connection.execute(text("PRAGMA foreign_keys = OFF"))
    try:
        objects = connection.execute(text(
            "SELECT type, name FROM sqlite_master "
            "WHERE type IN ('view', 'table') AND name NOT LIKE 'sqlite_%' "
            "ORDER BY CASE type WHEN 'view' THEN 0 ELSE 1 END, name"
        )).all()
        for object_type, name in objects:
            connection.execute(text(f"DROP {object_type.upper()} IF EXISTS {quote_name(name)}"))
    finally:
        connection.execute(text(f"PRAGMA foreign_keys = {'ON' if foreign_keys else 'OFF'}"))


def last_insert_id(
    connection: Connection,
    table: str,
    primary_key: List[str],
    result: Optional[CursorResult] = None,
) -> Any:
    return connection.execute(text("SELECT last_insert_rowid()")).scalar()


DIALECT = Dialect(
    name="sqlite",
    schemes=("sqlite", "sqlite3"),
    build_url=build_url,
    connect_args=connect_args,
    wipe=wipe,
    last_insert_id=last_insert_id,
    quote_char='"',
)
