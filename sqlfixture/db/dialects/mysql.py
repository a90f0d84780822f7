"""MySQL dialect (PyMySQL)."""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, URL

from sqlfixture.db.dialects.base import Dialect
from sqlfixture.db.dsn import DSN
from sqlfixture.db.query import quote_name

DEFAULT_PORT = 3306


def build_url(dsn: DSN, user: str, password: str, options: Dict[str, Any]) -> URL:
    """``mysql:host=localhost;port=3306;dbname=app;charset=utf8mb4``."""
    query = {key: str(value) for key, value in options.items()}
    query.setdefault('charset', dsn.get('charset', 'utf8mb4'))
    if dsn.get('unix_socket'):
        query['unix_socket'] = dsn.get('unix_socket')

    port = dsn.get('port')
    return URL.create(
        "mysql+pymysql",
        username=user or None,
        password=password or None,
        host=dsn.get('host') if not dsn.get('unix_socket') else None,
        port=int(port) if port else (None if dsn.get('unix_socket') else DEFAULT_PORT),
        database=dsn.get('dbname'),
        query=query,
    )


def connect_args(tls: Dict[str, str]) -> Dict[str, Any]:
    """PyMySQL takes TLS material as an ``ssl`` mapping."""
    if not tls:
        return {}
    return {
        'ssl': {
            name.replace('ssl_', ''): value
            for name, value in tls.items()
        }
    }


def wipe(connection: Connection) -> None:
    """Drop every table and view of the current database."""
    connection.execute(text("SET FOREIGN_KEY_CHECKS = 0"))
    try:
        objects = connection.execute(text("SHOW FULL TABLES")).all()
        for name, table_type in objects:
            kind = "VIEW" if table_type == "VIEW" else "TABLE"
            connection.execute(text(f"DROP {kind} IF EXISTS {quote_name(name, '`')}"))
    finally:
        connection.execute(text("SET FOREIGN_KEY_CHECKS = 1"))


def last_insert_id(
    connection: Connection,
    table: str,
    primary_key: List[str],
    result: Optional[CursorResult] = None,
) -> Any:
    """AUTO_INCREMENT value of the given INSERT, 0 when it generated none.

    ``LAST_INSERT_ID()`` is not reset by inserts that generate no id.
    """
    if result is not None:
        return result.lastrowid
    return connection.execute(text("SELECT LAST_INSERT_ID()")).scalar()


DIALECT = Dialect(
    name="mysql",
    schemes=("mysql", "mariadb"),
    build_url=build_url,
    connect_args=connect_args,
    wipe=wipe,
    last_insert_id=last_insert_id,
    quote_char='`',
)
