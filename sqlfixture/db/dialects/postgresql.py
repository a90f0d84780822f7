"""PostgreSQL dialect (psycopg2)."""

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Connection, CursorResult, URL

from sqlfixture.db.dialects.base import Dialect
from sqlfixture.db.dsn import DSN

DEFAULT_PORT = 5432

# PDO-style TLS keys to libpq parameter names
_TLS_PARAMETERS = {
    'ssl_key': 'sslkey',
    'ssl_cert': 'sslcert',
    'ssl_ca': 'sslrootcert',
}


def build_url(dsn: DSN, user: str, password: str, options: Dict[str, Any]) -> URL:
    """``pgsql:host=localhost;port=5432;dbname=app``."""
    query = {key: str(value) for key, value in options.items()}
    if dsn.get('sslmode'):
        query.setdefault('sslmode', dsn.get('sslmode'))

    port = dsn.get('port')
    return URL.create(
        "postgresql+psycopg2",
        username=user or None,
        password=password or None,
        host=dsn.get('host'),
        port=int(port) if port else DEFAULT_PORT,
        database=dsn.get('dbname'),
        query=query,
    )


def connect_args(tls: Dict[str, str]) -> Dict[str, Any]:
    args = {_TLS_PARAMETERS[name]: value for name, value in tls.items()}
    if args:
        args.setdefault('sslmode', 'verify-ca' if 'sslrootcert' in args else 'require')
    return args


def wipe(connection: Connection) -> None:
    """Recreate the public schema."""
    connection.execute(text("DROP SCHEMA IF EXISTS public CASCADE"))
    connection.execute(text("CREATE SCHEMA public"))


def last_insert_id(
    connection: Connection,
    table: str,
    primary_key: List[str],
    result: Optional[CursorResult] = None,
) -> Any:
    """Current value of the sequence behind the table's key column."""
    if len(primary_key) == 1:
        return connection.execute(
            text("SELECT currval(pg_get_serial_sequence(:table, :column))"),
            {'table': table, 'column': primary_key[0]},
        ).scalar()
    return connection.execute(text("SELECT lastval()")).scalar()


DIALECT = Dialect(
    name="postgresql",
    schemes=("pgsql", "postgres", "postgresql"),
    build_url=build_url,
    connect_args=connect_args,
    wipe=wipe,
    last_insert_id=last_insert_id,
    quote_char='"',
)
