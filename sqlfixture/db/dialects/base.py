"""Dialect description shared by all supported databases."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.engine import Connection, CursorResult, URL

from sqlfixture.db.dsn import DSN

TLS_OPTION_KEYS = ('ssl_key', 'ssl_cert', 'ssl_ca')


def split_options(options: Optional[Dict[str, Any]]) -> Tuple[Dict[str, str], Dict[str, Any]]:
    """Separate TLS material from the remaining driver options."""
    tls: Dict[str, str] = {}
    rest: Dict[str, Any] = {}
    for key, value in (options or {}).items():
        if key in TLS_OPTION_KEYS:
            if value:
                tls[key] = value
        else:
            rest[key] = value
    return tls, rest


@dataclass(frozen=True)
class Dialect:
    """Everything that differs between database flavours.

    A dialect is a value: the :class:`~sqlfixture.db.driver.Driver` holds one
    and calls into it for URL construction, TLS options, wiping and
    generated-id lookup.

    Attributes:
        name: Human readable name.
        schemes: DSN prefixes handled by this dialect.
        build_url: Builds the SQLAlchemy URL from a parsed DSN, user,
            password and non-TLS options.
        connect_args: Maps TLS options onto DBAPI ``connect()`` arguments.
        wipe: Drops every object in the connected database.
        last_insert_id: Returns the id generated by the previous INSERT into
            the given table. Receives the table's primary key columns and
            the result of that INSERT, when known.
        quote_char: Identifier quote character.
        engine_options: Extra ``create_engine`` keyword arguments.
    """

    name: str
    schemes: Tuple[str, ...]
    build_url: Callable[[DSN, str, str, Dict[str, Any]], URL]
    connect_args: Callable[[Dict[str, str]], Dict[str, Any]]
    wipe: Callable[[Connection], None]
    last_insert_id: Callable[[Connection, str, List[str], Optional[CursorResult]], Any]
    quote_char: str = '"'
    engine_options: Dict[str, Any] = field(default_factory=dict)

    def database_name(self, dsn: DSN) -> str:
        """Name of the target database for log messages."""
        return dsn.get('dbname') or dsn.get('database') or dsn.body
