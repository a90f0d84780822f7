"""Database driver built on SQLAlchemy.

One :class:`Driver` implementation covers every database; dialect specifics
live in :mod:`sqlfixture.db.dialects` and are picked from the DSN scheme when
the driver is created.
"""

import logging
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence, Union

from sqlalchemy import create_engine, inspect, text
from sqlalchemy.engine import Connection, CursorResult, Engine
from sqlalchemy.exc import NoSuchModuleError, SQLAlchemyError

from sqlfixture.db.dialects import Dialect, DialectRegistry, split_options
from sqlfixture.db.dsn import DSN, parse_dsn
from sqlfixture.db.query import (
    Query,
    bind_parameters,
    build_delete,
    build_insert,
    build_select,
    build_update,
    quote_name,
)
from sqlfixture.exceptions import DatabaseConnectionError, ModuleError

logger = logging.getLogger(__name__)

DRIVER_NOT_FOUND = "could not find driver"

DELIMITER_PATTERN = re.compile(r'DELIMITER ([;$|\\]+)', re.IGNORECASE)
COMMENT_LINE_PATTERN = re.compile(r'^(--|#)')


class DriverProtocol(Protocol):
    """Capabilities the fixture lifecycle needs from a database driver."""

    def get_connection(self) -> Connection: ...

    def wipe(self) -> None: ...

    def load_statements(self, lines: Iterable[str]) -> None: ...

    def insert(self, table: str, data: Mapping[str, Any]) -> Query: ...

    def update(self, table: str, data: Mapping[str, Any], criteria: Optional[Mapping[str, Any]] = None) -> Query: ...

    def select(self, column: str, table: str, criteria: Optional[Mapping[str, Any]] = None) -> Query: ...

    def delete_by_criteria(self, table: str, criteria: Mapping[str, Any]) -> None: ...

    def last_insert_id(self, table: str, result: Optional[CursorResult] = None) -> int: ...

    def primary_key_columns(self, table: str) -> List[str]: ...

    def execute_query(self, query: Union[Query, str], parameters: Optional[Sequence[Any]] = None) -> CursorResult: ...

    def close(self) -> None: ...


class Driver:
    """A live connection to one database plus the SQL it needs to speak."""

    def __init__(self, dialect: Dialect, dsn: DSN, engine: Engine, connection: Connection) -> None:
        self.dialect = dialect
        self.dsn = dsn
        self._engine = engine
        self._connection: Optional[Connection] = connection
        self._primary_keys: Dict[str, List[str]] = {}

    @classmethod
    def create(
        cls,
        dsn: str,
        user: str,
        password: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> "Driver":
        """Open a connection for ``dsn``.

        Args:
            dsn: PDO-style data source name.
            user: Username.
            password: Password.
            options: TLS material (``ssl_key``, ``ssl_cert``, ``ssl_ca``) and
                driver options passed on the connection URL.

        Raises:
            DatabaseConnectionError: With message ``could not find driver``
                when the scheme is unknown or its DBAPI module is not
                installed, otherwise with the driver's own message.
        """
        parsed = parse_dsn(dsn)
        dialect = DialectRegistry.get(parsed.scheme)
        if dialect is None:
            raise DatabaseConnectionError(DRIVER_NOT_FOUND, dsn=dsn)

        tls, driver_options = split_options(options)
        try:
            url = dialect.build_url(parsed, user, password, driver_options)
            engine_args: Dict[str, Any] = {
                'isolation_level': 'AUTOCOMMIT',
                'echo': False,
            }
            engine_args.update(dialect.engine_options)
            connect_args = dialect.connect_args(tls)
            if connect_args:
                engine_args['connect_args'] = connect_args
            engine = create_engine(url, **engine_args)
        except (ImportError, NoSuchModuleError) as e:
            raise DatabaseConnectionError(DRIVER_NOT_FOUND, dsn=dsn, details={'cause': str(e)}) from e
        except (SQLAlchemyError, ValueError) as e:
            raise DatabaseConnectionError(str(e), dsn=dsn) from e

        try:
            connection = engine.connect()
        except SQLAlchemyError as e:
            engine.dispose()
            raise DatabaseConnectionError(str(getattr(e, 'orig', None) or e), dsn=dsn) from e

        return cls(dialect, parsed, engine, connection)

    @property
    def database_name(self) -> str:
        return self.dialect.database_name(self.dsn)

    @property
    def is_closed(self) -> bool:
        return self._connection is None or self._connection.closed

    def get_connection(self) -> Connection:
        """The live connection handle."""
        if self._connection is None:
            raise DatabaseConnectionError("Driver connection is closed", dsn=self.dsn.body)
        return self._connection

    def close(self) -> None:
        """Close the connection and dispose of the engine."""
        if self._connection is not None:
            try:
                self._connection.close()
            finally:
                self._connection = None
                self._engine.dispose()

    def quote_name(self, name: str) -> str:
        return quote_name(name, self.dialect.quote_char)

    def wipe(self) -> None:
        """Drop everything in the database."""
        self._primary_keys.clear()
        self.dialect.wipe(self.get_connection())

    def load_statements(self, lines: Iterable[str]) -> None:
        """Execute a dump given as physical lines.

        Lines accumulate into a statement until one ends with the current
        delimiter (``;`` unless changed by a ``DELIMITER`` line). Blank lines
        and lines starting with ``--`` or ``#`` are skipped.

        Raises:
            ModuleError: On the first failing statement; later statements
                are not executed.
        """
        query = ''
        delimiter = ';'

        for line in lines:
            match = DELIMITER_PATTERN.search(line)
            if match:
                delimiter = match.group(1)
                continue

            stripped = line.strip()
            if not stripped or stripped == ';' or COMMENT_LINE_PATTERN.match(stripped):
                continue

            query = f"{query}\n{line.rstrip()}" if query else line.rstrip()

            if query.endswith(delimiter):
                self._execute_raw(query[:-len(delimiter)])
                query = ''

        if query.strip():
            logger.debug("Dump ended without a delimiter, skipped trailing SQL: %s", query)

    def _execute_raw(self, sql: str) -> None:
        try:
            self.get_connection().exec_driver_sql(sql)
        except SQLAlchemyError as e:
            raise ModuleError(
                f"{getattr(e, 'orig', None) or e}\nSQL query being executed: {sql}",
                sql_query=sql,
            ) from e

    def insert(self, table: str, data: Mapping[str, Any]) -> Query:
        return build_insert(table, data, self.quote_name)

    def update(self, table: str, data: Mapping[str, Any], criteria: Optional[Mapping[str, Any]] = None) -> Query:
        return build_update(table, data, criteria, self.quote_name)

    def select(self, column: str, table: str, criteria: Optional[Mapping[str, Any]] = None) -> Query:
        return build_select(column, table, criteria, self.quote_name)

    def delete_by_criteria(self, table: str, criteria: Mapping[str, Any]) -> None:
        query = build_delete(table, criteria, self.quote_name)
        self.execute_query(query)

    def last_insert_id(self, table: str, result: Optional[CursorResult] = None) -> int:
        """Id generated by the last INSERT into ``table``, or 0 if unknown.

        Pass the ``result`` of that INSERT where the dialect can read the id
        from it.
        """
        try:
            value = self.dialect.last_insert_id(
                self.get_connection(), table, self.primary_key_columns(table), result
            )
        except SQLAlchemyError as e:
            # tables without an id sequence
            logger.debug("No generated id for %s: %s", table, e)
            return 0
        try:
            return int(value) if value is not None else 0
        except (TypeError, ValueError):
            return 0

    def primary_key_columns(self, table: str) -> List[str]:
        """Primary key columns of ``table`` in declaration order."""
        if table not in self._primary_keys:
            schema, _, name = table.rpartition('.')
            constraint = inspect(self.get_connection()).get_pk_constraint(name, schema=schema or None)
            self._primary_keys[table] = list(constraint.get('constrained_columns') or [])
        return self._primary_keys[table]

    def execute_query(
        self,
        query: Union[Query, str],
        parameters: Optional[Sequence[Any]] = None,
    ) -> CursorResult:
        """Execute a parameterized query.

        Args:
            query: Generated :class:`Query` or SQL text using ``:p0``,
                ``:p1``... placeholders.
            parameters: Positional values; defaults to the query's own.
        """
        if isinstance(query, Query):
            sql = query.sql
            values = query.parameters if parameters is None else parameters
        else:
            sql = query
            values = parameters or ()
        return self.get_connection().execute(text(sql), bind_parameters(values))
