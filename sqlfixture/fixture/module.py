"""Database fixture lifecycle.

:class:`DatabaseModule` drives connections, dump loading, cleanup and
inserted-row removal around a test suite::

    module = DatabaseModule(config)
    module.before_suite()
    for test in tests:
        module.before_test()
        test(module)
        module.after_test()
    module.after_suite()

Every step applies to the default database and to each entry of the
``databases`` mapping.
"""

import logging
from collections import OrderedDict
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional

import pandas as pd
from sqlalchemy.engine import Connection

from sqlfixture.config.models import DEFAULT_DATABASE, DatabaseDescriptor, FixtureConfig
from sqlfixture.db.driver import Driver
from sqlfixture.db.registry import ConnectionRegistry
from sqlfixture.exceptions import ConfigurationError, NoConnectionError
from sqlfixture.fixture.assertions import QueryAssertions
from sqlfixture.fixture.cleanup import CleanupEngine
from sqlfixture.fixture.loader import DatasetLoader
from sqlfixture.fixture.state import PopulationState
from sqlfixture.fixture.tracker import InsertedRow, MutationTracker

logger = logging.getLogger(__name__)


class DatabaseModule:
    """Keeps test databases in a known state and offers fixture helpers."""

    def __init__(
        self,
        config: FixtureConfig,
        registry: Optional[ConnectionRegistry] = None,
        project_dir: Optional[Path] = None,
    ) -> None:
        """Initialize the module.

        Args:
            config: Fixture configuration.
            registry: Connection registry; a new one is created if omitted.
            project_dir: Root for dump paths; defaults to the configuration's
                project directory.
        """
        self.config = config
        self.registry = registry or ConnectionRegistry()
        self.state = PopulationState()
        self.loader = DatasetLoader(
            self.registry,
            self.state,
            project_dir or config.resolve_project_dir(),
        )
        self.cleaner = CleanupEngine(self.registry, self.loader, self.state)
        self.tracker = MutationTracker()
        self.assertions = QueryAssertions(self.get_driver)
        self._descriptors: "OrderedDict[str, DatabaseDescriptor]" = config.descriptors()
        self.current_database = DEFAULT_DATABASE

    def databases(self) -> "OrderedDict[str, DatabaseDescriptor]":
        """Configured databases keyed by identifier, default first."""
        return OrderedDict(self._descriptors)

    def descriptor(self, key: Optional[str] = None) -> DatabaseDescriptor:
        key = key or self.current_database
        if key not in self._descriptors:
            raise ConfigurationError(f"No database {key} in the key databases.")
        return self._descriptors[key]

    # Lifecycle

    def initialize(self) -> None:
        """Connect every configured database."""
        self._connect_databases()

    def before_suite(self) -> None:
        """Read dumps, connect, clean up and populate every database."""
        self._read_dumps()
        self._connect_databases()
        self._cleanup_databases()
        self._populate_databases('populate')

    def before_test(self) -> None:
        """Reconnect where configured, select the default database, then clean
        up and reload databases that reload their dump per test."""
        self._reconnect_databases()
        self.use_database(DEFAULT_DATABASE)
        self._cleanup_databases()
        self._populate_databases('cleanup')

    def after_test(self) -> None:
        """Remove every row inserted through :meth:`have_in_database`."""
        for key in self._descriptors:
            self.use_database(key)
            self._remove_inserted(key)

    def after_suite(self) -> None:
        """Close every connection."""
        self.registry.close_all()

    def _read_dumps(self) -> None:
        for key, descriptor in self._descriptors.items():
            self.loader.read_dump(key, descriptor)

    def _connect_databases(self) -> None:
        for key, descriptor in self._descriptors.items():
            self.registry.connect(key, descriptor)

    def _reconnect_databases(self) -> None:
        for key, descriptor in self._descriptors.items():
            if descriptor.reconnect:
                self.registry.disconnect(key, descriptor)
                self.registry.connect(key, descriptor)

    def _cleanup_databases(self) -> None:
        for key, descriptor in self._descriptors.items():
            self.cleaner.cleanup(key, descriptor)

    def _populate_databases(self, flag: str) -> None:
        # 'populate' at suite start, 'cleanup' before each test; the loader
        # still skips databases without 'populate'.
        for key, descriptor in self._descriptors.items():
            if getattr(descriptor, flag):
                self.loader.load(key, descriptor)

    def _remove_inserted(self, key: str) -> None:
        if not self.tracker.pending(key):
            return
        try:
            driver = self.registry.get_driver(key)
        except NoConnectionError:
            logger.warning("No connection to %s, inserted rows were not removed", key)
            self.tracker.clear(key)
            return
        self.tracker.drain_and_remove(key, driver)

    # Database selection

    def use_database(self, key: str, block: Optional[Callable[["DatabaseModule"], Any]] = None) -> Any:
        """Make ``key`` the database targeted by subsequent calls.

        With ``block`` the switch only lasts for the call ``block(self)``,
        whose return value is returned.

        Raises:
            ConfigurationError: If ``key`` is not a configured database.
        """
        if block is None:
            self._check_database(key)
            self.current_database = key
            return None

        with self.using_database(key):
            return block(self)

    @contextmanager
    def using_database(self, key: str) -> Iterator["DatabaseModule"]:
        """Target ``key`` inside the ``with`` block, restoring the previous
        selection on exit."""
        self._check_database(key)
        previous = self.current_database
        self.current_database = key
        try:
            yield self
        finally:
            self.current_database = previous

    def _check_database(self, key: str) -> None:
        if key != DEFAULT_DATABASE and key not in self._descriptors:
            raise ConfigurationError(
                f"No database {key} in the key databases.",
                details={'database': key, 'available': list(self._descriptors)},
            )

    # Accessors

    def get_driver(self) -> Driver:
        """Driver of the current database."""
        return self.registry.get_driver(self.current_database)

    def get_connection(self) -> Connection:
        """Connection handle of the current database."""
        return self.registry.lookup(self.current_database)

    def is_populated(self) -> bool:
        """Whether the current database holds its dump."""
        return self.state.is_populated(self.current_database)

    def inserted_rows(self) -> List[InsertedRow]:
        """Rows pending removal from the current database."""
        return self.tracker.pending(self.current_database)

    # Fixture data

    def insert_in_database(self, table: str, data: Mapping[str, Any]) -> int:
        """Insert a row without tracking it; returns the generated id or 0."""
        driver = self.get_driver()
        query = driver.insert(table, data)
        logger.debug("Query: %s", query.sql)
        logger.debug("Parameters: %s", list(query.parameters))
        result = driver.execute_query(query)
        return driver.last_insert_id(table, result)

    def have_in_database(self, table: str, data: Mapping[str, Any]) -> int:
        """Insert a row that is removed again after the test.

        Returns:
            The generated id, 0 when the table does not generate one.
        """
        last_insert_id = self.insert_in_database(table, data)
        self.tracker.record_insert(
            self.current_database, table, data, last_insert_id, self.get_driver()
        )
        return last_insert_id

    def update_in_database(
        self,
        table: str,
        data: Mapping[str, Any],
        criteria: Optional[Mapping[str, Any]] = None,
    ) -> int:
        """Update matching rows; returns the number of rows changed."""
        driver = self.get_driver()
        query = driver.update(table, data, criteria)
        logger.debug("Query: %s", query.sql)
        if query.parameters:
            logger.debug("Parameters: %s", list(query.parameters))
        return driver.execute_query(query).rowcount

    # Queries and assertions

    def see_in_database(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        self.assertions.see_in_database(table, criteria)

    def dont_see_in_database(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        self.assertions.dont_see_in_database(table, criteria)

    def see_num_records(self, expected: int, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        self.assertions.see_num_records(expected, table, criteria)

    def grab_num_records(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> int:
        return self.assertions.count(table, criteria)

    def grab_from_database(self, table: str, column: str, criteria: Optional[Mapping[str, Any]] = None) -> Any:
        return self.assertions.select_column(table, column, criteria)

    def grab_column_from_database(
        self,
        table: str,
        column: str,
        criteria: Optional[Mapping[str, Any]] = None,
    ) -> List[Any]:
        return self.assertions.select_all(table, column, criteria)

    def grab_entries_from_database(
        self,
        table: str,
        criteria: Optional[Mapping[str, Any]] = None,
    ) -> pd.DataFrame:
        return self.assertions.select_frame(table, criteria)

    def status(self) -> Dict[str, Dict[str, Any]]:
        """Connection and population status of every database."""
        status = self.registry.status(self._descriptors)
        for key, info in status.items():
            info['populated'] = self.state.get(key)
            statements = self.loader.get_statements(key)
            info['dump_lines'] = len(statements) if statements is not None else None
        return status
