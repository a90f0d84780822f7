"""Connection registry: one live driver per database identifier."""

import logging
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy.engine import Connection

from sqlfixture.config.models import DatabaseDescriptor
from sqlfixture.db.driver import DRIVER_NOT_FOUND, Driver
from sqlfixture.db.dsn import dsn_scheme
from sqlfixture.exceptions import DatabaseConnectionError, NoConnectionError

logger = logging.getLogger(__name__)

DriverFactory = Callable[[str, str, str, Dict[str, Any]], Driver]


class ConnectionRegistry:
    """Owns the connection of every configured database."""

    def __init__(self, driver_factory: Optional[DriverFactory] = None) -> None:
        """Initialize the registry.

        Args:
            driver_factory: Callable opening a driver from ``(dsn, user,
                password, options)``; defaults to :meth:`Driver.create`.
        """
        self._drivers: Dict[str, Driver] = {}
        self._driver_factory = driver_factory or Driver.create

    def connect(self, key: str, descriptor: DatabaseDescriptor) -> None:
        """Open a connection for ``key`` unless one is already live.

        Raises:
            DatabaseConnectionError: If the connection cannot be opened.
        """
        if self.is_connected(key):
            return

        options: Dict[str, Any] = dict(descriptor.options)
        options.update(descriptor.tls_options())

        try:
            driver = self._driver_factory(descriptor.dsn, descriptor.user, descriptor.password, options)
        except DatabaseConnectionError as e:
            message = e.message
            if message == DRIVER_NOT_FOUND:
                message = f"could not find {dsn_scheme(descriptor.dsn)} driver"
            raise DatabaseConnectionError(
                f"{message} while creating database connection",
                database_key=key,
                dsn=descriptor.dsn,
                details=e.details,
            ) from e

        self._drivers[key] = driver
        logger.debug("Connected to %s %s", key, driver.database_name)

    def disconnect(self, key: str, descriptor: DatabaseDescriptor) -> None:
        """Close the connection of ``key`` if the database asks to reconnect."""
        if not descriptor.reconnect:
            return
        self.close(key)
        logger.debug("Disconnected from %s", key)

    def close(self, key: str) -> None:
        """Close and forget the connection of ``key``."""
        driver = self._drivers.pop(key, None)
        if driver is not None:
            driver.close()

    def close_all(self) -> None:
        """Close every connection."""
        for key in list(self._drivers):
            try:
                self.close(key)
            except Exception as e:
                logger.warning("Failed to close connection to %s: %s", key, e)

    def is_connected(self, key: str) -> bool:
        driver = self._drivers.get(key)
        return driver is not None and not driver.is_closed

    def get_driver(self, key: str) -> Driver:
        """Driver of ``key``.

        Raises:
            NoConnectionError: If ``key`` has no live connection.
        """
        if not self.is_connected(key):
            raise NoConnectionError(key)
        return self._drivers[key]

    def lookup(self, key: str) -> Connection:
        """Live connection handle of ``key``.

        Raises:
            NoConnectionError: If ``key`` has no live connection.
        """
        return self.get_driver(key).get_connection()

    def connected_keys(self) -> List[str]:
        return [key for key in self._drivers if self.is_connected(key)]

    def status(self, descriptors: Dict[str, DatabaseDescriptor]) -> Dict[str, Dict[str, Any]]:
        """Connection status of each configured database."""
        result = {}
        for key, descriptor in descriptors.items():
            driver = self._drivers.get(key)
            result[key] = {
                'connected': self.is_connected(key),
                'scheme': descriptor.scheme,
                'database': driver.database_name if driver is not None else None,
                'populate': descriptor.populate,
                'cleanup': descriptor.cleanup,
                'reconnect': descriptor.reconnect,
            }
        return result
