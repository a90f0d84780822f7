"""Wiping databases back to an empty state between tests."""

import logging

from sqlfixture.config.models import DatabaseDescriptor
from sqlfixture.db.registry import ConnectionRegistry
from sqlfixture.exceptions import ConfigurationError, NoConnectionError
from sqlfixture.fixture.loader import DatasetLoader
from sqlfixture.fixture.policies import fatal
from sqlfixture.fixture.state import PopulationState

logger = logging.getLogger(__name__)


class CleanupEngine:
    """Drops the contents of databases that reload their dump per test."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        loader: DatasetLoader,
        state: PopulationState,
    ) -> None:
        self.registry = registry
        self.loader = loader
        self.state = state

    def cleanup(self, key: str, descriptor: DatabaseDescriptor) -> None:
        """Wipe ``key`` if it is configured for both populate and cleanup.

        Raises:
            ConfigurationError: If the database has no live connection.
            ModuleError: If the wipe fails.
        """
        if not descriptor.populate or not descriptor.cleanup:
            return
        if self.state.is_cleaned(key):
            return

        try:
            driver = self.registry.get_driver(key)
        except NoConnectionError as e:
            raise ConfigurationError(
                f"No connection to database '{key}'. Remove it from the configuration "
                "if you don't need database repopulation",
                details={'database': key},
            ) from e

        # an explicitly empty dump means the database is never touched
        statements = self.loader.get_statements(key)
        if statements is not None and not statements:
            return

        with fatal(f"Cleaning up {key}", database_key=key):
            driver.wipe()
        self.state.mark_cleaned(key)
        logger.debug("Cleaned up %s", key)
