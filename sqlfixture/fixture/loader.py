"""Reading SQL dumps and loading them into databases."""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from sqlfixture.config.models import DatabaseDescriptor
from sqlfixture.db.registry import ConnectionRegistry
from sqlfixture.exceptions import ConfigurationError, ModuleError
from sqlfixture.fixture.policies import fatal
from sqlfixture.fixture.populator import DbPopulator
from sqlfixture.fixture.state import PopulationState

logger = logging.getLogger(__name__)

# C-style comments, except version directives like /*!40101 ... */
BLOCK_COMMENT_PATTERN = re.compile(r'/\*(?!!\d+).*?\*/', re.DOTALL)
LINE_BREAK_PATTERN = re.compile(r'\r\n|\n|\r')


def strip_block_comments(sql: str) -> str:
    return BLOCK_COMMENT_PATTERN.sub('', sql)


def split_dump_lines(sql: str) -> List[str]:
    """Split dump text into its non-empty physical lines."""
    return [line for line in LINE_BREAK_PATTERN.split(sql) if line]


class DatasetLoader:
    """Reads each database's dump once and loads it on demand."""

    def __init__(
        self,
        registry: ConnectionRegistry,
        state: PopulationState,
        project_dir: Optional[Path] = None,
    ) -> None:
        self.registry = registry
        self.state = state
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._statements: Dict[str, List[str]] = {}
        self._sources: Dict[str, Path] = {}

    def has_statements(self, key: str) -> bool:
        """Whether a dump was read for ``key`` (possibly yielding no lines)."""
        return key in self._statements

    def get_statements(self, key: str) -> Optional[List[str]]:
        """Cached dump lines of ``key``; None when no dump was read."""
        statements = self._statements.get(key)
        return list(statements) if statements is not None else None

    def resolve_dump_path(self, dump: str) -> Path:
        path = Path(dump)
        if path.is_absolute():
            return path
        return self.project_dir / path

    def read_dump(self, key: str, descriptor: DatabaseDescriptor) -> None:
        """Read and split the dump of ``key``.

        Skipped when a populator is configured, when neither ``populate`` nor
        ``cleanup`` is set, or when no dump is configured. The result is
        cached until the dump path changes.

        Raises:
            ConfigurationError: If the dump file does not exist.
        """
        if descriptor.populator:
            return
        if not descriptor.cleanup and not descriptor.populate:
            return
        if not descriptor.dump:
            return

        path = self.resolve_dump_path(descriptor.dump)
        if key in self._statements and self._sources.get(key) == path:
            return

        if not path.is_file():
            raise ConfigurationError(
                "File with dump doesn't exist.\n"
                f"Please, check path for sql file: {descriptor.dump}",
                details={'database': key, 'path': str(path)},
            )

        sql = strip_block_comments(path.read_text(encoding='utf-8'))
        self._statements[key] = split_dump_lines(sql)
        self._sources[key] = path
        logger.debug("Read %d dump lines for %s from %s", len(self._statements[key]), key, path)

    def load(self, key: str, descriptor: DatabaseDescriptor) -> None:
        """Load the dump of ``key`` unless it is already loaded.

        Raises:
            ModuleError: If a statement or the populator fails.
        """
        if not descriptor.populate:
            return
        if self.state.is_populated(key):
            return

        if descriptor.populator:
            self._load_using_populator(key, descriptor)
            return
        self._load_using_driver(key)

    def _load_using_populator(self, key: str, descriptor: DatabaseDescriptor) -> None:
        populator = DbPopulator(descriptor, database_key=key, working_dir=self.project_dir)
        try:
            self.state.set(key, populator.run())
        except ModuleError:
            self.state.set(key, False)
            raise

    def _load_using_driver(self, key: str) -> None:
        statements = self._statements.get(key)
        if statements is None:
            logger.debug("No dump read for %s, loading skipped", key)
            return
        if not statements:
            logger.debug("No SQL loaded for %s, loading dump skipped", key)
            return

        driver = self.registry.get_driver(key)
        with fatal(f"Loading dump into {key}", database_key=key):
            driver.load_statements(statements)
        self.state.mark_loaded(key)
        logger.debug("Loaded dump into %s", key)
