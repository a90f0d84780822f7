"""External populator commands.

A populator is a shell command template such as
``mysql -u $user -h $host $dbname < $dump``. Placeholders are filled from the
DSN's ``key=value`` pairs and from the database's configuration, the latter
taking priority.
"""

import logging
import subprocess
from pathlib import Path
from string import Template
from typing import Any, Dict, Optional

from sqlfixture.config.models import DatabaseDescriptor
from sqlfixture.db.dsn import parse_dsn
from sqlfixture.exceptions import ConfigurationError, PopulatorError

logger = logging.getLogger(__name__)


class DbPopulator:
    """Builds and runs the populator command of one database."""

    def __init__(
        self,
        descriptor: DatabaseDescriptor,
        database_key: Optional[str] = None,
        working_dir: Optional[Path] = None,
    ) -> None:
        if not descriptor.populator:
            raise ConfigurationError(f"Database '{database_key}' has no populator configured")
        self.descriptor = descriptor
        self.database_key = database_key
        self.working_dir = working_dir

    def variables(self) -> Dict[str, Any]:
        """Template variables: DSN pairs overridden by configuration keys."""
        variables: Dict[str, Any] = dict(parse_dsn(self.descriptor.dsn).params)
        variables.update(self.descriptor.populator_variables())
        return variables

    def build_command(self) -> str:
        """The populator template with every known placeholder substituted."""
        return Template(self.descriptor.populator).safe_substitute(self.variables())

    def run(self) -> bool:
        """Run the populator.

        Returns:
            True when the command exits with status 0.

        Raises:
            PopulatorError: If the command exits with a non-zero status.
        """
        command = self.build_command()
        logger.debug("Executing populator for %s: `%s`", self.database_key, command)

        completed = subprocess.run(
            command,
            shell=True,
            capture_output=True,
            text=True,
            cwd=str(self.working_dir) if self.working_dir else None,
        )
        output = "\n".join(part for part in (completed.stdout, completed.stderr) if part).strip()

        if completed.returncode != 0:
            raise PopulatorError(
                "The populator command did not end successfully:\n"
                f"  Exit code: {completed.returncode}\n"
                f"  Output: {output}",
                database_key=self.database_key,
                command=command,
                exit_code=completed.returncode,
                output=output,
            )

        logger.debug("Populator finished for %s", self.database_key)
        return True
