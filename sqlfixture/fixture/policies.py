"""Error handling policies for fixture lifecycle steps.

``fatal`` is used for setup and teardown steps whose failure leaves the
database in an unknown state: the run must stop. ``best_effort`` is used for
per-row teardown where one failure must not strand the remaining work.
"""

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlfixture.exceptions import ModuleError, SQLFixtureError

logger = logging.getLogger(__name__)


@contextmanager
def fatal(operation: str, database_key: Optional[str] = None) -> Iterator[None]:
    """Re-raise any failure inside the block as a :class:`ModuleError`.

    SQLFixture errors pass through unchanged so that configuration problems
    keep their type.
    """
    try:
        yield
    except SQLFixtureError:
        raise
    except Exception as e:
        raise ModuleError(
            f"{operation} failed: {e}",
            database_key=database_key,
            details={'operation': operation, 'cause': type(e).__name__},
        ) from e


@contextmanager
def best_effort(description: str, log: Optional[logging.Logger] = None) -> Iterator[None]:
    """Log and swallow any failure inside the block."""
    try:
        yield
    except Exception as e:
        (log or logger).warning("%s: %s", description, e)
