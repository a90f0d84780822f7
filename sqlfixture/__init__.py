"""SQLFixture: database fixtures for test suites.

SQLFixture provides:
- SQL dump loading before the suite or before every test
- Database wiping between tests
- External populator commands
- Automatic removal of rows inserted during a test
- Record assertions for SQLite, MySQL and PostgreSQL
- A pytest plugin and a CLI
"""

__version__ = "0.1.0"
__author__ = "David Schaaf"
__license__ = "MIT"

# Core exports
from sqlfixture.exceptions import (
    SQLFixtureError,
    ConfigurationError,
    DatabaseConnectionError,
    ModuleError,
    DatabaseAssertionError,
)
from sqlfixture.fixture.module import DatabaseModule

__all__ = [
    "__version__",
    "DatabaseModule",
    "SQLFixtureError",
    "ConfigurationError",
    "DatabaseConnectionError",
    "ModuleError",
    "DatabaseAssertionError",
]
