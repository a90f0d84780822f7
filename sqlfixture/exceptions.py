"""Core exceptions for SQLFixture."""

from typing import Any, Dict, Optional


class SQLFixtureError(Exception):
    """Base exception for all SQLFixture errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(SQLFixtureError):
    """Raised when the fixture configuration is invalid or incomplete."""
    pass


class NoConnectionError(ConfigurationError):
    """Raised when a database is used before a connection was opened for it."""

    def __init__(self, database_key: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(f"No connection to database '{database_key}'", details)
        self.database_key = database_key


class InvalidArgumentError(ConfigurationError, ValueError):
    """Raised when fixture data is missing values the database layer needs."""
    pass


class DatabaseConnectionError(SQLFixtureError):
    """Raised when a connection to a database cannot be opened."""

    def __init__(
        self,
        message: str,
        database_key: Optional[str] = None,
        dsn: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.database_key = database_key
        self.dsn = dsn


class ModuleError(SQLFixtureError):
    """Raised when a fixture lifecycle step fails and the run must abort."""

    def __init__(
        self,
        message: str,
        database_key: Optional[str] = None,
        sql_query: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.database_key = database_key
        self.sql_query = sql_query


class PopulatorError(ModuleError):
    """Raised when the external populator command exits unsuccessfully."""

    def __init__(
        self,
        message: str,
        database_key: Optional[str] = None,
        command: Optional[str] = None,
        exit_code: Optional[int] = None,
        output: str = "",
    ):
        super().__init__(message, database_key=database_key)
        self.command = command
        self.exit_code = exit_code
        self.output = output


class DatabaseAssertionError(AssertionError):
    """Raised when a database assertion does not hold."""

    def __init__(
        self,
        message: str,
        table: Optional[str] = None,
        expected: Any = None,
        actual: Any = None,
    ):
        super().__init__(message)
        self.message = message
        self.table = table
        self.expected = expected
        self.actual = actual
