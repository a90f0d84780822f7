"""Database connectivity and query generation."""

from sqlfixture.db.driver import DRIVER_NOT_FOUND, Driver, DriverProtocol
from sqlfixture.db.dsn import DSN, dsn_scheme, parse_dsn
from sqlfixture.db.query import Query, build_criteria_clause
from sqlfixture.db.registry import ConnectionRegistry
from sqlfixture.db.dialects import Dialect, DialectRegistry

__all__ = [
    # Drivers
    "DRIVER_NOT_FOUND",
    "Driver",
    "DriverProtocol",
    "Dialect",
    "DialectRegistry",
    # Connection management
    "ConnectionRegistry",
    # DSN and queries
    "DSN",
    "dsn_scheme",
    "parse_dsn",
    "Query",
    "build_criteria_clause",
]
