"""Read queries and assertions against the current database."""

import json
import logging
from typing import Any, Callable, List, Mapping, Optional

import pandas as pd

from sqlfixture.db.driver import DriverProtocol
from sqlfixture.exceptions import DatabaseAssertionError

logger = logging.getLogger(__name__)


def serialize_criteria(criteria: Optional[Mapping[str, Any]]) -> str:
    return json.dumps(dict(criteria or {}), default=str)


def assert_greater_than(expected: Any, actual: Any, message: str, table: Optional[str] = None) -> None:
    if not actual > expected:
        raise DatabaseAssertionError(message, table=table, expected=expected, actual=actual)


def assert_less_than(expected: Any, actual: Any, message: str, table: Optional[str] = None) -> None:
    if not actual < expected:
        raise DatabaseAssertionError(message, table=table, expected=expected, actual=actual)


def assert_equals(expected: Any, actual: Any, message: str, table: Optional[str] = None) -> None:
    if not actual == expected:
        raise DatabaseAssertionError(message, table=table, expected=expected, actual=actual)


class QueryAssertions:
    """Builds read queries from criteria and asserts on their results."""

    def __init__(self, driver_provider: Callable[[], DriverProtocol]) -> None:
        """Initialize the assertion layer.

        Args:
            driver_provider: Returns the driver of the current database; it
                is called for every query so database switches take effect.
        """
        self._driver_provider = driver_provider

    def _execute_select(self, column: str, table: str, criteria: Optional[Mapping[str, Any]]):
        driver = self._driver_provider()
        query = driver.select(column, table, criteria)
        logger.debug("Query: %s", query.sql)
        if query.parameters:
            logger.debug("Parameters: %s", list(query.parameters))
        return driver.execute_query(query)

    def count(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> int:
        """Number of rows in ``table`` matching ``criteria``."""
        return int(self._execute_select('count(*)', table, criteria).scalar() or 0)

    def select_column(self, table: str, column: str, criteria: Optional[Mapping[str, Any]] = None) -> Any:
        """First value of ``column`` among matching rows, None if no row matches."""
        return self._execute_select(column, table, criteria).scalar()

    def select_all(self, table: str, column: str, criteria: Optional[Mapping[str, Any]] = None) -> List[Any]:
        """Every value of ``column`` among matching rows."""
        return list(self._execute_select(column, table, criteria).scalars().all())

    def select_frame(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> pd.DataFrame:
        """Matching rows of ``table`` as a DataFrame."""
        result = self._execute_select('*', table, criteria)
        columns = list(result.keys())
        rows = result.fetchall()
        return pd.DataFrame(rows, columns=columns) if rows else pd.DataFrame(columns=columns)

    def see_in_database(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        """Assert that at least one row matches."""
        count = self.count(table, criteria)
        assert_greater_than(
            0,
            count,
            f"No matching records found for criteria {serialize_criteria(criteria)} in table {table}",
            table=table,
        )

    def dont_see_in_database(self, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        """Assert that no row matches."""
        count = self.count(table, criteria)
        assert_less_than(
            1,
            count,
            f"Unexpectedly found matching records for criteria {serialize_criteria(criteria)} in table {table}",
            table=table,
        )

    def see_num_records(self, expected: int, table: str, criteria: Optional[Mapping[str, Any]] = None) -> None:
        """Assert that exactly ``expected`` rows match."""
        actual = self.count(table, criteria)
        assert_equals(
            expected,
            actual,
            f"The number of found rows ({actual}) does not match expected number {expected} "
            f"for criteria {serialize_criteria(criteria)} in table {table}",
            table=table,
        )
