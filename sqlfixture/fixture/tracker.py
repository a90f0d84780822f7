"""Tracking rows inserted during a test so they can be removed afterwards."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from sqlfixture.db.driver import DriverProtocol
from sqlfixture.exceptions import InvalidArgumentError
from sqlfixture.fixture.policies import best_effort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InsertedRow:
    """A row inserted through the fixture API.

    Attributes:
        table: Table the row was inserted into.
        primary: Criteria identifying the row: its primary key values, or
            the whole row when the table has no primary key.
    """

    table: str
    primary: Dict[str, Any] = field(default_factory=dict)


class MutationTracker:
    """Ordered record of inserted rows per database."""

    def __init__(self) -> None:
        self._rows: Dict[str, List[InsertedRow]] = {}

    def record_insert(
        self,
        key: str,
        table: str,
        row: Mapping[str, Any],
        generated_id: Optional[Any],
        driver: DriverProtocol,
    ) -> InsertedRow:
        """Remember a row inserted into ``table`` of database ``key``.

        Raises:
            InvalidArgumentError: If a primary key column is missing from
                ``row`` and no id was generated for it.
        """
        primary_key = driver.primary_key_columns(table)
        primary: Dict[str, Any] = {}

        if primary_key:
            if len(primary_key) == 1 and primary_key[0] not in row and generated_id:
                primary[primary_key[0]] = generated_id
            else:
                for column in primary_key:
                    if column not in row:
                        raise InvalidArgumentError(
                            f"Primary key field {column} is not set for table {table}",
                            details={'table': table, 'column': column},
                        )
                    primary[column] = row[column]
        else:
            # best effort: may also match duplicate rows
            primary = dict(row)

        inserted = InsertedRow(table=table, primary=primary)
        self._rows.setdefault(key, []).append(inserted)
        return inserted

    def pending(self, key: str) -> List[InsertedRow]:
        return list(self._rows.get(key, []))

    def clear(self, key: str) -> None:
        self._rows[key] = []

    def drain_and_remove(self, key: str, driver: DriverProtocol) -> None:
        """Delete every tracked row of ``key``, newest first, then forget them.

        A failing delete is logged and the drain continues.
        """
        rows = self._rows.get(key)
        if not rows:
            return

        try:
            for row in reversed(rows):
                with best_effort(
                    f"couldn't delete record {json.dumps(row.primary, default=str)} from {row.table}",
                    logger,
                ):
                    driver.delete_by_criteria(row.table, row.primary)
        finally:
            self._rows[key] = []
