"""SQL generation from structured criteria.

Every value ends up as a bound parameter named ``p0``, ``p1``, ... in the
order it appears in the generated statement; nothing is interpolated into
the query text except quoted identifiers.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple

QuoteFunc = Callable[[str], str]

# Longer operators first so ' <=' is not read as ' <'.
CRITERIA_OPERATORS = ('not like', 'like', '!=', '<>', '<=', '>=', '<', '>')

_OPERATOR_PATTERN = re.compile(
    r'^(?P<column>.+?)\s+(?P<operator>'
    + '|'.join(r'\s+'.join(re.escape(part) for part in op.split()) for op in CRITERIA_OPERATORS)
    + r')$',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Query:
    """A parameterized SQL statement."""

    sql: str
    parameters: Tuple[Any, ...] = field(default_factory=tuple)

    def bind_parameters(self) -> Dict[str, Any]:
        return bind_parameters(self.parameters)

    def __str__(self) -> str:
        return self.sql


def placeholder(index: int) -> str:
    return f":p{index}"


def bind_parameters(values: Sequence[Any]) -> Dict[str, Any]:
    """Map positional values onto the ``p<n>`` names used by generated SQL."""
    return {f"p{index}": value for index, value in enumerate(values)}


def quote_name(name: str, quote_char: str = '"') -> str:
    """Quote a possibly schema-qualified identifier."""
    parts = [part.strip() for part in name.split('.')]
    escaped = [part.replace(quote_char, quote_char * 2) for part in parts]
    return '.'.join(f"{quote_char}{part}{quote_char}" for part in escaped)


def split_criteria_key(key: str) -> Tuple[str, str]:
    """Split a criteria key into its column and comparison operator.

    >>> split_criteria_key('email like')
    ('email', 'LIKE')
    >>> split_criteria_key('age')
    ('age', '=')
    """
    key = key.strip()
    match = _OPERATOR_PATTERN.match(key)
    if not match:
        return key, '='
    operator = ' '.join(match.group('operator').upper().split())
    return match.group('column').strip(), operator


def build_criteria_clause(
    criteria: Optional[Mapping[str, Any]],
    quote: QuoteFunc = quote_name,
    start: int = 0,
) -> Tuple[str, List[Any]]:
    """Build a WHERE clause from ``criteria``.

    Args:
        criteria: Column (optionally suffixed with an operator such as
            ``' like'``) to expected value. ``None`` values match NULL.
        quote: Identifier quoting function of the target dialect.
        start: Index of the first parameter placeholder.

    Returns:
        Tuple of the clause (empty string when there are no criteria, else
        starting with ``WHERE``) and the bound values in placeholder order.
    """
    if not criteria:
        return '', []

    conditions: List[str] = []
    parameters: List[Any] = []
    for key, value in criteria.items():
        column, operator = split_criteria_key(key)
        column_sql = quote(column)
        if value is None:
            if operator in ('!=', '<>'):
                conditions.append(f"{column_sql} IS NOT NULL")
            else:
                conditions.append(f"{column_sql} IS NULL")
            continue
        conditions.append(f"{column_sql} {operator} {placeholder(start + len(parameters))}")
        parameters.append(value)

    return 'WHERE ' + ' AND '.join(conditions), parameters


def build_insert(table: str, data: Mapping[str, Any], quote: QuoteFunc = quote_name) -> Query:
    columns = ', '.join(quote(column) for column in data)
    values = ', '.join(placeholder(index) for index in range(len(data)))
    return Query(
        sql=f"INSERT INTO {quote(table)} ({columns}) VALUES ({values})",
        parameters=tuple(data.values()),
    )


def build_update(
    table: str,
    data: Mapping[str, Any],
    criteria: Optional[Mapping[str, Any]] = None,
    quote: QuoteFunc = quote_name,
) -> Query:
    assignments = ', '.join(
        f"{quote(column)} = {placeholder(index)}" for index, column in enumerate(data)
    )
    where, where_parameters = build_criteria_clause(criteria, quote, start=len(data))
    sql = f"UPDATE {quote(table)} SET {assignments}"
    if where:
        sql = f"{sql} {where}"
    return Query(sql=sql, parameters=tuple(data.values()) + tuple(where_parameters))


def build_select(
    column: str,
    table: str,
    criteria: Optional[Mapping[str, Any]] = None,
    quote: QuoteFunc = quote_name,
) -> Query:
    """SELECT ``column`` from ``table``; ``column`` is used verbatim so that
    expressions like ``count(*)`` work."""
    where, parameters = build_criteria_clause(criteria, quote)
    sql = f"SELECT {column} FROM {quote(table)}"
    if where:
        sql = f"{sql} {where}"
    return Query(sql=sql, parameters=tuple(parameters))


def build_delete(
    table: str,
    criteria: Optional[Mapping[str, Any]] = None,
    quote: QuoteFunc = quote_name,
) -> Query:
    where, parameters = build_criteria_clause(criteria, quote)
    sql = f"DELETE FROM {quote(table)}"
    if where:
        sql = f"{sql} {where}"
    return Query(sql=sql, parameters=tuple(parameters))
