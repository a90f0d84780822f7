"""Parsing of PDO-style data source names."""

from dataclasses import dataclass, field
from typing import Dict


@dataclass(frozen=True)
class DSN:
    """A data source name split into its driver prefix and parameters.

    ``mysql:host=localhost;dbname=app`` has scheme ``mysql``, body
    ``host=localhost;dbname=app`` and params ``{'host': 'localhost',
    'dbname': 'app'}``. Bodies without ``key=value`` pairs, such as SQLite
    file paths, leave ``params`` empty.
    """

    scheme: str
    body: str
    params: Dict[str, str] = field(default_factory=dict)

    def get(self, key: str, default=None):
        return self.params.get(key, default)


def dsn_scheme(dsn: str) -> str:
    """Return the driver prefix of ``dsn`` (text before the first colon)."""
    scheme, _, _ = dsn.partition(':')
    return scheme.strip().lower()


def parse_dsn_params(body: str) -> Dict[str, str]:
    """Collect ``key=value`` pairs from a ``;``-separated DSN body."""
    params: Dict[str, str] = {}
    for item in body.split(';'):
        if '=' not in item:
            continue
        key, value = item.split('=', 1)
        key = key.strip()
        if key:
            params[key] = value.strip()
    return params


def parse_dsn(dsn: str) -> DSN:
    """Split ``dsn`` into a :class:`DSN`."""
    scheme, _, body = dsn.partition(':')
    return DSN(
        scheme=scheme.strip().lower(),
        body=body.strip(),
        params=parse_dsn_params(body),
    )
