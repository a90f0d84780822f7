"""Database dialects and the registry that selects one per DSN scheme."""

from typing import Dict, List, Optional

from sqlfixture.db.dialects.base import Dialect, TLS_OPTION_KEYS, split_options
from sqlfixture.db.dialects import mysql, postgresql, sqlite


class DialectRegistry:
    """Maps DSN schemes onto dialects."""

    _dialects: Dict[str, Dialect] = {}

    @classmethod
    def register(cls, dialect: Dialect) -> None:
        """Register a dialect for every scheme it declares."""
        for scheme in dialect.schemes:
            cls._dialects[scheme.lower()] = dialect

    @classmethod
    def get(cls, scheme: str) -> Optional[Dialect]:
        return cls._dialects.get(scheme.lower())

    @classmethod
    def get_supported_schemes(cls) -> List[str]:
        return sorted(cls._dialects)


for _dialect in (sqlite.DIALECT, mysql.DIALECT, postgresql.DIALECT):
    DialectRegistry.register(_dialect)

__all__ = [
    "Dialect",
    "DialectRegistry",
    "TLS_OPTION_KEYS",
    "split_options",
]
