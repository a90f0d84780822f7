"""Per-database population state."""

from typing import Dict, Optional


class PopulationState:
    """Tracks whether each database currently holds its dump.

    A key is unset until the first load attempt, ``True`` after a successful
    load and ``False`` after a cleanup (or a failed populator run).
    """

    def __init__(self) -> None:
        self._populated: Dict[str, bool] = {}

    def get(self, key: str) -> Optional[bool]:
        return self._populated.get(key)

    def is_populated(self, key: str) -> bool:
        return self._populated.get(key) is True

    def is_cleaned(self, key: str) -> bool:
        """True only when the database is known to hold no dump data."""
        return self._populated.get(key) is False

    def set(self, key: str, populated: bool) -> None:
        self._populated[key] = populated

    def mark_loaded(self, key: str) -> None:
        self._populated[key] = True

    def mark_cleaned(self, key: str) -> None:
        self._populated[key] = False
