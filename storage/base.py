from abc import ABC, abstractmethod
from typing import Any


class StorageBackend(ABC):
    """Abstract recipe store keyed by recipe_id."""

    @abstractmethod
    def connect(self):
        """Initialize DB connection and schema if needed."""

    @abstractmethod
    def upsert_batch(self, recipes: list[dict[str, Any]]) -> dict[str, int]:
        """Insert or refresh normalized recipes; returns {added, updated, unchanged, total}."""

    @abstractmethod
    def get(self, recipe_id: str) -> dict[str, Any] | None:
        """One stored recipe, or None."""

    @abstractmethod
    def query_recipes(
        self, filters: dict[str, Any], limit: int = 20, offset: int = 0
    ) -> tuple[list[dict[str, Any]], int]:
        """Filtered page of recipes plus the total match count (used by the API)."""

    @abstractmethod
    def stats(self) -> dict[str, Any]:
        """Counts by type, mod and format."""

    @abstractmethod
    def close(self):
        """Close DB connection cleanly."""
