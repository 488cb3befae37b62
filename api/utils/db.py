import os
from pathlib import Path

from storage.factory import open_recipe_store
from storage.sqlite_backend import SQLiteBackend

# <repo root>/data/recipes.db unless RECIPE_DB_PATH says otherwise
DB_PATH = Path(
    os.getenv("RECIPE_DB_PATH", str(Path(__file__).resolve().parents[2] / "data" / "recipes.db"))
)

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

_backend: SQLiteBackend | None = None


def get_backend() -> SQLiteBackend:
    """Return the shared store; connects (and creates the schema) on first use."""
    global _backend
    if _backend is None:
        _backend = open_recipe_store(DB_PATH)
    return _backend


def close_backend() -> None:
    global _backend
    if _backend is not None:
        _backend.close()
        _backend = None


# ---------- pagination ----------


def clamp_page(page: int | None) -> int:
    return page if page and page >= 1 else 1


def clamp_limit(limit: int | None) -> int:
    if not limit or limit < 1:
        return DEFAULT_PAGE_SIZE
    return min(limit, MAX_PAGE_SIZE)


def paginate(page: int | None, limit: int | None) -> tuple[int, int, int]:
    """-> (page, limit, offset) with page >= 1 and 1 <= limit <= MAX_PAGE_SIZE."""
    page, limit = clamp_page(page), clamp_limit(limit)
    return page, limit, (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return (total + limit - 1) // limit if total else 0
