import logging

from .base import StorageBackend
from .sqlite_backend import SQLiteBackend

logger = logging.getLogger(__name__)

RECIPE_STORES = {"sqlite": SQLiteBackend}


def get_storage_backend(db_type="sqlite", **kwargs) -> StorageBackend:
    backend_cls = RECIPE_STORES.get(str(db_type).lower())
    if backend_cls is None:
        raise ValueError(f"Unsupported recipe store: {db_type}")
    return backend_cls(**kwargs)


def open_recipe_store(db_path, db_type="sqlite") -> StorageBackend:
    """Build a store for db_path and connect it; the recipes schema is created on first use."""
    backend = get_storage_backend(db_type, db_path=db_path)
    backend.connect()
    logger.debug("Opened %s recipe store at %s", db_type, db_path)
    return backend
