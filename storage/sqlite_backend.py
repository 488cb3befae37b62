import json
import logging
import sqlite3
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from normalize import content_hash

from .base import StorageBackend

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS recipes (
    recipe_id TEXT PRIMARY KEY,
    type TEXT NOT NULL,
    mod TEXT NOT NULL,
    machine_type TEXT,
    format TEXT,
    content_hash TEXT NOT NULL,
    payload TEXT NOT NULL,             -- normalized record as JSON
    first_seen TEXT NOT NULL,          -- ISO UTC
    last_seen TEXT NOT NULL            -- ISO UTC
);
CREATE INDEX IF NOT EXISTS idx_recipes_type ON recipes(type);
CREATE INDEX IF NOT EXISTS idx_recipes_mod ON recipes(mod);
CREATE INDEX IF NOT EXISTS idx_recipes_format ON recipes(format);
CREATE INDEX IF NOT EXISTS idx_recipes_last_seen ON recipes(last_seen);
"""


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def to_utc_iso(value: datetime | str) -> str:
    """Datetimes are stored and compared as ISO UTC strings; naive means UTC."""
    if isinstance(value, str):
        return value
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat(timespec="seconds")


class SQLiteBackend(StorageBackend):
    def __init__(self, db_path="recipes.db"):
        """
        SQLite recipe store.
        :param db_path: Path to sqlite db file (":memory:" works for tests).
        """
        self.db_path = str(db_path)
        self.conn = None
        # one connection is shared across threads; every statement sequence holds this
        self._lock = threading.RLock()

    def connect(self):
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_schema()

    def _create_schema(self):
        self.conn.executescript(SCHEMA_SQL)
        self.conn.commit()

    def _cursor(self) -> sqlite3.Cursor:
        if self.conn is None:
            raise RuntimeError("SQLiteBackend.connect() must be called first")
        return self.conn.cursor()

    @staticmethod
    def _row_to_recipe(row: sqlite3.Row) -> dict[str, Any]:
        recipe = json.loads(row["payload"])
        recipe["first_seen"] = row["first_seen"]
        recipe["last_seen"] = row["last_seen"]
        return recipe

    def upsert_batch(self, recipes: list[dict[str, Any]]) -> dict[str, int]:
        """
        Insert new recipe ids, rewrite ids whose content changed, and only
        refresh last_seen for identical re-submissions. One transaction;
        concurrent callers are serialized so a rollback only undoes its own batch.
        """
        with self._lock:
            counts = self._upsert_locked(recipes)
        logger.info(
            "Stored recipes: %d added, %d updated, %d unchanged (%d in store)",
            counts["added"],
            counts["updated"],
            counts["unchanged"],
            counts["total"],
        )
        return counts

    def _upsert_locked(self, recipes: list[dict[str, Any]]) -> dict[str, int]:
        counts = {"added": 0, "updated": 0, "unchanged": 0, "total": 0}
        now = utc_now()
        cur = self._cursor()
        try:
            for recipe in recipes:
                recipe_id = recipe.get("recipe_id")
                if not recipe_id:
                    raise ValueError("recipe_id is required to store a recipe")
                digest = content_hash(recipe)
                payload = json.dumps(recipe, sort_keys=True, default=str)
                cur.execute("SELECT content_hash FROM recipes WHERE recipe_id = ?", (recipe_id,))
                existing = cur.fetchone()

                if existing is None:
                    cur.execute(
                        """
                        INSERT INTO recipes (recipe_id, type, mod, machine_type, format,
                                             content_hash, payload, first_seen, last_seen)
                        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
                        """,
                        (
                            recipe_id,
                            recipe.get("type") or "unknown",
                            recipe.get("mod") or "minecraft",
                            recipe.get("machine_type"),
                            recipe.get("format"),
                            digest,
                            payload,
                            now,
                            now,
                        ),
                    )
                    counts["added"] += 1
                elif existing["content_hash"] == digest:
                    cur.execute(
                        "UPDATE recipes SET last_seen = ? WHERE recipe_id = ?", (now, recipe_id)
                    )
                    counts["unchanged"] += 1
                else:
                    cur.execute(
                        """
                        UPDATE recipes
                           SET type = ?, mod = ?, machine_type = ?, format = ?,
                               content_hash = ?, payload = ?, last_seen = ?
                         WHERE recipe_id = ?
                        """,
                        (
                            recipe.get("type") or "unknown",
                            recipe.get("mod") or "minecraft",
                            recipe.get("machine_type"),
                            recipe.get("format"),
                            digest,
                            payload,
                            now,
                            recipe_id,
                        ),
                    )
                    counts["updated"] += 1
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

        cur.execute("SELECT COUNT(*) FROM recipes")
        counts["total"] = cur.fetchone()[0]
        return counts

    def get(self, recipe_id: str) -> dict[str, Any] | None:
        with self._lock:
            cur = self._cursor()
            cur.execute("SELECT * FROM recipes WHERE recipe_id = ?", (recipe_id,))
            row = cur.fetchone()
        return self._row_to_recipe(row) if row else None

    def query_recipes(
        self, filters: dict[str, Any], limit: int = 20, offset: int = 0
    ) -> tuple[list[dict[str, Any]], int]:
        where = " WHERE 1=1"
        params: list[Any] = []

        for column in ("type", "mod", "format"):
            if filters.get(column):
                where += f" AND {column} = ?"
                params.append(filters[column])
        if filters.get("search"):
            needle = f"%{str(filters['search']).lower()}%"
            where += " AND (LOWER(recipe_id) LIKE ? OR LOWER(type) LIKE ? OR LOWER(payload) LIKE ?)"
            params.extend([needle, needle, needle])
        if filters.get("since"):
            where += " AND last_seen >= ?"
            params.append(to_utc_iso(filters["since"]))

        with self._lock:
            cur = self._cursor()
            cur.execute("SELECT COUNT(*) FROM recipes" + where, params)
            total = cur.fetchone()[0]
            cur.execute(
                "SELECT * FROM recipes" + where + " ORDER BY recipe_id LIMIT ? OFFSET ?",
                [*params, limit, offset],
            )
            rows = cur.fetchall()
        return [self._row_to_recipe(r) for r in rows], total

    def stats(self) -> dict[str, Any]:
        with self._lock:
            cur = self._cursor()
            cur.execute("SELECT COUNT(*) FROM recipes")
            out: dict[str, Any] = {"total": cur.fetchone()[0]}
            for column in ("type", "mod", "format"):
                cur.execute(
                    f"SELECT {column} AS k, COUNT(*) AS n FROM recipes GROUP BY {column} ORDER BY n DESC, k"
                )
                out[f"by_{column}"] = {r["k"] or "unknown": r["n"] for r in cur.fetchall()}
        return out

    def close(self):
        with self._lock:
            if self.conn:
                self.conn.close()
                self.conn = None
