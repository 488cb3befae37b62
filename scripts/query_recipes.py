import os
import sys
from pathlib import Path

from storage.factory import open_recipe_store

DB_PATH = Path(os.getenv("RECIPE_DB_PATH", Path(__file__).resolve().parents[1] / "data" / "recipes.db"))


def query(recipe_type=None, limit=10, db_path=DB_PATH):
    backend = open_recipe_store(db_path)
    try:
        rows, total = backend.query_recipes({"type": recipe_type}, limit=limit)
    finally:
        backend.close()
    return rows, total


def format_row(recipe: dict) -> str:
    inputs = ", ".join(e["text"] for e in recipe.get("inputs", []))
    outputs = ", ".join(e["text"] for e in recipe.get("outputs", []))
    return f"[{recipe['type']}] {recipe['recipe_id']}: {inputs or '-'} -> {outputs or '-'}"


if __name__ == "__main__":
    recipe_type = sys.argv[1] if len(sys.argv) > 1 else None
    rows, total = query(recipe_type)
    for recipe in rows:
        print(format_row(recipe))
    print(f"({len(rows)} of {total})")
