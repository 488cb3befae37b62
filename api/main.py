# api/main.py
from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel, Field
from typing import Optional, List, Dict, Any
from contextlib import asynccontextmanager
from dateutil import parser as dtp
import os

from ingestor.pipeline import run_text
from ingestor.stats import top_unhandled_types

# DB helpers
from .utils.db import close_backend, get_backend, paginate, total_pages

# ----- logging -----
import logging
logger = logging.getLogger("uvicorn.error")

START_WATCHER = os.getenv("START_WATCHER", "0") == "1"


# ----- lifespan (startup/shutdown) -----
@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    get_backend()
    logger.info("[PatternPress] Recipe store ready")

    if START_WATCHER:
        from scripts.file_watcher import start_watcher
        start_watcher()
        logger.info("[PatternPress] File watcher started")
    yield
    # Shutdown
    if START_WATCHER:
        from scripts.file_watcher import stop_watcher
        try:
            stop_watcher()
            logger.info("[PatternPress] File watcher stopped")
        except Exception as e:
            logger.warning(f"[PatternPress] stop_watcher error: {e}")
    close_backend()

app = FastAPI(
    title="Pattern Press API",
    version="0.1.0",
    lifespan=lifespan,
)


# ----- Schemas -----
class UploadRequest(BaseModel):
    filename: str = Field(..., min_length=1, max_length=256)
    content: str

class RecipeModel(BaseModel):
    recipe_id: str = Field(..., min_length=1)
    type: str = "unknown"
    mod: str = "minecraft"
    machine_type: Optional[str] = None
    format: Optional[str] = None
    inputs: List[Dict[str, Any]] = []
    outputs: List[Dict[str, Any]] = []
    catalysts: List[Dict[str, Any]] = []
    parameters: Dict[str, Any] = {}
    data: Dict[str, Any] = {}

class BatchRecipes(BaseModel):
    recipes: List[RecipeModel]


# ----- Routes -----
@app.get("/health")
def health():
    try:
        total = get_backend().stats()["total"]
        return {"status": "ok", "recipes": total}
    except Exception as e:
        return {"status": "degraded", "error": str(e)}

# Parse a whole CraftTweaker log and store what parsed
@app.post("/upload")
def upload(payload: UploadRequest):
    run = run_text(payload.content, source=payload.filename)
    try:
        stored = get_backend().upsert_batch(run.records)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
    return {
        "ok": True,
        "filename": payload.filename,
        **run.summary,
        "by_type": run.stats["by_type"],
        "top_unhandled": top_unhandled_types(run.stats),
        "error_details": run.error_details(),
        "stored": stored,
    }

# Pre-normalized recipes (the drop-folder watcher posts here)
@app.post("/recipes/batch")
def recipes_batch(payload: BatchRecipes):
    try:
        stored = get_backend().upsert_batch([r.model_dump() for r in payload.recipes])
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
    return {"ok": True, "received": len(payload.recipes), **stored}

@app.get("/recipes")
def list_recipes(
    recipe_type: Optional[str] = Query(None, alias="type"),
    mod: Optional[str] = None,
    format: Optional[str] = None,
    search: Optional[str] = None,
    since: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
):
    filters: Dict[str, Any] = {"type": recipe_type, "mod": mod, "format": format, "search": search}
    if since:
        try:
            filters["since"] = dtp.parse(since)
        except (ValueError, OverflowError):
            raise HTTPException(status_code=400, detail=f"Invalid 'since' timestamp: {since}")

    page, limit, offset = paginate(page, limit)
    try:
        rows, total = get_backend().query_recipes(filters, limit=limit, offset=offset)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
    return {
        "recipes": rows,
        "total": total,
        "page": page,
        "limit": limit,
        "total_pages": total_pages(total, limit),
    }

@app.get("/recipes/{recipe_id:path}")
def get_recipe(recipe_id: str):
    try:
        recipe = get_backend().get(recipe_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
    if recipe is None:
        raise HTTPException(status_code=404, detail=f"Recipe not found: {recipe_id}")
    return recipe

@app.get("/stats")
def store_stats():
    try:
        return get_backend().stats()
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"DB error: {e}")
