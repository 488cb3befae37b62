import logging
import os
import shutil
import threading
import time
from pathlib import Path
from typing import Any, Dict, List

import requests
from watchdog.events import FileSystemEventHandler
# Watchdog observer selection (polling is more reliable on Docker/Windows bind mounts)
USE_POLLING = os.getenv("WATCH_USE_POLLING", "1").lower() in ("1", "true", "yes")

if USE_POLLING:
    from watchdog.observers.polling import PollingObserver as Observer
    OBSERVER_NAME = "PollingObserver"
else:
    from watchdog.observers import Observer
    OBSERVER_NAME = "Observer"


from ingestor.pipeline import run_file

logger = logging.getLogger(__name__)

# -----------------------
# Config (directory paths from env, with sane defaults)
# -----------------------
INGEST_API_URL = os.getenv("INGEST_API_URL", "http://localhost:8000/recipes/batch")

INCOMING_DIR = Path(os.getenv("WATCH_DIR", "/app/incoming"))
PROCESSING_DIR = Path(os.getenv("PROCESSING_DIR", "/app/processing"))
QUARANTINE_DIR = Path(os.getenv("QUARANTINE_DIR", "/app/quarantine"))

POST_BATCH_SIZE = int(os.getenv("POST_BATCH_SIZE", "500"))
POST_TIMEOUT_SEC = 10
FILE_STABLE_WAIT = 0.5

# -----------------------
# API send
# -----------------------
def send_recipes_to_api(records: List[Dict[str, Any]], batch_size: int = POST_BATCH_SIZE) -> int:
    """POST normalized recipes in batches. Raises requests.RequestException on failure."""
    sent = 0
    for i in range(0, len(records), batch_size):
        batch = records[i : i + batch_size]
        response = requests.post(INGEST_API_URL, json={"recipes": batch}, timeout=POST_TIMEOUT_SEC)
        response.raise_for_status()
        sent += len(batch)
    return sent

# -----------------------
# Helpers
# -----------------------
def is_file_stable(path: Path, wait: float = FILE_STABLE_WAIT) -> bool:
    """Return True if file size stops changing during a short wait."""
    try:
        s1 = path.stat().st_size
        time.sleep(wait)
        s2 = path.stat().st_size
        return s1 == s2
    except FileNotFoundError:
        return False


def quarantine(path: Path, headline: str, reason: Any) -> Path | None:
    """Move a file to QUARANTINE_DIR next to a .note explaining why."""
    QUARANTINE_DIR.mkdir(parents=True, exist_ok=True)
    qpath = QUARANTINE_DIR / path.name
    try:
        shutil.move(str(path), str(qpath))
        note = qpath.with_suffix(qpath.suffix + ".note")
        with open(note, "w", encoding="utf-8") as f:
            f.write(f"{headline} {path.name}\nReason: {reason}\n")
        return qpath
    except OSError as qe:
        logger.critical("Could not quarantine %s: %s", path, qe, exc_info=True)
        return None

# -----------------------
# Watcher
# -----------------------
class RecipeLogHandler(FileSystemEventHandler):
    """Watches the incoming directory and processes new CraftTweaker logs."""

    def on_created(self, event) -> None:
        if event.is_directory:
            return
        self.process_file(Path(event.src_path))

    def on_moved(self, event) -> None:
        if event.is_directory:
            return
        # process the destination path when a file is moved into the incoming dir
        dest_path = getattr(event, "dest_path", event.src_path)
        target = Path(dest_path)
        if target.parent == INCOMING_DIR:
            self.process_file(target)

    def process_file(self, src: Path) -> bool:
        """Wait until stable, move to processing, parse, post, delete. Quarantine on failure."""
        while not is_file_stable(src):
            if not src.exists():
                return False
            time.sleep(FILE_STABLE_WAIT)

        PROCESSING_DIR.mkdir(parents=True, exist_ok=True)
        dest = PROCESSING_DIR / src.name
        try:
            shutil.move(str(src), str(dest))
        except OSError as e:
            logger.error("Move failed %s → %s: %s", src, dest, e)
            return False

        try:
            run = run_file(dest)
            if not run.records:
                s = run.summary
                raise ValueError(
                    f"No recipes parsed ({s['total']} statements,"
                    f" {s['errors']} errors, {s['unhandled']} unhandled)"
                )
        except Exception as e:
            quarantine(dest, "Failed to parse", e)
            logger.warning("Quarantined %s due to parse error: %s", dest.name, e)
            return False

        try:
            sent = send_recipes_to_api(run.records)
        except requests.RequestException as e:
            quarantine(dest, "Failed to deliver recipes from", e)
            logger.error("Quarantined %s due to delivery failure: %s", dest.name, e)
            return False

        dest.unlink(missing_ok=True)
        logger.info(
            "Posted %d recipes from %s (%.1f%% coverage); file deleted",
            sent,
            dest.name,
            run.summary["coverage"],
        )
        return True

# -----------------------
# Lifecycle (used by the API lifespan and by __main__)
# -----------------------
_observer = None


def sweep_incoming(handler: RecipeLogHandler) -> None:
    """Process files that were already waiting before the observer started."""
    for fpath in sorted(INCOMING_DIR.iterdir()):
        if fpath.is_file():
            handler.process_file(fpath)


def start_watcher():
    global _observer
    if _observer is not None:
        return _observer
    for d in (INCOMING_DIR, PROCESSING_DIR, QUARANTINE_DIR):
        d.mkdir(parents=True, exist_ok=True)

    handler = RecipeLogHandler()
    logger.info(
        "Config: incoming=%s, processing=%s, quarantine=%s, api=%s",
        INCOMING_DIR, PROCESSING_DIR, QUARANTINE_DIR, INGEST_API_URL
    )
    logger.info("Watcher: using %s", OBSERVER_NAME)

    observer = Observer()
    observer.schedule(handler, str(INCOMING_DIR), recursive=False)
    observer.start()
    _observer = observer

    threading.Thread(target=sweep_incoming, args=(handler,), daemon=True).start()
    return observer


def stop_watcher() -> None:
    global _observer
    if _observer is None:
        return
    _observer.stop()
    _observer.join()
    _observer = None

# -----------------------
# Main
# -----------------------
if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    start_watcher()
    logger.info("Watching %s (post→delete; quarantine on failure)", INCOMING_DIR)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        stop_watcher()
