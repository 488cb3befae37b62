"""
Run the recipe pipeline over one CraftTweaker log.

Usage:
    python scripts/parse_log.py <crafttweaker.log> [--out results.json] [--store recipes.db] [--quiet]

--out    write outcomes, normalized recipes and statistics as JSON
--store  upsert the parsed recipes into a SQLite recipe store
--quiet  print only the one-line summary
"""

import json
import logging
import sys
from pathlib import Path

from ingestor.pipeline import run_file
from ingestor.stats import log_detailed_stats, quick_summary
from storage.factory import open_recipe_store

logger = logging.getLogger("parse_log")

USAGE = "Usage: python scripts/parse_log.py <crafttweaker.log> [--out FILE] [--store DB] [--quiet]"


def parse_args(argv: list[str]) -> dict:
    opts = {"log": None, "out": None, "store": None, "quiet": False}
    args = list(argv)
    while args:
        arg = args.pop(0)
        if arg in ("--out", "--store"):
            if not args:
                raise ValueError(f"{arg} needs a value")
            opts[arg[2:]] = Path(args.pop(0))
        elif arg == "--quiet":
            opts["quiet"] = True
        elif arg.startswith("--"):
            raise ValueError(f"Unknown option: {arg}")
        elif opts["log"] is None:
            opts["log"] = Path(arg)
        else:
            raise ValueError(f"Unexpected argument: {arg}")
    if opts["log"] is None:
        raise ValueError("missing log file")
    return opts


def write_results(path: Path, run) -> None:
    payload = {
        "stats": run.stats,
        "outcomes": [
            {
                "status": o.status,
                "recipe_type": o.recipe_type,
                "start_line": o.start_line,
                "end_line": o.end_line,
                "handler": o.handler,
                "error": o.error,
                "result": o.result,
            }
            for o in run.outcomes
        ],
        "recipes": run.records,
    }
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)
    logger.info("Wrote %d outcomes to %s", len(run.outcomes), path)


def main(argv: list[str] | None = None) -> int:
    try:
        opts = parse_args(sys.argv[1:] if argv is None else argv)
    except ValueError as e:
        print(f"{e}\n{USAGE}", file=sys.stderr)
        return 2

    try:
        run = run_file(opts["log"])
    except FileNotFoundError as e:
        logger.error("%s", e)
        return 1

    if opts["quiet"]:
        print(quick_summary(run.stats))
    else:
        log_detailed_stats(run.stats)

    if opts["out"]:
        write_results(opts["out"], run)

    if opts["store"]:
        backend = open_recipe_store(opts["store"])
        try:
            counts = backend.upsert_batch(run.records)
        finally:
            backend.close()
        print(
            f"Stored {counts['added']} new, {counts['updated']} updated,"
            f" {counts['unchanged']} unchanged ({counts['total']} total)"
        )
    return 0


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    sys.exit(main())
