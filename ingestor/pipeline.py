"""
One-call pipeline: log text -> segments -> outcomes -> records + statistics.
Used by the API upload route, the CLI and the drop-folder watcher.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ingestor.dispatcher import ERROR, DispatchOutcome, process_segments
from ingestor.segmenter import segment_file, segment_text
from ingestor.stats import analyze_results
from normalize import normalize_outcomes

logger = logging.getLogger(__name__)


@dataclass
class PipelineRun:
    outcomes: list[DispatchOutcome]
    records: list[dict[str, Any]]
    stats: dict[str, Any] = field(default_factory=dict)

    @property
    def summary(self) -> dict[str, Any]:
        return self.stats["summary"]

    def error_details(self, limit: int = 50) -> list[dict[str, Any]]:
        return [
            {
                "start_line": o.start_line,
                "end_line": o.end_line,
                "recipe_type": o.recipe_type,
                "handler": o.handler,
                "error": o.error,
            }
            for o in self.outcomes
            if o.status == ERROR
        ][:limit]


def _run(segments, source: str) -> PipelineRun:
    outcomes = list(process_segments(segments))
    records = list(normalize_outcomes(outcomes))
    run = PipelineRun(outcomes=outcomes, records=records, stats=analyze_results(outcomes))
    s = run.summary
    logger.info(
        "%s: %d statements, %d parsed, %d errors, %d unhandled (%.1f%% coverage)",
        source,
        s["total"],
        s["parsed"],
        s["errors"],
        s["unhandled"],
        s["coverage"],
    )
    return run


def run_text(text: str, source: str = "<text>") -> PipelineRun:
    return _run(segment_text(text), source)


def run_file(path: str | Path) -> PipelineRun:
    path = Path(path)
    return _run(segment_file(path), path.name)
