"""
Coverage statistics over dispatch outcomes.

All functions accept either an iterable of DispatchOutcome (consumed once) or
the dict already returned by analyze_results().
"""

import logging
from collections import Counter
from typing import Any, Iterable

from ingestor.dispatcher import ERROR, PARSED, UNHANDLED, DispatchOutcome

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "unknown"


def _priority(count: int) -> str:
    if count >= 100:
        return "HIGH"
    if count >= 20:
        return "MEDIUM"
    return "LOW"


def analyze_results(outcomes: Iterable[DispatchOutcome] | dict[str, Any]) -> dict[str, Any]:
    """
    Returns:
        {
          "summary": {"total", "parsed", "errors", "unhandled", "coverage"},
          "by_type": {"parsed": {type: n}, "errors": {...}, "unhandled": {...}},
        }
    coverage is parsed/total as a percentage rounded to one decimal (0.0 when empty).
    """
    if isinstance(outcomes, dict):
        return outcomes

    by_status: dict[str, Counter] = {PARSED: Counter(), ERROR: Counter(), UNHANDLED: Counter()}
    total = 0
    for outcome in outcomes:
        total += 1
        counter = by_status.get(outcome.status)
        if counter is not None:
            counter[outcome.recipe_type or UNKNOWN_TYPE] += 1

    parsed = sum(by_status[PARSED].values())
    errors = sum(by_status[ERROR].values())
    unhandled = sum(by_status[UNHANDLED].values())
    coverage = round(parsed / total * 100, 1) if total else 0.0

    return {
        "summary": {
            "total": total,
            "parsed": parsed,
            "errors": errors,
            "unhandled": unhandled,
            "coverage": coverage,
        },
        "by_type": {
            "parsed": dict(by_status[PARSED]),
            "errors": dict(by_status[ERROR]),
            "unhandled": dict(by_status[UNHANDLED]),
        },
    }


def top_unhandled_types(
    outcomes: Iterable[DispatchOutcome] | dict[str, Any], limit: int = 3
) -> list[dict[str, Any]]:
    """Most frequent unhandled recipe types, each tagged HIGH / MEDIUM / LOW."""
    stats = analyze_results(outcomes)
    ranked = sorted(stats["by_type"]["unhandled"].items(), key=lambda kv: kv[1], reverse=True)
    return [
        {"type": recipe_type, "count": count, "priority": _priority(count)}
        for recipe_type, count in ranked[:limit]
    ]


def quick_summary(outcomes: Iterable[DispatchOutcome] | dict[str, Any]) -> str:
    summary = analyze_results(outcomes)["summary"]
    return (
        f"Coverage: {summary['coverage']}% ({summary['parsed']}/{summary['total']})"
        f" | Unhandled: {summary['unhandled']} | Errors: {summary['errors']}"
    )


def log_detailed_stats(
    outcomes: Iterable[DispatchOutcome] | dict[str, Any],
    show_details: bool = True,
    max_unhandled: int = 5,
) -> dict[str, Any]:
    """Log coverage plus the top unhandled types; returns the analysis."""
    stats = analyze_results(outcomes)
    summary = stats["summary"]
    logger.info(
        "Parsing coverage: %s%% (%d/%d)", summary["coverage"], summary["parsed"], summary["total"]
    )
    logger.info(
        "Parsed: %d | Errors: %d | Unhandled: %d",
        summary["parsed"],
        summary["errors"],
        summary["unhandled"],
    )

    unhandled = stats["by_type"]["unhandled"]
    if show_details and unhandled:
        for entry in top_unhandled_types(stats, limit=max_unhandled):
            logger.info(
                "  [%s] %s: %d recipes", entry["priority"], entry["type"], entry["count"]
            )
        potential = (summary["parsed"] + sum(unhandled.values())) / summary["total"] * 100
        logger.info("Potential coverage with all handlers: %.1f%%", potential)
    return stats
