import logging
from dataclasses import dataclass
from typing import Iterable, Iterator, Sequence

from parsers import REGISTRY, RecipeHandler, RecipeParseError, best_handler
from parsers.base import ParseResult
from ingestor.segmenter import Segment

logger = logging.getLogger(__name__)

PARSED = "parsed"
ERROR = "error"
UNHANDLED = "unhandled"


@dataclass(frozen=True)
class DispatchOutcome:
    status: str
    recipe_type: str | None
    start_line: int
    end_line: int
    handler: str | None = None
    score: int = 0
    result: ParseResult | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == PARSED


def dispatch(
    segment: Segment, handlers: Sequence[RecipeHandler] | None = None
) -> DispatchOutcome:
    """
    Score every handler against one segment and run the winner.

    - No positive score -> status "unhandled", nothing is extracted.
    - Extraction failure -> status "error" with the handler's message.
    - Otherwise -> status "parsed" with the ParseResult.

    Never raises for a bad segment; the outcome carries the failure.
    """
    base = dict(
        recipe_type=segment.recipe_type,
        start_line=segment.start_line,
        end_line=segment.end_line,
    )
    handler, score = best_handler(segment, REGISTRY if handlers is None else handlers)
    if handler is None:
        logger.debug(
            "No handler for lines %d-%d (%s)",
            segment.start_line,
            segment.end_line,
            segment.recipe_type or "untyped",
        )
        return DispatchOutcome(status=UNHANDLED, **base)

    try:
        result = handler.extract(segment)
    except RecipeParseError as e:
        logger.warning(
            "%s failed on lines %d-%d: %s",
            handler.name,
            segment.start_line,
            segment.end_line,
            e,
        )
        return DispatchOutcome(
            status=ERROR, handler=handler.name, score=score, error=str(e), **base
        )
    except Exception as e:
        logger.error(
            "%s crashed on lines %d-%d: %s",
            handler.name,
            segment.start_line,
            segment.end_line,
            e,
            exc_info=True,
        )
        return DispatchOutcome(
            status=ERROR, handler=handler.name, score=score, error=str(e), **base
        )

    return DispatchOutcome(
        status=PARSED, handler=handler.name, score=score, result=result, **base
    )


def process_segments(
    segments: Iterable[Segment], handlers: Sequence[RecipeHandler] | None = None
) -> Iterator[DispatchOutcome]:
    """Lazy per-segment map; stop consuming to stop processing."""
    for segment in segments:
        yield dispatch(segment, handlers)
