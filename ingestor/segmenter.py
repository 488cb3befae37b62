import io
import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator

logger = logging.getLogger(__name__)

RECIPE_TYPE_HEADER = re.compile(r"Recipe type:\s*'(<recipetype:[^']+>)'")
RECIPE_TYPE_PREFIX = re.compile(r"^(<recipetype:[^>]+>)\.")

DEFAULT_START_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^<recipetype:[^>]+>\.[a-zA-Z]"),
    re.compile(r"^craftingTable\.[a-zA-Z]"),
    re.compile(r"^[a-zA-Z0-9_]+\.[a-zA-Z0-9_]+\("),
)


@dataclass(frozen=True)
class Segment:
    """
    One candidate recipe statement pulled out of a CraftTweaker log.

    - raw_text: the statement's lines, verbatim, joined with "\\n"
    - recipe_type: "<recipetype:mod:type>" context, or None
    - start_line / end_line: 1-based, inclusive
    """

    raw_text: str
    recipe_type: str | None
    start_line: int
    end_line: int


def paren_delta(line: str) -> int:
    """Net `(` minus `)` on a line, ignoring string literals and reference tokens."""
    delta = 0
    in_reference = False
    in_string = False
    for char in line:
        if in_string:
            if char == '"':
                in_string = False
        elif char == "<":
            in_reference = True
        elif char == ">":
            in_reference = False
        elif in_reference:
            continue
        elif char == '"':
            in_string = True
        elif char == "(":
            delta += 1
        elif char == ")":
            delta -= 1
    return delta


def split_statements(line: str, depth: int = 0) -> list[str]:
    """
    Cut a line after every `;` that closes a statement: one at parenthesis
    depth <= 0 (counting from `depth`), outside string literals and reference
    tokens. A line without such a `;` comes back whole.
    """
    pieces: list[str] = []
    start = 0
    in_reference = False
    in_string = False
    for i, char in enumerate(line):
        if in_string:
            if char == '"':
                in_string = False
        elif char == "<":
            in_reference = True
        elif char == ">":
            in_reference = False
        elif in_reference:
            continue
        elif char == '"':
            in_string = True
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
        elif char == ";" and depth <= 0:
            piece = line[start : i + 1]
            pieces.append(piece if not pieces else piece.lstrip())
            start = i + 1
            depth = 0
    if not pieces:
        return [line]
    rest = line[start:]
    if rest.strip():
        pieces.append(rest.lstrip())
    else:
        pieces[-1] += rest
    return pieces


class SegmentAccumulator:
    """
    Line-at-a-time state machine that groups log lines into Segments.

    - `Recipe type: '<recipetype:...>'` header lines set the type context.
    - A statement opens on a line matching one of `start_patterns` and closes
      once its parenthesis depth is back to <= 0 at a `;`. Several statements
      on one line become separate segments sharing that line number.
    - A header or a new statement start while a statement is still open
      closes the open one first.
    """

    def __init__(self, start_patterns: Iterable[re.Pattern[str]] | None = None):
        self.start_patterns = tuple(start_patterns or DEFAULT_START_PATTERNS)
        self.current_type: str | None = None
        self._lines: list[str] = []
        self._recipe_type: str | None = None
        self._start_line = 0
        self._last_line = 0
        self._depth = 0

    def is_recipe_start(self, trimmed: str) -> bool:
        return any(p.search(trimmed) for p in self.start_patterns)

    def _flush(self) -> Segment:
        segment = Segment(
            raw_text="\n".join(self._lines),
            recipe_type=self._recipe_type,
            start_line=self._start_line,
            end_line=self._last_line,
        )
        self._lines = []
        self._depth = 0
        return segment

    def feed(self, line: str, line_number: int) -> list[Segment]:
        """Consume one line; return the segments it completed (usually 0 or 1)."""
        if ";" not in line:
            return self._feed_piece(line, line_number)
        done: list[Segment] = []
        for piece in split_statements(line, self._depth if self._lines else 0):
            done.extend(self._feed_piece(piece, line_number))
        return done

    def _feed_piece(self, line: str, line_number: int) -> list[Segment]:
        trimmed = line.strip()
        if not trimmed:
            return []

        done: list[Segment] = []

        header = RECIPE_TYPE_HEADER.search(trimmed)
        if header:
            if self._lines:
                logger.debug("Unterminated statement closed by header at line %d", line_number)
                done.append(self._flush())
            self.current_type = header.group(1)
            return done

        starts = self.is_recipe_start(trimmed)
        if self._lines and starts:
            logger.debug("Unterminated statement closed by new statement at line %d", line_number)
            done.append(self._flush())

        if not self._lines:
            if not starts:
                return done
            prefix = RECIPE_TYPE_PREFIX.match(trimmed)
            self._recipe_type = prefix.group(1) if prefix else self.current_type
            self._start_line = line_number
            self._depth = 0

        self._lines.append(line)
        self._last_line = line_number
        self._depth += paren_delta(line)

        if self._depth <= 0 and trimmed.endswith(";"):
            done.append(self._flush())
        return done

    def finish(self) -> Segment | None:
        """Flush a statement still open at end of input."""
        if self._lines:
            return self._flush()
        return None


def iter_segments(
    lines: Iterable[str], start_patterns: Iterable[re.Pattern[str]] | None = None
) -> Iterator[Segment]:
    """Lazily turn an iterable of log lines into Segments, in source order."""
    accumulator = SegmentAccumulator(start_patterns)
    for line_number, line in enumerate(lines, start=1):
        yield from accumulator.feed(line.rstrip("\r\n"), line_number)
    tail = accumulator.finish()
    if tail is not None:
        yield tail


def segment_text(
    text: str, start_patterns: Iterable[re.Pattern[str]] | None = None
) -> Iterator[Segment]:
    """Segment an in-memory log. Each call returns a fresh iterator."""
    if not isinstance(text, str):
        raise TypeError("log content must be a string")
    return iter_segments(io.StringIO(text), start_patterns)


def segment_file(
    path: str | Path, start_patterns: Iterable[re.Pattern[str]] | None = None
) -> Iterator[Segment]:
    """
    Segment a log file on disk. The file stays open only while the returned
    iterator is being consumed and is closed on exhaustion, error, or close().
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Log file not found: {path.resolve()}")
    return _read_segments(path, start_patterns)


def _read_segments(
    path: Path, start_patterns: Iterable[re.Pattern[str]] | None
) -> Iterator[Segment]:
    count = 0
    with path.open("r", encoding="utf-8", errors="ignore") as f:
        for segment in iter_segments(f, start_patterns):
            count += 1
            yield segment
    logger.info("Segmented %d recipe statements from %s", count, path.name)
