# parsers/base.py
import json
import re
from dataclasses import dataclass
from typing import Any, Callable

from .splitter import split_parameters


class ParseResult(dict[str, Any]):
    """
    Dict produced by a successful extraction:
    - recipe_id: str (first quoted literal of the call, never empty)
    - recipe_type: str | None (copied verbatim from the segment)
    - format: str (e.g. "addCooking", "addActivating")
    - format-specific fields (input, output, left_input, duration, per_tick, ...)
    """


class RecipeParseError(Exception):
    """A handler recognised a segment but could not extract it."""

    def __init__(
        self, message: str, handler: str | None = None, recipe_type: str | None = None
    ):
        super().__init__(message)
        self.handler = handler
        self.recipe_type = recipe_type


class PatternMismatchError(RecipeParseError):
    """Structural failure: missing signature or closer, no id, or bad field count."""


class FieldCoercionError(RecipeParseError):
    """A field designated hard could not be converted to its type."""


# Coercers take the raw field text and either return the converted value or
# raise ValueError carrying a short description of what was being parsed.
Coercer = Callable[[str], Any]

INT_PREFIX = re.compile(r"^\s*([+-]?\d+)")
FLOAT_PREFIX = re.compile(r"^\s*([+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?)")
UNQUOTED_KEY = re.compile(r"([{,]\s*)([A-Za-z0-9_]+):")
TRAILING_COMMA = re.compile(r",\s*([}\]])")


def _leading_int(text: str) -> int | None:
    m = INT_PREFIX.match(text)
    return int(m.group(1)) if m else None


def _leading_float(text: str) -> float | None:
    m = FLOAT_PREFIX.match(text)
    return float(m.group(1)) if m else None


def soft_float(default: float = 0.0) -> Coercer:
    """Leading-number float; missing, unparsable or zero values become `default`."""

    def coerce(text: str) -> float:
        return _leading_float(text) or default

    return coerce


def soft_int(default: int) -> Coercer:
    """Leading-number int; missing, unparsable or zero values become `default`."""

    def coerce(text: str) -> int:
        return _leading_int(text) or default

    return coerce


def strict_int(what: str) -> Coercer:
    def coerce(text: str) -> int:
        value = _leading_int(text)
        if value is None:
            raise ValueError(what)
        return value

    return coerce


def strict_float(what: str) -> Coercer:
    def coerce(text: str) -> float:
        value = _leading_float(text)
        if value is None:
            raise ValueError(what)
        return value

    return coerce


def strict_bool(what: str = "boolean flag") -> Coercer:
    def coerce(text: str) -> bool:
        if text == "true":
            return True
        if text == "false":
            return False
        raise ValueError(what)

    return coerce


def map_literal(text: str) -> Any:
    """
    CraftTweaker map literal -> Python object.
    Tolerates unquoted keys, single-quoted strings and trailing commas.
    """
    transformed = UNQUOTED_KEY.sub(r'\1"\2":', text)
    transformed = transformed.replace("'", '"')
    transformed = TRAILING_COMMA.sub(r"\1", transformed)
    try:
        return json.loads(transformed)
    except json.JSONDecodeError as exc:
        raise ValueError(f"JSON data ({exc.msg})") from exc


@dataclass(frozen=True)
class Field:
    name: str
    coerce: Coercer | None = None


@dataclass(frozen=True)
class Layout:
    """One accepted field layout; selected by field count alone."""

    fields: tuple[Field, ...]
    defaults: tuple[tuple[str, Any], ...] = ()


def layout(*fields: str | Field, **defaults: Any) -> Layout:
    """
    Build a Layout from field names (plain strings) or Field instances.
    Keyword arguments become defaults for fields this layout does not carry.
    """
    specs = tuple(f if isinstance(f, Field) else Field(f) for f in fields)
    return Layout(fields=specs, defaults=tuple(defaults.items()))


def _describe_counts(counts: list[int]) -> str:
    if len(counts) == 1:
        return str(counts[0])
    if len(counts) > 2 and counts == list(range(counts[0], counts[-1] + 1)):
        return f"{counts[0]}-{counts[-1]}"
    return ", ".join(str(c) for c in counts[:-1]) + f" or {counts[-1]}"


RECIPE_ID_RE = re.compile(r'^"([^"]+)"')


class RecipeHandler:
    """
    Recognizer + extractor for exactly one recipe-registration signature.

    Every handler runs the same routine; only the description differs:
      - signature: literal, case-sensitive call prefix, e.g.
        "<recipetype:mekanism:crushing>.addRecipe(" or "furnace.addRecipe("
      - format: result-kind tag copied into every ParseResult
      - layouts: accepted field layouts after the recipe id
      - pattern_label / description: wording used in diagnostics
    """

    def __init__(
        self,
        name: str,
        format: str,
        signature: str,
        layouts: tuple[Layout, ...] | list[Layout],
        pattern_label: str | None = None,
        description: str | None = None,
    ):
        if not name:
            raise ValueError("name is required for recipe handlers")
        if not format:
            raise ValueError(f"format is required for recipe handler {name}")
        if not signature:
            raise ValueError(f"signature is required for recipe handler {name}")
        if not layouts:
            raise ValueError(f"at least one layout is required for recipe handler {name}")

        by_count: dict[int, Layout] = {}
        for lay in layouts:
            count = len(lay.fields)
            if count in by_count:
                raise ValueError(f"{name}: two layouts accept {count} fields")
            by_count[count] = lay

        self.name = name
        self.format = format
        self.signature = signature
        self.layouts = tuple(layouts)
        self.pattern_label = pattern_label or signature.rstrip("(")
        self.description = description or self.pattern_label
        self._by_count = by_count
        self._expected = _describe_counts(sorted(by_count))
        self._call_re = re.compile(re.escape(signature) + r"(.*)\);\s*$", re.S)

    def __repr__(self) -> str:
        return f"<RecipeHandler {self.name} format={self.format}>"

    def score(self, segment: Any) -> int:
        """1 when the segment text contains this handler's signature, else 0."""
        raw = getattr(segment, "raw_text", None)
        if not raw:
            return 0
        return 1 if self.signature in raw else 0

    def _mismatch(self, recipe_type: str | None, detail: str = "") -> PatternMismatchError:
        return PatternMismatchError(
            f"Unable to match {self.pattern_label} pattern{detail}",
            handler=self.name,
            recipe_type=recipe_type,
        )

    def extract(self, segment: Any) -> ParseResult:
        """
        Destructure the call in `segment.raw_text`.

        Raises PatternMismatchError when the signature or the trailing `);`
        is missing, the first argument is not a quoted id, or the number of
        remaining fields matches no accepted layout. Raises FieldCoercionError
        when a hard-typed field cannot be converted.
        """
        raw = getattr(segment, "raw_text", None) or ""
        recipe_type = getattr(segment, "recipe_type", None)

        if self.signature not in raw:
            raise self._mismatch(recipe_type)

        m = self._call_re.search(raw)
        if not m:
            raise self._mismatch(recipe_type)

        params = m.group(1).strip()
        id_match = RECIPE_ID_RE.match(params)
        if not id_match:
            raise self._mismatch(recipe_type)

        remaining = params[id_match.end():].strip()
        if remaining.startswith(","):
            remaining = remaining[1:].strip()

        fields = split_parameters(remaining)
        lay = self._by_count.get(len(fields))
        if lay is None:
            raise PatternMismatchError(
                f"Unable to match {self.description} pattern"
                f" - expected {self._expected} parameters, got {len(fields)}",
                handler=self.name,
                recipe_type=recipe_type,
            )

        result = ParseResult(
            recipe_id=id_match.group(1),
            recipe_type=recipe_type,
            format=self.format,
        )
        result.update(lay.defaults)
        for spec, text in zip(lay.fields, fields):
            if spec.coerce is None:
                result[spec.name] = text
                continue
            try:
                result[spec.name] = spec.coerce(text)
            except ValueError as exc:
                raise FieldCoercionError(
                    f"Unable to parse {exc} in {self.description}: {text}",
                    handler=self.name,
                    recipe_type=recipe_type,
                ) from exc
        return result


REGISTRY: list[RecipeHandler] = []


def register(handler: RecipeHandler) -> RecipeHandler:
    """Append a handler to the global REGISTRY; order is the dispatch tie-break."""
    for attr in ("name", "format", "signature"):
        if not getattr(handler, attr, None):
            raise ValueError(f"Cannot register handler without {attr}: {handler!r}")
    if any(existing.name == handler.name for existing in REGISTRY):
        raise ValueError(f"Duplicate handler name: {handler.name}")
    REGISTRY.append(handler)
    return handler


def best_handler(
    segment: Any, handlers: list[RecipeHandler] | tuple[RecipeHandler, ...] | None = None
) -> tuple[RecipeHandler | None, int]:
    """
    Score every handler and return (winner, score).
    Ties go to the earliest registered handler; a zero maximum returns (None, 0).
    """
    best_score = 0
    best: RecipeHandler | None = None
    for handler in REGISTRY if handlers is None else handlers:
        score = handler.score(segment)
        if score > best_score:
            best_score, best = score, handler
    return best, best_score
