# normalize.py
"""
ParseResult -> canonical recipe record.

Every format maps to a fixed slot table: which raw fields render as ingredient
entries (inputs / catalysts), which as output entries, and which are plain
parameters (durations, probabilities, flags). Field text is interpreted here,
not in the handlers: reference tokens, `* N` quantities, `a | b` alternation,
`[...]` lists and `(<item:x>).mutable()` style modifier chains.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
from typing import Any, Iterable, Iterator

from parsers.splitter import split_alternatives, split_parameters

logger = logging.getLogger(__name__)

DEFAULT_NAMESPACE = "minecraft"
TAG_NAMESPACE = "tag"

REFERENCE_RE = re.compile(r"<([A-Za-z_]+):([^<>]+)>")
RECIPE_TYPE_RE = re.compile(r"^<recipetype:([^>]+)>$")
QUANTITY_RE = re.compile(r"\*\s*([^\s*]+)\s*$")

EMPTY_INGREDIENTS = {
    "<item:minecraft:air>",
    "IIngredientEmpty.getInstance()",
}

TRIMMED_ARMOR = {"text": "Trimmed Armor", "namespace": DEFAULT_NAMESPACE, "kind": "item", "count": 1}


def _slots(inputs=(), outputs=(), catalysts=(), parameters=()) -> dict[str, tuple[str, ...]]:
    return {
        "inputs": tuple(inputs),
        "outputs": tuple(outputs),
        "catalysts": tuple(catalysts),
        "parameters": tuple(parameters),
    }


_COOKING = _slots(["input"], ["output"], parameters=["experience", "cook_time"])
_ONE_TO_ONE = _slots(["input"], ["output"])
_TWO_TO_ONE = _slots(["left_input", "right_input"], ["output"])
_ITEM_CHEMICAL = _slots(["input", "chemical_input"], ["output"], parameters=["per_tick"])

FORMAT_VIEWS: dict[str, dict[str, tuple[str, ...]]] = {
    "addShaped": _slots(["pattern"], ["output"]),
    "addShapeless": _slots(["ingredients"], ["output"]),
    "addSmelting": _COOKING,
    "addBlastFurnace": _COOKING,
    "addSmoking": _COOKING,
    "addCampfire": _COOKING,
    "addSmithingTransform": _slots(["template", "base", "addition"], ["output"]),
    "addSmithingTrim": _slots(["template", "base", "addition"]),
    "addCooking": _slots(
        ["ingredients", "container"], ["output"], parameters=["experience", "cook_time"]
    ),
    "addCutting": _slots(["input"], ["outputs"], catalysts=["tool"]),
    "addActivating": _ONE_TO_ONE,
    "addCentrifuging": _ONE_TO_ONE,
    "addChemicalConversion": _ONE_TO_ONE,
    "addCrushing": _ONE_TO_ONE,
    "addCrystallizing": _ONE_TO_ONE,
    "addEnriching": _ONE_TO_ONE,
    "addEvaporating": _ONE_TO_ONE,
    "addOxidizing": _ONE_TO_ONE,
    "addPigmentExtracting": _ONE_TO_ONE,
    "addEnergyConversion": _slots(["input"], parameters=["energy_output"]),
    "addChemicalInfusing": _TWO_TO_ONE,
    "addPigmentMixing": _TWO_TO_ONE,
    "addCombining": _slots(["main_input", "extra_input"], ["output"]),
    "addCompressing": _ITEM_CHEMICAL,
    "addDissolution": _ITEM_CHEMICAL,
    "addInjecting": _ITEM_CHEMICAL,
    "addMetallurgicInfusing": _ITEM_CHEMICAL,
    "addPainting": _ITEM_CHEMICAL,
    "addPurifying": _ITEM_CHEMICAL,
    "addNucleosynthesizing": _slots(
        ["input", "chemical_input"], ["output"], parameters=["duration", "per_tick"]
    ),
    "addReaction": _slots(
        ["item_input", "fluid_input", "chemical_input"],
        ["item_output", "chemical_output"],
        parameters=["duration", "extra_param"],
    ),
    "addRotary": _slots(
        ["fluid_input", "chemical_to_fluid"], ["chemical_from_fluid", "fluid_output"]
    ),
    "addSawing": _slots(
        ["input"], ["primary_output", "secondary_output"], parameters=["probability"]
    ),
    "addSeparating": _slots(["fluid_input"], ["left_output", "right_output"]),
    "addWashing": _slots(["fluid_input", "dirty_input"], ["clean_output"]),
}

# Built-in managers carry no <recipetype:...> prefix.
FORMAT_DEFAULT_TYPES = {
    "addShaped": "minecraft:crafting_shaped",
    "addShapeless": "minecraft:crafting_shapeless",
    "addSmelting": "minecraft:smelting",
    "addBlastFurnace": "minecraft:blasting",
    "addSmoking": "minecraft:smoking",
    "addCampfire": "minecraft:campfire_cooking",
    "addSmithingTransform": "minecraft:smithing_transform",
    "addSmithingTrim": "minecraft:smithing_trim",
    "addCooking": "farmersdelight:cooking",
    "addCutting": "farmersdelight:cutting",
}

JSON_INPUT_KEYS = ("ingredient", "ingredients", "key", "input", "inputs")
JSON_OUTPUT_KEYS = ("result", "results", "output", "outputs")

_RESERVED = ("recipe_id", "recipe_type", "format")


# ---------- reference tokens ----------


def split_id(identifier: str) -> tuple[str, str]:
    """'ns:path' -> (ns, path); a bare path gets the default namespace."""
    if ":" in identifier:
        namespace, path = identifier.split(":", 1)
        return namespace or DEFAULT_NAMESPACE, path
    return DEFAULT_NAMESPACE, identifier


def parse_reference(text: str) -> dict[str, str] | None:
    """
    First `<kind:...>` token in `text` -> {kind, id, namespace, path}.
    Tags carry a registry segment (`<tag:items:forge:ingots/iron>`) that is
    dropped from the id.
    """
    m = REFERENCE_RE.search(text)
    if not m:
        return None
    kind, body = m.group(1), m.group(2)
    if kind == "tag" and body.count(":") >= 2:
        body = body.split(":", 1)[1]
    namespace, path = split_id(body)
    return {"kind": kind, "id": f"{namespace}:{path}", "namespace": namespace, "path": path}


def parse_quantity(text: str) -> tuple[str, int]:
    """Split a trailing `* N` multiplier off; malformed multipliers count as 1."""
    m = QUANTITY_RE.search(text)
    if not m:
        return text, 1
    try:
        count = int(float(m.group(1)))
    except (ValueError, OverflowError):
        count = 1
    return text[: m.start()].strip(), max(count, 1)


def _strip_wrapping_parens(text: str) -> str:
    while text.startswith("(") and text.endswith(")"):
        depth = 0
        for i, char in enumerate(text):
            if char == "(":
                depth += 1
            elif char == ")":
                depth -= 1
                if depth == 0 and i != len(text) - 1:
                    return text
        text = text[1:-1].strip()
    return text


def is_empty_ingredient(text: str) -> bool:
    return text.strip() in EMPTY_INGREDIENTS


def ingredient_view(text: str) -> dict[str, Any] | None:
    """
    One ingredient token -> {text, namespace, kind, id, count}.
    Items render as their path with the mod namespace; tags render as
    '#ns:path' with namespace 'tag'. Non-reference or empty tokens -> None.
    """
    text, count = parse_quantity(text.strip())
    if is_empty_ingredient(text):
        return None
    ref = parse_reference(text)
    if ref is None or ref["id"] == "minecraft:air":
        return None
    if ref["kind"] == "tag":
        shown, namespace = f"#{ref['id']}", TAG_NAMESPACE
    else:
        shown, namespace = ref["path"], ref["namespace"]
    return {"text": shown, "namespace": namespace, "kind": ref["kind"], "id": ref["id"], "count": count}


def output_view(entry: dict[str, Any]) -> dict[str, Any]:
    """Output label: the ingredient text plus ' xN' when more than one is produced."""
    view = dict(entry)
    if view.get("count", 1) > 1:
        view["text"] = f"{view['text']} x{view['count']}"
    return view


def expand_slot(text: str | None) -> list[dict[str, Any]]:
    """
    Raw slot text -> ingredient entries.
    Lists (nested too) flatten to one entry per element; an alternation chain
    becomes one entry for its first alternative with every option listed.
    """
    if not text:
        return []
    text = text.strip()
    if text.startswith("[") and text.endswith("]"):
        entries: list[dict[str, Any]] = []
        for part in split_parameters(text[1:-1]):
            entries.extend(expand_slot(part))
        return entries

    options = []
    for alternative in split_alternatives(_strip_wrapping_parens(text)):
        view = ingredient_view(alternative)
        if view is not None:
            options.append(view)
    if not options:
        return []
    entry = dict(options[0])
    if len(options) > 1:
        entry["alternatives"] = [o["id"] for o in options]
    return [entry]


# ---------- JSON recipes ----------


def _json_count(raw: Any) -> int:
    """JSON counts may be numbers or numeric strings; anything else counts as 1."""
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        return 1
    try:
        count = int(float(raw))
    except (ValueError, OverflowError):
        return 1
    return max(count, 1)


def _json_entry(value: Any) -> dict[str, Any] | None:
    if not isinstance(value, dict):
        if isinstance(value, str):
            namespace, path = split_id(value)
            return {"text": path, "namespace": namespace, "kind": "item", "id": f"{namespace}:{path}", "count": 1}
        return None
    count = _json_count(value.get("count", value.get("amount")))
    if "tag" in value:
        namespace, path = split_id(str(value["tag"]))
        tag_id = f"{namespace}:{path}"
        return {"text": f"#{tag_id}", "namespace": TAG_NAMESPACE, "kind": "tag", "id": tag_id, "count": count}
    identifier = value.get("item") or value.get("id") or value.get("fluid")
    if identifier:
        namespace, path = split_id(str(identifier))
        if f"{namespace}:{path}" == "minecraft:air":
            return None
        kind = "fluid" if "fluid" in value and "item" not in value else "item"
        return {"text": path, "namespace": namespace, "kind": kind, "id": f"{namespace}:{path}", "count": count}
    # nested {"ingredient": ...} / {"result": ..., "chance": ...}
    for key in ("ingredient", "result", "item"):
        if isinstance(value.get(key), dict):
            return _json_entry(value[key])
    return None


def _json_entries(value: Any) -> list[dict[str, Any]]:
    if isinstance(value, list):
        out: list[dict[str, Any]] = []
        for item in value:
            out.extend(_json_entries(item))
        return out
    if isinstance(value, dict) and not any(k in value for k in ("item", "tag", "id", "fluid", "ingredient", "result")):
        # shaped `key` maps symbol -> ingredient
        return _json_entries(list(value.values()))
    entry = _json_entry(value)
    return [entry] if entry else []


def json_recipe_slots(data: Any) -> dict[str, list[dict[str, Any]]]:
    """Inputs/outputs of an addJsonRecipe payload (vanilla/KubeJS JSON shape)."""
    if not isinstance(data, dict):
        return {"inputs": [], "outputs": []}
    inputs: list[dict[str, Any]] = []
    outputs: list[dict[str, Any]] = []
    for key in JSON_INPUT_KEYS:
        inputs.extend(_json_entries(data.get(key)))
    for key in JSON_OUTPUT_KEYS:
        outputs.extend(output_view(e) for e in _json_entries(data.get(key)))
    return {"inputs": inputs, "outputs": outputs}


# ---------- records ----------


def recipe_type_id(recipe_type: str | None, format: str | None = None, data: Any = None) -> str:
    """'<recipetype:mekanism:crushing>' -> 'mekanism:crushing', with format fallbacks."""
    if recipe_type:
        m = RECIPE_TYPE_RE.match(recipe_type.strip())
        if m:
            return m.group(1)
    if isinstance(data, dict) and isinstance(data.get("type"), str):
        return data["type"]
    return FORMAT_DEFAULT_TYPES.get(format or "", "unknown")


def machine_type(type_id: str) -> str:
    path = type_id.split(":", 1)[-1]
    return path.replace("_", " ").replace("/", " ").title()


def normalize_recipe(result: dict[str, Any]) -> dict[str, Any]:
    """
    ParseResult -> record with keys recipe_id, type, mod, machine_type, format,
    inputs, outputs, catalysts, parameters, data.
    """
    format = result.get("format")
    recipe_id = result.get("recipe_id") or ""
    data = {k: v for k, v in result.items() if k not in _RESERVED}
    type_id = recipe_type_id(result.get("recipe_type"), format, data.get("data"))
    mod = split_id(recipe_id)[0] if ":" in recipe_id else DEFAULT_NAMESPACE

    record: dict[str, Any] = {
        "recipe_id": recipe_id,
        "type": type_id,
        "mod": mod,
        "machine_type": machine_type(type_id),
        "format": format,
        "inputs": [],
        "outputs": [],
        "catalysts": [],
        "parameters": {},
        "data": data,
    }

    if format == "addJsonRecipe":
        record.update(json_recipe_slots(data.get("data")))
        return record

    view = FORMAT_VIEWS.get(format or "")
    if view is None:
        return record

    for field in view["inputs"]:
        record["inputs"].extend(expand_slot(result.get(field)))
    for field in view["catalysts"]:
        record["catalysts"].extend(expand_slot(result.get(field)))
    for field in view["outputs"]:
        record["outputs"].extend(output_view(e) for e in expand_slot(result.get(field)))
    for field in view["parameters"]:
        if result.get(field) is not None:
            record["parameters"][field] = result[field]

    if format == "addSmithingTrim":
        record["outputs"] = [dict(TRIMMED_ARMOR)]
    return record


def normalize_outcomes(outcomes: Iterable[Any]) -> Iterator[dict[str, Any]]:
    """Records for the parsed outcomes of a dispatch run; others are skipped.

    A record that fails to normalize is logged and skipped so the rest of the
    batch still comes through.
    """
    for outcome in outcomes:
        if outcome.status != "parsed" or outcome.result is None:
            continue
        try:
            record = normalize_recipe(outcome.result)
        except Exception:
            logger.error(
                "Normalization failed on lines %d-%d (%s)",
                outcome.start_line,
                outcome.end_line,
                outcome.handler,
                exc_info=True,
            )
            continue
        yield record


def content_hash(recipe: dict[str, Any]) -> str:
    """Stable hash for idempotency."""
    key = {
        "recipe_id": recipe.get("recipe_id"),
        "type": recipe.get("type"),
        "format": recipe.get("format"),
        "inputs": recipe.get("inputs"),
        "outputs": recipe.get("outputs"),
        "catalysts": recipe.get("catalysts"),
        "parameters": recipe.get("parameters"),
        "data": recipe.get("data"),
    }
    return hashlib.sha256(json.dumps(key, sort_keys=True, default=str).encode("utf-8")).hexdigest()
