import pytest

from ingestor.segmenter import Segment
from parsers import REGISTRY, RecipeHandler, best_handler, register
from parsers.base import layout


def seg(text: str) -> Segment:
    return Segment(raw_text=text, recipe_type=None, start_line=1, end_line=1)


def test_registry_is_populated_in_fixed_order():
    names = [h.name for h in REGISTRY]
    assert len(names) == 36
    assert len(set(names)) == len(names)
    assert names[0] == "json-crafting-handler"
    assert names.index("smithing-trim-handler") < names.index("cooking-handler")
    assert names.index("cutting-handler") < names.index("mekanism-activating-handler")
    assert names[-1] == "mekanism-washing-handler"


def test_unrecognized_statement_scores_zero_everywhere():
    s = seg('<recipetype:create:pressing>.addRecipe("p", <item:a>, <item:b>);')
    assert all(h.score(s) == 0 for h in REGISTRY)
    assert best_handler(s) == (None, 0)


def test_score_tolerates_missing_text():
    handler = REGISTRY[0]
    assert handler.score(seg("")) == 0
    assert handler.score(object()) == 0


def test_tie_goes_to_first_registered():
    first = RecipeHandler("first", "addX", "thing.add(", [layout("a")])
    second = RecipeHandler("second", "addY", "thing.add(", [layout("a")])
    winner, score = best_handler(seg('thing.add("x", 1);'), [first, second])
    assert winner is first
    assert score == 1


def test_duplicate_name_rejected():
    before = len(REGISTRY)
    with pytest.raises(ValueError, match="Duplicate handler name"):
        register(RecipeHandler("smelting-handler", "addSmelting", "furnace.addRecipe(", [layout("a")]))
    assert len(REGISTRY) == before


def test_handler_identity_is_required():
    with pytest.raises(ValueError):
        RecipeHandler("", "addX", "x.add(", [layout("a")])
    with pytest.raises(ValueError):
        RecipeHandler("h", "", "x.add(", [layout("a")])
    with pytest.raises(ValueError):
        RecipeHandler("h", "addX", "", [layout("a")])
    with pytest.raises(ValueError):
        RecipeHandler("h", "addX", "x.add(", [])


def test_layouts_must_differ_in_field_count():
    with pytest.raises(ValueError, match="two layouts accept 2 fields"):
        RecipeHandler("h", "addX", "x.add(", [layout("a", "b"), layout("c", "d")])
