import pytest

from ingestor.segmenter import Segment
from parsers import FieldCoercionError, PatternMismatchError
from parsers import mekanism


def seg(text: str, recipe_type: str | None = None) -> Segment:
    return Segment(raw_text=text, recipe_type=recipe_type, start_line=1, end_line=1)


def test_activating_example():
    s = seg(
        '<recipetype:mekanism:activating>.addRecipe("p/u", <chemical:a> * 10, <chemical:b>);',
        "<recipetype:mekanism:activating>",
    )
    assert mekanism.activating.score(s) == 1
    assert mekanism.activating.extract(s) == {
        "recipe_id": "p/u",
        "recipe_type": "<recipetype:mekanism:activating>",
        "format": "addActivating",
        "input": "<chemical:a> * 10",
        "output": "<chemical:b>",
    }


def test_extraction_has_no_hidden_state():
    s = seg('<recipetype:mekanism:crushing>.addRecipe("c", <tag:items:forge:ores/tin>, <item:mekanism:dust_tin> * 2);')
    assert mekanism.crushing.extract(s) == mekanism.crushing.extract(s)


def test_wrong_field_count_is_structural():
    s = seg('<recipetype:mekanism:chemical_infusing>.addRecipe("ci", <chemical:a> * 1, <chemical:b> * 1);')
    with pytest.raises(PatternMismatchError) as exc:
        mekanism.chemical_infusing.extract(s)
    assert not isinstance(exc.value, FieldCoercionError)
    assert str(exc.value) == (
        "Unable to match mekanism chemical infusing recipe pattern - expected 3 parameters, got 2"
    )
    assert exc.value.handler == "mekanism-chemical_infusing-handler"


def test_missing_closer_and_missing_id():
    with pytest.raises(PatternMismatchError, match="Unable to match mekanism crushing recipe pattern"):
        mekanism.crushing.extract(seg('<recipetype:mekanism:crushing>.addRecipe("c", <item:a>, <item:b>'))
    with pytest.raises(PatternMismatchError):
        mekanism.crushing.extract(seg("<recipetype:mekanism:crushing>.addRecipe(<item:a>, <item:b>);"))


def test_sawing_two_and_four_fields():
    two = mekanism.sawing.extract(
        seg('<recipetype:mekanism:sawing>.addRecipe("s", <item:log>, <item:planks> * 6);')
    )
    assert two["secondary_output"] is None
    assert two["probability"] == 0.0

    four = mekanism.sawing.extract(
        seg('<recipetype:mekanism:sawing>.addRecipe("s", <item:log>, <item:planks> * 6, <item:sawdust>, 0.25);')
    )
    assert four["secondary_output"] == "<item:sawdust>"
    assert four["probability"] == 0.25


def test_sawing_probability_is_hard():
    s = seg('<recipetype:mekanism:sawing>.addRecipe("s", <item:log>, <item:planks>, <item:sawdust>, lots);')
    with pytest.raises(FieldCoercionError, match="Unable to parse probability in mekanism sawing recipe: lots"):
        mekanism.sawing.extract(s)


def test_sawing_three_fields_matches_no_layout():
    s = seg('<recipetype:mekanism:sawing>.addRecipe("s", <item:log>, <item:planks>, <item:sawdust>);')
    with pytest.raises(PatternMismatchError, match="expected 2 or 4 parameters, got 3"):
        mekanism.sawing.extract(s)


def test_reaction_optional_item_output():
    s = seg(
        '<recipetype:mekanism:reaction>.addRecipe("r", <item:a>, <fluid:minecraft:water> * 100,'
        " <chemical:mekanism:hydrogen> * 10, 60, <chemical:mekanism:oxygen> * 5);"
    )
    result = mekanism.reaction.extract(s)
    assert result["duration"] == 60
    assert result["item_output"] is None
    assert result["extra_param"] is None
    assert result["chemical_output"] == "<chemical:mekanism:oxygen> * 5"

    with pytest.raises(PatternMismatchError, match="expected 5-7 parameters, got 4"):
        mekanism.reaction.extract(
            seg('<recipetype:mekanism:reaction>.addRecipe("r", <item:a>, <fluid:b>, <chemical:c>, 60);')
        )


def test_per_tick_flag_is_strict():
    ok = mekanism.compressing.extract(
        seg('<recipetype:mekanism:compressing>.addRecipe("c", <item:a>, <chemical:b> * 1, <item:c>, true);')
    )
    assert ok["per_tick"] is True

    with pytest.raises(FieldCoercionError, match="Unable to parse boolean flag in mekanism compressing recipe: yes"):
        mekanism.compressing.extract(
            seg('<recipetype:mekanism:compressing>.addRecipe("c", <item:a>, <chemical:b>, <item:c>, yes);')
        )


def test_energy_conversion():
    result = mekanism.energy_conversion.extract(
        seg('<recipetype:mekanism:energy_conversion>.addRecipe("e", <item:minecraft:redstone>, 10000);')
    )
    assert result["energy_output"] == 10000
    assert result["format"] == "addEnergyConversion"


def test_signatures_are_exclusive():
    s = seg('<recipetype:mekanism:crushing>.addRecipe("c", <item:a>, <item:b>);')
    winners = [h.name for h in mekanism.HANDLERS if h.score(s)]
    assert winners == ["mekanism-crushing-handler"]


def test_duration_is_hard():
    s = seg(
        '<recipetype:mekanism:nucleosynthesizing>.addRecipe("n", <item:a>, <chemical:mekanism:antimatter> * 2,'
        " <item:b>, x, false);"
    )
    with pytest.raises(FieldCoercionError, match="Unable to parse duration in mekanism nucleosynthesizing recipe: x"):
        mekanism.nucleosynthesizing.extract(s)

    with pytest.raises(FieldCoercionError, match="Unable to parse duration in mekanism reaction recipe: soon"):
        mekanism.reaction.extract(
            seg('<recipetype:mekanism:reaction>.addRecipe("r", <item:a>, <fluid:b>, <chemical:c>, soon, <chemical:d>);')
        )


def test_energy_value_is_hard():
    s = seg('<recipetype:mekanism:energy_conversion>.addRecipe("e", <item:minecraft:redstone>, x);')
    with pytest.raises(FieldCoercionError, match="Unable to parse energy value in mekanism energy conversion recipe: x"):
        mekanism.energy_conversion.extract(s)
