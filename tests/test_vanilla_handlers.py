import pytest

from ingestor.segmenter import Segment
from parsers import FieldCoercionError, PatternMismatchError
from parsers import farmersdelight, vanilla


def seg(text: str, recipe_type: str | None = None) -> Segment:
    return Segment(raw_text=text, recipe_type=recipe_type, start_line=1, end_line=1)


def test_smelting_soft_defaults():
    result = vanilla.smelting.extract(seg('furnace.addRecipe("s", <item:minecraft:glass>, <item:minecraft:sand>, none, ???);'))
    assert result["experience"] == 0.0
    assert result["cook_time"] == 200
    assert result["format"] == "addSmelting"


def test_blast_furnace_default_cook_time_differs():
    result = vanilla.blast_furnace.extract(
        seg('blastFurnace.addRecipe("b", <item:minecraft:iron_ingot>, <item:minecraft:raw_iron>, 0.7, 0);')
    )
    assert result["experience"] == 0.7
    assert result["cook_time"] == 100


def test_shaped_keeps_nested_pattern():
    result = vanilla.shaped_crafting.extract(
        seg(
            'craftingTable.addShaped("torch", <item:minecraft:torch> * 4,'
            " [[<item:minecraft:coal>], [<tag:items:forge:rods/wooden>]]);"
        )
    )
    assert result["output"] == "<item:minecraft:torch> * 4"
    assert result["pattern"] == "[[<item:minecraft:coal>], [<tag:items:forge:rods/wooden>]]"


def test_shapeless():
    result = vanilla.shapeless_crafting.extract(
        seg('craftingTable.addShapeless("dye", <item:minecraft:red_dye>, [<item:minecraft:poppy>]);')
    )
    assert result["ingredients"] == "[<item:minecraft:poppy>]"


def test_smithing_transform_and_trim():
    transform = vanilla.smithing_transform.extract(
        seg(
            'smithing.addTransformRecipe("n", <item:minecraft:netherite_sword>, <item:minecraft:template>,'
            " <item:minecraft:diamond_sword>, <item:minecraft:netherite_ingot>);"
        )
    )
    assert transform["base"] == "<item:minecraft:diamond_sword>"

    trim = vanilla.smithing_trim.extract(
        seg('smithing.addTrimRecipe("t", <item:minecraft:trim>, <tag:items:minecraft:trimmable_armor>, <item:minecraft:quartz>);')
    )
    assert trim["format"] == "addSmithingTrim"
    assert "output" not in trim


def test_json_recipe_map_literal():
    result = vanilla.json_crafting.extract(
        seg(
            '<recipetype:create:mixing>.addJsonRecipe("mix", {\n'
            "  type: 'create:mixing',\n"
            '  ingredients: [{item: "minecraft:a"}],\n'
            '  results: [{item: "create:b", count: 2}]\n'
            "});",
            "<recipetype:create:mixing>",
        )
    )
    assert result["data"]["type"] == "create:mixing"
    assert result["data"]["results"] == [{"item": "create:b", "count": 2}]


def test_json_recipe_bad_literal():
    with pytest.raises(FieldCoercionError, match="JSON data"):
        vanilla.json_crafting.extract(seg('<recipetype:a:b>.addJsonRecipe("j", {oops: });'))


def test_cooking_soft_defaults():
    result = farmersdelight.cooking.extract(
        seg(
            '<recipetype:farmersdelight:cooking>.addRecipe("stew", <item:farmersdelight:beef_stew>,'
            " [<item:minecraft:beef>, <item:minecraft:potato>], (<item:minecraft:bowl>).mutable(), abc, xyz);",
            "<recipetype:farmersdelight:cooking>",
        )
    )
    assert result["experience"] == 0.0
    assert result["cook_time"] == 200
    assert result["container"] == "(<item:minecraft:bowl>).mutable()"


def test_cutting():
    result = farmersdelight.cutting.extract(
        seg(
            '<recipetype:farmersdelight:cutting>.addRecipe("cut", <item:minecraft:cake>,'
            " [<item:farmersdelight:cake_slice> * 7], <tag:items:forge:tools/knives>, Optional.empty);"
        )
    )
    assert result["outputs"] == "[<item:farmersdelight:cake_slice> * 7]"
    assert result["tool"] == "<tag:items:forge:tools/knives>"


def test_cooking_wrong_arity():
    with pytest.raises(PatternMismatchError, match="farmersdelight cooking recipe"):
        farmersdelight.cooking.extract(
            seg('<recipetype:farmersdelight:cooking>.addRecipe("stew", <item:a>, [<item:b>]);')
        )


def test_json_recipe_tolerates_trailing_commas():
    result = vanilla.json_crafting.extract(
        seg('<recipetype:create:pressing>.addJsonRecipe("p", {ingredients: [{item: "minecraft:a"},], results: [],});')
    )
    assert result["data"] == {"ingredients": [{"item": "minecraft:a"}], "results": []}
