# parsers/vanilla.py
"""
Handlers for CraftTweaker's built-in recipe managers: crafting table,
furnace-family cooking, smithing, and the generic `addJsonRecipe` call.

Built-in managers are called through bare names (`furnace.addRecipe(...)`),
so their signatures are plain method-call openers rather than
`<recipetype:...>` prefixes.
"""

from .base import Field, RecipeHandler, layout, map_literal, register, soft_float, soft_int


def _cooking_layout(default_cook_time: int):
    # "id", <output>, <input>, experience, cookTime
    return layout(
        "output",
        "input",
        Field("experience", soft_float(0.0)),
        Field("cook_time", soft_int(default_cook_time)),
    )


json_crafting = register(
    RecipeHandler(
        name="json-crafting-handler",
        format="addJsonRecipe",
        signature=".addJsonRecipe(",
        layouts=[layout(Field("data", map_literal))],
        pattern_label="addJsonRecipe",
    )
)

shaped_crafting = register(
    RecipeHandler(
        name="shaped-crafting-handler",
        format="addShaped",
        signature="craftingTable.addShaped(",
        layouts=[layout("output", "pattern")],
        pattern_label="addShaped",
    )
)

shapeless_crafting = register(
    RecipeHandler(
        name="shapeless-crafting-handler",
        format="addShapeless",
        signature="craftingTable.addShapeless(",
        layouts=[layout("output", "ingredients")],
        pattern_label="addShapeless",
    )
)

smelting = register(
    RecipeHandler(
        name="smelting-handler",
        format="addSmelting",
        signature="furnace.addRecipe(",
        layouts=[_cooking_layout(200)],
    )
)

blast_furnace = register(
    RecipeHandler(
        name="blast-furnace-handler",
        format="addBlastFurnace",
        signature="blastFurnace.addRecipe(",
        layouts=[_cooking_layout(100)],
    )
)

smoking = register(
    RecipeHandler(
        name="smoking-handler",
        format="addSmoking",
        signature="smoker.addRecipe(",
        layouts=[_cooking_layout(100)],
    )
)

campfire = register(
    RecipeHandler(
        name="campfire-handler",
        format="addCampfire",
        signature="campfire.addRecipe(",
        layouts=[_cooking_layout(100)],
    )
)

# Transform upgrades an item (diamond -> netherite); trim has no real result.
smithing_transform = register(
    RecipeHandler(
        name="smithing-transform-handler",
        format="addSmithingTransform",
        signature="smithing.addTransformRecipe(",
        layouts=[layout("output", "template", "base", "addition")],
        pattern_label="smithing recipe",
    )
)

smithing_trim = register(
    RecipeHandler(
        name="smithing-trim-handler",
        format="addSmithingTrim",
        signature="smithing.addTrimRecipe(",
        layouts=[layout("template", "base", "addition")],
        pattern_label="smithing recipe",
    )
)

HANDLERS = (
    json_crafting,
    shaped_crafting,
    shapeless_crafting,
    smelting,
    blast_furnace,
    smoking,
    campfire,
    smithing_transform,
    smithing_trim,
)
