# parsers/farmersdelight.py
"""
Farmer's Delight handlers.

Cooking pot:
    <recipetype:farmersdelight:cooking>.addRecipe("id", <output>, [ingredients],
        (<container>).mutable(), experience, cookTime);

Cutting board:
    <recipetype:farmersdelight:cutting>.addRecipe("id", <input>, [outputs],
        <tool> | <tool>, Optional.empty);
"""

from .base import Field, RecipeHandler, layout, register, soft_float, soft_int


def _farmersdelight(recipe_type: str, format: str, *layouts) -> RecipeHandler:
    return register(
        RecipeHandler(
            name=f"{recipe_type}-handler",
            format=format,
            signature=f"<recipetype:farmersdelight:{recipe_type}>.addRecipe(",
            layouts=layouts,
            pattern_label=f"farmersdelight {recipe_type} recipe",
        )
    )


cooking = _farmersdelight(
    "cooking",
    "addCooking",
    layout(
        "output",
        "ingredients",
        "container",
        Field("experience", soft_float(0.0)),
        Field("cook_time", soft_int(200)),
    ),
)

cutting = _farmersdelight(
    "cutting",
    "addCutting",
    layout("input", "outputs", "tool", "optional"),
)

HANDLERS = (cooking, cutting)
