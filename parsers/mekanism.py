# parsers/mekanism.py
"""
Mekanism machine recipes.

Every machine registers through

    <recipetype:mekanism:TYPE>.addRecipe("id", ...);

and only the field layout after the id differs between machines.
Chemicals, gases and pigments appear as `<chemical:...> * N` references;
item inputs may be tags with a `* N` multiplier.
"""

from .base import Field, RecipeHandler, layout, register, strict_bool, strict_float, strict_int

PER_TICK = Field("per_tick", strict_bool("boolean flag"))
DURATION = Field("duration", strict_int("duration"))


def _mekanism(recipe_type: str, format: str, *layouts) -> RecipeHandler:
    return register(
        RecipeHandler(
            name=f"mekanism-{recipe_type}-handler",
            format=format,
            signature=f"<recipetype:mekanism:{recipe_type}>.addRecipe(",
            layouts=layouts,
            pattern_label=f"mekanism {recipe_type} recipe",
            description=f"mekanism {recipe_type.replace('_', ' ')} recipe",
        )
    )


# Single input -> single output machines.
activating = _mekanism("activating", "addActivating", layout("input", "output"))
centrifuging = _mekanism("centrifuging", "addCentrifuging", layout("input", "output"))
chemical_conversion = _mekanism(
    "chemical_conversion", "addChemicalConversion", layout("input", "output")
)
crushing = _mekanism("crushing", "addCrushing", layout("input", "output"))
crystallizing = _mekanism("crystallizing", "addCrystallizing", layout("input", "output"))
enriching = _mekanism("enriching", "addEnriching", layout("input", "output"))
evaporating = _mekanism("evaporating", "addEvaporating", layout("input", "output"))
oxidizing = _mekanism("oxidizing", "addOxidizing", layout("input", "output"))
pigment_extracting = _mekanism(
    "pigment_extracting", "addPigmentExtracting", layout("input", "output")
)

energy_conversion = _mekanism(
    "energy_conversion",
    "addEnergyConversion",
    layout("input", Field("energy_output", strict_int("energy value"))),
)

# Two inputs -> one output.
chemical_infusing = _mekanism(
    "chemical_infusing", "addChemicalInfusing", layout("left_input", "right_input", "output")
)
combining = _mekanism("combining", "addCombining", layout("main_input", "extra_input", "output"))
pigment_mixing = _mekanism(
    "pigment_mixing", "addPigmentMixing", layout("left_input", "right_input", "output")
)

# Item + chemical -> output, with a per-tick chemical usage flag.
compressing = _mekanism(
    "compressing", "addCompressing", layout("input", "chemical_input", "output", PER_TICK)
)
dissolution = _mekanism(
    "dissolution", "addDissolution", layout("input", "chemical_input", "output", PER_TICK)
)
injecting = _mekanism(
    "injecting", "addInjecting", layout("input", "chemical_input", "output", PER_TICK)
)
metallurgic_infusing = _mekanism(
    "metallurgic_infusing",
    "addMetallurgicInfusing",
    layout("input", "chemical_input", "output", PER_TICK),
)
painting = _mekanism(
    "painting", "addPainting", layout("input", "chemical_input", "output", PER_TICK)
)
purifying = _mekanism(
    "purifying", "addPurifying", layout("input", "chemical_input", "output", PER_TICK)
)

nucleosynthesizing = _mekanism(
    "nucleosynthesizing",
    "addNucleosynthesizing",
    layout("input", "chemical_input", "output", DURATION, PER_TICK),
)

# Pressurized reaction chamber; the item output and trailing extra are optional.
reaction = _mekanism(
    "reaction",
    "addReaction",
    layout(
        "item_input", "fluid_input", "chemical_input", DURATION, "chemical_output",
        item_output=None, extra_param=None,
    ),
    layout(
        "item_input", "fluid_input", "chemical_input", DURATION, "item_output", "chemical_output",
        extra_param=None,
    ),
    layout(
        "item_input", "fluid_input", "chemical_input", DURATION, "item_output", "chemical_output",
        "extra_param",
    ),
)

rotary = _mekanism(
    "rotary",
    "addRotary",
    layout("fluid_input", "chemical_from_fluid", "chemical_to_fluid", "fluid_output"),
)

sawing = _mekanism(
    "sawing",
    "addSawing",
    layout("input", "primary_output", secondary_output=None, probability=0.0),
    layout(
        "input", "primary_output", "secondary_output",
        Field("probability", strict_float("probability")),
    ),
)

separating = _mekanism(
    "separating", "addSeparating", layout("fluid_input", "left_output", "right_output")
)
washing = _mekanism("washing", "addWashing", layout("fluid_input", "dirty_input", "clean_output"))

HANDLERS = (
    activating,
    centrifuging,
    chemical_conversion,
    crushing,
    crystallizing,
    enriching,
    evaporating,
    oxidizing,
    pigment_extracting,
    energy_conversion,
    chemical_infusing,
    combining,
    pigment_mixing,
    compressing,
    dissolution,
    injecting,
    metallurgic_infusing,
    painting,
    purifying,
    nucleosynthesizing,
    reaction,
    rotary,
    sawing,
    separating,
    washing,
)
