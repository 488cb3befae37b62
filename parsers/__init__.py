# Import handler modules for their side effects (they register themselves).
# Import order is registration order, which is the dispatcher's tie-break order.
# Mark as intentionally unused to satisfy Ruff.
from . import vanilla as _vanilla  # noqa: F401
from . import farmersdelight as _farmersdelight  # noqa: F401
from . import mekanism as _mekanism  # noqa: F401

# Explicit re-exports for library users.
from .base import (
    REGISTRY as REGISTRY,
)
from .base import (
    FieldCoercionError as FieldCoercionError,
)
from .base import (
    ParseResult as ParseResult,
)
from .base import (
    PatternMismatchError as PatternMismatchError,
)
from .base import (
    RecipeHandler as RecipeHandler,
)
from .base import (
    RecipeParseError as RecipeParseError,
)
from .base import (
    best_handler as best_handler,
)
from .base import (
    register as register,
)
from .splitter import (
    split_parameters as split_parameters,
)

__all__ = [
    "REGISTRY",
    "FieldCoercionError",
    "ParseResult",
    "PatternMismatchError",
    "RecipeHandler",
    "RecipeParseError",
    "best_handler",
    "register",
    "split_parameters",
]
