"""Input models for ledger mutations."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class MealDraft:
    """Caller-supplied fields for a new meal."""

    name: str
    protein_per_100g: float
    grams_eaten: float
    date: str


@dataclass(frozen=True)
class RecipeIngredientDraft:
    """Ingredient entered while composing a recipe."""

    name: str
    protein_per_100g: float
    grams_in_recipe: float


@dataclass(frozen=True)
class RecipeDraft:
    """Caller-supplied fields for a new recipe.

    Totals are optional; the ledger always derives them from the
    ingredients and only uses supplied values for a consistency check.
    """

    name: str
    ingredients: list[RecipeIngredientDraft] = field(default_factory=list)
    total_protein: float | None = None
    total_grams: float | None = None


@dataclass(frozen=True)
class Servings:
    """Portion expressed as a multiple of the whole recipe."""

    amount: float


@dataclass(frozen=True)
class Grams:
    """Portion expressed as an absolute mass."""

    amount: float


Portion = Servings | Grams
