"""Recipe building and recipe-to-meal conversion."""

import logging
import math
from collections.abc import Callable

from protein_ledger.domain.drafts import (
    Grams,
    MealDraft,
    Portion,
    RecipeDraft,
    Servings,
)
from protein_ledger.domain.ledger import Recipe, RecipeIngredient
from protein_ledger.errors import LedgerValidationError

TOTALS_TOLERANCE = 1e-6

_logger = logging.getLogger(__name__)


def protein_for(protein_per_100g: float, grams: float) -> float:
    """Return grams of protein in ``grams`` of food."""
    return protein_per_100g * grams / 100


def effective_protein_density(recipe: Recipe) -> float:
    """Protein per 100g of the whole recipe, 0 for an empty recipe."""
    if recipe.total_grams == 0:
        return 0.0
    return recipe.total_protein / recipe.total_grams * 100


def parse_portion(amount: float, unit: str) -> Portion:
    """Build a portion from the ``servings``/``grams`` wire form."""
    if unit == "servings":
        return Servings(amount)
    if unit == "grams":
        return Grams(amount)
    raise LedgerValidationError(f"Unknown portion unit: {unit}")


def compose_meal(recipe: Recipe, portion: Portion, day: str) -> MealDraft:
    """Return the meal draft equivalent to eating ``portion`` of a recipe.

    The draft carries the recipe's protein density, and the ledger derives
    the meal total from density and grams like any other meal. For
    ``Servings(k)`` that total equals ``k * recipe.total_protein`` only
    within floating-point tolerance.
    """
    amount = portion.amount
    if not math.isfinite(amount) or amount <= 0:
        raise LedgerValidationError("Portion amount must be positive")
    density = effective_protein_density(recipe)
    if isinstance(portion, Servings):
        grams = recipe.total_grams * amount
        name = f"{recipe.name} (x{amount:g} servings)"
    else:
        grams = amount
        name = f"{recipe.name} ({amount:g}g)"
    return MealDraft(
        name=name,
        protein_per_100g=density,
        grams_eaten=grams,
        date=day,
    )


def build_recipe(
    draft: RecipeDraft,
    *,
    id_factory: Callable[[], str],
    created_at: int,
) -> Recipe:
    """Validate a draft and derive all recipe totals from its ingredients."""
    name = draft.name.strip()
    if not name:
        raise LedgerValidationError("Recipe name is required")
    if not draft.ingredients:
        raise LedgerValidationError("Recipe needs at least one ingredient")

    ingredients: list[RecipeIngredient] = []
    for item in draft.ingredients:
        item_name = item.name.strip()
        if not item_name:
            raise LedgerValidationError("Ingredient name is required")
        _require_non_negative(item.protein_per_100g, "Ingredient protein per 100g")
        _require_positive(item.grams_in_recipe, "Ingredient grams")
        ingredients.append(
            RecipeIngredient(
                id=id_factory(),
                name=item_name,
                protein_per_100g=item.protein_per_100g,
                grams_in_recipe=item.grams_in_recipe,
                total_protein=protein_for(
                    item.protein_per_100g, item.grams_in_recipe
                ),
            )
        )

    total_protein = math.fsum(item.total_protein for item in ingredients)
    total_grams = math.fsum(item.grams_in_recipe for item in ingredients)
    _warn_on_mismatch(name, "total_protein", draft.total_protein, total_protein)
    _warn_on_mismatch(name, "total_grams", draft.total_grams, total_grams)
    return Recipe(
        id=id_factory(),
        name=name,
        ingredients=tuple(ingredients),
        total_protein=total_protein,
        total_grams=total_grams,
        created_at=created_at,
    )


def _warn_on_mismatch(
    recipe_name: str, field: str, supplied: float | None, derived: float
) -> None:
    if supplied is None:
        return
    if math.isclose(supplied, derived, rel_tol=TOTALS_TOLERANCE, abs_tol=1e-9):
        return
    _logger.warning(
        "Recipe %s: supplied %s=%s differs from ingredients (%s); using derived",
        recipe_name,
        field,
        supplied,
        derived,
    )


def _require_positive(value: float, label: str) -> None:
    if not math.isfinite(value) or value <= 0:
        raise LedgerValidationError(f"{label} must be a positive number")


def _require_non_negative(value: float, label: str) -> None:
    if not math.isfinite(value) or value < 0:
        raise LedgerValidationError(f"{label} must be zero or more")
