"""Ratio calculator that splits a protein target across ingredients."""

import math

from protein_ledger.domain.ratios import RatioAllocation, RatioIngredient, RatioSummary
from protein_ledger.errors import RatioValidationError


def solve_ratio(
    target_protein: float, ingredients: list[RatioIngredient]
) -> list[RatioAllocation]:
    """Distribute ``target_protein`` by relative weight.

    Weights are normalized, so they do not need to add up to 100. The
    result is in input order; each allocation depends only on its own
    ingredient and the (order-independent) weight sum.
    """
    _require_non_negative(target_protein, "Target protein")
    for ingredient in ingredients:
        _require_non_negative(
            ingredient.protein_per_100g, f"{ingredient.name} protein per 100g"
        )
        _require_non_negative(ingredient.weight, f"{ingredient.name} weight")

    total_weight = math.fsum(ingredient.weight for ingredient in ingredients)
    if target_protein == 0 or total_weight == 0:
        return []

    allocations = []
    for ingredient in ingredients:
        protein = ingredient.weight / total_weight * target_protein
        if ingredient.protein_per_100g == 0:
            grams = None
        else:
            grams = protein / ingredient.protein_per_100g * 100
        allocations.append(
            RatioAllocation(
                ingredient=ingredient,
                protein_provided=protein,
                grams_needed=grams,
            )
        )
    return allocations


def summarize(allocations: list[RatioAllocation]) -> RatioSummary:
    """Return totals and per-ingredient shares for solved allocations."""
    total_protein = math.fsum(item.protein_provided for item in allocations)
    total_grams = math.fsum(
        item.grams_needed for item in allocations if item.grams_needed is not None
    )
    total_weight = math.fsum(item.ingredient.weight for item in allocations)
    shares = [
        item.ingredient.weight / total_weight * 100 if total_weight else 0.0
        for item in allocations
    ]
    return RatioSummary(
        total_protein=total_protein,
        total_grams=total_grams,
        share_percent=shares,
        infeasible=[item.ingredient.name for item in allocations if not item.feasible],
    )


def _require_non_negative(value: float, label: str) -> None:
    if not math.isfinite(value) or value < 0:
        raise RatioValidationError(f"{label} must be zero or more")
