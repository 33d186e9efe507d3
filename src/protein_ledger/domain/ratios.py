"""Models for the ingredient ratio calculator."""

from dataclasses import dataclass


@dataclass(frozen=True)
class RatioIngredient:
    """Ingredient with its protein density and relative weight."""

    name: str
    protein_per_100g: float
    weight: float


@dataclass(frozen=True)
class RatioAllocation:
    """Share of the target assigned to one ingredient.

    ``grams_needed`` is None when the ingredient has no protein, since no
    finite amount could supply its share.
    """

    ingredient: RatioIngredient
    protein_provided: float
    grams_needed: float | None

    @property
    def feasible(self) -> bool:
        return self.grams_needed is not None


@dataclass(frozen=True)
class RatioSummary:
    """Totals across a set of allocations."""

    total_protein: float
    total_grams: float
    share_percent: list[float]
    infeasible: list[str]
