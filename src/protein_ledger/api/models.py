"""Pydantic models for the HTTP API."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from protein_ledger.domain.ledger import DailyRollup


class ApiModel(BaseModel):
    """Base model accepting both camelCase and snake_case fields."""

    model_config = ConfigDict(populate_by_name=True)


class MealCreateRequest(ApiModel):
    """Meal entered by hand."""

    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    grams_eaten: float = Field(alias="gramsEaten")
    date: str | None = None


class TargetPayload(ApiModel):
    """Daily protein target."""

    target_protein: float = Field(alias="targetProtein")


class IngredientRequest(ApiModel):
    """Ingredient of a recipe being saved."""

    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    grams_in_recipe: float = Field(alias="gramsInRecipe")


class RecipeCreateRequest(ApiModel):
    """Recipe being saved."""

    name: str
    ingredients: list[IngredientRequest]
    total_protein: float | None = Field(default=None, alias="totalProtein")
    total_grams: float | None = Field(default=None, alias="totalGrams")


class RecipeLogRequest(ApiModel):
    """Portion of a recipe to log."""

    amount: float = 1.0
    unit: Literal["servings", "grams"] = "servings"


class ProgressResponse(ApiModel):
    """Progress against the target for one day."""

    consumed: float
    target: float
    remaining: float
    percentage: float
    near_limit: bool = Field(alias="nearLimit")
    over_limit: bool = Field(alias="overLimit")


class DayResponse(ApiModel):
    """A day's rollup with progress figures."""

    rollup: DailyRollup
    progress: ProgressResponse


class RatioIngredientRequest(ApiModel):
    """Ingredient for the ratio calculator."""

    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    weight: float


class RatioRequest(ApiModel):
    """Ratio calculation; the target defaults to today's remaining protein."""

    target_protein: float | None = Field(default=None, alias="targetProtein")
    ingredients: list[RatioIngredientRequest]


class RatioAllocationResponse(ApiModel):
    """Solved amount for one ingredient."""

    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    weight: float
    share_percent: float = Field(alias="sharePercent")
    protein_provided: float = Field(alias="proteinProvided")
    grams_needed: float | None = Field(alias="gramsNeeded")
    feasible: bool


class RatioResponse(ApiModel):
    """Result of a ratio calculation."""

    target_protein: float = Field(alias="targetProtein")
    allocations: list[RatioAllocationResponse]
    total_protein: float = Field(alias="totalProtein")
    total_grams: float = Field(alias="totalGrams")
    infeasible: list[str]


class ProductResponse(ApiModel):
    """Product returned by the nutrition lookup."""

    barcode: str | None
    name: str | None
    brand: str | None
    protein_per_100g: float | None = Field(alias="proteinPer100g")


class ProductLogRequest(ApiModel):
    """Amount of a scanned product to log."""

    grams: float
