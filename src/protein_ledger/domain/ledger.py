"""Persisted ledger entities.

Field aliases are the camelCase names stored in the snapshot blob.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_TARGET_PROTEIN = 150.0


class _LedgerModel(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class Meal(_LedgerModel):
    """A single consumption event."""

    id: str
    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    grams_eaten: float = Field(alias="gramsEaten")
    total_protein: float = Field(alias="totalProtein")
    date: str
    timestamp: int


class DailyRollup(_LedgerModel):
    """Protein totals for one calendar day."""

    date: str
    total_protein: float = Field(alias="totalProtein")
    target_protein: float = Field(alias="targetProtein")
    meals: tuple[Meal, ...] = ()


class RecipeIngredient(_LedgerModel):
    """Ingredient owned by a single recipe."""

    id: str
    name: str
    protein_per_100g: float = Field(alias="proteinPer100g")
    grams_in_recipe: float = Field(alias="gramsInRecipe")
    total_protein: float = Field(alias="totalProtein")


class Recipe(_LedgerModel):
    """A saved multi-ingredient composition."""

    id: str
    name: str
    ingredients: tuple[RecipeIngredient, ...] = ()
    total_protein: float = Field(alias="totalProtein")
    total_grams: float = Field(alias="totalGrams")
    created_at: int = Field(alias="createdAt")


class Snapshot(_LedgerModel):
    """Whole-ledger state as written to storage."""

    target_protein: float = Field(
        default=DEFAULT_TARGET_PROTEIN, alias="targetProtein"
    )
    meals: tuple[Meal, ...] = ()
    daily_rollups: dict[str, DailyRollup] = Field(
        default_factory=dict, alias="dailyProteinData"
    )
    recipes: tuple[Recipe, ...] = ()

    @model_validator(mode="before")
    @classmethod
    def _drop_empty_fields(cls, data: object) -> object:
        if not isinstance(data, dict):
            return data
        cleaned = {key: value for key, value in data.items() if value is not None}
        if not cleaned.get("targetProtein"):
            cleaned.pop("targetProtein", None)
        return cleaned

    def to_json(self) -> str:
        """Serialize using the stored field names."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, payload: str) -> "Snapshot":
        """Parse a stored blob, defaulting any absent field."""
        return cls.model_validate_json(payload)
