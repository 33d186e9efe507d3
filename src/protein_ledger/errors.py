"""Exceptions raised by the ledger core."""


class LedgerError(Exception):
    """Base error for ledger operations."""


class LedgerValidationError(LedgerError, ValueError):
    """Invalid input rejected before any state change."""


class RatioValidationError(LedgerValidationError):
    """Invalid input for the ratio solver."""


class RecipeNotFoundError(LedgerError, LookupError):
    """Raised when a recipe id is not in the ledger."""

    def __init__(self, recipe_id: str) -> None:
        super().__init__(f"Recipe not found: {recipe_id}")
        self.recipe_id = recipe_id


class MissingProteinDataError(LedgerError):
    """Raised when a product has no protein density to log."""
