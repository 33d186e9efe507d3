"""Product models returned by the nutrition lookup."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Product:
    """Food product with optional protein density."""

    barcode: str | None
    name: str | None
    brand: str | None
    protein_per_100g: float | None


@dataclass(frozen=True)
class SearchFilters:
    """Optional filters for product search."""

    category: str | None = None
    brand: str | None = None
    min_protein: float | None = None
    max_protein: float | None = None
