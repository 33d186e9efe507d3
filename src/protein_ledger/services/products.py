"""Product lookup backed by OpenFoodFacts."""

import asyncio
import logging
import math
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

import httpx

from protein_ledger.adapters.openfoodfacts_client import OpenFoodFactsClient
from protein_ledger.domain.drafts import MealDraft
from protein_ledger.domain.products import Product, SearchFilters
from protein_ledger.errors import MissingProteinDataError
from protein_ledger.services.cache import Cache

_logger = logging.getLogger(__name__)

_LOOKUP_ERRORS = (httpx.HTTPError, ValueError)


@dataclass
class ProductLookupService:
    """Barcode and text lookups that never raise past this boundary.

    Network, HTTP and decoding failures are logged and reported as
    ``None`` or an empty list.
    """

    client: OpenFoodFactsClient
    cache: Cache
    product_ttl_seconds: int = 86400
    search_ttl_seconds: int = 3600
    debug: bool = False
    retry_attempts: int = 1
    retry_delay_seconds: float = 0.3

    async def lookup_by_barcode(self, barcode: str) -> Product | None:
        """Return the product for a barcode, or None if unknown."""
        code = barcode.strip()
        if not code:
            return None
        cache_key = f"off:product:{code}"
        cached = self.cache.get(cache_key)
        if isinstance(cached, Product):
            return cached

        try:
            payload = await self._call_with_retry(
                lambda: self.client.get_product(code), action=f"product:{code}"
            )
        except _LOOKUP_ERRORS:
            _logger.warning("Product lookup failed for barcode %s", code)
            return None

        raw_product = payload.get("product") if isinstance(payload, dict) else None
        if not isinstance(raw_product, dict) or payload.get("status") != 1:
            if self.debug:
                _logger.info("Product not found: barcode=%s", code)
            return None
        product = _parse_product(raw_product, fallback_code=code)
        self.cache.set(cache_key, product, ttl_seconds=self.product_ttl_seconds)
        return product

    async def search(
        self,
        term: str,
        page: int = 1,
        page_size: int = 10,
        filters: SearchFilters | None = None,
    ) -> list[Product]:
        """Search products by name, applying optional filters."""
        query = term.strip()
        if not query:
            return []
        active = filters or SearchFilters()
        params = _search_params(query, page, page_size, active)
        cache_key = "off:search:" + "&".join(
            f"{key}={value}" for key, value in sorted(params.items())
        ).lower()
        cached = self.cache.get(cache_key)
        if isinstance(cached, list):
            return _apply_protein_range(cached, active)

        try:
            payload = await self._call_with_retry(
                lambda: self.client.search_products(params), action="search"
            )
        except _LOOKUP_ERRORS:
            _logger.warning("Product search failed for %r", query)
            return []

        raw_products = payload.get("products") if isinstance(payload, dict) else None
        products = [
            _parse_product(item)
            for item in (raw_products if isinstance(raw_products, list) else [])
            if isinstance(item, dict)
        ]
        self.cache.set(cache_key, products, ttl_seconds=self.search_ttl_seconds)
        if self.debug:
            _logger.info("Product search: query=%s results=%s", query, len(products))
        return _apply_protein_range(products, active)

    async def _call_with_retry(
        self, func: Callable[[], Awaitable[dict[str, object]]], *, action: str
    ) -> dict[str, object]:
        """Call an async function with a short retry."""
        attempt = 0
        while True:
            try:
                return await func()
            except _LOOKUP_ERRORS as exc:
                attempt += 1
                if self.debug:
                    _logger.warning(
                        "Lookup %s failed (attempt %s/%s, status=%s): %s",
                        action,
                        attempt,
                        self.retry_attempts + 1,
                        _status_code_from_exception(exc),
                        exc,
                    )
                if attempt > self.retry_attempts:
                    raise
                await asyncio.sleep(self.retry_delay_seconds)


def meal_draft_from_product(product: Product, grams: float, day: str) -> MealDraft:
    """Build a meal draft from a looked-up product.

    Products without a protein density cannot be logged.
    """
    if product.protein_per_100g is None:
        raise MissingProteinDataError(
            f"No protein information for {product.name or 'this product'}"
        )
    return MealDraft(
        name=product.name or "Unknown Product",
        protein_per_100g=product.protein_per_100g,
        grams_eaten=grams,
        date=day,
    )


def _search_params(
    term: str, page: int, page_size: int, filters: SearchFilters
) -> dict[str, str | int]:
    params: dict[str, str | int] = {
        "search_terms": term,
        "page": max(page, 1),
        "page_size": max(page_size, 1),
    }
    tags = [("categories", filters.category), ("brands", filters.brand)]
    index = 0
    for tag_type, value in tags:
        if not value:
            continue
        params[f"tagtype_{index}"] = tag_type
        params[f"tag_contains_{index}"] = "contains"
        params[f"tag_{index}"] = value
        index += 1
    return params


def _apply_protein_range(
    products: list[Product], filters: SearchFilters
) -> list[Product]:
    if filters.min_protein is None and filters.max_protein is None:
        return list(products)
    matched = []
    for product in products:
        protein = product.protein_per_100g
        if protein is None:
            continue
        if filters.min_protein is not None and protein < filters.min_protein:
            continue
        if filters.max_protein is not None and protein > filters.max_protein:
            continue
        matched.append(product)
    return matched


def _parse_product(
    raw: dict[str, object], fallback_code: str | None = None
) -> Product:
    nutriments = raw.get("nutriments")
    protein = None
    if isinstance(nutriments, dict):
        protein = _to_density(nutriments.get("proteins_100g"))
    brands = raw.get("brands")
    brand = brands.split(",")[0].strip() if isinstance(brands, str) else ""
    name = raw.get("product_name")
    if isinstance(name, str):
        name = name.strip()
    code = raw.get("code")
    return Product(
        barcode=str(code) if code else fallback_code,
        name=name if isinstance(name, str) and name else None,
        brand=brand or None,
        protein_per_100g=protein,
    )


def _to_density(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(parsed) or parsed < 0:
        return None
    return parsed


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
