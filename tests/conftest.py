"""Shared test fixtures."""

import asyncio
import itertools
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import httpx
import pytest

from protein_ledger.adapters.openfoodfacts_client import OpenFoodFactsClient
from protein_ledger.config import Settings
from protein_ledger.containers import AppContainer
from protein_ledger.services.cache import InMemoryCache
from protein_ledger.services.ledger import LedgerService, SnapshotStore
from protein_ledger.services.products import ProductLookupService

TODAY = "2026-10-19"
NOW = datetime(2026, 10, 19, 12, 30, tzinfo=UTC)


@dataclass
class InMemorySnapshotStore(SnapshotStore):
    """In-memory persistence gateway for tests."""

    payload: str | None = None
    saved: list[str] = field(default_factory=list)
    fail_saves: bool = False
    fail_loads: bool = False
    save_delay: float = 0.0

    async def load(self) -> str | None:
        if self.fail_loads:
            raise OSError("storage unavailable")
        return self.payload

    async def save(self, payload: str) -> bool:
        if self.save_delay:
            await asyncio.sleep(self.save_delay)
        if self.fail_saves:
            return False
        self.payload = payload
        self.saved.append(payload)
        return True


@dataclass
class FakeOpenFoodFactsClient(OpenFoodFactsClient):
    """Fake OpenFoodFacts client with in-memory responses."""

    products: dict[str, dict[str, object]] = field(
        default_factory=lambda: {
            "3017620422003": {
                "code": "3017620422003",
                "product_name": "Greek Yogurt",
                "brands": "Fage, Total",
                "nutriments": {"proteins_100g": 10},
            },
            "5000000000001": {
                "code": "5000000000001",
                "product_name": "Mystery Snack",
                "brands": "Acme",
                "nutriments": {},
            },
        }
    )
    search_results: list[dict[str, object]] = field(
        default_factory=lambda: [
            {
                "code": "111",
                "product_name": "Chicken Breast",
                "brands": "Farm",
                "nutriments": {"proteins_100g": 31},
            },
            {
                "code": "222",
                "product_name": "Chicken Nuggets",
                "brands": "Quick",
                "nutriments": {"proteins_100g": "14.5"},
            },
            {
                "code": "333",
                "product_name": "Chicken Soup",
                "brands": "Can Co",
                "nutriments": {},
            },
        ]
    )
    error: Exception | None = None
    product_calls: int = 0
    search_calls: list[dict[str, str | int]] = field(default_factory=list)

    async def get_product(self, barcode: str) -> dict[str, object]:
        self.product_calls += 1
        if self.error is not None:
            raise self.error
        product = self.products.get(barcode)
        if product is None:
            return {"status": 0, "code": barcode, "status_verbose": "not found"}
        return {"status": 1, "code": barcode, "product": product}

    async def search_products(
        self, params: dict[str, str | int]
    ) -> dict[str, object]:
        self.search_calls.append(params)
        if self.error is not None:
            raise self.error
        return {"count": len(self.search_results), "products": self.search_results}


def fixed_clock(moment: datetime = NOW) -> Callable[[], datetime]:
    return lambda: moment


def sequential_ids(prefix: str = "id") -> Callable[[], str]:
    counter = itertools.count(1)
    return lambda: f"{prefix}-{next(counter)}"


def network_error() -> httpx.ConnectError:
    return httpx.ConnectError(
        "connection refused",
        request=httpx.Request("GET", "https://world.openfoodfacts.org"),
    )


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(storage_backend="file", data_dir=tmp_path, timezone="UTC")


@pytest.fixture
def snapshot_store() -> InMemorySnapshotStore:
    return InMemorySnapshotStore()


@pytest.fixture
def ledger(snapshot_store: InMemorySnapshotStore) -> LedgerService:
    return LedgerService(
        store=snapshot_store,
        clock=fixed_clock(),
        id_factory=sequential_ids(),
    )


@pytest.fixture
def off_client() -> FakeOpenFoodFactsClient:
    return FakeOpenFoodFactsClient()


@pytest.fixture
def product_service(off_client: FakeOpenFoodFactsClient) -> ProductLookupService:
    return ProductLookupService(
        client=off_client,
        cache=InMemoryCache(),
        retry_delay_seconds=0,
    )


@pytest.fixture
def container(
    settings: Settings,
    ledger: LedgerService,
    product_service: ProductLookupService,
) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        ledger_service=ledger,
        product_service=product_service,
        close_resources=close_resources,
    )
