"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from supabase import create_client

from protein_ledger.adapters.json_file_snapshot_store import JsonFileSnapshotStore
from protein_ledger.adapters.openfoodfacts_client import HttpxOpenFoodFactsClient
from protein_ledger.adapters.supabase_snapshot_store import SupabaseSnapshotStore
from protein_ledger.config import Settings, parse_storage_backend
from protein_ledger.services.cache import InMemoryCache
from protein_ledger.services.ledger import LedgerService, SnapshotStore
from protein_ledger.services.products import ProductLookupService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger_service: LedgerService
    product_service: ProductLookupService
    close_resources: Callable[[], Awaitable[None]]


def build_snapshot_store(settings: Settings) -> SnapshotStore:
    """Create the persistence gateway selected by settings."""
    backend = parse_storage_backend(settings.storage_backend)
    if backend == "supabase":
        if not settings.supabase_url or not settings.supabase_service_key:
            raise ValueError("Supabase storage needs SUPABASE_URL and key")
        client = create_client(settings.supabase_url, settings.supabase_service_key)
        return SupabaseSnapshotStore(client=client, key=settings.storage_key)
    return JsonFileSnapshotStore.for_key(settings.data_dir, settings.storage_key)


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    ledger_service = LedgerService(
        store=build_snapshot_store(resolved_settings),
        timezone=resolved_settings.timezone,
        default_target_protein=resolved_settings.default_target_protein,
    )
    off_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.openfoodfacts_base_url,
        user_agent=resolved_settings.openfoodfacts_user_agent,
    )
    product_service = ProductLookupService(
        client=off_client,
        cache=InMemoryCache(),
        debug=resolved_settings.lookup_debug,
    )

    async def close_resources() -> None:
        await off_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger_service=ledger_service,
        product_service=product_service,
        close_resources=close_resources,
    )
