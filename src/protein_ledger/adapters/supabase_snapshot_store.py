"""Supabase repository for the ledger snapshot."""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from protein_ledger.services.ledger import SnapshotStore

_logger = logging.getLogger(__name__)


@dataclass
class SupabaseSnapshotStore(SnapshotStore):
    """Stores the ledger blob as one row keyed by the storage key.

    The supabase client is synchronous, so requests run in a worker thread.
    """

    client: Client
    key: str
    table: str = "ledger_snapshots"

    async def load(self) -> str | None:
        """Return the stored payload for the key, if any."""
        try:
            rows = await asyncio.to_thread(self._select)
        except Exception:
            _logger.exception("Failed to load ledger snapshot from Supabase")
            return None
        if not rows:
            return None
        payload = rows[0].get("payload")
        if payload is None:
            return None
        if isinstance(payload, str):
            return payload
        return json.dumps(payload)

    async def save(self, payload: str) -> bool:
        """Upsert the payload row for the key."""
        try:
            await asyncio.to_thread(self._upsert, payload)
        except Exception:
            _logger.exception("Failed to save ledger snapshot to Supabase")
            return False
        return True

    def _select(self) -> list[dict[str, object]] | None:
        response = (
            self.client.table(self.table)
            .select("payload")
            .eq("key", self.key)
            .limit(1)
            .execute()
        )
        return response.data

    def _upsert(self, payload: str) -> None:
        self.client.table(self.table).upsert(
            {
                "key": self.key,
                "payload": payload,
                "updated_at": datetime.now(tz=UTC).isoformat(),
            },
            on_conflict="key",
        ).execute()
