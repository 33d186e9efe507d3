"""Ledger persistence in a local JSON file."""

import asyncio
import logging
import re
from dataclasses import dataclass
from pathlib import Path

from protein_ledger.services.ledger import SnapshotStore

_logger = logging.getLogger(__name__)


@dataclass
class JsonFileSnapshotStore(SnapshotStore):
    """Stores the ledger blob in one file, replaced atomically on save."""

    path: Path

    @classmethod
    def for_key(cls, data_dir: Path, key: str) -> "JsonFileSnapshotStore":
        """Create a store whose file name is derived from the storage key."""
        stem = re.sub(r"[^A-Za-z0-9_.-]+", "_", key).strip("_.") or "ledger"
        return cls(path=data_dir / f"{stem}.json")

    async def load(self) -> str | None:
        """Return the file contents, or None when missing or unreadable."""
        try:
            return await asyncio.to_thread(self._read)
        except OSError:
            _logger.exception("Failed to read ledger file %s", self.path)
            return None

    async def save(self, payload: str) -> bool:
        """Write the blob; returns False when the write fails."""
        try:
            await asyncio.to_thread(self._write, payload)
        except OSError:
            _logger.exception("Failed to write ledger file %s", self.path)
            return False
        return True

    def _read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write(self, payload: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(f"{self.path.name}.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(self.path)
