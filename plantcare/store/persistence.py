"""
Snapshot persistence backends.

The data store treats ``save`` as atomic and calls it after every mutation.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from plantcare.core.config import Settings, get_settings
from plantcare.core.database import Database
from plantcare.core.exceptions import PersistenceError
from plantcare.store.models import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Load/save contract for the full app snapshot."""

    async def load(self) -> Optional[Snapshot]:
        """Return the stored snapshot, or None if nothing was saved yet."""
        raise NotImplementedError

    async def save(self, snapshot: Snapshot) -> None:
        raise NotImplementedError


class JsonFileSnapshotStore(SnapshotStore):
    """Snapshot kept as one JSON document on local disk."""

    def __init__(self, path):
        self.path = Path(path)

    async def load(self) -> Optional[Snapshot]:
        if not self.path.exists():
            return None
        try:
            raw = self.path.read_text(encoding="utf-8")
            return Snapshot.model_validate_json(raw)
        except (OSError, ValidationError) as e:
            raise PersistenceError(f"Could not read snapshot from {self.path}: {e}") from e

    async def save(self, snapshot: Snapshot) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".plantcare-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(snapshot.model_dump_json(indent=2))
            os.replace(tmp_path, self.path)
        except OSError as e:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise PersistenceError(f"Could not write snapshot to {self.path}: {e}") from e


class MongoSnapshotStore(SnapshotStore):
    """Snapshot kept as a single MongoDB document."""

    SNAPSHOT_ID = "default"

    def __init__(self, collection=None, collection_name: Optional[str] = None):
        self._collection = collection
        self._collection_name = collection_name or get_settings().MONGO_SNAPSHOT_COLLECTION

    def _get_collection(self):
        if self._collection is not None:
            return self._collection
        return Database.get_collection(self._collection_name)

    async def load(self) -> Optional[Snapshot]:
        doc = await self._get_collection().find_one({"_id": self.SNAPSHOT_ID})
        if not doc:
            return None
        doc.pop("_id", None)
        try:
            return Snapshot.model_validate(doc)
        except ValidationError as e:
            raise PersistenceError(f"Stored snapshot is invalid: {e}") from e

    async def save(self, snapshot: Snapshot) -> None:
        doc = snapshot.model_dump(mode="json")
        doc["_id"] = self.SNAPSHOT_ID
        await self._get_collection().replace_one({"_id": self.SNAPSHOT_ID}, doc, upsert=True)


def create_snapshot_store(settings: Optional[Settings] = None) -> SnapshotStore:
    """Build the backend selected by ``STORAGE_BACKEND``."""
    settings = settings or get_settings()
    backend = settings.STORAGE_BACKEND.strip().lower()
    if backend == "json":
        return JsonFileSnapshotStore(settings.DATA_FILE)
    if backend == "mongo":
        return MongoSnapshotStore(collection_name=settings.MONGO_SNAPSHOT_COLLECTION)
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.STORAGE_BACKEND}")
