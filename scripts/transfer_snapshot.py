#!/usr/bin/env python3
"""
Copy the saved snapshot between storage backends.

Moves the whole app state (rooms, zones, plants, settings) from the JSON data
file into MongoDB or back. Unversioned data files are migrated (step-less
plants get a default watering step) before they are written to the target;
the source is left untouched.

Usage:
  python scripts/transfer_snapshot.py json-to-mongo
  python scripts/transfer_snapshot.py mongo-to-json
"""

import asyncio
import os
import sys

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from plantcare.core.config import get_settings
from plantcare.core.database import get_client
from plantcare.store.data_store import transfer_snapshot
from plantcare.store.persistence import JsonFileSnapshotStore, MongoSnapshotStore


async def transfer(direction: str) -> int:
    settings = get_settings()
    client = get_client(settings.MONGO_URI)
    collection = client[settings.MONGO_DB_NAME][settings.MONGO_SNAPSHOT_COLLECTION]

    json_store = JsonFileSnapshotStore(settings.DATA_FILE)
    mongo_store = MongoSnapshotStore(collection=collection)
    if direction == "json-to-mongo":
        source, target = json_store, mongo_store
    else:
        source, target = mongo_store, json_store

    try:
        snapshot = await transfer_snapshot(source, target)
    finally:
        client.close()

    if snapshot is None:
        print(f"Nothing to transfer: the source has no saved snapshot ({direction})")
        return 1

    print(
        f"Plants: {len(snapshot.plants)} | Rooms: {len(snapshot.rooms)} | "
        f"Zones: {len(snapshot.zones)} | Direction: {direction}"
    )
    return 0


if __name__ == "__main__":
    if len(sys.argv) != 2 or sys.argv[1] not in ("json-to-mongo", "mongo-to-json"):
        print(__doc__)
        sys.exit(1)
    sys.exit(asyncio.run(transfer(sys.argv[1])))
