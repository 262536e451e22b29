"""
Persistence Adapter for the Smart Parking Allotment engine

The durable state (slots and history) is written as one JSON blob under a
single key of a key-value store. Every save rewrites the whole snapshot.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import CorruptStore
from .ledger import HistoryLedger
from .lifecycle import ParkingStore
from .models import HistoryRecord, Slot
from .registry import SlotRegistry

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "parkingData"


class InMemoryKeyValueStore:
    """Key-value store kept in a dict, for tests and throwaway sessions"""

    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str):
        self._data[key] = value

    def delete(self, key: str):
        self._data.pop(key, None)


class JsonFileKeyValueStore:
    """
    Key-value store backed by one JSON object on disk.

    Writes go to a temporary file in the same directory which is then
    renamed over the original, so a reader never sees a half-written file.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (ValueError, RecursionError) as e:
            raise CorruptStore(f"{self.path} is not readable JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStore(f"{self.path} does not hold a JSON object")
        return data

    def _write_all(self, data: Dict[str, str]):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[str]:
        try:
            return self._read_all().get(key)
        except CorruptStore as e:
            logger.warning(f"Ignoring unreadable store file {self.path}: {e}")
            return None

    def set(self, key: str, value: str):
        try:
            data = self._read_all()
        except CorruptStore:
            data = {}
        data[key] = value
        self._write_all(data)

    def delete(self, key: str):
        if not self.path.exists():
            return
        try:
            data = self._read_all()
        except CorruptStore:
            data = {}
        data.pop(key, None)
        self._write_all(data)


def encode_snapshot(store: ParkingStore) -> Dict[str, Any]:
    """Durable subset of the store as a JSON-compatible dict"""
    return {
        "slots": [slot.to_dict() for slot in store.registry],
        "history": [record.to_dict() for record in store.ledger]
    }


def decode_snapshot(data: Any) -> ParkingStore:
    """
    Rebuild a ParkingStore from a decoded snapshot.

    Raises:
        CorruptStore: The data is not a well-formed snapshot
    """
    if not isinstance(data, dict):
        raise CorruptStore("Snapshot is not a JSON object")
    slots = data.get("slots")
    history = data.get("history")
    if not isinstance(slots, list) or not isinstance(history, list):
        raise CorruptStore("Snapshot is missing its slots or history list")

    try:
        registry = SlotRegistry(Slot.from_dict(s) for s in slots)
        ledger = HistoryLedger(HistoryRecord.from_dict(h) for h in history)
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise CorruptStore(f"Malformed snapshot entry: {e}") from e

    return ParkingStore(registry=registry, ledger=ledger)


class SnapshotPersistence:
    """Saves and loads ParkingStore snapshots under a single key"""

    def __init__(self, kv_store=None, key: str = DEFAULT_STORAGE_KEY):
        """
        Args:
            kv_store: Object with get/set/delete on string keys
            key: Key holding the snapshot
        """
        self.kv_store = kv_store if kv_store is not None else InMemoryKeyValueStore()
        self.key = key

    def save(self, store: ParkingStore):
        """Write the full snapshot, blocking until the store accepts it"""
        payload = json.dumps(encode_snapshot(store))
        self.kv_store.set(self.key, payload)
        logger.debug(
            f"Saved snapshot: {len(store.registry)} slots, {len(store.ledger)} history records"
        )

    def load(self) -> Optional[ParkingStore]:
        """
        Read the persisted snapshot.

        Returns:
            The restored store, or None when nothing usable is persisted
        """
        raw = self.kv_store.get(self.key)
        if raw is None:
            logger.info("No persisted parking data found")
            return None

        try:
            store = decode_snapshot(json.loads(raw))
        except (ValueError, RecursionError, TypeError) as e:
            logger.warning(f"Discarding corrupt parking data: not valid JSON ({e})")
            return None
        except CorruptStore as e:
            logger.warning(f"Discarding corrupt parking data: {e}")
            return None

        logger.info(
            f"Loaded parking data: {len(store.registry)} slots, "
            f"{store.registry.occupied_count()} occupied, {len(store.ledger)} history records"
        )
        return store

    def reset(self):
        """Remove the persisted snapshot entirely"""
        self.kv_store.delete(self.key)
        logger.info(f"Deleted persisted parking data '{self.key}'")
