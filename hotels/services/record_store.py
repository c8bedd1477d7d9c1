"""
record_store.py
---------------
Key/value persistence of a hotel's named collections.

Contract (same for every adapter):
- get_all(collection)                 -> list of records (copies, insertion order)
- get(collection, record_id)          -> record or None (full scan + filter)
- add(collection, record)             -> the stored record
- update(collection, record_id, data) -> merged record, or None if the id is unknown
- remove(collection, record_id)       -> True if something was removed
- read(key) / write(key, value)       -> single records (hotel, shift_config, ...)
- merge(key, fields)                  -> shallow merge onto a single record, None if missing
- atomic()                            -> group several writes into one unit

Every write is a read-modify-write of the WHOLE collection. There is no
indexed lookup; callers that need lookup-by-id go through get().

Adapters:
- DatabaseRecordStore: one StoredCollection row per (hotel, key). atomic()
  is a DB transaction holding a row lock on the hotel, so concurrent
  requests for the same tenant queue up instead of overwriting each other.
- MemoryRecordStore: process-local dict of JSON strings. Used by the unit
  tests and anywhere a throwaway store is enough.

Missing ids are reported through return values (None / False) rather than
raised here; services decide whether that is an error.
"""

import json
import logging
import threading
from contextlib import contextmanager

from django.db import DatabaseError, transaction

from ..exceptions import StorageError
from ..models import Hotel, StoredCollection

logger = logging.getLogger(__name__)

# Well-known keys
HOTEL = "hotel"
STAFF = "staff"
ROOMS = "rooms"
ASSIGNMENTS = "assignments"
TIPS = "tips"
SHIFT_CONFIG = "shift_config"
ONBOARDING_PROGRESS = "onboarding_progress"
BANK_DETAILS = "bank_details"


def _to_json(value):
    """Round-trip through JSON so stored values never share references with callers."""
    try:
        return json.loads(json.dumps(value))
    except (TypeError, ValueError) as e:
        logger.error("Could not serialize value for storage: %s", e)
        raise StorageError(f"Could not save data: {e}") from e


class RecordStore:
    """
    Base class. Adapters implement _load, _save, atomic and clear; the
    collection operations below are shared.
    """

    def _load(self, key):
        raise NotImplementedError

    def _save(self, key, value):
        raise NotImplementedError

    def atomic(self):
        raise NotImplementedError

    def clear(self):
        raise NotImplementedError

    # -------------------- single records --------------------
    def read(self, key, default=None):
        value = self._load(key)
        if value is None:
            return _to_json(default)
        return value

    def write(self, key, value):
        value = _to_json(value)
        self._save(key, value)
        return value

    def merge(self, key, fields):
        with self.atomic():
            current = self._load(key)
            if not isinstance(current, dict):
                return None
            current.update(fields)
            return self.write(key, current)

    # -------------------- collections --------------------
    def get_all(self, collection):
        records = self.read(collection, default=[])
        return list(records or [])

    def get(self, collection, record_id):
        for record in self.get_all(collection):
            if record.get("id") == record_id:
                return record
        return None

    def add(self, collection, record):
        record = _to_json(record)
        with self.atomic():
            records = self.get_all(collection)
            records.append(record)
            self.write(collection, records)
        return record

    def update(self, collection, record_id, fields):
        with self.atomic():
            records = self.get_all(collection)
            merged = None
            for record in records:
                if record.get("id") == record_id:
                    record.update(fields)
                    merged = record
                    break
            if merged is None:
                return None
            self.write(collection, records)
        return _to_json(merged)

    def remove(self, collection, record_id):
        with self.atomic():
            records = self.get_all(collection)
            kept = [r for r in records if r.get("id") != record_id]
            if len(kept) == len(records):
                return False
            self.write(collection, kept)
        return True


class MemoryRecordStore(RecordStore):
    """
    In-process store. Values are kept as JSON strings so nothing a caller
    holds can change stored state.
    atomic() restores the previous state if the block raises.
    """

    def __init__(self):
        self._data = {}
        self._lock = threading.RLock()
        self._depth = 0

    def _load(self, key):
        raw = self._data.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    def _save(self, key, value):
        self._data[key] = json.dumps(value)

    @contextmanager
    def atomic(self):
        with self._lock:
            snapshot = dict(self._data) if self._depth == 0 else None
            self._depth += 1
            try:
                yield self
            except BaseException:
                if snapshot is not None:
                    self._data = snapshot
                raise
            finally:
                self._depth -= 1

    def clear(self):
        with self._lock:
            self._data = {}


class DatabaseRecordStore(RecordStore):
    """
    Store scoped to one hotel, backed by StoredCollection rows.
    Build one per request for the authenticated hotel; never share it
    across tenants.
    """

    def __init__(self, hotel):
        self.hotel = hotel

    def _load(self, key):
        try:
            return (
                StoredCollection.objects.filter(hotel=self.hotel, key=key)
                .values_list("value", flat=True)
                .first()
            )
        except DatabaseError as e:
            logger.error("Failed to read %s for hotel %s: %s", key, self.hotel.pk, e)
            raise StorageError(f"Could not load {key}.") from e

    def _save(self, key, value):
        try:
            StoredCollection.objects.update_or_create(
                hotel=self.hotel,
                key=key,
                defaults={"value": value},
            )
        except DatabaseError as e:
            logger.error("Failed to write %s for hotel %s: %s", key, self.hotel.pk, e)
            raise StorageError(f"Could not save {key}.") from e

    @contextmanager
    def atomic(self):
        with transaction.atomic():
            # Per-tenant lock: serializes read-modify-write cycles of this hotel.
            list(Hotel.objects.select_for_update().filter(pk=self.hotel.pk).values_list("pk", flat=True))
            yield self

    def clear(self):
        StoredCollection.objects.filter(hotel=self.hotel).delete()
