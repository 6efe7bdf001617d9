# Overview: In-process entity store; records live in dicts guarded by a lock.

from __future__ import annotations

import copy
import threading
import uuid
from datetime import datetime
from typing import Optional

from ..errors import NotFoundError
from ..models import EmailSettings, Location, Product, Transfer, User
from ..time_utils import to_utc_z, utcnow
from .base import (
    FIELD_DEFAULTS,
    EmailSettingsRepository,
    EntityStore,
    Repository,
    TransferRepository,
    UserRepository,
    check_required,
    new_transfer_id,
)


def _wire_value(value):
    if isinstance(value, datetime):
        return to_utc_z(value)
    return copy.deepcopy(value)


class _MemoryRecords:
    """
    Insertion-ordered record map (dicts keep insertion order).

    Every read returns a deep copy so callers can never mutate stored state
    outside the lock.
    """

    def __init__(self, entity: str, label: str, model, lock: threading.RLock):
        self.entity = entity
        self.label = label
        self.fields = tuple(model.FIELD_COLUMNS)
        self._lock = lock
        self._rows: dict[str, dict] = {}

    def _insert(self, record_id: str, data: dict) -> dict:
        record = {"id": record_id}
        defaults = FIELD_DEFAULTS[self.entity]
        for field in self.fields:
            if field in data:
                record[field] = _wire_value(data[field])
            else:
                record[field] = copy.deepcopy(defaults.get(field))
        record["createdAt"] = to_utc_z(utcnow())
        self._rows[record_id] = record
        return copy.deepcopy(record)

    def _merge(self, record: dict, patch: dict) -> dict:
        for field, value in patch.items():
            if field in self.fields:
                record[field] = _wire_value(value)
        return copy.deepcopy(record)

    def get(self, record_id: str) -> Optional[dict]:
        with self._lock:
            record = self._rows.get(record_id)
            return copy.deepcopy(record) if record else None

    def get_all(self) -> list[dict]:
        with self._lock:
            return [copy.deepcopy(r) for r in self._rows.values()]


class MemoryRepository(_MemoryRecords, Repository):

    def create(self, data: dict) -> dict:
        check_required(self.entity, data)
        with self._lock:
            return self._insert(str(uuid.uuid4()), data)

    def update(self, record_id: str, patch: dict) -> dict:
        with self._lock:
            record = self._rows.get(record_id)
            if record is None:
                raise NotFoundError(self.label, record_id)
            return self._merge(record, patch)

    def delete(self, record_id: str) -> None:
        with self._lock:
            self._rows.pop(record_id, None)


class MemoryUserRepository(MemoryRepository, UserRepository):

    def __init__(self, lock: threading.RLock):
        super().__init__("users", "User", User, lock)

    def get_by_email(self, email: str) -> Optional[dict]:
        with self._lock:
            for record in self._rows.values():
                if record["email"] == email:
                    return copy.deepcopy(record)
        return None


class MemoryTransferRepository(_MemoryRecords, TransferRepository):

    def __init__(self, lock: threading.RLock):
        super().__init__("transfers", "Transfer", Transfer, lock)

    def create(self, data: dict) -> dict:
        check_required(self.entity, data)
        with self._lock:
            transfer_id = new_transfer_id(utcnow())
            while transfer_id in self._rows:
                transfer_id = new_transfer_id(utcnow())
            return self._insert(transfer_id, data)

    def transition(self, transfer_id: str, expected_status: str, changes: dict) -> Optional[dict]:
        with self._lock:
            record = self._rows.get(transfer_id)
            if record is None:
                raise NotFoundError(self.label, transfer_id)
            if record["status"] != expected_status:
                return None
            return self._merge(record, changes)


class MemoryEmailSettingsRepository(EmailSettingsRepository):

    def __init__(self, lock: threading.RLock):
        self._lock = lock
        self._record: Optional[dict] = None
        self.fields = tuple(EmailSettings.FIELD_COLUMNS)

    def get(self) -> Optional[dict]:
        with self._lock:
            return copy.deepcopy(self._record)

    def save(self, data: dict) -> dict:
        with self._lock:
            record = self._record or {"id": "default", **{f: None for f in self.fields}}
            for field in self.fields:
                if field in data:
                    record[field] = _wire_value(data[field])
            record["configured"] = bool(record.get("configured"))
            record["updatedAt"] = to_utc_z(utcnow())
            self._record = record
            return copy.deepcopy(record)


def build_memory_store() -> EntityStore:
    lock = threading.RLock()
    return EntityStore(
        products=MemoryRepository("products", "Product", Product, lock),
        locations=MemoryRepository("locations", "Location", Location, lock),
        users=MemoryUserRepository(lock),
        transfers=MemoryTransferRepository(lock),
        email_settings=MemoryEmailSettingsRepository(lock),
        backend="memory",
    )
