# Overview: Repository interfaces shared by every entity store backend.

"""
Entity store contract.

Records crossing this boundary are plain dicts keyed by wire field names
(camelCase). Each backend assigns ids and createdAt on create and returns
records in insertion order from get_all().

Transfers expose no generic update or delete: status changes only through
transition(), a compare-and-set on the previously observed status.
"""

from __future__ import annotations

import secrets
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from ..errors import ValidationError
from ..time_utils import epoch_millis


REQUIRED_FIELDS = {
    "products": ("code", "name", "category", "unit"),
    "locations": ("name",),
    "users": ("email", "name", "role", "passwordHash"),
    "transfers": ("fromLocationId", "toLocationId", "driverName", "vehicleReg", "items", "createdBy"),
}

FIELD_DEFAULTS = {
    "products": {},
    "locations": {"address": None},
    "users": {"permissions": [], "active": True},
    "transfers": {
        "status": "pending",
        "shortages": None,
        "damages": None,
        "dispatchedBy": None,
        "dispatchedAt": None,
        "receivedBy": None,
        "receivedAt": None,
    },
}


def check_required(entity: str, data: dict) -> None:
    missing = [field for field in REQUIRED_FIELDS[entity] if data.get(field) in (None, "")]
    if missing:
        raise ValidationError(f"Missing required fields for {entity}: {', '.join(missing)}")


def new_transfer_id(now: datetime) -> str:
    """TRF-<epoch millis>-<4 uppercase hex>: scannable and creation-ordered."""
    return f"TRF-{epoch_millis(now)}-{secrets.token_hex(2).upper()}"


class Repository(ABC):
    """CRUD over one entity type (products, locations, users)."""

    entity = ""

    @abstractmethod
    def create(self, data: dict) -> dict:
        ...

    @abstractmethod
    def get(self, record_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def get_all(self) -> list[dict]:
        ...

    @abstractmethod
    def update(self, record_id: str, patch: dict) -> dict:
        """Shallow merge; raises NotFoundError when absent."""

    @abstractmethod
    def delete(self, record_id: str) -> None:
        """No-op when absent."""


class UserRepository(Repository):

    entity = "users"

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[dict]:
        """Case-sensitive exact match."""


class TransferRepository(ABC):

    entity = "transfers"

    @abstractmethod
    def create(self, data: dict) -> dict:
        ...

    @abstractmethod
    def get(self, transfer_id: str) -> Optional[dict]:
        ...

    @abstractmethod
    def get_all(self) -> list[dict]:
        ...

    @abstractmethod
    def transition(self, transfer_id: str, expected_status: str, changes: dict) -> Optional[dict]:
        """
        Apply changes only if the stored status equals expected_status.

        Returns the updated record, None when the precondition failed.
        Raises NotFoundError when the transfer does not exist.
        """


class EmailSettingsRepository(ABC):

    @abstractmethod
    def get(self) -> Optional[dict]:
        ...

    @abstractmethod
    def save(self, data: dict) -> dict:
        """Upsert the singleton "default" record and stamp updatedAt."""


class EntityStore:
    """One repository per entity type, handed to services by the app factory."""

    def __init__(self, *, products, locations, users, transfers, email_settings, backend: str):
        self.products: Repository = products
        self.locations: Repository = locations
        self.users: UserRepository = users
        self.transfers: TransferRepository = transfers
        self.email_settings: EmailSettingsRepository = email_settings
        self.backend = backend
