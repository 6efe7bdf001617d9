# Overview: Entity store factory; picks the backend named by STORE_BACKEND.

from .base import (
    EmailSettingsRepository,
    EntityStore,
    Repository,
    TransferRepository,
    UserRepository,
)
from .memory import build_memory_store
from .sql import build_sql_store


def build_store(backend: str) -> EntityStore:
    if backend == "sql":
        return build_sql_store()
    if backend == "memory":
        return build_memory_store()
    raise ValueError(f"Unknown STORE_BACKEND: {backend!r}")


__all__ = [
    "EntityStore",
    "Repository",
    "UserRepository",
    "TransferRepository",
    "EmailSettingsRepository",
    "build_store",
    "build_memory_store",
    "build_sql_store",
]
