"""Record storage: database backend with an in-memory fallback."""

from .memory import MemoryBackend
from .outcome import Outcome
from .sql import SqlBackend
from .store import BackendMode, RecordStore, create_store

__all__ = ["BackendMode", "MemoryBackend", "Outcome", "RecordStore", "SqlBackend", "create_store"]
