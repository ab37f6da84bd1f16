from .base import RecordStore
from .memory import MemoryStore
from .json_file import JsonFileStore, migrate_json_to_store

__all__ = [
    "RecordStore",
    "MemoryStore",
    "JsonFileStore",
    "migrate_json_to_store",
]
