# Record stores
from app.stores.base import RecordStore
from app.stores.memory import MemoryRecordStore
from app.stores.sql import SqlRecordStore

__all__ = ["RecordStore", "MemoryRecordStore", "SqlRecordStore"]
