from .record_store import COLLECTION_FILE, LOG_FILE, TABLE_COLUMNS, TABLE_FILE, RecordStore, dedupe_last_wins

__all__ = [
    "RecordStore",
    "dedupe_last_wins",
    "LOG_FILE",
    "COLLECTION_FILE",
    "TABLE_FILE",
    "TABLE_COLUMNS",
]
