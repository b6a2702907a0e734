"""
Adapters - concrete implementations of ports.

Follows hexagonal architecture pattern (ports & adapters).
Current implementations use the lean stack (SQLAlchemy on SQLite).
"""
from revenue.adapters.repositories_sqlite import (
    SQLiteBatchesRepo,
    SQLiteFilesRepo,
    SQLiteValidationLogsRepo,
    SQLiteActivityLogsRepo,
)

__all__ = [
    "SQLiteBatchesRepo",
    "SQLiteFilesRepo",
    "SQLiteValidationLogsRepo",
    "SQLiteActivityLogsRepo",
]
