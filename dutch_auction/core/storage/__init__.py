"""
Persistent Storage Module.

Provides SQLite-backed persistence for:
- Auction records
- The event log
- House metadata
"""

from dutch_auction.core.storage.sqlite_adapter import SQLiteAdapter
from dutch_auction.core.storage.storage_manager import StorageManager

__all__ = ["SQLiteAdapter", "StorageManager"]
