import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from dutch_auction.utils.logger import get_logger

logger = get_logger("storage.sqlite")


class SQLiteAdapter:
    """
    SQLite backend for persistent storage.

    Provides:
    1. Auction records keyed by auction id (JSON documents).
    2. Escrow bindings: which auction put each escrowed asset there.
    3. Append-only event log in emission order.
    4. Small key/value metadata table.

    Writes commit on their own unless issued inside transaction(), in
    which case they commit or roll back together.
    """

    def __init__(self, db_path: Path):
        self.db_path = db_path
        self._conn_local = threading.local()

        if not db_path.parent.exists():
            db_path.parent.mkdir(parents=True, exist_ok=True)

        self._init_schema()

    def _get_conn(self) -> sqlite3.Connection:
        """Get or create connection for current thread."""
        if not hasattr(self._conn_local, "conn"):
            self._conn_local.conn = sqlite3.connect(
                self.db_path,
                timeout=30.0,
                check_same_thread=False
            )
            self._conn_local.conn.row_factory = sqlite3.Row
            self._conn_local.conn.execute("PRAGMA journal_mode=WAL;")
            self._conn_local.conn.execute("PRAGMA synchronous=NORMAL;")
        return self._conn_local.conn

    @contextmanager
    def _write(self) -> Iterator[sqlite3.Connection]:
        """Connection for a write, committed here unless a transaction is open."""
        conn = self._get_conn()
        if getattr(self._conn_local, "depth", 0):
            yield conn
            return
        with conn:
            yield conn

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Group writes so they commit or roll back together."""
        conn = self._get_conn()
        depth = getattr(self._conn_local, "depth", 0)
        self._conn_local.depth = depth + 1
        try:
            if depth:
                yield
            else:
                with conn:
                    yield
        finally:
            self._conn_local.depth = depth

    def _init_schema(self):
        """Initialize database schema."""
        conn = self._get_conn()
        with conn:
            conn.execute("""
                CREATE TABLE IF NOT EXISTS auctions (
                    auction_id TEXT PRIMARY KEY,
                    data TEXT NOT NULL,
                    started_at INTEGER NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_auction_start ON auctions(started_at);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS escrow_bindings (
                    asset_ref TEXT PRIMARY KEY,
                    auction_id TEXT NOT NULL
                )
            """)

            conn.execute("""
                CREATE TABLE IF NOT EXISTS events (
                    seq INTEGER PRIMARY KEY AUTOINCREMENT,
                    kind TEXT NOT NULL,
                    handle TEXT NOT NULL,
                    data TEXT NOT NULL
                )
            """)
            conn.execute("CREATE INDEX IF NOT EXISTS idx_event_handle ON events(handle);")

            conn.execute("""
                CREATE TABLE IF NOT EXISTS meta (
                    key TEXT PRIMARY KEY,
                    value TEXT
                )
            """)

    # =========================================================================
    # Auction Records
    # =========================================================================

    def save_auction(self, auction_id: str, data: str, started_at: int, asset_ref: str):
        """Store an auction and bind its asset to it."""
        with self._write() as conn:
            conn.execute(
                "INSERT OR REPLACE INTO auctions (auction_id, data, started_at) VALUES (?, ?, ?)",
                (auction_id, data, started_at)
            )
            conn.execute(
                "INSERT OR REPLACE INTO escrow_bindings (asset_ref, auction_id) VALUES (?, ?)",
                (asset_ref, auction_id)
            )

    def get_auction(self, auction_id: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT data FROM auctions WHERE auction_id = ?", (auction_id,))
        row = cursor.fetchone()
        return row['data'] if row else None

    def get_all_auctions(self) -> List[Tuple[str, str]]:
        """Get all (auction_id, data) ordered by start time."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT auction_id, data FROM auctions ORDER BY started_at ASC, auction_id ASC")
        return [(row['auction_id'], row['data']) for row in cursor]

    def get_escrow_bindings(self) -> Dict[str, str]:
        """Get asset_ref -> auction_id of the latest auction of each asset."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT asset_ref, auction_id FROM escrow_bindings")
        return {row['asset_ref']: row['auction_id'] for row in cursor}

    # =========================================================================
    # Events
    # =========================================================================

    def append_event(self, kind: str, handle: str, data: str):
        with self._write() as conn:
            conn.execute(
                "INSERT INTO events (kind, handle, data) VALUES (?, ?, ?)",
                (kind, handle, data)
            )

    def get_all_events(self) -> List[str]:
        """Get all event payloads in emission order."""
        conn = self._get_conn()
        cursor = conn.execute("SELECT data FROM events ORDER BY seq ASC")
        return [row['data'] for row in cursor]

    def get_events_count(self) -> int:
        conn = self._get_conn()
        cursor = conn.execute("SELECT COUNT(*) as cnt FROM events")
        return cursor.fetchone()['cnt']

    # =========================================================================
    # Metadata
    # =========================================================================

    def set_meta(self, key: str, value: str):
        with self._write() as conn:
            conn.execute("INSERT OR REPLACE INTO meta (key, value) VALUES (?, ?)", (key, value))

    def get_meta(self, key: str) -> Optional[str]:
        conn = self._get_conn()
        cursor = conn.execute("SELECT value FROM meta WHERE key = ?", (key,))
        row = cursor.fetchone()
        return row['value'] if row else None

    def close(self):
        """Close the connection owned by the current thread."""
        conn = getattr(self._conn_local, "conn", None)
        if conn is not None:
            conn.close()
            del self._conn_local.conn
