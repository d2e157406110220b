import json
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from dutch_auction.core.auction.record import AuctionRecord
from dutch_auction.core.storage.sqlite_adapter import SQLiteAdapter
from dutch_auction.utils.logger import get_logger

logger = get_logger("storage.manager")


class StorageManager:
    """
    Manages persistent storage for the auction house.

    Coordinates data persistence using SQLite adapter.
    Handles:
    - Auction records (immutable once written) and escrow bindings
    - Event log (append-only)
    - Metadata (owner, escrow address)
    """

    def __init__(self, data_dir: Path, db_name: str = "auctions.db"):
        self.data_dir = Path(data_dir)
        self.db_path = self.data_dir / db_name
        self.adapter = SQLiteAdapter(self.db_path)

        logger.info(f"StorageManager initialized at {self.db_path}")

    # =========================================================================
    # Auction Records
    # =========================================================================

    def save_auction(self, record: AuctionRecord):
        """Persist an auction record and bind its asset to it."""
        self.adapter.save_auction(
            record.auction_id,
            json.dumps(record.to_dict(), sort_keys=True),
            record.started_at,
            record.sell_asset,
        )

    def get_auction(self, auction_id: str) -> Optional[AuctionRecord]:
        data = self.adapter.get_auction(auction_id)
        if data is None:
            return None
        return AuctionRecord.from_dict(json.loads(data))

    def load_auctions(self) -> List[AuctionRecord]:
        """Load every stored auction, oldest first."""
        return [
            AuctionRecord.from_dict(json.loads(data))
            for _, data in self.adapter.get_all_auctions()
        ]

    def load_escrow_bindings(self) -> Dict[str, str]:
        """asset_ref -> auction_id that most recently escrowed it."""
        return self.adapter.get_escrow_bindings()

    # =========================================================================
    # Events
    # =========================================================================

    def save_event(self, kind: str, handle: str, payload: str):
        """Append a serialized event."""
        self.adapter.append_event(kind, handle, payload)

    def load_events(self) -> List[str]:
        return self.adapter.get_all_events()

    def event_count(self) -> int:
        return self.adapter.get_events_count()

    # =========================================================================
    # Metadata
    # =========================================================================

    def save_owner(self, owner_hex: str, escrow_hex: str):
        self.adapter.set_meta("owner", owner_hex)
        self.adapter.set_meta("escrow", escrow_hex)

    def get_owner(self) -> Optional[tuple[str, str]]:
        """Get the (owner, escrow) hex addresses this database was created for."""
        owner = self.adapter.get_meta("owner")
        escrow = self.adapter.get_meta("escrow")
        if owner and escrow:
            return owner, escrow
        return None

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Writes inside the block commit together or not at all."""
        with self.adapter.transaction():
            yield

    def close(self):
        self.adapter.close()
