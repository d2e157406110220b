"""
Auction Registry - creation and lookup of auction records.

Custody Model:
-------------
Starting an auction moves the unique asset from the owner to the escrow
address. The registry never stores a "sold" or "active" flag: an auction
is live iff the unique-asset registry says its asset is still held by
escrow *for this auction*. Settlement moving the asset out of escrow is
therefore the only retirement step, and a racing second bid can never
observe a stale flag.

Each escrowed asset is bound to the auction id that put it there, so an
old, already-settled record cannot be revived when the same asset later
returns to escrow under a new auction.
"""

from contextlib import nullcontext
from typing import Dict, Iterator, Optional

from dutch_auction.core.assets.unique import UniqueAssetRegistry
from dutch_auction.core.auction.access import only_owner
from dutch_auction.core.auction.record import AuctionHandle, AuctionRecord
from dutch_auction.core.errors import (
    AssetNotOwned,
    DuplicateAuction,
    InvalidDuration,
    InvalidPriceRange,
    NotFound,
)
from dutch_auction.core.events import AuctionCreated, EventLog
from dutch_auction.crypto import bytes_to_hex, short_address
from dutch_auction.utils.logger import get_logger
from dutch_auction.utils.validation import (
    MAX_ASSET_REF_LENGTH,
    MAX_AUCTION_ID_LENGTH,
    MAX_UINT,
    validate_address,
    validate_identifier,
    validate_integer,
    validate_uint,
)

logger = get_logger("registry")


class AuctionRegistry:
    """
    Registry of auctions keyed by id.

    Attributes:
        owner: Only address allowed to start auctions
        escrow: Custody address holding assets on sale
        beneficiary: Address credited with payments
        assets: Unique-asset registry used for custody
        records: auction_id -> AuctionRecord
        escrow_bindings: asset_ref -> auction_id that escrowed it
    """

    def __init__(
        self,
        owner: bytes,
        escrow: bytes,
        assets: UniqueAssetRegistry,
        events: Optional[EventLog] = None,
        beneficiary: Optional[bytes] = None,
        storage_manager=None,
    ):
        """
        Initialize the registry.

        Args:
            owner: Owner address (the access control identity)
            escrow: Escrow address taking custody of auctioned assets
            assets: Unique-asset registry
            events: Event sink. None = a fresh in-memory EventLog.
            beneficiary: Payment recipient. None = owner.
            storage_manager: Persistence manager. None = in-memory only.
        """
        for address, name in ((owner, "owner"), (escrow, "escrow")):
            ok, error = validate_address(address, name)
            if not ok:
                raise ValueError(error)
        if owner == escrow:
            raise ValueError("escrow address must differ from owner")

        self.owner = owner
        self.escrow = escrow
        self.beneficiary = beneficiary if beneficiary is not None else owner
        self.assets = assets
        self.events = events if events is not None else EventLog()
        self.storage_manager = storage_manager

        self.records: Dict[AuctionHandle, AuctionRecord] = {}
        self.escrow_bindings: Dict[str, AuctionHandle] = {}

        if storage_manager:
            self._load_from_storage()

        logger.info(
            f"AuctionRegistry initialized: owner={short_address(owner)}, escrow={short_address(escrow)}"
        )

    # =========================================================================
    # Creation
    # =========================================================================

    def create(
        self,
        auction_id: AuctionHandle,
        sell_asset: str,
        buy_asset_kind: str,
        max_price: int,
        min_price: int,
        duration: int,
        now: int,
        caller: bytes,
    ) -> AuctionHandle:
        """
        Start a new auction and take its asset into escrow.

        All checks run before any mutation: a rejected call leaves custody,
        records and storage unchanged. The record, its escrow binding and the
        AuctionCreated event are written in one storage transaction after the
        asset moves into escrow; if that write fails the asset is handed back.

        Args:
            auction_id: Handle for the new auction
            sell_asset: Unique asset to sell (must be held by caller)
            buy_asset_kind: Fungible asset kind accepted as payment
            max_price: Starting price
            min_price: Price at the deadline
            duration: Seconds until the deadline
            now: Current time
            caller: Address submitting the call

        Returns:
            The auction handle

        Raises:
            Unauthorized: caller is not the owner
            InvalidPriceRange: prices malformed or max_price < min_price
            InvalidDuration: duration is not a positive integer
            DuplicateAuction: id or asset already under a live auction
            AssetNotOwned: caller does not hold sell_asset
            ValueError: malformed identifiers
        """
        only_owner(caller, self.owner)

        for value, name in ((max_price, "max_price"), (min_price, "min_price")):
            ok, error = validate_uint(value, name)
            if not ok:
                raise InvalidPriceRange(error)
        if max_price < min_price:
            raise InvalidPriceRange(f"max_price {max_price} < min_price {min_price}")

        ok, error = validate_integer(duration, "duration", min_val=1, max_val=MAX_UINT)
        if not ok:
            raise InvalidDuration(error)

        for value, name, limit in (
            (auction_id, "auction_id", MAX_AUCTION_ID_LENGTH),
            (sell_asset, "sell_asset", MAX_ASSET_REF_LENGTH),
            (buy_asset_kind, "buy_asset_kind", MAX_ASSET_REF_LENGTH),
        ):
            ok, error = validate_identifier(value, name, limit)
            if not ok:
                raise ValueError(error)

        if auction_id in self.records and self.is_live(auction_id):
            raise DuplicateAuction(f"auction {auction_id} is still on sale")

        holder = self.assets.owner_of(sell_asset)
        if holder == self.escrow:
            raise DuplicateAuction(f"asset {sell_asset} is already in escrow")

        ok, error = self.assets.validate_transfer(caller, self.escrow, sell_asset)
        if not ok:
            raise AssetNotOwned(error)

        record = AuctionRecord(
            auction_id=auction_id,
            sell_asset=sell_asset,
            buy_asset_kind=buy_asset_kind,
            max_price=max_price,
            min_price=min_price,
            duration=duration,
            started_at=now,
            seller=caller,
            beneficiary=self.beneficiary,
        )

        event = AuctionCreated(
            handle=auction_id,
            timestamp=now,
            sell_asset=sell_asset,
            buy_asset_kind=buy_asset_kind,
            max_price=max_price,
            min_price=min_price,
            duration=duration,
        )

        ok, error = self.assets.transfer(caller, self.escrow, sell_asset)
        if not ok:
            raise AssetNotOwned(error)

        try:
            with self._transaction():
                if self.storage_manager:
                    self.storage_manager.save_auction(record)
                self.events.persist(event)
        except Exception:
            self._release_escrow(caller, sell_asset)
            raise

        self.records[auction_id] = record
        self.escrow_bindings[sell_asset] = auction_id
        self.events.publish(event)

        logger.info(
            f"Auction {auction_id} started: {sell_asset} for {buy_asset_kind} "
            f"{max_price}->{min_price} over {duration}s"
        )
        return auction_id

    def _transaction(self):
        if self.storage_manager:
            return self.storage_manager.transaction()
        return nullcontext()

    def _release_escrow(self, seller: bytes, asset_ref: str) -> None:
        """Hand an asset back after its auction failed to persist."""
        ok, error = self.assets.transfer(self.escrow, seller, asset_ref)
        if not ok:
            raise RuntimeError(f"Could not release {asset_ref} from escrow: {error}")
        logger.error(f"Released {asset_ref} from escrow after a storage failure")

    # =========================================================================
    # Lookup
    # =========================================================================

    def get(self, auction_id: AuctionHandle) -> AuctionRecord:
        """
        Get an auction record.

        Raises:
            NotFound: no auction with this id
        """
        record = self.records.get(auction_id)
        if record is None:
            raise NotFound(f"unknown auction {auction_id}")
        return record

    def is_live(self, auction_id: AuctionHandle) -> bool:
        """Custody check: is this auction's asset still held in escrow for it?"""
        record = self.records.get(auction_id)
        if record is None:
            return False
        return (
            self.assets.is_owned_by(record.sell_asset, self.escrow)
            and self.escrow_bindings.get(record.sell_asset) == auction_id
        )

    def __iter__(self) -> Iterator[AuctionRecord]:
        return iter(self.records.values())

    def live_auctions(self) -> Iterator[AuctionRecord]:
        """Auctions whose asset is still in escrow (expired ones included)."""
        return (r for r in self.records.values() if self.is_live(r.auction_id))

    def __contains__(self, auction_id: object) -> bool:
        return auction_id in self.records

    def __len__(self) -> int:
        return len(self.records)

    # =========================================================================
    # Persistence
    # =========================================================================

    def _load_from_storage(self) -> None:
        """Load records from storage manager, restoring escrow bindings."""
        stored = self.storage_manager.get_owner()
        if stored and stored != (bytes_to_hex(self.owner), bytes_to_hex(self.escrow)):
            raise ValueError(f"Storage belongs to owner {stored[0]}, not {bytes_to_hex(self.owner)}")

        for record in self.storage_manager.load_auctions():
            self.records[record.auction_id] = record
        self.escrow_bindings.update(self.storage_manager.load_escrow_bindings())

        self.storage_manager.save_owner(bytes_to_hex(self.owner), bytes_to_hex(self.escrow))
        logger.info(f"Loaded {len(self.records)} auctions from storage")

    # =========================================================================
    # Statistics
    # =========================================================================

    def stats(self) -> dict:
        """Get registry statistics."""
        live = sum(1 for _ in self.live_auctions())
        return {
            "total_auctions": len(self.records),
            "live_auctions": live,
            "retired_auctions": len(self.records) - live,
            "owner": bytes_to_hex(self.owner),
            "escrow": bytes_to_hex(self.escrow),
        }
