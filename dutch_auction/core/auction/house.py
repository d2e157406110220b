"""
Auction House - the public surface of the auction core.

Wires the owner identity, the derived escrow identity, a clock, both asset
ledgers and the event sink into an AuctionRegistry and a SettlementEngine,
and exposes the two external operations:

    start_auction(...) -> AuctionHandle     (owner only)
    bid(handle, bidder) -> SettlementReceipt (anyone)

Each call reads "now" once from the clock and either completes or raises
having changed nothing.
"""

from typing import Optional

from dutch_auction.core.assets.fungible import FungibleLedger
from dutch_auction.core.assets.unique import UniqueAssetRegistry
from dutch_auction.core.auction.price import current_price
from dutch_auction.core.auction.record import AuctionHandle, AuctionRecord
from dutch_auction.core.auction.registry import AuctionRegistry
from dutch_auction.core.auction.settlement import SettlementEngine, SettlementReceipt
from dutch_auction.core.clock import Clock, SystemClock
from dutch_auction.core.config import AuctionHouseConfig
from dutch_auction.core.events import EventLog
from dutch_auction.crypto import derive_escrow_address
from dutch_auction.utils.logger import get_logger

logger = get_logger("house")


class DutchAuctionHouse:
    """
    Descending-price auctions of unique assets for fungible payment.

    Attributes:
        owner: Address allowed to start auctions
        escrow: Derived custody address
        clock: Time source
        payments: Fungible-asset ledger
        assets: Unique-asset registry
        events: Event sink
        registry: Auction records
        engine: Bid settlement
    """

    def __init__(
        self,
        owner: bytes,
        clock: Optional[Clock] = None,
        payments: Optional[FungibleLedger] = None,
        assets: Optional[UniqueAssetRegistry] = None,
        events: Optional[EventLog] = None,
        beneficiary: Optional[bytes] = None,
        storage_manager=None,
    ):
        self.owner = owner
        self.escrow = derive_escrow_address(owner)
        self.clock = clock if clock is not None else SystemClock()
        self.payments = payments if payments is not None else FungibleLedger()
        self.assets = assets if assets is not None else UniqueAssetRegistry()
        self.events = events if events is not None else EventLog(storage_manager=storage_manager)

        self.registry = AuctionRegistry(
            owner=owner,
            escrow=self.escrow,
            assets=self.assets,
            events=self.events,
            beneficiary=beneficiary,
            storage_manager=storage_manager,
        )
        self.engine = SettlementEngine(self.registry, self.payments)

    @classmethod
    def from_config(
        cls,
        config: AuctionHouseConfig,
        clock: Optional[Clock] = None,
        payments: Optional[FungibleLedger] = None,
        assets: Optional[UniqueAssetRegistry] = None,
    ) -> "DutchAuctionHouse":
        """Build a house from configuration, opening storage if configured."""
        storage_manager = None
        if config.data_dir is not None:
            from dutch_auction.core.storage import StorageManager
            storage_manager = StorageManager(config.data_dir)

        logger.info(f"Opening auction house for owner {config.owner}")
        return cls(
            owner=config.owner_address,
            clock=clock,
            payments=payments,
            assets=assets,
            beneficiary=config.beneficiary_address,
            storage_manager=storage_manager,
        )

    # =========================================================================
    # External Operations
    # =========================================================================

    def start_auction(
        self,
        auction_id: AuctionHandle,
        sell_asset: str,
        buy_asset_kind: str,
        max_price: int,
        min_price: int,
        duration: int,
        caller: bytes,
    ) -> AuctionHandle:
        """Start an auction at the current clock time (owner only)."""
        return self.registry.create(
            auction_id,
            sell_asset,
            buy_asset_kind,
            max_price,
            min_price,
            duration,
            now=self.clock.now(),
            caller=caller,
        )

    def bid(self, handle: AuctionHandle, bidder: bytes) -> SettlementReceipt:
        """Buy an auction at its current price."""
        return self.engine.bid(handle, bidder, now=self.clock.now())

    # =========================================================================
    # Queries
    # =========================================================================

    def get(self, handle: AuctionHandle) -> AuctionRecord:
        return self.registry.get(handle)

    def current_price(self, handle: AuctionHandle) -> int:
        """Price of an auction right now (raises NotFound / Expired)."""
        return current_price(self.registry.get(handle), self.clock.now())

    def is_live(self, handle: AuctionHandle) -> bool:
        return self.registry.is_live(handle)

    def approve_escrow(self, bidder: bytes, asset_kind: str, amount: int) -> None:
        """
        Authorize the escrow address to pull up to amount from bidder.

        Raises:
            ValueError: on a malformed address or amount
        """
        ok, error = self.payments.approve(asset_kind, bidder, self.escrow, amount)
        if not ok:
            raise ValueError(error)

    def stats(self) -> dict:
        return {
            **self.registry.stats(),
            **self.engine.stats(),
            "events": len(self.events),
        }
