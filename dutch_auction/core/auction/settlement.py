"""
Settlement Engine - accepts bids and exchanges asset for payment.

Settlement Legs:
---------------
1. Payment leg: price units of the buy asset, bidder -> beneficiary,
   moved by the escrow address using the bidder's allowance
2. Asset leg: the unique asset, escrow -> bidder

Both legs are validated against current ledger state before either is
applied. If the payment leg is rejected nothing has changed and the
auction stays on sale. If the asset leg fails after payment was applied,
the payment is reversed before the error propagates. If the BidAccepted
event cannot be persisted after both legs applied, both are reversed.
No partial settlement is ever observable.

There is no "mark settled" step: the asset leaving escrow retires the
auction, and every later bid fails the custody check with NotOnSale.
"""

from collections import defaultdict
from dataclasses import dataclass
from typing import Dict

from dutch_auction.core.assets.fungible import FungibleLedger
from dutch_auction.core.auction.price import current_price
from dutch_auction.core.auction.record import AuctionHandle, AuctionRecord
from dutch_auction.core.auction.registry import AuctionRegistry
from dutch_auction.core.errors import NotOnSale, PaymentFailed
from dutch_auction.core.events import BidAccepted
from dutch_auction.crypto import bytes_to_hex, short_address
from dutch_auction.utils.logger import get_logger

logger = get_logger("settlement")


@dataclass(frozen=True)
class SettlementReceipt:
    """Outcome of an accepted bid."""
    auction_id: AuctionHandle
    bidder: bytes
    beneficiary: bytes
    sell_asset: str
    buy_asset_kind: str
    price: int
    settled_at: int


class SettlementEngine:
    """
    Executes bids against auctions held in a registry.

    Bidding is open to any address; the bidder must hold at least the
    current price in the buy asset and have approved the escrow address
    to move that amount.
    """

    def __init__(self, registry: AuctionRegistry, payments: FungibleLedger):
        self.registry = registry
        self.payments = payments

        self.settled_count: int = 0
        self.volume: Dict[str, int] = defaultdict(int)

    def bid(self, auction_id: AuctionHandle, bidder: bytes, now: int) -> SettlementReceipt:
        """
        Accept an auction at its current price.

        Args:
            auction_id: Auction to buy
            bidder: Address paying and receiving the asset
            now: Current time

        Returns:
            SettlementReceipt for the completed exchange

        Raises:
            NotFound: unknown auction
            NotOnSale: asset no longer in escrow for this auction
            Expired: past the deadline
            PaymentFailed: bidder balance or allowance too low
        """
        record = self.registry.get(auction_id)

        if not self.registry.is_live(auction_id):
            logger.warning(f"Bid on {auction_id} by {short_address(bidder)} rejected: not on sale")
            raise NotOnSale(f"auction {auction_id} is no longer on sale")

        price = current_price(record, now)

        event = BidAccepted(
            handle=auction_id,
            timestamp=now,
            bidder=bytes_to_hex(bidder),
            price=price,
        )

        prior_allowance = self.payments.allowance(record.buy_asset_kind, bidder, self.registry.escrow)
        self._settle(record, bidder, price, prior_allowance)

        try:
            self.registry.events.persist(event)
        except Exception:
            self._reverse_asset(record, bidder)
            self._reverse_payment(record, bidder, price, prior_allowance)
            raise

        self.settled_count += 1
        self.volume[record.buy_asset_kind] += price
        self.registry.events.publish(event)

        logger.info(f"Auction {auction_id} sold to {short_address(bidder)} for {price} {record.buy_asset_kind}")
        return SettlementReceipt(
            auction_id=auction_id,
            bidder=bidder,
            beneficiary=record.beneficiary,
            sell_asset=record.sell_asset,
            buy_asset_kind=record.buy_asset_kind,
            price=price,
            settled_at=now,
        )

    def _settle(self, record: AuctionRecord, bidder: bytes, price: int, prior_allowance: int) -> None:
        """Run both settlement legs, or neither."""
        escrow = self.registry.escrow
        assets = self.registry.assets
        kind = record.buy_asset_kind

        ok, error = self.payments.validate_transfer(kind, bidder, record.beneficiary, price, spender=escrow)
        if not ok:
            logger.warning(f"Bid on {record.auction_id} by {short_address(bidder)} rejected: {error}")
            raise PaymentFailed(error)

        ok, error = assets.validate_transfer(escrow, bidder, record.sell_asset)
        if not ok:
            raise NotOnSale(error)

        ok, error = self.payments.transfer_from(kind, escrow, bidder, record.beneficiary, price)
        if not ok:
            raise PaymentFailed(error)

        ok, error = assets.transfer(escrow, bidder, record.sell_asset)
        if not ok:
            self._reverse_payment(record, bidder, price, prior_allowance)
            raise NotOnSale(error)

    def _reverse_asset(self, record: AuctionRecord, bidder: bytes) -> None:
        """Return a delivered asset to escrow."""
        ok, error = self.registry.assets.transfer(bidder, self.registry.escrow, record.sell_asset)
        if not ok:
            raise RuntimeError(f"Could not return {record.sell_asset} to escrow: {error}")

    def _reverse_payment(self, record: AuctionRecord, bidder: bytes, price: int, prior_allowance: int) -> None:
        """Undo an applied payment leg."""
        kind = record.buy_asset_kind
        ok, error = self.payments.transfer(kind, record.beneficiary, bidder, price)
        if not ok:
            raise RuntimeError(f"Could not reverse payment for {record.auction_id}: {error}")
        self.payments.approve(kind, bidder, self.registry.escrow, prior_allowance)
        logger.error(f"Reversed payment of {price} {kind} for {record.auction_id}")

    def stats(self) -> dict:
        return {
            "settled": self.settled_count,
            "volume": dict(self.volume),
        }
