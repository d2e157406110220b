"""
Descending-price auction core.

This module provides:
- The immutable auction record
- Linear price decay
- Owner gating
- The auction registry (creation, escrow, custody checks)
- Atomic two-leg settlement of bids
- The DutchAuctionHouse facade
"""

from dutch_auction.core.auction.record import AuctionHandle, AuctionRecord
from dutch_auction.core.auction.price import current_price, price_schedule
from dutch_auction.core.auction.access import only_owner
from dutch_auction.core.auction.registry import AuctionRegistry
from dutch_auction.core.auction.settlement import SettlementEngine, SettlementReceipt
from dutch_auction.core.auction.house import DutchAuctionHouse

__all__ = [
    "AuctionHandle",
    "AuctionRecord",
    "current_price",
    "price_schedule",
    "only_owner",
    "AuctionRegistry",
    "SettlementEngine",
    "SettlementReceipt",
    "DutchAuctionHouse",
]
