"""
Price function - linear price decay over the auction window.

    elapsed  = now - started_at
    discount = floor((max_price - min_price) * elapsed / duration)
    price    = max_price - discount

Integer floor division rounds the discount down, so the price never
drops below the exact linear value, reaches min_price exactly at the
deadline, and may hold the same value for several consecutive seconds.
"""

from typing import Iterator, Tuple

from dutch_auction.core.auction.record import AuctionRecord
from dutch_auction.core.errors import Expired


def current_price(record: AuctionRecord, now: int) -> int:
    """
    Price of an auction at time now.

    Args:
        record: Auction to price
        now: Current time in seconds since epoch

    Returns:
        Price in units of record.buy_asset_kind

    Raises:
        Expired: if now is past the deadline
    """
    if record.is_expired(now):
        raise Expired(f"auction {record.auction_id} ended at {record.ends_at}, now={now}")

    # A clock reading before start prices at the top of the band
    elapsed = max(0, now - record.started_at)
    discount = record.price_range * elapsed // record.duration
    return record.max_price - discount


def price_schedule(record: AuctionRecord, step: int) -> Iterator[Tuple[int, int]]:
    """
    Yield (timestamp, price) every step seconds across the auction window.

    The deadline itself is always included as the final entry.
    """
    if step <= 0:
        raise ValueError(f"step must be positive, got {step}")

    for timestamp in range(record.started_at, record.ends_at, step):
        yield timestamp, current_price(record, timestamp)
    yield record.ends_at, current_price(record, record.ends_at)
