"""
Auction record - immutable description of one descending-price auction.
"""

from dataclasses import asdict, dataclass

from dutch_auction.crypto import bytes_to_hex, hex_to_bytes

# Auctions are addressed by their caller-chosen id
AuctionHandle = str


@dataclass(frozen=True)
class AuctionRecord:
    """
    A single auction, fixed at creation.

    Attributes:
        auction_id: Unique handle chosen by the owner
        sell_asset: Reference of the escrowed unique asset
        buy_asset_kind: Fungible asset kind accepted as payment
        max_price: Price at start
        min_price: Price at the deadline (inclusive)
        duration: Seconds from start to deadline
        started_at: Creation timestamp (seconds since epoch)
        seller: Owner address that started the auction
        beneficiary: Address credited with the payment
    """
    auction_id: AuctionHandle
    sell_asset: str
    buy_asset_kind: str
    max_price: int
    min_price: int
    duration: int
    started_at: int
    seller: bytes
    beneficiary: bytes

    @property
    def ends_at(self) -> int:
        """Last second at which a bid is accepted."""
        return self.started_at + self.duration

    @property
    def price_range(self) -> int:
        return self.max_price - self.min_price

    def is_expired(self, now: int) -> bool:
        return now > self.ends_at

    def to_dict(self) -> dict:
        """Serialize with hex-encoded addresses."""
        data = asdict(self)
        data["seller"] = bytes_to_hex(self.seller)
        data["beneficiary"] = bytes_to_hex(self.beneficiary)
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "AuctionRecord":
        return cls(
            auction_id=data["auction_id"],
            sell_asset=data["sell_asset"],
            buy_asset_kind=data["buy_asset_kind"],
            max_price=int(data["max_price"]),
            min_price=int(data["min_price"]),
            duration=int(data["duration"]),
            started_at=int(data["started_at"]),
            seller=hex_to_bytes(data["seller"]),
            beneficiary=hex_to_bytes(data["beneficiary"]),
        )
