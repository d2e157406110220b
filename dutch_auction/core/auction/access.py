"""Owner gating for auction creation."""

from dutch_auction.core.errors import Unauthorized


def only_owner(caller: bytes, owner: bytes) -> None:
    """Raise Unauthorized unless caller is the configured owner."""
    if caller != owner:
        raise Unauthorized("only the auction house owner may start auctions")
