"""Asset ledgers the auction core settles against"""
from dutch_auction.core.assets.fungible import FungibleLedger
from dutch_auction.core.assets.unique import UniqueAssetRegistry

__all__ = [
    "FungibleLedger",
    "UniqueAssetRegistry",
]
