"""
Dutch Auction House

Descending-price auctions of unique assets:
- Linear price decay between a maximum and minimum price
- Escrow custody as the single source of truth for "on sale"
- Atomic asset-for-payment settlement
"""
