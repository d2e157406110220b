"""
Error taxonomy for the auction core.

Every failure is a rejected call: the error is raised before any ledger,
escrow or storage mutation, so the caller may correct its inputs and
resubmit. Each error carries a stable symbolic code.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Stable symbolic error codes."""
    NOT_OWNER = "NOT_OWNER"
    NOT_ON_SALE = "NOT_ON_SALE"
    INVALID_AUCTION_OBJECT = "INVALID_AUCTION_OBJECT"
    OUTDATED_AUCTION = "OUTDATED_AUCTION"
    INVALID_PRICES = "INVALID_PRICES"
    INVALID_DURATION = "INVALID_DURATION"
    DUPLICATE_AUCTION = "DUPLICATE_AUCTION"
    ASSET_NOT_OWNED = "ASSET_NOT_OWNED"
    PAYMENT_FAILED = "PAYMENT_FAILED"


class AuctionError(Exception):
    """Base class for all rejected auction operations."""

    code: ErrorCode

    def __init__(self, message: str = ""):
        super().__init__(message or self.code.value)
        self.message = message

    def __str__(self) -> str:
        if self.message:
            return f"{self.code.value}: {self.message}"
        return self.code.value


# =============================================================================
# Creation-time errors
# =============================================================================


class Unauthorized(AuctionError):
    code = ErrorCode.NOT_OWNER


class InvalidPriceRange(AuctionError):
    code = ErrorCode.INVALID_PRICES


class InvalidDuration(AuctionError):
    code = ErrorCode.INVALID_DURATION


class DuplicateAuction(AuctionError):
    code = ErrorCode.DUPLICATE_AUCTION


class AssetNotOwned(AuctionError):
    code = ErrorCode.ASSET_NOT_OWNED


# =============================================================================
# Bid-time errors
# =============================================================================


class NotFound(AuctionError):
    code = ErrorCode.INVALID_AUCTION_OBJECT


class NotOnSale(AuctionError):
    code = ErrorCode.NOT_ON_SALE


class Expired(AuctionError):
    code = ErrorCode.OUTDATED_AUCTION


class PaymentFailed(AuctionError):
    """The fungible payment leg could not be applied (balance or allowance)."""
    code = ErrorCode.PAYMENT_FAILED


__all__ = [
    "ErrorCode",
    "AuctionError",
    "Unauthorized",
    "InvalidPriceRange",
    "InvalidDuration",
    "DuplicateAuction",
    "AssetNotOwned",
    "NotFound",
    "NotOnSale",
    "Expired",
    "PaymentFailed",
]
