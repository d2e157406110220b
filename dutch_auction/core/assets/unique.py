"""
Unique Asset Registry - ownership of non-fungible assets.

Each asset reference has exactly one owner at a time. The auction core
uses this registry as its single source of truth for custody: an auction
is live iff its asset is currently owned by the escrow address.
"""

from typing import Dict, List, Optional, Tuple

from dutch_auction.crypto import short_address
from dutch_auction.utils.logger import get_logger
from dutch_auction.utils.validation import (
    MAX_ASSET_REF_LENGTH,
    validate_address,
    validate_identifier,
)

logger = get_logger("ledger.unique")


class UniqueAssetRegistry:
    """
    Registry mapping unique asset references to their owners.

    Attributes:
        owners: asset_ref -> owner address
    """

    def __init__(self):
        self.owners: Dict[str, bytes] = {}

    def mint(self, asset_ref: str, owner: bytes) -> None:
        """
        Register a new unique asset.

        Raises:
            ValueError: if the reference or owner is malformed or already minted
        """
        for ok, error in (
            validate_identifier(asset_ref, "asset_ref", MAX_ASSET_REF_LENGTH),
            validate_address(owner, "owner"),
        ):
            if not ok:
                raise ValueError(error)

        if asset_ref in self.owners:
            raise ValueError(f"Asset already minted: {asset_ref}")

        self.owners[asset_ref] = owner
        logger.debug(f"Minted asset {asset_ref} to {short_address(owner)}")

    def owner_of(self, asset_ref: str) -> Optional[bytes]:
        """Current owner of an asset, or None if it does not exist."""
        return self.owners.get(asset_ref)

    def is_owned_by(self, asset_ref: str, identity: bytes) -> bool:
        """Custody check: does identity currently hold asset_ref?"""
        return self.owners.get(asset_ref) == identity

    def assets_of(self, owner: bytes) -> List[str]:
        """All asset references held by owner."""
        return [ref for ref, holder in self.owners.items() if holder == owner]

    def validate_transfer(
        self,
        sender: bytes,
        recipient: bytes,
        asset_ref: str,
    ) -> Tuple[bool, str]:
        """
        Check a transfer against current ownership without applying it.

        Returns:
            (is_valid, error_message)
        """
        ok, error = validate_address(recipient, "recipient")
        if not ok:
            return False, error

        holder = self.owners.get(asset_ref)
        if holder is None:
            return False, f"Asset not found: {asset_ref}"

        if holder != sender:
            return False, f"Asset {asset_ref} not owned by {short_address(sender)}"

        return True, ""

    def transfer(
        self,
        sender: bytes,
        recipient: bytes,
        asset_ref: str,
    ) -> Tuple[bool, str]:
        """
        Move an asset from sender to recipient.

        Returns:
            (success, error_message)
        """
        is_valid, error = self.validate_transfer(sender, recipient, asset_ref)
        if not is_valid:
            return False, error

        self.owners[asset_ref] = recipient
        logger.debug(f"Asset {asset_ref}: {short_address(sender)} -> {short_address(recipient)}")
        return True, ""

    def __len__(self) -> int:
        return len(self.owners)

    def __repr__(self) -> str:
        return f"UniqueAssetRegistry(assets={len(self.owners)})"
