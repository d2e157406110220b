"""
Fungible Ledger - balances of interchangeable assets used as payment.

Conceptual Background:
---------------------
The ledger tracks, per asset kind, how many units each address holds and
how many units an owner has authorized a spender to move on its behalf.

Transfer Processing:
-------------------
1. Validate: amount in range, sender balance and spender allowance suffice
2. Apply: debit sender, credit recipient, consume allowance

A transfer that fails validation returns (False, reason) and leaves every
balance and allowance untouched.
"""

from collections import defaultdict
from typing import Dict, Optional, Tuple

from dutch_auction.crypto import short_address
from dutch_auction.utils.logger import get_logger
from dutch_auction.utils.validation import validate_address, validate_uint

logger = get_logger("ledger.fungible")


class FungibleLedger:
    """
    Account-based ledger for one or more fungible asset kinds.

    Attributes:
        balances: (asset_kind, address) -> units held
        allowances: (asset_kind, owner, spender) -> units spender may move
        total_supply: asset_kind -> units minted
    """

    def __init__(self):
        self.balances: Dict[Tuple[str, bytes], int] = defaultdict(int)
        self.allowances: Dict[Tuple[str, bytes, bytes], int] = defaultdict(int)
        self.total_supply: Dict[str, int] = defaultdict(int)

    # =========================================================================
    # State Access
    # =========================================================================

    def balance_of(self, asset_kind: str, address: bytes) -> int:
        """Units of asset_kind held by address."""
        return self.balances.get((asset_kind, address), 0)

    def allowance(self, asset_kind: str, owner: bytes, spender: bytes) -> int:
        """Units of asset_kind spender may still move out of owner's balance."""
        return self.allowances.get((asset_kind, owner, spender), 0)

    # =========================================================================
    # Issuance & Authorization
    # =========================================================================

    def mint(self, asset_kind: str, address: bytes, amount: int) -> None:
        """
        Create new units of an asset kind.

        Raises:
            ValueError: on a malformed address or amount
        """
        for ok, error in (validate_address(address), validate_uint(amount, "amount")):
            if not ok:
                raise ValueError(error)

        self.balances[(asset_kind, address)] += amount
        self.total_supply[asset_kind] += amount
        logger.debug(f"Minted {amount} {asset_kind} to {short_address(address)}")

    def approve(
        self,
        asset_kind: str,
        owner: bytes,
        spender: bytes,
        amount: int,
    ) -> Tuple[bool, str]:
        """
        Set (not add to) the allowance of spender over owner's balance.

        Returns:
            (success, error_message)
        """
        for ok, error in (
            validate_address(owner, "owner"),
            validate_address(spender, "spender"),
            validate_uint(amount, "amount"),
        ):
            if not ok:
                return False, error

        self.allowances[(asset_kind, owner, spender)] = amount
        logger.debug(f"{short_address(owner)} approved {short_address(spender)} for {amount} {asset_kind}")
        return True, ""

    # =========================================================================
    # Transfers
    # =========================================================================

    def validate_transfer(
        self,
        asset_kind: str,
        sender: bytes,
        recipient: bytes,
        amount: int,
        spender: Optional[bytes] = None,
    ) -> Tuple[bool, str]:
        """
        Check a transfer against current state without applying it.

        Args:
            asset_kind: Asset being moved
            sender: Address debited
            recipient: Address credited
            amount: Units to move
            spender: Address moving the funds on sender's behalf. None or
                equal to sender means the sender moves its own funds.

        Returns:
            (is_valid, error_message)
        """
        for ok, error in (
            validate_address(sender, "sender"),
            validate_address(recipient, "recipient"),
            validate_uint(amount, "amount"),
        ):
            if not ok:
                return False, error

        balance = self.balance_of(asset_kind, sender)
        if balance < amount:
            return False, f"Insufficient {asset_kind} balance: {balance} < {amount}"

        if spender is not None and spender != sender:
            allowed = self.allowance(asset_kind, sender, spender)
            if allowed < amount:
                return False, f"Insufficient {asset_kind} allowance: {allowed} < {amount}"

        return True, ""

    def transfer(
        self,
        asset_kind: str,
        sender: bytes,
        recipient: bytes,
        amount: int,
    ) -> Tuple[bool, str]:
        """
        Move units from sender to recipient.

        Returns:
            (success, error_message)
        """
        return self._apply(asset_kind, None, sender, recipient, amount)

    def transfer_from(
        self,
        asset_kind: str,
        spender: bytes,
        sender: bytes,
        recipient: bytes,
        amount: int,
    ) -> Tuple[bool, str]:
        """
        Move units out of sender's balance using spender's allowance.

        Returns:
            (success, error_message)
        """
        return self._apply(asset_kind, spender, sender, recipient, amount)

    def _apply(
        self,
        asset_kind: str,
        spender: Optional[bytes],
        sender: bytes,
        recipient: bytes,
        amount: int,
    ) -> Tuple[bool, str]:
        is_valid, error = self.validate_transfer(asset_kind, sender, recipient, amount, spender)
        if not is_valid:
            logger.debug(f"Rejected {asset_kind} transfer from {short_address(sender)}: {error}")
            return False, error

        if spender is not None and spender != sender:
            self.allowances[(asset_kind, sender, spender)] -= amount

        self.balances[(asset_kind, sender)] -= amount
        self.balances[(asset_kind, recipient)] += amount

        logger.debug(
            f"Transferred {amount} {asset_kind}: {short_address(sender)} -> {short_address(recipient)}"
        )
        return True, ""

    # =========================================================================
    # Utility
    # =========================================================================

    def __repr__(self) -> str:
        return f"FungibleLedger(kinds={len(self.total_supply)}, accounts={len(self.balances)})"

    def stats(self) -> dict:
        """Get ledger statistics."""
        return {
            "asset_kinds": len(self.total_supply),
            "accounts": sum(1 for v in self.balances.values() if v > 0),
            "total_supply": dict(self.total_supply),
        }
