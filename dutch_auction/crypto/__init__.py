"""
Hashing and identity helpers for the auction house.

Identities (owners, bidders, the escrow account) are 20-byte addresses
derived Ethereum-style from the last 20 bytes of a Keccak-256 digest.

Design Notes:
-------------
The escrow identity is not a key holder. It is derived from the owner's
address under a domain separator, so every auction house instance has a
deterministic custody account that no participant can sign for.
"""

from Crypto.Hash import keccak


# =============================================================================
# Constants
# =============================================================================

ADDRESS_SIZE = 20

# Domain separator for escrow address derivation
DOMAIN_ESCROW = b"dutch-auction/escrow"


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: address derivation.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Addresses
# =============================================================================


def derive_address(label: str) -> bytes:
    """
    Derive a deterministic address from a human-readable label.

    address = keccak256(label)[-20:]

    Args:
        label: Account label, e.g. "alice"

    Returns:
        20-byte address
    """
    return keccak256(label.encode("utf-8"))[-ADDRESS_SIZE:]


def derive_escrow_address(owner: bytes) -> bytes:
    """
    Derive the escrow (custody) address for an auction house owner.

    escrow = keccak256(DOMAIN_ESCROW || owner)[-20:]
    """
    if len(owner) != ADDRESS_SIZE:
        raise ValueError(f"Owner address must be {ADDRESS_SIZE} bytes, got {len(owner)}")
    return keccak256(DOMAIN_ESCROW + owner)[-ADDRESS_SIZE:]


# =============================================================================
# Encoding
# =============================================================================


def bytes_to_hex(data: bytes) -> str:
    """Convert bytes to 0x-prefixed hex string."""
    return "0x" + data.hex()


def hex_to_bytes(hex_str: str) -> bytes:
    """Convert a hex string (with or without 0x prefix) to bytes."""
    if hex_str.startswith(("0x", "0X")):
        hex_str = hex_str[2:]
    return bytes.fromhex(hex_str)


def short_address(address: bytes) -> str:
    """Abbreviated address for log lines."""
    return bytes_to_hex(address)[:10]


__all__ = [
    "ADDRESS_SIZE",
    "DOMAIN_ESCROW",
    "keccak256",
    "derive_address",
    "derive_escrow_address",
    "bytes_to_hex",
    "hex_to_bytes",
    "short_address",
]
