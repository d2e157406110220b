"""
Input Validation - checks applied to every external input before any
state mutation.

All validators return (is_valid, error_message) so callers can reject a
call without touching ledgers or storage.
"""

from typing import Any, Tuple

from dutch_auction.crypto import ADDRESS_SIZE

# =============================================================================
# Constants
# =============================================================================

MIN_AMOUNT = 0
MAX_UINT = 2**64 - 1

MAX_AUCTION_ID_LENGTH = 128
MAX_ASSET_REF_LENGTH = 256


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = MIN_AMOUNT,
    max_val: int = MAX_UINT,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value

    Returns:
        (is_valid, error_message)
    """
    # bool is an int subclass
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_uint(value: Any, name: str) -> Tuple[bool, str]:
    """Validate an unsigned 64-bit amount."""
    return validate_integer(value, name, MIN_AMOUNT, MAX_UINT)


def validate_address(address: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a 20-byte address."""
    if not isinstance(address, (bytes, bytearray)):
        return False, f"{name} must be bytes, got {type(address).__name__}"

    if len(address) != ADDRESS_SIZE:
        return False, f"{name} must be {ADDRESS_SIZE} bytes, got {len(address)}"

    return True, ""


def validate_identifier(value: Any, name: str, max_length: int) -> Tuple[bool, str]:
    """Validate a non-empty string identifier (auction id, asset ref)."""
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not value:
        return False, f"{name} must not be empty"

    if len(value) > max_length:
        return False, f"{name} exceeds max length {max_length}, got {len(value)}"

    return True, ""
