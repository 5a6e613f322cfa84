"""
Reward Address Helpers

Recipient addresses are 20-byte hex accounts. Reward maps are keyed by the
EIP-55 checksum form so that the same account written in different letter
case accumulates into a single entry.
"""

from typing import Optional

from eth_utils import is_hex_address, to_canonical_address, to_checksum_address

from .constants import ZERO_ADDRESS
from .exceptions import InvalidRewardAddress


def is_empty_address(address: Optional[str]) -> bool:
    """True for an unset treasury address: None, blank, or the zero address."""
    if address is None:
        return True
    address = address.strip()
    if not address:
        return True
    if not is_hex_address(address):
        return False
    return to_canonical_address(address) == to_canonical_address(ZERO_ADDRESS)


def normalize_address(address: str) -> str:
    """
    Normalize an address to its checksum form.

    Raises:
        InvalidRewardAddress: If the value is not a 20-byte hex address.
    """
    if not isinstance(address, str) or not is_hex_address(address):
        raise InvalidRewardAddress(address)
    return to_checksum_address(address)
