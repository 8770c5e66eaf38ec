"""
TSwap Address Helpers

Identities are EIP-55 style hex addresses. Engines only need to recognise
the null identity and the native-unit sentinel, and to derive stable
addresses for the contracts they instantiate.
"""

import hashlib
from typing import Optional

from eth_utils import is_hex_address, to_checksum_address

from ..constants import NATIVE_ASSET, ZERO_ADDRESS


def is_null(address: Optional[str]) -> bool:
    """True for None, the empty string and the all-zero address."""
    if not address:
        return True
    if is_hex_address(address):
        return int(address, 16) == 0
    return False


def is_native(asset: Optional[str]) -> bool:
    """True if *asset* is the native transfer unit sentinel."""
    if not asset:
        return False
    return asset.lower() == NATIVE_ASSET.lower()


def same_address(a: Optional[str], b: Optional[str]) -> bool:
    """Case-insensitive identity comparison for hex addresses."""
    if a is None or b is None:
        return a is b
    if is_hex_address(a) and is_hex_address(b):
        return a.lower() == b.lower()
    return a == b


def derive_address(*parts: str) -> str:
    """
    Deterministic contract address, consensus-safe.

    blake2b over the colon-joined parts, truncated to 20 bytes and
    rendered as an EIP-55 checksum address.
    """
    raw = ":".join(parts).encode()
    digest = hashlib.blake2b(raw, digest_size=20).hexdigest()
    return to_checksum_address("0x" + digest)


__all__ = [
    "ZERO_ADDRESS",
    "NATIVE_ASSET",
    "is_null",
    "is_native",
    "same_address",
    "derive_address",
]
