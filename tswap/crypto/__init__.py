"""
TSwap address utilities.
"""

from .address import (
    ZERO_ADDRESS,
    NATIVE_ASSET,
    is_null,
    is_native,
    same_address,
    derive_address,
)

__all__ = [
    "ZERO_ADDRESS",
    "NATIVE_ASSET",
    "is_null",
    "is_native",
    "same_address",
    "derive_address",
]
