"""
TSwap asset layer

Provides:
  - Token        : in-memory fungible token ledger with ERC-20–style interface
  - AssetTransfer: pull / push interface consumed by the engines
  - AssetBank    : in-memory AssetTransfer over Token ledgers and native units
"""

from .token import (
    Token,
    TransferEvent,
    ApprovalEvent,
)
from .bank import (
    AssetTransfer,
    AssetBank,
)

__all__ = [
    "Token",
    "TransferEvent",
    "ApprovalEvent",
    "AssetTransfer",
    "AssetBank",
]
