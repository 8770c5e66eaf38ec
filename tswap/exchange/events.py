"""
Exchange event records.

Field order is significant and matches the published event layouts.
"""

from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class AddLiquidityEvent:
    asset_a: str
    asset_b: str
    amount_a: int
    amount_b: int
    minted: int
    recipient: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "AddLiquidity",
            "assetA": self.asset_a,
            "assetB": self.asset_b,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "minted": self.minted,
            "recipient": self.recipient,
        }


@dataclass(frozen=True)
class RemoveLiquidityEvent:
    share_amount: int
    amount_a: int
    amount_b: int
    recipient: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "RemoveLiquidity",
            "shareAmount": self.share_amount,
            "amountA": self.amount_a,
            "amountB": self.amount_b,
            "recipient": self.recipient,
        }


@dataclass(frozen=True)
class SwapEvent:
    asset_in: str
    amount_in: int
    asset_out: str
    amount_out: int
    fee_asset: str
    recipient: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Swap",
            "assetIn": self.asset_in,
            "amountIn": self.amount_in,
            "assetOut": self.asset_out,
            "amountOut": self.amount_out,
            "feeAsset": self.fee_asset,
            "recipient": self.recipient,
        }


@dataclass(frozen=True)
class ShareTransferEvent:
    amount: int
    sender: str
    recipient: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "ShareTransfer",
            "amount": self.amount,
            "from": self.sender,
            "to": self.recipient,
        }


@dataclass(frozen=True)
class PairCreatedEvent:
    asset_a: str
    asset_b: str
    pool: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "PairCreated",
            "assetA": self.asset_a,
            "assetB": self.asset_b,
            "pool": self.pool,
        }
