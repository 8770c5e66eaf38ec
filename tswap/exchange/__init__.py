"""
TSwap exchange

Provides:
  - ReservePair  : constant-product pool with a proportional share ledger
  - PairRegistry : deterministic pair creation and lookup
  - Router       : stateless forwarding plus native-unit refunds
"""

from .amm_math import isqrt, min_int
from .events import (
    AddLiquidityEvent,
    RemoveLiquidityEvent,
    SwapEvent,
    ShareTransferEvent,
    PairCreatedEvent,
)
from .pair import (
    LegKind,
    PairState,
    ReservePair,
    LiquidityAdded,
    LiquidityRemoved,
    SwapResult,
    swap_output,
)
from .factory import PairRegistry, pool_address
from .router import Router

__all__ = [
    "isqrt",
    "min_int",
    "AddLiquidityEvent",
    "RemoveLiquidityEvent",
    "SwapEvent",
    "ShareTransferEvent",
    "PairCreatedEvent",
    "LegKind",
    "PairState",
    "ReservePair",
    "LiquidityAdded",
    "LiquidityRemoved",
    "SwapResult",
    "swap_output",
    "PairRegistry",
    "pool_address",
    "Router",
]
