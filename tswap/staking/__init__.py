"""
TSwap staking

Provides:
  - StakingEngine : single-asset pools paying TSW rewards per block
  - StakingPool / StakerRecord : pool and position state
  - Event records : PoolCreated, Deposit, Withdraw, HarvestRewards
"""

from .types import (
    StakingPool,
    StakerRecord,
    WithdrawalResult,
    PoolCreatedEvent,
    DepositEvent,
    WithdrawEvent,
    HarvestRewardsEvent,
)
from .engine import StakingEngine, accrued_reward

__all__ = [
    "StakingEngine",
    "accrued_reward",
    "StakingPool",
    "StakerRecord",
    "WithdrawalResult",
    "PoolCreatedEvent",
    "DepositEvent",
    "WithdrawEvent",
    "HarvestRewardsEvent",
]
