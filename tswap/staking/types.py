"""
Staking data types.

Pools, per-staker records, and the records the staking engine emits.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class StakingPool:
    """
    One staking pool.

    `stakers` is append-only: withdrawing zeroes the staker's deposit but
    never removes it from the registry, so the quorum count only grows.
    """
    pool_id: int
    asset: str
    total_staked: int = 0
    stakers: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "poolId": self.pool_id,
            "asset": self.asset,
            "totalStaked": self.total_staked,
            "stakers": list(self.stakers),
        }


@dataclass
class StakerRecord:
    """
    Per (pool, staker) position.

    `last_action_block` is set on the first deposit only; `rewards` holds the
    reward paid by the most recent withdrawal.
    """
    amount_deposited: int = 0
    last_action_block: int = 0
    rewards: int = 0
    exists: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amountDeposited": self.amount_deposited,
            "lastActionBlock": self.last_action_block,
            "rewards": self.rewards,
            "exists": self.exists,
        }


@dataclass(frozen=True)
class WithdrawalResult:
    reward: int
    principal: int


# ── Events ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class PoolCreatedEvent:
    pool_id: int

    def to_dict(self) -> Dict[str, Any]:
        return {"event": "PoolCreated", "poolId": self.pool_id}


@dataclass(frozen=True)
class DepositEvent:
    staker: str
    pool_id: int
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Deposit",
            "staker": self.staker,
            "poolId": self.pool_id,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class WithdrawEvent:
    staker: str
    pool_id: int
    principal: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Withdraw",
            "staker": self.staker,
            "poolId": self.pool_id,
            "principal": self.principal,
        }


@dataclass(frozen=True)
class HarvestRewardsEvent:
    staker: str
    pool_id: int
    reward: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "HarvestRewards",
            "staker": self.staker,
            "poolId": self.pool_id,
            "reward": self.reward,
        }
