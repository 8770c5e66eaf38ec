"""
TSwap Staking Reward Engine

Single-asset staking pools paying block-based rewards in the engine's own
reward token (TitaniumSweet / TSW).

Accrual is lazy and non-checkpointed: nothing is computed on deposit. At
withdrawal a staker receives

    floor(amount_deposited * (current_block - last_action_block) * rate / total_staked)

where `last_action_block` is the block of the staker's FIRST deposit and
`total_staked` is the pool total at the moment of the withdrawal. A staker
who tops up keeps the original start block, so the larger deposit is
credited over the whole interval.

Withdrawals are gated by a quorum: the pool must have seen at least
STAKER_QUORUM distinct stakers. Registry membership never shrinks.
"""

import copy
import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple

from ..chain import BlockClock
from ..constants import (
    REWARD_TOKEN_NAME,
    REWARD_TOKEN_SYMBOL,
    STAKER_QUORUM,
)
from ..crypto.address import derive_address, is_null, same_address
from ..exceptions import (
    InsufficientStakerQuorum,
    InvalidAmount,
    NotAuthorized,
    PoolNotFound,
    StakerNotFound,
    ZeroAddress,
)
from ..logger import get_logger
from ..tokens.bank import AssetTransfer
from ..tokens.token import Token
from .types import (
    DepositEvent,
    HarvestRewardsEvent,
    PoolCreatedEvent,
    StakerRecord,
    StakingPool,
    WithdrawalResult,
    WithdrawEvent,
)

logger = get_logger(__name__)


def accrued_reward(
    amount_deposited: int,
    elapsed_blocks: int,
    rate_per_block: int,
    total_staked: int,
) -> int:
    """Lazy reward formula; zero when nothing is staked."""
    if total_staked == 0:
        return 0
    return amount_deposited * elapsed_blocks * rate_per_block // total_staked


class StakingEngine:
    """
    Staking pools plus the TSW reward token they mint.

    Pools are numbered from 0 in creation order. Only `owner` may create
    pools; anyone may deposit and withdraw.
    """

    def __init__(
        self,
        owner: str,
        reward_rate_per_block: int,
        transfers: AssetTransfer,
        clock: Optional[BlockClock] = None,
        *,
        address: Optional[str] = None,
    ):
        if is_null(owner):
            raise ZeroAddress("Staking owner must be non-null")
        if reward_rate_per_block < 0:
            raise InvalidAmount(f"Reward rate cannot be negative: {reward_rate_per_block}")

        self.owner = owner
        self.reward_rate_per_block = reward_rate_per_block
        self.address = address or derive_address("staking", owner)
        self.clock = clock or BlockClock()

        self._transfers = transfers
        self._pools: List[StakingPool] = []
        self._stakers: Dict[int, Dict[str, StakerRecord]] = {}
        self._events: List[Any] = []

        self.reward_token = Token(
            REWARD_TOKEN_NAME,
            REWARD_TOKEN_SYMBOL,
            deployer=self.address,
            address=self.address,
        )
        transfers.enlist(self._snapshot, self._restore)

        logger.info(
            "Staking engine %s deployed by %s (rate=%d/block)",
            self.address, owner, reward_rate_per_block,
        )

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def pool_count(self) -> int:
        return len(self._pools)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def get_pool(self, pool_id: int) -> StakingPool:
        if not 0 <= pool_id < len(self._pools):
            raise PoolNotFound(f"Staking pool {pool_id} does not exist")
        return self._pools[pool_id]

    def get_staker(self, pool_id: int, holder: str) -> StakerRecord:
        """Record of *holder* in *pool_id*; an empty record if never registered."""
        self.get_pool(pool_id)
        return self._stakers[pool_id].get(holder) or StakerRecord()

    def pending_reward(self, pool_id: int, holder: str) -> int:
        """Reward *holder* would harvest if withdrawing at the current block."""
        pool = self.get_pool(pool_id)
        record = self.get_staker(pool_id, holder)
        if not record.exists:
            return 0
        return accrued_reward(
            record.amount_deposited,
            self.clock.number - record.last_action_block,
            self.reward_rate_per_block,
            pool.total_staked,
        )

    # ── Atomic section ────────────────────────────────────────────────

    def _snapshot(self) -> Tuple[Any, ...]:
        return (
            copy.deepcopy(self._pools),
            copy.deepcopy(self._stakers),
            self.reward_token.snapshot(),
            self.clock.snapshot(),
            len(self._events),
        )

    def _restore(self, saved: Tuple[Any, ...]) -> None:
        pools, stakers, token_state, block, event_count = copy.deepcopy(saved)
        # in place, so records held by an outer call stay live
        del self._pools[len(pools):]
        for live, kept in zip(self._pools, pools):
            vars(live).update(vars(kept))
        for pool_id in list(self._stakers):
            if pool_id not in stakers:
                del self._stakers[pool_id]
        for pool_id, records in stakers.items():
            live_records = self._stakers.setdefault(pool_id, {})
            for holder in list(live_records):
                if holder not in records:
                    del live_records[holder]
            for holder, kept in records.items():
                if holder in live_records:
                    vars(live_records[holder]).update(vars(kept))
                else:
                    live_records[holder] = kept
        self.reward_token.restore(token_state)
        self.clock.restore(block)
        del self._events[event_count:]

    # ── Administration ────────────────────────────────────────────────

    def create_pool(self, sender: str, asset: str) -> int:
        """Open a new pool for *asset*. Owner only."""
        if not same_address(sender, self.owner):
            raise NotAuthorized(f"{sender} is not the staking owner")
        if is_null(asset):
            raise ZeroAddress("Staking asset must be non-null")

        pool_id = len(self._pools)
        self._pools.append(StakingPool(pool_id=pool_id, asset=asset))
        self._stakers[pool_id] = {}

        self._events.append(PoolCreatedEvent(pool_id))
        logger.info("Staking pool %d created for %s", pool_id, asset)
        return pool_id

    # ── Staking ───────────────────────────────────────────────────────

    def deposit(self, sender: str, pool_id: int, amount: int) -> DepositEvent:
        """
        Stake *amount* of the pool asset.

        The first deposit registers the sender and fixes its accrual start
        block; later deposits only grow the position.

        Raises:
            InvalidAmount: amount is not positive
            PoolNotFound: unknown pool id
            TransferFailed: the asset could not be pulled
        """
        if amount <= 0:
            raise InvalidAmount(f"Deposit amount must be positive: {amount}")
        pool = self.get_pool(pool_id)

        with self._transfers.atomic():
            block = self.clock.next_transaction()
            registry = self._stakers[pool_id]
            record = registry.get(sender)
            if record is None:
                registry[sender] = StakerRecord(
                    amount_deposited=amount,
                    last_action_block=block,
                    exists=True,
                )
                pool.stakers.append(sender)
            else:
                record.amount_deposited += amount
            pool.total_staked += amount

            self._transfers.pull(pool.asset, sender, amount, to=self.address)

        event = DepositEvent(sender, pool_id, amount)
        self._events.append(event)
        logger.info(
            "Deposit: %s staked %d in pool %d at block %d (total=%d)",
            sender, amount, pool_id, block, pool.total_staked,
        )
        return event

    def withdraw(self, sender: str, pool_id: int) -> WithdrawalResult:
        """
        Harvest the accrued reward and return the whole principal.

        The staker's record and registry slot persist with a zero deposit.

        Raises:
            PoolNotFound, StakerNotFound, InsufficientStakerQuorum, TransferFailed
        """
        pool = self.get_pool(pool_id)
        record = self._stakers[pool_id].get(sender)
        if record is None:
            raise StakerNotFound(f"{sender} has never staked in pool {pool_id}")
        if len(pool.stakers) < STAKER_QUORUM:
            raise InsufficientStakerQuorum(pool_id, len(pool.stakers), STAKER_QUORUM)

        with self._transfers.atomic():
            block = self.clock.next_transaction()
            principal = record.amount_deposited
            reward = accrued_reward(
                principal,
                block - record.last_action_block,
                self.reward_rate_per_block,
                pool.total_staked,
            )

            pool.total_staked -= principal
            record.amount_deposited = 0
            record.rewards = reward

            if reward > 0:
                self.reward_token.mint(sender, reward)
            self._transfers.push(pool.asset, sender, principal, source=self.address)

        self._events.append(WithdrawEvent(sender, pool_id, principal))
        self._events.append(HarvestRewardsEvent(sender, pool_id, reward))
        logger.info(
            "Withdraw: %s took %d principal + %d %s from pool %d at block %d",
            sender, principal, reward, REWARD_TOKEN_SYMBOL, pool_id, block,
        )
        return WithdrawalResult(reward=reward, principal=principal)

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "address": self.address,
            "owner": self.owner,
            "rewardRatePerBlock": self.reward_rate_per_block,
            "rewardSupply": self.reward_token.total_supply,
            "pools": [pool.to_dict() for pool in self._pools],
            "stakers": {
                str(pool_id): {
                    holder: record.to_dict()
                    for holder, record in sorted(records.items())
                }
                for pool_id, records in self._stakers.items()
            },
        }

    def state_hash(self) -> str:
        raw = json.dumps(self.to_dict(), sort_keys=True).encode()
        return hashlib.blake2b(raw, digest_size=32).hexdigest()

    def __repr__(self) -> str:
        return f"<StakingEngine pools={len(self._pools)} owner={self.owner}>"
