"""
TSwap Reserve Pair Engine

Two-asset constant-product pool with a proportional share ledger:
  - Add liquidity: both nominal amounts are absorbed unconditionally; shares
    are minted at the worse of the two ratios (off-ratio deposits donate
    value to existing holders, no refund, no minimum-liquidity floor)
  - Remove liquidity: pro-rata payout of both reserves, floored
  - Swap: x*y=k with a fixed 997/1000 fee taken on either the input or the
    output leg, chosen by the caller; the full input stays in reserves
  - Price query at a fixed 10^9 scale
  - Share transfer between holders

Either leg may be the chain's native unit. A native leg's amount is the
value attached to the call; anything attached beyond what the formula
consumes is reported back as `refund` for the calling wrapper to return.

Execution model:
  - Validation happens before any mutation
  - State is mutated before any outgoing transfer, so a re-entrant call
    made from a receiver observes post-mutation reserves
  - Every mutating call is one atomic section: on failure the pool state
    and all transfers made inside the call are restored
"""

from __future__ import annotations

import copy
import hashlib
import json
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from ..constants import (
    FEE_DENOMINATOR,
    FEE_NUMERATOR,
    LP_TOKEN_NAME,
    LP_TOKEN_SYMBOL,
    PRICE_SCALE,
)
from ..crypto.address import derive_address, is_native, is_null, same_address
from ..exceptions import (
    IdenticalAssets,
    InsufficientOutput,
    InsufficientShares,
    InvalidAmount,
    InvalidState,
    TransferFailed,
    UnknownAsset,
    ZeroAddress,
)
from ..logger import get_logger
from ..tokens.bank import AssetTransfer
from .amm_math import isqrt, min_int
from .events import (
    AddLiquidityEvent,
    RemoveLiquidityEvent,
    ShareTransferEvent,
    SwapEvent,
)

logger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class LegKind(str, Enum):
    """How value for one side of the pair arrives and leaves."""
    LEDGER = "ledger"   # separately tracked token, pulled via allowance
    NATIVE = "native"   # chain's native unit, attached to the call


# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

@dataclass
class PairState:
    """
    State of a reserve pair.

    Invariant: total_shares == sum(share_balances.values()).
    """
    asset_a: str
    asset_b: str
    address: str

    reserve_a: int = 0
    reserve_b: int = 0
    total_shares: int = 0
    share_balances: Dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class LiquidityAdded:
    amount_a: int
    amount_b: int
    minted: int
    refund: int = 0


@dataclass(frozen=True)
class LiquidityRemoved:
    amount_a: int
    amount_b: int


@dataclass(frozen=True)
class SwapResult:
    amount_in: int
    amount_out: int
    refund: int = 0


# ---------------------------------------------------------------------------
# Swap math
# ---------------------------------------------------------------------------

def apply_fee(amount: int) -> int:
    """floor(amount * 997 / 1000)."""
    return amount * FEE_NUMERATOR // FEE_DENOMINATOR


def constant_product_out(amount_in: int, reserve_in: int, reserve_out: int) -> int:
    """floor(amount_in * reserve_out / (reserve_in + amount_in)); 0 on an empty denominator."""
    denominator = reserve_in + amount_in
    if denominator == 0:
        return 0
    return amount_in * reserve_out // denominator


def swap_output(
    amount_in: int,
    reserve_in: int,
    reserve_out: int,
    fee_on_input: bool,
) -> int:
    """
    Output of an exact-in swap.

    Fee on input:  out = floor(eff * R_out / (R_in + eff)), eff = floor(in * 997 / 1000)
    Fee on output: out = floor(floor(in * R_out / (R_in + in)) * 997 / 1000)
    """
    if fee_on_input:
        return constant_product_out(apply_fee(amount_in), reserve_in, reserve_out)
    return apply_fee(constant_product_out(amount_in, reserve_in, reserve_out))


# ---------------------------------------------------------------------------
# Reserve pair engine
# ---------------------------------------------------------------------------

class ReservePair:
    """
    Single constant-product pool engine.

    One class serves both variants: the kind of each leg is derived from
    its asset identifier (the native sentinel makes a NATIVE leg).
    """

    name = LP_TOKEN_NAME
    symbol = LP_TOKEN_SYMBOL

    def __init__(
        self,
        asset_a: str,
        asset_b: str,
        transfers: AssetTransfer,
        *,
        address: Optional[str] = None,
    ):
        if is_null(asset_a) or is_null(asset_b):
            raise ZeroAddress("Pair assets must be non-null")
        if same_address(asset_a, asset_b):
            raise IdenticalAssets(f"Pair assets are identical: {asset_a}")

        self.state = PairState(
            asset_a=asset_a,
            asset_b=asset_b,
            address=address or derive_address("pair", asset_a, asset_b),
        )
        self.legs: Tuple[LegKind, LegKind] = (
            LegKind.NATIVE if is_native(asset_a) else LegKind.LEDGER,
            LegKind.NATIVE if is_native(asset_b) else LegKind.LEDGER,
        )
        self._transfers = transfers
        self._events: List[Any] = []
        transfers.enlist(self._snapshot, self._restore)

        logger.debug("Pair %s initialized: %s/%s", self.address, asset_a, asset_b)

    # -- Read-only views ----------------------------------------------------

    @property
    def address(self) -> str:
        return self.state.address

    @property
    def asset_a(self) -> str:
        return self.state.asset_a

    @property
    def asset_b(self) -> str:
        return self.state.asset_b

    @property
    def assets(self) -> Tuple[str, str]:
        return self.state.asset_a, self.state.asset_b

    @property
    def reserves(self) -> Tuple[int, int]:
        return self.state.reserve_a, self.state.reserve_b

    @property
    def total_shares(self) -> int:
        return self.state.total_shares

    @property
    def has_native_leg(self) -> bool:
        return LegKind.NATIVE in self.legs

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    def balance_of(self, holder: str) -> int:
        return self.state.share_balances.get(holder, 0)

    # -- Atomic section -----------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator[PairState]:
        """
        Mutations, events and transfers inside either all apply or none do.

        The section belongs to the shared asset-transfer collaborator, so a
        failure also undoes whatever a re-entrant receiver did to other
        enlisted engines. Sections nest; the router wraps an engine call
        together with the native refund that follows it.
        """
        with self._transfers.atomic():
            yield self.state

    def _snapshot(self) -> Tuple[PairState, int]:
        return copy.deepcopy(self.state), len(self._events)

    def _restore(self, saved: Tuple[PairState, int]) -> None:
        state, event_count = saved
        # in place so nested callers keep a valid reference
        vars(self.state).update(vars(copy.deepcopy(state)))
        del self._events[event_count:]

    # -- Helpers ------------------------------------------------------------

    def _leg_index(self, asset: str) -> int:
        if same_address(asset, self.state.asset_a):
            return 0
        if same_address(asset, self.state.asset_b):
            return 1
        raise UnknownAsset(f"Asset {asset} is not part of pair {self.address}")

    def _reserve(self, index: int) -> int:
        return self.state.reserve_a if index == 0 else self.state.reserve_b

    def _set_reserve(self, index: int, value: int) -> None:
        if index == 0:
            self.state.reserve_a = value
        else:
            self.state.reserve_b = value

    def _asset(self, index: int) -> str:
        return self.state.asset_a if index == 0 else self.state.asset_b

    def _leg_amount(self, index: int, amount: Optional[int], value: int) -> int:
        """Nominal amount for one leg; a native leg defaults to the attached value."""
        if amount is None:
            if self.legs[index] is LegKind.NATIVE:
                return value
            raise InvalidAmount(f"Amount required for ledger asset {self._asset(index)}")
        return amount

    def _check_attached_value(self, value: int, native_amount: int, accepts_native: bool) -> None:
        if value < 0:
            raise InvalidAmount(f"Attached value cannot be negative: {value}")
        if value > 0 and not accepts_native:
            raise InvalidAmount("Native value attached to a call with no native input leg")
        if native_amount > value:
            raise TransferFailed(
                f"Native amount {native_amount} exceeds attached value {value}"
            )

    def _pull_leg(self, index: int, sender: str, amount: int, value: int) -> None:
        """Bring one leg's input into the pool; a native leg takes the whole attached value."""
        if self.legs[index] is LegKind.NATIVE:
            self._transfers.pull(self._asset(index), sender, value, to=self.address)
        else:
            self._transfers.pull(self._asset(index), sender, amount, to=self.address)

    def _push_leg(self, index: int, to: str, amount: int) -> None:
        self._transfers.push(self._asset(index), to, amount, source=self.address)

    # -- Liquidity ----------------------------------------------------------

    def mint_amount(self, amount_a: int, amount_b: int) -> int:
        """Shares a deposit of (amount_a, amount_b) would mint right now."""
        st = self.state
        if st.total_shares == 0:
            return isqrt(amount_a * amount_b)
        return min_int(
            amount_a * st.total_shares // st.reserve_a,
            amount_b * st.total_shares // st.reserve_b,
        )

    def add_liquidity(
        self,
        sender: str,
        amount_a: Optional[int],
        amount_b: Optional[int],
        recipient: str,
        *,
        value: int = 0,
    ) -> LiquidityAdded:
        """
        Deposit both assets and mint shares to *recipient*.

        The full nominal amounts enter the reserves whatever the current
        ratio; the minted count may be zero.

        Raises:
            InvalidAmount: a leg amount is not positive
            ZeroAddress: recipient is null
            TransferFailed: a pull failed or native value is short
        """
        amount_a = self._leg_amount(0, amount_a, value)
        amount_b = self._leg_amount(1, amount_b, value)
        if amount_a <= 0 or amount_b <= 0:
            raise InvalidAmount(f"Liquidity amounts must be positive: ({amount_a}, {amount_b})")
        if is_null(recipient):
            raise ZeroAddress("Liquidity recipient must be non-null")

        native_amount = sum(
            amt for kind, amt in zip(self.legs, (amount_a, amount_b)) if kind is LegKind.NATIVE
        )
        self._check_attached_value(value, native_amount, self.has_native_leg)

        minted = self.mint_amount(amount_a, amount_b)

        with self.atomic() as st:
            st.reserve_a += amount_a
            st.reserve_b += amount_b
            st.total_shares += minted
            st.share_balances[recipient] = st.share_balances.get(recipient, 0) + minted

            self._pull_leg(0, sender, amount_a, value)
            self._pull_leg(1, sender, amount_b, value)

        self._events.append(AddLiquidityEvent(
            st.asset_a, st.asset_b, amount_a, amount_b, minted, recipient,
        ))
        if minted == 0:
            logger.warning(
                "Pair %s absorbed (%d, %d) from %s without minting shares",
                self.address, amount_a, amount_b, sender,
            )
        else:
            logger.info(
                "Pair %s add liquidity: (%d, %d) minted=%d → %s",
                self.address, amount_a, amount_b, minted, recipient,
            )
        return LiquidityAdded(amount_a, amount_b, minted, value - native_amount)

    def remove_liquidity(self, sender: str, share_amount: int, recipient: str) -> LiquidityRemoved:
        """
        Burn *share_amount* of the sender's shares and pay out the
        proportional (floored) slice of both reserves to *recipient*.
        """
        if share_amount <= 0:
            raise InvalidAmount(f"Share amount must be positive: {share_amount}")
        if is_null(recipient):
            raise ZeroAddress("Liquidity recipient must be non-null")
        balance = self.balance_of(sender)
        if balance < share_amount:
            raise InsufficientShares(f"{sender} holds {balance} shares < {share_amount}")

        st = self.state
        amount_a = share_amount * st.reserve_a // st.total_shares
        amount_b = share_amount * st.reserve_b // st.total_shares

        with self.atomic() as st:
            st.share_balances[sender] = balance - share_amount
            st.total_shares -= share_amount
            st.reserve_a -= amount_a
            st.reserve_b -= amount_b

            self._push_leg(0, recipient, amount_a)
            self._push_leg(1, recipient, amount_b)

        self._events.append(RemoveLiquidityEvent(share_amount, amount_a, amount_b, recipient))
        logger.info(
            "Pair %s remove liquidity: burned=%d paid=(%d, %d) → %s",
            self.address, share_amount, amount_a, amount_b, recipient,
        )
        return LiquidityRemoved(amount_a, amount_b)

    # -- Swap ---------------------------------------------------------------

    def quote(self, asset_in: str, amount_in: int, fee_asset: str) -> int:
        """
        Output a swap would pay right now. Does NOT mutate pool state.

        Raises the same validation errors as swap().
        """
        index_in = self._leg_index(asset_in)
        index_fee = self._leg_index(fee_asset)
        if amount_in <= 0:
            raise InvalidAmount(f"Swap amount must be positive: {amount_in}")

        amount_out = swap_output(
            amount_in,
            self._reserve(index_in),
            self._reserve(1 - index_in),
            fee_on_input=index_fee == index_in,
        )
        if amount_out == 0:
            raise InsufficientOutput(
                f"Swap of {amount_in} {asset_in} would pay out nothing"
            )
        return amount_out

    def swap(
        self,
        sender: str,
        asset_in: str,
        amount_in: Optional[int],
        fee_asset: str,
        recipient: str,
        *,
        value: int = 0,
    ) -> SwapResult:
        """
        Execute an exact-in swap.

        Args:
            sender: account the input is pulled from
            asset_in: one of the pair's assets
            amount_in: exact input (None on a native input leg = attached value)
            fee_asset: leg that carries the 0.3% fee (input or output)
            recipient: receives the output asset

        Raises:
            UnknownAsset, InvalidAmount, InsufficientOutput, ZeroAddress, TransferFailed
        """
        index_in = self._leg_index(asset_in)
        self._leg_index(fee_asset)
        amount_in = self._leg_amount(index_in, amount_in, value)
        if is_null(recipient):
            raise ZeroAddress("Swap recipient must be non-null")

        native_in = self.legs[index_in] is LegKind.NATIVE
        amount_out = self.quote(asset_in, amount_in, fee_asset)
        self._check_attached_value(value, amount_in if native_in else 0, native_in)

        index_out = 1 - index_in
        with self.atomic():
            self._set_reserve(index_in, self._reserve(index_in) + amount_in)
            self._set_reserve(index_out, self._reserve(index_out) - amount_out)

            self._pull_leg(index_in, sender, amount_in, value)
            self._push_leg(index_out, recipient, amount_out)

        asset_out = self._asset(index_out)
        self._events.append(SwapEvent(
            asset_in, amount_in, asset_out, amount_out, fee_asset, recipient,
        ))
        logger.info(
            "Pair %s swap: %d %s → %d %s (fee on %s) → %s",
            self.address, amount_in, asset_in, amount_out, asset_out, fee_asset, recipient,
        )
        refund = value - amount_in if native_in else 0
        return SwapResult(amount_in, amount_out, refund)

    # -- Price --------------------------------------------------------------

    def get_price(self, asset: str) -> int:
        """floor(other_reserve * 10^9 / this_reserve)."""
        index = self._leg_index(asset)
        this_reserve = self._reserve(index)
        if this_reserve == 0:
            raise InvalidState(f"Reserve of {asset} is zero; price undefined")
        return self._reserve(1 - index) * PRICE_SCALE // this_reserve

    # -- Share transfer -----------------------------------------------------

    def send_liquidity(self, amount: int, source: str, to: str) -> ShareTransferEvent:
        """Move shares between holders; reserves are untouched."""
        if amount <= 0:
            raise InvalidAmount(f"Share transfer amount must be positive: {amount}")
        if is_null(source):
            raise ZeroAddress("Share transfer from zero address")
        if is_null(to):
            raise ZeroAddress("Share transfer to zero address")
        balance = self.balance_of(source)
        if balance < amount:
            raise InsufficientShares(f"{source} holds {balance} shares < {amount}")

        st = self.state
        st.share_balances[source] = balance - amount
        st.share_balances[to] = st.share_balances.get(to, 0) + amount

        event = ShareTransferEvent(amount, source, to)
        self._events.append(event)
        logger.debug("Pair %s share transfer: %s → %s %d", self.address, source, to, amount)
        return event

    # -- Serialization ------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        st = self.state
        return {
            "address": st.address,
            "assetA": st.asset_a,
            "assetB": st.asset_b,
            "legs": [kind.value for kind in self.legs],
            "reserveA": st.reserve_a,
            "reserveB": st.reserve_b,
            "totalShares": st.total_shares,
            "shares": dict(sorted(st.share_balances.items())),
        }

    def state_hash(self) -> str:
        """Deterministic digest of the pool state, consensus-safe."""
        raw = json.dumps(self.to_dict(), sort_keys=True).encode()
        return hashlib.blake2b(raw, digest_size=32).hexdigest()

    def __repr__(self) -> str:
        st = self.state
        return (
            f"<ReservePair {st.asset_a}/{st.asset_b} "
            f"reserves=({st.reserve_a}, {st.reserve_b}) shares={st.total_shares}>"
        )
