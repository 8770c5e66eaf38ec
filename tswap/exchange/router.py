"""
TSwap Router

Stateless front door over the pair registry. Every call resolves the pair
for its asset arguments and forwards to the pair engine unchanged. The
native-unit wrappers additionally return any attached value the engine
did not consume, inside the same atomic section as the engine call.
"""

from typing import Optional

from ..constants import NATIVE_ASSET
from ..crypto.address import is_native, same_address
from ..exceptions import PairAlreadyExists
from ..logger import get_logger
from ..tokens.bank import AssetTransfer
from .events import ShareTransferEvent
from .factory import PairRegistry
from .pair import LiquidityAdded, LiquidityRemoved, ReservePair, SwapResult

logger = get_logger(__name__)


class Router:
    """Forwards user operations to the right ReservePair."""

    def __init__(self, registry: PairRegistry):
        self.registry = registry

    @property
    def transfers(self) -> AssetTransfer:
        return self.registry.transfers

    # ── Pool management ───────────────────────────────────────────────

    def create_pool(self, asset_a: str, asset_b: str) -> str:
        """Register a token/token pair; returns the pool address."""
        if self.registry.exists(asset_a, asset_b):
            raise PairAlreadyExists(f"Pair {asset_a}/{asset_b} already exists")
        return self.registry.register(asset_a, asset_b).address

    def create_pool_native(self, token: str) -> str:
        """Register a token/native pair; returns the pool address."""
        if self.registry.exists(token, NATIVE_ASSET):
            raise PairAlreadyExists(f"Native pair for {token} already exists")
        return self.registry.register_native(token).address

    def get_pair(self, asset_a: str, asset_b: str) -> ReservePair:
        return self.registry.lookup_or_raise(asset_a, asset_b)

    def get_pair_native(self, token: str) -> ReservePair:
        return self.registry.lookup_or_raise(token, NATIVE_ASSET)

    # ── Liquidity ─────────────────────────────────────────────────────

    def add_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        amount_a: int,
        amount_b: int,
        recipient: Optional[str] = None,
    ) -> LiquidityAdded:
        pair = self.get_pair(asset_a, asset_b)
        flipped = not same_address(pair.asset_a, asset_a)
        if flipped:
            amount_a, amount_b = amount_b, amount_a
        result = pair.add_liquidity(sender, amount_a, amount_b, recipient or sender)
        if flipped:
            result = LiquidityAdded(result.amount_b, result.amount_a, result.minted, result.refund)
        return result

    def add_liquidity_native(
        self,
        sender: str,
        token: str,
        amount_token: int,
        recipient: Optional[str] = None,
        *,
        value: int,
        amount_native: Optional[int] = None,
    ) -> LiquidityAdded:
        """
        Deposit *amount_token* plus native units from the attached *value*.

        Without *amount_native* the whole value is deposited; otherwise the
        unused remainder is sent back to the sender. Amounts come back as
        (token, native) in amount_a / amount_b whichever leg the pair
        stores the token in.
        """
        pair = self.get_pair_native(token)
        native_first = is_native(pair.asset_a)
        if native_first:
            amounts = (amount_native, amount_token)
        else:
            amounts = (amount_token, amount_native)
        with pair.atomic():
            result = pair.add_liquidity(sender, *amounts, recipient or sender, value=value)
            self._refund(pair, sender, result.refund)
        if native_first:
            result = LiquidityAdded(result.amount_b, result.amount_a, result.minted, result.refund)
        return result

    def remove_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        share_amount: int,
        recipient: Optional[str] = None,
    ) -> LiquidityRemoved:
        pair = self.get_pair(asset_a, asset_b)
        result = pair.remove_liquidity(sender, share_amount, recipient or sender)
        if not same_address(pair.asset_a, asset_a):
            result = LiquidityRemoved(result.amount_b, result.amount_a)
        return result

    def remove_liquidity_native(
        self,
        sender: str,
        token: str,
        share_amount: int,
        recipient: Optional[str] = None,
    ) -> LiquidityRemoved:
        """Returns (amount_token, amount_native) as amount_a / amount_b."""
        pair = self.get_pair_native(token)
        result = pair.remove_liquidity(sender, share_amount, recipient or sender)
        if is_native(pair.asset_a):
            result = LiquidityRemoved(result.amount_b, result.amount_a)
        return result

    # ── Swaps ─────────────────────────────────────────────────────────

    def swap(
        self,
        sender: str,
        asset_in: str,
        asset_out: str,
        fee_asset: str,
        amount_in: int,
        recipient: Optional[str] = None,
    ) -> SwapResult:
        pair = self.get_pair(asset_in, asset_out)
        return pair.swap(sender, asset_in, amount_in, fee_asset, recipient or sender)

    def swap_native_for_token(
        self,
        sender: str,
        token: str,
        fee_on_native: bool,
        recipient: Optional[str] = None,
        *,
        value: int,
        amount_in: Optional[int] = None,
    ) -> int:
        """
        Sell native units for *token*; returns the token output.

        Sells the whole attached *value* unless *amount_in* is given, in
        which case the remainder is sent back to the sender.
        """
        pair = self.get_pair_native(token)
        fee_asset = NATIVE_ASSET if fee_on_native else token
        with pair.atomic():
            result = pair.swap(
                sender, NATIVE_ASSET, amount_in, fee_asset, recipient or sender, value=value,
            )
            self._refund(pair, sender, result.refund)
        return result.amount_out

    def swap_token_for_native(
        self,
        sender: str,
        token: str,
        amount_in: int,
        fee_on_native: bool,
        recipient: Optional[str] = None,
    ) -> int:
        """Sell *amount_in* of *token* for native units; returns the native output."""
        pair = self.get_pair_native(token)
        fee_asset = NATIVE_ASSET if fee_on_native else token
        result = pair.swap(sender, token, amount_in, fee_asset, recipient or sender)
        return result.amount_out

    # ── Shares ────────────────────────────────────────────────────────

    def send_liquidity(
        self,
        sender: str,
        asset_a: str,
        asset_b: str,
        amount: int,
        to: str,
    ) -> ShareTransferEvent:
        return self.get_pair(asset_a, asset_b).send_liquidity(amount, sender, to)

    def send_liquidity_native(
        self,
        sender: str,
        token: str,
        amount: int,
        to: str,
    ) -> ShareTransferEvent:
        return self.get_pair_native(token).send_liquidity(amount, sender, to)

    # ── Prices ────────────────────────────────────────────────────────

    def get_price(self, asset: str, other: str) -> int:
        """Price of *asset* in units of *other*, scaled by 10^9."""
        return self.get_pair(asset, other).get_price(asset)

    def get_price_native(self, asset: str, token: str) -> int:
        """Price of *asset* (the token or the native sentinel) within the native pair of *token*."""
        return self.get_pair_native(token).get_price(asset)

    # ── Internals ─────────────────────────────────────────────────────

    def _refund(self, pair: ReservePair, to: str, amount: int) -> None:
        if amount <= 0:
            return
        self.transfers.push(NATIVE_ASSET, to, amount, source=pair.address)
        logger.debug("Refunded %d native units from %s to %s", amount, pair.address, to)

    def __repr__(self) -> str:
        return f"<Router registry={self.registry!r}>"
