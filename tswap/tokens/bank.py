"""
Asset Transfer Interface & In-Memory Asset Bank

The engines move value only through an AssetTransfer collaborator:

    pull(asset, source, amount, to=pool)   caller → pool
    push(asset, to, amount, source=pool)   pool → recipient

Each call either completes or raises TransferFailed without partial
effect. atomic() groups several calls into one all-or-nothing section.
Engines enlist their own snapshot/restore pair at construction, so a
section covers every balance AND the state of every enlisted engine: if
anything inside raises, all of it is put back before the exception
propagates, including what a re-entrant receiver did to some other
engine. Sections nest.

AssetBank is the in-memory implementation: a registry of Token ledgers
keyed by asset identifier plus native-unit balances, with receiver hooks
that fire when value is pushed to an address.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Tuple

from ..crypto.address import is_native, is_null
from ..exceptions import TransferFailed, TSwapException
from ..logger import get_logger
from .token import Token

logger = get_logger(__name__)

# (asset, source, amount); invoked after value lands at the hooked address
ReceiveHook = Callable[[str, str, int], None]


class AssetTransfer(ABC):
    """Value-movement collaborator consumed by both engines."""

    def __init__(self) -> None:
        self._participants: List[Tuple[Callable[[], Any], Callable[[Any], None]]] = []

    def enlist(self, snapshot: Callable[[], Any], restore: Callable[[Any], None]) -> None:
        """Make every atomic section opened here also cover an engine's own state."""
        self._participants.append((snapshot, restore))

    @abstractmethod
    def pull(self, asset: str, source: str, amount: int, *, to: str) -> None:
        """Move *amount* of *asset* from *source* into *to* (the engine)."""

    @abstractmethod
    def push(self, asset: str, to: str, amount: int, *, source: str) -> None:
        """Move *amount* of *asset* from *source* (the engine) to *to*."""

    @abstractmethod
    def snapshot(self) -> Any:
        """Opaque capture of every balance this collaborator owns."""

    @abstractmethod
    def restore(self, state: Any) -> None:
        """Return to a state captured by snapshot()."""

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """All-or-nothing section over balances and every enlisted engine."""
        balances = self.snapshot()
        saved = [(restore, take()) for take, restore in self._participants]
        try:
            yield
        except Exception:
            self.restore(balances)
            for restore, state in saved:
                restore(state)
            raise


class AssetBank(AssetTransfer):
    """
    In-memory asset-transfer collaborator.

    Ledger tokens are pulled with transfer_from (the receiving engine acts
    as spender, so holders approve it first). Native units accompany the
    call and need no allowance.
    """

    def __init__(self) -> None:
        super().__init__()
        self._tokens: Dict[str, Token] = {}
        self._native: Dict[str, int] = {}
        self._hooks: Dict[str, List[ReceiveHook]] = {}

    # ── Registry ──────────────────────────────────────────────────────

    def register_token(self, token: Token) -> Token:
        if is_null(token.address) or is_native(token.address):
            raise TransferFailed(f"Token address {token.address!r} is reserved")
        if token.address in self._tokens:
            raise TransferFailed(f"Token {token.address} already registered")
        self._tokens[token.address] = token
        logger.debug("Token registered in bank: %s (%s)", token.symbol, token.address)
        return token

    def token(self, asset: str) -> Token:
        token = self._tokens.get(asset)
        if token is None:
            raise TransferFailed(f"Asset {asset} is not registered")
        return token

    def balance_of(self, asset: str, holder: str) -> int:
        if is_native(asset):
            return self.native_balance_of(holder)
        return self.token(asset).balance_of(holder)

    # ── Native unit ───────────────────────────────────────────────────

    def native_balance_of(self, holder: str) -> int:
        return self._native.get(holder, 0)

    def credit_native(self, holder: str, amount: int) -> None:
        """Fund *holder* with native units (genesis allocation)."""
        if amount < 0:
            raise TransferFailed(f"Cannot credit a negative native amount: {amount}")
        self._native[holder] = self.native_balance_of(holder) + amount

    def _move_native(self, source: str, to: str, amount: int) -> None:
        bal = self.native_balance_of(source)
        if bal < amount:
            raise TransferFailed(f"{source} native balance {bal} < {amount}")
        self._native[source] = bal - amount
        self._native[to] = self.native_balance_of(to) + amount

    # ── Receiver hooks ────────────────────────────────────────────────

    def on_receive(self, address: str, callback: ReceiveHook) -> None:
        """Run *callback* whenever value is pushed to *address*."""
        self._hooks.setdefault(address, []).append(callback)

    def _notify(self, to: str, asset: str, source: str, amount: int) -> None:
        for callback in list(self._hooks.get(to, ())):
            try:
                callback(asset, source, amount)
            except TransferFailed:
                raise
            except TSwapException as e:
                raise TransferFailed(f"Receiver {to} rejected {asset}: {e}") from e

    # ── Transfers ─────────────────────────────────────────────────────

    def pull(self, asset: str, source: str, amount: int, *, to: str) -> None:
        if amount < 0:
            raise TransferFailed(f"Cannot pull a negative amount: {amount}")
        if amount == 0:
            return
        # both ledgers validate before writing
        if is_native(asset):
            self._move_native(source, to, amount)
        else:
            self.token(asset).transfer_from(to, source, to, amount)

    def push(self, asset: str, to: str, amount: int, *, source: str) -> None:
        if amount < 0:
            raise TransferFailed(f"Cannot push a negative amount: {amount}")
        if is_null(to):
            raise TransferFailed("Cannot push to the zero address")
        if amount == 0:
            return
        with self.atomic():
            if is_native(asset):
                self._move_native(source, to, amount)
            else:
                self.token(asset).transfer(source, to, amount)
            self._notify(to, asset, source, amount)

    # ── Journal ───────────────────────────────────────────────────────

    def snapshot(self) -> Dict[str, Any]:
        return {
            "native": dict(self._native),
            "tokens": {addr: token.snapshot() for addr, token in self._tokens.items()},
        }

    def restore(self, state: Dict[str, Any]) -> None:
        self._native = dict(state["native"])
        for addr, token_state in state["tokens"].items():
            self._tokens[addr].restore(token_state)

    def __repr__(self) -> str:
        return f"<AssetBank tokens={len(self._tokens)} native_holders={len(self._native)}>"
