"""
TSwap Pair Registry

Creates reserve pairs and resolves an unordered asset pair to its pool.
Pool addresses are deterministic: blake2b over the canonically ordered
asset identifiers, truncated to 20 bytes and EIP-55 checksummed, so the
same pair always lands at the same address regardless of argument order.
"""

from typing import Dict, List, Optional, Tuple

from ..constants import NATIVE_ASSET
from ..crypto.address import derive_address, is_null, same_address
from ..exceptions import IdenticalAssets, PairAlreadyExists, PairNotFound, ZeroAddress
from ..logger import get_logger
from ..tokens.bank import AssetTransfer
from .events import PairCreatedEvent
from .pair import ReservePair

logger = get_logger(__name__)


def pair_key(asset_a: str, asset_b: str) -> Tuple[str, str]:
    """Order-independent registry key."""
    a, b = asset_a.lower(), asset_b.lower()
    return (a, b) if a < b else (b, a)


def pool_address(asset_a: str, asset_b: str) -> str:
    """Deterministic pool address for the unordered pair."""
    return derive_address("pair", *pair_key(asset_a, asset_b))


class PairRegistry:
    """Registry of every reserve pair sharing one asset-transfer collaborator."""

    def __init__(self, transfers: AssetTransfer):
        self.transfers = transfers
        self._pairs: Dict[Tuple[str, str], ReservePair] = {}
        self._events: List[PairCreatedEvent] = []
        transfers.enlist(self._snapshot, self._restore)

    @property
    def count(self) -> int:
        return len(self._pairs)

    @property
    def events(self) -> List[PairCreatedEvent]:
        return list(self._events)

    def pairs(self) -> List[ReservePair]:
        """All pairs in creation order."""
        return list(self._pairs.values())

    def register(self, asset_a: str, asset_b: str) -> ReservePair:
        """
        Create the pair (asset_a, asset_b).

        Raises:
            ZeroAddress: either asset is null
            IdenticalAssets: both identifiers name the same asset
            PairAlreadyExists: the unordered pair is already registered
        """
        if is_null(asset_a) or is_null(asset_b):
            raise ZeroAddress("Pair assets must be non-null")
        if same_address(asset_a, asset_b):
            raise IdenticalAssets(f"Pair assets are identical: {asset_a}")

        key = pair_key(asset_a, asset_b)
        if key in self._pairs:
            raise PairAlreadyExists(
                f"Pair {asset_a}/{asset_b} already exists at {self._pairs[key].address}"
            )

        pair = ReservePair(
            asset_a, asset_b, self.transfers, address=pool_address(asset_a, asset_b),
        )
        self._pairs[key] = pair
        self._events.append(PairCreatedEvent(asset_a, asset_b, pair.address))

        logger.info("Pair created: %s/%s → %s", asset_a, asset_b, pair.address)
        return pair

    def register_native(self, token: str) -> ReservePair:
        """Create the pair (token, native unit)."""
        if is_null(token):
            raise ZeroAddress("Token address must be non-null")
        return self.register(token, NATIVE_ASSET)

    def lookup(self, asset_a: str, asset_b: str) -> Optional[ReservePair]:
        if is_null(asset_a) or is_null(asset_b):
            return None
        return self._pairs.get(pair_key(asset_a, asset_b))

    def lookup_or_raise(self, asset_a: str, asset_b: str) -> ReservePair:
        pair = self.lookup(asset_a, asset_b)
        if pair is None:
            raise PairNotFound(f"No pair registered for {asset_a}/{asset_b}")
        return pair

    def exists(self, asset_a: str, asset_b: str) -> bool:
        return self.lookup(asset_a, asset_b) is not None

    # pairs created inside a failed atomic section are dropped again
    def _snapshot(self) -> Tuple[Dict[Tuple[str, str], ReservePair], int]:
        return dict(self._pairs), len(self._events)

    def _restore(self, saved: Tuple[Dict[Tuple[str, str], ReservePair], int]) -> None:
        pairs, event_count = saved
        self._pairs.clear()
        self._pairs.update(pairs)
        del self._events[event_count:]

    def __repr__(self) -> str:
        return f"<PairRegistry pairs={len(self._pairs)}>"
