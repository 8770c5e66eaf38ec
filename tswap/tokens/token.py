"""
Fungible Token Ledger

Implements an in-memory fungible token with an ERC-20–style interface:
  - balance_of / allowance / total_supply
  - transfer, approve, transfer_from
  - mint (issuer-side, used by the staking engine's reward token)

Amounts are non-negative integers in the token's smallest unit.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from ..exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    TransferFailed,
)
from ..logger import get_logger

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  EVENTS
# ══════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TransferEvent:
    """Emitted on every successful transfer (mint: sender is None)."""
    token_symbol: str
    sender: Optional[str]
    recipient: Optional[str]
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Transfer",
            "token": self.token_symbol,
            "from": self.sender,
            "to": self.recipient,
            "amount": self.amount,
        }


@dataclass(frozen=True)
class ApprovalEvent:
    """Emitted on every successful approve."""
    token_symbol: str
    owner: str
    spender: str
    amount: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event": "Approval",
            "token": self.token_symbol,
            "owner": self.owner,
            "spender": self.spender,
            "amount": self.amount,
        }


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class Token:
    """
    Fungible token ledger.

    Mirrors ERC-20 semantics:
        - balance_of(address) → int
        - transfer(sender, recipient, amount)
        - approve(owner, spender, amount)
        - transfer_from(spender, sender, recipient, amount)
        - total_supply → int
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        total_supply: int = 0,
        deployer: Optional[str] = None,
        *,
        address: Optional[str] = None,
    ):
        if not name:
            raise InvalidAmount("Token name cannot be empty")
        if not symbol:
            raise InvalidAmount("Token symbol cannot be empty")
        if total_supply < 0:
            raise InvalidAmount("Total supply cannot be negative")

        self.name = name
        self.symbol = symbol
        self.address = address or symbol
        self.deployer = deployer
        self._total_supply = total_supply

        self._balances: Dict[str, int] = {}
        self._allowances: Dict[Tuple[str, str], int] = {}  # (owner, spender)
        self._events: List[Any] = []

        if total_supply > 0 and deployer:
            self._balances[deployer] = total_supply

        logger.debug("Token deployed: %s (%s), supply=%d", symbol, name, total_supply)

    # ── Read-only views ───────────────────────────────────────────────

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, address: str) -> int:
        return self._balances.get(address, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    @property
    def events(self) -> List[Any]:
        return list(self._events)

    # ── Core ERC-20 operations ────────────────────────────────────────

    def transfer(self, sender: str, recipient: str, amount: int) -> TransferEvent:
        """Move *amount* from *sender* to *recipient*."""
        if amount < 0:
            raise TransferFailed(f"Transfer amount cannot be negative: {amount}")
        if not recipient:
            raise TransferFailed("Transfer to empty address")

        bal = self.balance_of(sender)
        if bal < amount:
            raise InsufficientBalance(
                f"{sender} balance {bal} < transfer amount {amount} {self.symbol}"
            )

        self._balances[sender] = bal - amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TransferEvent(self.symbol, sender, recipient, amount)
        self._events.append(event)
        return event

    def approve(self, owner: str, spender: str, amount: int) -> ApprovalEvent:
        """Set spender allowance (overwrites)."""
        if amount < 0:
            raise InvalidAmount("Allowance amount cannot be negative")

        self._allowances[(owner, spender)] = amount

        event = ApprovalEvent(self.symbol, owner, spender, amount)
        self._events.append(event)
        logger.debug("Approve: %s → %s allowance=%d %s", owner, spender, amount, self.symbol)
        return event

    def transfer_from(
        self,
        spender: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> TransferEvent:
        """Transfer on behalf of *sender* using spender's allowance."""
        allow = self.allowance(sender, spender)
        if allow < amount:
            raise InsufficientAllowance(
                f"Allowance {allow} < transfer amount {amount} {self.symbol}"
            )

        event = self.transfer(sender, recipient, amount)
        self._allowances[(sender, spender)] = allow - amount
        return event

    # ── Issuance ──────────────────────────────────────────────────────

    def mint(self, recipient: str, amount: int) -> TransferEvent:
        """Create *amount* new units for *recipient*."""
        if amount < 0:
            raise InvalidAmount(f"Mint amount cannot be negative: {amount}")

        self._total_supply += amount
        self._balances[recipient] = self.balance_of(recipient) + amount

        event = TransferEvent(self.symbol, None, recipient, amount)
        self._events.append(event)
        return event

    # ── Journal support ───────────────────────────────────────────────

    def snapshot(self) -> Tuple[int, Dict[str, int], Dict[Tuple[str, str], int], int]:
        """Capture ledger state so a failed atomic section can restore it."""
        return (
            self._total_supply,
            dict(self._balances),
            dict(self._allowances),
            len(self._events),
        )

    def restore(self, state: Tuple[int, Dict[str, int], Dict[Tuple[str, str], int], int]) -> None:
        total_supply, balances, allowances, event_count = state
        self._total_supply = total_supply
        self._balances = dict(balances)
        self._allowances = dict(allowances)
        del self._events[event_count:]

    # ── Serialization ─────────────────────────────────────────────────

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "symbol": self.symbol,
            "address": self.address,
            "totalSupply": self._total_supply,
            "deployer": self.deployer,
            "holders": len([b for b in self._balances.values() if b > 0]),
        }

    def __repr__(self) -> str:
        return f"<Token {self.symbol} supply={self._total_supply}>"
