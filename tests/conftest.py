"""
Shared fixtures for the TSwap test suite.
"""

import pytest

from tswap.chain import BlockClock
from tswap.constants import NATIVE_ASSET
from tswap.exchange import PairRegistry, ReservePair, Router
from tswap.staking import StakingEngine
from tswap.tokens import AssetBank, Token

# ---------------------------------------------------------------------------
# Identities
# ---------------------------------------------------------------------------
OWNER = "0x1111111111111111111111111111111111111111"
ALICE = "0x2222222222222222222222222222222222222222"
BOB = "0x3333333333333333333333333333333333333333"
CAROL = "0x4444444444444444444444444444444444444444"

TOKEN_A = "0x00000000000000000000000000000000000000a1"
TOKEN_B = "0x00000000000000000000000000000000000000b2"
TOKEN_C = "0x00000000000000000000000000000000000000c3"

SUPPLY = 10 ** 12
ALLOWANCE = 10 ** 12


def fund(bank: AssetBank, asset: str, holder: str, amount: int) -> None:
    """Give *holder* *amount* of *asset* out of the owner's genesis supply."""
    if asset == NATIVE_ASSET:
        bank.credit_native(holder, amount)
    else:
        bank.token(asset).transfer(OWNER, holder, amount)


def approve_all(bank: AssetBank, holder: str, spender: str, *assets: str) -> None:
    for asset in assets:
        bank.token(asset).approve(holder, spender, ALLOWANCE)


@pytest.fixture
def bank():
    bank = AssetBank()
    for name, symbol, address in (
        ("Token A", "TKA", TOKEN_A),
        ("Token B", "TKB", TOKEN_B),
        ("Token C", "TKC", TOKEN_C),
    ):
        bank.register_token(Token(name, symbol, SUPPLY, OWNER, address=address))
    bank.credit_native(OWNER, SUPPLY)
    return bank


@pytest.fixture
def pair(bank):
    """TOKEN_A / TOKEN_B pair; OWNER has approved it for both tokens."""
    pair = ReservePair(TOKEN_A, TOKEN_B, bank)
    approve_all(bank, OWNER, pair.address, TOKEN_A, TOKEN_B)
    return pair


@pytest.fixture
def native_pair(bank):
    """TOKEN_A / native pair; OWNER has approved it for TOKEN_A."""
    pair = ReservePair(TOKEN_A, NATIVE_ASSET, bank)
    approve_all(bank, OWNER, pair.address, TOKEN_A)
    return pair


@pytest.fixture
def registry(bank):
    return PairRegistry(bank)


@pytest.fixture
def router(registry):
    return Router(registry)


@pytest.fixture
def clock():
    return BlockClock(auto_mine=True)


@pytest.fixture
def staking(bank, clock):
    engine = StakingEngine(OWNER, 10, bank, clock)
    for holder in (OWNER, ALICE, BOB):
        if holder != OWNER:
            fund(bank, TOKEN_A, holder, 100_000)
        approve_all(bank, holder, engine.address, TOKEN_A)
    return engine
