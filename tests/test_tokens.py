"""
Test suite for the TSwap asset layer

Covers:
  - Token ledger: transfer, approve, transfer_from, mint, snapshots
  - AssetBank: registry, native units, pull/push, atomic sections, receiver hooks
  - Address helpers
"""

import pytest

from tswap.constants import NATIVE_ASSET, ZERO_ADDRESS
from tswap.crypto.address import derive_address, is_native, is_null, same_address
from tswap.exceptions import (
    InsufficientAllowance,
    InsufficientBalance,
    InvalidAmount,
    TransferFailed,
)
from tswap.tokens import ApprovalEvent, AssetBank, Token, TransferEvent

from conftest import ALICE, BOB, OWNER, TOKEN_A


# ══════════════════════════════════════════════════════════════════════
#  TOKEN
# ══════════════════════════════════════════════════════════════════════

class TestToken:

    def _token(self):
        return Token("Test Token", "TST", 1000, OWNER)

    def test_deployment(self):
        token = self._token()
        assert token.total_supply == 1000
        assert token.balance_of(OWNER) == 1000
        assert token.address == "TST"

    def test_invalid_metadata(self):
        with pytest.raises(InvalidAmount):
            Token("", "TST")
        with pytest.raises(InvalidAmount):
            Token("Test", "")
        with pytest.raises(InvalidAmount):
            Token("Test", "TST", -1)

    def test_transfer(self):
        token = self._token()
        event = token.transfer(OWNER, ALICE, 300)
        assert event == TransferEvent("TST", OWNER, ALICE, 300)
        assert token.balance_of(OWNER) == 700
        assert token.balance_of(ALICE) == 300

    def test_transfer_insufficient_balance(self):
        token = self._token()
        with pytest.raises(InsufficientBalance):
            token.transfer(ALICE, BOB, 1)

    def test_transfer_negative(self):
        with pytest.raises(TransferFailed):
            self._token().transfer(OWNER, ALICE, -5)

    def test_approve_and_transfer_from(self):
        token = self._token()
        assert token.approve(OWNER, ALICE, 500) == ApprovalEvent("TST", OWNER, ALICE, 500)
        token.transfer_from(ALICE, OWNER, BOB, 200)
        assert token.allowance(OWNER, ALICE) == 300
        assert token.balance_of(BOB) == 200

    def test_transfer_from_over_allowance(self):
        token = self._token()
        token.approve(OWNER, ALICE, 100)
        with pytest.raises(InsufficientAllowance):
            token.transfer_from(ALICE, OWNER, BOB, 101)
        assert token.allowance(OWNER, ALICE) == 100

    def test_allowance_failures_are_transfer_failures(self):
        assert issubclass(InsufficientAllowance, TransferFailed)
        assert issubclass(InsufficientBalance, TransferFailed)

    def test_mint(self):
        token = self._token()
        event = token.mint(ALICE, 50)
        assert token.total_supply == 1050
        assert token.balance_of(ALICE) == 50
        assert event.sender is None
        with pytest.raises(InvalidAmount):
            token.mint(ALICE, -1)

    def test_snapshot_restore(self):
        token = self._token()
        state = token.snapshot()
        token.transfer(OWNER, ALICE, 10)
        token.approve(OWNER, BOB, 5)
        token.restore(state)
        assert token.balance_of(OWNER) == 1000
        assert token.allowance(OWNER, BOB) == 0
        assert token.events == []


# ══════════════════════════════════════════════════════════════════════
#  ASSET BANK
# ══════════════════════════════════════════════════════════════════════

class TestAssetBank:

    def test_duplicate_registration(self, bank):
        with pytest.raises(TransferFailed):
            bank.register_token(Token("Again", "TKA", address=TOKEN_A))

    def test_reserved_addresses(self):
        bank = AssetBank()
        with pytest.raises(TransferFailed):
            bank.register_token(Token("Native", "ETH", address=NATIVE_ASSET))
        with pytest.raises(TransferFailed):
            bank.register_token(Token("Zero", "ZRO", address=ZERO_ADDRESS))

    def test_unknown_asset(self, bank):
        with pytest.raises(TransferFailed):
            bank.token("0x00000000000000000000000000000000000000ff")

    def test_pull_uses_allowance(self, bank):
        pool = derive_address("pool")
        with pytest.raises(InsufficientAllowance):
            bank.pull(TOKEN_A, OWNER, 10, to=pool)
        bank.token(TOKEN_A).approve(OWNER, pool, 10)
        bank.pull(TOKEN_A, OWNER, 10, to=pool)
        assert bank.balance_of(TOKEN_A, pool) == 10

    def test_native_pull_and_push(self, bank):
        pool = derive_address("pool")
        bank.pull(NATIVE_ASSET, OWNER, 100, to=pool)
        bank.push(NATIVE_ASSET, ALICE, 40, source=pool)
        assert bank.native_balance_of(pool) == 60
        assert bank.native_balance_of(ALICE) == 40

    def test_native_shortfall(self, bank):
        with pytest.raises(TransferFailed):
            bank.pull(NATIVE_ASSET, ALICE, 1, to=OWNER)

    def test_push_to_zero_address(self, bank):
        with pytest.raises(TransferFailed):
            bank.push(TOKEN_A, ZERO_ADDRESS, 1, source=OWNER)

    def test_zero_amount_is_noop(self, bank):
        bank.pull(TOKEN_A, ALICE, 0, to=BOB)
        bank.push(TOKEN_A, BOB, 0, source=ALICE)
        assert bank.token(TOKEN_A).events == []

    def test_negative_amount(self, bank):
        with pytest.raises(TransferFailed):
            bank.pull(TOKEN_A, OWNER, -1, to=ALICE)
        with pytest.raises(TransferFailed):
            bank.push(TOKEN_A, ALICE, -1, source=OWNER)

    def test_credit_native(self, bank):
        bank.credit_native(ALICE, 7)
        assert bank.balance_of(NATIVE_ASSET, ALICE) == 7
        with pytest.raises(TransferFailed):
            bank.credit_native(ALICE, -1)

    def test_atomic_section_rolls_back(self, bank):
        with pytest.raises(RuntimeError):
            with bank.atomic():
                bank.push(TOKEN_A, ALICE, 100, source=OWNER)
                bank.push(NATIVE_ASSET, ALICE, 100, source=OWNER)
                raise RuntimeError("abort")
        assert bank.balance_of(TOKEN_A, ALICE) == 0
        assert bank.native_balance_of(ALICE) == 0

    def test_nested_sections(self, bank):
        with bank.atomic():
            bank.push(TOKEN_A, ALICE, 100, source=OWNER)
            with pytest.raises(TransferFailed):
                with bank.atomic():
                    bank.push(TOKEN_A, BOB, 50, source=OWNER)
                    bank.push(TOKEN_A, BOB, 1, source=derive_address("empty"))
        assert bank.balance_of(TOKEN_A, ALICE) == 100
        assert bank.balance_of(TOKEN_A, BOB) == 0

    def test_enlisted_state_rolls_back(self, bank):
        ledger = {"height": 1}

        def restore(saved):
            ledger.clear()
            ledger.update(saved)

        bank.enlist(lambda: dict(ledger), restore)
        with pytest.raises(RuntimeError):
            with bank.atomic():
                ledger["height"] = 2
                bank.push(TOKEN_A, ALICE, 100, source=OWNER)
                raise RuntimeError("abort")
        assert ledger == {"height": 1}
        assert bank.balance_of(TOKEN_A, ALICE) == 0

    def test_enlisted_state_kept_on_success(self, bank):
        ledger = {"height": 1}
        bank.enlist(lambda: dict(ledger), lambda saved: ledger.update(saved))
        with bank.atomic():
            ledger["height"] = 2
        assert ledger == {"height": 2}

    def test_receiver_hook(self, bank):
        received = []
        bank.on_receive(ALICE, lambda asset, source, amount: received.append((asset, source, amount)))
        bank.push(TOKEN_A, ALICE, 5, source=OWNER)
        assert received == [(TOKEN_A, OWNER, 5)]

    def test_rejecting_hook_undoes_push(self, bank):
        def reject(asset, source, amount):
            raise InvalidAmount("refused")

        bank.on_receive(ALICE, reject)
        with pytest.raises(TransferFailed):
            bank.push(TOKEN_A, ALICE, 5, source=OWNER)
        assert bank.balance_of(TOKEN_A, ALICE) == 0


class TestAddressHelpers:

    def test_is_null(self):
        assert is_null(None)
        assert is_null("")
        assert is_null(ZERO_ADDRESS)
        assert not is_null(OWNER)

    def test_is_native(self):
        assert is_native(NATIVE_ASSET)
        assert is_native(NATIVE_ASSET.lower())
        assert not is_native(TOKEN_A)
        assert not is_native(None)

    def test_same_address_ignores_case(self):
        assert same_address(NATIVE_ASSET, NATIVE_ASSET.lower())
        assert not same_address(OWNER, ALICE)
        assert same_address(None, None)
        assert not same_address(None, OWNER)

    def test_derive_address(self):
        address = derive_address("pair", TOKEN_A)
        assert address == derive_address("pair", TOKEN_A)
        assert address != derive_address("pair", OWNER)
        assert address.startswith("0x") and len(address) == 42
