"""
Test suite for the TSwap reserve pair engine with a native-unit leg

Covers:
  - Attached value as the native leg amount
  - Refund reporting for value beyond the consumed amount
  - Swaps in both directions with the fee on either leg
  - Native payouts on removal
"""

import pytest

from tswap.constants import NATIVE_ASSET
from tswap.exceptions import InvalidAmount, TransferFailed
from tswap.exchange import LegKind

from conftest import BOB, CAROL, OWNER, TOKEN_A, approve_all, fund


@pytest.fixture
def funded_native_pair(native_pair):
    native_pair.add_liquidity(OWNER, 1000, None, OWNER, value=1000)
    return native_pair


class TestNativeLiquidity:

    def test_legs(self, native_pair):
        assert native_pair.legs == (LegKind.LEDGER, LegKind.NATIVE)
        assert native_pair.has_native_leg

    def test_attached_value_is_native_amount(self, bank, native_pair):
        owner_native = bank.native_balance_of(OWNER)

        result = native_pair.add_liquidity(OWNER, 200, None, OWNER, value=100)

        assert result.minted == 141
        assert (result.amount_a, result.amount_b) == (200, 100)
        assert result.refund == 0
        assert native_pair.reserves == (200, 100)
        assert bank.native_balance_of(native_pair.address) == 100
        assert bank.native_balance_of(OWNER) == owner_native - 100

    def test_excess_value_reported_as_refund(self, bank, native_pair):
        result = native_pair.add_liquidity(OWNER, 200, 80, OWNER, value=100)

        assert result.refund == 20
        assert result.minted == 126
        assert native_pair.reserves == (200, 80)
        # the pool holds the refund until the caller-side wrapper returns it
        assert bank.native_balance_of(native_pair.address) == 100

    def test_native_amount_above_value_fails(self, native_pair):
        with pytest.raises(TransferFailed):
            native_pair.add_liquidity(OWNER, 200, 150, OWNER, value=100)
        assert native_pair.reserves == (0, 0)

    def test_no_value_attached_rejected(self, native_pair):
        with pytest.raises(InvalidAmount):
            native_pair.add_liquidity(OWNER, 200, None, OWNER)

    def test_sender_without_native_funds(self, bank, native_pair):
        fund(bank, TOKEN_A, BOB, 1000)
        approve_all(bank, BOB, native_pair.address, TOKEN_A)

        with pytest.raises(TransferFailed):
            native_pair.add_liquidity(BOB, 200, None, BOB, value=100)

        assert native_pair.total_shares == 0
        assert bank.balance_of(TOKEN_A, BOB) == 1000

    def test_removal_pays_native(self, bank, funded_native_pair):
        result = funded_native_pair.remove_liquidity(OWNER, 500, CAROL)

        assert (result.amount_a, result.amount_b) == (500, 500)
        assert bank.balance_of(TOKEN_A, CAROL) == 500
        assert bank.native_balance_of(CAROL) == 500
        assert bank.native_balance_of(funded_native_pair.address) == 500


class TestNativeSwap:

    def test_native_in_fee_on_native(self, bank, funded_native_pair):
        result = funded_native_pair.swap(OWNER, NATIVE_ASSET, None, NATIVE_ASSET, CAROL, value=100)
        assert result.amount_out == 90
        assert result.refund == 0
        assert funded_native_pair.reserves == (910, 1100)
        assert bank.balance_of(TOKEN_A, CAROL) == 90

    def test_native_in_fee_on_token(self, funded_native_pair):
        result = funded_native_pair.swap(OWNER, NATIVE_ASSET, None, TOKEN_A, CAROL, value=100)
        assert result.amount_out == 89

    def test_native_in_with_excess_value(self, bank, funded_native_pair):
        result = funded_native_pair.swap(OWNER, NATIVE_ASSET, 100, NATIVE_ASSET, CAROL, value=130)
        assert result.amount_out == 90
        assert result.refund == 30
        assert funded_native_pair.reserves == (910, 1100)
        assert bank.native_balance_of(funded_native_pair.address) == 1130

    def test_token_in_pays_native(self, bank, funded_native_pair):
        result = funded_native_pair.swap(OWNER, TOKEN_A, 100, NATIVE_ASSET, CAROL)
        assert result.amount_out == 89
        assert bank.native_balance_of(CAROL) == 89
        assert funded_native_pair.reserves == (1100, 911)

    def test_value_on_token_input_rejected(self, funded_native_pair):
        with pytest.raises(InvalidAmount):
            funded_native_pair.swap(OWNER, TOKEN_A, 100, TOKEN_A, CAROL, value=10)

    def test_missing_token_amount_rejected(self, funded_native_pair):
        with pytest.raises(InvalidAmount):
            funded_native_pair.swap(OWNER, TOKEN_A, None, TOKEN_A, CAROL)

    def test_prices(self, native_pair):
        native_pair.add_liquidity(OWNER, 5000, None, OWNER, value=9999)
        assert native_pair.get_price(TOKEN_A) == 1999800000
        assert native_pair.get_price(NATIVE_ASSET) == 500050005
