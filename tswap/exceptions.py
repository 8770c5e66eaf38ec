"""
TSwap Exceptions

Categorical, non-retryable failures raised by the exchange and staking
engines and by their collaborators. Every failure leaves engine state
exactly as it was before the failing call.
"""


class TSwapException(Exception):
    """Base exception for TSwap."""
    pass


class ConfigurationError(TSwapException):
    """Configuration error."""
    pass


# ---------------------------------------------------------------------------
# Identity / pair validation
# ---------------------------------------------------------------------------

class ZeroAddress(TSwapException):
    """A required identity is null (None or the zero address)."""
    pass


class IdenticalAssets(TSwapException):
    """Both legs of a pair name the same asset."""
    pass


class PairAlreadyExists(TSwapException):
    """The unordered asset pair is already registered."""
    pass


class PairNotFound(TSwapException):
    """No pool is registered for the requested pair."""
    pass


class UnknownAsset(TSwapException):
    """Asset is not one of the pair's two legs."""
    pass


# ---------------------------------------------------------------------------
# Amount / state validation
# ---------------------------------------------------------------------------

class InvalidAmount(TSwapException):
    """Amount is zero (or otherwise outside the accepted domain)."""
    pass


class InsufficientShares(TSwapException):
    """Holder owns fewer liquidity shares than requested."""
    pass


class InsufficientOutput(TSwapException):
    """Swap would pay out nothing."""
    pass


class InvalidState(TSwapException):
    """Query is undefined for the current state (e.g. zero reserve price)."""
    pass


# ---------------------------------------------------------------------------
# Staking
# ---------------------------------------------------------------------------

class PoolNotFound(TSwapException):
    """Staking pool id does not exist."""
    pass


class StakerNotFound(TSwapException):
    """Caller has never deposited into the staking pool."""
    pass


class InsufficientStakerQuorum(TSwapException):
    """Staking pool has too few historical stakers to allow withdrawals."""

    def __init__(self, pool_id: int, stakers: int, required: int):
        self.pool_id = pool_id
        self.stakers = stakers
        self.required = required
        super().__init__(
            f"Pool {pool_id} has {stakers} staker(s), "
            f"withdrawals need at least {required}"
        )


class NotAuthorized(TSwapException):
    """Caller does not hold the administrative role."""
    pass


# ---------------------------------------------------------------------------
# Asset movement
# ---------------------------------------------------------------------------

class TransferFailed(TSwapException):
    """An asset pull or push could not be completed."""
    pass


class InsufficientBalance(TransferFailed):
    """Sender balance is too low."""
    pass


class InsufficientAllowance(TransferFailed):
    """Spender allowance is too low."""
    pass
