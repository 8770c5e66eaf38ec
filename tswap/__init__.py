"""
TSwap Package

Constant-product exchange pairs and block-reward staking pools.
Core imports are lazily loaded; for direct access, import from submodules:

    from tswap.exchange import ReservePair, PairRegistry, Router
    from tswap.staking import StakingEngine
    from tswap.tokens import Token, AssetBank
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy module loading so importing the package stays cheap."""
    if name == 'deploy':
        from .deployment import deploy
        return deploy
    elif name == 'Router':
        from .exchange import Router
        return Router
    elif name == 'StakingEngine':
        from .staking import StakingEngine
        return StakingEngine
    elif name == 'TSwapException':
        from .exceptions import TSwapException
        return TSwapException
    raise AttributeError(f"module 'tswap' has no attribute {name!r}")

__all__ = ['deploy', 'Router', 'StakingEngine', 'TSwapException']
