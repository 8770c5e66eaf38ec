"""
TSwap Configuration

Loads config.toml; environment variables override TOML values.
"""

from .loader import (
    TSwapConfig,
    ChainConfig,
    StakingConfig,
    LoggingConfig,
    load_config,
)

__all__ = [
    "TSwapConfig",
    "ChainConfig",
    "StakingConfig",
    "LoggingConfig",
    "load_config",
]
