"""
TSwap TOML Configuration Loader

Loads config.toml with environment variable overrides.
Each [section] maps to a dataclass with from_dict + apply_env.

Environment variable mapping:
    [chain] start_block             → TSWAP_START_BLOCK
    [chain] auto_mine               → TSWAP_AUTO_MINE
    [staking] owner                 → TSWAP_STAKING_OWNER
    [staking] reward_rate_per_block → TSWAP_REWARD_RATE
    [logging] level                 → TSWAP_LOG_LEVEL
    [logging] file_path             → TSWAP_LOG_FILE
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import DEFAULT_REWARD_RATE_PER_BLOCK, ZERO_ADDRESS
from ..crypto.address import is_null
from ..exceptions import ConfigurationError
from ..logger import get_logger

logger = get_logger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off"):
        return False
    raise ConfigurationError(f"Invalid boolean value: {value!r}")


def _env_int(name: str, value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


# ---------------------------------------------------------------------------
# Section dataclasses: mirror every [section] of config.example.toml
# ---------------------------------------------------------------------------


@dataclass
class ChainConfig:
    """[chain] section."""
    start_block: int = 0
    auto_mine: bool = False

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainConfig":
        return cls(
            start_block=data.get("start_block", 0),
            auto_mine=data.get("auto_mine", False),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TSWAP_START_BLOCK"):
            self.start_block = _env_int("TSWAP_START_BLOCK", v)
        if v := os.environ.get("TSWAP_AUTO_MINE"):
            self.auto_mine = _env_bool(v)


@dataclass
class StakingConfig:
    """[staking] section."""
    owner: str = ZERO_ADDRESS
    reward_rate_per_block: int = DEFAULT_REWARD_RATE_PER_BLOCK

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingConfig":
        return cls(
            owner=data.get("owner", ZERO_ADDRESS),
            reward_rate_per_block=data.get("reward_rate_per_block", DEFAULT_REWARD_RATE_PER_BLOCK),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TSWAP_STAKING_OWNER"):
            self.owner = v
        if v := os.environ.get("TSWAP_REWARD_RATE"):
            self.reward_rate_per_block = _env_int("TSWAP_REWARD_RATE", v)


@dataclass
class LoggingConfig:
    """[logging] section."""
    level: str = "INFO"
    console: bool = True
    file: bool = False
    file_path: str = "logs/tswap.log"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LoggingConfig":
        return cls(
            level=data.get("level", "INFO"),
            console=data.get("console", True),
            file=data.get("file", False),
            file_path=data.get("file_path", "logs/tswap.log"),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("TSWAP_LOG_LEVEL"):
            self.level = v.upper()
        if v := os.environ.get("TSWAP_LOG_FILE"):
            self.file = True
            self.file_path = v


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


@dataclass
class TSwapConfig:
    """Complete deployment configuration."""
    chain: ChainConfig = field(default_factory=ChainConfig)
    staking: StakingConfig = field(default_factory=StakingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TSwapConfig":
        """Create TSwapConfig from a parsed TOML dict."""
        return cls(
            chain=ChainConfig.from_dict(data.get("chain", {})),
            staking=StakingConfig.from_dict(data.get("staking", {})),
            logging=LoggingConfig.from_dict(data.get("logging", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "TSwapConfig":
        """
        Load configuration from a TOML file.

        A missing file yields the defaults (still subject to env overrides).
        """
        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        try:
            with open(path, "rb") as f:
                raw = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Malformed config file {config_path}: {e}") from e

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        """Apply environment variable overrides to all sections."""
        self.chain.apply_env()
        self.staking.apply_env()
        self.logging.apply_env()

    def validate(self) -> bool:
        """
        Validate all configuration sections.

        Raises:
            ConfigurationError: on invalid config
        """
        if not isinstance(self.chain.start_block, int) or self.chain.start_block < 0:
            raise ConfigurationError(f"start_block must be a non-negative integer: {self.chain.start_block!r}")
        if not isinstance(self.chain.auto_mine, bool):
            raise ConfigurationError(f"auto_mine must be a boolean: {self.chain.auto_mine!r}")
        if is_null(self.staking.owner):
            raise ConfigurationError("staking.owner must be set to a non-null address")
        rate = self.staking.reward_rate_per_block
        if not isinstance(rate, int) or rate < 0:
            raise ConfigurationError(f"reward_rate_per_block must be a non-negative integer: {rate!r}")
        if self.logging.level not in LOG_LEVELS:
            raise ConfigurationError(f"Invalid log level: {self.logging.level}")
        return True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "chain": {
                "start_block": self.chain.start_block,
                "auto_mine": self.chain.auto_mine,
            },
            "staking": {
                "owner": self.staking.owner,
                "reward_rate_per_block": self.staking.reward_rate_per_block,
            },
            "logging": {
                "level": self.logging.level,
                "console": self.logging.console,
                "file": self.logging.file,
                "file_path": self.logging.file_path,
            },
        }


# -----------------------------------------------------------------------
# Convenience function
# -----------------------------------------------------------------------

def load_config(path: Optional[str] = None) -> TSwapConfig:
    """
    Load and validate the deployment configuration.

    Resolution order:
        1. Explicit *path* argument
        2. TSWAP_CONFIG env var
        3. ./config.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("TSWAP_CONFIG", "config.toml")

    cfg = TSwapConfig.from_file(path)
    cfg.validate()
    return cfg
