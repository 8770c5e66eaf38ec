"""
Deployment wiring.

Builds the full in-memory stack (asset bank, block clock, pair registry,
router, staking engine) from a TSwapConfig and applies its logging section.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .chain import BlockClock
from .config import TSwapConfig, load_config
from .exchange import PairRegistry, Router
from .logger import configure_logging, get_logger
from .staking import StakingEngine
from .tokens import AssetBank

logger = get_logger(__name__)


@dataclass
class Deployment:
    config: TSwapConfig
    bank: AssetBank
    clock: BlockClock
    registry: PairRegistry
    router: Router
    staking: StakingEngine


def deploy(config: Optional[TSwapConfig] = None, *, configure_logs: bool = True) -> Deployment:
    """
    Wire a deployment from *config* (loaded from the default location when omitted).

    Raises:
        ConfigurationError: the configuration does not validate
    """
    if config is None:
        config = load_config()
    else:
        config.validate()

    if configure_logs:
        configure_logging(
            log_level=config.logging.level,
            log_file=Path(config.logging.file_path),
            console_output=config.logging.console,
            file_output=config.logging.file,
        )

    bank = AssetBank()
    clock = BlockClock(config.chain.start_block, auto_mine=config.chain.auto_mine)
    registry = PairRegistry(bank)
    router = Router(registry)
    staking = StakingEngine(
        config.staking.owner,
        config.staking.reward_rate_per_block,
        bank,
        clock,
    )

    logger.info(
        "Deployment ready: start_block=%d auto_mine=%s staking_owner=%s",
        clock.number, clock.auto_mine, staking.owner,
    )
    return Deployment(config, bank, clock, registry, router, staking)
