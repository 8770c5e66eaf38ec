"""
Block clock.

The accrual block is the chain's monotonically increasing execution
counter. Engines never advance it on their own; the chain does, either
explicitly through mine() or once per transaction when auto-mining.
"""

from .logger import get_logger

logger = get_logger(__name__)


class BlockClock:
    """Current block index of the executing chain."""

    def __init__(self, start: int = 0, auto_mine: bool = False):
        if start < 0:
            raise ValueError(f"Start block must be non-negative, got {start}")
        self._number = start
        self.auto_mine = auto_mine

    @property
    def number(self) -> int:
        return self._number

    def mine(self, blocks: int = 1) -> int:
        """Advance the chain by *blocks* empty blocks; returns the new height."""
        if blocks < 0:
            raise ValueError(f"Cannot mine a negative number of blocks: {blocks}")
        self._number += blocks
        logger.debug("Mined %d block(s), height=%d", blocks, self._number)
        return self._number

    def next_transaction(self) -> int:
        """
        Block index a transaction executes in.

        With auto-mining every transaction lands in a fresh block.
        """
        if self.auto_mine:
            self._number += 1
        return self._number

    def snapshot(self) -> int:
        return self._number

    def restore(self, number: int) -> None:
        """Rewind to a height taken by snapshot(); a reverted transaction mines nothing."""
        self._number = number

    def __repr__(self) -> str:
        return f"<BlockClock number={self._number} auto_mine={self.auto_mine}>"
