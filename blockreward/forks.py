"""
Versioned Reward Rules Management

Hard forks change how fees are burnt and how the block reward is split.
This module is the single place that maps a block number to the fork flags
active at that height, and resolves them once per block into a `ForkRegime`
used to key the reward dispatch tables.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Optional

from .logger import get_logger

logger = get_logger(__name__)


class ForkRegime(IntEnum):
    """
    Reward regimes in chronological order.
    Each regime is a set of burn/split rules.
    """
    LEGACY = 0  # whole (minted + fee) split by ratio, no burn
    MAGMA = 1   # base fee; half of the fee is burnt
    KORE = 2    # minted split with proposer/staker sub-split; fee capped by proposer share


@dataclass(frozen=True)
class ForkFlags:
    """Fork predicates active at a single block."""
    magma: bool = False
    kore: bool = False

    @property
    def regime(self) -> ForkRegime:
        """Latest regime whose rules apply to the split."""
        if self.kore:
            return ForkRegime.KORE
        if self.magma:
            return ForkRegime.MAGMA
        return ForkRegime.LEGACY


@dataclass(frozen=True)
class ForkActivation:
    """
    Defines when a reward regime becomes active.
    """
    regime: ForkRegime
    activation_block: Optional[int]

    def is_active(self, block_number: int) -> bool:
        """Check if this regime is active at the given block number."""
        return self.activation_block is not None and block_number >= self.activation_block


class ForkSchedule:
    """
    Manages the activation schedule for reward regimes.

    A regime configured with `None` as its activation block is never active.
    """

    def __init__(self, magma_block: Optional[int] = None, kore_block: Optional[int] = None):
        self._activations: List[ForkActivation] = [
            ForkActivation(regime=ForkRegime.MAGMA, activation_block=magma_block),
            ForkActivation(regime=ForkRegime.KORE, activation_block=kore_block),
        ]

        if magma_block is not None and kore_block is not None and kore_block < magma_block:
            logger.warning(
                f"Kore activates at {kore_block} before Magma at {magma_block}; "
                f"flags are evaluated independently"
            )

    def is_active(self, regime: ForkRegime, block_number: int) -> bool:
        if regime == ForkRegime.LEGACY:
            return True
        for activation in self._activations:
            if activation.regime == regime:
                return activation.is_active(block_number)
        raise ValueError(f"Unknown reward regime: {regime}")

    def flags_at(self, block_number: int) -> ForkFlags:
        """Resolve the fork flags for a block number."""
        return ForkFlags(
            magma=self.is_active(ForkRegime.MAGMA, block_number),
            kore=self.is_active(ForkRegime.KORE, block_number),
        )
