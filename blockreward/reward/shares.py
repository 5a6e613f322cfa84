"""
Staking share allocation.

The staker pool is divided among validator nodes in proportion to the stake
they hold above the governance minimum. Whatever truncation leaves over is
returned as the remainder and goes to the proposer.
"""

from dataclasses import dataclass, field
from typing import Dict, Optional

from ..address import normalize_address
from ..logger import get_logger
from .types import ProtocolParameters, StakingSnapshot

logger = get_logger(__name__)


@dataclass(frozen=True)
class ShareResult:
    shares: Dict[str, int] = field(default_factory=dict)
    remainder: int = 0

    @property
    def distributed(self) -> int:
        return sum(self.shares.values())


def allocate(
    params: ProtocolParameters,
    snapshot: Optional[StakingSnapshot],
    staker_pool: int,
) -> ShareResult:
    """
    Distribute `staker_pool` among nodes staking more than the minimum.

    Without a snapshot the whole pool is returned as remainder. Shares that
    truncate to zero are left out of the mapping.
    """
    if snapshot is None:
        return ShareResult(shares={}, remainder=staker_pool)

    minimum_stake = params.minimum_stake
    nodes = snapshot.consolidated()

    total_excess = sum(
        node.staking_amount - minimum_stake
        for node in nodes
        if node.staking_amount > minimum_stake
    )
    if total_excess == 0:
        return ShareResult(shares={}, remainder=staker_pool)

    shares: Dict[str, int] = {}
    remaining = staker_pool
    for node in nodes:
        if node.staking_amount <= minimum_stake:
            continue
        excess = node.staking_amount - minimum_stake
        amount = staker_pool * excess // total_excess
        remaining -= amount
        if amount > 0:
            address = normalize_address(node.reward_address)
            shares[address] = shares.get(address, 0) + amount

    logger.debug(
        f"allocate minimumStake={minimum_stake} stakeReward={staker_pool} "
        f"remaining={remaining} shares={shares}"
    )
    return ShareResult(shares=shares, remainder=remaining)
