"""
Reward aggregation.

Merges the split and the staking shares into the final per-address reward
map. The order below is consensus-critical and must not change:

1. split remainder goes to treasury-A
2. share remainder goes to the proposer
3. an unset treasury address hands its pool to the proposer
4. credits are accumulated per recipient address
"""

from typing import Dict, Optional

from ..address import is_empty_address, normalize_address
from ..logger import get_logger
from .fees import FeeSplit
from .shares import ShareResult
from .split import SplitResult
from .types import BlockHeader, RewardSpec, StakingSnapshot

logger = get_logger(__name__)


def increment(rewards: Dict[str, int], address: str, amount: int) -> None:
    address = normalize_address(address)
    rewards[address] = rewards.get(address, 0) + amount


def aggregate(
    header: BlockHeader,
    minted: int,
    fee: FeeSplit,
    split: SplitResult,
    shares: ShareResult,
    snapshot: Optional[StakingSnapshot],
) -> RewardSpec:
    """Fold remainders, apply treasury fallbacks and build the reward map."""
    treasury_a = split.treasury_a + split.remainder
    proposer = split.proposer + shares.remainder
    treasury_b = split.treasury_b

    treasury_a_address = snapshot.treasury_a_address if snapshot is not None else None
    treasury_b_address = snapshot.treasury_b_address if snapshot is not None else None

    if is_empty_address(treasury_a_address):
        logger.debug(f"treasury-A empty, proposer gets its portion treasuryA={treasury_a}")
        proposer += treasury_a
        treasury_a = 0
    if is_empty_address(treasury_b_address):
        logger.debug(f"treasury-B empty, proposer gets its portion treasuryB={treasury_b}")
        proposer += treasury_b
        treasury_b = 0

    rewards: Dict[str, int] = {}
    increment(rewards, header.rewardbase, proposer)
    if not is_empty_address(treasury_a_address):
        increment(rewards, treasury_a_address, treasury_a)
    if not is_empty_address(treasury_b_address):
        increment(rewards, treasury_b_address, treasury_b)
    for address, amount in shares.shares.items():
        increment(rewards, address, amount)

    return RewardSpec(
        minted=minted,
        fee=fee.total,
        burnt=fee.burnt,
        proposer=proposer,
        stakers=split.stakers - shares.remainder,
        treasury_a=treasury_a,
        treasury_b=treasury_b,
        rewards=rewards,
    )
