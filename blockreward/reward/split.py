"""
Reward split.

Divides (minted + reward fee) into proposer, stakers, treasury-A and
treasury-B. Two algorithms exist; the fork regime selects one through
`SPLIT_ALGORITHMS`. Both return the truncation remainder so that
proposer + stakers + treasury_a + treasury_b + remainder == minted + fee.
"""

from dataclasses import dataclass
from typing import Callable, Dict

from ..forks import ForkFlags, ForkRegime
from ..logger import get_logger
from .ratio import parse_kip82_ratio, parse_reward_ratio, split_by_weights
from .types import ProtocolParameters

logger = get_logger(__name__)


@dataclass(frozen=True)
class SplitResult:
    proposer: int
    stakers: int
    treasury_a: int
    treasury_b: int
    remainder: int

    @property
    def allocated(self) -> int:
        return self.proposer + self.stakers + self.treasury_a + self.treasury_b


def split_by_ratio(params: ProtocolParameters, source: int):
    """Split `source` into (cn, treasury_a, treasury_b). Ignores any remainder."""
    weights, total = parse_reward_ratio(params.ratio)
    cn, treasury_a, treasury_b = split_by_weights(source, weights, total)
    return cn, treasury_a, treasury_b


def split_by_kip82_ratio(params: ProtocolParameters, source: int):
    """Split `source` into (proposer, stakers). Ignores any remainder."""
    weights, total = parse_kip82_ratio(params.kip82_ratio)
    proposer, stakers = split_by_weights(source, weights, total)
    return proposer, stakers


def split_legacy(params: ProtocolParameters, minted: int, fee: int) -> SplitResult:
    """Before Kore: the pool ratio applies to minted and fee together; no stakers."""
    source = minted + fee
    cn, treasury_a, treasury_b = split_by_ratio(params, source)
    remainder = source - treasury_a - treasury_b - cn

    logger.debug(
        f"split before kore returns cn={cn} treasuryA={treasury_a} "
        f"treasuryB={treasury_b} remaining={remainder}"
    )
    return SplitResult(
        proposer=cn,
        stakers=0,
        treasury_a=treasury_a,
        treasury_b=treasury_b,
        remainder=remainder,
    )


def split_kore(params: ProtocolParameters, minted: int, fee: int) -> SplitResult:
    """After Kore: only minted is split; the proposer keeps the whole reward fee."""
    cn, treasury_a, treasury_b = split_by_ratio(params, minted)
    proposer, stakers = split_by_kip82_ratio(params, cn)
    proposer += fee
    remainder = minted + fee - treasury_a - treasury_b - proposer - stakers

    logger.debug(
        f"split after kore returns proposer={proposer} stakers={stakers} "
        f"treasuryA={treasury_a} treasuryB={treasury_b} remaining={remainder}"
    )
    return SplitResult(
        proposer=proposer,
        stakers=stakers,
        treasury_a=treasury_a,
        treasury_b=treasury_b,
        remainder=remainder,
    )


SPLIT_ALGORITHMS: Dict[ForkRegime, Callable[[ProtocolParameters, int, int], SplitResult]] = {
    ForkRegime.LEGACY: split_legacy,
    ForkRegime.MAGMA: split_legacy,
    ForkRegime.KORE: split_kore,
}


def split(params: ProtocolParameters, flags: ForkFlags, minted: int, fee: int) -> SplitResult:
    """Split (minted + fee) with the algorithm of the regime in force."""
    return SPLIT_ALGORITHMS[flags.regime](params, minted, fee)
