"""
Transaction fee accounting.

Computes the total fee a block collected and how much of it is burnt under
the fork regime in force. Burn stages run in fork order; each stage sees the
reward fee left over by the previous one.
"""

from dataclasses import dataclass
from typing import Callable, List, Tuple

from ..exceptions import RewardComputationError
from ..forks import ForkFlags, ForkRegime
from ..logger import get_logger
from .ratio import parse_kip82_ratio, parse_reward_ratio, split_by_weights
from .types import BlockHeader, ProtocolParameters

logger = get_logger(__name__)


@dataclass(frozen=True)
class FeeSplit:
    """Total fee of a block, the part paid out and the part burnt."""
    total: int
    reward: int
    burnt: int


def total_fee(header: BlockHeader, params: ProtocolParameters, flags: ForkFlags) -> int:
    """Total transaction fee: gas used times base fee after Magma, else times unit price."""
    if flags.magma:
        if header.base_fee is None:
            raise RewardComputationError(f"block {header.number} has no base fee after Magma")
        return header.gas_used * header.base_fee
    return header.gas_used * params.unit_price


def header_total_fee(header: BlockHeader, params: ProtocolParameters) -> int:
    """Total transaction fee, selecting the price by presence of a base fee in the header."""
    if header.base_fee is not None:
        return header.gas_used * header.base_fee
    return header.gas_used * params.unit_price


def proposer_minted_share(params: ProtocolParameters) -> int:
    """The proposer's part of the minting amount alone, after both ratio stages."""
    weights, total = parse_reward_ratio(params.ratio)
    cn, _, _ = split_by_weights(params.minting_amount, weights, total)
    kip82_weights, kip82_total = parse_kip82_ratio(params.kip82_ratio)
    proposer, _ = split_by_weights(cn, kip82_weights, kip82_total)
    return proposer


def burn_amount_magma(params: ProtocolParameters, fee: int) -> int:
    return fee // 2


def burn_amount_kore(params: ProtocolParameters, fee: int) -> int:
    proposer = proposer_minted_share(params)
    logger.debug(f"burn_amount_kore returns fee={fee} proposer={proposer}")
    return min(fee, proposer)


# Burn stages in the order they apply; a stage runs when its fork is active.
BURN_STAGES: List[Tuple[ForkRegime, Callable[[ProtocolParameters, int], int]]] = [
    (ForkRegime.MAGMA, burn_amount_magma),
    (ForkRegime.KORE, burn_amount_kore),
]


def _stage_active(regime: ForkRegime, flags: ForkFlags) -> bool:
    if regime == ForkRegime.MAGMA:
        return flags.magma
    if regime == ForkRegime.KORE:
        return flags.kore
    return False


def deferred_fee_split(header: BlockHeader, params: ProtocolParameters, flags: ForkFlags) -> FeeSplit:
    """
    Split the block fee into (total, reward, burnt) for deferred distribution.

    Without fee deferral the fees were already paid to the proposer during
    transaction execution, so there is nothing to distribute here and every
    amount is zero. The caller compensates for the difference.
    """
    if not params.deferred_tx_fee:
        return FeeSplit(total=0, reward=0, burnt=0)

    total = total_fee(header, params, flags)
    reward = total
    burnt = 0

    for regime, burn in BURN_STAGES:
        if not _stage_active(regime, flags):
            continue
        amount = burn(params, reward)
        reward -= amount
        burnt += amount

    logger.debug(f"deferred_fee_split returns totalFee={total} rewardFee={reward} burntFee={burnt}")
    return FeeSplit(total=total, reward=reward, burnt=burnt)
