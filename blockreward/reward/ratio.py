"""
Reward ratio parsing.

Governance expresses reward splits as '/'-separated integer weights, e.g.
"50/40/10". Each share is computed independently with truncating division;
whatever the truncation drops is accounted for by the caller.
"""

import re
from typing import List, Tuple

from ..constants import RATIO_SEPARATOR, REWARD_KIP82_SLICE_COUNT, REWARD_SLICE_COUNT
from ..exceptions import InvalidRatioValue, MalformedRatio, RewardComputationError

_INTEGER_TERM = re.compile(r'[+-]?[0-9]+')


def parse_ratio(ratio: str, expected_parts: int) -> Tuple[List[int], int]:
    """
    Parse a ratio string into its weights and their sum.

    The sum is not checked for zero; dividing by it later fails loudly.

    Raises:
        MalformedRatio: If the part count differs from `expected_parts`.
        InvalidRatioValue: If a part is not a base-10 integer.
    """
    parts = ratio.split(RATIO_SEPARATOR)
    if len(parts) != expected_parts:
        raise MalformedRatio(ratio, expected_parts)

    weights = []
    for part in parts:
        if not _INTEGER_TERM.fullmatch(part):
            raise InvalidRatioValue(ratio, part)
        weights.append(int(part))
    return weights, sum(weights)


def parse_reward_ratio(ratio: str) -> Tuple[List[int], int]:
    return parse_ratio(ratio, REWARD_SLICE_COUNT)


def parse_kip82_ratio(ratio: str) -> Tuple[List[int], int]:
    return parse_ratio(ratio, REWARD_KIP82_SLICE_COUNT)


def split_by_weights(source: int, weights: List[int], total: int) -> List[int]:
    """Split `source` by `weights`, truncating each share on its own."""
    try:
        return [source * weight // total for weight in weights]
    except ZeroDivisionError as e:
        raise RewardComputationError(f"ratio weights {weights} sum to zero") from e
