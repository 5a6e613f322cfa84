"""
Block Reward Module

Deterministic division of a block's reward (minted amount plus fees minus
burns) among the proposer, the staking pool and two treasuries.

Components:
- ratio: governance ratio parsing and truncating splits
- fees: total fee and burn amounts per fork regime
- split: legacy and Kore split algorithms
- shares: staker pool allocation by excess stake
- aggregator: remainder folding, treasury fallback, reward map
- distributor: top-level entry points and ledger application

Usage:
    from blockreward.reward import get_block_reward, BlockHeader

    spec = get_block_reward(header, config, staking_info)
"""

from .types import (
    BlockHeader,
    ProtocolParameters,
    RewardSpec,
    StakingNode,
    StakingSnapshot,
)
from .ratio import (
    parse_ratio,
    parse_reward_ratio,
    parse_kip82_ratio,
    split_by_weights,
)
from .fees import (
    FeeSplit,
    total_fee,
    header_total_fee,
    deferred_fee_split,
    proposer_minted_share,
)
from .split import (
    SplitResult,
    SPLIT_ALGORITHMS,
    split,
    split_legacy,
    split_kore,
)
from .shares import ShareResult, allocate
from .aggregator import aggregate
from .distributor import (
    BalanceAdder,
    GovernanceHelper,
    StakingInfoProvider,
    RewardConfigCache,
    RewardDistributor,
    RewardObserver,
    block_reward,
    calc_deferred_reward,
    calc_deferred_reward_simple,
    compensate_tx_fee,
    distribute_block_reward,
    get_block_reward,
)

__all__ = [
    # Types
    'BlockHeader',
    'ProtocolParameters',
    'RewardSpec',
    'StakingNode',
    'StakingSnapshot',

    # Ratio
    'parse_ratio',
    'parse_reward_ratio',
    'parse_kip82_ratio',
    'split_by_weights',

    # Fees
    'FeeSplit',
    'total_fee',
    'header_total_fee',
    'deferred_fee_split',
    'proposer_minted_share',

    # Split & shares
    'SplitResult',
    'SPLIT_ALGORITHMS',
    'split',
    'split_legacy',
    'split_kore',
    'ShareResult',
    'allocate',
    'aggregate',

    # Distribution
    'BalanceAdder',
    'GovernanceHelper',
    'StakingInfoProvider',
    'RewardConfigCache',
    'RewardDistributor',
    'RewardObserver',
    'block_reward',
    'calc_deferred_reward',
    'calc_deferred_reward_simple',
    'compensate_tx_fee',
    'distribute_block_reward',
    'get_block_reward',
]
