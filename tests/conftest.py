"""
Shared fixtures for the block reward test suite.
"""

import sys
from pathlib import Path

import pytest

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from blockreward.config import ChainConfig, GovernanceConfig, IstanbulConfig
from blockreward.constants import ProposerPolicy
from blockreward.forks import ForkFlags
from blockreward.reward import (
    BlockHeader,
    ProtocolParameters,
    StakingNode,
    StakingSnapshot,
)


PROPOSER = "0x" + "a1" * 20
TREASURY_A = "0x" + "b2" * 20
TREASURY_B = "0x" + "c3" * 20
VALIDATOR_1 = "0x" + "d4" * 20
VALIDATOR_2 = "0x" + "e5" * 20
VALIDATOR_3 = "0x" + "f6" * 20

LEGACY = ForkFlags(magma=False, kore=False)
MAGMA = ForkFlags(magma=True, kore=False)
KORE = ForkFlags(magma=True, kore=True)


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def params():
    """Governance parameters with round numbers."""
    return ProtocolParameters(
        minting_amount=1000,
        ratio="50/25/25",
        kip82_ratio="80/20",
        minimum_stake=100,
        deferred_tx_fee=True,
        unit_price=25,
    )


@pytest.fixture
def header():
    """A block that used 10 gas at base fee 10."""
    return BlockHeader(number=100, gas_used=10, rewardbase=PROPOSER, base_fee=10)


@pytest.fixture
def snapshot():
    """Two validators with excess stake 100 and 300, both treasuries set."""
    return StakingSnapshot(
        block_number=100,
        nodes=[
            StakingNode(node_address=VALIDATOR_1, reward_address=VALIDATOR_1, staking_amount=200),
            StakingNode(node_address=VALIDATOR_2, reward_address=VALIDATOR_2, staking_amount=400),
        ],
        treasury_a_address=TREASURY_A,
        treasury_b_address=TREASURY_B,
    )


@pytest.fixture
def chain_config(params):
    """Weighted-random chain with Magma at 10 and Kore at 50."""
    return ChainConfig(
        unit_price=params.unit_price,
        magma_compatible_block=10,
        kore_compatible_block=50,
        istanbul=IstanbulConfig(proposer_policy=ProposerPolicy.WEIGHTED_RANDOM),
        governance=GovernanceConfig(reward=params),
    )
