"""
Block Reward Component Tests

Covers each stage of the deferred reward pipeline on its own:
  - Ratio parsing and truncating splits
  - Fee accounting per fork regime
  - Legacy and Kore split algorithms
  - Staking share allocation
  - Aggregation order and treasury fallback
"""

import dataclasses

import pytest
from eth_utils import to_checksum_address

from blockreward.exceptions import InvalidRatioValue, InvalidRewardAddress, MalformedRatio, RewardComputationError
from blockreward.forks import ForkFlags, ForkRegime, ForkSchedule
from blockreward.reward import (
    BlockHeader,
    FeeSplit,
    ShareResult,
    SplitResult,
    StakingNode,
    StakingSnapshot,
    aggregate,
    allocate,
    deferred_fee_split,
    header_total_fee,
    parse_kip82_ratio,
    parse_ratio,
    parse_reward_ratio,
    proposer_minted_share,
    split,
    split_by_weights,
    split_kore,
    split_legacy,
    total_fee,
)

from conftest import (
    KORE,
    LEGACY,
    MAGMA,
    PROPOSER,
    TREASURY_A,
    TREASURY_B,
    VALIDATOR_1,
    VALIDATOR_2,
    VALIDATOR_3,
)


def checksum(address):
    return to_checksum_address(address)


# =============================================================================
# RATIO PARSING
# =============================================================================

class TestRatioParser:

    def test_parse_three_way_ratio(self):
        weights, total = parse_ratio("30/40/30", 3)
        assert weights == [30, 40, 30]
        assert total == 100

    def test_wrong_arity_is_malformed(self):
        with pytest.raises(MalformedRatio):
            parse_ratio("30/40", 3)

    def test_non_integer_term_is_invalid(self):
        with pytest.raises(InvalidRatioValue) as exc_info:
            parse_ratio("a/b/c", 3)
        assert exc_info.value.part == "a"

    @pytest.mark.parametrize("ratio", ["30/40/", "30/ 40/30", "30/4.0/30", "30/0x1/30", "30/40/30\n", "30\n/40/30"])
    def test_rejects_non_decimal_terms(self, ratio):
        with pytest.raises(InvalidRatioValue):
            parse_ratio(ratio, 3)

    def test_zero_total_is_not_rejected_by_parser(self):
        weights, total = parse_ratio("0/0/0", 3)
        assert weights == [0, 0, 0]
        assert total == 0

    def test_zero_total_fails_split(self):
        with pytest.raises(RewardComputationError):
            split_by_weights(1000, [0, 0, 0], 0)

    def test_named_parsers_check_arity(self):
        assert parse_reward_ratio("34/54/12") == ([34, 54, 12], 100)
        assert parse_kip82_ratio("20/80") == ([20, 80], 100)
        with pytest.raises(MalformedRatio):
            parse_kip82_ratio("34/54/12")

    def test_split_truncates_each_share_independently(self):
        assert split_by_weights(101, [34, 33, 33], 100) == [34, 33, 33]


# =============================================================================
# FORK SCHEDULE
# =============================================================================

class TestForkSchedule:

    def test_flags_by_block_number(self):
        schedule = ForkSchedule(magma_block=10, kore_block=50)
        assert schedule.flags_at(9) == ForkFlags(magma=False, kore=False)
        assert schedule.flags_at(10) == ForkFlags(magma=True, kore=False)
        assert schedule.flags_at(50) == ForkFlags(magma=True, kore=True)

    def test_unscheduled_fork_never_activates(self):
        schedule = ForkSchedule(magma_block=None, kore_block=None)
        assert schedule.flags_at(10**12) == LEGACY

    def test_regime_resolution(self):
        assert LEGACY.regime == ForkRegime.LEGACY
        assert MAGMA.regime == ForkRegime.MAGMA
        assert KORE.regime == ForkRegime.KORE
        assert ForkFlags(magma=False, kore=True).regime == ForkRegime.KORE


# =============================================================================
# FEE ACCOUNTING
# =============================================================================

class TestFeeAccounting:

    def test_total_fee_uses_unit_price_before_magma(self, header, params):
        assert total_fee(header, params, LEGACY) == 10 * 25

    def test_total_fee_uses_base_fee_after_magma(self, header, params):
        assert total_fee(header, params, MAGMA) == 10 * 10

    def test_total_fee_without_base_fee_after_magma_fails(self, params):
        header = BlockHeader(number=1, gas_used=10, rewardbase=PROPOSER)
        with pytest.raises(RewardComputationError):
            total_fee(header, params, MAGMA)

    def test_header_total_fee_follows_header(self, params):
        with_base_fee = BlockHeader(number=1, gas_used=3, rewardbase=PROPOSER, base_fee=7)
        without = BlockHeader(number=1, gas_used=3, rewardbase=PROPOSER)
        assert header_total_fee(with_base_fee, params) == 21
        assert header_total_fee(without, params) == 75

    def test_fee_deferral_disabled_returns_zeros(self, header, params):
        params = dataclasses.replace(params, deferred_tx_fee=False)
        assert deferred_fee_split(header, params, KORE) == FeeSplit(total=0, reward=0, burnt=0)

    def test_no_burn_before_magma(self, header, params):
        assert deferred_fee_split(header, params, LEGACY) == FeeSplit(total=250, reward=250, burnt=0)

    def test_magma_burns_half_truncating(self, params):
        header = BlockHeader(number=1, gas_used=1, rewardbase=PROPOSER, base_fee=7)
        assert deferred_fee_split(header, params, MAGMA) == FeeSplit(total=7, reward=4, burnt=3)

    def test_proposer_minted_share(self, params):
        # 1000 * 50/100 = 500, then 500 * 80/100 = 400
        assert proposer_minted_share(params) == 400

    def test_kore_cap_applies_after_half_burn(self, params):
        header = BlockHeader(number=1, gas_used=100, rewardbase=PROPOSER, base_fee=10)
        # 1000 total: half burn 500, then min(500, 400) = 400
        assert deferred_fee_split(header, params, KORE) == FeeSplit(total=1000, reward=100, burnt=900)

    def test_kore_burns_entire_small_fee(self, header, params):
        # 100 total: half burn 50, then min(50, 400) = 50
        assert deferred_fee_split(header, params, KORE) == FeeSplit(total=100, reward=0, burnt=100)

    def test_kore_without_magma_caps_unit_price_fee(self, header, params):
        flags = ForkFlags(magma=False, kore=True)
        assert deferred_fee_split(header, params, flags) == FeeSplit(total=250, reward=0, burnt=250)


# =============================================================================
# SPLIT ENGINE
# =============================================================================

class TestSplitEngine:

    def test_legacy_split_scenario(self, params):
        result = split_legacy(params, 1000, 0)
        assert result == SplitResult(proposer=500, stakers=0, treasury_a=250, treasury_b=250, remainder=0)

    def test_legacy_split_includes_fee_in_source(self, params):
        result = split_legacy(params, 1000, 100)
        assert (result.proposer, result.treasury_a, result.treasury_b) == (550, 275, 275)

    def test_kore_split_scenario(self, params):
        result = split_kore(params, 1000, 100)
        assert result == SplitResult(proposer=500, stakers=100, treasury_a=250, treasury_b=250, remainder=0)
        assert result.allocated == 1100

    def test_legacy_remainder(self, params):
        params = dataclasses.replace(params, ratio="34/33/33")
        result = split_legacy(params, 100, 1)
        assert (result.proposer, result.treasury_a, result.treasury_b) == (34, 33, 33)
        assert result.remainder == 1

    def test_kore_remainder(self, params):
        params = dataclasses.replace(params, ratio="34/33/33", kip82_ratio="2/1")
        result = split_kore(params, 100, 0)
        assert (result.proposer, result.stakers) == (22, 11)
        assert result.remainder == 1

    def test_dispatch_by_regime(self, params):
        assert split(params, LEGACY, 1000, 100) == split_legacy(params, 1000, 100)
        assert split(params, MAGMA, 1000, 100) == split_legacy(params, 1000, 100)
        assert split(params, KORE, 1000, 100) == split_kore(params, 1000, 100)

    @pytest.mark.parametrize("minted,fee", [(0, 0), (1, 0), (7, 3), (999_999_999_999_999_999, 12345)])
    def test_remainder_bounded_by_terms(self, params, minted, fee):
        params = dataclasses.replace(params, ratio="34/33/33", kip82_ratio="1/2")
        legacy = split_legacy(params, minted, fee)
        kore = split_kore(params, minted, fee)
        assert 0 <= legacy.remainder < 3
        assert 0 <= kore.remainder < 5
        assert legacy.allocated + legacy.remainder == minted + fee
        assert kore.allocated + kore.remainder == minted + fee


# =============================================================================
# STAKE SHARE ALLOCATOR
# =============================================================================

class TestStakeShareAllocator:

    def test_shares_by_excess_stake(self, params, snapshot):
        result = allocate(params, snapshot, 40)
        assert result.shares == {checksum(VALIDATOR_1): 10, checksum(VALIDATOR_2): 30}
        assert result.remainder == 0

    def test_absent_snapshot_returns_whole_pool(self, params):
        assert allocate(params, None, 40) == ShareResult(shares={}, remainder=40)

    def test_no_qualifying_nodes(self, params):
        snapshot = StakingSnapshot(
            block_number=1,
            nodes=[StakingNode(VALIDATOR_1, VALIDATOR_1, 100), StakingNode(VALIDATOR_2, VALIDATOR_2, 50)],
        )
        assert allocate(params, snapshot, 40) == ShareResult(shares={}, remainder=40)

    def test_truncation_remainder(self, params):
        snapshot = StakingSnapshot(
            block_number=1,
            nodes=[
                StakingNode(VALIDATOR_1, VALIDATOR_1, 101),
                StakingNode(VALIDATOR_2, VALIDATOR_2, 101),
                StakingNode(VALIDATOR_3, VALIDATOR_3, 101),
            ],
        )
        result = allocate(params, snapshot, 10)
        assert set(result.shares.values()) == {3}
        assert result.remainder == 1

    def test_zero_shares_are_omitted(self, params):
        snapshot = StakingSnapshot(
            block_number=1,
            nodes=[StakingNode(VALIDATOR_1, VALIDATOR_1, 101), StakingNode(VALIDATOR_2, VALIDATOR_2, 1100)],
        )
        # excess 1 and 1000 sharing 10: 0 and 9
        result = allocate(params, snapshot, 10)
        assert result.shares == {checksum(VALIDATOR_2): 9}
        assert result.remainder == 1

    def test_nodes_sharing_reward_address_are_consolidated(self, params):
        snapshot = StakingSnapshot(
            block_number=1,
            nodes=[
                StakingNode(VALIDATOR_1, VALIDATOR_3, 150),
                StakingNode(VALIDATOR_2, VALIDATOR_3, 150),
                StakingNode(VALIDATOR_3, VALIDATOR_1, 300),
            ],
        )
        # consolidated stake 300 and 300: excess 200 each
        result = allocate(params, snapshot, 40)
        assert result.shares == {checksum(VALIDATOR_3): 20, checksum(VALIDATOR_1): 20}

    def test_shares_never_exceed_pool(self, params, snapshot):
        for pool in (0, 1, 3, 39, 41, 10**20 + 7):
            result = allocate(params, snapshot, pool)
            assert result.remainder >= 0
            assert result.distributed + result.remainder == pool

    def test_invalid_reward_address_aborts(self, params):
        snapshot = StakingSnapshot(
            block_number=1,
            nodes=[StakingNode(VALIDATOR_1, "validator-one", 300)],
        )
        with pytest.raises(InvalidRewardAddress):
            allocate(params, snapshot, 40)


# =============================================================================
# REWARD AGGREGATOR
# =============================================================================

class TestRewardAggregator:

    def _fee(self, total=0, reward=0, burnt=0):
        return FeeSplit(total=total, reward=reward, burnt=burnt)

    def test_remainders_fold_into_treasury_a_and_proposer(self, header, snapshot):
        split_result = SplitResult(proposer=400, stakers=100, treasury_a=250, treasury_b=249, remainder=1)
        shares = ShareResult(shares={checksum(VALIDATOR_1): 99}, remainder=1)
        spec = aggregate(header, 1000, self._fee(), split_result, shares, snapshot)

        assert spec.treasury_a == 251
        assert spec.treasury_b == 249
        assert spec.proposer == 401
        assert spec.stakers == 99
        assert spec.rewards == {
            checksum(PROPOSER): 401,
            checksum(TREASURY_A): 251,
            checksum(TREASURY_B): 249,
            checksum(VALIDATOR_1): 99,
        }

    def test_empty_treasury_a_goes_to_proposer_after_fold(self, header, snapshot):
        snapshot = dataclasses.replace(snapshot, treasury_a_address="")
        split_result = SplitResult(proposer=400, stakers=0, treasury_a=250, treasury_b=249, remainder=1)
        spec = aggregate(header, 900, self._fee(), split_result, ShareResult(), snapshot)

        assert spec.treasury_a == 0
        assert spec.proposer == 400 + 251
        assert checksum(TREASURY_A) not in spec.rewards
        assert spec.rewards[checksum(TREASURY_B)] == 249

    def test_zero_address_treasury_b_counts_as_unset(self, header, snapshot):
        snapshot = dataclasses.replace(snapshot, treasury_b_address="0x" + "00" * 20)
        split_result = SplitResult(proposer=500, stakers=0, treasury_a=250, treasury_b=250, remainder=0)
        spec = aggregate(header, 1000, self._fee(), split_result, ShareResult(), snapshot)

        assert spec.treasury_b == 0
        assert spec.proposer == 750
        assert len(spec.rewards) == 2

    def test_absent_snapshot_pays_everything_to_proposer(self, header):
        split_result = SplitResult(proposer=400, stakers=100, treasury_a=250, treasury_b=250, remainder=0)
        spec = aggregate(header, 1000, self._fee(), split_result, ShareResult(remainder=100), None)

        assert spec.rewards == {checksum(PROPOSER): 1000}
        assert spec.proposer == 1000
        assert spec.stakers == 0

    def test_credits_to_same_address_accumulate(self, snapshot):
        header = BlockHeader(number=1, gas_used=0, rewardbase=TREASURY_A.upper().replace("0X", "0x"))
        split_result = SplitResult(proposer=500, stakers=0, treasury_a=250, treasury_b=250, remainder=0)
        spec = aggregate(header, 1000, self._fee(), split_result, ShareResult(), snapshot)

        assert spec.rewards == {checksum(TREASURY_A): 750, checksum(TREASURY_B): 250}
        assert spec.proposer == 500
        assert spec.treasury_a == 250
