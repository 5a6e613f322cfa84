"""
Block Reward Distribution

Entry points that turn a block header and chain configuration into the
RewardSpec credited at the end of block processing:

- `get_block_reward`: reward of a block under a static ChainConfig
- `RewardDistributor`: the same computation wired to per-block governance
  and staking lookups
- `distribute_block_reward`: credits a reward map to a ledger

Round-robin and sticky proposer policies keep the simple algorithm (minted
plus fee to the proposer); every other policy uses the deferred algorithm
with staking shares and treasuries.
"""

import threading
import time
from collections import OrderedDict
from typing import TYPE_CHECKING, Callable, Mapping, Optional, Protocol

from ..constants import BLOCKREWARD_CONFIG_CACHE_SIZE, SIMPLE_REWARD_POLICIES
from ..exceptions import BlockRewardError, CollaboratorFailure, MissingConsensusConfig
from ..address import normalize_address
from ..forks import ForkFlags, ForkSchedule
from ..logger import get_logger
from .aggregator import aggregate
from .fees import deferred_fee_split, total_fee
from .ratio import parse_kip82_ratio, parse_reward_ratio
from .shares import allocate
from .split import split
from .types import BlockHeader, ProtocolParameters, RewardSpec, StakingSnapshot

if TYPE_CHECKING:
    from ..config.loader import ChainConfig

logger = get_logger(__name__)

# Called with (block_number, seconds) after each deferred computation
RewardObserver = Callable[[int, float], None]


class BalanceAdder(Protocol):
    """Ledger capability used to apply rewards."""

    def add_balance(self, address: str, amount: int) -> None:
        ...


# Narrow views of the governance and staking modules. Only the methods used
# here are declared so this package never imports those modules.
class GovernanceHelper(Protocol):

    def params_at(self, block_number: int) -> ProtocolParameters:
        ...


class StakingInfoProvider(Protocol):

    def staking_info_at(self, block_number: int) -> Optional[StakingSnapshot]:
        ...


def distribute_block_reward(ledger: BalanceAdder, rewards: Mapping[str, int]) -> None:
    """Credit every reward to the ledger, in address order."""
    for address, amount in sorted(rewards.items()):
        ledger.add_balance(address, amount)


def calc_deferred_reward_simple(
    header: BlockHeader,
    params: ProtocolParameters,
    flags: ForkFlags,
) -> RewardSpec:
    """
    Pay minted amount plus fee to the proposer, after optional fee burning.

    This keeps the historical behaviour of the round-robin and sticky
    policies: fee deferral and the Kore burn cap are not consulted, and under
    Magma both halves are `total // 2`.
    """
    minted = params.minting_amount
    if flags.magma:
        fee = total_fee(header, params, flags)
        reward_fee = fee // 2
        burnt_fee = fee // 2
    else:
        fee = header.gas_used * params.unit_price
        reward_fee = fee
        burnt_fee = 0

    proposer = minted + reward_fee
    return RewardSpec(
        minted=minted,
        fee=fee,
        burnt=burnt_fee,
        proposer=proposer,
        rewards={normalize_address(header.rewardbase): proposer},
    )


def calc_deferred_reward(
    header: BlockHeader,
    params: ProtocolParameters,
    flags: ForkFlags,
    staking_info: Optional[StakingSnapshot],
    observer: Optional[RewardObserver] = None,
) -> RewardSpec:
    """
    Calculate the deferred rewards, determined at the end of block processing.

    fee accounting → split → staking shares → aggregation
    """
    start = time.perf_counter()

    minted = params.minting_amount
    fee = deferred_fee_split(header, params, flags)
    split_result = split(params, flags, minted, fee.reward)
    shares = allocate(params, staking_info, split_result.stakers)
    spec = aggregate(header, minted, fee, split_result, shares, staking_info)

    logger.debug(f"calc_deferred_reward returns block={header.number} spec={spec}")
    if observer is not None:
        observer(header.number, time.perf_counter() - start)
    return spec


def compensate_tx_fee(spec: RewardSpec, header: BlockHeader, params: ProtocolParameters, flags: ForkFlags) -> RewardSpec:
    """
    Add the fee paid during transaction execution back into the reward spec.

    Without fee deferral the deferred accounting assumed zero fee, but the
    execution layer already paid the raw block fee to the proposer.
    """
    block_fee = total_fee(header, params, flags)
    rewardbase = normalize_address(header.rewardbase)
    rewards = dict(spec.rewards)
    rewards[rewardbase] = rewards.get(rewardbase, 0) + block_fee
    return RewardSpec(
        minted=spec.minted,
        fee=spec.fee + block_fee,
        burnt=spec.burnt,
        proposer=spec.proposer + block_fee,
        stakers=spec.stakers,
        treasury_a=spec.treasury_a,
        treasury_b=spec.treasury_b,
        rewards=rewards,
    )


def block_reward(
    header: BlockHeader,
    proposer_policy: int,
    params: ProtocolParameters,
    flags: ForkFlags,
    staking_info: Optional[StakingSnapshot],
    observer: Optional[RewardObserver] = None,
) -> RewardSpec:
    """Select the reward algorithm for the proposer policy and compute the RewardSpec."""
    if proposer_policy in SIMPLE_REWARD_POLICIES:
        return calc_deferred_reward_simple(header, params, flags)

    spec = calc_deferred_reward(header, params, flags, staking_info, observer)
    if not params.deferred_tx_fee:
        spec = compensate_tx_fee(spec, header, params, flags)
    return spec


def get_block_reward(
    header: BlockHeader,
    config: "ChainConfig",
    staking_info: Optional[StakingSnapshot] = None,
    observer: Optional[RewardObserver] = None,
) -> RewardSpec:
    """
    Return the actual reward amounts paid in this block.

    Raises:
        MissingConsensusConfig: If the chain config has no Istanbul section.
    """
    if config.istanbul is None:
        raise MissingConsensusConfig()

    return block_reward(
        header,
        config.istanbul.proposer_policy,
        config.reward,
        config.fork_flags(header.number),
        staking_info,
        observer,
    )


class RewardConfigCache:
    """
    Bounded cache of governance reward parameters by block number.

    Ratios are validated on the way in, so a malformed governance value fails
    the first block that sees it.
    """

    def __init__(self, governance: GovernanceHelper, max_size: int = 128):
        self.governance = governance
        self.max_size = max_size
        self._entries: "OrderedDict[int, ProtocolParameters]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, block_number: int) -> ProtocolParameters:
        with self._lock:
            params = self._entries.get(block_number)
            if params is not None:
                self._entries.move_to_end(block_number)
                return params

        try:
            params = self.governance.params_at(block_number)
        except BlockRewardError:
            raise
        except Exception as e:
            raise CollaboratorFailure("governance", block_number, e) from e

        parse_reward_ratio(params.ratio)
        parse_kip82_ratio(params.kip82_ratio)

        with self._lock:
            self._entries[block_number] = params
            self._entries.move_to_end(block_number)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)
        return params

    def __len__(self) -> int:
        return len(self._entries)


class RewardDistributor:
    """
    Computes block rewards from per-block governance and staking lookups.

    Attributes:
        config: Chain configuration (consensus section and fork heights)
        staking: Staking snapshot lookup
        schedule: Fork schedule resolving flags per block
        observer: Optional timing callback for deferred computations
    """

    def __init__(
        self,
        config: "ChainConfig",
        governance: GovernanceHelper,
        staking: StakingInfoProvider,
        schedule: Optional[ForkSchedule] = None,
        observer: Optional[RewardObserver] = None,
        cache_size: Optional[int] = None,
    ):
        self.config = config
        self.staking = staking
        self.schedule = schedule or config.fork_schedule()
        self.observer = observer
        self.rcc = RewardConfigCache(
            governance,
            cache_size if cache_size is not None else int(BLOCKREWARD_CONFIG_CACHE_SIZE),
        )

    def _staking_info(self, block_number: int) -> Optional[StakingSnapshot]:
        try:
            return self.staking.staking_info_at(block_number)
        except BlockRewardError:
            raise
        except Exception as e:
            raise CollaboratorFailure("staking", block_number, e) from e

    def compute_block_reward(self, header: BlockHeader) -> RewardSpec:
        """
        Compute the reward of `header`'s block.

        Raises:
            MissingConsensusConfig: If the chain config has no Istanbul section.
            CollaboratorFailure: If a governance or staking lookup fails.
            RatioError: If governance supplied a malformed ratio.
            InvalidRewardAddress: If a recipient address is not a hex account.
        """
        if self.config.istanbul is None:
            raise MissingConsensusConfig()

        policy = self.config.istanbul.proposer_policy
        params = self.rcc.get(header.number)
        flags = self.schedule.flags_at(header.number)
        staking_info = None
        if policy not in SIMPLE_REWARD_POLICIES:
            staking_info = self._staking_info(header.number)

        return block_reward(header, policy, params, flags, staking_info, self.observer)

    def distribute(self, ledger: BalanceAdder, header: BlockHeader) -> RewardSpec:
        """Compute the block reward and credit it to `ledger`."""
        spec = self.compute_block_reward(header)
        distribute_block_reward(ledger, spec.rewards)
        logger.info(
            f"Block {header.number} rewards distributed: proposer={spec.proposer} "
            f"stakers={spec.stakers} treasuryA={spec.treasury_a} treasuryB={spec.treasury_b} "
            f"burnt={spec.burnt}"
        )
        return spec
