"""
Block Reward Types

Point-in-time inputs and the result record of a reward computation. Every
amount is an arbitrary-precision integer in the smallest currency unit.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional

from ..constants import (
    DEFAULT_DEFERRED_TX_FEE,
    DEFAULT_KIP82_RATIO,
    DEFAULT_MINIMUM_STAKE,
    DEFAULT_MINTING_AMOUNT,
    DEFAULT_RATIO,
    DEFAULT_UNIT_PRICE,
)
from ..exceptions import ConfigurationError


def as_bool(v: Any, default: bool) -> bool:
    """Parse a config flag; `None` means unset. Unknown strings are rejected."""
    if v is None:
        return bool(default)
    if isinstance(v, bool):
        return v
    s = str(v).strip().lower()
    if s in {"1", "true", "yes", "y", "on"}:
        return True
    if s in {"0", "false", "no", "n", "off"}:
        return False
    raise ConfigurationError(f"Invalid boolean value: {v!r}")


@dataclass(frozen=True)
class ProtocolParameters:
    """
    Governance reward parameters in force at one block.

    Attributes:
        minting_amount: Currency issued per block
        ratio: Pool split "proposer-pool/treasury-A/treasury-B"
        kip82_ratio: Sub-split of the proposer pool "proposer/stakers"
        minimum_stake: Stake a node must exceed to receive a staking share
        deferred_tx_fee: Whether fees are distributed at the end of the block
        unit_price: Fixed gas price used before the base fee existed
    """
    minting_amount: int = DEFAULT_MINTING_AMOUNT
    ratio: str = DEFAULT_RATIO
    kip82_ratio: str = DEFAULT_KIP82_RATIO
    minimum_stake: int = DEFAULT_MINIMUM_STAKE
    deferred_tx_fee: bool = DEFAULT_DEFERRED_TX_FEE
    unit_price: int = DEFAULT_UNIT_PRICE

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProtocolParameters":
        """Create from a governance snapshot mapping (amounts may be strings)."""
        return cls(
            minting_amount=int(data.get("minting_amount", DEFAULT_MINTING_AMOUNT)),
            ratio=str(data.get("ratio", DEFAULT_RATIO)),
            kip82_ratio=str(data.get("kip82_ratio", DEFAULT_KIP82_RATIO)),
            minimum_stake=int(data.get("minimum_stake", DEFAULT_MINIMUM_STAKE)),
            deferred_tx_fee=as_bool(data.get("deferred_tx_fee"), DEFAULT_DEFERRED_TX_FEE),
            unit_price=int(data.get("unit_price", DEFAULT_UNIT_PRICE)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minting_amount": str(self.minting_amount),
            "ratio": self.ratio,
            "kip82_ratio": self.kip82_ratio,
            "minimum_stake": str(self.minimum_stake),
            "deferred_tx_fee": self.deferred_tx_fee,
            "unit_price": str(self.unit_price),
        }


@dataclass(frozen=True)
class BlockHeader:
    """Header fields consumed by the reward computation."""
    number: int
    gas_used: int
    rewardbase: str
    base_fee: Optional[int] = None


@dataclass(frozen=True)
class StakingNode:
    """A validator node's stake and payout address."""
    node_address: str
    reward_address: str
    staking_amount: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingNode":
        return cls(
            node_address=data["node_address"],
            reward_address=data.get("reward_address") or data["node_address"],
            staking_amount=int(data["staking_amount"]),
        )


@dataclass(frozen=True)
class StakingSnapshot:
    """
    Staking state at one block.

    Attributes:
        block_number: Block the snapshot was taken at
        nodes: Validator nodes with stake and reward address
        treasury_a_address: Treasury-A recipient (may be unset)
        treasury_b_address: Treasury-B recipient (may be unset)
    """
    block_number: int
    nodes: List[StakingNode] = field(default_factory=list)
    treasury_a_address: Optional[str] = None
    treasury_b_address: Optional[str] = None

    def consolidated(self) -> List[StakingNode]:
        """
        Merge nodes paid to the same reward address into one entry.

        Stakes are summed; entries keep first-seen order.
        """
        merged: Dict[str, StakingNode] = {}
        for node in self.nodes:
            key = node.reward_address.lower()
            existing = merged.get(key)
            if existing is None:
                merged[key] = node
            else:
                merged[key] = StakingNode(
                    node_address=existing.node_address,
                    reward_address=existing.reward_address,
                    staking_amount=existing.staking_amount + node.staking_amount,
                )
        return list(merged.values())

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StakingSnapshot":
        return cls(
            block_number=int(data.get("block_number", 0)),
            nodes=[StakingNode.from_dict(n) for n in data.get("nodes", [])],
            treasury_a_address=data.get("treasury_a_address"),
            treasury_b_address=data.get("treasury_b_address"),
        )


@dataclass(frozen=True)
class RewardSpec:
    """
    Actual reward amounts paid in a block.

    Attributes:
        minted: Amount newly minted
        fee: Total transaction fee spent
        burnt: Amount burnt
        proposer: Amount allocated to the block proposer
        stakers: Amount paid out as staking shares
        treasury_a: Amount allocated to treasury-A
        treasury_b: Amount allocated to treasury-B
        rewards: Read-only mapping from reward recipient to amount
    """
    minted: int
    fee: int
    burnt: int
    proposer: int
    stakers: int = 0
    treasury_a: int = 0
    treasury_b: int = 0
    rewards: Mapping[str, int] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "rewards", MappingProxyType(dict(self.rewards)))

    @property
    def total_distributed(self) -> int:
        return sum(self.rewards.values())

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization; amounts as decimal strings."""
        return {
            'minted': str(self.minted),
            'totalFee': str(self.fee),
            'burntFee': str(self.burnt),
            'proposer': str(self.proposer),
            'stakers': str(self.stakers),
            'treasuryA': str(self.treasury_a),
            'treasuryB': str(self.treasury_b),
            'rewards': {addr: str(amount) for addr, amount in sorted(self.rewards.items())},
        }
