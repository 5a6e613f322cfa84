"""
Chain Configuration Loader

Loads the reward-relevant sections of a chain config TOML file, with
environment variable overrides.

Environment variable mapping:
    [chain] unit_price                 → BLOCKREWARD_UNIT_PRICE
    [chain] magma_compatible_block     → BLOCKREWARD_MAGMA_BLOCK
    [chain] kore_compatible_block      → BLOCKREWARD_KORE_BLOCK
    [istanbul] proposer_policy         → BLOCKREWARD_PROPOSER_POLICY
    [governance.reward] deferred_tx_fee → BLOCKREWARD_DEFERRED_TX_FEE
"""

from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    import tomli  # type: ignore[no-redef]

from ..constants import DEFAULT_UNIT_PRICE, ProposerPolicy
from ..exceptions import ConfigurationError
from ..forks import ForkFlags, ForkSchedule
from ..logger import get_logger
from ..reward.types import ProtocolParameters, as_bool

logger = get_logger(__name__)


def _optional_int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    return int(v)


@dataclass
class IstanbulConfig:
    """[istanbul] section."""
    proposer_policy: int = ProposerPolicy.ROUND_ROBIN

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "IstanbulConfig":
        policy = data.get("proposer_policy", ProposerPolicy.ROUND_ROBIN)
        if isinstance(policy, str) and not policy.isdigit():
            try:
                policy = ProposerPolicy[policy.upper()]
            except KeyError:
                raise ConfigurationError(f"Unknown proposer policy: {policy!r}")
        return cls(proposer_policy=int(policy))

    def apply_env(self) -> None:
        if v := os.environ.get("BLOCKREWARD_PROPOSER_POLICY"):
            self.proposer_policy = int(v)


@dataclass
class GovernanceConfig:
    """[governance] section; `reward` holds the [governance.reward] parameters."""
    reward: ProtocolParameters = field(default_factory=ProtocolParameters)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], unit_price: int = DEFAULT_UNIT_PRICE) -> "GovernanceConfig":
        reward_data = dict(data.get("reward", {}))
        reward_data.setdefault("unit_price", unit_price)
        return cls(reward=ProtocolParameters.from_dict(reward_data))

    def apply_env(self) -> None:
        if (v := os.environ.get("BLOCKREWARD_DEFERRED_TX_FEE")) is not None:
            self.reward = dataclasses.replace(
                self.reward, deferred_tx_fee=as_bool(v, self.reward.deferred_tx_fee)
            )


@dataclass
class ChainConfig:
    """
    Reward-relevant chain configuration.

    Loaded from the [chain], [istanbul] and [governance.reward] sections.
    A config without [istanbul] has `istanbul = None` and cannot be used
    to compute rewards.
    """
    unit_price: int = DEFAULT_UNIT_PRICE
    magma_compatible_block: Optional[int] = None
    kore_compatible_block: Optional[int] = None
    istanbul: Optional[IstanbulConfig] = field(default_factory=IstanbulConfig)
    governance: GovernanceConfig = field(default_factory=GovernanceConfig)

    @property
    def reward(self) -> ProtocolParameters:
        return self.governance.reward

    def fork_schedule(self) -> ForkSchedule:
        return ForkSchedule(
            magma_block=self.magma_compatible_block,
            kore_block=self.kore_compatible_block,
        )

    def fork_flags(self, block_number: int) -> ForkFlags:
        return self.fork_schedule().flags_at(block_number)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChainConfig":
        chain = data.get("chain", {})
        unit_price = int(chain.get("unit_price", DEFAULT_UNIT_PRICE))
        istanbul_data = data.get("istanbul")
        return cls(
            unit_price=unit_price,
            magma_compatible_block=_optional_int(chain.get("magma_compatible_block")),
            kore_compatible_block=_optional_int(chain.get("kore_compatible_block")),
            istanbul=IstanbulConfig.from_dict(istanbul_data) if istanbul_data is not None else None,
            governance=GovernanceConfig.from_dict(data.get("governance", {}), unit_price),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if v := os.environ.get("BLOCKREWARD_UNIT_PRICE"):
            self.unit_price = int(v)
            self.governance.reward = dataclasses.replace(self.governance.reward, unit_price=self.unit_price)
        if v := os.environ.get("BLOCKREWARD_MAGMA_BLOCK"):
            self.magma_compatible_block = int(v)
        if v := os.environ.get("BLOCKREWARD_KORE_BLOCK"):
            self.kore_compatible_block = int(v)
        if self.istanbul is not None:
            self.istanbul.apply_env()
        self.governance.apply_env()

    @classmethod
    def from_file(cls, config_path: str) -> "ChainConfig":
        """
        Load configuration from a TOML file and apply environment overrides.

        Raises:
            ConfigurationError: If the file is missing or is not valid TOML.
        """
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {config_path}")

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML in {config_path}: {e}") from e

        try:
            config = cls.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Invalid value in {config_path}: {e}") from e
        config.apply_env()
        logger.debug(f"Loaded chain config from {path}")
        return config


def load_config(config_path: str) -> ChainConfig:
    """Load a ChainConfig from `config_path`."""
    return ChainConfig.from_file(config_path)
