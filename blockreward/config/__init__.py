"""
Chain configuration for reward computation.

Loads config.toml at startup. Environment variables override TOML values.
"""

from .loader import (
    ChainConfig,
    GovernanceConfig,
    IstanbulConfig,
    load_config,
)

__all__ = [
    "ChainConfig",
    "GovernanceConfig",
    "IstanbulConfig",
    "load_config",
]
