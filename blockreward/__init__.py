"""
Block Reward Package

Core imports are lazily loaded so that importing a submodule does not pull
in the CLI or configuration loader:

    from blockreward.reward import get_block_reward, RewardSpec
    from blockreward.config import ChainConfig
    from blockreward.exceptions import MalformedRatio
"""

__version__ = "0.1.0"


def __getattr__(name):
    """Lazy module loading."""
    if name in ('get_block_reward', 'RewardDistributor', 'RewardSpec'):
        from . import reward
        return getattr(reward, name)
    elif name == 'ChainConfig':
        from .config import ChainConfig
        return ChainConfig
    elif name == 'BlockRewardError':
        from .exceptions import BlockRewardError
        return BlockRewardError
    raise AttributeError(f"module 'blockreward' has no attribute {name!r}")

__all__ = ['get_block_reward', 'RewardDistributor', 'RewardSpec', 'ChainConfig', 'BlockRewardError']
