"""
Block Reward Constants

This module consolidates the protocol constants and environment configuration
used by the reward computation. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from enum import IntEnum

from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

REWARD_DEFAULTS = {
    'BLOCKREWARD_CONFIG_CACHE_SIZE':    '128',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW ARE CONSENSUS-CRITICAL. EVERY VALIDATING NODE MUST COMPUTE IDENTICAL
# REWARDS FROM THE SAME HEADER AND CONFIGURATION. CHANGING THEM ON A LIVE NETWORK FORKS THE CHAIN.

# ==================================================================================
# RATIO FORMAT
# ==================================================================================
RATIO_SEPARATOR = '/'
REWARD_SLICE_COUNT = 3        # proposer-pool / treasury-A / treasury-B
REWARD_KIP82_SLICE_COUNT = 2  # proposer / stakers


# ==================================================================================
# GOVERNANCE DEFAULTS
# ==================================================================================
DEFAULT_MINTING_AMOUNT = 6_400_000_000_000_000_000  # 6.4 units of 10^18
DEFAULT_RATIO = '100/0/0'
DEFAULT_KIP82_RATIO = '20/80'
DEFAULT_MINIMUM_STAKE = 2_000_000
DEFAULT_UNIT_PRICE = 250_000_000_000
DEFAULT_DEFERRED_TX_FEE = False


# ==================================================================================
# ADDRESSES
# ==================================================================================
ZERO_ADDRESS = '0x' + '00' * 20


class ProposerPolicy(IntEnum):
    """Istanbul proposer-selection policies."""
    ROUND_ROBIN = 0
    STICKY = 1
    WEIGHTED_RANDOM = 2


# Policies paid with the simple (no staking pool) algorithm
SIMPLE_REWARD_POLICIES = frozenset({ProposerPolicy.ROUND_ROBIN, ProposerPolicy.STICKY})


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
DEFAULTS = LOGGER_DEFAULTS | REWARD_DEFAULTS
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
