"""
Block Reward Exceptions

Custom exception classes for block reward computation. Every error aborts
the reward computation for the block; no partial result is ever returned.
"""


class BlockRewardError(Exception):
    """Base exception for block reward computation."""
    pass


class MissingConsensusConfig(BlockRewardError):
    """Chain configuration carries no Istanbul consensus section."""
    def __init__(self, message: str = None):
        super().__init__(message or "no IstanbulConfig")


class RatioError(BlockRewardError):
    """Governance ratio string could not be used."""
    def __init__(self, ratio: str, message: str):
        self.ratio = ratio
        super().__init__(f"{message}: {ratio!r}")


class MalformedRatio(RatioError):
    """Ratio string has the wrong number of '/'-separated parts."""
    def __init__(self, ratio: str, expected_parts: int):
        self.expected_parts = expected_parts
        super().__init__(ratio, f"ratio must have {expected_parts} parts")


class InvalidRatioValue(RatioError):
    """A ratio term is not a base-10 integer."""
    def __init__(self, ratio: str, part: str):
        self.part = part
        super().__init__(ratio, f"invalid ratio term {part!r}")


class CollaboratorFailure(BlockRewardError):
    """Governance or staking lookup failed for a block."""
    def __init__(self, source: str, block_number: int, cause: Exception):
        self.source = source
        self.block_number = block_number
        self.cause = cause
        super().__init__(f"{source} lookup failed at block {block_number}: {cause}")


class RewardComputationError(BlockRewardError):
    """Arithmetic failure while splitting the reward (e.g. zero ratio total)."""
    pass


class InvalidRewardAddress(RewardComputationError):
    """A recipient address is not a 20-byte hex account."""
    def __init__(self, address):
        self.address = address
        super().__init__(f"Invalid reward address: {address!r}")


class ConfigurationError(BlockRewardError):
    """Configuration error."""
    pass
