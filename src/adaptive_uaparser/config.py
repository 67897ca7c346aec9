"""
Configuration for the adaptive User-Agent parser.
"""
import logging
from dataclasses import dataclass
from enum import IntFlag

logger = logging.getLogger(__name__)

# Reorder tuning constants
MIN_MISS_THRESHOLD = 100_000
DEFAULT_MISS_THRESHOLD = 500_000
DEFAULT_ACCEPTABLE_INDEX = 20


class ConfigError(ValueError):
    """Raised when the regex configuration cannot be loaded."""
    pass


class LookupMode(IntFlag):
    """Which categories a parser looks up. Flags combine freely."""

    NONE = 0
    OS = 1
    USER_AGENT = 2
    DEVICE = 4
    ALL = OS | USER_AGENT | DEVICE


@dataclass
class EngineConfig:
    """Tuning for one parser instance.

    Usage:
        config = EngineConfig(
            mode=LookupMode.USER_AGENT | LookupMode.OS,
            miss_threshold=200_000,
            acceptable_index=10,
        )
    """

    mode: LookupMode = LookupMode.ALL

    # Misses a catalog may accumulate before it is re-sorted
    miss_threshold: int = DEFAULT_MISS_THRESHOLD

    # Matches deeper than this index count as misses
    acceptable_index: int = DEFAULT_ACCEPTABLE_INDEX

    def __post_init__(self):
        """Normalize the mode and enforce the threshold floor."""
        self.mode = LookupMode(self.mode)

        if self.miss_threshold < MIN_MISS_THRESHOLD:
            logger.warning(
                f"miss_threshold {self.miss_threshold} is below the minimum, "
                f"using {MIN_MISS_THRESHOLD}"
            )
            self.miss_threshold = MIN_MISS_THRESHOLD

        if self.acceptable_index < 0:
            logger.warning(
                f"acceptable_index {self.acceptable_index} is negative, "
                f"using {DEFAULT_ACCEPTABLE_INDEX}"
            )
            self.acceptable_index = DEFAULT_ACCEPTABLE_INDEX

    def is_enabled(self, mode: LookupMode) -> bool:
        """Check if a category is enabled."""
        return bool(self.mode & mode)
