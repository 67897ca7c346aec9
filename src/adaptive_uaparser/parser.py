"""
User-Agent parser.

Runs a line through the catalogs selected by the parser's lookup mode and
assembles the results. A category with no matching pattern reports family
"Other"; that is a normal answer, never an error.

Usage:
    from adaptive_uaparser import LookupMode, new_parser_with_options

    parser = new_parser_with_options(
        Path("regexes.yaml"),
        mode=LookupMode.USER_AGENT | LookupMode.OS,
        miss_threshold=200_000,
        acceptable_index=10,
    )
    client = parser.parse(user_agent)
    client.user_agent.family  # "Chrome"
    client.device             # None, not requested
"""

import logging
from os import PathLike
from pathlib import Path

from .catalog import PatternCatalog
from .config import ConfigError, EngineConfig, LookupMode
from .loader import load_catalogs
from .models import Client, Device, Os, UserAgent

logger = logging.getLogger(__name__)

ConfigSource = str | bytes | PathLike


class Parser:
    """Classifies User-Agent strings. Safe to share between threads."""

    def __init__(
        self,
        user_agents: PatternCatalog,
        oses: PatternCatalog,
        devices: PatternCatalog,
        config: EngineConfig | None = None,
    ):
        self.config = config or EngineConfig()
        self.user_agents = user_agents
        self.oses = oses
        self.devices = devices

    @classmethod
    def from_yaml(cls, source: str | bytes, config: EngineConfig | None = None) -> "Parser":
        """Build a parser from regexes.yaml content.

        Raises:
            ConfigError: If the document can't be loaded
        """
        config = config or EngineConfig()
        user_agents, oses, devices = load_catalogs(source, config)
        return cls(user_agents, oses, devices, config)

    @classmethod
    def from_file(cls, path: str | PathLike, config: EngineConfig | None = None) -> "Parser":
        """Build a parser from a regexes.yaml file.

        Raises:
            ConfigError: If the file can't be read or loaded
        """
        try:
            source = Path(path).read_bytes()
        except OSError as exc:
            raise ConfigError(f"Cannot read regex configuration {path}: {exc}") from exc
        return cls.from_yaml(source, config)

    @property
    def mode(self) -> LookupMode:
        return self.config.mode

    def _enabled_catalogs(self) -> list[PatternCatalog]:
        enabled = []
        if self.config.is_enabled(LookupMode.USER_AGENT):
            enabled.append(self.user_agents)
        if self.config.is_enabled(LookupMode.OS):
            enabled.append(self.oses)
        if self.config.is_enabled(LookupMode.DEVICE):
            enabled.append(self.devices)
        return enabled

    def parse_user_agent(self, line: str) -> UserAgent:
        """Look up the browser family and version."""
        result, _ = self.user_agents.lookup(line)
        return result

    def parse_os(self, line: str) -> Os:
        """Look up the OS family and version."""
        result, _ = self.oses.lookup(line)
        return result

    def parse_device(self, line: str) -> Device:
        """Look up the device family, brand and model."""
        result, _ = self.devices.lookup(line)
        return result

    def parse(self, line: str) -> Client:
        """
        Parse a User-Agent string.

        Only categories enabled in the lookup mode are parsed; the rest
        stay None on the returned Client. Catalogs that have collected
        enough misses are re-sorted before returning.

        Args:
            line: The User-Agent header value

        Returns:
            Client with a result for each enabled category
        """
        user_agent = os = device = None
        if self.config.is_enabled(LookupMode.USER_AGENT):
            user_agent = self.parse_user_agent(line)
        if self.config.is_enabled(LookupMode.OS):
            os = self.parse_os(line)
        if self.config.is_enabled(LookupMode.DEVICE):
            device = self.parse_device(line)

        for catalog in self._enabled_catalogs():
            if catalog.reorder_if_due():
                logger.debug(f"{catalog.name} catalog reordered")

        return Client(user_agent=user_agent, os=os, device=device)

    def stats(self) -> dict:
        """Per-category catalog order and counters."""
        return {
            "mode": int(self.config.mode),
            "user_agent": self.user_agents.stats(),
            "os": self.oses.stats(),
            "device": self.devices.stats(),
        }


def _load(source: ConfigSource, config: EngineConfig) -> Parser:
    if isinstance(source, PathLike):
        return Parser.from_file(source, config)
    return Parser.from_yaml(source, config)


def new_parser(source: ConfigSource) -> Parser:
    """
    Create a parser with every category enabled and default tuning.

    Args:
        source: regexes.yaml content, or a Path to the file
    """
    return _load(source, EngineConfig())


def new_parser_with_options(
    source: ConfigSource,
    mode: LookupMode,
    miss_threshold: int,
    acceptable_index: int,
) -> Parser:
    """
    Create a parser with explicit tuning.

    Args:
        source: regexes.yaml content, or a Path to the file
        mode: Categories to look up
        miss_threshold: Misses before a catalog is re-sorted. Values below
                        MIN_MISS_THRESHOLD are raised to it.
        acceptable_index: Deepest catalog index that doesn't count as a miss
    """
    config = EngineConfig(
        mode=mode,
        miss_threshold=miss_threshold,
        acceptable_index=acceptable_index,
    )
    return _load(source, config)
