"""
Catalog loading from a regexes.yaml document.

The document has three sections, each an ordered list of rules:

    user_agent_parsers:
      - regex: '(Chrome)/(\\d+)\\.(\\d+)'
    os_parsers:
      - regex: 'Windows NT 10\\.0'
        os_replacement: 'Windows'
        os_v1_replacement: '10'
    device_parsers:
      - regex: '; *(Pixel [^;)]+)'
        regex_flag: 'i'
        brand_replacement: 'Google'

Rule keys match field names case-insensitively, ignoring anything that
isn't a letter or digit ("Family Replacement" == "family_replacement").
The three sections share nothing, so they compile in parallel.
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import yaml
from pydantic import ValidationError

from .catalog import PatternCatalog
from .config import ConfigError, EngineConfig
from .models import Device, DeviceRule, Os, OsRule, RuleSpec, UserAgent, UserAgentRule
from .patterns import CategoryPattern, DevicePattern, OsPattern, UserAgentPattern

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")


@dataclass(frozen=True)
class CategorySpec:
    """How one section of the document becomes a catalog."""
    section: str
    rule_type: type[RuleSpec]
    pattern_type: type[CategoryPattern]
    result_type: type


USER_AGENT_SPEC = CategorySpec("user_agent_parsers", UserAgentRule, UserAgentPattern, UserAgent)
OS_SPEC = CategorySpec("os_parsers", OsRule, OsPattern, Os)
DEVICE_SPEC = CategorySpec("device_parsers", DeviceRule, DevicePattern, Device)

CATEGORIES = (USER_AGENT_SPEC, OS_SPEC, DEVICE_SPEC)


def normalize_key(key: str) -> str:
    """Normalize a rule key for matching against field names."""
    return _NON_ALNUM.sub("", str(key)).lower()


def parse_document(source: str | bytes) -> dict:
    """
    Parse the YAML document into its top-level mapping.

    Raises:
        ConfigError: If the YAML is malformed or not a mapping
    """
    try:
        document = yaml.safe_load(source)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid regex configuration: {exc}") from exc

    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise ConfigError(
            f"Regex configuration must be a mapping of sections, "
            f"got {type(document).__name__}"
        )
    return document


def build_rule(spec: CategorySpec, position: int, entry) -> RuleSpec:
    """
    Build a typed rule from one raw entry.

    Args:
        spec: Category of the entry
        position: Index of the entry within its section
        entry: Raw mapping from the document

    Raises:
        ConfigError: If the entry isn't a mapping or lacks a valid regex
    """
    if not isinstance(entry, dict):
        raise ConfigError(f"{spec.section}[{position}]: expected a mapping, got {type(entry).__name__}")

    fields = {normalize_key(name): name for name in spec.rule_type.model_fields}
    values = {}
    for key, value in entry.items():
        field = fields.get(normalize_key(key))
        if field is None:
            logger.debug(f"{spec.section}[{position}]: ignoring unknown key {key!r}")
            continue
        if value is None:
            continue
        # YAML reads unquoted versions (e.g. 10) as numbers
        values[field] = value if isinstance(value, str) else str(value)

    try:
        return spec.rule_type(**values)
    except ValidationError as exc:
        raise ConfigError(f"{spec.section}[{position}]: {exc}") from exc


def build_catalog(spec: CategorySpec, entries: list, config: EngineConfig) -> PatternCatalog:
    """
    Compile the entries of one section into a catalog.

    Raises:
        ConfigError: If an entry is invalid or its regex doesn't compile
    """
    patterns = []
    for position, entry in enumerate(entries):
        rule = build_rule(spec, position, entry)
        try:
            patterns.append(spec.pattern_type(rule))
        except (re.error, OverflowError, RecursionError) as exc:
            raise ConfigError(
                f"{spec.section}[{position}]: invalid regex {rule.regex!r}: {exc}"
            ) from exc

    return PatternCatalog(
        name=spec.section,
        patterns=patterns,
        result_type=spec.result_type,
        miss_threshold=config.miss_threshold,
        acceptable_index=config.acceptable_index,
    )


def _section_entries(document: dict, spec: CategorySpec) -> list:
    entries = document.get(spec.section)
    if entries is None:
        logger.warning(f"Regex configuration has no {spec.section} section")
        return []
    if not isinstance(entries, list):
        raise ConfigError(f"{spec.section} must be a list, got {type(entries).__name__}")
    return entries


def load_catalogs(
    source: str | bytes,
    config: EngineConfig | None = None,
    parallel: bool = True,
) -> tuple[PatternCatalog, PatternCatalog, PatternCatalog]:
    """
    Load the user agent, OS and device catalogs from a YAML document.

    Args:
        source: YAML text
        config: Tuning applied to every catalog
        parallel: Compile the three sections concurrently

    Returns:
        (user_agent_catalog, os_catalog, device_catalog)

    Raises:
        ConfigError: If any section fails to load. No partial result
                     is returned.
    """
    config = config or EngineConfig()
    document = parse_document(source)
    sections = [(spec, _section_entries(document, spec)) for spec in CATEGORIES]

    if parallel:
        with ThreadPoolExecutor(max_workers=len(sections), thread_name_prefix="uap-load") as pool:
            futures = [
                pool.submit(build_catalog, spec, entries, config)
                for spec, entries in sections
            ]
            # result() re-raises the first ConfigError in category order
            catalogs = [future.result() for future in futures]
    else:
        catalogs = [build_catalog(spec, entries, config) for spec, entries in sections]

    user_agents, oses, devices = catalogs
    logger.info(
        f"Loaded {len(user_agents)} user agent, {len(oses)} OS "
        f"and {len(devices)} device patterns"
    )
    return user_agents, oses, devices
