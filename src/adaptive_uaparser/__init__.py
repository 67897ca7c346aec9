"""
Adaptive User-Agent parsing driven by a regexes.yaml catalog.

Usage:
    from adaptive_uaparser import new_parser

    parser = new_parser(Path("regexes.yaml"))
    client = parser.parse(request.headers["user-agent"])

    client.user_agent.family   # "Chrome"
    client.os.to_string()      # "Mac OS X 10.15.7"
    client.device.family       # "Mac"

Catalogs re-sort themselves by match frequency as traffic shifts; see
`adaptive_uaparser.catalog`.
"""

from .config import (
    DEFAULT_ACCEPTABLE_INDEX,
    DEFAULT_MISS_THRESHOLD,
    MIN_MISS_THRESHOLD,
    ConfigError,
    EngineConfig,
    LookupMode,
)
from .models import Client, Device, Os, UserAgent
from .parser import Parser, new_parser, new_parser_with_options
from .replacement import render_template

__version__ = "0.1.0"
__all__ = [
    "new_parser", "new_parser_with_options", "Parser",
    "Client", "UserAgent", "Os", "Device",
    "EngineConfig", "LookupMode", "ConfigError",
    "MIN_MISS_THRESHOLD", "DEFAULT_MISS_THRESHOLD", "DEFAULT_ACCEPTABLE_INDEX",
    "render_template",
]
