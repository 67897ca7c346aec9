"""Rule specs and parse results."""

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict

OTHER = "Other"


# =============================================================================
# RULE SPECS (one entry of regexes.yaml)
# =============================================================================

class RuleSpec(BaseModel):
    """A raw catalog entry. Immutable once loaded."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    regex: str


class UserAgentRule(RuleSpec):
    """Entry of `user_agent_parsers`."""

    family_replacement: str | None = None
    v1_replacement: str | None = None
    v2_replacement: str | None = None
    v3_replacement: str | None = None


class OsRule(RuleSpec):
    """Entry of `os_parsers`."""

    os_replacement: str | None = None
    os_v1_replacement: str | None = None
    os_v2_replacement: str | None = None
    os_v3_replacement: str | None = None
    os_v4_replacement: str | None = None


class DeviceRule(RuleSpec):
    """Entry of `device_parsers`."""

    regex_flag: str | None = None
    device_replacement: str | None = None
    brand_replacement: str | None = None
    model_replacement: str | None = None

    @property
    def ignore_case(self) -> bool:
        """Check if the rule asks for case-insensitive matching."""
        return bool(self.regex_flag and "i" in self.regex_flag)


# =============================================================================
# PARSE RESULTS
# =============================================================================

def _join_version(*parts: str | None) -> str:
    """Join leading non-empty version parts with dots."""
    version = []
    for part in parts:
        if not part:
            break
        version.append(part)
    return ".".join(version)


@dataclass(frozen=True)
class UserAgent:
    """
    Parsed browser (user agent) information.

    Attributes:
        family: Browser family (Chrome, Firefox, ...), "Other" when unknown
        major: Major version
        minor: Minor version
        patch: Patch version
    """
    family: str = OTHER
    major: str | None = None
    minor: str | None = None
    patch: str | None = None

    def to_version_string(self) -> str:
        return _join_version(self.major, self.minor, self.patch)

    def to_string(self) -> str:
        """Family followed by the version, e.g. "Chrome 99.0.1"."""
        version = self.to_version_string()
        return f"{self.family} {version}" if version else self.family

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
        }


@dataclass(frozen=True)
class Os:
    """
    Parsed operating system information.

    Attributes:
        family: OS family (Windows, iOS, ...), "Other" when unknown
        major: Major version
        minor: Minor version
        patch: Patch version
        patch_minor: Fourth version component
    """
    family: str = OTHER
    major: str | None = None
    minor: str | None = None
    patch: str | None = None
    patch_minor: str | None = None

    def to_version_string(self) -> str:
        return _join_version(self.major, self.minor, self.patch, self.patch_minor)

    def to_string(self) -> str:
        version = self.to_version_string()
        return f"{self.family} {version}" if version else self.family

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "major": self.major,
            "minor": self.minor,
            "patch": self.patch,
            "patch_minor": self.patch_minor,
        }


@dataclass(frozen=True)
class Device:
    """
    Parsed device information.

    Attributes:
        family: Device family (iPhone, Pixel 7, ...), "Other" when unknown
        brand: Manufacturer
        model: Model name
    """
    family: str = OTHER
    brand: str | None = None
    model: str | None = None

    def to_string(self) -> str:
        return self.family

    def to_dict(self) -> dict:
        return {
            "family": self.family,
            "brand": self.brand,
            "model": self.model,
        }


@dataclass(frozen=True)
class Client:
    """
    Combined result for one line. Categories that were not requested
    are left as None.
    """
    user_agent: UserAgent | None = None
    os: Os | None = None
    device: Device | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON responses."""
        return {
            "user_agent": self.user_agent.to_dict() if self.user_agent else None,
            "os": self.os.to_dict() if self.os else None,
            "device": self.device.to_dict() if self.device else None,
        }
