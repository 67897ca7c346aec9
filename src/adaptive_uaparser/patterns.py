"""
Compiled catalog patterns.

A pattern wraps one rule: the compiled regex, the templates that turn its
capture groups into result fields, and the number of lines it has matched.

Field Derivation:
- A configured template is rendered against the match's groups
- Otherwise the field's positional group is used, if the regex has one
- Values are stripped; an empty optional field stays unset
"""

import re
from typing import ClassVar

from .models import Device, DeviceRule, Os, OsRule, RuleSpec, UserAgent, UserAgentRule
from .replacement import render_template


class CategoryPattern:
    """One compiled rule of a catalog.

    Subclasses declare FIELDS as (result_field, template_attribute,
    fallback_group) tuples and the RESULT record type.
    """

    FIELDS: ClassVar[tuple[tuple[str, str, int | None], ...]] = ()
    RESULT: ClassVar[type] = object

    def __init__(self, rule: RuleSpec):
        self.rule = rule
        self.regex = re.compile(rule.regex, self._regex_flags(rule))
        self.match_count = 0

    def _regex_flags(self, rule: RuleSpec) -> int:
        return 0

    def match(self, line: str):
        """
        Match a line against this pattern.

        Returns:
            A result record, or None if the regex doesn't match or
            yields an empty family
        """
        found = self.regex.search(line)
        if found is None:
            return None

        # Unmatched optional groups render as empty strings
        captures = [found.group(0)] + [group or "" for group in found.groups()]
        group_count = self.regex.groups

        values = {}
        for field, template_attr, fallback_group in self.FIELDS:
            template = getattr(self.rule, template_attr)
            if template:
                value = render_template(template, captures)
            elif fallback_group is not None and group_count >= fallback_group:
                value = captures[fallback_group]
            else:
                continue
            value = value.strip()
            if value:
                values[field] = value

        if "family" not in values:
            return None
        return self.RESULT(**values)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.rule.regex!r}, matches={self.match_count})"


class UserAgentPattern(CategoryPattern):
    FIELDS = (
        ("family", "family_replacement", 1),
        ("major", "v1_replacement", 2),
        ("minor", "v2_replacement", 3),
        ("patch", "v3_replacement", 4),
    )
    RESULT = UserAgent

    rule: UserAgentRule


class OsPattern(CategoryPattern):
    FIELDS = (
        ("family", "os_replacement", 1),
        ("major", "os_v1_replacement", 2),
        ("minor", "os_v2_replacement", 3),
        ("patch", "os_v3_replacement", 4),
        ("patch_minor", "os_v4_replacement", 5),
    )
    RESULT = Os

    rule: OsRule


class DevicePattern(CategoryPattern):
    # Brand only comes from a template; model falls back to group 1 like family
    FIELDS = (
        ("family", "device_replacement", 1),
        ("brand", "brand_replacement", None),
        ("model", "model_replacement", 1),
    )
    RESULT = Device

    rule: DeviceRule

    def _regex_flags(self, rule: DeviceRule) -> int:
        # Case-insensitivity is compiled in, not applied per match
        return re.IGNORECASE if rule.ignore_case else 0
