"""
Replacement template rendering.

Rule templates reference capture groups by index: "$1" is group 1, "$12"
is group 12 (digits are read greedily). Index 0 is the whole match and is
never substituted. Tokens that don't resolve to a capture are kept as
written, so "$9" against three captures stays "$9".
"""

import re
from collections.abc import Sequence

_TOKEN = re.compile(r"\$([0-9]*)")


def render_template(template: str, captures: Sequence[str]) -> str:
    """
    Substitute $N tokens in a template with captured groups.

    Args:
        template: Replacement template (e.g., "$1 Mobile")
        captures: Match groups, index 0 being the whole match

    Returns:
        The rendered string

    Examples:
        >>> render_template("$1 $2", ["full", "Chrome", "99"])
        'Chrome 99'
        >>> render_template("$9", ["full", "Chrome", "99"])
        '$9'
    """
    if "$" not in template:
        return template

    def _substitute(token: re.Match) -> str:
        digits = token.group(1)
        if not digits:
            return "$"
        index = int(digits)
        if index <= 0 or index >= len(captures):
            return token.group(0)
        return captures[index]

    return _TOKEN.sub(_substitute, template)
