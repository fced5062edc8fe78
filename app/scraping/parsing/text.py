"""
Text normalization shared by every pattern-matching step.
"""

from __future__ import annotations

import re

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_ESCAPED_WHITESPACE = re.compile(r"\\[rnt]")
_WHITESPACE = re.compile(r"\s+")


def normalize_text(value: str | None) -> str:
    """
    Collapse whitespace runs and drop control sequences.

    Literal escape sequences (a backslash followed by r, n or t) left behind by
    inline JSON are treated as whitespace as well.
    """

    if not value:
        return ""
    cleaned = _CONTROL_CHARS.sub(" ", value)
    cleaned = _ESCAPED_WHITESPACE.sub(" ", cleaned)
    return _WHITESPACE.sub(" ", cleaned).strip()
