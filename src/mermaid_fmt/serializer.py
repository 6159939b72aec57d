"""Joins rendered lines into the final output string."""

from typing import Iterable


def serialize(lines: Iterable[str]) -> str:
    """
    Join rendered lines with newlines.

    Trailing blank lines are dropped. Non-empty output ends with exactly
    one newline; no lines give the empty string.
    """
    out = list(lines)
    while out and not out[-1].strip():
        out.pop()
    if not out:
        return ""
    return "\n".join(out) + "\n"
