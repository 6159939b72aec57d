"""
Whitespace normalization for free-form diagram lines.

Only content that the classifier left unstructured goes through here.
Every step is idempotent, and so is their combination.

Brackets and pipes are only tightened when the opener is followed by a
space. ER relations such as ``||--o{`` never have that shape, so they are
left alone.
"""

import re
from typing import Optional

_SPACE_RUN = re.compile(r" {2,}")
_COLON_SPACE_RUN = re.compile(r":\s{2,}")

BRACKET_PAIRS = (("[", "]"), ("(", ")"), ("{", "}"))


def normalize_text(text: str) -> str:
    """Normalize one generic line."""
    text = _SPACE_RUN.sub(" ", text)
    text = _COLON_SPACE_RUN.sub(": ", text)
    for opener, closer in BRACKET_PAIRS:
        text = normalize_brackets(text, opener, closer)
    return normalize_pipes(text)


def _find_closer(text: str, start: int, opener: str, closer: str) -> Optional[int]:
    """Index of the closer matching the opener at ``start``, counting nesting."""
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == opener:
            depth += 1
        elif ch == closer:
            depth -= 1
            if depth == 0:
                return i
    return None


def normalize_brackets(text: str, opener: str, closer: str) -> str:
    """
    Trim the inside of ``opener ... closer`` pairs whose opener is followed
    by a space. ``[ a ]`` becomes ``[a]``; ``[a ]`` is left as is.
    """
    out = []
    i = 0
    while i < len(text):
        ch = text[i]
        if ch == opener and text[i + 1:i + 2] == " ":
            end = _find_closer(text, i, opener, closer)
            if end is not None:
                inner = normalize_brackets(text[i + 1:end], opener, closer).strip()
                out.append(opener + inner + closer)
                i = end + 1
                continue
        out.append(ch)
        i += 1
    return "".join(out)


def normalize_pipes(text: str) -> str:
    """
    Trim ``| label |`` edge labels.

    Pipes pair up left to right. A pair is trimmed only when its opening
    pipe is followed by a space; whatever follows the closing pipe is kept.
    """
    positions = [i for i, ch in enumerate(text) if ch == "|"]
    if len(positions) < 2:
        return text

    out = []
    last = 0
    for open_at, close_at in zip(positions[0::2], positions[1::2]):
        if text[open_at + 1] != " ":
            continue
        out.append(text[last:open_at + 1])
        out.append(text[open_at + 1:close_at].strip())
        last = close_at
    out.append(text[last:])
    return "".join(out)
