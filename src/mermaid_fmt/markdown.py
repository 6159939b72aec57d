"""
Markdown support: formats the ```mermaid blocks of a markdown document.

Fenced blocks are found with a line scanner. Each mermaid block is
formatted on its own and written back with the fence's indentation; the
rest of the document is left untouched.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import List, Optional

from .config import FormatConfig
from .exceptions import MermaidParseError
from .formatter import format_mermaid
from .parser import split_lines

logger = logging.getLogger(__name__)

# ============================================================
# DATA CLASSES
# ============================================================


@dataclass
class CodeBlock:
    """A fenced code block extracted from markdown."""

    language: Optional[str]
    content: str
    start_line: int  # 1-indexed, line of opening fence
    end_line: int  # 1-indexed, line of closing fence
    indent: str = ""  # whitespace before the opening fence


# ============================================================
# FENCE EXTRACTION
# ============================================================

# Matches opening fence: ``` or ~~~ with optional language tag
_FENCE_OPEN = re.compile(r"^(?P<indent>[ \t]*)(?P<fence>`{3,}|~{3,})(?P<lang>[^\s`]*).*$")


def extract_code_fences(content: str) -> List[CodeBlock]:
    """Extract closed fenced code blocks, in document order.

    An unclosed fence runs to the end of the document and is not returned.
    """
    lines = split_lines(content)
    blocks: List[CodeBlock] = []

    in_fence = False
    fence_char = ""
    fence_min_len = 0
    fence_lang: Optional[str] = None
    fence_indent = ""
    fence_start = 0
    fence_content_lines: List[str] = []

    for i, line in enumerate(lines, 1):
        if not in_fence:
            m = _FENCE_OPEN.match(line)
            if m:
                fence_char = m.group("fence")[0]
                fence_min_len = len(m.group("fence"))
                lang = m.group("lang").strip().lower()
                fence_lang = lang if lang else None
                fence_indent = m.group("indent")
                fence_start = i
                fence_content_lines = []
                in_fence = True
            continue

        # Closing fence: same char, at least same length, nothing else
        close_stripped = line.strip()
        if (
            len(close_stripped) >= fence_min_len
            and all(c == fence_char for c in close_stripped)
        ):
            blocks.append(
                CodeBlock(
                    language=fence_lang,
                    content="\n".join(fence_content_lines),
                    start_line=fence_start,
                    end_line=i,
                    indent=fence_indent,
                )
            )
            in_fence = False
            continue
        fence_content_lines.append(line)

    if in_fence:
        logger.warning("Unclosed code fence starting at line %d left as is", fence_start)

    return blocks


# ============================================================
# FORMATTING
# ============================================================


def _dedent(content: str, indent: str) -> str:
    if not indent:
        return content
    return "\n".join(
        line[len(indent):] if line.startswith(indent) else line
        for line in content.split("\n")
    )


def format_markdown(text: str, config: Optional[FormatConfig] = None) -> str:
    """
    Format every mermaid code block of a markdown document.

    Output uses LF line endings. Parse errors are re-raised with line
    numbers relative to the markdown document.

    Raises:
        GrammarError: If a mermaid block contains a line no production accepts
        SemanticDecodeError: If a fixed-vocabulary field cannot be decoded
    """
    source = text.replace("\r\n", "\n")
    lines = source.split("\n")
    blocks = [b for b in extract_code_fences(source) if b.language == "mermaid"]
    if not blocks:
        return source

    out: List[str] = []
    cursor = 0
    for block in blocks:
        out.extend(lines[cursor:block.start_line])
        try:
            formatted = format_mermaid(_dedent(block.content, block.indent), config)
        except MermaidParseError as e:
            raise e.shifted(block.start_line) from e
        for line in formatted.split("\n")[:-1]:
            out.append(block.indent + line if line else line)
        cursor = block.end_line - 1

    out.extend(lines[cursor:])
    logger.debug("Formatted %d mermaid block(s)", len(blocks))
    return "\n".join(out)
