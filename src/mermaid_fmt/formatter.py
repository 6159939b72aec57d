"""
Mermaid formatter: renders a Diagram back to canonical text.

One linear pass over the statements computes each line's depth and the
blank lines between them. The only running state is a RenderContext:
whether the declaration has been seen and how many brace blocks are open.

Depth rules:
    - everything before the declaration, the declaration itself,
      directives and end-closed block keywords sit at column 0
    - ``{`` openers and their ``}`` closers sit at the current brace depth
    - all other lines sit one level inside the innermost open brace block,
      or at depth 1 when no brace block is open
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .config import FormatConfig
from .normalizer import normalize_text
from .parser import detect_diagram_type, parse, split_lines
from .serializer import serialize
from .statements import (
    BlankLine,
    BlockAnd,
    BlockElse,
    BlockEnd,
    BlockOption,
    BlockStart,
    BraceBlockEnd,
    BraceBlockStart,
    Comment,
    Diagram,
    DiagramDecl,
    Directive,
    Frontmatter,
    GenericLine,
    Message,
    Note,
    Participant,
    Statement,
)

logger = logging.getLogger(__name__)

# Rendered at column 0 once the declaration has been seen
_COLUMN_ZERO = (DiagramDecl, Directive, Frontmatter, BlockStart, BlockOption, BlockElse, BlockAnd, BlockEnd)

_BRACE_DELIMITERS = (BraceBlockStart, BraceBlockEnd)

_BLOCK_OPENERS = (BlockStart, BraceBlockStart)

# A block opener right after one of these gets a blank line in front
_CONTENT_BEFORE_BLOCK = (BlockEnd, BraceBlockEnd, GenericLine, Message, Participant, Note)


@dataclass
class RenderContext:
    """Running state of one render pass."""

    seen_diagram_decl: bool = False
    brace_depth: int = 0

    def close_brace(self) -> None:
        self.brace_depth = max(0, self.brace_depth - 1)

    def open_brace(self) -> None:
        self.brace_depth += 1


# ============================================================
# RULES
# ============================================================


def statement_depth(statement: Statement, context: RenderContext) -> int:
    """Indentation depth of a statement under the current context."""
    if not context.seen_diagram_decl:
        return 0
    if isinstance(statement, _COLUMN_ZERO):
        return 0
    if isinstance(statement, _BRACE_DELIMITERS):
        return context.brace_depth
    return context.brace_depth if context.brace_depth > 0 else 1


def needs_blank_before(statement: Statement, previous: Optional[Statement]) -> bool:
    """Whether a blank line must separate ``statement`` from ``previous``.

    ``previous`` is the nearest preceding non-blank statement.
    """
    return isinstance(statement, _BLOCK_OPENERS) and isinstance(previous, _CONTENT_BEFORE_BLOCK)


def render_statement(statement: Statement) -> str:
    """Text of a statement without indentation."""
    if isinstance(statement, DiagramDecl):
        return statement.diagram_type.format()
    if isinstance(statement, (Directive, Comment, Note, Frontmatter)):
        return statement.text
    if isinstance(statement, Participant):
        text = f"{statement.keyword.value} {statement.name}"
        if statement.alias:
            text += f" as {statement.alias}"
        return text
    if isinstance(statement, BlockStart):
        return _with_label(statement.block.value, statement.label)
    if isinstance(statement, BraceBlockStart):
        return f"{statement.block.value} {statement.name} {{"
    if isinstance(statement, BlockOption):
        return _with_label("option", statement.label)
    if isinstance(statement, BlockElse):
        return _with_label("else", statement.label)
    if isinstance(statement, BlockAnd):
        return _with_label("and", statement.label)
    if isinstance(statement, BlockEnd):
        return "end"
    if isinstance(statement, BraceBlockEnd):
        return "}"
    if isinstance(statement, Message):
        text = f"{statement.source} {statement.arrow_token} {statement.target}:"
        if statement.text:
            text += f" {normalize_text(statement.text)}"
        return text
    if isinstance(statement, GenericLine):
        return normalize_text(statement.text)
    if isinstance(statement, BlankLine):
        return ""
    raise TypeError(f"Cannot render {type(statement).__name__}")


def _with_label(keyword: str, label: Optional[str]) -> str:
    return f"{keyword} {label}" if label else keyword


# ============================================================
# RENDERING
# ============================================================


def render_lines(diagram: Diagram, config: Optional[FormatConfig] = None) -> List[str]:
    """
    Render a Diagram to indented lines, blank lines included as ``""``.

    Runs of blank lines collapse to one and no blank line is emitted before
    the first rendered line.
    """
    config = config or FormatConfig()
    context = RenderContext()
    lines: List[str] = []
    previous: Optional[Statement] = None

    for statement in diagram.statements:
        if isinstance(statement, BlankLine):
            if lines and lines[-1] != "":
                lines.append("")
            continue

        if needs_blank_before(statement, previous) and lines and lines[-1] != "":
            lines.append("")

        if isinstance(statement, BraceBlockEnd):
            context.close_brace()

        depth = statement_depth(statement, context)
        lines.append(config.indent(depth) + render_statement(statement))

        if isinstance(statement, DiagramDecl):
            context.seen_diagram_decl = True
        elif isinstance(statement, BraceBlockStart):
            context.open_brace()
        previous = statement

    return lines


def format_diagram(diagram: Diagram, config: Optional[FormatConfig] = None) -> str:
    """Render a parsed Diagram to its canonical text."""
    return serialize(render_lines(diagram, config))


def format_mermaid(text: str, config: Optional[FormatConfig] = None) -> str:
    """
    Format Mermaid source text.

    Indentation-sensitive diagrams (mindmap, timeline) are returned as-is
    apart from line endings unless ``preserve_indent_sensitive`` is off.

    Raises:
        GrammarError: If a line matches no grammar production
        SemanticDecodeError: If a fixed-vocabulary field cannot be decoded
    """
    config = config or FormatConfig()
    if config.preserve_indent_sensitive:
        diagram_type = detect_diagram_type(text)
        if diagram_type is not None and diagram_type.is_indent_sensitive:
            logger.debug("Leaving %s diagram unformatted", diagram_type)
            return serialize(split_lines(text))
    return format_diagram(parse(text, config), config)

