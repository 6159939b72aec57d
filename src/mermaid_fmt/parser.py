"""
Parser: Mermaid source text to Diagram.

Drives the line classifier and the statement builder over a whole text,
one statement per line, tracking which start rule applies to the next line.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional, Tuple

from .builder import StatementBuilder
from .classifier import LineClassifier, LineMode
from .config import FormatConfig
from .statements import (
    BlankLine,
    Comment,
    Diagram,
    DiagramDecl,
    DiagramKind,
    DiagramType,
    Directive,
    Frontmatter,
    Statement,
)

logger = logging.getLogger(__name__)

# Statements that may precede the declaration line
_PREAMBLE = (BlankLine, Comment, Directive, Frontmatter)

FRONTMATTER_DELIMITER = "---"


def split_lines(text: str) -> List[str]:
    """Split source text into lines; CRLF is read as LF.

    A missing final newline is supplied, so ``"a"`` and ``"a\\n"`` both give
    one line.
    """
    source = text.replace("\r\n", "\n")
    if not source.endswith("\n"):
        source += "\n"
    return source.split("\n")[:-1]


def frontmatter_span(lines: List[str]) -> Optional[Tuple[int, int]]:
    """
    Locate a leading ``---`` ... ``---`` YAML block.

    Returns the 0-based indices of the opening and closing delimiter lines,
    or None when the first non-blank line is not ``---`` or the block is
    never closed.
    """
    start = next((i for i, line in enumerate(lines) if line.strip()), None)
    if start is None or lines[start].strip() != FRONTMATTER_DELIMITER:
        return None
    for end in range(start + 1, len(lines)):
        if lines[end].strip() == FRONTMATTER_DELIMITER:
            return start, end
    return None


def _next_mode(mode: LineMode, statement: Statement) -> Tuple[LineMode, Optional[DiagramKind]]:
    """Line mode after ``statement``; the dialect when it was just declared."""
    if mode not in (LineMode.LEADING, LineMode.PENDING):
        return mode, None
    if isinstance(statement, DiagramDecl):
        kind = statement.diagram_type.kind
        if kind == DiagramKind.SEQUENCE:
            return LineMode.SEQUENCE, kind
        return LineMode.BODY, kind
    if isinstance(statement, _PREAMBLE):
        return mode, None
    return LineMode.PENDING, None


def iter_statements(text: str, config: Optional[FormatConfig] = None) -> Iterator[Statement]:
    """
    Yield one Statement per source line, in order.

    Frontmatter lines are passed through as they are. Until a declaration
    is found, a line starting with a known diagram keyword declares the
    diagram, wherever it appears.

    Raises:
        GrammarError: If a line matches no grammar production
        SemanticDecodeError: If a fixed-vocabulary field cannot be decoded
    """
    classifier = LineClassifier()
    builder = StatementBuilder(config)
    mode = LineMode.LEADING
    dialect: Optional[DiagramKind] = None

    lines = split_lines(text)
    span = frontmatter_span(lines)

    for index, raw in enumerate(lines):
        line_no = index + 1
        if span is not None and span[0] <= index <= span[1]:
            yield Frontmatter(raw)
            continue
        classified = classifier.classify(raw, mode, line_no)
        statement = builder.build(classified, dialect)
        mode, declared = _next_mode(mode, statement)
        if declared is not None:
            dialect = declared
            logger.debug("Line %d declares %s", line_no, statement)
        yield statement


def parse(text: str, config: Optional[FormatConfig] = None) -> Diagram:
    """
    Parse Mermaid source into a Diagram.

    The whole text is parsed before anything is returned; on error no
    partial Diagram exists.

    Args:
        text: Diagram source
        config: Formatter options (only ``normalize_messages`` matters here)

    Returns:
        Diagram with exactly one statement per source line

    Raises:
        GrammarError: If a line matches no grammar production
        SemanticDecodeError: If a fixed-vocabulary field cannot be decoded
    """
    if not text:
        return Diagram()
    statements = tuple(iter_statements(text, config))
    logger.debug("Parsed %d statements", len(statements))
    return Diagram(statements)


def detect_diagram_type(text: str) -> Optional[DiagramType]:
    """
    Find the declared diagram type.

    Lines are only read up to the declaration. Returns None when the text
    declares no diagram.
    """
    for statement in iter_statements(text):
        if isinstance(statement, DiagramDecl):
            return statement.diagram_type
    return None
