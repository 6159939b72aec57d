"""
Statement builder: turns classified lines into typed Statements.

All decoding and fallback policy lives here. Open vocabularies fall back
(an unknown diagram keyword becomes a plain flowchart); closed vocabularies
(block kinds, participant keywords, message arrows) are decoded by exact
match and reject anything else with a SemanticDecodeError.
"""

from __future__ import annotations

import logging
import re
from enum import Enum
from typing import Callable, Dict, Optional, Type, TypeVar

from .classifier import ClassifiedLine
from .config import FormatConfig
from .exceptions import SemanticDecodeError
from .statements import (
    Arrow,
    BlankLine,
    BlockAnd,
    BlockElse,
    BlockEnd,
    BlockKind,
    BlockOption,
    BlockStart,
    BraceBlockEnd,
    BraceBlockKind,
    BraceBlockStart,
    Comment,
    DiagramDecl,
    DiagramKind,
    DiagramType,
    Directive,
    GenericLine,
    Message,
    Note,
    Participant,
    ParticipantKeyword,
    Statement,
)

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_DIRECTED_KINDS = (DiagramKind.FLOWCHART, DiagramKind.GRAPH)

# Longest keyword first: stateDiagram-v2 before stateDiagram
_DECLARATION_PATTERN = re.compile(
    r"^(?P<keyword>"
    + "|".join(re.escape(k.value) for k in sorted(DiagramKind, key=lambda k: len(k.value), reverse=True))
    + r")\b(?P<rest>.*)$"
)

# SOURCE ARROW TARGET : TEXT, where ARROW is anything arrow-shaped. Whether
# the arrow is a real one is decided by the Arrow vocabulary afterwards.
_MESSAGE_PATTERN = re.compile(
    r"^(?P<source>.+?)\s*"
    r"(?P<arrow>(?:<<)?-{1,3}(?:>>|>|x|\))[+-]?)"
    r"\s*(?P<target>.+?)\s*:\s*(?P<text>.*)$"
)


# ============================================================
# DECODERS
# ============================================================


def decode_diagram_type(text: str) -> DiagramType:
    """
    Decode a declaration line into a DiagramType.

    The keyword must match exactly and end at a word boundary. A single
    word after ``flowchart``/``graph`` is the direction and a leading
    ``showData`` after ``pie`` sets ``show_data``; any other trailing text
    is kept as the suffix. Anything unrecognized decodes to a flowchart
    without direction.
    """
    m = _DECLARATION_PATTERN.match(text.strip())
    if m is None:
        logger.debug("Unrecognized diagram declaration %r, treating as flowchart", text)
        return DiagramType(DiagramKind.FLOWCHART)

    kind = DiagramKind(m.group("keyword"))
    rest = m.group("rest")
    if not rest:
        return DiagramType(kind)
    # Glued suffix, e.g. flowchart-elk
    if not rest[0].isspace():
        return DiagramType(kind, suffix=rest)

    words = rest.split(None, 1)
    head = words[0]
    tail = words[1] if len(words) > 1 else ""
    if kind in _DIRECTED_KINDS and not tail:
        return DiagramType(kind, direction=head)
    if kind == DiagramKind.PIE and head == "showData":
        return DiagramType(kind, show_data=True, suffix=f" {tail}" if tail else None)
    return DiagramType(kind, suffix=f" {rest.strip()}")


def decode_token(vocabulary: Type[E], token: str, line: int = 0, context: Optional[str] = None) -> E:
    """Decode a fixed-vocabulary token by exact match."""
    try:
        return vocabulary(token)
    except ValueError:
        choices = ", ".join(member.value for member in vocabulary)
        raise SemanticDecodeError(
            f"Unknown {_vocabulary_name(vocabulary)} {token!r}",
            token=token,
            line=line,
            column=_column_of(context, token),
            context=context,
            suggestion=f"Expected one of: {choices}",
        ) from None


def _vocabulary_name(vocabulary: Type[Enum]) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", " ", vocabulary.__name__).lower()


def _column_of(context: Optional[str], token: str) -> int:
    if not context or not token:
        return 0
    return context.find(token) + 1


def _optional(value: Optional[str]) -> Optional[str]:
    """Trimmed text, or None when nothing is left."""
    if value is None:
        return None
    value = value.strip()
    return value or None


# ============================================================
# BUILDER
# ============================================================


class StatementBuilder:
    """
    Builds one Statement per classified line.

    ``normalize_messages`` enables Message decoding for generic lines of
    sequence diagrams.
    """

    def __init__(self, config: Optional[FormatConfig] = None):
        self.config = config or FormatConfig()
        self._builders: Dict[str, Callable[[ClassifiedLine], Statement]] = {
            "blank_line": self._build_blank,
            "diagram_decl": self._build_diagram_decl,
            "directive": self._build_directive,
            "comment": self._build_comment,
            "participant": self._build_participant,
            "block_start": self._build_block_start,
            "brace_block_start": self._build_brace_block_start,
            "block_option": self._build_block_option,
            "block_else": self._build_block_else,
            "block_and": self._build_block_and,
            "block_end": self._build_block_end,
            "brace_block_end": self._build_brace_block_end,
            "note": self._build_note,
            "generic_line": self._build_generic,
        }

    def build(self, classified: ClassifiedLine, dialect: Optional[DiagramKind] = None) -> Statement:
        """
        Build the Statement for a classified line.

        Args:
            classified: Output of the line classifier
            dialect: Diagram kind declared so far, if any

        Raises:
            SemanticDecodeError: If a fixed-vocabulary field is unknown
        """
        builder = self._builders.get(classified.rule)
        if builder is None:
            raise ValueError(f"No statement builder for production {classified.rule!r}")

        if (
            classified.rule == "generic_line"
            and self.config.normalize_messages
            and dialect == DiagramKind.SEQUENCE
        ):
            message = self._build_message(classified)
            if message is not None:
                return message

        return builder(classified)

    # --------------------------------------------------------
    # Per-production builders
    # --------------------------------------------------------

    def _build_blank(self, classified: ClassifiedLine) -> BlankLine:
        return BlankLine()

    def _build_diagram_decl(self, classified: ClassifiedLine) -> DiagramDecl:
        return DiagramDecl(decode_diagram_type(classified.text))

    def _build_directive(self, classified: ClassifiedLine) -> Directive:
        return Directive(classified.text)

    def _build_comment(self, classified: ClassifiedLine) -> Comment:
        return Comment(classified.text)

    def _build_participant(self, classified: ClassifiedLine) -> Participant:
        keyword = "actor" if classified.text.startswith("actor") else "participant"
        declared = classified.field("TEXT") or ""
        name, sep, alias = declared.partition(" as ")
        return Participant(
            keyword=decode_token(ParticipantKeyword, keyword, classified.line, classified.text),
            name=name.strip(),
            alias=_optional(alias) if sep else None,
        )

    def _build_block_start(self, classified: ClassifiedLine) -> BlockStart:
        keyword = classified.field("BLOCK_KEYWORD") or classified.text.split(None, 1)[0]
        return BlockStart(
            block=decode_token(BlockKind, keyword, classified.line, classified.text),
            label=self._label(classified, keyword),
        )

    def _build_brace_block_start(self, classified: ClassifiedLine) -> BraceBlockStart:
        keyword = classified.field("BRACE_KEYWORD") or classified.text.split(None, 1)[0]
        name = classified.field("BRACE_NAME")
        if name is None:
            name = classified.text[len(keyword):].rstrip().rstrip("{")
        return BraceBlockStart(
            block=decode_token(BraceBlockKind, keyword, classified.line, classified.text),
            name=name.strip(),
        )

    def _build_block_option(self, classified: ClassifiedLine) -> BlockOption:
        return BlockOption(self._label(classified, "option"))

    def _build_block_else(self, classified: ClassifiedLine) -> BlockElse:
        return BlockElse(self._label(classified, "else"))

    def _build_block_and(self, classified: ClassifiedLine) -> BlockAnd:
        return BlockAnd(self._label(classified, "and"))

    def _build_block_end(self, classified: ClassifiedLine) -> BlockEnd:
        return BlockEnd()

    def _build_brace_block_end(self, classified: ClassifiedLine) -> BraceBlockEnd:
        return BraceBlockEnd()

    def _build_note(self, classified: ClassifiedLine) -> Note:
        return Note(classified.text)

    def _build_generic(self, classified: ClassifiedLine) -> GenericLine:
        return GenericLine(classified.text)

    def _build_message(self, classified: ClassifiedLine) -> Optional[Message]:
        m = _MESSAGE_PATTERN.match(classified.text)
        if m is None:
            return None
        text = m.group("text").strip()
        # Flowchart-style class assignment, e.g. A --> B:::warning
        if text.startswith("::"):
            return None

        token = m.group("arrow")
        activation = None
        if token[-1] in "+-":
            token, activation = token[:-1], token[-1]

        return Message(
            source=m.group("source").strip(),
            arrow=decode_token(Arrow, token, classified.line, classified.text),
            target=m.group("target").strip(),
            text=text or None,
            activation=activation,
        )

    # --------------------------------------------------------
    # Helpers
    # --------------------------------------------------------

    @staticmethod
    def _label(classified: ClassifiedLine, keyword: str) -> Optional[str]:
        """Captured label, else the line minus its keyword; None when empty."""
        label = classified.field("TEXT")
        if label is None and classified.text.startswith(keyword):
            label = classified.text[len(keyword):]
        return _optional(label)
