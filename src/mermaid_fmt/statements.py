"""
Statement model for Mermaid diagram sources.

A Diagram is the ordered sequence of Statements built from its lines, one
Statement per line. All values are immutable.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Optional, Tuple, Union


# ============================================================
# VOCABULARIES
# ============================================================


class DiagramKind(str, Enum):
    """Diagram-type keyword as written in the declaration line"""
    SEQUENCE = "sequenceDiagram"
    FLOWCHART = "flowchart"
    GRAPH = "graph"
    CLASS = "classDiagram"
    STATE = "stateDiagram"
    STATE_V2 = "stateDiagram-v2"
    ER = "erDiagram"
    JOURNEY = "journey"
    GANTT = "gantt"
    PIE = "pie"
    QUADRANT = "quadrantChart"
    REQUIREMENT = "requirementDiagram"
    GIT_GRAPH = "gitGraph"
    MINDMAP = "mindmap"
    TIMELINE = "timeline"
    SANKEY = "sankey-beta"
    XY_CHART = "xychart-beta"
    BLOCK = "block-beta"
    ARCHITECTURE = "architecture-beta"


# Dialects whose structure lives in indentation
INDENT_SENSITIVE_KINDS = frozenset({DiagramKind.MINDMAP, DiagramKind.TIMELINE})


class BlockKind(str, Enum):
    """Blocks closed by the ``end`` keyword"""
    CRITICAL = "critical"
    ALT = "alt"
    LOOP = "loop"
    PAR = "par"
    OPT = "opt"
    BREAK = "break"
    RECT = "rect"
    SUBGRAPH = "subgraph"


class BraceBlockKind(str, Enum):
    """Blocks closed by ``}``"""
    STATE = "state"
    CLASS = "class"
    NAMESPACE = "namespace"


class ParticipantKeyword(str, Enum):
    PARTICIPANT = "participant"
    ACTOR = "actor"


class Arrow(str, Enum):
    """Sequence-diagram message arrows"""
    SOLID_OPEN = "->"
    DOTTED_OPEN = "-->"
    SOLID = "->>"
    DOTTED = "-->>"
    SOLID_CROSS = "-x"
    DOTTED_CROSS = "--x"
    SOLID_ASYNC = "-)"
    DOTTED_ASYNC = "--)"
    SOLID_BIDIRECTIONAL = "<<->>"
    DOTTED_BIDIRECTIONAL = "<<-->>"


class StatementKind(str, Enum):
    """Tag of each Statement variant"""
    DIAGRAM_DECL = "diagram_decl"
    DIRECTIVE = "directive"
    PARTICIPANT = "participant"
    BLOCK_START = "block_start"
    BRACE_BLOCK_START = "brace_block_start"
    BLOCK_OPTION = "block_option"
    BLOCK_ELSE = "block_else"
    BLOCK_AND = "block_and"
    BLOCK_END = "block_end"
    BRACE_BLOCK_END = "brace_block_end"
    NOTE = "note"
    COMMENT = "comment"
    MESSAGE = "message"
    GENERIC_LINE = "generic_line"
    BLANK_LINE = "blank_line"
    FRONTMATTER = "frontmatter"


# ============================================================
# DIAGRAM TYPE
# ============================================================


@dataclass(frozen=True)
class DiagramType:
    """A decoded declaration line.

    ``direction`` is only meaningful for flowchart/graph and ``show_data``
    only for pie. ``suffix`` is any other text following the keyword
    (``gitGraph LR:``, ``flowchart-elk TD``), kept verbatim including its
    separator.
    """

    kind: DiagramKind
    direction: Optional[str] = None
    show_data: bool = False
    suffix: Optional[str] = None

    def format(self) -> str:
        """Canonical declaration text."""
        text = self.kind.value
        if self.kind in (DiagramKind.FLOWCHART, DiagramKind.GRAPH) and self.direction:
            text += f" {self.direction}"
        elif self.kind == DiagramKind.PIE and self.show_data:
            text += " showData"
        if self.suffix:
            text += self.suffix
        return text

    @property
    def is_indent_sensitive(self) -> bool:
        return self.kind in INDENT_SENSITIVE_KINDS

    def __str__(self) -> str:
        return self.format()


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True)
class DiagramDecl:
    diagram_type: DiagramType
    kind: ClassVar[StatementKind] = StatementKind.DIAGRAM_DECL


@dataclass(frozen=True)
class Directive:
    """``%%{...}%%`` line, kept verbatim."""
    text: str
    kind: ClassVar[StatementKind] = StatementKind.DIRECTIVE


@dataclass(frozen=True)
class Participant:
    keyword: ParticipantKeyword
    name: str
    alias: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.PARTICIPANT


@dataclass(frozen=True)
class BlockStart:
    block: BlockKind
    label: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.BLOCK_START


@dataclass(frozen=True)
class BraceBlockStart:
    block: BraceBlockKind
    name: str
    kind: ClassVar[StatementKind] = StatementKind.BRACE_BLOCK_START


@dataclass(frozen=True)
class BlockOption:
    label: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.BLOCK_OPTION


@dataclass(frozen=True)
class BlockElse:
    label: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.BLOCK_ELSE


@dataclass(frozen=True)
class BlockAnd:
    """``and`` branch of a ``par`` block."""
    label: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.BLOCK_AND


@dataclass(frozen=True)
class BlockEnd:
    kind: ClassVar[StatementKind] = StatementKind.BLOCK_END


@dataclass(frozen=True)
class BraceBlockEnd:
    kind: ClassVar[StatementKind] = StatementKind.BRACE_BLOCK_END


@dataclass(frozen=True)
class Note:
    text: str
    kind: ClassVar[StatementKind] = StatementKind.NOTE


@dataclass(frozen=True)
class Comment:
    """``%%`` comment, marker included."""
    text: str
    kind: ClassVar[StatementKind] = StatementKind.COMMENT


@dataclass(frozen=True)
class Message:
    """Decoded ``SOURCE ARROW TARGET: TEXT`` sequence message.

    ``activation`` is the optional ``+``/``-`` suffix of the arrow.
    """

    source: str
    arrow: Arrow
    target: str
    text: Optional[str] = None
    activation: Optional[str] = None
    kind: ClassVar[StatementKind] = StatementKind.MESSAGE

    @property
    def arrow_token(self) -> str:
        return self.arrow.value + (self.activation or "")


@dataclass(frozen=True)
class GenericLine:
    text: str
    kind: ClassVar[StatementKind] = StatementKind.GENERIC_LINE


@dataclass(frozen=True)
class BlankLine:
    kind: ClassVar[StatementKind] = StatementKind.BLANK_LINE


@dataclass(frozen=True)
class Frontmatter:
    """One line of a leading ``---`` YAML block, delimiters included.

    Kept exactly as written, indentation and all.
    """
    text: str
    kind: ClassVar[StatementKind] = StatementKind.FRONTMATTER


Statement = Union[
    DiagramDecl,
    Directive,
    Participant,
    BlockStart,
    BraceBlockStart,
    BlockOption,
    BlockElse,
    BlockAnd,
    BlockEnd,
    BraceBlockEnd,
    Note,
    Comment,
    Message,
    GenericLine,
    BlankLine,
    Frontmatter,
]


@dataclass(frozen=True)
class Diagram:
    """Ordered statements of one diagram source, in source order."""

    statements: Tuple[Statement, ...] = ()

    @property
    def diagram_type(self) -> Optional[DiagramType]:
        for statement in self.statements:
            if isinstance(statement, DiagramDecl):
                return statement.diagram_type
        return None

    def __len__(self) -> int:
        return len(self.statements)

    def __iter__(self):
        return iter(self.statements)
