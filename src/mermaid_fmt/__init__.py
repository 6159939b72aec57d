"""Mermaid diagram source formatter."""

__version__ = "0.3.0"

from mermaid_fmt.config import (
    ConfigLoader,
    FormatConfig,
    IndentUnit,
    load_config,
)
from mermaid_fmt.exceptions import (
    ConfigError,
    GrammarError,
    MermaidFormatError,
    MermaidParseError,
    SemanticDecodeError,
)
from mermaid_fmt.statements import (
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
    Diagram,
    DiagramDecl,
    DiagramKind,
    DiagramType,
    Directive,
    Frontmatter,
    GenericLine,
    Message,
    Note,
    Participant,
    ParticipantKeyword,
    Statement,
    StatementKind,
)
from mermaid_fmt.classifier import ClassifiedLine, LineClassifier, LineMode, classify_line
from mermaid_fmt.normalizer import normalize_text
from mermaid_fmt.parser import detect_diagram_type, parse
from mermaid_fmt.formatter import format_diagram, format_mermaid
from mermaid_fmt.markdown import CodeBlock, extract_code_fences, format_markdown

__all__ = [
    "Arrow",
    "BlankLine",
    "BlockAnd",
    "BlockElse",
    "BlockEnd",
    "BlockKind",
    "BlockOption",
    "BlockStart",
    "BraceBlockEnd",
    "BraceBlockKind",
    "BraceBlockStart",
    "ClassifiedLine",
    "CodeBlock",
    "Comment",
    "ConfigError",
    "ConfigLoader",
    "Diagram",
    "DiagramDecl",
    "DiagramKind",
    "DiagramType",
    "Directive",
    "FormatConfig",
    "Frontmatter",
    "GenericLine",
    "GrammarError",
    "IndentUnit",
    "LineClassifier",
    "LineMode",
    "Message",
    "MermaidFormatError",
    "MermaidParseError",
    "Note",
    "Participant",
    "ParticipantKeyword",
    "SemanticDecodeError",
    "Statement",
    "StatementKind",
    "__version__",
    "classify_line",
    "detect_diagram_type",
    "extract_code_fences",
    "format_diagram",
    "format_markdown",
    "format_mermaid",
    "load_config",
    "normalize_text",
    "parse",
]
