"""
Line classifier for Mermaid diagram sources using a Lark grammar.

Every source line is parsed on its own against ``grammar.lark`` and mapped
to exactly one production. Lines that match no specific production fall
back to ``generic_line``; only text the grammar cannot accept at all (a
stray control character) is rejected with a GrammarError.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Dict, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import (
    UnexpectedCharacters,
    UnexpectedEOF,
    UnexpectedInput,
    UnexpectedToken,
)

from .exceptions import GrammarError

logger = logging.getLogger(__name__)

# ============================================================
# DATA CLASSES
# ============================================================


class LineMode(str, Enum):
    """Grammar start rule used for a line"""
    LEADING = "leading_line"      # declaration not found yet
    PENDING = "pending_line"      # content seen, declaration not found yet
    BODY = "body_line"            # any dialect but sequenceDiagram
    SEQUENCE = "sequence_line"    # adds option/else/and


@dataclass(frozen=True)
class ClassifiedLine:
    """One source line tagged with the production that matched it.

    ``fields`` holds the named terminals captured by the production, in
    source order, as (terminal name, text) pairs.
    """

    rule: str
    text: str
    line: int = 0
    fields: Tuple[Tuple[str, str], ...] = ()

    def field(self, name: str) -> Optional[str]:
        for terminal, value in self.fields:
            if terminal == name:
                return value
        return None

    def to_dict(self) -> dict:
        return {
            "rule": self.rule,
            "text": self.text,
            "line": self.line,
            "fields": dict(self.fields),
        }


# ============================================================
# CLASSIFIER
# ============================================================


class LineClassifier:
    """
    Classifies Mermaid source lines using a Lark grammar.

    Singleton: the grammar is loaded once and one Earley parser is cached
    per line mode. Earley resolves the overlap between specific productions
    and generic_line through rule priorities.
    """

    _instance: Optional[LineClassifier] = None

    def __new__(cls) -> LineClassifier:
        if cls._instance is None:
            instance = super().__new__(cls)
            instance._load_grammar()
            cls._instance = instance
        return cls._instance

    def _load_grammar(self) -> None:
        """Load the Lark grammar and create one parser per line mode."""
        grammar_path = Path(__file__).parent / "grammar.lark"
        if not grammar_path.exists():
            raise FileNotFoundError(f"Mermaid line grammar not found: {grammar_path}")
        grammar_text = grammar_path.read_text(encoding="utf-8")

        parsers: Dict[LineMode, Lark] = {}
        for mode in LineMode:
            parsers[mode] = Lark(
                grammar_text,
                start=mode.value,
                parser="earley",
                ambiguity="resolve",
            )
        self._parsers = parsers
        logger.debug("Loaded line grammar from %s", grammar_path)

    def classify(self, raw: str, mode: LineMode = LineMode.BODY, line: int = 0) -> ClassifiedLine:
        """
        Classify one source line.

        Args:
            raw: The line without its newline terminator
            mode: Which start rule applies at this point of the document
            line: 1-based line number, used for error locations

        Returns:
            ClassifiedLine naming the matched production

        Raises:
            GrammarError: If no production accepts the line
        """
        text = raw.strip(" \t")
        offset = len(raw) - len(raw.lstrip(" \t"))

        try:
            tree = self._parsers[mode].parse(text + "\n")
        except UnexpectedCharacters as e:
            raise _grammar_error(e, raw, line, offset, f"Unexpected character {_char_repr(e.char)}") from e
        except UnexpectedToken as e:
            token = getattr(e, "token", None)
            raise _grammar_error(e, raw, line, offset, f"Unexpected token {str(token)!r}") from e
        except UnexpectedEOF as e:
            raise _grammar_error(e, raw, line, offset, "Unexpected end of line") from e
        except UnexpectedInput as e:
            raise _grammar_error(e, raw, line, offset, str(e)[:200]) from e

        production = _production(tree)
        return ClassifiedLine(
            rule=str(production.data),
            text=text,
            line=line,
            fields=tuple(
                (child.type, str(child))
                for child in production.children
                if isinstance(child, Token)
            ),
        )


# ============================================================
# HELPERS
# ============================================================


def _production(tree: Tree) -> Tree:
    """Return the single production subtree under a start rule."""
    for child in tree.children:
        if isinstance(child, Tree):
            return child
    raise ValueError(f"Start rule {tree.data!r} has no production")


def _char_repr(char: str) -> str:
    if char and char.isprintable():
        return f"'{char}'"
    return repr(char)


def _grammar_error(
    e: UnexpectedInput, raw: str, line: int, offset: int, message: str
) -> GrammarError:
    col = getattr(e, "column", 0) or 0
    if col > 0:
        col += offset
    return GrammarError(
        message,
        line=line,
        column=col,
        context=raw[:120],
        suggestion="Remove control characters from the line",
    )


# ============================================================
# MODULE-LEVEL CONVENIENCE
# ============================================================


def classify_line(raw: str, mode: LineMode = LineMode.BODY, line: int = 0) -> ClassifiedLine:
    """Classify a single line. Module-level convenience function."""
    return LineClassifier().classify(raw, mode, line)
