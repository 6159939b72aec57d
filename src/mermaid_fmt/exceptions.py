"""
mermaid-fmt Exception Hierarchy

Contains all exception classes raised by the parser, configuration loader
and command-line tool.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class MermaidFormatError(Exception):
    """
    Base exception for all mermaid-fmt operations.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


class MermaidParseError(MermaidFormatError):
    """
    Base exception for failures while turning source text into statements.

    Carries a 1-based source location. ``column`` is 0 when unknown.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """

    kind = "Parse error"

    def __init__(
        self,
        message: str,
        line: int = 0,
        column: int = 0,
        context: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.message = message
        self.line = line
        self.column = column
        self.context = context
        self.suggestion = suggestion
        super().__init__(str(self))

    def __str__(self) -> str:
        parts = [f"{self.kind} at line {self.line}, column {self.column}: {self.message}"]
        if self.context:
            parts.append(f"  Context: {self.context}")
        if self.suggestion:
            parts.append(f"  Suggestion: {self.suggestion}")
        return "\n".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "type": type(self).__name__,
            "message": self.message,
            "line": self.line,
            "column": self.column,
        }
        if self.context:
            d["context"] = self.context
        if self.suggestion:
            d["suggestion"] = self.suggestion
        return d

    def shifted(self, offset: int) -> "MermaidParseError":
        """Return a copy whose line number is moved down by ``offset`` lines."""
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.line = self.line + offset
        Exception.__init__(clone, str(clone))
        return clone


class GrammarError(MermaidParseError):
    """
    Raised when a line matches no production of the line grammar.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """

    kind = "Grammar error"


class SemanticDecodeError(MermaidParseError):
    """
    Raised when a line matched structurally but a fixed-token field
    (block kind, participant keyword, message arrow) is outside its
    closed vocabulary.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """

    kind = "Decode error"

    def __init__(
        self,
        message: str,
        token: str = "",
        line: int = 0,
        column: int = 0,
        context: Optional[str] = None,
        suggestion: Optional[str] = None,
    ):
        self.token = token
        super().__init__(
            message, line=line, column=column, context=context, suggestion=suggestion
        )

    def to_dict(self) -> Dict[str, Any]:
        d = super().to_dict()
        d["token"] = self.token
        return d


class ConfigError(MermaidFormatError):
    """
    Raised when a configuration file or value is invalid.

    ::: This is-in-layer Utility-Layer.
    ::: This is a exception.
    ::: This is stateless.
    """
    pass


__all__ = [
    "MermaidFormatError",
    "MermaidParseError",
    "GrammarError",
    "SemanticDecodeError",
    "ConfigError",
]
