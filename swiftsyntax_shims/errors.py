# swiftsyntax_shims/errors.py
"""
Error types for the swiftsyntax-shims tool-suite.

Error Hierarchy:
────────────────
┌──────────────────────────────────────────────────────────────────┐
│  ShimsError (base)                                               │
│  ├── FrontEndError        - Swift source could not be parsed     │
│  ├── TreeFormatError      - S-expression tree is malformed       │
│  ├── ConfigurationError   - bad .swift-format configuration      │
│  └── AnalysisCondition    - degraded-input conditions raised     │
│      │                      and absorbed inside a rule           │
│      ├── MalformedTraversal                                      │
│      └── UnrecognizedAttributeForm                               │
└──────────────────────────────────────────────────────────────────┘

``AnalysisCondition`` subclasses never escape a lint rule: the rule
catches them, logs at DEBUG and keeps going, so a single odd node cannot
abort a whole lint run.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE LOCATION TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SourceSpan:
    """
    A span of source code with start and end positions.

    Richer than ``SourceLocation`` as it captures a range.
    """

    file: str = ""
    line: int = 0
    column: int = 0
    end_line: int = 0
    end_column: int = 0

    def __post_init__(self) -> None:
        # Normalize: if end not specified, use start
        if self.end_line == 0:
            object.__setattr__(self, "end_line", self.line)
        if self.end_column == 0:
            object.__setattr__(self, "end_column", self.column)

    @classmethod
    def from_node(cls, node: Any) -> "SourceSpan":
        """Create a SourceSpan from a syntax node."""
        loc = getattr(node, "loc", None)
        if loc is None:
            return cls()
        return cls(
            file=getattr(loc, "file", ""),
            line=getattr(loc, "line", 0),
            column=getattr(loc, "column", 0),
        )

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"

        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
            if self.column > 0:
                parts.append(str(self.column))

        return ":".join(parts)


# ═══════════════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════════════

class ShimsError(Exception):
    """
    Base exception for all swiftsyntax-shims errors.

    Carries an optional span and hint so the CLI can print a GCC-style
    message.
    """

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        hint: str = "",
        cause: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.span = span or SourceSpan()
        self.hint = hint
        self.cause = cause

    def to_gcc_format(self) -> str:
        """Format as a GCC-style error message."""
        text = f"{self.span}: error: {self.message}"
        if self.hint:
            text += f"\n  hint: {self.hint}"
        return text

    def __str__(self) -> str:
        return self.to_gcc_format()


class FrontEndError(ShimsError):
    """Swift source text could not be turned into a syntax tree."""

    def __init__(
        self,
        message: str,
        span: Optional[SourceSpan] = None,
        got: str = "",
        **kwargs: Any,
    ) -> None:
        super().__init__(message, span=span, **kwargs)
        self.got = got


class TreeFormatError(ShimsError):
    """An S-expression form cannot be mapped to a syntax node."""


class ConfigurationError(ShimsError):
    """Configuration file is unreadable or has the wrong shape."""


# ───────────────────────────────────────────────────────────────────────────────
# ANALYSIS CONDITIONS
# ───────────────────────────────────────────────────────────────────────────────

class AnalysisCondition(ShimsError):
    """Degraded-input condition absorbed by the rule that raised it."""


class MalformedTraversal(AnalysisCondition, IndexError):
    """An exit (or accessor) callback arrived with no open scope."""

    def __init__(self, callback: str, **kwargs: Any) -> None:
        super().__init__(
            f"'{callback}' received with no open scope",
            **kwargs,
        )
        self.callback = callback


class UnrecognizedAttributeForm(AnalysisCondition):
    """An attribute name did not resolve to a simple type identifier."""

    def __init__(self, form: str, **kwargs: Any) -> None:
        super().__init__(
            f"attribute name of form '{form}' is not a simple identifier",
            **kwargs,
        )
        self.form = form


__all__ = [
    "SourceSpan",
    "ShimsError",
    "FrontEndError",
    "TreeFormatError",
    "ConfigurationError",
    "AnalysisCondition",
    "MalformedTraversal",
    "UnrecognizedAttributeForm",
]
