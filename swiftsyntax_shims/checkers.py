"""
swiftsyntax_shims/checkers.py
═════════════════════════════

Lint-rule framework: runs syntax rules over Swift syntax trees and
turns their findings into diagnostics.

Architecture
────────────

  ┌─────────────────────────────────────────────────────────┐
  │                    CheckerRunner                        │
  │   ┌───────────────────────────────────────────────┐     │
  │   │  SyntaxLintRule (fresh instance per tree)      │     │
  │   │    walk(tree) → enter/exit callbacks           │     │
  │   └──────────────────────┬────────────────────────┘     │
  │                          │                              │
  │   ┌──────────────────────▼────────────────────────┐     │
  │   │           SuppressionManager                  │     │
  │   │        global  │  file-pattern                │     │
  │   └──────────────────────┬────────────────────────┘     │
  │                          │                              │
  │   ┌──────────────────────▼────────────────────────┐     │
  │   │        Diagnostic Formatter (JSON / GCC)      │     │
  │   └───────────────────────────────────────────────┘     │
  └─────────────────────────────────────────────────────────┘

Each rule follows a three-phase lifecycle:

  1. **configure()** — read the configuration from the context
  2. **walk()**      — react to traversal callbacks, emitting findings
  3. **report()**    — return diagnostics (filtered by suppressions)
"""

from __future__ import annotations

import json
import logging
import time
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from fnmatch import fnmatch
from typing import (
    Any,
    ClassVar,
    Dict,
    FrozenSet,
    Iterable,
    List,
    Optional,
    Sequence,
    Set,
    Tuple,
    Type,
)

from swiftsyntax_shims.configuration import Configuration
from swiftsyntax_shims.syntax import SourceFile, SourceLocation, Syntax
from swiftsyntax_shims.visitor import SyntaxVisitor

_log = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — DIAGNOSTIC MODEL
# ═════════════════════════════════════════════════════════════════════════

class DiagnosticSeverity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFORMATION = "information"


@dataclass(frozen=True)
class Diagnostic:
    """
    A single lint finding.

    Attributes
    ----------
    error_id     : Unique identifier (e.g., "forbidsImplicitReturnOutsideResultBuilder")
    message      : Human-readable description
    severity     : DiagnosticSeverity
    location     : Primary source location
    checker_name : Name of the rule that produced this
    node         : The syntax node the finding is anchored to
    """
    error_id: str
    message: str
    severity: DiagnosticSeverity
    location: SourceLocation
    checker_name: str = ""
    addon: str = "swiftsyntax-shims"
    node: Optional[Syntax] = field(default=None, compare=False, repr=False)

    def to_json(self) -> Dict[str, Any]:
        return {
            "file": self.location.file,
            "line": self.location.line,
            "column": self.location.column,
            "severity": self.severity.value,
            "message": self.message,
            "addon": self.addon,
            "rule": self.checker_name,
            "errorId": self.error_id,
        }

    def to_json_str(self) -> str:
        """Single-line JSON string."""
        return json.dumps(self.to_json())

    def to_gcc_format(self) -> str:
        """GCC-style diagnostic string: file:line:col: severity: message."""
        sev = self.severity.value
        return f"{self.location}: {sev}: {self.message} [{self.error_id}]"

    def __str__(self) -> str:
        return self.to_gcc_format()


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION MANAGER
# ═════════════════════════════════════════════════════════════════════════

class SuppressionManager:
    """
    Manages diagnostic suppressions.

    Sources:
      1. File-level suppressions (error id, file pattern)
      2. Global suppressions (command-line or config)

    ``*`` as an error id suppresses everything in that scope.
    """

    def __init__(self) -> None:
        # file pattern → set of error_ids
        self._file_level: Dict[str, Set[str]] = defaultdict(set)
        # globally suppressed error_ids
        self._global: Set[str] = set()

    def add_file_suppression(self, error_id: str, file_pattern: str) -> None:
        """Suppress ``error_id`` in files matching ``file_pattern``."""
        self._file_level[file_pattern].add(error_id)

    def add_global_suppression(self, error_id: str) -> None:
        """Globally suppress ``error_id``."""
        self._global.add(error_id)

    def is_suppressed(self, diag: Diagnostic) -> bool:
        eid = diag.error_id

        if eid in self._global or "*" in self._global:
            return True

        path = diag.location.file
        for pattern, ids in self._file_level.items():
            if eid not in ids and "*" not in ids:
                continue
            if pattern == path or path.endswith(pattern) or fnmatch(path, pattern):
                return True

        return False

    def filter_diagnostics(
        self, diagnostics: Iterable[Diagnostic]
    ) -> List[Diagnostic]:
        """Return only non-suppressed diagnostics."""
        return [d for d in diagnostics if not self.is_suppressed(d)]


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — RULE BASE CLASS
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerContext:
    """
    Shared context passed to every rule.

    Attributes
    ----------
    configuration : Configuration (builder names, rule switches)
    suppressions  : SuppressionManager
    file          : name of the file whose tree is being linted
    stats         : mutable dict for timing / counting statistics
    """
    configuration: Configuration = field(default_factory=Configuration)
    suppressions: SuppressionManager = field(default_factory=SuppressionManager)
    file: str = "<string>"
    stats: Dict[str, Any] = field(default_factory=dict)


class SyntaxLintRule(SyntaxVisitor):
    """
    Base class for lint rules driven by a syntax walk.

    Subclass Contract
    ─────────────────
      - Override ``name``, ``description``, ``error_ids``
      - Define ``visit_<kind>`` / ``visit_post_<kind>`` callbacks
      - Optionally override ``configure()`` for custom setup
    """

    name: ClassVar[str] = "base-rule"
    description: ClassVar[str] = ""
    error_ids: ClassVar[FrozenSet[str]] = frozenset()
    default_severity: ClassVar[DiagnosticSeverity] = DiagnosticSeverity.WARNING

    def __init__(self, ctx: CheckerContext) -> None:
        super().__init__()
        self.context = ctx
        self._diagnostics: List[Diagnostic] = []

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return list(self._diagnostics)

    def configure(self, ctx: CheckerContext) -> None:
        """Called before the walk.  Default implementation does nothing."""

    def report(self, ctx: CheckerContext) -> List[Diagnostic]:
        """Return final diagnostics, filtered by suppressions."""
        return ctx.suppressions.filter_diagnostics(self._diagnostics)

    def _emit(
        self,
        error_id: str,
        message: str,
        node: Syntax,
        severity: Optional[DiagnosticSeverity] = None,
    ) -> None:
        """Create and store a diagnostic anchored to *node*."""
        loc = getattr(node, "loc", None) or SourceLocation()
        if not loc.file:
            loc = SourceLocation(file=self.context.file, line=loc.line, column=loc.column)
        self._diagnostics.append(Diagnostic(
            error_id=error_id,
            message=message,
            severity=severity or self.default_severity,
            location=loc,
            checker_name=self.name,
            node=node,
        ))

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} '{self.name}'>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — RULE REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class CheckerRegistry:
    """
    Registry of available rules with enable/disable switches.

    >>> registry = CheckerRegistry()
    >>> registry.register(ForbidsImplicitReturnOutsideResultBuilder)
    >>> rules = registry.get_enabled()
    """

    def __init__(self) -> None:
        self._checkers: Dict[str, Type[SyntaxLintRule]] = {}
        self._disabled: Set[str] = set()

    def register(self, checker_cls: Type[SyntaxLintRule]) -> None:
        self._checkers[checker_cls.name] = checker_cls

    def disable(self, name: str) -> None:
        self._disabled.add(name)

    def enable(self, name: str) -> None:
        self._disabled.discard(name)

    def get_enabled(self) -> List[Type[SyntaxLintRule]]:
        return [
            cls for name, cls in self._checkers.items()
            if name not in self._disabled
        ]

    def get_by_name(self, name: str) -> Optional[Type[SyntaxLintRule]]:
        return self._checkers.get(name)

    @property
    def names(self) -> List[str]:
        return sorted(self._checkers.keys())


def default_registry() -> CheckerRegistry:
    """Registry holding every rule shipped with the package."""
    from swiftsyntax_shims.implicit_return import (
        ForbidsImplicitReturnOutsideResultBuilder,
    )

    registry = CheckerRegistry()
    registry.register(ForbidsImplicitReturnOutsideResultBuilder)
    return registry


# ═════════════════════════════════════════════════════════════════════════
#  PART 5 — RUNNER
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CheckerRunResults:
    """
    Aggregate results from running a suite of rules.

    Attributes
    ----------
    diagnostics            : All diagnostics from all rules
    diagnostics_by_checker : Diagnostics grouped by rule name
    stats                  : Timing statistics
    checker_names          : Names of rules that were run
    """
    diagnostics: List[Diagnostic] = field(default_factory=list)
    diagnostics_by_checker: Dict[str, List[Diagnostic]] = field(
        default_factory=lambda: defaultdict(list)
    )
    stats: Dict[str, Any] = field(default_factory=dict)
    checker_names: List[str] = field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.ERROR
        )

    @property
    def warning_count(self) -> int:
        return sum(
            1 for d in self.diagnostics
            if d.severity == DiagnosticSeverity.WARNING
        )

    @property
    def total_count(self) -> int:
        return len(self.diagnostics)

    def by_file(self, file: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.location.file == file]

    def merge(self, other: "CheckerRunResults") -> None:
        self.diagnostics.extend(other.diagnostics)
        for name, diags in other.diagnostics_by_checker.items():
            self.diagnostics_by_checker[name].extend(diags)
        for key, val in other.stats.items():
            self.stats[key] = self.stats.get(key, 0) + val
        for name in other.checker_names:
            if name not in self.checker_names:
                self.checker_names.append(name)

    def to_json_lines(self) -> str:
        return "\n".join(d.to_json_str() for d in self.diagnostics)

    def to_gcc_format(self) -> str:
        return "\n".join(d.to_gcc_format() for d in self.diagnostics)

    def summary(self) -> str:
        """Human-readable summary."""
        lines = [
            f"Lint run complete: {self.total_count} diagnostics "
            f"({self.error_count} errors, {self.warning_count} warnings)",
        ]
        for name in self.checker_names:
            count = len(self.diagnostics_by_checker.get(name, []))
            elapsed = self.stats.get(f"{name}_elapsed_ms", 0)
            lines.append(f"  {name}: {count} findings ({elapsed:.1f}ms)")
        return "\n".join(lines)


class CheckerRunner:
    """
    Runs a suite of rules against syntax trees.

    >>> runner = CheckerRunner(configuration=Configuration(
    ...     builder_attribute_names=frozenset({"ViewBuilder"})))
    >>> results = runner.run(tree, file="View.swift")
    >>> print(results.summary())

    A fresh rule instance is created for every tree, so per-run state
    (scope stacks, builder registries) never leaks between files.
    """

    def __init__(
        self,
        registry: Optional[CheckerRegistry] = None,
        suppressions: Optional[SuppressionManager] = None,
        configuration: Optional[Configuration] = None,
    ) -> None:
        self.registry = registry or default_registry()
        self.suppressions = suppressions or SuppressionManager()
        self.configuration = configuration or Configuration()

    def _selected(self, checkers: Optional[Sequence[str]]) -> List[Type[SyntaxLintRule]]:
        if checkers is not None:
            selected: List[Type[SyntaxLintRule]] = []
            for name in checkers:
                cls = self.registry.get_by_name(name)
                if cls is None:
                    _log.warning("Unknown rule requested: %s", name)
                    continue
                selected.append(cls)
            return selected
        return [
            cls for cls in self.registry.get_enabled()
            if self.configuration.is_rule_enabled(cls.name)
        ]

    def run(
        self,
        tree: Syntax,
        file: Optional[str] = None,
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """
        Run rules against a single tree.

        Parameters
        ----------
        tree     : root node (normally a ``SourceFile``)
        file     : file name for diagnostics; defaults to ``tree.file``
        checkers : rule names to run (None = all enabled)
        """
        if file is None:
            file = tree.file if isinstance(tree, SourceFile) else "<string>"

        results = CheckerRunResults()
        ctx = CheckerContext(
            configuration=self.configuration,
            suppressions=self.suppressions,
            file=file,
        )

        for cls in self._selected(checkers):
            checker_name = cls.name
            results.checker_names.append(checker_name)

            t0 = time.monotonic()
            try:
                checker = cls(ctx)
                checker.configure(ctx)
                checker.walk(tree)
                diags = checker.report(ctx)
            except Exception as exc:
                # Graceful degradation: report the failure, don't crash
                _log.error("Rule '%s' failed on %s: %s", checker_name, file, exc, exc_info=True)
                diags = [Diagnostic(
                    error_id="ruleInternalError",
                    message=f"Rule '{checker_name}' failed: {exc}",
                    severity=DiagnosticSeverity.INFORMATION,
                    location=SourceLocation(file=file),
                    checker_name=checker_name,
                )]
            elapsed_ms = (time.monotonic() - t0) * 1000.0
            _log.debug("%s on %s: %d finding(s) in %.1fms",
                       checker_name, file, len(diags), elapsed_ms)

            results.diagnostics.extend(diags)
            results.diagnostics_by_checker[checker_name].extend(diags)
            results.stats[f"{checker_name}_elapsed_ms"] = elapsed_ms

        return results

    def run_all(
        self,
        trees: Iterable[Tuple[str, Syntax]],
        checkers: Optional[Sequence[str]] = None,
    ) -> CheckerRunResults:
        """Run rules over several ``(file, tree)`` pairs."""
        combined = CheckerRunResults()
        for file, tree in trees:
            combined.merge(self.run(tree, file=file, checkers=checkers))
        return combined


__all__ = [
    "Diagnostic",
    "DiagnosticSeverity",
    "SourceLocation",
    "SuppressionManager",
    "CheckerContext",
    "SyntaxLintRule",
    "CheckerRegistry",
    "default_registry",
    "CheckerRunner",
    "CheckerRunResults",
]
