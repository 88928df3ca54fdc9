"""
swiftsyntax_shims/implicit_return.py
════════════════════════════════════

``ForbidsImplicitReturnOutsideResultBuilder``: a body may end in a bare
expression (implicit return) only when it is governed by a result
builder.

Bodies checked:
  - function body (only when the signature declares ``-> T``)
  - read-only variable getter (``var x: T { expr }``)
  - read/write variable accessors (``get { ... } set { ... }``)

A declaration is builder-governed when one of its attributes names a
builder: either a name from the configuration, or a type already closed
in this tree whose attribute list carried ``@resultBuilder`` (or the
older ``@_functionBuilder``).  Builder types are only known from the
point their declaration closes; earlier uses are not covered.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import FrozenSet, Iterable, Iterator, List

from swiftsyntax_shims.checkers import (
    CheckerContext,
    DiagnosticSeverity,
    SyntaxLintRule,
)
from swiftsyntax_shims.errors import (
    MalformedTraversal,
    SourceSpan,
    UnrecognizedAttributeForm,
)
from swiftsyntax_shims.syntax import (
    AccessorDecl,
    AttributeList,
    CustomAttribute,
    FunctionDecl,
    MemberTypeIdentifier,
    ReturnClause,
    ReturnStmt,
    SimpleTypeIdentifier,
    Syntax,
    TypeDeclSyntax,
    VariableDecl,
)
from swiftsyntax_shims.visitor import VisitorContinueKind

_log = logging.getLogger(__name__)

ERROR_ID = "forbidsImplicitReturnOutsideResultBuilder"
MESSAGE = "Implicit return can only be used inside a declarative block builder."

# Attribute spellings that turn a type declaration into a builder type.
BUILDER_MARKERS: FrozenSet[str] = frozenset({"resultBuilder", "_functionBuilder"})


# ═════════════════════════════════════════════════════════════════════════
#  Scope variants
# ═════════════════════════════════════════════════════════════════════════

class ScopeKind(Enum):
    FUNCTION = "function"
    IMPLICIT_GETTER = "implicit_getter"
    EXPLICIT_ACCESSOR = "explicit_accessor"


@dataclass
class ScopeVariant:
    """
    One open body under analysis.

    Flags only ever go from False to True while the scope is open.
    ``has_return_clause`` is meaningful for ``FUNCTION`` only; property
    scopes never declare a result type.
    """
    kind: ScopeKind
    has_explicit_return: bool = False
    has_builder_attribute: bool = False
    has_return_clause: bool = False

    @classmethod
    def function(cls) -> "ScopeVariant":
        return cls(ScopeKind.FUNCTION)

    @classmethod
    def implicit_getter(cls) -> "ScopeVariant":
        return cls(ScopeKind.IMPLICIT_GETTER)

    @classmethod
    def explicit_accessor(cls) -> "ScopeVariant":
        return cls(ScopeKind.EXPLICIT_ACCESSOR)

    def __setattr__(self, name: str, value: object) -> None:
        if name == "has_return_clause" and value and self.kind is not ScopeKind.FUNCTION:
            raise ValueError(f"{self.kind.value} scopes have no return clause")
        super().__setattr__(name, value)

    def mark_return_clause(self) -> None:
        if self.kind is ScopeKind.FUNCTION:
            self.has_return_clause = True

    @property
    def is_illformed(self) -> bool:
        return is_illformed(self)


def is_illformed(scope: ScopeVariant) -> bool:
    """True when *scope* omits ``return`` without a builder to license it."""
    if scope.kind is ScopeKind.FUNCTION:
        # Without a result type nothing is returned implicitly.
        return (
            scope.has_return_clause
            and not scope.has_explicit_return
            and not scope.has_builder_attribute
        )
    if scope.kind is ScopeKind.IMPLICIT_GETTER:
        return not scope.has_explicit_return and not scope.has_builder_attribute
    if scope.kind is ScopeKind.EXPLICIT_ACCESSOR:
        return not scope.has_explicit_return and not scope.has_builder_attribute
    raise ValueError(f"unknown scope kind: {scope.kind!r}")


# ═════════════════════════════════════════════════════════════════════════
#  Scope stack
# ═════════════════════════════════════════════════════════════════════════

class ScopeStack:
    """LIFO of open scopes; depth equals function/variable nesting depth."""

    def __init__(self) -> None:
        self._storage: List[ScopeVariant] = []

    def push(self, scope: ScopeVariant) -> None:
        self._storage.append(scope)

    def pop(self) -> ScopeVariant:
        if not self._storage:
            raise MalformedTraversal("pop")
        return self._storage.pop()

    @property
    def top(self) -> ScopeVariant:
        """The innermost open scope; mutate it in place to set flags."""
        if not self._storage:
            raise MalformedTraversal("top")
        return self._storage[-1]

    def replace_top(self, scope: ScopeVariant) -> None:
        if not self._storage:
            raise MalformedTraversal("replace_top")
        self._storage[-1] = scope

    def is_empty(self) -> bool:
        return not self._storage

    def __len__(self) -> int:
        return len(self._storage)


# ═════════════════════════════════════════════════════════════════════════
#  Builder attribute registry
# ═════════════════════════════════════════════════════════════════════════

class BuilderAttributeRegistry:
    """Names usable as builder attributes during one traversal."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self._names: set[str] = set()
        self.seed(names)

    def seed(self, names: Iterable[str]) -> None:
        self._names.update(names)

    def contains(self, name: str) -> bool:
        return name in self._names

    def register(self, name: str) -> None:
        if name not in self._names:
            _log.debug("Registered result builder type %s", name)
        self._names.add(name)

    @property
    def names(self) -> FrozenSet[str]:
        return frozenset(self._names)

    def __contains__(self, name: object) -> bool:
        return name in self._names

    def __len__(self) -> int:
        return len(self._names)


def simple_attribute_name(attribute: CustomAttribute) -> str:
    """Name of ``@Name``; qualified or otherwise odd forms are rejected."""
    name = attribute.attribute_name
    if isinstance(name, SimpleTypeIdentifier):
        return name.name
    raise UnrecognizedAttributeForm(
        str(name) if isinstance(name, MemberTypeIdentifier) else type(name).__name__,
        span=SourceSpan.from_node(attribute),
    )


def _simple_names(attributes: AttributeList) -> Iterator[str]:
    for attribute in attributes:
        try:
            yield simple_attribute_name(attribute)
        except UnrecognizedAttributeForm as cond:
            _log.debug("%s: skipped: %s", cond.span, cond.message)


# ═════════════════════════════════════════════════════════════════════════
#  Rule
# ═════════════════════════════════════════════════════════════════════════

class ForbidsImplicitReturnOutsideResultBuilder(SyntaxLintRule):
    """Flags bodies that omit ``return`` outside of a result builder."""

    name = "ForbidsImplicitReturnOutsideResultBuilder"
    description = "Implicit returns are only allowed inside result builders."
    error_ids = frozenset({ERROR_ID})
    default_severity = DiagnosticSeverity.ERROR

    def __init__(self, ctx: CheckerContext) -> None:
        super().__init__(ctx)
        self._scopes = ScopeStack()
        self._type_decl_depth = 0
        self._pending_builder_definition = False
        self._builders = BuilderAttributeRegistry()

    def configure(self, ctx: CheckerContext) -> None:
        self._builders.seed(ctx.configuration.builder_attribute_names)

    @property
    def builders(self) -> BuilderAttributeRegistry:
        return self._builders

    # ── functions & variables ─────────────────────────────────────────

    def visit_function_decl(self, node: FunctionDecl) -> VisitorContinueKind:
        self._scopes.push(ScopeVariant.function())
        return VisitorContinueKind.VISIT_CHILDREN

    def visit_post_function_decl(self, node: FunctionDecl) -> None:
        self._close_scope(node)

    def visit_variable_decl(self, node: VariableDecl) -> VisitorContinueKind:
        self._scopes.push(ScopeVariant.implicit_getter())
        return VisitorContinueKind.VISIT_CHILDREN

    def visit_post_variable_decl(self, node: VariableDecl) -> None:
        self._close_scope(node)

    def visit_accessor_decl(self, node: AccessorDecl) -> VisitorContinueKind:
        if self._scopes.is_empty():
            _log.debug("accessor at %s outside any variable", node.loc)
        elif self._scopes.top.kind is ScopeKind.IMPLICIT_GETTER:
            # The return question starts over; the declaration's builder
            # attribute was already seen and still applies.
            licensed = self._scopes.top.has_builder_attribute
            self._scopes.replace_top(ScopeVariant.explicit_accessor())
            self._scopes.top.has_builder_attribute = licensed
        return VisitorContinueKind.VISIT_CHILDREN

    def _close_scope(self, node: Syntax) -> None:
        try:
            scope = self._scopes.pop()
        except MalformedTraversal:
            _log.debug("unbalanced exit for %s at %s", node.kind, getattr(node, "loc", None))
            return

        if scope.is_illformed:
            self._emit(ERROR_ID, MESSAGE, node)

    # ── statements & clauses ──────────────────────────────────────────

    def visit_post_return_stmt(self, node: ReturnStmt) -> None:
        if not self._scopes.is_empty():
            self._scopes.top.has_explicit_return = True

    def visit_post_return_clause(self, node: ReturnClause) -> None:
        if not self._scopes.is_empty():
            self._scopes.top.mark_return_clause()

    def visit_post_attribute_list(self, node: AttributeList) -> None:
        names = list(_simple_names(node))

        if self._type_decl_depth > 0:
            # Any list inside a type body overwrites the flag, members included.
            self._pending_builder_definition = any(n in BUILDER_MARKERS for n in names)

        if not self._scopes.is_empty():
            if any(self._builders.contains(n) for n in names):
                self._scopes.top.has_builder_attribute = True

    # ── type declarations ─────────────────────────────────────────────

    def _enter_type_decl(self, node: TypeDeclSyntax) -> VisitorContinueKind:
        self._type_decl_depth += 1
        return VisitorContinueKind.VISIT_CHILDREN

    def _exit_type_decl(self, node: TypeDeclSyntax) -> None:
        if self._pending_builder_definition:
            self._builders.register(node.identifier)
        self._pending_builder_definition = False
        if self._type_decl_depth > 0:
            self._type_decl_depth -= 1

    visit_struct_decl = _enter_type_decl
    visit_post_struct_decl = _exit_type_decl
    visit_class_decl = _enter_type_decl
    visit_post_class_decl = _exit_type_decl
    visit_enum_decl = _enter_type_decl
    visit_post_enum_decl = _exit_type_decl


__all__ = [
    "ERROR_ID",
    "MESSAGE",
    "BUILDER_MARKERS",
    "ScopeKind",
    "ScopeVariant",
    "is_illformed",
    "ScopeStack",
    "BuilderAttributeRegistry",
    "simple_attribute_name",
    "ForbidsImplicitReturnOutsideResultBuilder",
]
