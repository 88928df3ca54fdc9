"""
frontend.py — Swift subset front end
====================================

Turns Swift source text into the syntax tree of
:mod:`swiftsyntax_shims.syntax`.

The grammar covers the declaration structure lint rules care about:
types (struct/class/enum/protocol/extension), functions, initializers,
variables with implicit getters or explicit accessor blocks, enum
cases, typealiases, attributes and modifiers, and ``return``.
Expressions are kept as opaque text; the closures nested inside them
are parsed as statement lists so ``return`` inside a closure is seen.

Usage::

    from swiftsyntax_shims.frontend import parse_source

    tree = parse_source('''
        @resultBuilder
        struct Builder {
            static func buildBlock() -> Int { return 0 }
        }
    ''', file="Builder.swift")

Depends on:
    - parsimonious (PEG parser)
"""

from __future__ import annotations

import bisect
import logging
from pathlib import Path
from typing import Any, Iterable, List, Optional, Type, TypeVar, Union

from parsimonious.exceptions import IncompleteParseError, ParseError, VisitationError
from parsimonious.grammar import Grammar
from parsimonious.nodes import Node, NodeVisitor

from swiftsyntax_shims.errors import FrontEndError, SourceSpan
from swiftsyntax_shims.syntax import (
    AccessorBlock,
    AccessorDecl,
    AttributeList,
    ClassDecl,
    ClosureExpr,
    CodeBlock,
    CustomAttribute,
    EnumCaseDecl,
    EnumDecl,
    ExprStmt,
    ExtensionDecl,
    FunctionDecl,
    InitializerDecl,
    MemberTypeIdentifier,
    ProtocolDecl,
    ReturnClause,
    ReturnStmt,
    SimpleTypeIdentifier,
    SourceFile,
    SourceLocation,
    StructDecl,
    Syntax,
    TypeAliasDecl,
    TypeIdentifier,
    VariableDecl,
)

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════
#  PART 1 — GRAMMAR (Parsimonious PEG)
# ═══════════════════════════════════════════════════════════════════

SWIFT_GRAMMAR = Grammar(r'''
    # ─────────────────────────────────────────────────────────────
    # Top-Level Structure
    # ─────────────────────────────────────────────────────────────

    source_file         = _ code_item*

    code_item           = local_declaration / return_stmt / control_stmt
                        / expr_stmt / semicolon
    local_declaration   = type_decl / extension_decl / protocol_decl
                        / function_decl / variable_decl / typealias_decl

    member              = type_decl / extension_decl / protocol_decl
                        / function_decl / initializer_decl / variable_decl
                        / typealias_decl / enum_case_decl / semicolon
    member_block        = "{" _ member* "}" _

    # ─────────────────────────────────────────────────────────────
    # Type Declarations
    # ─────────────────────────────────────────────────────────────

    type_decl           = attribute_list? modifiers type_keyword identifier _
                          generic_clause? _ inheritance? where_clause? member_block
    type_keyword        = ~r"(?:struct|class|enum)(?![A-Za-z0-9_])" _
    extension_decl      = attribute_list? modifiers extension_keyword type_identifier _
                          inheritance? where_clause? member_block
    extension_keyword   = ~r"extension(?![A-Za-z0-9_])" _
    protocol_decl       = attribute_list? modifiers protocol_keyword identifier _
                          inheritance? where_clause? member_block
    protocol_keyword    = ~r"protocol(?![A-Za-z0-9_])" _
    inheritance         = ":" _ type (_ "," _ type)* _
    where_clause        = ~r"where(?![A-Za-z0-9_])[^{]*"

    # ─────────────────────────────────────────────────────────────
    # Functions & Initializers
    # ─────────────────────────────────────────────────────────────

    function_decl       = attribute_list? modifiers func_keyword function_name _
                          generic_clause? _ parameter_clause _ effects
                          return_clause? where_clause? code_block?
    func_keyword        = ~r"func(?![A-Za-z0-9_])" _
    function_name       = identifier / ~r"[-+*/%=<>!&|^~?.]+"
    parameter_clause    = paren_group
    effects             = effect*
    effect              = ~r"(?:async|throws|rethrows)(?![A-Za-z0-9_])" _
    return_clause       = "->" _ type _

    initializer_decl    = attribute_list? modifiers init_keyword _ generic_clause? _
                          parameter_clause _ effects where_clause? code_block?
    init_keyword        = ~r"init(?![A-Za-z0-9_])[?!]?"

    # ─────────────────────────────────────────────────────────────
    # Variables & Accessors
    # ─────────────────────────────────────────────────────────────

    variable_decl       = attribute_list? modifiers binding_keyword binding_name _
                          type_annotation? initializer? accessor?
    binding_keyword     = ~r"(?:var|let)(?![A-Za-z0-9_])" _
    binding_name        = identifier / paren_group
    type_annotation     = ":" _ type _
    initializer         = "=" _ expr_stmt
    accessor            = accessor_block / code_block
    accessor_block      = "{" _ accessor_decl+ "}" _
    accessor_decl       = attribute_list? modifiers accessor_kind accessor_param? _ code_block?
    accessor_kind       = ~r"(?:get|set|willSet|didSet|_read|_modify)(?![A-Za-z0-9_])"
    accessor_param      = _ "(" _ identifier _ ")"

    # ─────────────────────────────────────────────────────────────
    # Other Members
    # ─────────────────────────────────────────────────────────────

    typealias_decl      = attribute_list? modifiers alias_keyword identifier _
                          generic_clause? _ inheritance? alias_value?
    alias_keyword       = ~r"(?:typealias|associatedtype)(?![A-Za-z0-9_])" _
    alias_value         = "=" _ type _

    enum_case_decl      = attribute_list? modifiers case_keyword enum_case_element
                          (_ "," _ enum_case_element)* _
    case_keyword        = ~r"case(?![A-Za-z0-9_])" _
    enum_case_element   = identifier _ paren_group? _ raw_value?
    raw_value           = "=" _ (string_literal / ~r"-?[0-9][0-9A-Za-z_.]*" / identifier) _

    # ─────────────────────────────────────────────────────────────
    # Attributes & Modifiers
    # ─────────────────────────────────────────────────────────────

    attribute_list      = attribute+
    attribute           = "@" attribute_name attribute_args? _
    attribute_name      = identifier ("." identifier)*
    attribute_args      = paren_group
    modifiers           = modifier*
    modifier            = (class_modifier / modifier_word) modifier_detail? _
    class_modifier      = ~r"class(?=\s+(?:func|var|let)(?![A-Za-z0-9_]))"
    modifier_word       = ~r"(?:static|private|fileprivate|internal|public|open|final|override|mutating|nonmutating|lazy|weak|unowned|dynamic|required|convenience|indirect|optional|nonisolated)(?![A-Za-z0-9_])"
    modifier_detail     = "(" ~r"[A-Za-z]+" ")"

    # ─────────────────────────────────────────────────────────────
    # Statements
    # ─────────────────────────────────────────────────────────────

    return_stmt         = return_keyword expr_stmt?
    return_keyword      = ~r"return(?![A-Za-z0-9_])" _
    control_stmt        = control_keyword control_piece*
    control_keyword     = ~r"(?:if|guard|while|for|switch|case|catch|repeat|do|defer)(?![A-Za-z0-9_])" _
    semicolon           = ";" _

    code_block          = "{" _ code_item* "}" _
    closure             = "{" _ code_item* "}"

    # ─────────────────────────────────────────────────────────────
    # Expressions (opaque, closures kept)
    # ─────────────────────────────────────────────────────────────

    expr_stmt           = expr_piece+
    expr_piece          = (closure / paren_group / bracket_group / string_literal
                          / dot_member / number / word / operator) _
    control_piece       = (closure / paren_group / bracket_group / string_literal
                          / dot_member / number / binding_word / word / operator
                          / comma) _
    binding_word        = ~r"(?:let|var)(?![A-Za-z0-9_])"
    comma               = ","
    word                = !keyword identifier
    keyword             = ~r"(?:func|var|let|return|struct|class|enum|extension|protocol|typealias|associatedtype|init|static|private|fileprivate|internal|public|final|override|mutating|nonmutating|lazy|weak|unowned|required|convenience|indirect|if|guard|while|for|switch|case|catch|repeat|do|defer)(?![A-Za-z0-9_])"
    dot_member          = ~r"\.[A-Za-z_][A-Za-z0-9_]*"
    number              = ~r"[0-9][0-9A-Za-z_.]*"
    operator            = ~r"(?:(?!//|/\*)[-+*/%=<>!&|^~?.:#$\\])+"

    paren_group         = "(" _ nested_piece* ")"
    bracket_group       = "[" _ nested_piece* "]"
    nested_piece        = (closure / paren_group / bracket_group / string_literal
                          / nested_token) _
    nested_token        = ~r'(?:(?!//|/\*)[^()\[\]{}"\s])+'

    string_literal      = ~r'"""(?:[^"\\]|\\.|"(?!""))*"""' / ~r'"(?:[^"\\\n]|\\.)*"'

    # ─────────────────────────────────────────────────────────────
    # Types
    # ─────────────────────────────────────────────────────────────

    type                = type_prefix? simple_type (_ "->" _ type)?
    type_prefix         = ~r"(?:some|any|inout)(?![A-Za-z0-9_])" _
    simple_type         = (paren_group / bracket_group / type_identifier) ~r"[?!]*"
    type_identifier     = identifier generic_clause? ("." identifier generic_clause?)*
    generic_clause      = "<" (generic_clause / ~r"[^<>]+")* ">"

    # ─────────────────────────────────────────────────────────────
    # Lexical
    # ─────────────────────────────────────────────────────────────

    identifier          = ~r"[A-Za-z_][A-Za-z0-9_]*"
    _                   = ~r"(?:\s+|//[^\n]*|/\*(?:[^*]|\*(?!/))*\*/)*"
''')


# ═══════════════════════════════════════════════════════════════════
#  PART 2 — INTERMEDIATE MARKERS
# ═══════════════════════════════════════════════════════════════════
# Parse-tree visitors return these small ``str`` subclasses so that a
# declaration can pick its pieces out of the flattened child results by
# type rather than by position.

class _Name(str):
    pass


class _Keyword(str):
    pass


class _Modifier(str):
    pass


class _TypeText(str):
    pass


class _Inherited(str):
    pass


class _Aliased(str):
    pass


class _Args(str):
    pass


T = TypeVar("T")


def _flatten(items: Any) -> List[Any]:
    """Flatten nested result lists, dropping ``None``."""
    out: List[Any] = []
    if items is None:
        return out
    if not isinstance(items, list):
        return [items]
    for item in items:
        out.extend(_flatten(item))
    return out


def _first(items: Iterable[Any], cls: Type[T]) -> Optional[T]:
    for item in items:
        if isinstance(item, cls):
            return item
    return None


def _all(items: Iterable[Any], cls: Type[T]) -> List[T]:
    return [item for item in items if isinstance(item, cls)]


# Marker strings are ``str`` too; statements are the Syntax objects.
def _statements(items: Iterable[Any]) -> List[Syntax]:
    return [item for item in items if isinstance(item, Syntax)]


# ═══════════════════════════════════════════════════════════════════
#  PART 3 — TREE BUILDER (Parse Tree → Syntax)
# ═══════════════════════════════════════════════════════════════════

class SwiftTreeBuilder(NodeVisitor):
    """Transforms the Parsimonious parse tree into syntax nodes."""

    grammar = SWIFT_GRAMMAR
    unwrapped_exceptions = (FrontEndError,)

    def __init__(self, text: str, file: str = "<string>") -> None:
        self._text = text
        self._file = file
        self._line_starts = [0]
        for i, ch in enumerate(text):
            if ch == "\n":
                self._line_starts.append(i + 1)

    def _loc(self, node: Node) -> SourceLocation:
        line = bisect.bisect_right(self._line_starts, node.start)
        column = node.start - self._line_starts[line - 1] + 1
        return SourceLocation(file=self._file, line=line, column=column)

    def generic_visit(self, node, visited_children):
        """Default: pass child results up, flattened."""
        if not visited_children:
            return None
        return _flatten(visited_children)

    # ─────────────────────────────────────────────────────────────
    # Lexical pieces
    # ─────────────────────────────────────────────────────────────

    def visit_identifier(self, node, visited_children):
        return _Name(node.text)

    def visit_function_name(self, node, visited_children):
        return _Name(node.text)

    def visit_binding_name(self, node, visited_children):
        return _Name(node.text.strip())

    def visit_type(self, node, visited_children):
        return _TypeText(node.text.strip())

    def visit_type_identifier(self, node, visited_children):
        return _TypeText(node.text.strip())

    def visit_inheritance(self, node, visited_children):
        return [_Inherited(t) for t in _all(_flatten(visited_children), _TypeText)]

    def visit_alias_value(self, node, visited_children):
        return _Aliased(_first(_flatten(visited_children), _TypeText) or "")

    def _keyword(self, node, visited_children):
        return _Keyword(node.text.strip())

    visit_type_keyword = _keyword
    visit_binding_keyword = _keyword
    visit_accessor_kind = _keyword

    def visit_modifier(self, node, visited_children):
        return _Modifier(node.text.strip())

    def visit_attribute_args(self, node, visited_children):
        return _Args(node.text[1:-1].strip())

    # Parameter lists are not modelled.
    def visit_parameter_clause(self, node, visited_children):
        return None

    # ─────────────────────────────────────────────────────────────
    # Attributes
    # ─────────────────────────────────────────────────────────────

    def visit_attribute_name(self, node, visited_children):
        parts = node.text.split(".")
        loc = self._loc(node)
        name: TypeIdentifier = SimpleTypeIdentifier(name=parts[0], loc=loc)
        for part in parts[1:]:
            name = MemberTypeIdentifier(base=name, name=part, loc=loc)
        return name

    def visit_attribute(self, node, visited_children):
        items = _flatten(visited_children)
        name = _first(items, (SimpleTypeIdentifier, MemberTypeIdentifier))
        return CustomAttribute(
            attribute_name=name,
            arguments=_first(items, _Args),
            loc=self._loc(node),
        )

    def visit_attribute_list(self, node, visited_children):
        return AttributeList(
            attributes=_all(_flatten(visited_children), CustomAttribute),
            loc=self._loc(node),
        )

    # ─────────────────────────────────────────────────────────────
    # Statements & expressions
    # ─────────────────────────────────────────────────────────────

    def visit_source_file(self, node, visited_children):
        return SourceFile(
            statements=_statements(_flatten(visited_children)),
            file=self._file,
            loc=SourceLocation(file=self._file, line=1, column=1),
        )

    def visit_code_block(self, node, visited_children):
        return CodeBlock(
            statements=_statements(_flatten(visited_children)),
            loc=self._loc(node),
        )

    def visit_closure(self, node, visited_children):
        return ClosureExpr(
            statements=_statements(_flatten(visited_children)),
            loc=self._loc(node),
        )

    def _expression(self, node, visited_children):
        return ExprStmt(
            text=node.text.strip(),
            closures=_all(_flatten(visited_children), ClosureExpr),
            loc=self._loc(node),
        )

    visit_expr_stmt = _expression
    visit_control_stmt = _expression

    def visit_return_stmt(self, node, visited_children):
        return ReturnStmt(
            expression=_first(_flatten(visited_children), ExprStmt),
            loc=self._loc(node),
        )

    def visit_return_clause(self, node, visited_children):
        return ReturnClause(
            return_type=_first(_flatten(visited_children), _TypeText) or "",
            loc=self._loc(node),
        )

    def visit_initializer(self, node, visited_children):
        return _first(_flatten(visited_children), ExprStmt)

    # ─────────────────────────────────────────────────────────────
    # Declarations
    # ─────────────────────────────────────────────────────────────

    def visit_type_decl(self, node, visited_children):
        items = _flatten(visited_children)
        cls = {"struct": StructDecl, "class": ClassDecl, "enum": EnumDecl}[
            _first(items, _Keyword)
        ]
        return cls(
            identifier=str(_first(items, _Name)),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            inherited_types=[str(t) for t in _all(items, _Inherited)],
            members=_statements(items[items.index(_first(items, _Name)) + 1:]),
            loc=self._loc(node),
        )

    def visit_protocol_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return ProtocolDecl(
            identifier=str(_first(items, _Name)),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            inherited_types=[str(t) for t in _all(items, _Inherited)],
            members=_statements(items[items.index(_first(items, _Name)) + 1:]),
            loc=self._loc(node),
        )

    def visit_extension_decl(self, node, visited_children):
        items = _flatten(visited_children)
        extended = _first(items, _TypeText)
        return ExtensionDecl(
            extended_type=str(extended),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            inherited_types=[str(t) for t in _all(items, _Inherited)],
            members=_statements(items[items.index(extended) + 1:]),
            loc=self._loc(node),
        )

    def visit_function_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return FunctionDecl(
            identifier=str(_first(items, _Name)),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            return_clause=_first(items, ReturnClause),
            body=_first(items, CodeBlock),
            loc=self._loc(node),
        )

    def visit_initializer_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return InitializerDecl(
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            body=_first(items, CodeBlock),
            loc=self._loc(node),
        )

    def visit_variable_decl(self, node, visited_children):
        items = _flatten(visited_children)
        type_text = _first(items, _TypeText)
        return VariableDecl(
            binding_keyword=str(_first(items, _Keyword)),
            name=str(_first(items, _Name)),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            type_annotation=str(type_text) if type_text is not None else None,
            initializer=_first(items, ExprStmt),
            accessor=_first(items, (AccessorBlock, CodeBlock)),
            loc=self._loc(node),
        )

    def visit_accessor_block(self, node, visited_children):
        return AccessorBlock(
            accessors=_all(_flatten(visited_children), AccessorDecl),
            loc=self._loc(node),
        )

    def visit_accessor_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return AccessorDecl(
            accessor_kind=str(_first(items, _Keyword)),
            attributes=_first(items, AttributeList),
            body=_first(items, CodeBlock),
            loc=self._loc(node),
        )

    def visit_typealias_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return TypeAliasDecl(
            identifier=str(_first(items, _Name)),
            aliased_type=str(_first(items, _Aliased) or ""),
            attributes=_first(items, AttributeList),
            modifiers=[str(m) for m in _all(items, _Modifier)],
            loc=self._loc(node),
        )

    def visit_enum_case_element(self, node, visited_children):
        return _first(_flatten(visited_children), _Name)

    def visit_enum_case_decl(self, node, visited_children):
        items = _flatten(visited_children)
        return EnumCaseDecl(
            elements=[str(n) for n in _all(items, _Name)],
            attributes=_first(items, AttributeList),
            loc=self._loc(node),
        )


# ═══════════════════════════════════════════════════════════════════
#  PART 4 — PUBLIC API
# ═══════════════════════════════════════════════════════════════════

def parse_source(text: str, file: str = "<string>") -> SourceFile:
    """Parse Swift source text into a ``SourceFile`` tree."""
    try:
        parse_tree = SWIFT_GRAMMAR.parse(text)
    except ParseError as exc:
        snippet = text[exc.pos:exc.pos + 20].split("\n", 1)[0]
        what = "unexpected trailing input" if isinstance(exc, IncompleteParseError) else "cannot parse"
        raise FrontEndError(
            f"{what} near {snippet!r}",
            span=SourceSpan(file=file, line=exc.line(), column=exc.column()),
            got=snippet,
            hint="only a subset of Swift declarations is understood",
            cause=exc,
        ) from exc

    try:
        tree = SwiftTreeBuilder(text, file=file).visit(parse_tree)
    except VisitationError as exc:
        raise FrontEndError(
            f"cannot build syntax tree: {exc}",
            span=SourceSpan(file=file),
            cause=exc,
        ) from exc

    logger.debug("Parsed %s: %d top-level item(s)", file, len(tree.statements))
    return tree


def parse_file(path: Union[str, Path]) -> SourceFile:
    """Read and parse a ``.swift`` file."""
    p = Path(path)
    return parse_source(p.read_text(encoding="utf-8"), file=str(p))


__all__ = [
    "SWIFT_GRAMMAR",
    "SwiftTreeBuilder",
    "parse_source",
    "parse_file",
]
