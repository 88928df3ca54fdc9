# swiftsyntax_shims/syntax.py
"""
Swift syntax tree node definitions.

Every node carries source location information for diagnostics and a
``kind`` tag used by the visitor dispatch and by the S-expression form.
``children()`` yields child nodes in source order; only nodes the lint
rules can react to are modelled as children, everything else (types,
modifiers, expression text) is kept as plain strings.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, Iterator, Optional, Union


# ── Source Location ──────────────────────────────────────────────

@dataclass(frozen=True)
class SourceLocation:
    """A specific point in source code."""
    file: str = ""
    line: int = 0
    column: int = 0

    def __str__(self) -> str:
        if self.column:
            return f"{self.file}:{self.line}:{self.column}"
        return f"{self.file}:{self.line}"


# ── Base ─────────────────────────────────────────────────────────

class Syntax:
    """Mixin shared by every node dataclass."""

    kind: ClassVar[str] = "syntax"
    # Names of the fields holding child nodes, in source order.
    child_fields: ClassVar[tuple[str, ...]] = ()

    def children(self) -> Iterator["Syntax"]:
        for name in self.child_fields:
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, list):
                yield from value
            else:
                yield value


# ── Attributes ───────────────────────────────────────────────────

@dataclass
class SimpleTypeIdentifier(Syntax):
    kind: ClassVar[str] = "simple_type_identifier"

    name: str
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class MemberTypeIdentifier(Syntax):
    """A qualified name such as ``SwiftUI.ViewBuilder``."""
    kind: ClassVar[str] = "member_type_identifier"

    base: TypeIdentifier
    name: str
    loc: SourceLocation = field(default_factory=SourceLocation)

    def __str__(self) -> str:
        base = self.base.name if isinstance(self.base, SimpleTypeIdentifier) else str(self.base)
        return f"{base}.{self.name}"


TypeIdentifier = Union[SimpleTypeIdentifier, MemberTypeIdentifier]


@dataclass
class CustomAttribute(Syntax):
    """``@Name`` or ``@Name(arguments)``."""
    kind: ClassVar[str] = "custom_attribute"

    attribute_name: TypeIdentifier
    arguments: Optional[str] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class AttributeList(Syntax):
    kind: ClassVar[str] = "attribute_list"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes",)

    attributes: list[CustomAttribute] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)

    def __iter__(self) -> Iterator[CustomAttribute]:
        return iter(self.attributes)

    def __len__(self) -> int:
        return len(self.attributes)


# ── Statements & Expressions ─────────────────────────────────────

@dataclass
class ClosureExpr(Syntax):
    kind: ClassVar[str] = "closure_expr"
    child_fields: ClassVar[tuple[str, ...]] = ("statements",)

    statements: list[Statement] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class ExprStmt(Syntax):
    """An expression kept as text plus any closures nested inside it."""
    kind: ClassVar[str] = "expr_stmt"
    child_fields: ClassVar[tuple[str, ...]] = ("closures",)

    text: str
    closures: list[ClosureExpr] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class ReturnStmt(Syntax):
    kind: ClassVar[str] = "return_stmt"
    child_fields: ClassVar[tuple[str, ...]] = ("expression",)

    expression: Optional[ExprStmt] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class CodeBlock(Syntax):
    kind: ClassVar[str] = "code_block"
    child_fields: ClassVar[tuple[str, ...]] = ("statements",)

    statements: list[Statement] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


# ── Declarations ─────────────────────────────────────────────────

@dataclass
class ReturnClause(Syntax):
    """``-> Type`` on a function signature."""
    kind: ClassVar[str] = "return_clause"

    return_type: str
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class AccessorDecl(Syntax):
    """One ``get``/``set``/``willSet``/``didSet`` block."""
    kind: ClassVar[str] = "accessor_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "body")

    accessor_kind: str
    attributes: Optional[AttributeList] = None
    body: Optional[CodeBlock] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class AccessorBlock(Syntax):
    kind: ClassVar[str] = "accessor_block"
    child_fields: ClassVar[tuple[str, ...]] = ("accessors",)

    accessors: list[AccessorDecl] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class VariableDecl(Syntax):
    """
    ``var``/``let`` declaration.  ``accessor`` is either an explicit
    ``AccessorBlock`` or the ``CodeBlock`` of an implicit getter.
    """
    kind: ClassVar[str] = "variable_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "initializer", "accessor")

    binding_keyword: str
    name: str
    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    type_annotation: Optional[str] = None
    initializer: Optional[ExprStmt] = None
    accessor: Optional[Union[AccessorBlock, CodeBlock]] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class FunctionDecl(Syntax):
    kind: ClassVar[str] = "function_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "return_clause", "body")

    identifier: str
    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    return_clause: Optional[ReturnClause] = None
    body: Optional[CodeBlock] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class InitializerDecl(Syntax):
    kind: ClassVar[str] = "initializer_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "body")

    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    body: Optional[CodeBlock] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class EnumCaseDecl(Syntax):
    kind: ClassVar[str] = "enum_case_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes",)

    elements: list[str] = field(default_factory=list)
    attributes: Optional[AttributeList] = None
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class TypeAliasDecl(Syntax):
    kind: ClassVar[str] = "typealias_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes",)

    identifier: str
    aliased_type: str
    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class TypeDeclSyntax(Syntax):
    """Shared shape of struct, class and enum declarations."""
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "members")

    identifier: str
    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    inherited_types: list[str] = field(default_factory=list)
    members: list[Declaration] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class StructDecl(TypeDeclSyntax):
    kind: ClassVar[str] = "struct_decl"


@dataclass
class ClassDecl(TypeDeclSyntax):
    kind: ClassVar[str] = "class_decl"


@dataclass
class EnumDecl(TypeDeclSyntax):
    kind: ClassVar[str] = "enum_decl"


@dataclass
class ProtocolDecl(TypeDeclSyntax):
    """Same shape as the nominal types, but declares no new concrete type."""
    kind: ClassVar[str] = "protocol_decl"


@dataclass
class ExtensionDecl(Syntax):
    kind: ClassVar[str] = "extension_decl"
    child_fields: ClassVar[tuple[str, ...]] = ("attributes", "members")

    extended_type: str
    attributes: Optional[AttributeList] = None
    modifiers: list[str] = field(default_factory=list)
    inherited_types: list[str] = field(default_factory=list)
    members: list[Declaration] = field(default_factory=list)
    loc: SourceLocation = field(default_factory=SourceLocation)


@dataclass
class SourceFile(Syntax):
    kind: ClassVar[str] = "source_file"
    child_fields: ClassVar[tuple[str, ...]] = ("statements",)

    statements: list[Statement] = field(default_factory=list)
    file: str = "<string>"
    loc: SourceLocation = field(default_factory=SourceLocation)


Declaration = Union[
    StructDecl, ClassDecl, EnumDecl, ProtocolDecl, ExtensionDecl,
    EnumCaseDecl, TypeAliasDecl, InitializerDecl, FunctionDecl, VariableDecl,
]
Statement = Union[Declaration, ReturnStmt, ExprStmt]


# ── Registry of node classes (by kind) ───────────────────────────

NODE_TYPES: dict[str, type] = {
    cls.kind: cls
    for cls in (
        SimpleTypeIdentifier, MemberTypeIdentifier, CustomAttribute,
        AttributeList, ClosureExpr, ExprStmt, ReturnStmt, CodeBlock,
        ReturnClause, AccessorDecl, AccessorBlock, VariableDecl,
        FunctionDecl, InitializerDecl, EnumCaseDecl, TypeAliasDecl,
        StructDecl, ClassDecl, EnumDecl, ProtocolDecl, ExtensionDecl,
        SourceFile,
    )
}


__all__ = [
    "SourceLocation",
    "Syntax",
    "SimpleTypeIdentifier",
    "MemberTypeIdentifier",
    "TypeIdentifier",
    "CustomAttribute",
    "AttributeList",
    "ClosureExpr",
    "ExprStmt",
    "ReturnStmt",
    "CodeBlock",
    "ReturnClause",
    "AccessorDecl",
    "AccessorBlock",
    "VariableDecl",
    "FunctionDecl",
    "InitializerDecl",
    "EnumCaseDecl",
    "TypeAliasDecl",
    "TypeDeclSyntax",
    "StructDecl",
    "ClassDecl",
    "EnumDecl",
    "ProtocolDecl",
    "ExtensionDecl",
    "SourceFile",
    "Declaration",
    "Statement",
    "NODE_TYPES",
]
