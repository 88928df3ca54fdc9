# tests/test_frontend.py
"""
Tests for the Swift front end: the PEG grammar on its own, then source
text → syntax nodes.
"""

import textwrap

import pytest
from parsimonious.exceptions import ParseError

from swiftsyntax_shims.errors import FrontEndError
from swiftsyntax_shims.frontend import SWIFT_GRAMMAR, parse_file, parse_source
from swiftsyntax_shims.syntax import (
    AccessorBlock,
    AttributeList,
    ClassDecl,
    ClosureExpr,
    CodeBlock,
    EnumCaseDecl,
    EnumDecl,
    ExprStmt,
    ExtensionDecl,
    FunctionDecl,
    InitializerDecl,
    MemberTypeIdentifier,
    ProtocolDecl,
    ReturnStmt,
    SimpleTypeIdentifier,
    SourceFile,
    StructDecl,
    TypeAliasDecl,
    VariableDecl,
)
from tests.conftest import BUILDER_TYPE_SWIFT, VIEW_SWIFT


@pytest.fixture(scope="module")
def grammar():
    return SWIFT_GRAMMAR


def only(source):
    """Parse *source* and return its single top-level item."""
    tree = parse_source(textwrap.dedent(source))
    assert len(tree.statements) == 1, tree.statements
    return tree.statements[0]


# ═══════════════════════════════════════════════════════════════════
#  Grammar level
# ═══════════════════════════════════════════════════════════════════

class TestGrammarWellFormed:

    def test_key_rules_exist(self, grammar):
        for rule in ("source_file", "type_decl", "function_decl", "variable_decl",
                     "accessor_block", "attribute_list", "return_stmt", "type"):
            assert rule in grammar, f"Rule {rule!r} missing"

    def test_empty_input(self, grammar):
        assert grammar.parse("") is not None

    def test_comments_only(self, grammar):
        grammar.parse("// line\n/* block\n comment */\n")


class TestGrammarAtoms:

    def test_identifiers(self, grammar):
        for name in ("x", "someVar", "_private", "buildBlock2"):
            assert grammar["identifier"].parse(name).text == name

    def test_string_literals(self, grammar):
        for lit in ('"hello"', r'"escaped \"quote\""', r'"interp \(x)"',
                    '"""\nmulti\nline\n"""'):
            grammar["string_literal"].parse(lit)

    def test_types(self, grammar):
        for text in ("Int", "Int?", "[String: Int]", "some View", "Array<Int>",
                     "Foo.Bar", "(Int) -> Int", "Result<[Int], Error>"):
            grammar["type"].parse(text)

    def test_attributes(self, grammar):
        grammar["attribute_list"].parse("@resultBuilder ")
        grammar["attribute_list"].parse("@available(iOS 13, *) @MainActor ")

    def test_modifiers(self, grammar):
        grammar["modifiers"].parse("public static ")
        grammar["modifiers"].parse("private(set) ")

    def test_keyword_is_not_a_word(self, grammar):
        with pytest.raises(ParseError):
            grammar["word"].parse("return")
        grammar["word"].parse("returnValue")


# ═══════════════════════════════════════════════════════════════════
#  Declarations
# ═══════════════════════════════════════════════════════════════════

class TestFunctionDecl:

    def test_signature_and_body(self):
        fn = only("""\
            func someFunc(x: Int, _ y: Int) async throws -> Int {
              0
            }
        """)
        assert isinstance(fn, FunctionDecl)
        assert fn.identifier == "someFunc"
        assert fn.return_clause.return_type == "Int"
        assert isinstance(fn.body, CodeBlock)
        assert [type(s) for s in fn.body.statements] == [ExprStmt]
        assert fn.body.statements[0].text == "0"
        assert (fn.loc.line, fn.loc.column) == (1, 1)

    def test_no_return_clause(self):
        fn = only("func run() {\n}\n")
        assert fn.return_clause is None
        assert fn.body.statements == []

    def test_generic_function_with_where_clause(self):
        fn = only("func first<T>(of xs: [T]) -> T? where T: Equatable {\n  return xs.first\n}\n")
        assert fn.return_clause.return_type == "T?"
        assert isinstance(fn.body.statements[0], ReturnStmt)

    def test_attributes_and_modifiers(self):
        fn = only("@inlinable @discardableResult\npublic static func make() -> Int { return 1 }\n")
        assert [a.attribute_name.name for a in fn.attributes] == ["inlinable", "discardableResult"]
        assert fn.modifiers == ["public", "static"]
        assert fn.loc.line == 1

    def test_return_with_closure(self):
        fn = only("""\
            func f() -> [Int] {
              return xs.map { x in
                return x * 2
              }
            }
        """)
        ret = fn.body.statements[0]
        assert isinstance(ret, ReturnStmt)
        closure = ret.expression.closures[0]
        assert isinstance(closure, ClosureExpr)
        assert isinstance(closure.statements[-1], ReturnStmt)

    def test_bodyless_requirement(self):
        proto = only("protocol P {\n  func f() -> Int\n  func g()\n}\n")
        assert isinstance(proto, ProtocolDecl)
        assert [m.body for m in proto.members] == [None, None]


class TestVariableDecl:

    def test_implicit_getter(self):
        var = only("var someVar: Int {\n  0\n}\n")
        assert isinstance(var, VariableDecl)
        assert var.binding_keyword == "var"
        assert var.type_annotation == "Int"
        assert isinstance(var.accessor, CodeBlock)

    def test_accessor_block(self):
        var = only("var v: Int {\n  get { 0 }\n  set(newValue) { }\n}\n")
        assert isinstance(var.accessor, AccessorBlock)
        assert [a.accessor_kind for a in var.accessor.accessors] == ["get", "set"]
        assert var.accessor.accessors[0].body.statements[0].text == "0"

    def test_stored_with_initializer(self):
        var = only("let answer = 42\n")
        assert var.binding_keyword == "let"
        assert var.initializer.text == "42"
        assert var.accessor is None

    def test_observers_after_annotation(self):
        var = only("var v: Int {\n  willSet { }\n  didSet { }\n}\n")
        assert [a.accessor_kind for a in var.accessor.accessors] == ["willSet", "didSet"]

    def test_getter_attribute(self):
        var = only("var v: Int {\n  @Builder get { 0 }\n}\n")
        accessor = var.accessor.accessors[0]
        assert isinstance(accessor.attributes, AttributeList)
        assert accessor.attributes.attributes[0].attribute_name.name == "Builder"


class TestTypeDecls:

    def test_struct_members(self):
        tree = parse_source(BUILDER_TYPE_SWIFT)
        builder = tree.statements[0]
        assert isinstance(builder, StructDecl)
        assert builder.identifier == "Builder"
        assert builder.attributes.attributes[0].attribute_name.name == "resultBuilder"
        assert [type(m) for m in builder.members] == [FunctionDecl]
        assert builder.members[0].modifiers == ["static"]

    def test_inheritance_and_modifiers(self):
        decl = only("public final class Cache<Key: Hashable>: Base, Sendable {\n}\n")
        assert isinstance(decl, ClassDecl)
        assert decl.identifier == "Cache"
        assert decl.modifiers == ["public", "final"]
        assert decl.inherited_types == ["Base", "Sendable"]

    def test_class_func_is_a_modifier(self):
        decl = only("class Factory {\n  class func make() -> Factory { return Factory() }\n}\n")
        assert isinstance(decl.members[0], FunctionDecl)
        assert decl.members[0].modifiers == ["class"]

    def test_enum_cases(self):
        decl = only("enum E: Int {\n  case a = 1, b\n  indirect case c(Int)\n}\n")
        assert isinstance(decl, EnumDecl)
        cases = [m for m in decl.members if isinstance(m, EnumCaseDecl)]
        assert [c.elements for c in cases] == [["a", "b"], ["c"]]

    def test_extension_and_typealias(self):
        tree = parse_source(
            "extension Array: Summable where Element == Int {\n"
            "  typealias Total = Int\n"
            "  init(seed: Int) { self.init() }\n"
            "}\n"
        )
        ext = tree.statements[0]
        assert isinstance(ext, ExtensionDecl)
        assert ext.extended_type == "Array"
        assert ext.inherited_types == ["Summable"]
        alias, init = ext.members
        assert isinstance(alias, TypeAliasDecl)
        assert (alias.identifier, alias.aliased_type) == ("Total", "Int")
        assert isinstance(init, InitializerDecl)

    def test_nested_types(self):
        outer = only("struct Outer {\n  struct Inner {}\n  enum Kind { case a }\n}\n")
        assert [type(m) for m in outer.members] == [StructDecl, EnumDecl]

    def test_member_type_attribute(self):
        fn = only("@SwiftUI.ViewBuilder\nfunc f() -> Int { 0 }\n")
        name = fn.attributes.attributes[0].attribute_name
        assert isinstance(name, MemberTypeIdentifier)
        assert isinstance(name.base, SimpleTypeIdentifier)
        assert str(name) == "SwiftUI.ViewBuilder"


class TestStatements:

    def test_control_flow_keeps_returns(self):
        fn = only("""\
            func f(x: Int?) -> Int {
              guard let x = x else { return 0 }
              for i in 0..<x {
                print(i)
              }
              return x
            }
        """)
        stmts = fn.body.statements
        assert isinstance(stmts[-1], ReturnStmt)
        guard = stmts[0]
        assert guard.text.startswith("guard")
        assert isinstance(guard.closures[0].statements[0], ReturnStmt)

    def test_local_declarations(self):
        fn = only("func f() -> Int {\n  let a = 1\n  var b = 2\n  return a + b\n}\n")
        assert [type(s) for s in fn.body.statements] == [VariableDecl, VariableDecl, ReturnStmt]

    def test_semicolons(self):
        tree = parse_source("let a = 1; let b = 2;\n")
        assert [s.name for s in tree.statements] == ["a", "b"]

    def test_view_source(self):
        tree = parse_source(VIEW_SWIFT, file="ContentView.swift")
        view = tree.statements[-1]
        assert isinstance(view, StructDecl)
        assert [getattr(m, "name", getattr(m, "identifier", None)) for m in view.members] == [
            "count", "body", "label",
        ]
        assert view.members[1].type_annotation == "some View"
        assert view.members[0].loc.file == "ContentView.swift"


# ═══════════════════════════════════════════════════════════════════
#  Errors and files
# ═══════════════════════════════════════════════════════════════════

class TestErrors:

    def test_unterminated_type(self):
        with pytest.raises(FrontEndError) as excinfo:
            parse_source("struct Foo {\n", file="Broken.swift")
        err = excinfo.value
        assert err.span.file == "Broken.swift"
        assert err.span.line == 1
        assert "Broken.swift:1" in err.to_gcc_format()

    def test_error_line_number(self):
        src = "func ok() -> Int {\n  return 1\n}\n}\n"
        with pytest.raises(FrontEndError) as excinfo:
            parse_source(src)
        assert excinfo.value.span.line == 4

    def test_parse_file(self, swift_file):
        path = swift_file("func f() -> Int { return 1 }\n", name="F.swift")
        tree = parse_file(path)
        assert isinstance(tree, SourceFile)
        assert tree.file == str(path)
        assert tree.statements[0].loc.file == str(path)
