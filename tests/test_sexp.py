# tests/test_sexp.py
"""Tests for the S-expression tree interchange format."""

import textwrap

import pytest

from swiftsyntax_shims.checkers import CheckerRunner
from swiftsyntax_shims.configuration import Configuration
from swiftsyntax_shims.errors import TreeFormatError
from swiftsyntax_shims.frontend import parse_source
from swiftsyntax_shims.sexp import dumps, load_file, loads
from swiftsyntax_shims.syntax import (
    CodeBlock,
    FunctionDecl,
    MemberTypeIdentifier,
    SourceFile,
    VariableDecl,
)
from tests.conftest import BUILDER_FUNC_SWIFT, READ_WRITE_VAR_SWIFT, implicit_return_findings


BUILDER_FUNC_SEXP = textwrap.dedent("""\
    (source_file
      (file "Foo.swift")
      (statements
        (function_decl (loc 2 1)
          (identifier "someFunc")
          (attributes
            (attribute_list (loc 1 1)
              (attributes
                (custom_attribute (loc 1 1)
                  (attribute_name (simple_type_identifier (name "Builder")))))))
          (return_clause (return_type "Int"))
          (body (code_block (statements (expr_stmt (loc 3 3) (text "0"))))))))
""")


def run_rules(tree, builders=()):
    config = Configuration(builder_attribute_names=frozenset(builders))
    return CheckerRunner(configuration=config).run(tree).diagnostics


class TestLoads:

    def test_builds_nodes(self):
        tree = loads(BUILDER_FUNC_SEXP)
        assert isinstance(tree, SourceFile)
        assert tree.file == "Foo.swift"
        fn = tree.statements[0]
        assert isinstance(fn, FunctionDecl)
        assert fn.identifier == "someFunc"
        assert (fn.loc.file, fn.loc.line, fn.loc.column) == ("Foo.swift", 2, 1)
        assert fn.modifiers == []
        assert isinstance(fn.body, CodeBlock)
        assert fn.body.statements[0].loc.line == 3

    def test_caller_file_without_file_field(self):
        tree = loads('(source_file (statements (variable_decl (binding_keyword "let") (name "x"))))',
                     file="dump.sexp")
        assert tree.file == "dump.sexp"
        var = tree.statements[0]
        assert isinstance(var, VariableDecl)
        assert var.loc.file == "dump.sexp"
        assert var.loc.line == 0

    def test_inline_and_wrapped_return_clause(self):
        inline = loads('(function_decl (identifier "f") (return_clause (return_type "Int")))')
        wrapped = loads(
            '(function_decl (identifier "f") '
            '(return_clause (return_clause (return_type "Int"))))'
        )
        assert inline.return_clause.return_type == "Int"
        assert inline == wrapped

    def test_caller_file_reaches_diagnostics(self, tmp_path):
        path = tmp_path / "Dump.sexp"
        path.write_text(
            '(source_file (statements (function_decl (loc 1 1) (identifier "f") '
            '(return_clause (return_type "Int")) '
            '(body (code_block (statements (expr_stmt (text "0"))))))))',
            encoding="utf-8",
        )
        tree = load_file(path)
        assert tree.file == str(path)
        (diag,) = implicit_return_findings(run_rules(tree))
        assert str(diag.location) == f"{path}:1:1"

    def test_member_type_identifier(self):
        tree = loads(
            '(attribute_list (attributes (custom_attribute (attribute_name '
            '(member_type_identifier (base (simple_type_identifier (name "SwiftUI"))) '
            '(name "ViewBuilder"))))))'
        )
        name = tree.attributes[0].attribute_name
        assert isinstance(name, MemberTypeIdentifier)
        assert str(name) == "SwiftUI.ViewBuilder"

    def test_loaded_tree_is_linted(self):
        tree = loads(BUILDER_FUNC_SEXP)
        findings = implicit_return_findings(run_rules(tree))
        assert len(findings) == 1
        assert findings[0].location.file == "Foo.swift"
        assert findings[0].location.line == 2
        assert implicit_return_findings(run_rules(tree, builders=["Builder"])) == []

    def test_load_file(self, tmp_path):
        path = tmp_path / "tree.sexp"
        path.write_text(BUILDER_FUNC_SEXP, encoding="utf-8")
        assert isinstance(load_file(path).statements[0], FunctionDecl)


class TestDumps:

    def test_omits_empty_fields(self):
        text = dumps(parse_source("func f() {\n}\n", file="F.swift"))
        assert text.startswith("(source_file")
        assert '(identifier "f")' in text
        assert "modifiers" not in text
        assert "return_clause" not in text

    def test_round_trip_preserves_tree(self):
        tree = parse_source(BUILDER_FUNC_SWIFT, file="Foo.swift")
        assert loads(dumps(tree)) == tree

    def test_round_trip_keeps_findings(self):
        tree = parse_source(READ_WRITE_VAR_SWIFT, file="Foo.swift")
        again = loads(dumps(tree))
        assert again == tree
        assert [d.location for d in implicit_return_findings(run_rules(again))] == \
            [d.location for d in implicit_return_findings(run_rules(tree))]


class TestErrors:

    @pytest.mark.parametrize("text, fragment", [
        ("(mystery_node)", "Unknown node form"),
        ('(function_decl (identifier "f") (colour "red"))', "Unknown field"),
        ('(function_decl (identifier "f" "g"))', "takes one value"),
        ('(function_decl (identifier "f") (identifier "g"))', "Duplicate field"),
        ("(function_decl (modifiers \"static\"))", "Incomplete"),
        ('(function_decl (loc "one" 2) (identifier "f"))', "expects integers"),
        ('(function_decl (identifier f))', "Expected string or node form"),
        ("(function_decl (identifier \"f\")", "syntax error"),
        ('"just a string"', "Expected list"),
    ])
    def test_malformed_trees(self, text, fragment):
        with pytest.raises(TreeFormatError) as excinfo:
            loads(text, file="bad.sexp")
        assert fragment in excinfo.value.message
        assert excinfo.value.span.file == "bad.sexp"
