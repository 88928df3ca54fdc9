# tests/conftest.py
"""
Shared Swift sources and helpers for the swiftsyntax-shims test-suite.
"""

import textwrap
from typing import Iterable, List

import pytest

from swiftsyntax_shims.checkers import CheckerRunner, Diagnostic
from swiftsyntax_shims.configuration import Configuration
from swiftsyntax_shims.frontend import parse_source
from swiftsyntax_shims.implicit_return import ERROR_ID


# ═══════════════════════════════════════════════════════════════════
#  Sample sources
# ═══════════════════════════════════════════════════════════════════

BUILDER_TYPE_SWIFT = textwrap.dedent("""\
    @resultBuilder
    struct Builder {
        static func buildBlock() -> Int {
            return 0
        }
    }
""")

IMPLICIT_FUNC_SWIFT = textwrap.dedent("""\
    func someFunc() -> Int {
      0
    }
""")

BUILDER_FUNC_SWIFT = textwrap.dedent("""\
    @Builder
    func someFunc() -> Int {
      0
    }
""")

IMPLICIT_VAR_SWIFT = textwrap.dedent("""\
    var someVar: Int {
      0
    }
""")

BUILDER_VAR_SWIFT = textwrap.dedent("""\
    @Builder
    var someVar: Int {
      0
    }
""")

READ_WRITE_VAR_SWIFT = textwrap.dedent("""\
    struct Foo {
        var someVar: Int {
          get { 0 }
          set { }
        }
    }
""")

VIEW_SWIFT = textwrap.dedent("""\
    import SwiftUI

    struct ContentView: View {
        @State private var count = 0

        @ViewBuilder
        var body: some View {
            Text("Count: \\(count)")
            Button("Increment") { count += 1 }
        }

        func label(for value: Int) -> String {
            return "Value \\(value)"
        }
    }
""")


# ═══════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════

def lint(source: str, builders: Iterable[str] = (), file: str = "test.swift") -> List[Diagnostic]:
    """Parse *source* and return the diagnostics of every enabled rule."""
    tree = parse_source(source, file=file)
    config = Configuration(builder_attribute_names=frozenset(builders))
    return CheckerRunner(configuration=config).run(tree).diagnostics


def implicit_return_findings(diagnostics: Iterable[Diagnostic]) -> List[Diagnostic]:
    return [d for d in diagnostics if d.error_id == ERROR_ID]


@pytest.fixture
def swift_file(tmp_path):
    """Write a Swift source into ``tmp_path`` and return its path."""
    def _write(source: str, name: str = "Sample.swift"):
        path = tmp_path / name
        path.write_text(source, encoding="utf-8")
        return path
    return _write
