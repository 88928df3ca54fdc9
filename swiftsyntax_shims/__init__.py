"""swiftsyntax_shims — syntax-level lint rules for Swift sources.

The package parses (a subset of) Swift into a small syntax tree, walks
it with visitor-style lint rules, and reports diagnostics in GCC, JSON
or Rust-style form.

Submodules
----------
syntax
    Dataclass syntax nodes carrying ``SourceLocation`` and ``kind``.

visitor
    ``SyntaxVisitor`` depth-first walker with ``visit_<kind>`` and
    ``visit_post_<kind>`` hooks.

frontend
    Parsimonious PEG grammar for the Swift subset and the tree builder.

sexp
    S-expression interchange (``dumps`` / ``loads``) via sexpdata.

checkers
    Diagnostics, suppressions, the rule base class, registry and runner.

implicit_return
    ``ForbidsImplicitReturnOutsideResultBuilder`` and its scope machinery.

configuration
    swift-format style JSON configuration.

reporter
    Colourful terminal rendering of diagnostics.

main
    CLI entry-point with subcommands: ``lint``, ``parse``, ``rules``.

Usage
-----
Command-line::

    swiftsyntax-lint lint Sources/App/View.swift --builder ViewBuilder
    python -m swiftsyntax_shims parse View.swift

Programmatic::

    from swiftsyntax_shims.frontend import parse_source
    from swiftsyntax_shims.checkers import CheckerRunner
    from swiftsyntax_shims.configuration import Configuration

    runner = CheckerRunner(configuration=Configuration(
        builder_attribute_names=frozenset({"ViewBuilder"})))
    results = runner.run(parse_source(text, file="View.swift"))
"""

from __future__ import annotations

__version__: str = "0.1.0"
__all__: list[str] = [
    "__version__",
]
