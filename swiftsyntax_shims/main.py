#!/usr/bin/env python3
"""swiftsyntax_shims/main.py — CLI entry-point for swiftsyntax-lint.

Usage examples
--------------
    # Lint Swift sources
    swiftsyntax-lint lint Sources/App/*.swift

    # Treat extra attribute names as result builders
    swiftsyntax-lint lint View.swift --builder ViewBuilder --builder SceneBuilder

    # Use a swift-format style configuration and emit JSON lines
    swiftsyntax-lint lint View.swift --config .swift-format --format json

    # Lint a tree dumped by another front end
    swiftsyntax-lint lint View.sexp

    # Parse a Swift file and print its syntax tree (debugging aid)
    swiftsyntax-lint parse View.swift --format sexp

    # List available rules
    swiftsyntax-lint rules

Exit codes
----------
    0   Success (no error diagnostics).
    1   One or more diagnostics with severity ERROR were emitted.
    2   Infrastructure failure (bad file, unparsable input, bad config).

The module doubles as ``python -m swiftsyntax_shims`` via the companion
``swiftsyntax_shims/__main__.py`` which simply calls :func:`main`.
"""

from __future__ import annotations

import argparse
import logging
import sys
import textwrap
from pathlib import Path
from typing import List, Optional, Sequence, TextIO, Tuple

from swiftsyntax_shims import __version__
from swiftsyntax_shims.checkers import (
    CheckerRunResults,
    CheckerRunner,
    SuppressionManager,
    default_registry,
)
from swiftsyntax_shims.configuration import Configuration, load_configuration
from swiftsyntax_shims.errors import ShimsError
from swiftsyntax_shims.syntax import Syntax

_log = logging.getLogger("swiftsyntax_shims")

# Exit codes ----------------------------------------------------------------

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2

SEXP_SUFFIXES = (".sexp", ".sexpr")


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``swiftsyntax_shims`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        )
    )
    root = logging.getLogger("swiftsyntax_shims")
    # main() may run several times in one process (tests).
    for old in list(root.handlers):
        if getattr(old, "_swiftsyntax_cli", False):
            root.removeHandler(old)
    handler._swiftsyntax_cli = True  # type: ignore[attr-defined]
    root.setLevel(level)
    root.addHandler(handler)


def _resolve_path(raw: str, label: str = "file") -> Path:
    """Resolve *raw* to an absolute ``Path``, raising on missing files."""
    p = Path(raw).expanduser().resolve()
    if not p.exists():
        _log.error("%s not found: %s", label, p)
        raise SystemExit(EXIT_INFRA)
    return p


def _open_output(dest: Optional[str]) -> TextIO:
    """Return a writable text stream.

    *dest* ``None`` or ``"-"`` → ``sys.stdout``; otherwise open the path
    for writing (creating parent directories as needed).
    """
    if dest is None or dest == "-":
        return sys.stdout
    p = Path(dest).expanduser().resolve()
    p.parent.mkdir(parents=True, exist_ok=True)
    return open(p, "w", encoding="utf-8")


def _emit_diagnostics(
    results: CheckerRunResults,
    fmt: str,
    stream: TextIO,
) -> int:
    """Write the diagnostics of *results* to *stream* in the chosen format.

    Returns the count of ERROR-severity diagnostics.
    """
    if fmt == "pretty":
        from swiftsyntax_shims.reporter import TerminalRenderer

        TerminalRenderer(stream).render_all(results.diagnostics)
        return results.error_count

    for diag in results.diagnostics:
        if fmt == "json":
            stream.write(diag.to_json_str() + "\n")
        else:
            # gcc and summary both list one line per diagnostic
            stream.write(diag.to_gcc_format() + "\n")

    if fmt == "summary":
        stream.write("\n" + results.summary() + "\n")
    return results.error_count


def _load_tree(path: Path, name: str) -> Syntax:
    """Parse *path* with the front end matching its suffix.

    *name* is the file name recorded in locations, normally the path as
    the user typed it.
    """
    text = path.read_text(encoding="utf-8")
    if path.suffix in SEXP_SUFFIXES:
        from swiftsyntax_shims import sexp

        return sexp.loads(text, file=name)

    from swiftsyntax_shims import frontend

    return frontend.parse_source(text, file=name)


def _build_configuration(args: argparse.Namespace) -> Configuration:
    config = Configuration()
    if args.config:
        config = load_configuration(_resolve_path(args.config, "configuration"))
    if args.builder:
        config = config.with_builders(args.builder)
        for warning in config.validate():
            _log.warning("%s", warning)
    return config


# ===========================================================================
# Sub-command implementations
# ===========================================================================

# ---------------------------------------------------------------------------
# lint
# ---------------------------------------------------------------------------

def cmd_lint(args: argparse.Namespace) -> int:
    """Run the enabled lint rules over every input file.

    Workflow:
        1. Build the configuration (file, then ``--builder`` additions).
        2. Parse each input (Swift source or S-expression tree).
        3. Run the rules with a fresh rule instance per tree.
        4. Emit diagnostics and return an appropriate exit code.
    """
    try:
        config = _build_configuration(args)
    except ShimsError as exc:
        _log.error("%s", exc)
        return EXIT_INFRA

    suppressions = SuppressionManager()
    for error_id in args.suppress or ():
        suppressions.add_global_suppression(error_id)

    runner = CheckerRunner(suppressions=suppressions, configuration=config)

    trees: List[Tuple[str, Syntax]] = []
    failed = 0
    for raw in args.sources:
        path = _resolve_path(raw, "source file")
        _log.info("Parsing %s", path)
        try:
            trees.append((raw, _load_tree(path, raw)))
        except ShimsError as exc:
            _log.error("%s", exc)
            failed += 1
        except (OSError, UnicodeDecodeError) as exc:
            _log.error("Cannot read %s: %s", path, exc)
            failed += 1

    results = runner.run_all(trees, checkers=args.rule or None)

    out = _open_output(args.output)
    try:
        error_count = _emit_diagnostics(results, args.format, out)
    finally:
        if out is not sys.stdout:
            out.close()

    _log.info("%d file(s) linted, %d error diagnostic(s)", len(trees), error_count)
    if failed:
        return EXIT_INFRA
    return EXIT_ERROR if error_count > 0 else EXIT_OK


# ---------------------------------------------------------------------------
# parse
# ---------------------------------------------------------------------------

def cmd_parse(args: argparse.Namespace) -> int:
    """Parse a Swift source (or tree) file and print its syntax tree.

    Useful for debugging the front end without running any rule.
    """
    src_path = _resolve_path(args.source_file, "source file")

    try:
        tree = _load_tree(src_path, args.source_file)
    except ShimsError as exc:
        _log.error("Parse error: %s", exc)
        return EXIT_ERROR

    out = _open_output(args.output)
    try:
        if args.format == "sexp":
            from swiftsyntax_shims import sexp

            out.write(sexp.dumps(tree) + "\n")
        else:
            out.write(repr(tree) + "\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ---------------------------------------------------------------------------
# rules (list available rules)
# ---------------------------------------------------------------------------

def cmd_rules(args: argparse.Namespace) -> int:
    """List the registered lint rules."""
    registry = default_registry()

    out = _open_output(args.output)
    try:
        for name in registry.names:
            cls = registry.get_by_name(name)
            out.write(f"  {name}\n")
            if cls is not None and cls.description:
                out.write(textwrap.indent(cls.description, "      ") + "\n")
        out.write(f"\n{len(registry.names)} rule(s) available.\n")
    finally:
        if out is not sys.stdout:
            out.close()
    return EXIT_OK


# ===========================================================================
# Argument parser construction
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""

    # --- Top-level parser --------------------------------------------------
    parser = argparse.ArgumentParser(
        prog="swiftsyntax-lint",
        description=(
            "swiftsyntax-lint: syntax-level lint rules for Swift sources.\n\n"
            "Flags implicit returns used outside of result builders."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              swiftsyntax-lint lint Sources/App/View.swift
              swiftsyntax-lint lint View.swift --builder ViewBuilder -f json
              swiftsyntax-lint parse View.swift --format sexp
        """),
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        title="commands",
        metavar="<command>",
    )

    def _add_output_arg(p: argparse.ArgumentParser) -> None:
        p.add_argument(
            "-o", "--output",
            default=None,
            metavar="FILE",
            help='Output file ("-" or omit for stdout).',
        )

    # --- lint --------------------------------------------------------------
    p_lint = subparsers.add_parser(
        "lint",
        help="Lint Swift sources or S-expression trees.",
        description=(
            "Parse each input and run the enabled lint rules. Files ending "
            "in .sexp are read as S-expression syntax trees."
        ),
    )
    p_lint.add_argument(
        "sources",
        nargs="+",
        metavar="FILE",
        help="Swift (.swift) or tree (.sexp) files.",
    )
    p_lint.add_argument(
        "-c", "--config",
        metavar="FILE",
        default=None,
        help="swift-format style JSON configuration.",
    )
    p_lint.add_argument(
        "-b", "--builder",
        action="append",
        metavar="NAME",
        help="Attribute name to accept as a result builder (repeatable).",
    )
    p_lint.add_argument(
        "--suppress",
        action="append",
        metavar="ID",
        help='Suppress diagnostics with this error id ("*" for all).',
    )
    p_lint.add_argument(
        "--rule",
        action="append",
        metavar="NAME",
        help="Run only this rule (repeatable).",
    )
    p_lint.add_argument(
        "-f", "--format",
        choices=["json", "gcc", "summary", "pretty"],
        default="gcc",
        help="Output format (default: gcc).",
    )
    _add_output_arg(p_lint)
    p_lint.set_defaults(func=cmd_lint)

    # --- parse -------------------------------------------------------------
    p_parse = subparsers.add_parser(
        "parse",
        help="Parse a file and print its syntax tree.",
    )
    p_parse.add_argument(
        "source_file",
        metavar="FILE",
        help="Swift (.swift) or tree (.sexp) file.",
    )
    p_parse.add_argument(
        "-f", "--format",
        choices=["sexp", "repr"],
        default="sexp",
        help="Tree output format (default: sexp).",
    )
    _add_output_arg(p_parse)
    p_parse.set_defaults(func=cmd_parse)

    # --- rules -------------------------------------------------------------
    p_rules = subparsers.add_parser(
        "rules",
        help="List available lint rules.",
    )
    _add_output_arg(p_rules)
    p_rules.set_defaults(func=cmd_rules)

    return parser


# ===========================================================================
# Main entry point
# ===========================================================================

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the swiftsyntax-lint CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    # No subcommand given → print help.
    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130  # Standard UNIX convention for SIGINT
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except Exception as exc:
        _log.error("Unhandled exception: %s", exc, exc_info=True)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
