#!/usr/bin/env python3
"""
swiftsyntax_shims/reporter.py
═════════════════════════════

Rust-style colourful rendering of lint diagnostics::

    error[forbidsImplicitReturnOutsideResultBuilder]: Implicit return can ...
      --> Sources/App/View.swift:12:5
       |
    12 |     var title: String {
       |     ^
    [Sources/App/View.swift:12]: (error) Implicit return can ... [forbids...]

The last line is the classic one-liner so existing log scrapers keep
working.  Colour is left to termcolor, which switches itself off when
the stream is not a terminal or ``NO_COLOR`` is set.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Iterable, List, TextIO

from termcolor import colored

from swiftsyntax_shims.checkers import Diagnostic, DiagnosticSeverity

_SEVERITY_COLORS: Dict[DiagnosticSeverity, str] = {
    DiagnosticSeverity.ERROR: "red",
    DiagnosticSeverity.WARNING: "yellow",
    DiagnosticSeverity.INFORMATION: "white",
}


def classic_line(diag: Diagnostic) -> str:
    """Classic one-liner: ``[file:line]: (severity) message [id]``."""
    loc = diag.location
    return f"[{loc.file}:{loc.line}]: ({diag.severity.value}) {diag.message} [{diag.error_id}]"


class TerminalRenderer:
    """Render diagnostics with a source excerpt and caret."""

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        self._stream = stream
        # path → lines, read once per run
        self._sources: Dict[str, List[str]] = {}

    def render(self, diag: Diagnostic) -> None:
        color = _SEVERITY_COLORS.get(diag.severity, "white")
        lines: List[str] = []

        # ── header: severity[errorId]: message ───────────────────────
        sev_str = colored(
            f"{diag.severity.value}[{diag.error_id}]", color, attrs=["bold"]
        )
        lines.append(f"{sev_str}: {colored(diag.message, attrs=['bold'])}")

        loc = diag.location
        if loc.file or loc.line:
            arrow = colored("-->", "blue", attrs=["bold"])
            lines.append(f"  {arrow} {loc}")

        src_text = self._source_line(loc.file, loc.line)
        if src_text is not None:
            gutter_w = len(str(loc.line)) + 1
            pipe = colored("|", "blue", attrs=["bold"])
            blank_gutter = " " * gutter_w
            line_prefix = colored(str(loc.line).rjust(gutter_w), "blue", attrs=["bold"])
            pad = " " * (loc.column - 1) if loc.column > 0 else ""
            lines.append(f" {blank_gutter} {pipe}")
            lines.append(f" {line_prefix} {pipe} {src_text}")
            lines.append(f" {blank_gutter} {pipe} {pad}{colored('^', color, attrs=['bold'])}")

        lines.append(colored(classic_line(diag), attrs=["dark"]))
        lines.append("")  # blank separator
        self._stream.write("\n".join(lines) + "\n")

    def render_all(self, diagnostics: Iterable[Diagnostic]) -> None:
        for diag in diagnostics:
            self.render(diag)
        self._stream.flush()

    def _source_line(self, filepath: str, line: int):
        """Return source line *line* of *filepath*, or None when unavailable."""
        if not filepath or line <= 0:
            return None
        if filepath not in self._sources:
            try:
                text = Path(filepath).read_text(encoding="utf-8", errors="replace")
            except OSError:
                text = ""
            self._sources[filepath] = text.splitlines()
        source = self._sources[filepath]
        if line > len(source):
            return None
        return source[line - 1]


__all__ = ["TerminalRenderer", "classic_line"]
