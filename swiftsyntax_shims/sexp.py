"""swiftsyntax_shims/sexp.py – syntax tree ⇄ S-expression interchange.

Lets trees produced by another front end (for example a dump from the
real Swift parser) be linted, and lets our own trees be inspected.

Surface syntax
--------------
Every node is a list headed by its ``kind``; every non-empty field is a
sub-list headed by the field name::

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
          (body (code_block (statements (expr_stmt (text "0"))))))))

* ``(loc LINE COLUMN)`` is optional; the file comes from the caller.
* Scalar fields hold exactly one item, a string or a node.  A field named
  after the kind it holds (``return_clause``) may also be written inline,
  ``(return_clause (return_type "Int"))``; ``dumps`` writes the wrapped
  ``(return_clause (return_clause ...))`` form.
* List fields (``statements``, ``members``, ``modifiers`` …) hold zero or
  more items.
* Absent optional fields and empty lists are simply omitted.

Public API
----------
``dumps(tree) -> str``
    Render a tree, indented for reading.

``loads(text, file="<string>") -> Syntax``
    Rebuild a tree; malformed input raises :class:`TreeFormatError`.

``load_file(path) -> Syntax``
    Read and :func:`loads` a ``.sexp`` file.
"""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Union

import sexpdata
from sexpdata import Symbol

from swiftsyntax_shims.errors import SourceSpan, TreeFormatError
from swiftsyntax_shims.syntax import NODE_TYPES, SourceFile, SourceLocation, Syntax

logger = logging.getLogger(__name__)

# Type alias for raw sexpdata output
Sexp = Any  # Union[list, Symbol, str, int]

_LOC_TAG = "loc"
_WIDTH = 72


# ═══════════════════════════════════════════════════════════════════════
#  Helpers
# ═══════════════════════════════════════════════════════════════════════

def _sym_name(s: Sexp) -> str:
    """Extract the string name from a ``sexpdata.Symbol``, or raise."""
    if isinstance(s, Symbol):
        return str(s)
    raise TreeFormatError(f"Expected symbol, got {type(s).__name__}: {s!r}")


def _expect_list(s: Sexp, *, min_len: int = 0) -> list:
    """Assert that *s* is a list with at least *min_len* elements."""
    if not isinstance(s, list):
        raise TreeFormatError(f"Expected list, got {type(s).__name__}: {s!r}")
    if len(s) < min_len:
        raise TreeFormatError(
            f"List too short: expected at least {min_len} elements, "
            f"got {len(s)}: {s!r}"
        )
    return s


def _head(s: list) -> str:
    """Return the head symbol name of a list form ``(tag ...)``."""
    if not s:
        raise TreeFormatError("Unexpected empty list")
    return _sym_name(s[0])


def _is_text(s: Sexp) -> bool:
    # Symbols subclass ``str``; only quoted literals count as text.
    return isinstance(s, str) and not isinstance(s, Symbol)


def _is_list_field(f: dataclasses.Field) -> bool:
    return f.default_factory is list  # type: ignore[comparison-overlap]


def _node_fields(cls: type) -> List[dataclasses.Field]:
    return [f for f in dataclasses.fields(cls) if f.name != _LOC_TAG]


# ═══════════════════════════════════════════════════════════════════════
#  Syntax → S-expression
# ═══════════════════════════════════════════════════════════════════════

def _encode_value(value: Any) -> Sexp:
    if isinstance(value, Syntax):
        return to_sexp(value)
    if isinstance(value, str):
        return value
    raise TreeFormatError(f"Cannot encode field value of type {type(value).__name__}")


def to_sexp(node: Syntax) -> list:
    """Convert *node* into nested ``sexpdata`` lists."""
    form: list = [Symbol(node.kind)]
    loc = getattr(node, "loc", None)
    if loc is not None and loc.line and not isinstance(node, SourceFile):
        form.append([Symbol(_LOC_TAG), loc.line, loc.column])

    for f in _node_fields(type(node)):
        value = getattr(node, f.name)
        if value is None:
            continue
        if _is_list_field(f):
            if not value:
                continue
            form.append([Symbol(f.name)] + [_encode_value(v) for v in value])
        else:
            form.append([Symbol(f.name), _encode_value(value)])
    return form


def _format(form: Sexp, indent: int) -> str:
    flat = sexpdata.dumps(form)
    if not isinstance(form, list) or len(flat) + indent <= _WIDTH:
        return flat
    pad = " " * (indent + 2)
    head = sexpdata.dumps(form[0])
    parts = [_format(item, indent + 2) for item in form[1:]]
    return "(" + head + "".join("\n" + pad + p for p in parts) + ")"


def dumps(tree: Syntax) -> str:
    """Render *tree* as an indented S-expression string."""
    return _format(to_sexp(tree), 0)


# ═══════════════════════════════════════════════════════════════════════
#  S-expression → Syntax
# ═══════════════════════════════════════════════════════════════════════

# Maps a node kind to a decoder callable.
# Populated by the ``@_register`` decorator below; kinds without an
# entry go through ``_decode_generic``.

_NODE_DISPATCH: Dict[str, Callable[[list, str], Syntax]] = {}


def _register(table: dict, tag: str):
    """Decorator: register a decoder function under *tag* in *table*."""
    def deco(fn):
        table[tag] = fn
        return fn
    return deco


def _decode_loc(s: list, file: str) -> SourceLocation:
    _expect_list(s, min_len=3)
    line, column = s[1], s[2]
    if not all(isinstance(v, int) and not isinstance(v, bool) for v in (line, column)):
        raise TreeFormatError(f"(loc LINE COLUMN) expects integers, got: {s!r}")
    return SourceLocation(file=file, line=line, column=column)


def _decode_value(s: Sexp, file: str) -> Any:
    if _is_text(s):
        return s
    if isinstance(s, list):
        return decode_node(s, file)
    raise TreeFormatError(f"Expected string or node form, got {type(s).__name__}: {s!r}")


def _is_inline_node(name: str, item: list) -> bool:
    """True for ``(kind (field ...) ...)`` standing in for ``(kind (kind ...))``."""
    if name not in NODE_TYPES or len(item) < 2:
        return False
    return all(
        isinstance(v, list) and v and isinstance(v[0], Symbol)
        and str(v[0]) not in NODE_TYPES
        for v in item[1:]
    )


def _decode_generic(s: list, file: str) -> Syntax:
    kind = _head(s)
    cls = NODE_TYPES[kind]
    fields = {f.name: f for f in _node_fields(cls)}
    kwargs: Dict[str, Any] = {}
    loc = SourceLocation(file=file)

    for item in s[1:]:
        item = _expect_list(item, min_len=1)
        name = _head(item)
        if name == _LOC_TAG:
            loc = _decode_loc(item, file)
            continue
        f = fields.get(name)
        if f is None:
            raise TreeFormatError(f"Unknown field '{name}' in ({kind} ...)")
        if name in kwargs:
            raise TreeFormatError(f"Duplicate field '{name}' in ({kind} ...)")
        if not _is_list_field(f) and _is_inline_node(name, item):
            kwargs[name] = decode_node(item, file)
            continue
        values = [_decode_value(v, file) for v in item[1:]]
        if _is_list_field(f):
            kwargs[name] = values
        elif len(values) != 1:
            raise TreeFormatError(
                f"Field '{name}' in ({kind} ...) takes one value, got {len(values)}"
            )
        else:
            kwargs[name] = values[0]

    try:
        return cls(loc=loc, **kwargs)
    except TypeError as exc:
        # Missing required fields surface here.
        raise TreeFormatError(f"Incomplete ({kind} ...): {exc}") from exc


@_register(_NODE_DISPATCH, "source_file")
def _decode_source_file(s: list, file: str) -> SourceFile:
    # An explicit (file ...) field wins over the caller's name.
    for item in s[1:]:
        if isinstance(item, list) and len(item) == 2 and item[0] == Symbol("file"):
            if _is_text(item[1]):
                file = item[1]
    node = _decode_generic(s, file)
    node.file = file
    node.loc = SourceLocation(file=node.file, line=1, column=1)
    return node


def decode_node(s: Sexp, file: str = "<string>") -> Syntax:
    """Rebuild one node from already-read ``sexpdata`` lists."""
    s = _expect_list(s, min_len=1)
    kind = _head(s)
    if kind not in NODE_TYPES:
        raise TreeFormatError(f"Unknown node form: ({kind} ...)")
    decoder = _NODE_DISPATCH.get(kind, _decode_generic)
    return decoder(s, file)


def loads(text: str, file: str = "<string>") -> Syntax:
    """Parse an S-expression string into a syntax tree.

    Raises
    ------
    TreeFormatError
        If the text is not a single well-formed S-expression or contains
        unrecognized forms.
    """
    # Keep nil/t as plain symbols; no field uses them.
    try:
        raw = sexpdata.loads(text, nil=None, true=None, false=None)
    except Exception as exc:
        raise TreeFormatError(
            f"S-expression syntax error: {exc}",
            span=SourceSpan(file=file),
            cause=exc,
        ) from exc

    try:
        tree = decode_node(raw, file)
    except TreeFormatError as exc:
        if not exc.span.file:
            exc.span = SourceSpan(file=file)
        raise
    logger.debug("Loaded %s tree from %s", tree.kind, file)
    return tree


def load_file(path: Union[str, Path]) -> Syntax:
    """Read and parse a ``.sexp`` tree file."""
    p = Path(path)
    return loads(p.read_text(encoding="utf-8"), file=str(p))


__all__ = [
    "to_sexp",
    "dumps",
    "decode_node",
    "loads",
    "load_file",
]
