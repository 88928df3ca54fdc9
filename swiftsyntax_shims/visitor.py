#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
swiftsyntax_shims/visitor.py
============================

Visitor infrastructure for Swift syntax tree traversal.

Provides:
- ``VisitorContinueKind`` — whether the walker descends into children
- ``SyntaxVisitor`` — depth-first walker that calls ``visit_<kind>``
  before a node's children and ``visit_post_<kind>`` after them

Subclasses only define the methods for the node kinds they care about;
a missing ``visit_<kind>`` means "visit children", a missing
``visit_post_<kind>`` means "do nothing".
"""

from __future__ import annotations

import enum
from typing import Callable, Dict, Optional, Tuple

from swiftsyntax_shims.syntax import Syntax

__all__ = [
    "VisitorContinueKind",
    "SyntaxVisitor",
]


class VisitorContinueKind(enum.Enum):
    VISIT_CHILDREN = "visit_children"
    SKIP_CHILDREN = "skip_children"


class SyntaxVisitor:
    """Depth-first, source-order walker over ``Syntax`` trees."""

    def __init__(self) -> None:
        # kind → (pre-hook, post-hook), resolved lazily per visitor class
        self._hooks: Dict[str, Tuple[Optional[Callable], Optional[Callable]]] = {}

    def _hooks_for(self, kind: str) -> Tuple[Optional[Callable], Optional[Callable]]:
        hooks = self._hooks.get(kind)
        if hooks is None:
            hooks = (
                getattr(self, f"visit_{kind}", None),
                getattr(self, f"visit_post_{kind}", None),
            )
            self._hooks[kind] = hooks
        return hooks

    def walk(self, node: Syntax) -> None:
        """Visit *node* and, unless told otherwise, all its descendants."""
        pre, post = self._hooks_for(node.kind)

        kind = VisitorContinueKind.VISIT_CHILDREN
        if pre is not None:
            kind = pre(node) or VisitorContinueKind.VISIT_CHILDREN

        if kind is VisitorContinueKind.VISIT_CHILDREN:
            for child in node.children():
                self.walk(child)

        if post is not None:
            post(node)
