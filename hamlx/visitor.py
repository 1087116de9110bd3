#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
hamlx/visitor.py
================

Depth-first traversal of HAML document trees.

``TreeVisitor.visit(node)`` dispatches on ``node.kind`` to a pre-hook
named ``visit_<kind>``.  The hook receives a ``descend`` continuation:

    def visit_script(self, node, descend):
        ...            # before children
        descend()      # children, in document order
        ...            # after children

If the hook never calls ``descend`` the visitor walks the children
itself once the hook returns; ``descend(False)`` marks the children as
handled without walking them.  An ``after_visit_<kind>`` post-hook, when
defined, runs after the children.

Traversal is sequential and stateful by nature (emission order and
indentation depend on it), so there is no parallel variant.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Sequence

from hamlx.errors import HamlxErrorCodes, SourceSpan, StructuralError
from hamlx.nodes import DocumentNode, NodeKind

__all__ = ["Descend", "TreeVisitor"]

Descend = Callable[..., None]


class TreeVisitor:
    """Generic, stateless dispatcher over :class:`NodeKind`.

    Subclasses add ``visit_<kind>`` / ``after_visit_<kind>`` methods for
    the kinds they care about.  With ``strict = True`` every kind must
    have a pre-hook; a missing one raises :class:`StructuralError`.
    """

    strict: bool = False

    def __init__(self, filename: str = "") -> None:
        self.filename = filename

    def visit(self, node: DocumentNode) -> None:
        """Visit *node* and, unless a hook says otherwise, its subtree."""
        kind = self._kind_of(node)
        children = self._children_of(node)
        descended = False

        def descend(into_children: bool = True) -> None:
            nonlocal descended
            if descended:
                return
            descended = True
            if into_children:
                self.visit_children(children)

        hook: Optional[Callable[..., Any]] = getattr(
            self, f"visit_{kind.value}", None
        )
        if hook is None:
            if self.strict:
                raise StructuralError(
                    f"no emission rule for {kind.value!r} nodes",
                    code=HamlxErrorCodes.MISSING_EMISSION_RULE,
                    span=self._span(node),
                )
        else:
            hook(node, descend)

        if not descended:
            descend()

        after: Optional[Callable[..., Any]] = getattr(
            self, f"after_visit_{kind.value}", None
        )
        if after is not None:
            after(node)

    def visit_children(self, children: Sequence[DocumentNode]) -> None:
        for child in children:
            self.visit(child)

    # ------------------------------------------------------------------

    def _kind_of(self, node: Any) -> NodeKind:
        kind = getattr(node, "kind", None)
        if not isinstance(kind, NodeKind):
            raise StructuralError(
                f"unknown node kind {kind!r} ({type(node).__name__})",
                code=HamlxErrorCodes.UNKNOWN_NODE_KIND,
                span=self._span(node),
            )
        return kind

    def _children_of(self, node: Any) -> Sequence[DocumentNode]:
        children = getattr(node, "children", None)
        if not isinstance(children, (list, tuple)):
            raise StructuralError(
                f"children of {type(node).__name__} are not a node sequence "
                f"(got {type(children).__name__})",
                code=HamlxErrorCodes.INVALID_CHILDREN,
                span=self._span(node),
            )
        return children

    def _span(self, node: Any) -> SourceSpan:
        return SourceSpan.from_node(node, self.filename)
