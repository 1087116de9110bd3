"""hamlx/nodes.py – Document tree consumed by the extractor.

The tree is produced by an external HAML parser (or by
:mod:`hamlx.loader` from an S-expression dump) and is read-only to the
extraction core.

Design invariants
-----------------
* Every node is a frozen dataclass; children are tuples.
* Every node records the 1-based line of the original document it came
  from.
* ``kind`` is a class-level :class:`NodeKind` tag.  The set of kinds is
  closed: the walker rejects anything else.
* The core only relies on the :class:`DocumentNode` accessor shape, so
  adapters for different parser versions can hand over their own node
  objects without the core branching on parser version.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import (
    ClassVar,
    Iterator,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

__all__ = [
    "NodeKind",
    "DocumentNode",
    "Node",
    "RootNode",
    "PlainNode",
    "TagNode",
    "ScriptNode",
    "SilentScriptNode",
    "CommentNode",
    "FilterNode",
    "iter_nodes",
]


class NodeKind(Enum):
    """Kinds of node in a HAML document tree.

    The value doubles as the suffix of the visitor hook names
    (``visit_<value>`` / ``after_visit_<value>``).
    """

    ROOT = "root"
    PLAIN = "plain"
    TAG = "tag"
    SCRIPT = "script"
    SILENT_SCRIPT = "silent_script"
    COMMENT = "haml_comment"
    FILTER = "filter"


@runtime_checkable
class DocumentNode(Protocol):
    """Accessor shape every walked node must expose."""

    @property
    def kind(self) -> NodeKind: ...

    @property
    def line(self) -> int: ...

    @property
    def children(self) -> Sequence["DocumentNode"]: ...


@dataclass(frozen=True, slots=True)
class Node:
    """Fields shared by every node kind."""

    kind: ClassVar[NodeKind]

    line: int = 1
    children: Tuple["Node", ...] = ()


@dataclass(frozen=True, slots=True)
class RootNode(Node):
    """Document root; its line is conventionally 1."""

    kind: ClassVar[NodeKind] = NodeKind.ROOT


@dataclass(frozen=True, slots=True)
class PlainNode(Node):
    """Literal template text."""

    kind: ClassVar[NodeKind] = NodeKind.PLAIN

    text: str = ""


@dataclass(frozen=True, slots=True)
class TagNode(Node):
    """An element such as ``%div.klass{ a: b }= code``.

    ``dynamic_attributes_sources`` lists attribute expressions the parser
    kept as code.  ``static_hash_source`` is the raw ``{...}`` source the
    parser recorded even when it folded the pairs into static attributes.
    """

    kind: ClassVar[NodeKind] = NodeKind.TAG

    tag_name: str = ""
    script: str = ""
    dynamic_attributes_sources: Tuple[str, ...] = ()
    static_hash_source: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ScriptNode(Node):
    """Ruby whose value is rendered (``= code``)."""

    kind: ClassVar[NodeKind] = NodeKind.SCRIPT

    text: str = ""


@dataclass(frozen=True, slots=True)
class SilentScriptNode(Node):
    """Ruby evaluated for effect only (``- code``)."""

    kind: ClassVar[NodeKind] = NodeKind.SILENT_SCRIPT

    text: str = ""


@dataclass(frozen=True, slots=True)
class CommentNode(Node):
    """A HAML comment (``-#``); ``text`` may span several lines."""

    kind: ClassVar[NodeKind] = NodeKind.COMMENT

    text: str = ""


@dataclass(frozen=True, slots=True)
class FilterNode(Node):
    """A filter block such as ``:ruby`` or ``:javascript``.

    ``text`` is the raw filter body; its first line sits on
    ``line + 1`` in the original document.
    """

    kind: ClassVar[NodeKind] = NodeKind.FILTER

    filter_type: str = ""
    text: str = ""


def iter_nodes(node: DocumentNode) -> Iterator[DocumentNode]:
    """Yield *node* and all its descendants in document order."""
    yield node
    for child in node.children:
        yield from iter_nodes(child)
