"""hamlx/static_hash.py – Recover attribute hashes folded into static form.

The HAML parser turns hash attributes whose keys and values are all
string/symbol literals (``%a{ "href" => "/x" }``) into static
attributes and leaves them out of ``dynamic_attributes_sources``.  The
raw ``{...}`` source is still recorded, so it is handed back here for
the analyser to see.
"""

from __future__ import annotations

import re
from typing import Optional

from hamlx.nodes import TagNode

__all__ = ["collapse_newlines", "reconstruct_static_hash"]

_NEWLINE_RUN_RE = re.compile(r"\s*\n\s*")


def collapse_newlines(code: str) -> str:
    """Join a multi-line expression onto one line, single-space separated."""
    return _NEWLINE_RUN_RE.sub(" ", code)


def reconstruct_static_hash(node: TagNode) -> Optional[str]:
    """Return the static hash source of *node* when nothing else covers it.

    Only fires when the tag has a recorded hash source and no dynamic
    attribute sources; otherwise the same code would be emitted twice.
    """
    if not node.static_hash_source or node.dynamic_attributes_sources:
        return None
    return collapse_newlines(node.static_hash_source)
