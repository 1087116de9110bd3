"""hamlx/keywords.py – Block keyword classification for Ruby statements.

Decides, from the text of a single statement, whether it opens a block
(and therefore needs a synthetic ``end``), continues one (``else``,
``when``, ``rescue``…) or neither.  Pure functions over fixed tables; no
state.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import FrozenSet, Optional

__all__ = [
    "BlockKind",
    "START_BLOCK_KEYWORDS",
    "MID_BLOCK_KEYWORDS",
    "LOOP_KEYWORDS",
    "block_keyword",
    "classify",
    "is_start_block_keyword",
    "is_mid_block_keyword",
    "is_anonymous_block",
    "opens_block",
]


class BlockKind(Enum):
    OPENER = "opener"
    CONTINUATION = "continuation"
    NEITHER = "neither"


START_BLOCK_KEYWORDS: FrozenSet[str] = frozenset(
    {"if", "unless", "case", "begin", "for", "until", "while"}
)
MID_BLOCK_KEYWORDS: FrozenSet[str] = frozenset(
    {"else", "elsif", "when", "rescue", "ensure"}
)
LOOP_KEYWORDS: FrozenSet[str] = frozenset({"for", "until", "while"})

# Same shape as the HAML parser's own block keyword pattern: group 1 is a
# mid-block keyword, group 2 a block starter, optionally on the right of
# an assignment (``x = if cond``).  ``end`` and ``in`` are captured but
# belong to neither table.
_MID_ALTERNATION = "else|elsif|rescue|ensure|end|when|in"
_START_ALTERNATION = "if|begin|case|unless"
_BLOCK_KEYWORD_RE = re.compile(
    rf"^-?\s*(?:({_MID_ALTERNATION})"
    rf"|(?:\w+(?:,\s*\w+)*\s*=\s*)?({_START_ALTERNATION}))\b",
    re.MULTILINE,
)

# The pattern above misses loops, so the first token is checked directly.
_FIRST_TOKEN_RE = re.compile(r"\A\s*(\S+)\s+")

_ANONYMOUS_BLOCK_RE = re.compile(r"\bdo\s*(\|\s*[^|]*\s*\|)?(\s*#.*)?\Z")


def block_keyword(text: str) -> Optional[str]:
    """Return the leading block keyword of *text*, or ``None``."""
    first = _FIRST_TOKEN_RE.match(text)
    if first and first.group(1) in LOOP_KEYWORDS:
        return first.group(1)

    match = _BLOCK_KEYWORD_RE.search(text)
    if match is None:
        return None
    return match.group(1) or match.group(2)


def is_start_block_keyword(text: str) -> bool:
    return block_keyword(text) in START_BLOCK_KEYWORDS


def is_mid_block_keyword(text: str) -> bool:
    return block_keyword(text) in MID_BLOCK_KEYWORDS


def classify(text: str) -> BlockKind:
    """Classify the leading keyword of *text*.

    Text without a recognisable keyword is ``NEITHER``; that is the
    common case for plain statements and never an error.
    """
    keyword = block_keyword(text)
    if keyword in START_BLOCK_KEYWORDS:
        return BlockKind.OPENER
    if keyword in MID_BLOCK_KEYWORDS:
        return BlockKind.CONTINUATION
    return BlockKind.NEITHER


def is_anonymous_block(text: str) -> bool:
    """True when *text* ends in ``do``, ``do |args|`` or ``do # comment``."""
    return _ANONYMOUS_BLOCK_RE.search(text) is not None


def opens_block(text: str) -> bool:
    """Whether a script statement needs an indented body and an ``end``."""
    return is_anonymous_block(text) or classify(text) is BlockKind.OPENER
