"""hamlx/interpolation.py – Find ``#{...}`` interpolations in template text."""

from __future__ import annotations

from typing import Iterator, Tuple

__all__ = ["extract_interpolated_values"]

_OPENER = "#{"


def _escaped(text: str, index: int) -> bool:
    """True when the character at *index* follows an odd run of backslashes."""
    count = 0
    index -= 1
    while index >= 0 and text[index] == "\\":
        count += 1
        index -= 1
    return count % 2 == 1


def extract_interpolated_values(text: str) -> Iterator[Tuple[str, int]]:
    """Yield ``(code, line)`` for each interpolation in *text*.

    ``line`` is the 1-based line of *text* on which the ``#{`` starts.
    Braces inside the code are balanced by counting.  An escaped opener
    (``\\#{``) is skipped; an opener that is never closed ends the scan.
    """
    pos = 0
    while True:
        start = text.find(_OPENER, pos)
        if start < 0:
            return
        # Keep scanning past an escaped opener; later openers still count.
        if _escaped(text, start):
            pos = start + len(_OPENER)
            continue

        depth = 1
        cursor = start + len(_OPENER)
        while cursor < len(text) and depth:
            char = text[cursor]
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
            cursor += 1
        if depth:
            return

        code = text[start + len(_OPENER):cursor - 1]
        yield code, text.count("\n", 0, start) + 1
        pos = cursor
