"""hamlx/source_map.py – Synthetic-line → original-line bookkeeping.

:class:`SourceMapTable` is the append-only table the extractor writes
while it emits code; :class:`ExtractionResult` is the immutable value
handed back to callers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterator, List, Mapping, Tuple

__all__ = ["SourceMapTable", "ExtractionResult"]


class SourceMapTable:
    """Ordered mapping from synthetic line (1-based) to original line.

    Keys are always exactly ``1..len(table)``: the only way to add an
    entry is :meth:`append`, which assigns the next synthetic line.
    """

    __slots__ = ("_original_lines",)

    def __init__(self) -> None:
        self._original_lines: List[int] = []

    def append(self, original_line: int, count: int = 1) -> int:
        """Map the next *count* synthetic lines to *original_line*.

        Returns the last synthetic line number assigned.
        """
        if count < 1:
            raise ValueError(f"count must be positive, got {count}")
        self._original_lines.extend([original_line] * count)
        return len(self._original_lines)

    def __len__(self) -> int:
        return len(self._original_lines)

    def __getitem__(self, synthetic_line: int) -> int:
        if synthetic_line < 1 or synthetic_line > len(self._original_lines):
            raise KeyError(synthetic_line)
        return self._original_lines[synthetic_line - 1]

    def __iter__(self) -> Iterator[Tuple[int, int]]:
        return iter(enumerate(self._original_lines, start=1))

    def to_dict(self) -> Dict[int, int]:
        return dict(self)


@dataclass(frozen=True)
class ExtractionResult:
    """Generated Ruby source plus its line map.

    ``line_map`` maps every line of ``script`` (1-based) to the line of
    the template that produced it.
    """

    script: str
    line_map: Mapping[int, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "line_map", MappingProxyType(dict(self.line_map))
        )

    @property
    def lines(self) -> List[str]:
        if not self.line_map:
            return []
        return self.script.split("\n")

    def original_line(self, synthetic_line: int) -> int:
        """Original document line for *synthetic_line*; ``KeyError`` if unmapped."""
        return self.line_map[synthetic_line]

    def to_json(self) -> Dict[str, object]:
        return {
            "script": self.script,
            "line_map": {str(k): v for k, v in self.line_map.items()},
        }
