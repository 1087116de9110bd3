# hamlx/errors.py
"""
Error Types for the HAML → Ruby extraction pipeline

Error Hierarchy:
────────────────
┌─────────────────────────────────────────────────────────────────────┐
│  HamlxError (base)                                                  │
│  ├── StructuralError   - tree cannot be walked / has no rule        │
│  ├── TreeLoadError     - malformed S-expression document tree       │
│  └── ConfigError       - invalid ExtractorConfig                    │
└─────────────────────────────────────────────────────────────────────┘

Error Codes:
────────────
Each error has a code of the form HAMLX-NNNN:
  - 1000-1999: Structural errors (extraction aborts)
  - 2000-2999: Classification findings (soft, never raised)
  - 3000-3999: Tree loading errors
  - 4000-4999: Configuration errors

Errors always point at the ORIGINAL document position (file + line),
never at a synthetic script line or internal extractor state.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto, unique
from typing import Any, Dict, Optional


@unique
class ErrorSeverity(Enum):
    """Severity levels for hamlx errors."""

    FATAL = "fatal"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    def is_error(self) -> bool:
        return self in (ErrorSeverity.FATAL, ErrorSeverity.ERROR)


@unique
class ErrorCategory(Enum):
    UNKNOWN_NODE_KIND = auto()
    MISSING_EMISSION_RULE = auto()
    INVALID_CHILDREN = auto()
    REENTRANT_EXTRACTION = auto()
    CLASSIFICATION_AMBIGUITY = auto()
    MALFORMED_TREE = auto()
    INVALID_CONFIG = auto()


class ErrorCode:
    """Structured error code ``HAMLX-NNNN``."""

    __slots__ = ("prefix", "number", "category", "default_severity")

    def __init__(
        self,
        prefix: str,
        number: int,
        category: ErrorCategory,
        default_severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        self.prefix = prefix
        self.number = number
        self.category = category
        self.default_severity = default_severity

    @property
    def code(self) -> str:
        return f"{self.prefix}-{self.number:04d}"

    def __str__(self) -> str:
        return self.code

    def __repr__(self) -> str:
        return f"ErrorCode({self.code!r}, {self.category.name})"

    def __hash__(self) -> int:
        return hash((self.prefix, self.number))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ErrorCode):
            return self.prefix == other.prefix and self.number == other.number
        if isinstance(other, str):
            return self.code == other
        return False


class HamlxErrorCodes:
    """Predefined error codes."""

    # ── STRUCTURAL (1000-1999) ──────────────────────────────────────
    UNKNOWN_NODE_KIND = ErrorCode(
        "HAMLX", 1000, ErrorCategory.UNKNOWN_NODE_KIND, ErrorSeverity.FATAL
    )
    MISSING_EMISSION_RULE = ErrorCode(
        "HAMLX", 1001, ErrorCategory.MISSING_EMISSION_RULE, ErrorSeverity.FATAL
    )
    INVALID_CHILDREN = ErrorCode(
        "HAMLX", 1002, ErrorCategory.INVALID_CHILDREN, ErrorSeverity.FATAL
    )
    REENTRANT_EXTRACTION = ErrorCode(
        "HAMLX", 1003, ErrorCategory.REENTRANT_EXTRACTION, ErrorSeverity.FATAL
    )

    # ── CLASSIFICATION (2000-2999) ──────────────────────────────────
    CLASSIFICATION_AMBIGUITY = ErrorCode(
        "HAMLX", 2000, ErrorCategory.CLASSIFICATION_AMBIGUITY,
        ErrorSeverity.WARNING,
    )

    # ── TREE LOADING (3000-3999) ────────────────────────────────────
    MALFORMED_SEXP = ErrorCode("HAMLX", 3000, ErrorCategory.MALFORMED_TREE)
    UNKNOWN_FORM = ErrorCode("HAMLX", 3001, ErrorCategory.MALFORMED_TREE)
    INVALID_OPTION = ErrorCode("HAMLX", 3002, ErrorCategory.MALFORMED_TREE)

    # ── CONFIGURATION (4000-4999) ───────────────────────────────────
    INVALID_CONFIG = ErrorCode("HAMLX", 4000, ErrorCategory.INVALID_CONFIG)


@dataclass(frozen=True)
class SourceSpan:
    """A position in the original template document."""

    file: str = ""
    line: int = 0

    @classmethod
    def from_node(cls, node: Any, file: str = "") -> "SourceSpan":
        """Create a span from anything carrying a ``line`` attribute."""
        line = getattr(node, "line", 0)
        if not isinstance(line, int) or isinstance(line, bool):
            line = 0
        return cls(file=file, line=line)

    def __str__(self) -> str:
        if not self.file and self.line == 0:
            return "<unknown location>"
        parts = []
        if self.file:
            parts.append(self.file)
        if self.line > 0:
            parts.append(str(self.line))
        return ":".join(parts)


# ═══════════════════════════════════════════════════════════════════════
# EXCEPTION CLASSES
# ═══════════════════════════════════════════════════════════════════════

class HamlxError(Exception):
    """
    Base exception for all hamlx errors.

    Carries a structured code, the original-document span and an
    optional hint, and renders itself GCC style.
    """

    default_code: ErrorCode = HamlxErrorCodes.MISSING_EMISSION_RULE

    def __init__(
        self,
        message: str,
        code: Optional[ErrorCode] = None,
        span: Optional[SourceSpan] = None,
        severity: Optional[ErrorSeverity] = None,
        hint: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.span = span or SourceSpan()
        self._severity = severity
        self.hint = hint

    @property
    def severity(self) -> ErrorSeverity:
        return self._severity or self.code.default_severity

    def with_hint(self, hint: str) -> "HamlxError":
        self.hint = hint
        return self

    def to_gcc_format(self) -> str:
        lines = [
            f"{self.span}: {self.severity.value}: {self.message} [{self.code}]"
        ]
        if self.hint:
            lines.append(f"hint: {self.hint}")
        return "\n".join(lines)

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code.code,
            "message": self.message,
            "severity": self.severity.value,
            "location": {"file": self.span.file, "line": self.span.line},
            "category": self.code.category.name,
            "hint": self.hint,
        }

    def __str__(self) -> str:
        return self.to_gcc_format()


class StructuralError(HamlxError):
    """The document tree cannot be extracted as reported.

    Raised for node kinds without an emission rule, child collections
    that are not sequences of nodes, and re-entered extractor state.
    Extraction is all-or-nothing: no partial result survives this error.
    """

    default_code = HamlxErrorCodes.MISSING_EMISSION_RULE


class TreeLoadError(HamlxError):
    """An S-expression document tree could not be mapped to nodes."""

    default_code = HamlxErrorCodes.MALFORMED_SEXP


class ConfigError(HamlxError):
    """An ``ExtractorConfig`` failed validation."""

    default_code = HamlxErrorCodes.INVALID_CONFIG


__all__ = [
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorCode",
    "HamlxErrorCodes",
    "SourceSpan",
    "HamlxError",
    "StructuralError",
    "TreeLoadError",
    "ConfigError",
]
