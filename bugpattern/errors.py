# bugpattern/errors.py
"""
Bug-pattern Error Types
=======================

Error hierarchy for the descriptor registry.

Architecture Overview:
─────────────────────
┌──────────────────────────────────────────────────────────────────────┐
│  BugPatternError (base)                                              │
│  ├── MalformedDescriptor  - schema-level invariant broken at build   │
│  ├── ValidationError      - one or more descriptor rules violated    │
│  ├── MissingLink          - autogenerated link cannot be derived     │
│  ├── UndisableableCheck   - attempt to disable a locked check        │
│  └── DeclarationError     - declaration file cannot be read          │
└──────────────────────────────────────────────────────────────────────┘

Validation never stops at the first broken rule.  Every rule produces a
:class:`Violation`; fatal ones are bundled into a single
:class:`ValidationError` so the operator sees the whole picture for a
check at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique
from typing import Iterable, List, Optional, Tuple


# ═══════════════════════════════════════════════════════════════════════════
#  VIOLATIONS
# ═══════════════════════════════════════════════════════════════════════════

@unique
class ViolationLevel(Enum):
    """How seriously a broken rule is taken."""

    FATAL = "fatal"
    WARNING = "warning"

    def is_fatal(self) -> bool:
        return self is ViolationLevel.FATAL


@unique
class RuleId(Enum):
    """Identifiers for every rule the validator and registry enforce."""

    CUSTOM_LINK_REQUIRED = "BP-0001"
    UNUSED_LINK = "BP-0002"
    CUSTOM_ANNOTATION_REQUIRED = "BP-0003"
    UNUSED_CUSTOM_ANNOTATIONS = "BP-0004"
    EMPTY_SUMMARY = "BP-0005"
    SUMMARY_TRAILING_PERIOD = "BP-0006"
    SUMMARY_BLOCK_MARKUP = "BP-0007"
    EMPTY_NAME = "BP-0008"
    NAME_IN_ALT_NAMES = "BP-0009"
    NAME_COLLISION = "BP-0010"
    MALFORMED = "BP-0011"
    NAME_SURROUNDING_WHITESPACE = "BP-0012"

    @property
    def code(self) -> str:
        return self.value


@dataclass(frozen=True)
class Violation:
    """A single broken rule, tied to the descriptor field it concerns."""

    rule: RuleId
    field: str
    message: str
    level: ViolationLevel = ViolationLevel.FATAL

    @property
    def fatal(self) -> bool:
        return self.level.is_fatal()

    def __str__(self) -> str:
        return f"[{self.rule.code}] {self.field}: {self.message} ({self.level.value})"


# ═══════════════════════════════════════════════════════════════════════════
#  EXCEPTIONS
# ═══════════════════════════════════════════════════════════════════════════

class BugPatternError(Exception):
    """Base class for every error raised by this package."""

    def __init__(self, message: str, check: Optional[str] = None) -> None:
        self.check = check
        self.message = message
        super().__init__(self._format())

    def _format(self) -> str:
        if self.check:
            return f"{self.check}: {self.message}"
        return self.message


class MalformedDescriptor(BugPatternError):
    """A descriptor could not be constructed from its raw fields."""

    def __init__(self, field: str, message: str, check: Optional[str] = None) -> None:
        self.field = field
        super().__init__(f"{field}: {message}", check=check)

    @property
    def violation(self) -> Violation:
        return Violation(RuleId.MALFORMED, self.field, self.message)


class ValidationError(BugPatternError):
    """One or more descriptor rules were violated.

    ``violations`` holds every fatal violation found, in rule order.
    """

    def __init__(self, violations: Iterable[Violation], check: Optional[str] = None) -> None:
        self.violations: Tuple[Violation, ...] = tuple(violations)
        lines = "; ".join(str(v) for v in self.violations) or "validation failed"
        super().__init__(lines, check=check)

    @property
    def rules(self) -> List[RuleId]:
        return [v.rule for v in self.violations]


class MissingLink(BugPatternError):
    """An AUTOGENERATED link cannot be derived from the check name."""


class UndisableableCheck(BugPatternError):
    """A check whose suppressibility forbids disabling was asked to be disabled."""


class DeclarationError(BugPatternError):
    """A declaration source could not be read or parsed."""

    def __init__(self, message: str, source: Optional[str] = None) -> None:
        self.source = source
        super().__init__(message, check=source)


__all__ = [
    "ViolationLevel",
    "RuleId",
    "Violation",
    "BugPatternError",
    "MalformedDescriptor",
    "ValidationError",
    "MissingLink",
    "UndisableableCheck",
    "DeclarationError",
]
