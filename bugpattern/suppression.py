"""
bugpattern/suppression.py
═════════════════════════

Decides whether one diagnostic instance is suppressed.

The scope walker (an external collaborator) hands us a
:class:`SuppressionContext` per diagnostic site: the suppression values
and custom annotation types visible there, inherited ones included.
:func:`is_suppressed` then applies the descriptor's suppressibility:

  UNSUPPRESSIBLE     — never suppressed, whatever the context holds
  SUPPRESS_WARNINGS  — suppressed iff a suppression value equals the
                       name or an alt name (exact, case-sensitive)
  CUSTOM_ANNOTATION  — suppressed iff one of the descriptor's custom
                       annotation types is present

Severity plays no part here.  Callers that want ERROR diagnostics to be
immune to ordinary suppression wrap the resolver in a
:class:`SuppressionPolicy`.

Everything in this module is pure and safe to call from several
workers at once.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable

from bugpattern.descriptor import BugPatternDescriptor, SeverityLevel, Suppressibility


@dataclass(frozen=True)
class SuppressionContext:
    """
    Suppression information visible at one diagnostic site.

    Attributes
    ----------
    suppress_warnings : values of every ``SuppressWarnings`` in scope
    annotations       : identities (qualified type names) of every
                        annotation on the site or an enclosing scope
    """
    suppress_warnings: FrozenSet[str] = frozenset()
    annotations: FrozenSet[str] = frozenset()

    def __post_init__(self) -> None:
        object.__setattr__(self, "suppress_warnings", frozenset(self.suppress_warnings))
        object.__setattr__(self, "annotations", frozenset(self.annotations))

    @classmethod
    def of(
        cls,
        suppress_warnings: Iterable[str] = (),
        annotations: Iterable[str] = (),
    ) -> "SuppressionContext":
        return cls(frozenset(suppress_warnings), frozenset(annotations))

    def nested(
        self,
        suppress_warnings: Iterable[str] = (),
        annotations: Iterable[str] = (),
    ) -> "SuppressionContext":
        """Context for an inner scope: everything here plus the inner scope's own."""
        return SuppressionContext(
            self.suppress_warnings | frozenset(suppress_warnings),
            self.annotations | frozenset(annotations),
        )

    @classmethod
    def enclosing(cls, *scopes: "SuppressionContext") -> "SuppressionContext":
        """Merge the contexts of a chain of enclosing scopes."""
        values: FrozenSet[str] = frozenset()
        annotations: FrozenSet[str] = frozenset()
        for scope in scopes:
            values |= scope.suppress_warnings
            annotations |= scope.annotations
        return cls(values, annotations)

    @property
    def empty(self) -> bool:
        return not self.suppress_warnings and not self.annotations


EMPTY_CONTEXT = SuppressionContext()


def is_suppressed(descriptor: BugPatternDescriptor, context: SuppressionContext) -> bool:
    """Return True if ``context`` suppresses diagnostics of ``descriptor``."""
    policy = descriptor.suppressibility
    if policy is Suppressibility.UNSUPPRESSIBLE:
        return False
    if policy is Suppressibility.SUPPRESS_WARNINGS:
        return not descriptor.all_names.isdisjoint(context.suppress_warnings)
    if policy is Suppressibility.CUSTOM_ANNOTATION:
        return not descriptor.custom_suppression_annotations.isdisjoint(context.annotations)
    raise AssertionError(f"unhandled suppressibility {policy!r}")


@dataclass(frozen=True)
class SuppressionPolicy:
    """
    Caller-level suppression policy built on :func:`is_suppressed`.

    ``exempt_errors`` makes ERROR-severity diagnostics ignore
    SUPPRESS_WARNINGS suppression.  Custom annotations still apply, since
    a check that opts into them has chosen its own suppression story.
    """
    exempt_errors: bool = False

    def is_suppressed(
        self, descriptor: BugPatternDescriptor, context: SuppressionContext
    ) -> bool:
        if (
            self.exempt_errors
            and descriptor.severity is SeverityLevel.ERROR
            and descriptor.suppressibility is Suppressibility.SUPPRESS_WARNINGS
        ):
            return False
        return is_suppressed(descriptor, context)


__all__ = [
    "SuppressionContext",
    "EMPTY_CONTEXT",
    "is_suppressed",
    "SuppressionPolicy",
]
