"""
bugpattern/validator.py
═══════════════════════

Consistency rules for a single :class:`BugPatternDescriptor`.

Every rule is evaluated independently and all violations are reported
together, not just the first one.  Rules come in two levels:

  FATAL    — the check must not enter the active registry
  WARNING  — unused configuration; reported, but harmless

Usage
-----
>>> report = check(descriptor)          # never raises
>>> for v in report.warnings:
...     log.warning("%s", v)
>>> validate(descriptor)                # raises ValidationError if fatal
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Callable, Iterator, List, Tuple

from bugpattern.descriptor import BugPatternDescriptor, LinkType, Suppressibility
from bugpattern.errors import RuleId, ValidationError, Violation, ViolationLevel


# Block-level markdown constructs that have no place in a one-line summary.
_BLOCK_MARKUP = (
    re.compile(r"^\s{0,3}#{1,6}(\s|$)"),          # heading
    re.compile(r"```|~~~"),                        # code fence
    re.compile(r"^\s{0,3}>"),                      # block quote
    re.compile(r"^\s{0,3}[-*+]\s"),                # bullet list
    re.compile(r"^\s{0,3}\d+[.)]\s"),              # ordered list
    re.compile(r"^\s{0,3}([-*_])(\s*\1){2,}\s*$"),  # thematic break
)


@dataclass(frozen=True)
class ValidationReport:
    """All violations found for one descriptor."""
    check: str
    violations: Tuple[Violation, ...] = ()

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.fatal]

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if not v.fatal]

    @property
    def ok(self) -> bool:
        return not self.errors

    def raise_for_errors(self) -> None:
        """Raise :class:`ValidationError` carrying every fatal violation."""
        if self.errors:
            raise ValidationError(self.errors, check=self.check)


# ═════════════════════════════════════════════════════════════════════════
#  RULES
# ═════════════════════════════════════════════════════════════════════════

def _check_link(d: BugPatternDescriptor) -> Iterator[Violation]:
    if d.link_type is LinkType.CUSTOM:
        if not d.link.strip():
            yield Violation(
                RuleId.CUSTOM_LINK_REQUIRED, "link",
                "link type CUSTOM requires a non-empty link",
            )
    elif d.link:
        yield Violation(
            RuleId.UNUSED_LINK, "link",
            f"link is ignored when link type is {d.link_type.name}",
            ViolationLevel.WARNING,
        )


def _check_suppression(d: BugPatternDescriptor) -> Iterator[Violation]:
    if d.suppressibility is Suppressibility.CUSTOM_ANNOTATION:
        if not d.custom_suppression_annotations:
            yield Violation(
                RuleId.CUSTOM_ANNOTATION_REQUIRED, "custom_suppression_annotations",
                "suppressibility CUSTOM_ANNOTATION requires at least one annotation type",
            )
    elif d.custom_suppression_annotations:
        yield Violation(
            RuleId.UNUSED_CUSTOM_ANNOTATIONS, "custom_suppression_annotations",
            f"annotations are ignored when suppressibility is {d.suppressibility.name}",
            ViolationLevel.WARNING,
        )


def has_block_markup(text: str) -> bool:
    """True if ``text`` spans lines or uses block-level markdown."""
    if "\n" in text or "\r" in text:
        return True
    return any(p.search(text) for p in _BLOCK_MARKUP)


def _check_summary(d: BugPatternDescriptor) -> Iterator[Violation]:
    summary = d.summary.strip()
    if not summary:
        yield Violation(RuleId.EMPTY_SUMMARY, "summary", "summary must not be empty")
        return
    if summary.endswith("."):
        yield Violation(
            RuleId.SUMMARY_TRAILING_PERIOD, "summary",
            "summary must not end with a period",
        )
    if has_block_markup(d.summary):
        yield Violation(
            RuleId.SUMMARY_BLOCK_MARKUP, "summary",
            "summary must be a single line without block markup",
        )


def _check_name(d: BugPatternDescriptor) -> Iterator[Violation]:
    if not d.name.strip():
        yield Violation(RuleId.EMPTY_NAME, "name", "name must not be empty")
    elif d.name != d.name.strip():
        yield Violation(
            RuleId.NAME_SURROUNDING_WHITESPACE, "name",
            f"name {d.name!r} has leading or trailing whitespace",
        )
    for alt in sorted(a for a in d.alt_names if not a or a != a.strip()):
        yield Violation(
            RuleId.NAME_SURROUNDING_WHITESPACE, "alt_names",
            f"alt name {alt!r} is empty or has leading or trailing whitespace",
        )
    if d.name in d.alt_names:
        yield Violation(
            RuleId.NAME_IN_ALT_NAMES, "alt_names",
            f"alt names must not repeat the name {d.name!r}",
        )


_RULES: Tuple[Callable[[BugPatternDescriptor], Iterator[Violation]], ...] = (
    _check_link,
    _check_suppression,
    _check_summary,
    _check_name,
)


# ═════════════════════════════════════════════════════════════════════════
#  ENTRY POINTS
# ═════════════════════════════════════════════════════════════════════════

def check(descriptor: BugPatternDescriptor, strict: bool = False) -> ValidationReport:
    """
    Run every rule against ``descriptor`` and collect the violations.

    With ``strict`` set, warnings are promoted to fatal violations.
    """
    found: List[Violation] = []
    for rule in _RULES:
        for violation in rule(descriptor):
            if strict and not violation.fatal:
                violation = Violation(
                    violation.rule, violation.field, violation.message, ViolationLevel.FATAL
                )
            found.append(violation)
    return ValidationReport(check=descriptor.name, violations=tuple(found))


def validate(descriptor: BugPatternDescriptor, strict: bool = False) -> ValidationReport:
    """Like :func:`check`, but raise :class:`ValidationError` on fatal violations."""
    report = check(descriptor, strict=strict)
    report.raise_for_errors()
    return report


__all__ = ["ValidationReport", "check", "validate", "has_block_markup"]
