"""
bugpattern/tags.py
══════════════════

Derived tag and severity views over a collection of descriptors.

Tools that aggregate checks by tag ("collect every likely error") must
act as if every ERROR-severity check also carried the ``LikelyError``
tag.  :func:`effective_tags` is that view; nothing here mutates a
descriptor.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, List

from bugpattern.descriptor import BugPatternDescriptor, SeverityLevel, StandardTags


def effective_tags(descriptor: BugPatternDescriptor) -> FrozenSet[str]:
    """Declared tags, plus LikelyError for ERROR-severity checks."""
    if descriptor.severity is SeverityLevel.ERROR:
        return descriptor.tags | {StandardTags.LIKELY_ERROR}
    return descriptor.tags


def checks_with_tag(
    descriptors: Iterable[BugPatternDescriptor], tag: str
) -> List[BugPatternDescriptor]:
    """Descriptors whose effective tags include ``tag``, in input order."""
    return [d for d in descriptors if tag in effective_tags(d)]


def likely_errors(descriptors: Iterable[BugPatternDescriptor]) -> List[BugPatternDescriptor]:
    return checks_with_tag(descriptors, StandardTags.LIKELY_ERROR)


def group_by_tag(
    descriptors: Iterable[BugPatternDescriptor],
) -> Dict[str, List[BugPatternDescriptor]]:
    """Map each effective tag to the descriptors carrying it.

    Keys are sorted; a descriptor appears once under each of its tags.
    """
    groups: Dict[str, List[BugPatternDescriptor]] = defaultdict(list)
    for d in descriptors:
        for tag in sorted(effective_tags(d)):
            groups[tag].append(d)
    return {tag: groups[tag] for tag in sorted(groups)}


def group_by_severity(
    descriptors: Iterable[BugPatternDescriptor],
) -> Dict[SeverityLevel, List[BugPatternDescriptor]]:
    """Map every severity level (even unused ones) to its descriptors."""
    groups: Dict[SeverityLevel, List[BugPatternDescriptor]] = {s: [] for s in SeverityLevel}
    for d in descriptors:
        groups[d.severity].append(d)
    return groups


__all__ = [
    "effective_tags",
    "checks_with_tag",
    "likely_errors",
    "group_by_tag",
    "group_by_severity",
]
