"""
bugpattern/descriptor.py
════════════════════════

Immutable description of one bug pattern.

A :class:`BugPatternDescriptor` captures everything a check declares
about itself: identity, severity, tags, suppression policy, link policy
and documentation flags.  It is built once when the check is registered
and never mutated afterwards.

Construction is all-or-nothing.  ``__post_init__`` normalises raw input
(enum names to members, tag lists to frozensets) and raises
:class:`~bugpattern.errors.MalformedDescriptor` before the instance can
escape, so a half-built descriptor is never observable.

Construction only enforces the *shape* of each field.  Cross-field rules
(a CUSTOM link needs a URL, a trailing period in the summary, ...) are
the validator's business, see :mod:`bugpattern.validator`.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum, unique
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Type, TypeVar

from bugpattern.errors import MalformedDescriptor


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — ENUMERATIONS
# ═════════════════════════════════════════════════════════════════════════

@unique
class LinkType(Enum):
    """The type of link to put in the compiler diagnostic."""
    AUTOGENERATED = "autogenerated"   # hosted documentation page
    CUSTOM = "custom"                 # descriptor.link verbatim
    NONE = "none"                     # no link at all


@unique
class ProvidesFix(Enum):
    """Whether and what type of fix a check provides."""
    NO_FIX = "no_fix"
    REQUIRES_HUMAN_ATTENTION = "requires_human_attention"


@unique
class SeverityLevel(Enum):
    ERROR = "error"
    WARNING = "warning"
    SUGGESTION = "suggestion"


@unique
class Category(Enum):
    """
    Deprecated classification of the problem domain.

    Kept so old declarations still load and round-trip.  Nothing in this
    package looks at it; use tags instead.
    """
    JDK = "jdk"
    GUAVA = "guava"
    GUICE = "guice"
    DAGGER = "dagger"
    JUNIT = "junit"
    ONE_OFF = "one_off"
    INJECT = "inject"
    MOCKITO = "mockito"
    JMOCK = "jmock"
    ANDROID = "android"
    PROTOBUF = "protobuf"
    TRUTH = "truth"


@unique
class Suppressibility(Enum):
    """
    Whether a check can be suppressed, and by what means.

    SUPPRESS_WARNINGS — standard ``SuppressWarnings("Name")`` mechanism;
                        should be used unless there is a good reason
                        otherwise (e.g. security).
    CUSTOM_ANNOTATION — a custom annotation on an enclosing scope.
    UNSUPPRESSIBLE    — cannot be suppressed.

    Only SUPPRESS_WARNINGS checks are *disableable*, i.e. may be turned
    off wholesale by the operator.
    """
    SUPPRESS_WARNINGS = "suppress_warnings"
    CUSTOM_ANNOTATION = "custom_annotation"
    UNSUPPRESSIBLE = "unsuppressible"

    @property
    def disableable(self) -> bool:
        return self is Suppressibility.SUPPRESS_WARNINGS


class StandardTags:
    """
    Standardised tag vocabulary shared across tools.

    LIKELY_ERROR   — very likely a real error in the vast majority of
                     cases.  Every ERROR-severity check is treated as if
                     it carried this tag (see :mod:`bugpattern.tags`).
    STYLE          — valid code that is discouraged for consistency or
                     readability; fixes must not change behaviour.
    PERFORMANCE    — an easily identified replacement is always faster.
    FRAGILE_CODE   — works within a limited domain but breaks outside it.
    CONCURRENCY    — may misbehave when accessed from several threads.
    SIMPLIFICATION — an easier-to-read or faster alternative exists.
    """
    LIKELY_ERROR = "LikelyError"
    STYLE = "Style"
    PERFORMANCE = "Performance"
    FRAGILE_CODE = "FragileCode"
    CONCURRENCY = "Concurrency"
    SIMPLIFICATION = "Simplification"

    ALL: FrozenSet[str] = frozenset({
        LIKELY_ERROR, STYLE, PERFORMANCE, FRAGILE_CODE, CONCURRENCY, SIMPLIFICATION,
    })

    def __init__(self) -> None:
        raise TypeError("StandardTags is a namespace")


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — FIELD COERCION
# ═════════════════════════════════════════════════════════════════════════

E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: Type[E], value: Any, field_name: str, check: str) -> E:
    """Accept an enum member, or a member name / value (case-insensitive)."""
    if isinstance(value, enum_cls):
        return value
    if isinstance(value, str):
        key = value.strip()
        for member in enum_cls:
            if key.upper() == member.name or key.lower() == member.value:
                return member
        choices = ", ".join(m.name for m in enum_cls)
        raise MalformedDescriptor(
            field_name, f"unknown value {value!r} (expected one of {choices})", check=check
        )
    raise MalformedDescriptor(
        field_name, f"expected {enum_cls.__name__}, got {type(value).__name__}", check=check
    )


def _coerce_strings(value: Any, field_name: str, check: str) -> FrozenSet[str]:
    """Normalise a collection of strings into a frozenset.

    A bare string is rejected rather than being split into characters.
    """
    if value is None:
        return frozenset()
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise MalformedDescriptor(
            field_name, f"expected a collection of strings, got {type(value).__name__}", check=check
        )
    items = list(value)
    for item in items:
        if not isinstance(item, str):
            raise MalformedDescriptor(
                field_name, f"entries must be strings, got {type(item).__name__}", check=check
            )
    return frozenset(items)


def _require_str(value: Any, field_name: str, check: str) -> str:
    if not isinstance(value, str):
        raise MalformedDescriptor(
            field_name, f"expected a string, got {type(value).__name__}", check=check
        )
    return value


def _require_bool(value: Any, field_name: str, check: str) -> bool:
    if not isinstance(value, bool):
        raise MalformedDescriptor(
            field_name, f"expected a boolean, got {type(value).__name__}", check=check
        )
    return value


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — THE DESCRIPTOR
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class BugPatternDescriptor:
    """
    Everything a bug pattern declares about itself.

    Attributes
    ----------
    name                           : unique identifier, primary suppression key
    summary                        : one line, no trailing period, no markup
    severity                       : SeverityLevel (required)
    alt_names                      : other identifiers accepted for suppression
    link_type                      : how the diagnostic link is produced
    link                           : URL used when link_type is CUSTOM
    tags                           : free-form classification strings
    provides_fix                   : ProvidesFix
    category                       : deprecated, carried but never inspected
    explanation                    : long-form description, markup allowed
    suppressibility                : Suppressibility
    custom_suppression_annotations : annotation types for CUSTOM_ANNOTATION
    document_suppression           : emit canned suppression docs
    generate_examples_from_test_cases : mine docs examples from fixtures
    """
    name: str
    summary: str
    severity: SeverityLevel
    alt_names: FrozenSet[str] = frozenset()
    link_type: LinkType = LinkType.AUTOGENERATED
    link: str = ""
    tags: FrozenSet[str] = frozenset()
    provides_fix: ProvidesFix = ProvidesFix.NO_FIX
    category: Category = Category.ONE_OFF
    explanation: str = ""
    suppressibility: Suppressibility = Suppressibility.SUPPRESS_WARNINGS
    custom_suppression_annotations: FrozenSet[str] = frozenset()
    document_suppression: bool = True
    generate_examples_from_test_cases: bool = True

    def __post_init__(self) -> None:
        check = self.name if isinstance(self.name, str) else "<unnamed>"
        _require_str(self.name, "name", check)
        if self.severity is None:
            raise MalformedDescriptor("severity", "is required", check=check)

        normalised: Dict[str, Any] = {
            "summary": _require_str(self.summary, "summary", check),
            "severity": _coerce_enum(SeverityLevel, self.severity, "severity", check),
            "alt_names": _coerce_strings(self.alt_names, "alt_names", check),
            "link_type": _coerce_enum(LinkType, self.link_type, "link_type", check),
            "link": _require_str(self.link if self.link is not None else "", "link", check),
            "tags": _coerce_strings(self.tags, "tags", check),
            "provides_fix": _coerce_enum(ProvidesFix, self.provides_fix, "provides_fix", check),
            "category": _coerce_enum(Category, self.category, "category", check),
            "explanation": _require_str(
                self.explanation if self.explanation is not None else "", "explanation", check
            ),
            "suppressibility": _coerce_enum(
                Suppressibility, self.suppressibility, "suppressibility", check
            ),
            "custom_suppression_annotations": _coerce_strings(
                self.custom_suppression_annotations, "custom_suppression_annotations", check
            ),
            "document_suppression": _require_bool(
                self.document_suppression, "document_suppression", check
            ),
            "generate_examples_from_test_cases": _require_bool(
                self.generate_examples_from_test_cases, "generate_examples_from_test_cases", check
            ),
        }
        for key, value in normalised.items():
            object.__setattr__(self, key, value)

    @property
    def all_names(self) -> FrozenSet[str]:
        """The primary name plus every alternate name."""
        return frozenset({self.name}) | self.alt_names

    @property
    def disableable(self) -> bool:
        return self.suppressibility.disableable

    def to_dict(self) -> Dict[str, Any]:
        """Serialise using the declaration (camelCase) key names."""
        return {
            "name": self.name,
            "altNames": sorted(self.alt_names),
            "linkType": self.link_type.name,
            "link": self.link,
            "tags": sorted(self.tags),
            "providesFix": self.provides_fix.name,
            "category": self.category.name,
            "summary": self.summary,
            "explanation": self.explanation,
            "severity": self.severity.name,
            "suppressibility": self.suppressibility.name,
            "customSuppressionAnnotations": sorted(self.custom_suppression_annotations),
            "documentSuppression": self.document_suppression,
            "generateExamplesFromTestCases": self.generate_examples_from_test_cases,
        }

    def __repr__(self) -> str:
        return f"<BugPatternDescriptor {self.name!r} {self.severity.name}>"


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CONSTRUCTION FROM RAW DECLARATIONS
# ═════════════════════════════════════════════════════════════════════════

# declaration key -> dataclass field
_KEY_ALIASES: Dict[str, str] = {
    "altNames": "alt_names",
    "alt-names": "alt_names",
    "linkType": "link_type",
    "link-type": "link_type",
    "providesFix": "provides_fix",
    "provides-fix": "provides_fix",
    "customSuppressionAnnotations": "custom_suppression_annotations",
    "custom-suppression-annotations": "custom_suppression_annotations",
    "documentSuppression": "document_suppression",
    "document-suppression": "document_suppression",
    "generateExamplesFromTestCases": "generate_examples_from_test_cases",
    "generate-examples-from-test-cases": "generate_examples_from_test_cases",
}

_FIELD_NAMES = frozenset(f.name for f in fields(BugPatternDescriptor))
_REQUIRED = ("name", "summary", "severity")


def field_for_key(key: str) -> str:
    """Dataclass field name for a declaration key (camelCase or dashed)."""
    return _KEY_ALIASES.get(key, key.replace("-", "_"))


def descriptor_from_mapping(raw: Mapping[str, Any]) -> BugPatternDescriptor:
    """
    Build a descriptor from a raw declaration record.

    Keys may be snake_case field names, the camelCase names used by
    declaration files, or their dashed spelling.  Unknown keys and
    missing required keys raise :class:`MalformedDescriptor`.
    """
    kwargs: Dict[str, Any] = {}
    raw_name = raw.get("name")
    check = raw_name if isinstance(raw_name, str) else "<unnamed>"
    for key, value in raw.items():
        field_name = field_for_key(key)
        if field_name not in _FIELD_NAMES:
            raise MalformedDescriptor(key, "unknown descriptor field", check=check)
        if field_name in kwargs:
            raise MalformedDescriptor(key, "given more than once", check=check)
        kwargs[field_name] = value
    for required in _REQUIRED:
        if required not in kwargs:
            raise MalformedDescriptor(required, "is required", check=check)
    return BugPatternDescriptor(**kwargs)


__all__ = [
    "LinkType",
    "ProvidesFix",
    "SeverityLevel",
    "Category",
    "Suppressibility",
    "StandardTags",
    "BugPatternDescriptor",
    "descriptor_from_mapping",
    "field_for_key",
]
