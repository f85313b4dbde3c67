"""
bugpattern/docs.py
══════════════════

Documentation records for bug patterns.

A :class:`DocumentationRecord` combines descriptor fields with example
snippets mined from a check's test fixtures.  Examples are pulled from
the :class:`ExampleProvider` lazily, each time the record is iterated,
so a record is cheap to build and can be rendered more than once.

Architecture
────────────

  descriptor ──┐
               ├──► assemble() ──► DocumentationRecord ──► to_markdown()
  provider ────┘                                            │
                                                            ▼
                                      generate_catalog() → <out>/<Name>.md
                                                            <out>/index.md

Reading fixtures may block on I/O; assemble records in a documentation
pass, never on the diagnostic path.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import (
    Callable,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Union,
    runtime_checkable,
)

from bugpattern.descriptor import BugPatternDescriptor, Suppressibility
from bugpattern.errors import BugPatternError
from bugpattern.links import DEFAULT_SITE_BASE, resolve_link
from bugpattern.tags import effective_tags

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════════
#  PART 1 — EXAMPLES AND PROVIDERS
# ═════════════════════════════════════════════════════════════════════════

class Outcome(Enum):
    """What the check does with an example snippet."""
    POSITIVE = "positive"   # the check flags it
    NEGATIVE = "negative"   # the check leaves it alone


class Example(NamedTuple):
    """A ``(snippet, outcome)`` pair, with the fixture it came from."""
    snippet: str
    outcome: Outcome
    source: str = ""


# Anything a provider may hand back for one example.
RawExample = Union[
    Example,
    Tuple[str, Union[Outcome, str]],
    Tuple[str, Union[Outcome, str], str],
]


def _coerce_outcome(value: object) -> Outcome:
    if isinstance(value, Outcome):
        return value
    if isinstance(value, str):
        key = value.strip().lower()
        for member in Outcome:
            if key == member.value:
                return member
    raise ValueError(f"unknown example outcome {value!r}")


def as_example(item: RawExample, check_name: str = "") -> Example:
    """
    Normalise one provider item into an :class:`Example`.

    Accepts an ``Example`` or a plain ``(snippet, outcome)`` /
    ``(snippet, outcome, source)`` tuple; ``outcome`` may be an
    :class:`Outcome` or its value (``"positive"`` / ``"negative"``).

    Raises
    ------
    BugPatternError
        If ``item`` has any other shape.
    """
    try:
        snippet, outcome, *rest = item
        if len(rest) > 1 or not isinstance(snippet, str):
            raise ValueError(f"expected (snippet, outcome[, source]), got {item!r}")
        source = rest[0] if rest else ""
        if not isinstance(source, str):
            raise ValueError(f"example source must be a string, got {source!r}")
        return Example(snippet, _coerce_outcome(outcome), source)
    except (TypeError, ValueError) as exc:
        raise BugPatternError(f"malformed example: {exc}", check=check_name or None) from exc


@runtime_checkable
class ExampleProvider(Protocol):
    """
    Source of documentation examples, keyed by check name.

    ``examples()`` returns a finite sequence of ``(snippet, outcome)``
    pairs (an :class:`Example` is one) that can be iterated more than
    once; an empty one is fine.
    """

    def examples(self, check_name: str) -> Iterable[RawExample]:
        ...


class NoExamples:
    """Provider for callers with no fixtures at all."""

    def examples(self, check_name: str) -> Iterable[Example]:
        return ()


class StaticExampleProvider:
    """In-memory provider: ``{check_name: [(snippet, outcome), ...]}``."""

    def __init__(self, examples: Mapping[str, Sequence[RawExample]]) -> None:
        self._examples: Dict[str, Tuple[RawExample, ...]] = {
            name: tuple(items) for name, items in examples.items()
        }

    def examples(self, check_name: str) -> Iterable[RawExample]:
        return self._examples.get(check_name, ())


class _FixtureExamples:
    """Re-scans the fixture directory every time it is iterated."""

    def __init__(self, root: Path, check_name: str, suffixes: Optional[frozenset]) -> None:
        self._root = root
        self._suffixes = suffixes
        # <Name>Positive, <Name>PositiveCase, <Name>PositiveCases2, ... plus extension
        self._pattern = re.compile(
            rf"{re.escape(check_name)}(Positive|Negative)(?:Cases?)?(?:_?\d+)?(?:\.[A-Za-z0-9]+)*"
        )

    def __iter__(self) -> Iterator[Example]:
        if not self._root.is_dir():
            return
        found: Dict[Outcome, List[Path]] = {Outcome.POSITIVE: [], Outcome.NEGATIVE: []}
        for path in sorted(self._root.rglob("*")):
            match = self._pattern.fullmatch(path.name)
            if match is None or not path.is_file():
                continue
            if self._suffixes is not None and path.suffix not in self._suffixes:
                continue
            found[_coerce_outcome(match.group(1))].append(path)
        for outcome in (Outcome.POSITIVE, Outcome.NEGATIVE):
            for path in found[outcome]:
                yield Example(
                    snippet=path.read_text(encoding="utf-8"),
                    outcome=outcome,
                    source=path.relative_to(self._root).as_posix(),
                )


class FixtureDirectoryProvider:
    """
    Provider backed by a directory of test fixtures.

    ``<Name>Positive[Case[s]][N].<ext>`` is an example the check flags;
    the same with ``Negative`` one it accepts.  The name is matched
    literally and in full, so ``Foo`` never picks up the fixtures of
    ``FooPositiveCheck``.  Files are read lazily, in sorted order,
    positives first.

    Parameters
    ----------
    root     : fixture directory (searched recursively)
    suffixes : only consider files with these suffixes, e.g. {".c"}
    """

    def __init__(self, root: Path, suffixes: Optional[Iterable[str]] = None) -> None:
        self.root = Path(root)
        self.suffixes = frozenset(suffixes) if suffixes is not None else None

    def examples(self, check_name: str) -> Iterable[Example]:
        return _FixtureExamples(self.root, check_name, self.suffixes)


# ═════════════════════════════════════════════════════════════════════════
#  PART 2 — SUPPRESSION PROSE
# ═════════════════════════════════════════════════════════════════════════

def suppression_text(descriptor: BugPatternDescriptor) -> str:
    """One canned paragraph per suppressibility variant."""
    policy = descriptor.suppressibility
    if policy is Suppressibility.SUPPRESS_WARNINGS:
        return (
            "Suppress false positives by adding the suppression annotation "
            f'`@SuppressWarnings("{descriptor.name}")` to the enclosing element.'
        )
    if policy is Suppressibility.CUSTOM_ANNOTATION:
        names = sorted(descriptor.custom_suppression_annotations)
        annotations = ", ".join(f"`@{a.rsplit('.', 1)[-1]}`" for a in names)
        if len(names) == 1:
            return (
                f"Suppress false positives by adding an {annotations} annotation "
                "to the enclosing element."
            )
        return (
            "Suppress false positives by adding any of the following annotations "
            f"to the enclosing element: {annotations}."
        )
    if policy is Suppressibility.UNSUPPRESSIBLE:
        return "This check may not be suppressed."
    raise AssertionError(f"unhandled suppressibility {policy!r}")


# ═════════════════════════════════════════════════════════════════════════
#  PART 3 — THE RECORD
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class DocumentationRecord:
    """
    Documentation content for one check.

    Attributes
    ----------
    descriptor  : the documented check
    link        : canonical URL, custom link, or None
    suppression : canned suppression block, or None when not documented
    """
    descriptor: BugPatternDescriptor
    link: Optional[str]
    suppression: Optional[str]
    _example_source: Optional[Callable[[], Iterable[RawExample]]] = field(
        default=None, repr=False, compare=False
    )

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def has_examples_source(self) -> bool:
        return self._example_source is not None

    def examples(self) -> Iterator[Example]:
        """
        Fresh iterator over the examples; asks the provider again each call.

        Provider items are normalised with :func:`as_example`, so plain
        ``(snippet, outcome)`` pairs are accepted.
        """
        if self._example_source is None:
            return iter(())
        items = self._example_source()
        return (as_example(item, self.name) for item in items)

    def front_matter(self) -> Dict[str, object]:
        d = self.descriptor
        return {
            "title": d.name,
            "summary": d.summary,
            "layout": "bugpattern",
            "tags": ", ".join(sorted(effective_tags(d))),
            "severity": d.severity.name,
            "link": self.link or "",
        }

    def to_markdown(self) -> str:
        """Render the page.  Iterates the examples once."""
        d = self.descriptor
        lines: List[str] = ["---"]
        for key, value in self.front_matter().items():
            lines.append(f"{key}: {json.dumps(value)}")
        lines += ["---", "", f"# {d.name}", "", d.summary, ""]
        if d.alt_names:
            lines += ["_Alternate names: " + ", ".join(sorted(d.alt_names)) + "_", ""]
        if d.explanation.strip():
            lines += ["## The problem", "", d.explanation.strip(), ""]
        if self.suppression is not None:
            lines += ["## Suppression", "", self.suppression, ""]

        positives: List[Example] = []
        negatives: List[Example] = []
        for example in self.examples():
            (positives if example.outcome is Outcome.POSITIVE else negatives).append(example)
        for title, group in (("Positive examples", positives), ("Negative examples", negatives)):
            if not group:
                continue
            lines += [f"## {title}", ""]
            for example in group:
                if example.source:
                    lines += [f"__{example.source}__", ""]
                lines += ["```", example.snippet.rstrip("\n"), "```", ""]
        return "\n".join(lines).rstrip("\n") + "\n"


def assemble(
    descriptor: BugPatternDescriptor,
    example_provider: Optional[ExampleProvider] = None,
    site_base: str = DEFAULT_SITE_BASE,
) -> DocumentationRecord:
    """
    Build the documentation record for ``descriptor``.

    Examples are requested from ``example_provider`` only when the check
    generates examples from its test cases, and only when the record is
    iterated.  A missing provider or empty example set is not an error.

    Raises
    ------
    MissingLink
        If the link type is AUTOGENERATED and no canonical URL can be
        derived from the check name.
    """
    link = resolve_link(descriptor, site_base)
    suppression = suppression_text(descriptor) if descriptor.document_suppression else None

    source: Optional[Callable[[], Iterable[RawExample]]] = None
    if descriptor.generate_examples_from_test_cases and example_provider is not None:
        provider = example_provider
        name = descriptor.name
        source = lambda: provider.examples(name)  # noqa: E731

    return DocumentationRecord(
        descriptor=descriptor,
        link=link,
        suppression=suppression,
        _example_source=source,
    )


# ═════════════════════════════════════════════════════════════════════════
#  PART 4 — CATALOG GENERATION
# ═════════════════════════════════════════════════════════════════════════

@dataclass
class CatalogResult:
    """Pages written and checks that failed during a documentation pass."""
    written: List[Path] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed


_SAFE_FILENAME = re.compile(r"[^A-Za-z0-9_.\-]")


def generate_catalog(
    descriptors: Iterable[BugPatternDescriptor],
    example_provider: Optional[ExampleProvider],
    output_dir: Path,
    site_base: str = DEFAULT_SITE_BASE,
) -> CatalogResult:
    """
    Write one markdown page per check plus ``index.md``.

    A check whose page cannot be produced is logged and recorded in
    ``failed``; the remaining pages are still written.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    result = CatalogResult()
    index_rows: List[str] = []

    for d in sorted(descriptors, key=lambda x: x.name):
        try:
            record = assemble(d, example_provider, site_base)
            page = record.to_markdown()
        except (BugPatternError, OSError, TypeError, ValueError) as exc:
            logger.error("documentation for %s failed: %s", d.name, exc)
            result.failed[d.name] = str(exc)
            continue
        path = output_dir / f"{_SAFE_FILENAME.sub('_', d.name)}.md"
        path.write_text(page, encoding="utf-8")
        result.written.append(path)
        index_rows.append(f"| [{d.name}]({path.name}) | {d.severity.name} | {d.summary} |")
        logger.debug("wrote %s", path)

    index = ["# Bug patterns", "", "| Name | Severity | Summary |", "|---|---|---|"]
    index.extend(index_rows)
    index_path = output_dir / "index.md"
    index_path.write_text("\n".join(index) + "\n", encoding="utf-8")
    result.written.append(index_path)
    logger.info(
        "documentation pass: %d pages, %d failures", len(result.written) - 1, len(result.failed)
    )
    return result


__all__ = [
    "Outcome",
    "Example",
    "RawExample",
    "as_example",
    "ExampleProvider",
    "NoExamples",
    "StaticExampleProvider",
    "FixtureDirectoryProvider",
    "suppression_text",
    "DocumentationRecord",
    "assemble",
    "CatalogResult",
    "generate_catalog",
]
