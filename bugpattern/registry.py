"""
bugpattern/registry.py
══════════════════════

The run-lifetime collection of active bug patterns.

A :class:`Registry` maps every check's name *and* every alt name to
exactly one descriptor.  It is built once, single-threaded, at tool
start-up, and is read-only afterwards, so diagnostic workers can share
it without locking.

Two ways to build one:

  Registry(descriptors)       strict — any invalid descriptor or name
                              collision raises ValidationError
  build_registry(decls, cfg)  lenient — bad checks are excluded and
                              reported in RegistryBuild.rejected, the
                              rest go live

Name collisions have no tie-break: every descriptor that claims a
contested name is excluded.

Usage
-----
>>> build = build_registry(declarations)
>>> for rejected in build.rejected:
...     print(rejected)
>>> registry = build.registry
>>> registry["UnusedVar"] is registry.get("unused")
True
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from types import MappingProxyType
from typing import (
    Any,
    Dict,
    Iterable,
    Iterator,
    List,
    Mapping,
    Optional,
    Sequence,
    Set,
    Tuple,
    Union,
)

from bugpattern.config import RegistryConfig
from bugpattern.descriptor import BugPatternDescriptor, descriptor_from_mapping
from bugpattern.errors import (
    MalformedDescriptor,
    RuleId,
    UndisableableCheck,
    ValidationError,
    Violation,
)
from bugpattern.validator import check as check_descriptor

logger = logging.getLogger(__name__)

Declaration = Union[BugPatternDescriptor, Mapping[str, Any]]


def _find_collisions(
    descriptors: Sequence[BugPatternDescriptor],
) -> Dict[int, List[Violation]]:
    """Map descriptor index → NAME_COLLISION violations it takes part in."""
    claims: Dict[str, List[int]] = defaultdict(list)
    for idx, d in enumerate(descriptors):
        for key in sorted(d.all_names):
            claims[key].append(idx)

    found: Dict[int, List[Violation]] = defaultdict(list)
    for key, owners in claims.items():
        if len(owners) < 2:
            continue
        for idx in owners:
            others = sorted(descriptors[o].name for o in owners if o != idx)
            field_name = "name" if descriptors[idx].name == key else "alt_names"
            found[idx].append(Violation(
                RuleId.NAME_COLLISION, field_name,
                f"{key!r} is also claimed by {', '.join(others)}",
            ))
    return found


# ═════════════════════════════════════════════════════════════════════════
#  REGISTRY
# ═════════════════════════════════════════════════════════════════════════

class Registry:
    """
    Read-only lookup of descriptors by name or alt name.

    Parameters
    ----------
    descriptors : descriptors to register, in registration order
    strict      : promote validation warnings to errors

    Raises
    ------
    ValidationError
        If a descriptor breaks a fatal rule, or two descriptors claim the
        same name or alt name.
    """

    def __init__(
        self, descriptors: Iterable[BugPatternDescriptor] = (), strict: bool = False
    ) -> None:
        items = list(descriptors)
        problems: List[Violation] = []
        for d in items:
            problems.extend(check_descriptor(d, strict=strict).errors)
        for violations in _find_collisions(items).values():
            problems.extend(violations)
        if problems:
            raise ValidationError(problems)

        index: Dict[str, BugPatternDescriptor] = {}
        for d in items:
            for key in d.all_names:
                index[key] = d
        self._descriptors: Tuple[BugPatternDescriptor, ...] = tuple(items)
        self._index: Mapping[str, BugPatternDescriptor] = MappingProxyType(index)

    # ── lookup ───────────────────────────────────────────────────────

    def get(self, key: str) -> Optional[BugPatternDescriptor]:
        """Descriptor registered under ``key`` (a name or alt name)."""
        return self._index.get(key)

    def resolve(self, key: str) -> BugPatternDescriptor:
        """Descriptor registered under ``key``; KeyError if there is none."""
        try:
            return self._index[key]
        except KeyError:
            raise KeyError(f"no bug pattern named {key!r}") from None

    __getitem__ = resolve

    def __contains__(self, key: object) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[BugPatternDescriptor]:
        return iter(self._descriptors)

    def __len__(self) -> int:
        return len(self._descriptors)

    @property
    def names(self) -> List[str]:
        """Primary names, sorted."""
        return sorted(d.name for d in self._descriptors)

    @property
    def index(self) -> Mapping[str, BugPatternDescriptor]:
        """Read-only view of every name and alt name."""
        return self._index

    # ── selection ────────────────────────────────────────────────────

    def active(self, disabled: Iterable[str] = ()) -> List[BugPatternDescriptor]:
        """
        Descriptors left enabled after the operator disables ``disabled``.

        Raises
        ------
        KeyError
            If a name is not registered.
        UndisableableCheck
            If a disabled check's suppressibility forbids disabling.
        """
        off: Set[str] = set()
        for key in disabled:
            d = self[key]
            if not d.disableable:
                raise UndisableableCheck(
                    f"cannot disable a check with suppressibility {d.suppressibility.name}",
                    check=d.name,
                )
            off.add(d.name)
        return [d for d in self._descriptors if d.name not in off]

    def __repr__(self) -> str:
        return f"<Registry {len(self)} checks>"


# ═════════════════════════════════════════════════════════════════════════
#  LENIENT BUILD
# ═════════════════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectedCheck:
    """A declared check kept out of the registry, and why."""
    name: str
    violations: Tuple[Violation, ...]

    def __str__(self) -> str:
        return f"{self.name}: " + "; ".join(str(v) for v in self.violations)


@dataclass(frozen=True)
class RegistryBuild:
    """Outcome of :func:`build_registry`."""
    registry: Registry
    rejected: Tuple[RejectedCheck, ...] = ()
    warnings: Tuple[Tuple[str, Violation], ...] = ()

    @property
    def ok(self) -> bool:
        return not self.rejected


def _declared_name(decl: Declaration) -> str:
    if isinstance(decl, BugPatternDescriptor):
        return decl.name
    name = decl.get("name")
    return name if isinstance(name, str) and name else "<unnamed>"


def build_registry(
    declarations: Iterable[Declaration], config: Optional[RegistryConfig] = None
) -> RegistryBuild:
    """
    Build a registry from raw declarations, excluding any bad check.

    Every declaration is constructed and validated on its own.  A
    malformed or invalid check is excluded, logged at ERROR and returned
    in ``rejected``; it never takes the rest of the registry down.
    """
    config = config or RegistryConfig()
    accepted: List[BugPatternDescriptor] = []
    rejected: List[RejectedCheck] = []
    warnings: List[Tuple[str, Violation]] = []

    for decl in declarations:
        name = _declared_name(decl)
        try:
            d = decl if isinstance(decl, BugPatternDescriptor) else descriptor_from_mapping(decl)
        except MalformedDescriptor as exc:
            rejected.append(RejectedCheck(name, (exc.violation,)))
            continue
        report = check_descriptor(d, strict=config.strict)
        if report.errors:
            rejected.append(RejectedCheck(d.name, tuple(report.errors)))
            continue
        warnings.extend((d.name, w) for w in report.warnings)
        accepted.append(d)

    collisions = _find_collisions(accepted)
    for idx in sorted(collisions):
        rejected.append(RejectedCheck(accepted[idx].name, tuple(collisions[idx])))
    live = [d for idx, d in enumerate(accepted) if idx not in collisions]

    for r in rejected:
        logger.error("excluding bug pattern %s", r)
    for name, w in warnings:
        logger.warning("%s: %s", name, w)
    logger.info("registered %d bug patterns (%d rejected)", len(live), len(rejected))

    return RegistryBuild(
        registry=Registry(live, strict=config.strict),
        rejected=tuple(rejected),
        warnings=tuple(warnings),
    )


__all__ = [
    "Registry",
    "RejectedCheck",
    "RegistryBuild",
    "build_registry",
]
