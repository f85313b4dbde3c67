"""
bugpattern — Bug-pattern metadata registry and resolution engine
================================================================

Describes the checks a static-analysis tool plugs into the compiler's
diagnostic pipeline, and answers the questions asked about them at
registration, diagnostic and documentation time.

Core modules
------------
descriptor
    ``BugPatternDescriptor``, the immutable record a check declares, and
    its enums (severity, suppressibility, link type, ...).
validator
    Consistency rules for one descriptor; every violation is reported.
registry
    The run-lifetime lookup by name and alt name, strict and lenient builds.
suppression
    ``is_suppressed`` for one diagnostic site and caller-level policies.
tags
    ``effective_tags`` and aggregation views over many descriptors.
links
    Diagnostic link resolution (autogenerated, custom, none).
docs
    Documentation records, fixture-backed example providers, catalog pages.
declarations
    S-expression declaration files.
config
    ``RegistryConfig`` and its ``BUGPATTERN_*`` environment overrides.

Quick start
-----------
>>> from bugpattern import BugPatternDescriptor, SeverityLevel, Registry
>>> from bugpattern import SuppressionContext, is_suppressed
>>> d = BugPatternDescriptor("UnusedVar", "Variable is never read", SeverityLevel.WARNING)
>>> registry = Registry([d])
>>> is_suppressed(registry["UnusedVar"], SuppressionContext.of(["UnusedVar"]))
True

Package layout
--------------
::

    bugpattern/
    ├── __init__.py            ← this file
    ├── __main__.py
    ├── config.py
    ├── declarations.py
    ├── descriptor.py
    ├── docs.py
    ├── errors.py
    ├── links.py
    ├── main.py
    ├── registry.py
    ├── suppression.py
    ├── tags.py
    └── validator.py
"""

from __future__ import annotations

import logging
from typing import List

__version__ = "0.1.0"
__license__ = "MIT"

logging.getLogger(__name__).addHandler(logging.NullHandler())

from bugpattern.config import RegistryConfig  # noqa: E402
from bugpattern.descriptor import (  # noqa: E402
    BugPatternDescriptor,
    Category,
    LinkType,
    ProvidesFix,
    SeverityLevel,
    StandardTags,
    Suppressibility,
    descriptor_from_mapping,
)
from bugpattern.docs import (  # noqa: E402
    DocumentationRecord,
    Example,
    ExampleProvider,
    FixtureDirectoryProvider,
    Outcome,
    assemble,
    generate_catalog,
)
from bugpattern.errors import (  # noqa: E402
    BugPatternError,
    DeclarationError,
    MalformedDescriptor,
    MissingLink,
    UndisableableCheck,
    ValidationError,
    Violation,
)
from bugpattern.links import canonical_url, diagnostic_fields, resolve_link  # noqa: E402
from bugpattern.registry import Registry, RegistryBuild, build_registry  # noqa: E402
from bugpattern.suppression import (  # noqa: E402
    SuppressionContext,
    SuppressionPolicy,
    is_suppressed,
)
from bugpattern.tags import effective_tags, likely_errors  # noqa: E402
from bugpattern.validator import ValidationReport, check, validate  # noqa: E402

__all__: List[str] = [
    "__version__",
    # descriptor
    "BugPatternDescriptor",
    "Category",
    "LinkType",
    "ProvidesFix",
    "SeverityLevel",
    "StandardTags",
    "Suppressibility",
    "descriptor_from_mapping",
    # validation
    "ValidationReport",
    "check",
    "validate",
    # registry
    "Registry",
    "RegistryBuild",
    "build_registry",
    "RegistryConfig",
    # resolution
    "SuppressionContext",
    "SuppressionPolicy",
    "is_suppressed",
    "effective_tags",
    "likely_errors",
    "canonical_url",
    "resolve_link",
    "diagnostic_fields",
    # documentation
    "DocumentationRecord",
    "Example",
    "ExampleProvider",
    "FixtureDirectoryProvider",
    "Outcome",
    "assemble",
    "generate_catalog",
    # errors
    "BugPatternError",
    "DeclarationError",
    "MalformedDescriptor",
    "MissingLink",
    "UndisableableCheck",
    "ValidationError",
    "Violation",
]
