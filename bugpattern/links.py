"""
bugpattern/links.py
═══════════════════

Link shown next to a diagnostic.

  AUTOGENERATED → ``<site-base>/bugpattern/<name>``
  CUSTOM        → ``descriptor.link`` verbatim
  NONE          → no link
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from bugpattern.descriptor import BugPatternDescriptor, LinkType, SeverityLevel
from bugpattern.errors import MissingLink

DEFAULT_SITE_BASE = "https://errorprone.info"

# Characters the documentation site accepts in a page slug.
_URL_SAFE_NAME = re.compile(r"^[A-Za-z0-9_.\-]+$")


def canonical_url(name: str, site_base: str = DEFAULT_SITE_BASE) -> str:
    """
    Return the hosted documentation URL for check ``name``.

    Raises
    ------
    MissingLink
        If ``name`` is empty or contains characters the site cannot host.
    """
    if not _URL_SAFE_NAME.match(name) or name in (".", ".."):
        raise MissingLink(
            f"cannot derive a documentation URL from name {name!r}", check=name or None
        )
    return f"{site_base.rstrip('/')}/bugpattern/{name}"


def resolve_link(
    descriptor: BugPatternDescriptor, site_base: str = DEFAULT_SITE_BASE
) -> Optional[str]:
    """The link for ``descriptor``'s diagnostics, or None when it has none."""
    link_type = descriptor.link_type
    if link_type is LinkType.NONE:
        return None
    if link_type is LinkType.CUSTOM:
        return descriptor.link
    if link_type is LinkType.AUTOGENERATED:
        return canonical_url(descriptor.name, site_base)
    raise AssertionError(f"unhandled link type {link_type!r}")


def diagnostic_fields(
    descriptor: BugPatternDescriptor,
    message: Optional[str] = None,
    site_base: str = DEFAULT_SITE_BASE,
) -> Tuple[str, SeverityLevel, str, Optional[str]]:
    """
    The tuple handed to the diagnostic emitter for one flagged site.

    ``message`` defaults to the descriptor summary, as the compiler
    message does when a check has nothing more specific to say.
    """
    return (
        descriptor.name,
        descriptor.severity,
        message if message is not None else descriptor.summary,
        resolve_link(descriptor, site_base),
    )


__all__ = ["DEFAULT_SITE_BASE", "canonical_url", "resolve_link", "diagnostic_fields"]
