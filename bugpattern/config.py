"""Registry configuration and its environment overrides."""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import List, Mapping, Optional

from bugpattern.links import DEFAULT_SITE_BASE

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off", ""}


def _env_flag(env: Mapping[str, str], key: str, default: bool) -> bool:
    raw = env.get(key)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ValueError(f"{key}: expected a boolean, got {raw!r}")


@dataclass(frozen=True)
class RegistryConfig:
    """Tuning knobs for building and using a registry.

    site_base                      : documentation site root for autogenerated links
    strict                         : promote validation warnings to errors
    exempt_errors_from_suppression : ERROR checks ignore SuppressWarnings
    """
    site_base: str = DEFAULT_SITE_BASE
    strict: bool = False
    exempt_errors_from_suppression: bool = False

    @classmethod
    def from_env(
        cls, env: Optional[Mapping[str, str]] = None, base: Optional["RegistryConfig"] = None
    ) -> "RegistryConfig":
        """Apply ``BUGPATTERN_*`` environment variables on top of ``base``."""
        env = os.environ if env is None else env
        base = base or cls()
        return replace(
            base,
            site_base=env.get("BUGPATTERN_SITE_BASE", base.site_base),
            strict=_env_flag(env, "BUGPATTERN_STRICT", base.strict),
            exempt_errors_from_suppression=_env_flag(
                env, "BUGPATTERN_EXEMPT_ERRORS", base.exempt_errors_from_suppression
            ),
        )

    def validate(self) -> List[str]:
        """Return a list of validation warnings (empty if valid)."""
        warnings: List[str] = []
        if not self.site_base.startswith(("http://", "https://")):
            warnings.append(f"site_base should be an http(s) URL, got {self.site_base!r}")
        if self.site_base.endswith("/"):
            warnings.append("site_base should not end with '/'")
        return warnings
