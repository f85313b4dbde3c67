#!/usr/bin/env python3
"""bugpattern/main.py — CLI entry-point for the bug-pattern registry.

Usage examples
--------------
    # Check declaration files and report every rejected check
    python -m bugpattern validate checks/*.bp --strict

    # List registered checks, optionally filtered by (effective) tag
    python -m bugpattern list checks/*.bp --tag LikelyError

    # Group checks by effective tag
    python -m bugpattern tags checks/*.bp

    # Would a diagnostic of this check be suppressed in this scope?
    python -m bugpattern suppressed checks/*.bp --check UnusedVar \\
        --suppress-warnings UnusedVar

    # Generate documentation pages with examples from test fixtures
    python -m bugpattern docs checks/*.bp --fixtures tests/testdata -o site/

Exit codes
----------
    0   Success.
    1   At least one check was rejected or failed to document
        (``suppressed``: the diagnostic is NOT suppressed).
    2   Infrastructure failure (unreadable file, bad arguments, ...).

``python -m bugpattern`` runs :func:`main` via ``bugpattern/__main__.py``.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import textwrap
from dataclasses import replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from bugpattern import __version__
from bugpattern.config import RegistryConfig
from bugpattern.declarations import load_declaration_files
from bugpattern.descriptor import SeverityLevel
from bugpattern.docs import FixtureDirectoryProvider, NoExamples, generate_catalog
from bugpattern.errors import BugPatternError
from bugpattern.links import resolve_link
from bugpattern.registry import RegistryBuild, build_registry
from bugpattern.suppression import SuppressionContext, SuppressionPolicy
from bugpattern.tags import checks_with_tag, effective_tags, group_by_tag

_log = logging.getLogger("bugpattern")

EXIT_OK: int = 0
EXIT_ERROR: int = 1
EXIT_INFRA: int = 2


# ===========================================================================
# Utility helpers
# ===========================================================================

def _configure_logging(verbosity: int) -> None:
    """Set up the ``bugpattern`` logger.

    Parameters
    ----------
    verbosity:
        0 → WARNING, 1 → INFO, 2+ → DEBUG.
    """
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    root = logging.getLogger("bugpattern")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        root.addHandler(handler)


def _resolve_paths(raw: Sequence[str]) -> List[Path]:
    """Resolve declaration paths, raising on missing files."""
    paths: List[Path] = []
    for item in raw:
        p = Path(item).expanduser().resolve()
        if not p.is_file():
            _log.error("declaration file not found: %s", p)
            raise SystemExit(EXIT_INFRA)
        paths.append(p)
    return paths


def _config_from_args(args: argparse.Namespace) -> RegistryConfig:
    config = RegistryConfig.from_env()
    overrides: Dict[str, Any] = {}
    if getattr(args, "strict", False):
        overrides["strict"] = True
    if getattr(args, "site_base", None):
        overrides["site_base"] = args.site_base
    if getattr(args, "exempt_errors", False):
        overrides["exempt_errors_from_suppression"] = True
    config = replace(config, **overrides)
    for warning in config.validate():
        _log.warning("config: %s", warning)
    return config


def _load(args: argparse.Namespace, config: RegistryConfig) -> RegistryBuild:
    paths = _resolve_paths(args.declarations)
    try:
        records = load_declaration_files(paths)
    except BugPatternError as exc:
        _log.error("%s", exc)
        raise SystemExit(EXIT_INFRA)
    return build_registry(records, config)


# ===========================================================================
# Sub-command implementations
# ===========================================================================

def cmd_validate(args: argparse.Namespace) -> int:
    """Build the registry and report rejected checks and warnings."""
    config = _config_from_args(args)
    build = _load(args, config)
    out = sys.stdout
    for rejected in build.rejected:
        out.write(f"rejected {rejected}\n")
    for name, warning in build.warnings:
        out.write(f"warning  {name}: {warning}\n")
    out.write(
        f"\n--- {len(build.registry)} check(s) registered, "
        f"{len(build.rejected)} rejected ---\n"
    )
    return EXIT_OK if build.ok else EXIT_ERROR


def cmd_list(args: argparse.Namespace) -> int:
    """List registered checks."""
    config = _config_from_args(args)
    build = _load(args, config)
    descriptors = list(build.registry)
    if args.tag:
        descriptors = checks_with_tag(descriptors, args.tag)
    if args.severity:
        wanted = SeverityLevel[args.severity]
        descriptors = [d for d in descriptors if d.severity is wanted]

    if args.format == "json":
        rows = []
        for d in descriptors:
            row = d.to_dict()
            row["effectiveTags"] = sorted(effective_tags(d))
            try:
                row["diagnosticLink"] = resolve_link(d, config.site_base)
            except BugPatternError as exc:
                _log.warning("%s", exc)
                row["diagnosticLink"] = None
            rows.append(row)
        sys.stdout.write(json.dumps(rows, indent=2) + "\n")
    else:
        for d in sorted(descriptors, key=lambda x: x.name):
            tags = ", ".join(sorted(effective_tags(d)))
            sys.stdout.write(f"  {d.name:30s} {d.severity.name:10s} {d.summary}\n")
            if tags:
                sys.stdout.write(f"  {'':30s} tags: {tags}\n")
    return EXIT_OK if build.ok else EXIT_ERROR


def cmd_tags(args: argparse.Namespace) -> int:
    """Group checks by effective tag."""
    config = _config_from_args(args)
    build = _load(args, config)
    for tag, group in group_by_tag(build.registry).items():
        names = ", ".join(sorted(d.name for d in group))
        sys.stdout.write(f"{tag} ({len(group)}): {names}\n")
    return EXIT_OK if build.ok else EXIT_ERROR


def cmd_suppressed(args: argparse.Namespace) -> int:
    """Report whether a check is suppressed in the given scope."""
    config = _config_from_args(args)
    build = _load(args, config)
    descriptor = build.registry.get(args.check)
    if descriptor is None:
        _log.error("no such check: %s", args.check)
        return EXIT_INFRA
    context = SuppressionContext.of(args.suppress_warnings or (), args.annotation or ())
    policy = SuppressionPolicy(exempt_errors=config.exempt_errors_from_suppression)
    suppressed = policy.is_suppressed(descriptor, context)
    sys.stdout.write(
        f"{descriptor.name} ({descriptor.suppressibility.name}): "
        f"{'suppressed' if suppressed else 'not suppressed'}\n"
    )
    return EXIT_OK if suppressed else EXIT_ERROR


def cmd_docs(args: argparse.Namespace) -> int:
    """Write documentation pages for every registered check."""
    config = _config_from_args(args)
    build = _load(args, config)
    if args.fixtures:
        suffixes = set(args.suffix) if args.suffix else None
        provider = FixtureDirectoryProvider(Path(args.fixtures), suffixes)
    else:
        provider = NoExamples()
    result = generate_catalog(build.registry, provider, Path(args.output), config.site_base)
    for name, reason in sorted(result.failed.items()):
        sys.stdout.write(f"failed   {name}: {reason}\n")
    sys.stdout.write(
        f"\n--- {len(result.written)} file(s) written to {args.output}, "
        f"{len(result.failed)} failure(s) ---\n"
    )
    return EXIT_OK if (result.ok and build.ok) else EXIT_ERROR


# ===========================================================================
# Argument parser
# ===========================================================================

def _build_parser() -> argparse.ArgumentParser:
    """Construct the full CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="bugpattern",
        description="Bug-pattern registry: validation, suppression and documentation.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            examples:
              bugpattern validate checks/*.bp --strict
              bugpattern list checks/*.bp --tag LikelyError
              bugpattern docs checks/*.bp --fixtures tests/testdata -o site/
        """),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v info, -vv debug).",
    )

    subparsers = parser.add_subparsers(dest="command", title="commands", metavar="<command>")

    def _add_common(p: argparse.ArgumentParser) -> None:
        p.add_argument("declarations", nargs="+", metavar="FILE", help="Declaration files.")
        p.add_argument(
            "--strict", action="store_true",
            help="Treat validation warnings as errors.",
        )
        p.add_argument(
            "--site-base", default=None, metavar="URL",
            help="Documentation site root for autogenerated links.",
        )

    p = subparsers.add_parser("validate", help="Validate declarations.")
    _add_common(p)
    p.set_defaults(func=cmd_validate)

    p = subparsers.add_parser("list", help="List registered checks.")
    _add_common(p)
    p.add_argument("--tag", default=None, help="Only checks with this effective tag.")
    p.add_argument(
        "--severity", choices=[s.name for s in SeverityLevel], default=None,
        help="Only checks with this severity.",
    )
    p.add_argument("-f", "--format", choices=["text", "json"], default="text")
    p.set_defaults(func=cmd_list)

    p = subparsers.add_parser("tags", help="Group checks by effective tag.")
    _add_common(p)
    p.set_defaults(func=cmd_tags)

    p = subparsers.add_parser("suppressed", help="Resolve suppression for one check.")
    _add_common(p)
    p.add_argument("--check", required=True, help="Check name or alt name.")
    p.add_argument(
        "--suppress-warnings", nargs="*", default=None, metavar="VALUE",
        help="SuppressWarnings values visible at the site.",
    )
    p.add_argument(
        "--annotation", nargs="*", default=None, metavar="TYPE",
        help="Annotation types visible at the site.",
    )
    p.add_argument(
        "--exempt-errors", action="store_true",
        help="ERROR checks ignore SuppressWarnings.",
    )
    p.set_defaults(func=cmd_suppressed)

    p = subparsers.add_parser("docs", help="Generate documentation pages.")
    _add_common(p)
    p.add_argument("-o", "--output", required=True, metavar="DIR", help="Output directory.")
    p.add_argument("--fixtures", default=None, metavar="DIR", help="Test fixture directory.")
    p.add_argument(
        "--suffix", nargs="*", default=None, metavar="EXT",
        help="Only use fixtures with these suffixes (e.g. .c .cpp).",
    )
    p.set_defaults(func=cmd_docs)

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the CLI.

    Parameters
    ----------
    argv:
        Command-line arguments.  ``None`` → ``sys.argv[1:]``.

    Returns
    -------
    int
        Exit code (see module docstring for semantics).
    """
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)

    if not hasattr(args, "func"):
        parser.print_help(sys.stderr)
        return EXIT_INFRA

    try:
        return args.func(args)
    except KeyboardInterrupt:
        _log.info("Interrupted by user.")
        return 130
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else EXIT_INFRA
    except (BugPatternError, ValueError, OSError) as exc:
        _log.error("%s", exc)
        return EXIT_INFRA


if __name__ == "__main__":
    raise SystemExit(main())
