"""
bugpattern/declarations.py — bug-pattern declaration files
===========================================================

Checks are declared in S-expression files, one ``bugpattern`` form per
check::

    ;; checks/style.bp
    (bugpattern
      (name "UnusedVar")
      (alt-names "unused")
      (summary "Variable is assigned but never read")
      (severity WARNING)
      (tags Style)
      (document-suppression true))

Each form becomes a plain mapping suitable for
:func:`bugpattern.descriptor.descriptor_from_mapping`.  This module only
checks the *shape* of the file; field contents are judged when the
descriptor is constructed, one check at a time.

Depends on:
    - sexpdata          (S-expression parsing)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List

import sexpdata

from bugpattern.descriptor import field_for_key
from bugpattern.errors import DeclarationError

logger = logging.getLogger(__name__)

FORM_HEAD = "bugpattern"

# Fields that take zero or more values; every other field takes one.
_MULTI_VALUED = frozenset({"alt_names", "tags", "custom_suppression_annotations"})
_BOOLEAN = frozenset({"document_suppression", "generate_examples_from_test_cases"})
_TRUE = frozenset({"true", "#t", "yes"})
_FALSE = frozenset({"false", "#f", "no"})


def _normalise(obj: Any) -> Any:
    """Recursively turn sexpdata output into plain Python values."""
    if isinstance(obj, list):
        return [_normalise(x) for x in obj]
    if isinstance(obj, sexpdata.Symbol):
        value = getattr(obj, "value", None)
        return str(value()) if callable(value) else str(obj)
    if isinstance(obj, (bool, int, float, str)):
        return obj
    if hasattr(obj, "_val"):
        return _normalise(obj._val)
    raise DeclarationError(f"unsupported S-expression value {obj!r}")


def _parse_forms(text: str, source: str) -> List[Any]:
    # sexpdata reads a single form; wrap the file so every top-level
    # form becomes one element of the outer list.
    try:
        parsed = sexpdata.loads(f"(\n{text}\n)", nil=None, true=None)
    except Exception as exc:
        raise DeclarationError(f"failed to parse S-expressions: {exc}", source=source) from exc
    return [_normalise(item) for item in parsed]


def _field_value(field_name: str, values: List[Any]) -> Any:
    if field_name in _MULTI_VALUED:
        return list(values)
    if len(values) != 1:
        # Let descriptor construction report the bad shape for this check.
        return values
    value = values[0]
    if field_name in _BOOLEAN and isinstance(value, str):
        lowered = value.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
    return value


def _form_to_mapping(form: Any, position: int, source: str) -> Dict[str, Any]:
    where = f"{source}: form {position}"
    if not isinstance(form, list) or not form or form[0] != FORM_HEAD:
        raise DeclarationError(f"expected ({FORM_HEAD} ...)", source=where)
    record: Dict[str, Any] = {}
    for entry in form[1:]:
        if not isinstance(entry, list) or not entry or not isinstance(entry[0], str):
            raise DeclarationError(f"expected (key value...), got {entry!r}", source=where)
        key = entry[0]
        field_name = field_for_key(key)
        if key in record:
            raise DeclarationError(f"key {key!r} given more than once", source=where)
        record[key] = _field_value(field_name, entry[1:])
    return record


def parse_declarations(text: str, source: str = "<string>") -> List[Dict[str, Any]]:
    """Parse declaration text into one mapping per ``bugpattern`` form."""
    forms = _parse_forms(text, source)
    records = [_form_to_mapping(form, i + 1, source) for i, form in enumerate(forms)]
    logger.debug("%s: %d declarations", source, len(records))
    return records


def load_declarations(path: Path) -> List[Dict[str, Any]]:
    """Read and parse one declaration file."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise DeclarationError(f"cannot read declarations: {exc}", source=str(path)) from exc
    return parse_declarations(text, source=str(path))


def load_declaration_files(paths: Iterable[Path]) -> List[Dict[str, Any]]:
    """Concatenate the declarations of several files, in order."""
    records: List[Dict[str, Any]] = []
    for path in paths:
        records.extend(load_declarations(path))
    return records


__all__ = [
    "FORM_HEAD",
    "parse_declarations",
    "load_declarations",
    "load_declaration_files",
]
