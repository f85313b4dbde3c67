# tests/test_registry.py
"""
Tests for the Registry (strict) and build_registry (lenient).
"""

import logging

import pytest

from bugpattern.config import RegistryConfig
from bugpattern.descriptor import (
    BugPatternDescriptor,
    LinkType,
    SeverityLevel,
    Suppressibility,
)
from bugpattern.errors import RuleId, UndisableableCheck, ValidationError
from bugpattern.registry import Registry, build_registry


def _descriptor(name, **overrides):
    fields = dict(name=name, summary=f"{name} summary", severity=SeverityLevel.WARNING)
    fields.update(overrides)
    return BugPatternDescriptor(**fields)


@pytest.fixture
def registry():
    return Registry([
        _descriptor("UnusedVar", alt_names={"unused", "UnusedVariable"}),
        _descriptor("NullDeref", severity=SeverityLevel.ERROR,
                    suppressibility=Suppressibility.UNSUPPRESSIBLE),
        _descriptor("DeadStore"),
    ])


class TestLookup:

    def test_every_name_and_alt_name_resolves(self, registry):
        for d in registry:
            for key in d.all_names:
                assert registry[key] is d
                assert registry.get(key) is d
                assert key in registry

    def test_alt_name_and_name_same_descriptor(self, registry):
        assert registry["unused"] is registry["UnusedVar"]
        assert registry.resolve("UnusedVariable") is registry["UnusedVar"]

    def test_lookup_returns_same_object(self):
        d = _descriptor("UnusedVar", alt_names={"unused"})
        assert Registry([d]).resolve("unused") is d

    def test_unknown_name(self, registry):
        assert registry.get("Nope") is None
        assert "Nope" not in registry
        with pytest.raises(KeyError, match="Nope"):
            registry["Nope"]

    def test_iteration_order_and_len(self, registry):
        assert [d.name for d in registry] == ["UnusedVar", "NullDeref", "DeadStore"]
        assert len(registry) == 3

    def test_names_sorted(self, registry):
        assert registry.names == ["DeadStore", "NullDeref", "UnusedVar"]

    def test_index_is_read_only(self, registry):
        assert set(registry.index) == {
            "UnusedVar", "unused", "UnusedVariable", "NullDeref", "DeadStore",
        }
        with pytest.raises(TypeError):
            registry.index["Other"] = registry["DeadStore"]

    def test_empty_registry(self):
        empty = Registry()
        assert len(empty) == 0
        assert list(empty) == []

    def test_repr(self, registry):
        assert repr(registry) == "<Registry 3 checks>"


class TestStrictConstruction:

    def test_alt_name_collides_with_name(self):
        with pytest.raises(ValidationError) as exc_info:
            Registry([_descriptor("A"), _descriptor("B", alt_names={"A"})])
        assert set(exc_info.value.rules) == {RuleId.NAME_COLLISION}
        assert len(exc_info.value.violations) == 2

    def test_shared_alt_name(self):
        with pytest.raises(ValidationError):
            Registry([_descriptor("A", alt_names={"x"}), _descriptor("B", alt_names={"x"})])

    def test_duplicate_name(self):
        with pytest.raises(ValidationError):
            Registry([_descriptor("A"), _descriptor("A")])

    def test_invalid_descriptor(self):
        with pytest.raises(ValidationError) as exc_info:
            Registry([_descriptor("A", link_type=LinkType.CUSTOM)])
        assert exc_info.value.rules == [RuleId.CUSTOM_LINK_REQUIRED]

    def test_warnings_allowed_unless_strict(self):
        d = _descriptor("A", link="https://ignored.example.com")
        assert len(Registry([d])) == 1
        with pytest.raises(ValidationError):
            Registry([d], strict=True)


class TestActive:

    def test_disable_by_name(self, registry):
        assert [d.name for d in registry.active(["DeadStore"])] == ["UnusedVar", "NullDeref"]

    def test_disable_by_alt_name(self, registry):
        assert "UnusedVar" not in [d.name for d in registry.active(["unused"])]

    def test_nothing_disabled(self, registry):
        assert registry.active() == list(registry)

    def test_undisableable(self, registry):
        with pytest.raises(UndisableableCheck) as exc_info:
            registry.active(["NullDeref"])
        assert exc_info.value.check == "NullDeref"

    def test_custom_annotation_undisableable(self):
        reg = Registry([_descriptor("A", suppressibility=Suppressibility.CUSTOM_ANNOTATION,
                                    custom_suppression_annotations={"com.example.Keep"})])
        with pytest.raises(UndisableableCheck):
            reg.active(["A"])

    def test_unknown(self, registry):
        with pytest.raises(KeyError):
            registry.active(["Nope"])


class TestBuildRegistry:
    """The lenient build excludes bad checks and keeps the rest live."""

    def test_all_good(self):
        build = build_registry([
            {"name": "A", "summary": "a", "severity": "ERROR"},
            _descriptor("B"),
        ])
        assert build.ok
        assert build.registry.names == ["A", "B"]
        assert build.rejected == ()

    def test_malformed_declaration_excluded(self):
        build = build_registry([
            {"name": "Good", "summary": "fine", "severity": "WARNING"},
            {"name": "NoSeverity", "summary": "missing"},
        ])
        assert not build.ok
        assert build.registry.names == ["Good"]
        [rejected] = build.rejected
        assert rejected.name == "NoSeverity"
        assert rejected.violations[0].rule is RuleId.MALFORMED

    def test_invalid_descriptor_excluded(self):
        build = build_registry([
            _descriptor("Good"),
            _descriptor("BadLink", link_type=LinkType.CUSTOM, summary="Bad."),
        ])
        assert build.registry.names == ["Good"]
        [rejected] = build.rejected
        assert {v.rule for v in rejected.violations} == {
            RuleId.CUSTOM_LINK_REQUIRED, RuleId.SUMMARY_TRAILING_PERIOD,
        }

    def test_collision_excludes_every_claimant(self):
        build = build_registry([
            _descriptor("A"),
            _descriptor("B", alt_names={"A"}),
            _descriptor("C"),
        ])
        assert build.registry.names == ["C"]
        assert sorted(r.name for r in build.rejected) == ["A", "B"]
        assert "A" not in build.registry

    def test_warnings_surface(self):
        build = build_registry([_descriptor("A", link="https://ignored.example.com")])
        assert build.ok
        [(name, warning)] = build.warnings
        assert name == "A"
        assert warning.rule is RuleId.UNUSED_LINK

    def test_strict_config_rejects_warnings(self):
        build = build_registry(
            [_descriptor("A", link="https://ignored.example.com")],
            RegistryConfig(strict=True),
        )
        assert len(build.registry) == 0
        assert build.rejected[0].name == "A"

    def test_unnamed_declaration(self):
        build = build_registry([{"summary": "s", "severity": "ERROR"}])
        assert build.rejected[0].name == "<unnamed>"

    def test_rejections_logged(self, caplog):
        with caplog.at_level(logging.ERROR, logger="bugpattern"):
            build_registry([{"name": "Broken", "summary": "s"}])
        assert "Broken" in caplog.text

    def test_rejected_str(self):
        build = build_registry([_descriptor("BadLink", link_type=LinkType.CUSTOM)])
        assert str(build.rejected[0]).startswith("BadLink: [BP-0001] link:")


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
