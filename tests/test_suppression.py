# tests/test_suppression.py
"""
Tests for suppression resolution at a diagnostic site.
"""

import pytest

from bugpattern.descriptor import BugPatternDescriptor, SeverityLevel, Suppressibility
from bugpattern.suppression import (
    EMPTY_CONTEXT,
    SuppressionContext,
    SuppressionPolicy,
    is_suppressed,
)

KEEP = "com.example.annotations.KeepUnused"


def _descriptor(**overrides):
    fields = dict(name="UnusedVar", summary="Variable is never read",
                  severity=SeverityLevel.WARNING)
    fields.update(overrides)
    return BugPatternDescriptor(**fields)


@pytest.fixture
def warnings_check():
    return _descriptor(alt_names={"unused"})


@pytest.fixture
def annotation_check():
    return _descriptor(suppressibility=Suppressibility.CUSTOM_ANNOTATION,
                       custom_suppression_annotations={KEEP})


class TestSuppressWarnings:

    def test_name_suppresses(self, warnings_check):
        assert is_suppressed(warnings_check, SuppressionContext.of(["UnusedVar"]))

    def test_alt_name_suppresses(self, warnings_check):
        assert is_suppressed(warnings_check, SuppressionContext.of(["unused"]))

    def test_match_is_case_sensitive(self, warnings_check):
        assert not is_suppressed(warnings_check, SuppressionContext.of(["unusedvar"]))

    def test_other_names_do_not_suppress(self, warnings_check):
        assert not is_suppressed(warnings_check, SuppressionContext.of(["DeadStore", "all"]))

    def test_empty_context(self, warnings_check):
        assert not is_suppressed(warnings_check, EMPTY_CONTEXT)

    def test_annotations_ignored(self, warnings_check):
        context = SuppressionContext.of(annotations=[KEEP, "UnusedVar"])
        assert not is_suppressed(warnings_check, context)

    @pytest.mark.parametrize("severity", list(SeverityLevel))
    def test_severity_plays_no_part(self, severity):
        d = _descriptor(severity=severity)
        assert is_suppressed(d, SuppressionContext.of(["UnusedVar"]))


class TestCustomAnnotation:

    def test_annotation_suppresses(self, annotation_check):
        assert is_suppressed(annotation_check, SuppressionContext.of(annotations=[KEEP]))

    def test_suppress_warnings_name_does_not(self, annotation_check):
        context = SuppressionContext.of(["UnusedVar"])
        assert not is_suppressed(annotation_check, context)

    def test_any_of_several_annotations(self):
        d = _descriptor(suppressibility=Suppressibility.CUSTOM_ANNOTATION,
                        custom_suppression_annotations={KEEP, "com.example.Generated"})
        context = SuppressionContext.of(annotations=["com.example.Generated"])
        assert is_suppressed(d, context)

    def test_simple_name_is_not_the_identity(self, annotation_check):
        context = SuppressionContext.of(annotations=["KeepUnused"])
        assert not is_suppressed(annotation_check, context)


class TestUnsuppressible:

    @pytest.mark.parametrize("context", [
        EMPTY_CONTEXT,
        SuppressionContext.of(["UnusedVar"]),
        SuppressionContext.of(["UnusedVar", "unused", "all"], [KEEP]),
        SuppressionContext.of(annotations=[KEEP]),
    ])
    def test_never_suppressed(self, context):
        d = _descriptor(alt_names={"unused"},
                        suppressibility=Suppressibility.UNSUPPRESSIBLE,
                        custom_suppression_annotations={KEEP})
        assert is_suppressed(d, context) is False


class TestContext:
    """Contexts merge the suppression of enclosing scopes."""

    def test_nested_inherits_outer(self, warnings_check):
        outer = SuppressionContext.of(["UnusedVar"])
        inner = outer.nested(["DeadStore"])
        assert inner.suppress_warnings == {"UnusedVar", "DeadStore"}
        assert is_suppressed(warnings_check, inner)

    def test_enclosing_merges_scopes(self, annotation_check):
        merged = SuppressionContext.enclosing(
            SuppressionContext.of(["a"]),
            SuppressionContext.of(annotations=[KEEP]),
            EMPTY_CONTEXT,
        )
        assert merged.suppress_warnings == {"a"}
        assert merged.annotations == {KEEP}
        assert is_suppressed(annotation_check, merged)

    def test_plain_collections_are_frozen(self):
        context = SuppressionContext(["a", "a"], ("b",))
        assert context.suppress_warnings == frozenset({"a"})
        assert isinstance(context.annotations, frozenset)

    def test_empty(self):
        assert EMPTY_CONTEXT.empty
        assert not SuppressionContext.of(["x"]).empty


class TestPolicy:

    def test_default_policy_delegates(self):
        d = _descriptor(severity=SeverityLevel.ERROR)
        assert SuppressionPolicy().is_suppressed(d, SuppressionContext.of(["UnusedVar"]))

    def test_exempt_errors(self):
        policy = SuppressionPolicy(exempt_errors=True)
        error = _descriptor(severity=SeverityLevel.ERROR)
        warning = _descriptor(severity=SeverityLevel.WARNING)
        context = SuppressionContext.of(["UnusedVar"])
        assert not policy.is_suppressed(error, context)
        assert policy.is_suppressed(warning, context)

    def test_exempt_errors_keeps_custom_annotations(self):
        policy = SuppressionPolicy(exempt_errors=True)
        d = _descriptor(severity=SeverityLevel.ERROR,
                        suppressibility=Suppressibility.CUSTOM_ANNOTATION,
                        custom_suppression_annotations={KEEP})
        assert policy.is_suppressed(d, SuppressionContext.of(annotations=[KEEP]))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
