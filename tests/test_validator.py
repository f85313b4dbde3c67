# tests/test_validator.py
"""
Tests for the per-descriptor consistency rules: every violation is
reported, warnings stay warnings unless strict.
"""

import pytest

from bugpattern.descriptor import (
    BugPatternDescriptor,
    LinkType,
    SeverityLevel,
    Suppressibility,
)
from bugpattern.errors import RuleId, ValidationError, ViolationLevel
from bugpattern.validator import check, has_block_markup, validate


def _descriptor(**overrides):
    fields = dict(name="UnusedVar", summary="Variable is never read",
                  severity=SeverityLevel.WARNING)
    fields.update(overrides)
    return BugPatternDescriptor(**fields)


def _rules(report):
    return [v.rule for v in report.violations]


class TestCleanDescriptor:

    def test_no_violations(self):
        report = check(_descriptor())
        assert report.ok
        assert report.violations == ()
        assert report.check == "UnusedVar"

    def test_validate_returns_report(self):
        assert validate(_descriptor()).ok

    def test_custom_link_with_url(self):
        d = _descriptor(link_type=LinkType.CUSTOM, link="https://example.com/unused")
        assert check(d).ok

    def test_custom_annotation_with_types(self):
        d = _descriptor(suppressibility=Suppressibility.CUSTOM_ANNOTATION,
                        custom_suppression_annotations={"com.example.Keep"})
        assert check(d).ok


class TestFatalRules:

    def test_custom_link_requires_link(self):
        report = check(_descriptor(link_type=LinkType.CUSTOM))
        assert _rules(report) == [RuleId.CUSTOM_LINK_REQUIRED]
        assert not report.ok

    def test_blank_custom_link(self):
        report = check(_descriptor(link_type=LinkType.CUSTOM, link="   "))
        assert RuleId.CUSTOM_LINK_REQUIRED in _rules(report)

    def test_custom_annotation_requires_annotations(self):
        report = check(_descriptor(suppressibility=Suppressibility.CUSTOM_ANNOTATION))
        assert _rules(report) == [RuleId.CUSTOM_ANNOTATION_REQUIRED]

    def test_empty_summary(self):
        report = check(_descriptor(summary="  "))
        assert _rules(report) == [RuleId.EMPTY_SUMMARY]

    def test_trailing_period(self):
        report = check(_descriptor(summary="Variable is never read."))
        assert _rules(report) == [RuleId.SUMMARY_TRAILING_PERIOD]

    @pytest.mark.parametrize("summary", [
        "First line\nsecond line",
        "# Heading",
        "- bullet item",
        "1. ordered item",
        "> quoted",
        "uses ``` fences",
        "***",
    ])
    def test_block_markup(self, summary):
        report = check(_descriptor(summary=summary))
        assert RuleId.SUMMARY_BLOCK_MARKUP in _rules(report)

    def test_inline_markup_allowed(self):
        assert check(_descriptor(summary="`x` is *never* read")).ok

    def test_empty_name(self):
        report = check(_descriptor(name=""))
        assert RuleId.EMPTY_NAME in _rules(report)

    def test_name_repeated_in_alt_names(self):
        report = check(_descriptor(alt_names={"UnusedVar", "unused"}))
        assert _rules(report) == [RuleId.NAME_IN_ALT_NAMES]

    @pytest.mark.parametrize("name", [" UnusedVar", "UnusedVar ", "\tUnusedVar"])
    def test_name_surrounding_whitespace(self, name):
        report = check(_descriptor(name=name))
        assert _rules(report) == [RuleId.NAME_SURROUNDING_WHITESPACE]
        with pytest.raises(ValidationError):
            validate(_descriptor(name=name))

    def test_alt_name_surrounding_whitespace(self):
        report = check(_descriptor(alt_names={"unused ", "", "ok"}))
        assert _rules(report) == [
            RuleId.NAME_SURROUNDING_WHITESPACE,
            RuleId.NAME_SURROUNDING_WHITESPACE,
        ]
        assert {v.field for v in report.violations} == {"alt_names"}

    def test_blank_name_is_only_empty(self):
        assert _rules(check(_descriptor(name="  "))) == [RuleId.EMPTY_NAME]


class TestAllViolationsReported:

    def test_link_and_annotation_both_reported(self):
        d = _descriptor(link_type=LinkType.CUSTOM,
                        suppressibility=Suppressibility.CUSTOM_ANNOTATION)
        with pytest.raises(ValidationError) as exc_info:
            validate(d)
        assert set(exc_info.value.rules) == {
            RuleId.CUSTOM_LINK_REQUIRED,
            RuleId.CUSTOM_ANNOTATION_REQUIRED,
        }
        assert exc_info.value.check == "UnusedVar"

    def test_error_message_lists_codes(self):
        d = _descriptor(link_type=LinkType.CUSTOM, summary="Ends with period.")
        with pytest.raises(ValidationError) as exc_info:
            validate(d)
        text = str(exc_info.value)
        assert "BP-0001" in text
        assert "BP-0006" in text


class TestWarnings:

    def test_unused_link(self):
        report = check(_descriptor(link="https://example.com/ignored"))
        assert report.ok
        assert [v.rule for v in report.warnings] == [RuleId.UNUSED_LINK]
        assert report.warnings[0].level is ViolationLevel.WARNING

    def test_unused_annotations(self):
        report = check(_descriptor(custom_suppression_annotations={"com.example.Keep"}))
        assert report.ok
        assert [v.rule for v in report.warnings] == [RuleId.UNUSED_CUSTOM_ANNOTATIONS]

    def test_warnings_do_not_raise(self):
        validate(_descriptor(link_type=LinkType.NONE, link="https://example.com"))

    def test_strict_promotes_warnings(self):
        d = _descriptor(link="https://example.com/ignored")
        report = check(d, strict=True)
        assert not report.ok
        assert report.errors[0].rule is RuleId.UNUSED_LINK
        with pytest.raises(ValidationError):
            validate(d, strict=True)


class TestBlockMarkupHelper:

    @pytest.mark.parametrize("text,expected", [
        ("plain text", False),
        ("a - b", False),
        ("version 1.2 is fine", False),
        ("## h2", True),
        ("  * star bullet", True),
        ("line\r\nbreak", True),
        ("~~~", True),
    ])
    def test_has_block_markup(self, text, expected):
        assert has_block_markup(text) is expected


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
