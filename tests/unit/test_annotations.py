"""Tests for annotation labels."""

import pytest

from code_hints.annotations import complexity_label, issue_label, report_labels
from code_hints.models import (
    AnalysisReport,
    ComplexityResult,
    Issue,
    IssueCategory,
    Severity,
    SpaceClass,
    TimeClass,
)


def result(time_class, loops=0, recursion=0):
    return ComplexityResult(
        time_class=time_class,
        space_class=SpaceClass.CONSTANT,
        evidence=[f"Loops: {loops}", "Max depth: 0", f"Recursion: {recursion}", "Double recursion: 0"],
    )


class TestComplexityLabel:
    def test_single_loop(self):
        assert complexity_label(result(TimeClass.LINEAR, loops=1)) == "⚙️ Complexity: O(n) - single loop"

    def test_linear_recursion(self):
        assert complexity_label(result(TimeClass.LINEAR, recursion=1)) == "⚙️ Complexity: O(n) - recursive call"

    def test_linear_stream(self):
        assert complexity_label(result(TimeClass.LINEAR)) == "⚙️ Complexity: O(n) - linear operation"

    @pytest.mark.parametrize(
        "time_class,label",
        [
            (TimeClass.CONSTANT, "⚙️ Complexity: O(1) - constant time"),
            (TimeClass.LOGARITHMIC, "⚙️ Complexity: O(log n) - logarithmic pattern detected"),
            (TimeClass.LINEARITHMIC, "⚙️ Complexity: O(n log n) - sorting algorithm"),
            (TimeClass.QUADRATIC, "⚙️ Complexity: O(n²) - nested loops (depth 2)"),
            (TimeClass.CUBIC, "⚙️ Complexity: O(n³) - nested loops (depth 3+)"),
            (TimeClass.EXPONENTIAL, "⚙️ Complexity: O(2ⁿ) - double recursion"),
            (TimeClass.FACTORIAL, "⚙️ Complexity: O(n!) - factorial/permutation pattern"),
        ],
    )
    def test_reasons(self, time_class, label):
        assert complexity_label(result(time_class)) == label

    def test_unclassified_and_missing(self):
        assert complexity_label(result(TimeClass.UNCLASSIFIED)) == "⚙️ Complexity: O(?)"
        assert complexity_label(None) == "⚙️ Complexity: O(?)"


class TestIssueLabel:
    def test_security_issue(self):
        issue = Issue(IssueCategory.SQL_INJECTION, "SQL Injection - Use parameterized queries", Severity.CRITICAL)
        assert issue_label(issue) == "🔴 Security: SQL Injection - Use parameterized queries"

    @pytest.mark.parametrize(
        "severity,glyph",
        [(Severity.CRITICAL, "🔴"), (Severity.HIGH, "🟠"), (Severity.MEDIUM, "🟡"), (Severity.LOW, "🔵")],
    )
    def test_performance_glyphs(self, severity, glyph):
        issue = Issue(IssueCategory.LARGE_ALLOCATION, "msg", severity)
        assert issue_label(issue) == f"{glyph} Performance: msg"


class TestReportLabels:
    def test_complexity_then_performance_then_security(self):
        report = AnalysisReport(
            unit_id="java:f",
            language="java",
            complexity=result(TimeClass.LINEAR, loops=1),
            performance=Issue(IssueCategory.BOXING_OVERHEAD, "boxing", Severity.LOW),
            security=Issue(IssueCategory.XSS, "xss", Severity.HIGH),
        )

        assert report_labels(report) == [
            "⚙️ Complexity: O(n) - single loop",
            "🔵 Performance: boxing",
            "🟠 Security: xss",
        ]

    def test_empty_report(self):
        assert report_labels(AnalysisReport(unit_id="java:f", language="java")) == []
