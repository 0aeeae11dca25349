"""Short annotation labels for analysis results.

Formats a ComplexityResult or Issue as the one-line text an editor shows next
to a function, e.g. ``⚙️ Complexity: O(n) - single loop``.
"""

from typing import Dict, List, Optional

from .models import AnalysisReport, ComplexityResult, Issue, IssueCategory, Severity, TimeClass

SEVERITY_GLYPHS = {
    Severity.CRITICAL: "🔴",
    Severity.HIGH: "🟠",
    Severity.MEDIUM: "🟡",
    Severity.LOW: "🔵",
}

TIME_CLASS_REASONS = {
    TimeClass.CONSTANT: "constant time",
    TimeClass.LOGARITHMIC: "logarithmic pattern detected",
    TimeClass.LINEARITHMIC: "sorting algorithm",
    TimeClass.QUADRATIC: "nested loops (depth 2)",
    TimeClass.CUBIC: "nested loops (depth 3+)",
    TimeClass.EXPONENTIAL: "double recursion",
    TimeClass.FACTORIAL: "factorial/permutation pattern",
}

SECURITY_CATEGORIES = frozenset({
    IssueCategory.SQL_INJECTION,
    IssueCategory.HARDCODED_CREDENTIALS,
    IssueCategory.PATH_TRAVERSAL,
    IssueCategory.INSECURE_RANDOM,
    IssueCategory.COMMAND_INJECTION,
    IssueCategory.XSS,
})


def _evidence_values(evidence: List[str]) -> Dict[str, int]:
    values = {}
    for line in evidence:
        key, _, value = line.partition(":")
        try:
            values[key.strip()] = int(value.strip())
        except ValueError:
            continue
    return values


def complexity_reason(result: ComplexityResult) -> str:
    """Human-readable reason for a result's time class."""
    if result.time_class is TimeClass.LINEAR:
        values = _evidence_values(result.evidence)
        if values.get("Loops", 0) > 0:
            return "single loop"
        if values.get("Recursion", 0) > 0:
            return "recursive call"
        return "linear operation"
    return TIME_CLASS_REASONS.get(result.time_class, "detected pattern")


def complexity_label(result: Optional[ComplexityResult]) -> str:
    if result is None or result.time_class is TimeClass.UNCLASSIFIED:
        return "⚙️ Complexity: O(?)"
    return f"⚙️ Complexity: {result.time_class.value} - {complexity_reason(result)}"


def issue_label(issue: Issue) -> str:
    """Label for a finding, prefixed by its severity glyph and family."""
    family = "Security" if issue.category in SECURITY_CATEGORIES else "Performance"
    return f"{SEVERITY_GLYPHS[issue.severity]} {family}: {issue.message}"


def report_labels(report: AnalysisReport) -> List[str]:
    """Every label for a report: complexity first, then findings."""
    labels = []
    if report.complexity is not None:
        labels.append(complexity_label(report.complexity))
    labels.extend(issue_label(issue) for issue in report.issues)
    return labels
