"""Language-agnostic text-scan metrics collector.

Used when no structured tree is available for a code unit. Works line by line
on the raw text, so it cannot see allocations or stream pipelines; those
metrics stay at zero in this mode.
"""

import logging
import re
from typing import Optional, Pattern

from ..models import AnalysisMode, CodeUnit, Metrics

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = ("//", "#", "/*", "*")

LOOP_PATTERNS = (
    re.compile(r"\b(?:for|while|forEach|map|filter|reduce|loop|each|times)\b"),
    # Python-style: for x in items
    re.compile(r"\bfor\s+.*\bin\b"),
    re.compile(r"\.(?:forEach|map|filter)\b"),
)

LOOP_CLOSING = re.compile(r"^(?:\}|end\b)")

SORTING_KEYWORDS = re.compile(r"\b(?:sort|sorted|quicksort|mergesort|heapsort|timsort)\b", re.IGNORECASE)

PERMUTATION_KEYWORDS = re.compile(r"\b(?:permut|permute|permutation|permutations)\b", re.IGNORECASE)

LOGARITHMIC_PATTERNS = {
    # x = n / 2, x = n * 2 (assignment, not comparison or arrow)
    "halving_assignment": re.compile(r"(?<![=!<>])=(?![=>])[^;]*?[/*]\s*2\b"),
    # x /= 2, x //= 2, x *= 2, x >>= 1, x <<= 1
    "compound_assignment": re.compile(r"\w\s*(?://|/|\*|>>|<<)=\s*\d"),
    # log(n), log2(n), Math.log(n), math.log10(n), Log(n)
    "log_call": re.compile(
        r"(?:\b(?:Math|math|std|numpy|np|Mathf)\.|(?<![\w.]))[lL]og(?:2|10|1p)?\s*\("
    ),
    # operands on both sides of a shift operator
    "bit_shift": re.compile(r"\w\s*(?:>>>?|<<)\s*\w"),
}


class TextScanMetricsCollector:
    """Collects Metrics by scanning source text line by line."""

    def collect(self, unit: CodeUnit) -> Metrics:
        """Collect metrics from the unit's source text."""
        return self.collect_text(unit.source_text, unit.declared_name)

    def collect_text(self, text: str, declared_name: str = "") -> Metrics:
        """Scan raw text and optional declared name into Metrics.

        Args:
            text: Source text of the code unit
            declared_name: Name of the function, used to spot recursion

        Returns:
            Metrics in text mode
        """
        metrics = Metrics(mode=AnalysisMode.TEXT)
        call_pattern = self._call_pattern(declared_name)
        declaration_pattern = self._declaration_pattern(declared_name)
        signature_seen = False
        depth = 0

        try:
            for line in text.splitlines():
                stripped = line.strip()
                if not stripped or stripped.startswith(COMMENT_PREFIXES):
                    continue

                if self._is_loop(stripped):
                    metrics.loop_count += 1
                    depth += 1
                    metrics.max_nested_depth = max(metrics.max_nested_depth, depth)

                if LOOP_CLOSING.match(stripped):
                    depth = max(0, depth - 1)

                if call_pattern is not None:
                    starts = [match.start() for match in call_pattern.finditer(stripped)]
                    declaration = None if signature_seen else declaration_pattern.search(stripped)
                    if declaration is not None:
                        # Only calls after the declared name are self-calls
                        signature_seen = True
                        starts = [start for start in starts if start >= declaration.end()]
                    calls = len(starts)
                    if calls >= 1:
                        metrics.recursive_calls += 1
                    if calls >= 2:
                        metrics.double_recursive_calls += 1

                if SORTING_KEYWORDS.search(stripped):
                    metrics.has_sorting_pattern = True

                if PERMUTATION_KEYWORDS.search(stripped):
                    metrics.has_factorial_pattern = True

                if self._has_logarithmic_signal(stripped):
                    metrics.has_logarithmic_pattern = True
        except Exception as e:
            logger.warning(f"Text scan stopped early: {e}")

        return metrics

    @staticmethod
    def _call_pattern(declared_name: str) -> Optional[Pattern[str]]:
        if not declared_name:
            return None
        return re.compile(rf"(?<![\w$]){re.escape(declared_name)}\s*\(")

    @staticmethod
    def _declaration_pattern(declared_name: str) -> Optional[Pattern[str]]:
        """Header that declares the name: keyword, binding or typed C-family form."""
        if not declared_name:
            return None
        name = re.escape(declared_name)
        return re.compile(
            rf"\b(?:fun|fn|func|def|function|sub)\b[^=]*?(?<![\w$]){name}\b"
            # const fib = (n) => ..., val fib = ...
            rf"|\b(?:const|let|var|val)\s+{name}\b"
            # int fib(int n) {
            rf"|^(?!(?:return|await|yield|throw|else|elif|if|while|for|not|new|case|when|assert|print|echo)\b)"
            rf"(?:[\w$:<>*&,\[\]@]+\s+)+{name}\s*\("
        )

    @staticmethod
    def _is_loop(line: str) -> bool:
        return any(pattern.search(line) for pattern in LOOP_PATTERNS)

    @staticmethod
    def _has_logarithmic_signal(line: str) -> bool:
        return any(pattern.search(line) for pattern in LOGARITHMIC_PATTERNS.values())
