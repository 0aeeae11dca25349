"""Structured metrics collector.

Walks a code unit's SyntaxNode tree once, depth-first, and accumulates the
loop, call and allocation signals the complexity classifier works from.
"""

import logging
import re
from dataclasses import dataclass

from ..models import AnalysisMode, CodeUnit, Metrics
from ..syntax import COUNTED_LOOP_KINDS, NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

STREAM_CALLS = frozenset({"stream", "parallelStream", "map", "filter", "forEach"})

SORTING_CALLS = frozenset({
    "sort",
    "sorted",
    "mergeSort",
    "heapSort",
    "quickSort",
    "merge_sort",
    "heap_sort",
    "quick_sort",
})

COLLECTION_TYPE_MARKERS = ("List", "Map", "Set")

# Index-halving signatures scanned in a counted loop's condition, update and body
HALVING_PATTERNS = {
    # i /= 2, i = i / 2 (and Python floor division)
    "division": re.compile(r"\w+\s*//?=\s*\d+|\w+\s*=\s*\w+\s*//?\s*\d+"),
    # i *= 2, i = i * 2
    "multiplication": re.compile(r"\w+\s*\*=\s*\d+|\w+\s*=\s*\w+\s*\*\s*\d+"),
    # i >>= 1, i <<= 1, i = i >> 1, i = i << 1
    "bit_shift": re.compile(r"\w+\s*(?:>>|<<)=\s*\d+|\w+\s*=\s*\w+\s*(?:>>|<<)\s*\d+"),
}

# mid = (lo + hi) / 2, mid = lo + (hi - lo) / 2
MIDPOINT_PATTERN = re.compile(
    r"\w+\s*=\s*\(.*[+].*\)\s*//?\s*\d+|\w+\s*=\s*\w+\s*[+]\s*\(.*\)\s*//?\s*\d+"
)

# lo = mid + 1, hi = mid - 1
BOUNDS_UPDATE_PATTERN = re.compile(r"\w+\s*=\s*\w+\s*[+\-]\s*\d+")


@dataclass
class _Traversal:
    """Per-call traversal state."""

    metrics: Metrics
    function_name: str
    multiple_self_calls: bool
    depth: int = 0


class StructuredMetricsCollector:
    """Collects Metrics from a code unit's structured tree."""

    def collect(self, unit: CodeUnit) -> Metrics:
        """Collect metrics for a unit that carries a structured node.

        Faults during traversal are logged and the metrics gathered so far are
        returned.

        Args:
            unit: Code unit with ``structured_node`` set

        Returns:
            Metrics for the unit (all-zero when there is nothing to walk)
        """
        metrics = Metrics(mode=AnalysisMode.STRUCTURED)
        root = unit.structured_node
        if root is None:
            return metrics

        try:
            name = unit.declared_name or root.name
            self_calls = sum(1 for node in root.calls() if node.is_call_to(name)) if name else 0
            state = _Traversal(
                metrics=metrics,
                function_name=name,
                multiple_self_calls=self_calls >= 2,
            )
            self._visit(root, state)
        except Exception as e:
            logger.warning(f"Structured traversal of {unit.id} stopped early: {e}")

        return metrics

    def _visit(self, node: SyntaxNode, state: _Traversal) -> None:
        if node.is_loop:
            if node.kind in COUNTED_LOOP_KINDS:
                self._check_halving(node.iteration_text, state.metrics)
            self._enter_loop(state)
            try:
                self._visit_children(node, state)
            finally:
                self._exit_loop(state)
            return

        if node.kind is NodeKind.CALL:
            self._check_call(node, state)
        elif node.kind is NodeKind.ALLOCATION:
            if any(marker in node.name for marker in COLLECTION_TYPE_MARKERS):
                state.metrics.new_collections += 1

        self._visit_children(node, state)

    def _visit_children(self, node: SyntaxNode, state: _Traversal) -> None:
        for child in node.children:
            self._visit(child, state)

    @staticmethod
    def _enter_loop(state: _Traversal) -> None:
        state.metrics.loop_count += 1
        state.depth += 1
        if state.depth > state.metrics.max_nested_depth:
            state.metrics.max_nested_depth = state.depth

    @staticmethod
    def _exit_loop(state: _Traversal) -> None:
        state.depth = max(0, state.depth - 1)

    @staticmethod
    def _check_call(node: SyntaxNode, state: _Traversal) -> None:
        metrics = state.metrics
        callee = node.name

        if callee in STREAM_CALLS:
            metrics.stream_ops += 1

        if node.is_call_to(state.function_name):
            metrics.recursive_calls += 1
            # Counted per call site, so three self-calls add three
            if state.multiple_self_calls:
                metrics.double_recursive_calls += 1

        if callee == "binarySearch" or "log" in callee:
            metrics.has_logarithmic_pattern = True

        if callee in SORTING_CALLS:
            metrics.has_sorting_pattern = True

        # Permutations only; a plain factorial is linear
        if "permut" in callee.lower():
            metrics.has_factorial_pattern = True

    @staticmethod
    def _check_halving(text: str, metrics: Metrics) -> None:
        """Flag loops whose index is divided or multiplied each iteration."""
        if not text:
            return

        if any(pattern.search(text) for pattern in HALVING_PATTERNS.values()):
            metrics.has_binary_search_pattern = True
            metrics.has_logarithmic_pattern = True
            return

        if MIDPOINT_PATTERN.search(text) and BOUNDS_UPDATE_PATTERN.search(text):
            metrics.has_binary_search_pattern = True
            metrics.has_logarithmic_pattern = True
