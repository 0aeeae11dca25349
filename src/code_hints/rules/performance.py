"""Performance anti-pattern rules.

One rule family, instantiated per language from its Lexicon. Rules run in
priority order and the first finding wins.
"""

import logging
from typing import List, Optional

from ..models import CodeUnit, Issue, IssueCategory, Severity
from .engine import PERFORMANCE, Rule, RuleFamily, RuleRegistry
from .lexicon import LEXICONS, REPOSITORY_CALL

logger = logging.getLogger(__name__)

LARGE_COLLECTION_THRESHOLD = 10_000
LARGE_ARRAY_THRESHOLD = 100_000


class PerformanceRules(RuleFamily):
    """Six performance heuristics, highest priority first."""

    FAMILY = PERFORMANCE

    def rules(self) -> List[Rule]:
        return [
            Rule("n_plus_one_query", self.check_n_plus_one_query),
            Rule("inefficient_collection_ops", self.check_inefficient_collections),
            Rule("memory_leak_risk", self.check_memory_leak_risk),
            Rule("blocking_main_thread", self.check_blocking_main_thread),
            Rule("large_allocation", self.check_large_allocation),
            Rule("boxing_overhead", self.check_boxing_overhead),
        ]

    def check_n_plus_one_query(self, unit: CodeUnit) -> Optional[Issue]:
        """A repository lookup or raw query executed once per loop iteration."""
        for loop_text in self.loop_texts(unit):
            if REPOSITORY_CALL.search(loop_text) or self.contains_any(loop_text, self.lexicon.query_markers):
                return self.issue(IssueCategory.N_PLUS_ONE_QUERY, Severity.CRITICAL, "n_plus_one_query")
        return None

    def check_inefficient_collections(self, unit: CodeUnit) -> Optional[Issue]:
        """Chained transforms over a collection with no parallel or lazy form."""
        lexicon = self.lexicon
        text = unit.lower_text

        if not lexicon.chain_pairs:
            return None
        if not all(marker in text for marker in lexicon.chain_required):
            return None
        if not self.matches_group(text, lexicon.chain_pairs):
            return None

        operation_count = sum(text.count(op) for op in lexicon.chain_ops)
        if operation_count < lexicon.chain_min_ops:
            return None
        if self.contains_any(text, lexicon.lazy_markers):
            return None

        return self.issue(
            IssueCategory.INEFFICIENT_COLLECTION_OPS, Severity.MEDIUM, "inefficient_collection_ops"
        )

    def check_memory_leak_risk(self, unit: CodeUnit) -> Optional[Issue]:
        """A listener never removed, or a thread/coroutine/timer never stopped."""
        lexicon = self.lexicon
        text = unit.lower_text

        if self.contains_any(text, lexicon.listener_add) and not self.contains_any(text, lexicon.listener_remove):
            return self.issue(IssueCategory.MEMORY_LEAK_RISK, Severity.HIGH, "listener_leak")

        if self.matches_group(text, lexicon.thread_start) and not self.contains_any(text, lexicon.thread_stop):
            return self.issue(IssueCategory.MEMORY_LEAK_RISK, Severity.HIGH, "thread_leak")

        return None

    def check_blocking_main_thread(self, unit: CodeUnit) -> Optional[Issue]:
        """A blocking call inside a UI, event-dispatch or event-loop context."""
        lexicon = self.lexicon
        text = unit.lower_text

        in_context = unit.declared_name in lexicon.ui_names or self.contains_any(text, lexicon.ui_markers)
        if in_context and self.contains_any(text, lexicon.blocking_markers):
            return self.issue(IssueCategory.BLOCKING_MAIN_THREAD, Severity.CRITICAL, "blocking_main_thread")
        return None

    def check_large_allocation(self, unit: CodeUnit) -> Optional[Issue]:
        text = unit.lower_text

        size = self.max_size(text, self.lexicon.collection_allocation)
        if size is not None and size > LARGE_COLLECTION_THRESHOLD:
            return self.issue(IssueCategory.LARGE_ALLOCATION, Severity.MEDIUM, "large_allocation", size=size)

        size = self.max_size(text, self.lexicon.array_allocation)
        if size is not None and size > LARGE_ARRAY_THRESHOLD:
            return self.issue(IssueCategory.LARGE_ALLOCATION, Severity.MEDIUM, "large_array_allocation", size=size)

        return None

    def check_boxing_overhead(self, unit: CodeUnit) -> Optional[Issue]:
        """A boxed numeric collection indexed or appended to inside a loop."""
        lexicon = self.lexicon
        if not self.contains_any(unit.lower_text, lexicon.boxed_types):
            return None

        for loop_text in self.loop_texts(unit):
            if self.contains_any(loop_text, lexicon.boxed_access):
                return self.issue(IssueCategory.BOXING_OVERHEAD, Severity.LOW, "boxing_overhead")
        return None


# Register one engine per language
for _lexicon in LEXICONS.values():
    RuleRegistry.register(PerformanceRules(_lexicon).engine())
