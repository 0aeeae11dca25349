"""Ordered first-match rule engine and the per-language rule registry.

A rule family is a strictly ordered list of independent predicates over a
CodeUnit. The engine returns the first finding; position, not severity,
breaks ties between rules that would both match.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Pattern, Sequence, Tuple

from ..models import CodeUnit, Issue, IssueCategory, Severity
from ..syntax import NodeKind
from .lexicon import Lexicon

logger = logging.getLogger(__name__)

# Units longer than this are skipped by every rule family
MAX_UNIT_SIZE = 10_000

PERFORMANCE = "performance"
SECURITY = "security"


@dataclass(frozen=True)
class Rule:
    """A named predicate ``CodeUnit -> Issue | None``."""

    name: str
    check: Callable[[CodeUnit], Optional[Issue]]

    def __call__(self, unit: CodeUnit) -> Optional[Issue]:
        return self.check(unit)


class RuleEngine:
    """Runs one rule family for one language."""

    def __init__(
        self,
        family: str,
        language: str,
        rules: Sequence[Rule],
        max_unit_size: int = MAX_UNIT_SIZE,
    ):
        """Initialize the engine.

        Args:
            family: Rule family name ('performance' or 'security')
            language: Language the rules were written for
            rules: Rules in priority order
            max_unit_size: Units with more characters than this are skipped
        """
        self.family = family
        self.language = language
        self.rules: Tuple[Rule, ...] = tuple(rules)
        self.max_unit_size = max_unit_size

    def evaluate(self, unit: CodeUnit, max_unit_size: Optional[int] = None) -> Optional[Issue]:
        """Return the first issue raised by the rules, or None.

        A rule that raises is logged and counts as no match.
        """
        limit = self.max_unit_size if max_unit_size is None else max_unit_size
        if unit.size > limit:
            logger.debug(f"Skipping {self.family} rules for {unit.id}: {unit.size} > {limit} characters")
            return None

        for rule in self.rules:
            try:
                issue = rule(unit)
            except Exception as e:
                logger.warning(f"{self.family} rule '{rule.name}' failed on {unit.id}: {e}")
                continue
            if issue is not None:
                return issue

        return None

    @property
    def rule_names(self) -> List[str]:
        return [rule.name for rule in self.rules]


class RuleRegistry:
    """Registry of rule engines keyed by (family, language).

    Languages with no registered engine for a family produce no issues.
    """

    _engines: Dict[Tuple[str, str], RuleEngine] = {}

    @classmethod
    def register(cls, engine: RuleEngine) -> None:
        """Register an engine under its family and language."""
        cls._engines[(engine.family, engine.language.lower())] = engine
        logger.info(f"Registered {engine.family} rules for {engine.language}")

    @classmethod
    def get(cls, family: str, language: str) -> Optional[RuleEngine]:
        return cls._engines.get((family, language.lower()))

    @classmethod
    def evaluate(
        cls, family: str, unit: CodeUnit, max_unit_size: Optional[int] = None
    ) -> Optional[Issue]:
        """Evaluate the family registered for the unit's language."""
        engine = cls.get(family, unit.language)
        if engine is None:
            logger.debug(f"No {family} rules registered for {unit.language}")
            return None
        return engine.evaluate(unit, max_unit_size)

    @classmethod
    def languages(cls, family: str) -> List[str]:
        """Languages with an engine registered for a family."""
        return sorted(language for registered, language in cls._engines if registered == family)


class RuleFamily(ABC):
    """Base class for a rule family parameterised by a Lexicon."""

    FAMILY = ""

    def __init__(self, lexicon: Lexicon):
        self.lexicon = lexicon

    @abstractmethod
    def rules(self) -> List[Rule]:
        """Rules in priority order."""
        pass

    def engine(self, max_unit_size: int = MAX_UNIT_SIZE) -> RuleEngine:
        return RuleEngine(self.FAMILY, self.lexicon.language, self.rules(), max_unit_size)

    def issue(self, category: IssueCategory, severity: Severity, key: str, **values) -> Issue:
        return Issue(category=category, message=self.lexicon.message(key, **values), severity=severity)

    # ------------------------------------------------------------------
    # Queries shared by the families
    # ------------------------------------------------------------------

    def loop_texts(self, unit: CodeUnit, limit: int = 20) -> List[str]:
        """Lower-cased text of each loop in the unit.

        With a structured tree these are the loop statements plus calls that
        iterate a lambda. Without one, everything from the first loop keyword
        on is treated as a single loop.
        """
        if unit.structured_node is not None:
            texts = []
            for node in unit.structured_node.walk():
                if node.is_loop or (
                    node.kind is NodeKind.CALL and node.name in self.lexicon.iteration_calls
                ):
                    texts.append(node.text.lower())
                    if len(texts) >= limit:
                        break
            return texts

        match = self.lexicon.loop_pattern.search(unit.lower_text)
        return [unit.lower_text[match.start():]] if match else []

    @staticmethod
    def contains_any(text: str, markers: Iterable[str]) -> bool:
        return any(marker in text for marker in markers)

    @staticmethod
    def matches_group(text: str, groups: Iterable[Tuple[str, ...]]) -> bool:
        """True when every marker of at least one group is present."""
        return any(all(marker in text for marker in group) for group in groups)

    @staticmethod
    def max_size(text: str, patterns: Iterable[Pattern[str]]) -> Optional[int]:
        """Largest ``size`` group matched by any pattern."""
        sizes = [
            int(match.group("size").replace("_", ""))
            for pattern in patterns
            for match in pattern.finditer(text)
        ]
        return max(sizes) if sizes else None
