"""Performance and security rule families.

Importing this package registers a performance and a security engine for
every language in ``LEXICONS``.
"""

from .engine import MAX_UNIT_SIZE, PERFORMANCE, SECURITY, Rule, RuleEngine, RuleFamily, RuleRegistry
from .lexicon import LEXICONS, Lexicon
from .performance import PerformanceRules
from .security import SecurityRules

__all__ = [
    "MAX_UNIT_SIZE",
    "PERFORMANCE",
    "SECURITY",
    "LEXICONS",
    "Lexicon",
    "PerformanceRules",
    "Rule",
    "RuleEngine",
    "RuleFamily",
    "RuleRegistry",
    "SecurityRules",
]
