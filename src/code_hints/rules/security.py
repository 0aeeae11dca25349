"""Security anti-pattern rules.

One rule family, instantiated per language from its Lexicon. Rules run in
priority order and the first finding wins.
"""

import logging
import re
from typing import Iterator, List, Optional, Tuple

from ..models import CodeUnit, Issue, IssueCategory, Severity
from ..syntax import NodeKind
from .engine import SECURITY, Rule, RuleFamily, RuleRegistry
from .lexicon import CREDENTIAL_TOKENS, LEXICONS, SECURITY_CONTEXT_TOKENS, SQL_KEYWORDS

logger = logging.getLogger(__name__)

# Structured queries stop after this many string literals
MAX_LITERALS = 50

STRING_LITERAL = re.compile(r'"(?:[^"\\\n]|\\.)*"|\'(?:[^\'\\\n]|\\.)*\'|`(?:[^`\\]|\\.)*`')

# name = "value", name: Type = "value"; never ==, !=, <=, >=
LITERAL_ASSIGNMENT = re.compile(
    r"(?P<name>[A-Za-z_$][\w$]*)\s*(?::[^=\n]*?)?(?<![=!<>])=(?!=)\s*"
    r"(?:\"(?P<dq>[^\"\n]+)\"|'(?P<sq>[^'\n]+)'|`(?P<bq>[^`\n]+)`)"
)


def contains_sql_keyword(text: str) -> bool:
    return any(keyword in text for keyword in SQL_KEYWORDS)


def is_credential_name(name: str) -> bool:
    lowered = name.lower()
    return any(token in lowered for token in CREDENTIAL_TOKENS)


class SecurityRules(RuleFamily):
    """Six security heuristics, highest priority first."""

    FAMILY = SECURITY

    def rules(self) -> List[Rule]:
        return [
            Rule("sql_injection", self.check_sql_injection),
            Rule("hardcoded_credentials", self.check_hardcoded_credentials),
            Rule("path_traversal", self.check_path_traversal),
            Rule("insecure_random", self.check_insecure_random),
            Rule("command_injection", self.check_command_injection),
            Rule("xss", self.check_xss),
        ]

    def check_sql_injection(self, unit: CodeUnit) -> Optional[Issue]:
        """SQL text built by concatenation or interpolation.

        A string literal must itself contain a SQL keyword, so identifiers
        such as ``updateUser`` next to a ``+`` do not count.
        """
        text = unit.lower_text
        if not contains_sql_keyword(text):
            return None
        if not self.contains_any(text, self.lexicon.concat_markers):
            return None

        if any(contains_sql_keyword(literal.lower()) for literal in self.string_literals(unit)):
            return self.issue(IssueCategory.SQL_INJECTION, Severity.CRITICAL, "sql_injection")
        return None

    def check_hardcoded_credentials(self, unit: CodeUnit) -> Optional[Issue]:
        """A credential-named variable initialised from a non-empty literal."""
        for name, value in self.literal_declarations(unit):
            if value and is_credential_name(name):
                return self.issue(IssueCategory.HARDCODED_CREDENTIALS, Severity.CRITICAL, "hardcoded_credentials")
        return None

    def check_path_traversal(self, unit: CodeUnit) -> Optional[Issue]:
        lexicon = self.lexicon
        text = unit.lower_text

        if not self.contains_any(text, lexicon.file_markers):
            return None
        if self.contains_any(text, lexicon.concat_markers) and not self.contains_any(text, lexicon.path_validation):
            return self.issue(IssueCategory.PATH_TRAVERSAL, Severity.HIGH, "path_traversal")
        return None

    def check_insecure_random(self, unit: CodeUnit) -> Optional[Issue]:
        text = unit.lower_text
        if self.lexicon.random_pattern.search(text) and self.contains_any(text, SECURITY_CONTEXT_TOKENS):
            return self.issue(IssueCategory.INSECURE_RANDOM, Severity.HIGH, "insecure_random")
        return None

    def check_command_injection(self, unit: CodeUnit) -> Optional[Issue]:
        text = unit.lower_text
        if self.contains_any(text, self.lexicon.command_markers) and self.contains_any(
            text, self.lexicon.concat_markers
        ):
            return self.issue(IssueCategory.COMMAND_INJECTION, Severity.CRITICAL, "command_injection")
        return None

    def check_xss(self, unit: CodeUnit) -> Optional[Issue]:
        """Request input concatenated into HTML output without escaping."""
        lexicon = self.lexicon
        text = unit.lower_text

        if not self.contains_any(text, lexicon.html_output):
            return None
        if not (self.contains_any(text, lexicon.concat_markers) and self.contains_any(text, lexicon.external_input)):
            return None
        if self.contains_any(text, lexicon.escaping_markers):
            return None

        return self.issue(IssueCategory.XSS, Severity.HIGH, "xss")

    # ------------------------------------------------------------------
    # Literal queries
    # ------------------------------------------------------------------

    @staticmethod
    def string_literals(unit: CodeUnit) -> Iterator[str]:
        """Contents of the unit's string literals."""
        if unit.structured_node is not None:
            for index, node in enumerate(unit.structured_node.find_all(NodeKind.STRING)):
                if index >= MAX_LITERALS:
                    return
                yield node.value or ""
            return

        for match in STRING_LITERAL.finditer(unit.source_text):
            yield match.group(0)[1:-1]

    @staticmethod
    def literal_declarations(unit: CodeUnit) -> Iterator[Tuple[str, str]]:
        """``(name, literal value)`` for declarations initialised from a string literal."""
        if unit.structured_node is not None:
            for node in unit.structured_node.find_all(NodeKind.DECLARATION):
                if node.value is not None:
                    yield node.name, node.value
            return

        for match in LITERAL_ASSIGNMENT.finditer(unit.source_text):
            yield match.group("name"), match.group("dq") or match.group("sq") or match.group("bq")


# Register one engine per language
for _lexicon in LEXICONS.values():
    RuleRegistry.register(SecurityRules(_lexicon).engine())
