"""Language-neutral syntax tree consumed by the structured collector and rules.

Language front ends translate their parser's tree into ``SyntaxNode`` values
once. Everything downstream asks the node for its ``NodeKind`` or uses the
capability queries below; nothing inspects parser type names.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional, Tuple


class NodeKind(Enum):
    """Closed set of node kinds the analyzers understand."""

    UNIT = "unit"
    FUNCTION = "function"
    FOR = "for"
    FOREACH = "foreach"
    WHILE = "while"
    DO_WHILE = "do_while"
    CALL = "call"
    ALLOCATION = "allocation"
    DECLARATION = "declaration"
    STRING = "string"
    OTHER = "other"


LOOP_KINDS = frozenset({NodeKind.FOR, NodeKind.FOREACH, NodeKind.WHILE, NodeKind.DO_WHILE})

# Loops whose condition/update drive the iteration count
COUNTED_LOOP_KINDS = frozenset({NodeKind.FOR, NodeKind.WHILE, NodeKind.DO_WHILE})


@dataclass(frozen=True)
class SyntaxNode:
    """Immutable node of a code unit's syntax tree.

    Field meaning depends on ``kind``:

    - FUNCTION: ``name`` is the declared function name.
    - FOR/WHILE/DO_WHILE: ``iteration_text`` holds condition, update and body.
    - CALL: ``name`` is the callee, ``receiver`` the text before the final dot.
    - ALLOCATION: ``name`` is the allocated type name.
    - DECLARATION: ``name`` is the variable name, ``value`` the string literal
      it is initialised from (``None`` when the initialiser is not a literal).
    - STRING: ``value`` is the literal content without quotes.
    """

    kind: NodeKind
    text: str = ""
    name: str = ""
    receiver: str = ""
    iteration_text: str = ""
    value: Optional[str] = None
    children: Tuple["SyntaxNode", ...] = ()

    @property
    def is_loop(self) -> bool:
        return self.kind in LOOP_KINDS

    def is_call_to(self, name: str) -> bool:
        """True when this node is a call whose callee is exactly ``name``."""
        return self.kind is NodeKind.CALL and bool(name) and self.name == name

    def walk(self) -> Iterator["SyntaxNode"]:
        """Yield this node and all descendants in pre-order."""
        stack = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def find_all(self, *kinds: NodeKind) -> Iterator["SyntaxNode"]:
        """Yield descendants (including self) whose kind is one of ``kinds``."""
        wanted = frozenset(kinds)
        for node in self.walk():
            if node.kind in wanted:
                yield node

    def loops(self) -> Iterator["SyntaxNode"]:
        return self.find_all(*LOOP_KINDS)

    def calls(self) -> Iterator["SyntaxNode"]:
        return self.find_all(NodeKind.CALL)
