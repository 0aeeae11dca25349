"""Python front end using the tree-sitter Python grammar.

Comprehension ``for`` clauses count as nested loops, and list/dict/set displays,
comprehensions and constructor calls count as collection allocations.
"""

import logging
import textwrap
from typing import Optional, Tuple

import tree_sitter
import tree_sitter_python
from tree_sitter import Language

from ..syntax import NodeKind, SyntaxNode
from .base_frontend import MAX_TREE_DEPTH, FrontEndRegistry, LanguageFrontEnd, node_text, unquote

logger = logging.getLogger(__name__)

# Display and comprehension nodes mapped to the collection they build
COLLECTION_NODES = {
    "list": "List",
    "list_comprehension": "List",
    "dictionary": "Map",
    "dictionary_comprehension": "Map",
    "set": "Set",
    "set_comprehension": "Set",
}

COMPREHENSION_TYPES = frozenset({
    "list_comprehension",
    "set_comprehension",
    "dictionary_comprehension",
    "generator_expression",
})

# Builtin and stdlib constructors mapped to the collection they build
COLLECTION_CONSTRUCTORS = {
    "list": "List",
    "dict": "Map",
    "set": "Set",
    "frozenset": "Set",
    "defaultdict": "Map",
    "OrderedDict": "Map",
    "Counter": "Map",
    "deque": "List",
}


class PythonFrontEnd(LanguageFrontEnd):
    """Front end for Python functions and module-level assignments."""

    FUNCTION_TYPES = frozenset({"function_definition"})
    DECLARATION_UNIT_TYPES = frozenset({"assignment"})

    LOOP_TYPES = {
        "for_statement": NodeKind.FOREACH,
        "for_in_clause": NodeKind.FOREACH,
        "while_statement": NodeKind.WHILE,
    }
    CALL_TYPES = frozenset({"call"})
    ALLOCATION_TYPES = frozenset(COLLECTION_NODES)
    DECLARATION_TYPES = frozenset({"assignment"})
    STRING_TYPES = frozenset({"string", "concatenated_string"})

    ITERATION_FIELDS = ("condition", "body")

    def __init__(self):
        """Initialize Python front end."""
        super().__init__("python")

    def _load_language(self) -> Language:
        return Language(tree_sitter_python.language())

    def prepare_snippet(self, text: str) -> str:
        """Methods lifted out of a class keep their indentation; remove it."""
        return textwrap.dedent(text)

    def kind_of(self, node: tree_sitter.Node) -> NodeKind:
        if node.type == "call" and self._constructed_collection(node):
            return NodeKind.ALLOCATION
        return super().kind_of(node)

    def _convert_node(self, node: tree_sitter.Node, depth: int) -> SyntaxNode:
        if node.type in COMPREHENSION_TYPES and depth <= MAX_TREE_DEPTH:
            return self._convert_comprehension(node, depth)
        return super()._convert_node(node, depth)

    def _convert_comprehension(self, node: tree_sitter.Node, depth: int) -> SyntaxNode:
        """Rebuild a comprehension as a chain of nested loops.

        tree-sitter keeps the element expression and every clause as siblings.
        Here each ``for`` clause encloses the clauses after it, and the element
        expression sits inside all of them. Every loop carries the whole
        comprehension as its text.
        """
        body = node.child_by_field_name("body")
        inner: Tuple[SyntaxNode, ...] = (self._convert_node(body, depth + 1),) if body is not None else ()

        text = node_text(node)
        clauses = [child for child in node.named_children if child.type in ("for_in_clause", "if_clause")]
        for clause in reversed(clauses):
            converted = self._convert_node(clause, depth + 1)
            if converted.kind is NodeKind.FOREACH:
                inner = (SyntaxNode(kind=NodeKind.FOREACH, text=text, children=converted.children + inner),)
            else:
                inner = (converted,) + inner

        kind = self.kind_of(node)
        name = self.allocated_type(node) if kind is NodeKind.ALLOCATION else ""
        return SyntaxNode(kind=kind, text=text, name=name, children=inner)

    def callee(self, node: tree_sitter.Node) -> Tuple[str, str]:
        function = node.child_by_field_name("function")
        if function is None:
            return "", ""
        if function.type == "attribute":
            return (
                node_text(function.child_by_field_name("attribute")),
                node_text(function.child_by_field_name("object")),
            )
        return node_text(function), ""

    def allocated_type(self, node: tree_sitter.Node) -> str:
        if node.type == "call":
            return self._constructed_collection(node) or ""
        return COLLECTION_NODES.get(node.type, "")

    def declaration(self, node: tree_sitter.Node) -> Tuple[str, Optional[str]]:
        left = node.child_by_field_name("left")
        if left is None:
            return "", None
        if left.type == "attribute":
            name = node_text(left.child_by_field_name("attribute"))
        elif left.type == "identifier":
            name = node_text(left)
        else:
            # Tuple unpacking and subscripts do not declare a single name
            return "", None

        right = node.child_by_field_name("right")
        if right is not None and right.type in self.STRING_TYPES:
            return name, self.string_value(right)
        return name, None

    def string_value(self, node: tree_sitter.Node) -> str:
        if node.type == "concatenated_string":
            return "".join(self.string_value(child) for child in node.named_children)
        contents = [node_text(child) for child in node.named_children if child.type == "string_content"]
        if contents:
            return "".join(contents)
        has_interpolation = any(child.type == "interpolation" for child in node.named_children)
        return "" if has_interpolation else unquote(node_text(node))

    def _constructed_collection(self, node: tree_sitter.Node) -> Optional[str]:
        function = node.child_by_field_name("function")
        if function is None:
            return None
        if function.type == "attribute":
            name = node_text(function.child_by_field_name("attribute"))
        else:
            name = node_text(function)
        return COLLECTION_CONSTRUCTORS.get(name)


# Register the front end
FrontEndRegistry.register("python", PythonFrontEnd)
