"""JavaScript front end using the tree-sitter JavaScript grammar."""

import logging
from typing import Optional, Tuple

import tree_sitter
import tree_sitter_javascript
from tree_sitter import Language

from ..syntax import NodeKind
from .base_frontend import FrontEndRegistry, LanguageFrontEnd, node_text

logger = logging.getLogger(__name__)

# Anonymous function forms only count as units when something names them
ANONYMOUS_FUNCTIONS = frozenset({"arrow_function", "function_expression", "function"})
NAMING_PARENTS = frozenset({"variable_declarator", "pair", "assignment_expression", "field_definition"})


class JavaScriptFrontEnd(LanguageFrontEnd):
    """Front end for JavaScript functions, methods and named arrow functions."""

    FUNCTION_TYPES = frozenset({
        "function_declaration",
        "generator_function_declaration",
        "method_definition",
    }) | ANONYMOUS_FUNCTIONS
    DECLARATION_UNIT_TYPES = frozenset({
        "lexical_declaration",
        "variable_declaration",
        "field_definition",
    })

    LOOP_TYPES = {
        "for_statement": NodeKind.FOR,
        "for_in_statement": NodeKind.FOREACH,
        "while_statement": NodeKind.WHILE,
        "do_statement": NodeKind.DO_WHILE,
    }
    CALL_TYPES = frozenset({"call_expression"})
    ALLOCATION_TYPES = frozenset({"new_expression"})
    DECLARATION_TYPES = frozenset({"variable_declarator", "field_definition"})
    STRING_TYPES = frozenset({"string", "template_string"})

    ITERATION_FIELDS = ("condition", "increment", "body")

    def __init__(self):
        """Initialize JavaScript front end."""
        super().__init__("javascript")

    def _load_language(self) -> Language:
        return Language(tree_sitter_javascript.language())

    def is_unit_node(self, node: tree_sitter.Node) -> bool:
        if node.type in ANONYMOUS_FUNCTIONS:
            return node.parent is not None and node.parent.type in NAMING_PARENTS
        return super().is_unit_node(node)

    def unit_name(self, node: tree_sitter.Node) -> str:
        if node.type in ANONYMOUS_FUNCTIONS:
            parent = node.parent
            if parent is None:
                return ""
            for field_name in ("name", "key", "left", "property"):
                named = parent.child_by_field_name(field_name)
                if named is not None:
                    return node_text(named).split(".")[-1]
            return ""
        return super().unit_name(node)

    def callee(self, node: tree_sitter.Node) -> Tuple[str, str]:
        function = node.child_by_field_name("function")
        if function is None:
            return "", ""
        if function.type == "member_expression":
            return (
                node_text(function.child_by_field_name("property")),
                node_text(function.child_by_field_name("object")),
            )
        return node_text(function), ""

    def allocated_type(self, node: tree_sitter.Node) -> str:
        return node_text(node.child_by_field_name("constructor"))

    def declaration(self, node: tree_sitter.Node) -> Tuple[str, Optional[str]]:
        name_node = node.child_by_field_name("name") or node.child_by_field_name("property")
        name = node_text(name_node)
        value_node = node.child_by_field_name("value")
        if value_node is not None and value_node.type in self.STRING_TYPES:
            return name, self.string_value(value_node)
        return name, None

    def string_value(self, node: tree_sitter.Node) -> str:
        text = node_text(node)
        if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'`":
            return text[1:-1]
        return text


# Register the front end
FrontEndRegistry.register("javascript", JavaScriptFrontEnd)
