"""Java front end using the tree-sitter Java grammar."""

import logging
import re
from typing import Tuple

import tree_sitter
import tree_sitter_java as tsjava
from tree_sitter import Language

from ..syntax import NodeKind
from .base_frontend import FrontEndRegistry, LanguageFrontEnd, node_text

logger = logging.getLogger(__name__)

# Snippets that already declare a type parse as-is; anything else is wrapped
TYPE_DECLARATION = re.compile(
    r'^\s*(?:@\w+(?:\([^)]*\))?\s*)*'
    r'(?:(?:public|private|protected|abstract|final|static|sealed|non-sealed|strictfp)\s+)*'
    r'(?:class|interface|enum|record|@interface)\b',
    re.MULTILINE,
)

WRAPPER_CLASS = "__CodeUnit__"


class JavaFrontEnd(LanguageFrontEnd):
    """Front end for Java methods, constructors and fields."""

    FUNCTION_TYPES = frozenset({
        "method_declaration",
        "constructor_declaration",
        "compact_constructor_declaration",
    })
    DECLARATION_UNIT_TYPES = frozenset({
        "field_declaration",
        "constant_declaration",
        "local_variable_declaration",
    })

    LOOP_TYPES = {
        "for_statement": NodeKind.FOR,
        "enhanced_for_statement": NodeKind.FOREACH,
        "while_statement": NodeKind.WHILE,
        "do_statement": NodeKind.DO_WHILE,
    }
    CALL_TYPES = frozenset({"method_invocation"})
    ALLOCATION_TYPES = frozenset({"object_creation_expression"})
    DECLARATION_TYPES = frozenset({"variable_declarator"})
    STRING_TYPES = frozenset({"string_literal", "text_block"})

    ITERATION_FIELDS = ("condition", "update", "body")

    def __init__(self):
        """Initialize Java front end."""
        super().__init__("java")

    def _load_language(self) -> Language:
        return Language(tsjava.language())

    def prepare_snippet(self, text: str) -> str:
        """Wrap bare members in a class so the grammar accepts them."""
        if TYPE_DECLARATION.search(text):
            return text
        return f"class {WRAPPER_CLASS} {{\n{text}\n}}"

    def unit_name(self, node: tree_sitter.Node) -> str:
        if node.type == "compact_constructor_declaration":
            return node_text(node.child_by_field_name("name"))
        return super().unit_name(node)

    def callee(self, node: tree_sitter.Node) -> Tuple[str, str]:
        name = node_text(node.child_by_field_name("name"))
        receiver = node_text(node.child_by_field_name("object"))
        return name, receiver

    def allocated_type(self, node: tree_sitter.Node) -> str:
        type_node = node.child_by_field_name("type")
        if type_node is None:
            return ""
        # generic_type wraps the raw type identifier and its arguments
        if type_node.type == "generic_type" and type_node.named_children:
            return node_text(type_node.named_children[0])
        return node_text(type_node)

    def string_value(self, node: tree_sitter.Node) -> str:
        text = node_text(node)
        if text.startswith('"""') and text.endswith('"""') and len(text) >= 6:
            return text[3:-3]
        if len(text) >= 2 and text[0] == '"' and text[-1] == '"':
            return text[1:-1]
        return text


# Register the front end
FrontEndRegistry.register("java", JavaFrontEnd)
