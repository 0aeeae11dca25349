"""Abstract base class and registry for tree-sitter language front ends.

A front end owns one tree-sitter parser and translates parse trees into the
language-neutral ``SyntaxNode`` model, so the collectors and rules never see
grammar-specific node types.
"""

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock
from typing import Dict, FrozenSet, Iterator, List, Optional, Tuple, Type

import tree_sitter
from tree_sitter import Language, Parser

from ..syntax import NodeKind, SyntaxNode

logger = logging.getLogger(__name__)

# Maximum tree depth converted before a subtree is truncated
MAX_TREE_DEPTH = 400


def node_text(node: Optional[tree_sitter.Node]) -> str:
    """Decode the source text covered by a tree-sitter node."""
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def unquote(text: str) -> str:
    """Strip string prefixes and matching quotes from a literal's source text."""
    stripped = text.lstrip("rRbBuUfF@$")
    for quote in ('"""', "'''", '"', "'", "`"):
        if len(stripped) >= 2 * len(quote) and stripped.startswith(quote) and stripped.endswith(quote):
            return stripped[len(quote):-len(quote)]
    return stripped


class LanguageFrontEnd(ABC):
    """Base class for language front ends backed by tree-sitter.

    Subclasses describe their grammar through the class-level type tables and
    override the extraction hooks where a grammar needs special handling.
    """

    # Nodes that delimit a function-sized code unit
    FUNCTION_TYPES: FrozenSet[str] = frozenset()
    # Declarations that may themselves be a code unit (fields, constants)
    DECLARATION_UNIT_TYPES: FrozenSet[str] = frozenset()

    LOOP_TYPES: Dict[str, NodeKind] = {}
    CALL_TYPES: FrozenSet[str] = frozenset()
    ALLOCATION_TYPES: FrozenSet[str] = frozenset()
    DECLARATION_TYPES: FrozenSet[str] = frozenset()
    STRING_TYPES: FrozenSet[str] = frozenset()

    # Fields of a counted loop whose text drives the iteration count
    ITERATION_FIELDS: Tuple[str, ...] = ("condition", "update", "body")

    def __init__(self, language: str):
        """Initialize the front end and build its parser.

        Args:
            language: Language identifier this front end handles
        """
        self.language = language
        self._parser: Optional[Parser] = None
        self._parser_lock = RLock()
        self._init_parser()

    @abstractmethod
    def _load_language(self) -> Language:
        """Return the tree-sitter Language for this front end."""
        pass

    def _init_parser(self) -> None:
        """Initialize the tree-sitter parser."""
        try:
            self._parser = Parser(self._load_language())
        except Exception as e:
            logger.error(f"Failed to initialize {self.language} parser: {e}")
            self._parser = None

    @property
    def available(self) -> bool:
        """True when the parser was built successfully."""
        return self._parser is not None

    def parse(self, source: str) -> Optional[tree_sitter.Tree]:
        """Parse source text, returning None when parsing is not possible."""
        if self._parser is None:
            return None
        try:
            with self._parser_lock:
                return self._parser.parse(source.encode("utf-8"))
        except Exception as e:
            logger.error(f"Failed to parse {self.language} source: {e}")
            return None

    # ------------------------------------------------------------------
    # Code unit discovery
    # ------------------------------------------------------------------

    def is_unit_node(self, node: tree_sitter.Node) -> bool:
        """Whether a node is a function-sized code unit."""
        return node.type in self.FUNCTION_TYPES

    def unit_name(self, node: tree_sitter.Node) -> str:
        """Declared name of a unit node."""
        if node.type in self.DECLARATION_UNIT_TYPES:
            for decl in self._iter_descendants(node):
                if decl.type in self.DECLARATION_TYPES:
                    name, _ = self.declaration(decl)
                    if name:
                        return name
            return ""
        return node_text(node.child_by_field_name("name"))

    def find_unit_node(
        self, root: tree_sitter.Node, row: int, column: int
    ) -> Optional[tree_sitter.Node]:
        """Find the innermost code unit spanning a point.

        Functions take precedence; a field or variable declaration is returned
        only when no function encloses the point.
        """
        node = root.descendant_for_point_range((row, column), (row, column))
        declaration = None
        while node is not None:
            if self.is_unit_node(node):
                return node
            if declaration is None and node.type in self.DECLARATION_UNIT_TYPES:
                declaration = node
            node = node.parent
        return declaration

    def iter_unit_nodes(self, root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
        """Yield every function-sized unit node in pre-order."""
        for node in self._iter_descendants(root):
            if self.is_unit_node(node):
                yield node

    def prepare_snippet(self, text: str) -> str:
        """Make a standalone snippet parseable on its own."""
        return text

    def parse_unit(self, text: str, name: str = "") -> Optional[SyntaxNode]:
        """Parse a standalone unit snippet into a SyntaxNode tree.

        Picks the first unit named ``name`` (or the first unit at all), falling
        back to the first declaration unit, then to the whole snippet.
        """
        tree = self.parse(self.prepare_snippet(text))
        if tree is None:
            return None

        try:
            candidates = list(self.iter_unit_nodes(tree.root_node))
            chosen = None
            if name:
                chosen = next((n for n in candidates if self.unit_name(n) == name), None)
            if chosen is None and candidates:
                chosen = candidates[0]
            if chosen is None:
                chosen = next(
                    (n for n in self._iter_descendants(tree.root_node)
                     if n.type in self.DECLARATION_UNIT_TYPES),
                    None,
                )
            if chosen is None:
                return self.convert(tree.root_node, root_kind=NodeKind.UNIT)
            return self.convert_unit(chosen)
        except Exception as e:
            logger.warning(f"Failed to build {self.language} syntax tree: {e}")
            return None

    def convert_unit(self, node: tree_sitter.Node) -> SyntaxNode:
        """Convert a unit node, tagging the root as a function or declaration."""
        if node.type in self.DECLARATION_UNIT_TYPES:
            return self.convert(node, root_kind=NodeKind.DECLARATION, root_name=self.unit_name(node))
        return self.convert(node, root_kind=NodeKind.FUNCTION, root_name=self.unit_name(node))

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def convert(
        self,
        node: tree_sitter.Node,
        root_kind: Optional[NodeKind] = None,
        root_name: str = "",
    ) -> SyntaxNode:
        """Convert a tree-sitter subtree into SyntaxNode values."""
        converted = self._convert_node(node, 0)
        if root_kind is None:
            return converted
        return SyntaxNode(
            kind=root_kind,
            text=node_text(node),
            name=root_name or converted.name,
            value=converted.value,
            children=converted.children,
        )

    def _convert_node(self, node: tree_sitter.Node, depth: int) -> SyntaxNode:
        if depth > MAX_TREE_DEPTH:
            logger.warning(f"Maximum tree depth {MAX_TREE_DEPTH} reached in {self.language} conversion")
            return SyntaxNode(kind=NodeKind.OTHER)

        kind = self.kind_of(node)

        if kind is NodeKind.STRING:
            return SyntaxNode(kind=kind, text=node_text(node), value=self.string_value(node))

        children = tuple(self._convert_node(child, depth + 1) for child in node.named_children)

        if kind is NodeKind.OTHER:
            return SyntaxNode(kind=kind, children=children)

        text = node_text(node)

        if kind in (NodeKind.FOR, NodeKind.WHILE, NodeKind.DO_WHILE):
            return SyntaxNode(kind=kind, text=text, iteration_text=self.iteration_text(node), children=children)

        if kind is NodeKind.CALL:
            name, receiver = self.callee(node)
            return SyntaxNode(kind=kind, text=text, name=name, receiver=receiver, children=children)

        if kind is NodeKind.ALLOCATION:
            return SyntaxNode(kind=kind, text=text, name=self.allocated_type(node), children=children)

        if kind is NodeKind.DECLARATION:
            name, value = self.declaration(node)
            return SyntaxNode(kind=kind, text=text, name=name, value=value, children=children)

        return SyntaxNode(kind=kind, text=text, children=children)

    def kind_of(self, node: tree_sitter.Node) -> NodeKind:
        """Map a grammar node type onto the closed NodeKind set."""
        node_type = node.type
        if node_type in self.LOOP_TYPES:
            return self.LOOP_TYPES[node_type]
        if node_type in self.CALL_TYPES:
            return NodeKind.CALL
        if node_type in self.ALLOCATION_TYPES:
            return NodeKind.ALLOCATION
        if node_type in self.DECLARATION_TYPES:
            return NodeKind.DECLARATION
        if node_type in self.STRING_TYPES:
            return NodeKind.STRING
        return NodeKind.OTHER

    def iteration_text(self, node: tree_sitter.Node) -> str:
        """Condition, update and body text of a counted loop."""
        parts = []
        for field_name in self.ITERATION_FIELDS:
            for child in node.children_by_field_name(field_name):
                parts.append(node_text(child))
        return "\n".join(parts)

    @abstractmethod
    def callee(self, node: tree_sitter.Node) -> Tuple[str, str]:
        """Return ``(callee name, receiver text)`` for a call node."""
        pass

    def allocated_type(self, node: tree_sitter.Node) -> str:
        """Type name of an allocation node."""
        return node_text(node.child_by_field_name("type"))

    def declaration(self, node: tree_sitter.Node) -> Tuple[str, Optional[str]]:
        """Return ``(variable name, string literal initialiser or None)``."""
        name = node_text(node.child_by_field_name("name"))
        value_node = node.child_by_field_name("value")
        if value_node is not None and value_node.type in self.STRING_TYPES:
            return name, self.string_value(value_node)
        return name, None

    def string_value(self, node: tree_sitter.Node) -> str:
        """Literal content of a string node."""
        return unquote(node_text(node))

    @staticmethod
    def _iter_descendants(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
        stack = [root]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))


class FrontEndRegistry:
    """Registry for language front ends.

    Provides a factory for the front end matching a language identifier or a
    file extension. Languages without a front end are analysed in text mode.
    """

    _front_ends: Dict[str, Type[LanguageFrontEnd]] = {}
    _instances: Dict[str, LanguageFrontEnd] = {}
    _lock = RLock()

    # File extension to language mapping
    EXTENSION_MAP = {
        ".py": "python",
        ".pyw": "python",
        ".js": "javascript",
        ".jsx": "javascript",
        ".mjs": "javascript",
        ".ts": "typescript",
        ".tsx": "typescript",
        ".java": "java",
        ".kt": "kotlin",
        ".kts": "kotlin",
        ".rb": "ruby",
        ".go": "go",
        ".rs": "rust",
        ".cpp": "cpp",
        ".cc": "cpp",
        ".cxx": "cpp",
        ".c": "c",
        ".h": "c",
        ".cs": "csharp",
        ".php": "php",
        ".swift": "swift",
        ".scala": "scala",
        ".lua": "lua",
    }

    # Language name normalization mapping
    LANGUAGE_NORMALIZE = {
        "python3": "python",
        "py": "python",
        "js": "javascript",
        "node": "javascript",
        "ts": "typescript",
        "kt": "kotlin",
        "c++": "cpp",
        "c#": "csharp",
        "cs": "csharp",
    }

    @classmethod
    def normalize_language(cls, language: str) -> str:
        """Normalize a language name to its registry identifier."""
        normalized = language.lower().strip()
        return cls.LANGUAGE_NORMALIZE.get(normalized, normalized)

    @classmethod
    def language_for_file(cls, file_path: Path) -> Optional[str]:
        """Infer the language identifier from a file extension."""
        return cls.EXTENSION_MAP.get(file_path.suffix.lower())

    @classmethod
    def register(cls, language: str, front_end_class: Type[LanguageFrontEnd]) -> None:
        """Register a front end for a language.

        Args:
            language: Language identifier (e.g., 'python', 'java')
            front_end_class: Class implementing LanguageFrontEnd
        """
        cls._front_ends[cls.normalize_language(language)] = front_end_class
        logger.info(f"Registered {front_end_class.__name__} for {language}")

    @classmethod
    def get(cls, language: str) -> Optional[LanguageFrontEnd]:
        """Get the shared front end instance for a language.

        Returns None when the language has no front end or its parser could
        not be built.
        """
        language = cls.normalize_language(language)
        with cls._lock:
            if language in cls._instances:
                instance = cls._instances[language]
            elif language in cls._front_ends:
                instance = cls._front_ends[language]()
                cls._instances[language] = instance
            else:
                return None
        return instance if instance.available else None

    @classmethod
    def supported_languages(cls) -> List[str]:
        """List of languages with a registered front end."""
        return list(cls._front_ends.keys())

    @classmethod
    def is_supported(cls, language: str) -> bool:
        return cls.normalize_language(language) in cls._front_ends
