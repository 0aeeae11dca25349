"""Locating the code unit under a cursor position.

Languages with a tree-sitter front end are located structurally. Everything
else goes through a regex header scan plus brace or indentation block
extraction, and yields units without a structured tree.
"""

import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import tree_sitter

from .languages import FrontEndRegistry, LanguageFrontEnd
from .languages.base_frontend import node_text
from .models import CodeUnit

logger = logging.getLogger(__name__)

# fun/fn/func/def/function/sub headers, after optional modifiers
FUNCTION_HEADER = re.compile(
    r"^[ \t]*(?:[\w@\[\]().,<>?*&]+[ \t]+)*?"
    r"(?:fun|fn|func|def|function|sub)\b\*?[ \t]*"
    r"(?:<[^>\n]*>[ \t]*)?"
    r"(?:\([^)\n]*\)[ \t]*)?"
    r"(?:[\w$.<>?]+\.)?"
    r"(?P<name>[A-Za-z_$][\w$]*)",
    re.MULTILINE,
)

# const name = (args) => ..., const name = async arg => ...
ARROW_HEADER = re.compile(
    r"^[ \t]*(?:export[ \t]+)?(?:const|let|var)[ \t]+(?P<name>[A-Za-z_$][\w$]*)[ \t]*"
    r"(?::[^=\n]+)?=[ \t]*(?:async[ \t]+)?"
    r"(?:\([^)\n]*\)|[A-Za-z_$][\w$]*)[ \t]*(?::[^=\n]+)?=>",
    re.MULTILINE,
)

# Class methods and C-family functions: name(args) ... {
METHOD_HEADER = re.compile(
    r"^[ \t]*(?:[\w$:<>*&,\[\]@]+[ \t]+)*?"
    r"(?P<name>[A-Za-z_$~][\w$]*)[ \t]*(?:<[^>\n]*>)?[ \t]*\([^)]*\)[^;{\n]*\{",
    re.MULTILINE,
)

CONTROL_KEYWORDS = frozenset({
    "if", "else", "elif", "elseif", "for", "foreach", "while", "do", "switch", "case",
    "catch", "try", "finally", "with", "return", "when", "match", "loop", "unless",
    "until", "synchronized", "using", "lock", "fixed", "function", "new", "sizeof",
})

# Words before a name(args) { header that mean it is not a function declaration
NON_DECLARING_WORDS = frozenset({
    "return", "await", "yield", "throw", "else", "new", "case", "go", "defer",
    "class", "object", "interface", "struct", "enum", "record", "impl", "trait",
    "extends", "implements",
})


@dataclass
class _Block:
    """A function block found by the text scan."""

    name: str
    start_line: int
    end_line: int
    text: str


class CodeLocator:
    """Finds the function-sized code unit enclosing a source position."""

    def locate(self, source: str, language: str, line: int, column: int = 0) -> Optional[CodeUnit]:
        """Locate the code unit enclosing a position.

        Args:
            source: Full source text of the file
            language: Language identifier (normalised through the registry)
            line: 1-based line number
            column: 0-based column

        Returns:
            The innermost enclosing function (or field/variable declaration
            when no function encloses the position), or None
        """
        language = FrontEndRegistry.normalize_language(language)
        lines = source.splitlines()
        if line < 1 or line > len(lines):
            logger.debug(f"Line {line} is outside the source ({len(lines)} lines)")
            return None

        front_end = FrontEndRegistry.get(language)
        if front_end is not None:
            unit = self._locate_structured(front_end, source, language, line, column)
            if unit is not None:
                return unit
            logger.debug(f"No {language} unit at {line}:{column}")
            return None

        return self._locate_text(source, language, line)

    def locate_all(self, source: str, language: str) -> List[CodeUnit]:
        """Every function-sized unit in a source file, in source order."""
        language = FrontEndRegistry.normalize_language(language)
        front_end = FrontEndRegistry.get(language)

        if front_end is not None:
            tree, row_offset = self._parse(front_end, source)
            if tree is None:
                return []
            return [
                self._structured_unit(front_end, node, language, row_offset)
                for node in front_end.iter_unit_nodes(tree.root_node)
            ]

        blocks = sorted(self.find_blocks(source), key=lambda b: b.start_line)
        return [self._text_unit(block, language) for block in blocks]

    def _locate_structured(
        self, front_end: LanguageFrontEnd, source: str, language: str, line: int, column: int
    ) -> Optional[CodeUnit]:
        tree, row_offset = self._parse(front_end, source)
        if tree is None:
            return None

        node = front_end.find_unit_node(tree.root_node, line - 1 + row_offset, column)
        if node is None:
            return None
        return self._structured_unit(front_end, node, language, row_offset)

    def _locate_text(self, source: str, language: str, line: int) -> Optional[CodeUnit]:
        enclosing = [block for block in self.find_blocks(source) if block.start_line <= line <= block.end_line]
        if not enclosing:
            logger.debug(f"No {language} function encloses line {line}")
            return None

        # Innermost: the latest header that still spans the line
        block = max(enclosing, key=lambda b: (b.start_line, -b.end_line))
        return self._text_unit(block, language)

    @staticmethod
    def _parse(front_end: LanguageFrontEnd, source: str) -> Tuple[Optional[tree_sitter.Tree], int]:
        """Parse a file, returning the tree and the rows added by snippet wrapping."""
        prepared = front_end.prepare_snippet(source)
        position = prepared.find(source)
        row_offset = prepared[:position].count("\n") if position >= 0 else 0
        return front_end.parse(prepared), row_offset

    @staticmethod
    def _structured_unit(
        front_end: LanguageFrontEnd, node: tree_sitter.Node, language: str, row_offset: int
    ) -> CodeUnit:
        name = front_end.unit_name(node)
        start_line = node.start_point[0] - row_offset + 1
        return CodeUnit(
            id=f"{language}:{name or '<anonymous>'}@{start_line}",
            language=language,
            source_text=node_text(node),
            structured_node=front_end.convert_unit(node),
            declared_name=name,
        )

    @staticmethod
    def _text_unit(block: _Block, language: str) -> CodeUnit:
        return CodeUnit(
            id=f"{language}:{block.name}@{block.start_line}",
            language=language,
            source_text=block.text,
            declared_name=block.name,
        )

    # ------------------------------------------------------------------
    # Text scan
    # ------------------------------------------------------------------

    def find_blocks(self, source: str) -> List[_Block]:
        """Find every function block recognised by the header patterns."""
        blocks = []
        seen_lines = set()

        for pattern in (FUNCTION_HEADER, ARROW_HEADER, METHOD_HEADER):
            for match in pattern.finditer(source):
                name = match.group("name")
                if name in CONTROL_KEYWORDS:
                    continue
                if pattern is METHOD_HEADER and not self._declares_method(match):
                    continue

                header_start = source.rfind("\n", 0, match.start()) + 1
                start_line = source.count("\n", 0, header_start) + 1
                if start_line in seen_lines:
                    continue

                if pattern is METHOD_HEADER:
                    # The header already ends on the opening brace
                    body = self._extract_block(source[match.end() - 1:])
                    text = source[header_start:match.end() - 1] + body if body else ""
                else:
                    text = self._extract_from_header(source, header_start, match.end(), pattern is ARROW_HEADER)

                if not text.strip():
                    continue

                seen_lines.add(start_line)
                blocks.append(_Block(
                    name=name,
                    start_line=start_line,
                    end_line=start_line + text.rstrip("\n").count("\n"),
                    text=text.rstrip(),
                ))

        return blocks

    @staticmethod
    def _declares_method(match: "re.Match[str]") -> bool:
        """Tell a method header from a call that takes a trailing block.

        A declaration has a modifier or return type before the name, or
        something (a return type, ``throws``, ``const``) between the
        parameters and the brace.
        """
        prefix_words = match.group(0)[:match.start("name") - match.start()].split()
        if NON_DECLARING_WORDS.intersection(prefix_words):
            return False
        after_params = match.group(0)[match.group(0).rfind(")") + 1:-1].strip()
        return bool(prefix_words) or bool(after_params)

    def _extract_from_header(self, source: str, header_start: int, scan_from: int, is_arrow: bool) -> str:
        """Extract the body following a header, choosing brace, expression or indentation form."""
        if is_arrow:
            brace = scan_from
            while source[brace:brace + 1] in (" ", "\t"):
                brace += 1
            if source[brace:brace + 1] == "{":
                body = self._extract_block(source[brace:])
                return source[header_start:brace] + body if body else ""
            return self._line_at(source, header_start)

        depth = 0
        i = scan_from
        while i < len(source):
            char = source[i]
            if char in "([":
                depth += 1
            elif char in ")]":
                depth = max(0, depth - 1)
            elif depth == 0:
                if char == "{":
                    body = self._extract_block(source[i:])
                    return source[header_start:i] + body if body else ""
                if char == ";":
                    # Declaration without a body
                    return ""
                if char == "=" and source[i + 1:i + 2] not in ("=", ">") and source[i - 1:i] not in "=!<>":
                    return self._line_at(source, header_start)
                if char == ":" and self._rest_of_line_is_empty(source, i + 1):
                    return self._extract_indented(source, header_start)
                if char == "\n":
                    following = source[i + 1:].lstrip()
                    if following.startswith("{"):
                        i += 1
                        continue
                    return self._extract_indented(source, header_start)
            i += 1

        return self._line_at(source, header_start)

    def _extract_block(self, code: str) -> str:
        """Extract a brace-delimited block starting at its opening brace.

        Args:
            code: Code starting at the opening brace

        Returns:
            The complete block including braces, or "" when unbalanced
        """
        if not code or code[0] != "{":
            return ""

        brace_count = 0
        for i, char in enumerate(code):
            if char == "{":
                brace_count += 1
            elif char == "}":
                brace_count -= 1
                if brace_count == 0:
                    return code[:i + 1]

        logger.debug("Unbalanced braces while extracting block")
        return ""

    @staticmethod
    def _extract_indented(source: str, header_start: int) -> str:
        """Extract the header line plus every deeper-indented line after it.

        A closing ``end`` at the header's indentation is included.
        """
        lines = source[header_start:].split("\n")
        header = lines[0]
        base_indent = len(header) - len(header.lstrip())
        taken = [header]

        for text in lines[1:]:
            stripped = text.strip()
            indent = len(text) - len(text.lstrip())
            if not stripped or indent > base_indent:
                taken.append(text)
                continue
            if indent == base_indent and re.match(r"end\b", stripped):
                taken.append(text)
            break

        while len(taken) > 1 and not taken[-1].strip():
            taken.pop()
        return "\n".join(taken)

    @staticmethod
    def _line_at(source: str, start: int) -> str:
        end = source.find("\n", start)
        return source[start:] if end == -1 else source[start:end]

    @staticmethod
    def _rest_of_line_is_empty(source: str, start: int) -> bool:
        end = source.find("\n", start)
        rest = source[start:] if end == -1 else source[start:end]
        rest = rest.strip()
        return not rest or rest.startswith("#")


def build_unit(source_text: str, language: str, declared_name: str = "", unit_id: str = "") -> CodeUnit:
    """Build a CodeUnit from a standalone function snippet.

    The structured tree is attached when the language has a working front
    end; otherwise the unit is analysed in text mode.

    Args:
        source_text: Source of one function, method or field
        language: Language identifier
        declared_name: Function name; taken from the parse tree when empty
        unit_id: Identifier for the unit; derived from the name when empty

    Returns:
        CodeUnit ready for analysis
    """
    language = FrontEndRegistry.normalize_language(language)
    structured_node = None

    front_end = FrontEndRegistry.get(language)
    if front_end is not None:
        structured_node = front_end.parse_unit(source_text, declared_name)
        if structured_node is not None and not declared_name:
            declared_name = structured_node.name

    if not declared_name:
        headers = CodeLocator().find_blocks(source_text)
        if headers:
            declared_name = headers[0].name

    return CodeUnit(
        id=unit_id or f"{language}:{declared_name or '<anonymous>'}",
        language=language,
        source_text=source_text,
        structured_node=structured_node,
        declared_name=declared_name,
    )
