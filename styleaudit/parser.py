"""Stylesheet parser adapter

Turns CSS/SCSS source into the node tree the rules inspect. Tokenization is
delegated to tinycss2; this module only groups its component values into
statements, selectors and declarations.
"""

import bisect
import logging
from typing import List, Optional, Tuple

import tinycss2

from styleaudit.models import (
    AtRuleNode,
    CommentNode,
    DeclarationNode,
    RuleNode,
    SelectorComponent,
    SelectorNode,
    Stylesheet,
)


logger = logging.getLogger(__name__)

COMBINATOR_DELIMS = {
    '>': 'child',
    '+': 'adjacent',
    '~': 'sibling',
}

_OPENERS = {'(': ')', '[': ']', '{': '}'}
_CLOSERS = {v: k for k, v in _OPENERS.items()}


class ParseError(Exception):
    """Raised when a stylesheet is not syntactically valid"""

    def __init__(self, path: str, line: int, column: int, message: str):
        self.path = path
        self.line = line
        self.column = column
        self.message = message
        super().__init__(f"{path}:{line}:{column}: {message}")


class _SourceScanner:
    """
    Pre-pass over the raw text.

    Checks that brackets, strings and block comments are balanced, extracts
    `//` line comments (which tinycss2 does not know about) and blanks them
    out so token positions are preserved.
    """

    def __init__(self, text: str, path: str):
        self.text = text
        self.path = path
        self._line_starts = [0]
        for index, char in enumerate(text):
            if char == '\n':
                self._line_starts.append(index + 1)

    def position(self, index: int) -> Tuple[int, int]:
        """Convert a character offset to a 1-based (line, column) pair"""
        line = bisect.bisect_right(self._line_starts, index)
        return line, index - self._line_starts[line - 1] + 1

    def error(self, index: int, message: str) -> ParseError:
        line, column = self.position(index)
        return ParseError(self.path, line, column, message)

    def scan(self) -> Tuple[str, List[CommentNode]]:
        """
        Scan the source

        Returns:
            Tuple of (text with line comments blanked, line comment nodes)

        Raises:
            ParseError: On unbalanced brackets, strings or comments
        """
        text = self.text
        length = len(text)
        cleaned = list(text)
        comments: List[CommentNode] = []
        stack: List[Tuple[str, int]] = []
        i = 0

        while i < length:
            char = text[i]

            if char == '\\':
                i += 2
                continue

            if char in '"\'':
                i = self._skip_string(i)
                continue

            if text.startswith('/*', i):
                end = text.find('*/', i + 2)
                if end == -1:
                    raise self.error(i, "Unterminated comment")
                i = end + 2
                continue

            if text.startswith('//', i) and not self._follows_scheme(i):
                end = text.find('\n', i)
                if end == -1:
                    end = length
                line, column = self.position(i)
                comments.append(CommentNode(text[i + 2:end].strip(), line, column, style='line'))
                for j in range(i, end):
                    cleaned[j] = ' '
                i = end
                continue

            if text[i:i + 4].lower() == 'url(' and (i == 0 or not _is_name_char(text[i - 1])):
                i = self._skip_url(i)
                continue

            if char in _OPENERS:
                stack.append((char, i))
            elif char in _CLOSERS:
                if not stack:
                    raise self.error(i, f"Unmatched '{char}'")
                opener, _ = stack.pop()
                if _OPENERS[opener] != char:
                    raise self.error(i, f"Expected '{_OPENERS[opener]}' but found '{char}'")
            i += 1

        if stack:
            opener, index = stack[-1]
            raise self.error(index, f"Unclosed '{opener}'")

        return ''.join(cleaned), _merge_line_comments(comments)

    def _skip_string(self, start: int) -> int:
        quote = self.text[start]
        i = start + 1
        while i < len(self.text):
            char = self.text[i]
            if char == '\\':
                i += 2
                continue
            if char == quote:
                return i + 1
            if char == '\n':
                break
            i += 1
        raise self.error(start, "Unterminated string")

    def _skip_url(self, start: int) -> int:
        i = start + 4
        while i < len(self.text) and self.text[i] in ' \t\n':
            i += 1
        if i < len(self.text) and self.text[i] in '"\'':
            # Quoted urls are ordinary function calls
            return start + 3
        end = self.text.find(')', i)
        if end == -1:
            raise self.error(start, "Unterminated url()")
        return end + 1

    def _follows_scheme(self, index: int) -> bool:
        return index > 0 and self.text[index - 1] == ':'


def _is_name_char(char: str) -> bool:
    return char.isalnum() or char in '-_'


def _merge_line_comments(comments: List[CommentNode]) -> List[CommentNode]:
    """Merge `//` comments on consecutive lines at the same column into one block"""
    merged: List[CommentNode] = []
    last_line = None
    for comment in comments:
        previous = merged[-1] if merged else None
        if previous and last_line == comment.line - 1 and previous.column == comment.column:
            previous.text = previous.text + '\n' + comment.text
        else:
            merged.append(CommentNode(comment.text, comment.line, comment.column, style='line'))
        last_line = comment.line
    return merged


def _strip(tokens: List) -> List:
    """Drop leading and trailing whitespace tokens"""
    start, end = 0, len(tokens)
    while start < end and tokens[start].type == 'whitespace':
        start += 1
    while end > start and tokens[end - 1].type == 'whitespace':
        end -= 1
    return tokens[start:end]


def _is_literal(token, value: str) -> bool:
    return token.type == 'literal' and token.value == value


def _serialize(tokens: List) -> str:
    return tinycss2.serialize(tokens).strip()


class StylesheetParser:
    """Builds a Stylesheet tree from tinycss2 component values"""

    def __init__(self, path: str = '<string>'):
        self.path = path
        self.comments: List[CommentNode] = []

    def parse(self, text: str, fragment: bool = False) -> Stylesheet:
        """
        Parse stylesheet text

        Args:
            text: Raw CSS/SCSS source
            fragment: Parse as the inside of a block, where the last
                declaration needs no terminating `;`

        Returns:
            Stylesheet tree

        Raises:
            ParseError: If the source is not syntactically valid
        """
        cleaned, line_comments = _SourceScanner(text, self.path).scan()
        self.comments = list(line_comments)

        tokens = tinycss2.parse_component_value_list(cleaned, skip_comments=False)
        children = self._split_statements(tokens, (), in_block=fragment)

        self.comments.sort(key=lambda c: (c.line, c.column))
        logger.debug(f"Parsed {self.path}: {len(children)} top-level statements, "
                     f"{len(self.comments)} comments")
        return Stylesheet(path=self.path, children=children, comments=self.comments)

    def _error(self, token, message: str) -> ParseError:
        return ParseError(self.path, token.source_line, token.source_column, message)

    def _split_statements(self, tokens: List, ancestors: Tuple, in_block: bool) -> List:
        children = []
        pending: List = []

        for token in tokens:
            if token.type == 'error':
                raise self._error(token, token.message)

            if token.type == 'comment':
                self.comments.append(
                    CommentNode(token.value, token.source_line, token.source_column, style='block')
                )
                continue

            if _is_literal(token, ';'):
                if _strip(pending):
                    children.append(self._statement(_strip(pending)))
                pending = []
                continue

            if token.type == '{} block' and not (pending and _is_literal(pending[-1], '#')):
                node = self._block(_strip(pending), token, ancestors)
                if node is not None:
                    children.append(node)
                pending = []
                continue

            pending.append(token)

        pending = _strip(pending)
        if pending:
            if not in_block:
                raise self._error(pending[0], "Expected ';' or '{' to end the statement")
            children.append(self._statement(pending))

        return children

    def _statement(self, tokens: List):
        """Parse a `;`-terminated statement: an at-rule or a declaration"""
        first = tokens[0]
        if first.type == 'at-keyword':
            return AtRuleNode(
                name=first.lower_value,
                prelude=_serialize(tokens[1:]),
                line=first.source_line,
                column=first.source_column,
            )
        return self._declaration(tokens)

    def _declaration(self, tokens: List) -> DeclarationNode:
        colon = next((i for i, t in enumerate(tokens) if _is_literal(t, ':')), None)
        if colon is None:
            raise self._error(tokens[0], f"Expected a declaration, found '{_serialize(tokens)}'")

        name_tokens = _strip(tokens[:colon])
        if not self._valid_property_name(name_tokens):
            raise self._error(tokens[0], f"Invalid property name '{_serialize(tokens[:colon])}'")

        value_tokens = _strip(tokens[colon + 1:])
        important = False
        # Trailing `!important`, `!default` and `!global` flags
        while (len(value_tokens) >= 2 and _is_literal(value_tokens[-2], '!')
               and value_tokens[-1].type == 'ident'):
            if value_tokens[-1].lower_value == 'important':
                important = True
            value_tokens = _strip(value_tokens[:-2])

        if not value_tokens:
            raise self._error(tokens[0], f"Missing value for '{_serialize(name_tokens)}'")

        return DeclarationNode(
            property=_serialize(name_tokens),
            value=_serialize(value_tokens),
            line=tokens[0].source_line,
            column=tokens[0].source_column,
            tokens=value_tokens,
            important=important,
        )

    @staticmethod
    def _valid_property_name(tokens: List) -> bool:
        if len(tokens) == 1:
            return tokens[0].type == 'ident'
        if len(tokens) == 2 and tokens[1].type == 'ident':
            # `$variable` and the `*property` hack
            return tokens[0].type == 'literal' and tokens[0].value in ('$', '*')
        return any(_is_literal(t, '#') for t in tokens)

    def _block(self, prelude: List, block, ancestors: Tuple):
        """Parse a prelude followed by a `{}` block"""
        if not prelude:
            raise self._error(block, "Missing selector before '{'")

        first = prelude[0]
        if first.type == 'at-keyword':
            node = AtRuleNode(
                name=first.lower_value,
                prelude=_serialize(prelude[1:]),
                line=first.source_line,
                column=first.source_column,
                children=[],
            )
            node.children = self._split_statements(block.content, ancestors + (node,), in_block=True)
            return node

        if _is_literal(prelude[-1], ':'):
            # Nested property groups (`font: { family: x; }`) are not checked
            logger.debug(f"{self.path}:{first.source_line}: skipping nested property block")
            return None

        rule = RuleNode(
            selector_text=_serialize(prelude),
            selectors=[],
            line=first.source_line,
            column=first.source_column,
        )
        rule.selectors = self._selectors(prelude, ancestors)
        rule.children = self._split_statements(block.content, ancestors + (rule,), in_block=True)
        return rule

    def _selectors(self, prelude: List, ancestors: Tuple) -> List[SelectorNode]:
        parts: List[List] = [[]]
        for token in prelude:
            if _is_literal(token, ','):
                parts.append([])
            else:
                parts[-1].append(token)

        parent = next((a for a in reversed(ancestors) if isinstance(a, RuleNode)), None)
        nesting_depth = len([a for a in ancestors if isinstance(a, RuleNode)])

        selectors = []
        for part in parts:
            part = _strip(part)
            if not part:
                anchor = prelude[0]
                raise self._error(anchor, f"Empty selector in '{_serialize(prelude)}'")
            selector = self._complex_selector(part)
            selector.nesting_depth = nesting_depth
            selector.depth = self._resolve_depth(selector, parent)
            selectors.append(selector)
        return selectors

    @staticmethod
    def _resolve_depth(selector: SelectorNode, parent: Optional[RuleNode]) -> Optional[int]:
        """Count combinator steps once the selector is joined to its ancestors"""
        if not selector.classified:
            return None
        own = len(selector.combinators)
        if parent is None:
            return own
        known = [s.depth for s in parent.selectors if s.depth is not None]
        if not known:
            return None
        implicit = 0 if (selector.has_parent_reference or selector.is_relative) else 1
        return max(known) + own + implicit

    def _complex_selector(self, tokens: List) -> SelectorNode:
        compounds: List[List[SelectorComponent]] = []
        combinators: List[str] = []
        current: List[SelectorComponent] = []
        classified = True
        saw_space = False
        trailing_combinator = False
        i = 0

        while i < len(tokens):
            token = tokens[i]

            if token.type == 'whitespace':
                saw_space = True
                i += 1
                continue

            if token.type == 'literal' and token.value in COMBINATOR_DELIMS:
                if current:
                    compounds.append(current)
                    current = []
                elif trailing_combinator:
                    classified = False
                combinators.append(COMBINATOR_DELIMS[token.value])
                trailing_combinator = True
                saw_space = False
                i += 1
                continue

            if saw_space and current:
                compounds.append(current)
                current = []
                combinators.append('descendant')
            saw_space = False
            trailing_combinator = False

            component, i = self._component(tokens, i, at_start=not current)
            if component is None:
                classified = False
                continue
            if component.kind == 'interpolation':
                classified = False
            current.append(component)

        if current:
            compounds.append(current)
        if trailing_combinator and compounds:
            classified = False

        return SelectorNode(
            text=_serialize(tokens),
            compounds=compounds,
            combinators=combinators,
            line=tokens[0].source_line,
            column=tokens[0].source_column,
            classified=classified,
        )

    @staticmethod
    def _component(tokens: List, i: int, at_start: bool) -> Tuple[Optional[SelectorComponent], int]:
        """
        Classify the simple selector starting at tokens[i]

        Returns:
            (component or None when unclassifiable, index of the next token)
        """
        token = tokens[i]
        following = tokens[i + 1] if i + 1 < len(tokens) else None
        line, column = token.source_line, token.source_column

        def make(kind, value, consumed):
            return SelectorComponent(kind, value, line, column), i + consumed

        if token.type == 'ident' and at_start:
            return make('tag', token.lower_value, 1)
        if _is_literal(token, '*') and at_start:
            return make('universal', '*', 1)
        if token.type == 'hash':
            return make('id', '#' + token.value, 1)
        if _is_literal(token, '#') and following is not None and following.type == '{} block':
            return make('interpolation', '#{' + tinycss2.serialize(following.content) + '}', 2)
        if _is_literal(token, '.') and following is not None and following.type == 'ident':
            return make('class', '.' + following.value, 2)
        if _is_literal(token, '%') and following is not None and following.type == 'ident':
            return make('placeholder', '%' + following.value, 2)
        if token.type == '[] block':
            return make('attribute', token.serialize(), 1)
        if _is_literal(token, '&'):
            if following is not None and following.type in ('ident', 'number', 'dimension'):
                return make('parent-suffix', '&' + following.serialize(), 2)
            return make('parent', '&', 1)
        if _is_literal(token, ':'):
            consumed = 1
            prefix = ':'
            if following is not None and _is_literal(following, ':'):
                consumed, prefix = 2, '::'
                following = tokens[i + 2] if i + 2 < len(tokens) else None
            if following is not None and following.type in ('ident', 'function'):
                return make('pseudo', prefix + following.serialize(), consumed + 1)
        return None, i + 1


def parse_stylesheet(text: str, path: str = '<string>', fragment: bool = False) -> Stylesheet:
    """
    Parse stylesheet source text

    Args:
        text: CSS/SCSS source
        path: Path reported in errors and violations
        fragment: Parse as block content instead of a whole stylesheet

    Returns:
        Stylesheet tree

    Raises:
        ParseError: If the source is not syntactically valid
    """
    return StylesheetParser(path).parse(text, fragment=fragment)


def parse_file(path: str) -> Stylesheet:
    """
    Read and parse a stylesheet file

    Raises:
        ParseError: If the file cannot be read or parsed
    """
    try:
        with open(path, 'r', encoding='utf-8') as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(path, 1, 1, f"Cannot read file: {e}")
    return parse_stylesheet(text, path)
