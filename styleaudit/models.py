"""Data models for the stylesheet linter"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


SEVERITIES = ('warning', 'error')
NODE_KINDS = ('selector', 'declaration', 'value', 'comment')

COMPONENT_KINDS = {
    'tag', 'universal', 'class', 'id', 'pseudo', 'attribute',
    'parent', 'parent-suffix', 'placeholder', 'interpolation',
}
COMBINATORS = {'descendant', 'child', 'adjacent', 'sibling'}

# Longhand properties that together make up one shorthand, in shorthand order
SHORTHAND_FAMILIES: Dict[str, Tuple[str, str, str, str]] = {
    'margin': ('margin-top', 'margin-right', 'margin-bottom', 'margin-left'),
    'padding': ('padding-top', 'padding-right', 'padding-bottom', 'padding-left'),
    'border-width': (
        'border-top-width', 'border-right-width',
        'border-bottom-width', 'border-left-width',
    ),
    'border-style': (
        'border-top-style', 'border-right-style',
        'border-bottom-style', 'border-left-style',
    ),
    'border-color': (
        'border-top-color', 'border-right-color',
        'border-bottom-color', 'border-left-color',
    ),
    'border-radius': (
        'border-top-left-radius', 'border-top-right-radius',
        'border-bottom-right-radius', 'border-bottom-left-radius',
    ),
}

_LONGHAND_TO_SHORTHAND = {
    longhand: shorthand
    for shorthand, longhands in SHORTHAND_FAMILIES.items()
    for longhand in longhands
}


@dataclass(frozen=True)
class StyleRule:
    """Definition of a single, independently toggleable check"""
    rule_id: str
    message: str
    severity: str
    node_kind: str
    description: str = ''

    def __post_init__(self):
        """Validate rule definition"""
        if not self.rule_id:
            raise ValueError("Rule identifier cannot be empty")
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity}. Must be one of {SEVERITIES}")
        if self.node_kind not in NODE_KINDS:
            raise ValueError(f"Invalid node_kind: {self.node_kind}. Must be one of {NODE_KINDS}")

    def format_message(self, **params: Any) -> str:
        """Render the message template with rule-specific parameters"""
        return self.message.format(**params)


@dataclass(frozen=True)
class SelectorComponent:
    """One simple selector inside a compound selector"""
    kind: str
    value: str
    line: int
    column: int

    def __post_init__(self):
        if self.kind not in COMPONENT_KINDS:
            raise ValueError(f"Invalid component kind: {self.kind}")


@dataclass
class SelectorNode:
    """A complex selector: compound selectors joined by combinators"""
    text: str
    compounds: List[List[SelectorComponent]]
    combinators: List[str]
    line: int
    column: int
    nesting_depth: int = 0
    depth: Optional[int] = None
    classified: bool = True

    def __post_init__(self):
        """Validate selector"""
        if self.nesting_depth < 0:
            raise ValueError("Nesting depth cannot be negative")
        for combinator in self.combinators:
            if combinator not in COMBINATORS:
                raise ValueError(f"Invalid combinator: {combinator}")

    @property
    def components(self) -> List[SelectorComponent]:
        """All simple selectors in source order"""
        return [c for compound in self.compounds for c in compound]

    @property
    def has_parent_reference(self) -> bool:
        return any(c.kind in ('parent', 'parent-suffix') for c in self.components)

    @property
    def is_relative(self) -> bool:
        """True when the selector starts with a combinator (`> .child`)"""
        return len(self.combinators) == len(self.compounds)


@dataclass
class DeclarationNode:
    """A property:value pair inside a rule block"""
    property: str
    value: str
    line: int
    column: int
    tokens: List[Any] = field(default_factory=list, repr=False)
    important: bool = False

    @property
    def name(self) -> str:
        return self.property.lower()

    @property
    def is_variable(self) -> bool:
        return self.property.startswith('$')

    @property
    def is_custom_property(self) -> bool:
        return self.property.startswith('--')

    @property
    def is_bare_zero(self) -> bool:
        """True when the value is a unitless zero such as `0` or `0.0`"""
        significant = [t for t in self.tokens if t.type not in ('whitespace', 'comment')]
        return (
            len(significant) == 1
            and significant[0].type == 'number'
            and significant[0].value == 0
        )

    @property
    def shorthand(self) -> Optional[str]:
        """Name of the shorthand this longhand can be folded into"""
        return _LONGHAND_TO_SHORTHAND.get(self.name)

    @property
    def uses_reference(self) -> bool:
        """True when the value refers to a variable, custom property or interpolation"""
        return '$' in self.value or '#{' in self.value or 'var(' in self.value.lower()


@dataclass
class CommentNode:
    """A block comment or a run of consecutive line comments"""
    text: str
    line: int
    column: int
    style: str = 'block'


@dataclass
class RuleNode:
    """A selector list with its block of declarations and nested statements"""
    selector_text: str
    selectors: List[SelectorNode]
    line: int
    column: int
    children: List[Any] = field(default_factory=list)

    @property
    def declarations(self) -> List[DeclarationNode]:
        return [c for c in self.children if isinstance(c, DeclarationNode)]

    @property
    def rules(self) -> List['RuleNode']:
        return [c for c in self.children if isinstance(c, RuleNode)]


@dataclass
class AtRuleNode:
    """An at-rule such as @media or @include; children is None without a block"""
    name: str
    prelude: str
    line: int
    column: int
    children: Optional[List[Any]] = None


@dataclass
class Stylesheet:
    """Parsed representation of one stylesheet file"""
    path: str
    children: List[Any] = field(default_factory=list)
    comments: List[CommentNode] = field(default_factory=list)

    def walk(self):
        """
        Yield every node together with its ancestor chain

        Yields:
            (node, ancestors) tuples in source order, ancestors outermost first
        """
        stack = [(child, ()) for child in reversed(self.children)]
        while stack:
            node, ancestors = stack.pop()
            yield node, ancestors
            children = getattr(node, 'children', None)
            if children:
                inner = ancestors + (node,)
                stack.extend((child, inner) for child in reversed(children))


@dataclass(frozen=True, order=True)
class Violation:
    """A detected rule breach at a specific source position"""
    path: str
    line: int
    column: int
    rule_id: str
    message: str
    severity: str = 'warning'

    def __post_init__(self):
        """Validate violation"""
        if self.severity not in SEVERITIES:
            raise ValueError(f"Invalid severity: {self.severity}. Must be one of {SEVERITIES}")
        if not self.rule_id:
            raise ValueError("Rule identifier cannot be empty")
        if not self.path:
            raise ValueError("File path cannot be empty")

    def sort_key(self) -> Tuple[str, int, int, str, str]:
        return (self.path, self.line, self.column, self.rule_id, self.message)

    def to_line(self) -> str:
        """Render in the `path:line:column: [severity] rule-id message` format"""
        return f"{self.path}:{self.line}:{self.column}: [{self.severity}] {self.rule_id} {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'line': self.line,
            'column': self.column,
            'severity': self.severity,
            'rule': self.rule_id,
            'message': self.message,
        }


@dataclass
class FileResult:
    """Outcome of linting a single file"""
    path: str
    violations: List[Violation] = field(default_factory=list)
    checked: bool = True

    @property
    def error_count(self) -> int:
        return len([v for v in self.violations if v.severity == 'error'])


def default_rules() -> Dict[str, Dict[str, Any]]:
    """Every registered rule enabled with its default options"""
    from styleaudit.rules import DEFAULT_REGISTRY

    return {rule_id: dict(DEFAULT_REGISTRY[rule_id].default_options) for rule_id in DEFAULT_REGISTRY}


@dataclass
class LintConfig:
    """
    Effective configuration: per-rule options and file selection

    A rule maps to its options when enabled and to None when disabled.
    Without explicit rules every registered rule is enabled.
    """
    rules: Dict[str, Dict[str, Any]] = field(default_factory=default_rules)
    include: List[str] = field(default_factory=lambda: ['*.scss', '*.css'])
    exclude: List[str] = field(default_factory=list)

    def __post_init__(self):
        """Validate configuration"""
        if not isinstance(self.rules, dict):
            raise ValueError("Rules must be a mapping")
        if not self.include:
            raise ValueError("At least one include pattern must be specified")

    @property
    def enabled_rules(self) -> List[str]:
        return sorted(rule_id for rule_id, options in self.rules.items() if options is not None)

    def is_enabled(self, rule_id: str) -> bool:
        return self.rules.get(rule_id) is not None

    def options_for(self, rule_id: str) -> Dict[str, Any]:
        return dict(self.rules.get(rule_id) or {})
