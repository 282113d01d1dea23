"""Nesting rule: nested blocks are reserved for states and parent context"""

from typing import Iterable

from styleaudit.models import RuleNode, SelectorNode, StyleRule, Violation
from styleaudit.rules.base import LintRule, RuleContext


def is_state_variant(selector: SelectorNode) -> bool:
    """`&:hover`, `&::before`, `:focus` - the parent plus pseudo-classes/elements only"""
    if len(selector.compounds) != 1 or selector.combinators:
        return False
    compound = selector.compounds[0]
    if compound[0].kind == 'parent':
        compound = compound[1:]
    return bool(compound) and all(c.kind == 'pseudo' for c in compound)


def is_parent_context(selector: SelectorNode) -> bool:
    """`.no-js &`, `html.ie8 &` - a context selector ending in a bare parent reference"""
    if len(selector.compounds) < 2:
        return False
    last = selector.compounds[-1]
    return len(last) == 1 and last[0].kind == 'parent'


class RestrictNestingPurposeRule(LintRule):
    """Flags nested rule blocks that are neither state variants nor context overrides"""

    definition = StyleRule(
        rule_id='restrict-nesting-purpose',
        message="Nested selector '{selector}' is not a state variant or parent-context override",
        severity='warning',
        node_kind='selector',
        description='Nesting is only for pseudo-class/element states and parent-context overrides',
    )

    def check(self, node: RuleNode, context: RuleContext) -> Iterable[Violation]:
        if not context.is_nested:
            return []
        if any(not s.classified for s in node.selectors):
            return []
        if all(is_state_variant(s) or is_parent_context(s) for s in node.selectors):
            return []
        return [self.violation(context, node.line, node.column, selector=node.selector_text)]
