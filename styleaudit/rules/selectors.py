"""Selector rules: depth of applicability and over-qualification"""

from typing import Iterable, List

from styleaudit.models import RuleNode, StyleRule, Violation
from styleaudit.rules.base import LintRule, RuleContext


class MaxSelectorDepthRule(LintRule):
    """Flags selectors that chain more combinator steps than allowed"""

    definition = StyleRule(
        rule_id='max-selector-depth',
        message="Selector '{selector}' has depth {depth}, maximum is {max}",
        severity='warning',
        node_kind='selector',
        description='Limits how many descendant/child steps a selector chains, '
                    'counting the scopes it is nested in',
    )
    default_options = {'max': 3}

    @classmethod
    def validate_options(cls, options):
        options = super().validate_options(options)
        limit = options['max']
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 0:
            raise ValueError(f"Option 'max' for rule 'max-selector-depth' must be a "
                             f"non-negative integer, got {limit!r}")
        return options

    def check(self, node: RuleNode, context: RuleContext) -> Iterable[Violation]:
        limit = self.options['max']
        violations = []
        for selector in node.selectors:
            if selector.depth is None or selector.depth <= limit:
                continue
            violations.append(self.violation(
                context, selector.line, selector.column,
                selector=selector.text, depth=selector.depth, max=limit,
            ))
        return violations


class NoIdSelectorRule(LintRule):
    """Flags every id selector"""

    definition = StyleRule(
        rule_id='no-id-selector',
        message="Avoid id selector '{id}', use a class instead",
        severity='error',
        node_kind='selector',
        description='Disallows id selectors',
    )

    def check(self, node: RuleNode, context: RuleContext) -> Iterable[Violation]:
        return [
            self.violation(context, component.line, component.column, id=component.value)
            for selector in node.selectors
            for component in selector.components
            if component.kind == 'id'
        ]


class NoTagQualifiedRule(LintRule):
    """Flags tag names qualifying an id or class (`ul.nav`, `div#main`)"""

    definition = StyleRule(
        rule_id='no-tag-qualified-id-or-class',
        message="'{qualified}' qualifies {target} with a tag, use '{target}' alone",
        severity='warning',
        node_kind='selector',
        description='Disallows tag names directly preceding an id or class',
    )

    def check(self, node: RuleNode, context: RuleContext) -> Iterable[Violation]:
        violations: List[Violation] = []
        for selector in node.selectors:
            for compound in selector.compounds:
                if len(compound) < 2 or compound[0].kind != 'tag':
                    continue
                tag, target = compound[0], compound[1]
                if target.kind not in ('id', 'class'):
                    continue
                violations.append(self.violation(
                    context, tag.line, tag.column,
                    qualified=tag.value + target.value, target=target.value,
                ))
        return violations
