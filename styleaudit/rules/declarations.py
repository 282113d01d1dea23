"""Declaration rules: zero values and shorthand properties"""

from typing import Dict, Iterable, List

from styleaudit.models import (
    SHORTHAND_FAMILIES,
    DeclarationNode,
    RuleNode,
    StyleRule,
    Violation,
)
from styleaudit.rules.base import LintRule, RuleContext


LENGTH_UNITS = {
    'px', 'em', 'rem', 'ex', 'ch', 'vw', 'vh', 'vmin', 'vmax',
    'cm', 'mm', 'q', 'in', 'pt', 'pc',
}

# Properties where a zero length is not interchangeable with a bare 0
ZERO_UNIT_EXEMPT = {'flex', 'flex-basis'}

# Keywords that can only stand alone as a whole shorthand value
CSS_WIDE_KEYWORDS = {'inherit', 'initial', 'unset', 'revert', 'revert-layer'}


class ZeroNeedsNoUnitRule(LintRule):
    """Flags zero lengths written with a unit (`0px`)"""

    definition = StyleRule(
        rule_id='zero-needs-no-unit',
        message="'{value}' in '{property}' needs no unit, write '0'",
        severity='warning',
        node_kind='value',
        description='Zero lengths are written without a unit',
    )

    def check(self, node: DeclarationNode, context: RuleContext) -> Iterable[Violation]:
        if node.is_variable or node.is_custom_property or node.name in ZERO_UNIT_EXEMPT:
            return []
        # Only top-level tokens: units inside calc() and friends are significant
        return [
            self.violation(context, token.source_line, token.source_column,
                           value=token.serialize(), property=node.property)
            for token in node.tokens
            if token.type == 'dimension'
            and token.value == 0
            and token.lower_unit in LENGTH_UNITS
        ]


def collapse_box_values(values: List[str]) -> str:
    """
    Collapse four box values (top, right, bottom, left) to the shortest shorthand

    Args:
        values: Four values in shorthand order

    Returns:
        Shorthand value string, e.g. '0 auto'
    """
    top, right, bottom, left = values
    parts = [top, right, bottom, left]
    if left == right:
        parts = parts[:3]
        if bottom == top:
            parts = parts[:2]
            if right == top:
                parts = parts[:1]
    return ' '.join(parts)


class PreferShorthandRule(LintRule):
    """Flags blocks that spell out all four longhands of a box shorthand"""

    definition = StyleRule(
        rule_id='prefer-shorthand',
        message="Use '{shorthand}: {value}' instead of four {shorthand} longhand properties",
        severity='warning',
        node_kind='selector',
        description='Prefers shorthand properties over four literal longhands',
    )

    def check(self, node: RuleNode, context: RuleContext) -> Iterable[Violation]:
        families: Dict[str, Dict[str, DeclarationNode]] = {}
        for declaration in node.declarations:
            shorthand = declaration.shorthand
            if shorthand is not None:
                # Later declarations override earlier ones
                families.setdefault(shorthand, {})[declaration.name] = declaration

        violations = []
        for shorthand in sorted(families):
            found = families[shorthand]
            longhands = SHORTHAND_FAMILIES[shorthand]
            if len(found) < len(longhands):
                continue
            declarations = [found[name] for name in longhands]
            if not self._expressible(declarations):
                continue
            first = min(declarations, key=lambda d: (d.line, d.column))
            value = collapse_box_values([d.value for d in declarations])
            if declarations[0].important:
                value += ' !important'
            violations.append(self.violation(
                context, first.line, first.column, shorthand=shorthand, value=value,
            ))
        return violations

    @staticmethod
    def _expressible(declarations: List[DeclarationNode]) -> bool:
        """True when every value is a single literal and !important is uniform"""
        if len({d.important for d in declarations}) > 1:
            return False
        keywords = {d.value.lower() for d in declarations if d.value.lower() in CSS_WIDE_KEYWORDS}
        if keywords and len({d.value.lower() for d in declarations}) > 1:
            return False
        for declaration in declarations:
            if declaration.uses_reference:
                return False
            significant = [t for t in declaration.tokens if t.type != 'whitespace']
            if len(significant) != 1 or significant[0].type == 'function':
                return False
        return True
