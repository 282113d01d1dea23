"""Lint rules and the rule registry"""

from types import MappingProxyType
from typing import Iterable, List, Mapping, Type

from styleaudit.rules.base import LintRule, RuleContext
from styleaudit.rules.comments import CommentedOutCodeRule
from styleaudit.rules.declarations import PreferShorthandRule, ZeroNeedsNoUnitRule
from styleaudit.rules.nesting import RestrictNestingPurposeRule
from styleaudit.rules.selectors import MaxSelectorDepthRule, NoIdSelectorRule, NoTagQualifiedRule


RULE_CLASSES = (
    MaxSelectorDepthRule,
    NoIdSelectorRule,
    NoTagQualifiedRule,
    ZeroNeedsNoUnitRule,
    PreferShorthandRule,
    RestrictNestingPurposeRule,
    CommentedOutCodeRule,
)

# Synthetic rule id used for files that fail to parse
PARSE_ERROR_RULE = 'parse-error'


class RuleRegistry:
    """Immutable mapping from rule identifier to rule class"""

    def __init__(self, rule_classes: Iterable[Type[LintRule]]):
        """
        Build the registry

        Args:
            rule_classes: Rule classes, one per identifier

        Raises:
            ValueError: If two classes share an identifier
        """
        table = {}
        for rule_class in rule_classes:
            rule_id = rule_class.definition.rule_id
            if rule_id in table or rule_id == PARSE_ERROR_RULE:
                raise ValueError(f"Duplicate rule identifier: {rule_id}")
            table[rule_id] = rule_class
        self._rules: Mapping[str, Type[LintRule]] = MappingProxyType(table)

    def __contains__(self, rule_id: str) -> bool:
        return rule_id in self._rules

    def __getitem__(self, rule_id: str) -> Type[LintRule]:
        return self._rules[rule_id]

    def __iter__(self):
        return iter(sorted(self._rules))

    def __len__(self) -> int:
        return len(self._rules)

    def rule_ids(self) -> List[str]:
        return sorted(self._rules)

    def instantiate(self, rule_id: str, options=None) -> LintRule:
        """Create a rule instance with the given options"""
        return self._rules[rule_id](options)


DEFAULT_REGISTRY = RuleRegistry(RULE_CLASSES)


__all__ = [
    'DEFAULT_REGISTRY',
    'PARSE_ERROR_RULE',
    'RULE_CLASSES',
    'LintRule',
    'RuleContext',
    'RuleRegistry',
    'MaxSelectorDepthRule',
    'NoIdSelectorRule',
    'NoTagQualifiedRule',
    'ZeroNeedsNoUnitRule',
    'PreferShorthandRule',
    'RestrictNestingPurposeRule',
    'CommentedOutCodeRule',
]
