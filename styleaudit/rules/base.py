"""Base lint rule architecture"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Tuple

from styleaudit.models import SEVERITIES, RuleNode, StyleRule, Violation


@dataclass(frozen=True)
class RuleContext:
    """Read-only information a rule gets alongside the node it inspects"""
    path: str
    ancestors: Tuple = ()

    @property
    def parent_rules(self) -> List[RuleNode]:
        return [a for a in self.ancestors if isinstance(a, RuleNode)]

    @property
    def is_nested(self) -> bool:
        return bool(self.parent_rules)


class LintRule(ABC):
    """Abstract base class for lint rules"""

    definition: StyleRule
    default_options: Dict[str, Any] = {}

    def __init__(self, options: Optional[Dict[str, Any]] = None):
        """
        Initialize rule with validated options

        Args:
            options: Rule options, defaults are filled in for missing keys
        """
        merged = dict(self.default_options)
        merged.update(options or {})
        self.options = self.validate_options(merged)

    @property
    def rule_name(self) -> str:
        return self.definition.rule_id

    @property
    def description(self) -> str:
        return self.definition.description

    @property
    def node_kind(self) -> str:
        return self.definition.node_kind

    @property
    def severity(self) -> str:
        return self.options.get('severity') or self.definition.severity

    @classmethod
    def validate_options(cls, options: Dict[str, Any]) -> Dict[str, Any]:
        """
        Check option names and values

        Args:
            options: Options with defaults already merged in

        Returns:
            The validated options

        Raises:
            ValueError: If an option is unknown or has an invalid value
        """
        allowed = set(cls.default_options) | {'severity'}
        for key in options:
            if key not in allowed:
                raise ValueError(f"Unknown option '{key}' for rule '{cls.definition.rule_id}'")
        severity = options.get('severity')
        if severity is not None and severity not in SEVERITIES:
            raise ValueError(
                f"Invalid severity '{severity}' for rule '{cls.definition.rule_id}'. "
                f"Must be one of {SEVERITIES}"
            )
        return options

    def violation(self, context: RuleContext, line: int, column: int, **params: Any) -> Violation:
        """Build a Violation from this rule's message template"""
        return Violation(
            path=context.path,
            line=line,
            column=column,
            rule_id=self.rule_name,
            message=self.definition.format_message(**params),
            severity=self.severity,
        )

    @abstractmethod
    def check(self, node, context: RuleContext) -> Iterable[Violation]:
        """
        Inspect a node of this rule's kind

        Args:
            node: Node matching the rule's node_kind
            context: File path and ancestor chain

        Returns:
            Violations found, possibly none
        """
        pass
