"""Configuration loading and rule selection"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from styleaudit.models import LintConfig
from styleaudit.rules import DEFAULT_REGISTRY, RuleRegistry


logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when configuration references unknown rules or invalid parameters"""
    pass


class ConfigManager:
    """Resolves the effective rule set from defaults, a config file and CLI overrides"""

    DEFAULT_CONFIG_FILES = ('.styleaudit.yml', '.styleaudit.yaml')

    DEFAULT_CONFIG = {
        'rules': {},
        'include': ['*.scss', '*.css'],
        'exclude': [],
    }

    @classmethod
    def load_config(
        cls,
        config_file: Optional[str] = None,
        cli_overrides: Optional[Dict[str, Any]] = None,
        registry: RuleRegistry = DEFAULT_REGISTRY,
    ) -> LintConfig:
        """
        Load configuration from file and apply CLI overrides.

        Args:
            config_file: Path to YAML/JSON config file (optional)
            cli_overrides: Dictionary with 'enable', 'disable' and 'max_depth' keys (optional)
            registry: Registry the rule identifiers are resolved against

        Returns:
            LintConfig with every registered rule either enabled with
            validated options or disabled

        Raises:
            ConfigError: If the file is missing or malformed, or references
                unknown rules or invalid options
        """
        config_dict = cls._deep_copy_dict(cls.DEFAULT_CONFIG)

        if config_file:
            file_config = cls._normalize(cls._load_yaml_file(config_file))
            config_dict = cls._merge_dicts(config_dict, file_config)
            logger.debug(f"Loaded configuration from {config_file}")

        if cli_overrides:
            config_dict = cls._apply_cli_overrides(config_dict, cli_overrides)

        return cls._dict_to_config(config_dict, registry)

    @classmethod
    def find_config_file(cls, directory: Optional[str] = None) -> Optional[str]:
        """Return the first default config file present in directory, if any"""
        base = Path(directory or os.getcwd())
        for name in cls.DEFAULT_CONFIG_FILES:
            candidate = base / name
            if candidate.is_file():
                return str(candidate)
        return None

    @classmethod
    def _load_yaml_file(cls, filepath: str) -> Dict[str, Any]:
        """Load YAML configuration file"""
        path = Path(filepath)

        if not path.exists():
            raise ConfigError(f"Configuration file not found: {filepath}")

        if not path.is_file():
            raise ConfigError(f"Configuration path is not a file: {filepath}")

        try:
            with open(path, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in configuration file: {e}")
        except OSError as e:
            raise ConfigError(f"Cannot read configuration file {filepath}: {e}")

        if config is None:
            return {}

        if not isinstance(config, dict):
            raise ConfigError("Configuration file must contain a mapping")

        return config

    @classmethod
    def _normalize(cls, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Accept both the flat `{rule-id: options}` layout and a `rules:` section"""
        result: Dict[str, Any] = {'rules': {}}

        rules = raw.get('rules', {})
        if rules is None:
            rules = {}
        if not isinstance(rules, dict):
            raise ConfigError("'rules' must be a mapping of rule identifiers")
        result['rules'].update(rules)

        for key in ('include', 'exclude'):
            if key in raw:
                patterns = raw[key]
                if isinstance(patterns, str):
                    patterns = [patterns]
                if not isinstance(patterns, list) or not all(isinstance(p, str) for p in patterns):
                    raise ConfigError(f"'{key}' must be a list of glob patterns")
                result[key] = patterns

        for key, value in raw.items():
            if key not in ('rules', 'include', 'exclude'):
                result['rules'][key] = value

        return result

    @classmethod
    def _merge_dicts(cls, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two dictionaries"""
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = cls._merge_dicts(result[key], value)
            else:
                result[key] = value

        return result

    @classmethod
    def _apply_cli_overrides(cls, config: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
        """Apply CLI argument overrides to configuration"""
        result = config.copy()
        rules = dict(result.get('rules', {}))

        for rule_id in overrides.get('enable') or []:
            if rules.get(rule_id) in (None, False):
                rules[rule_id] = True

        for rule_id in overrides.get('disable') or []:
            rules[rule_id] = False

        max_depth = overrides.get('max_depth')
        if max_depth is not None:
            current = rules.get('max-selector-depth')
            options = dict(current) if isinstance(current, dict) else {}
            options['max'] = max_depth
            rules['max-selector-depth'] = options

        result['rules'] = rules
        return result

    @classmethod
    def _dict_to_config(cls, config_dict: Dict[str, Any], registry: RuleRegistry) -> LintConfig:
        """Convert configuration dictionary to LintConfig, validating every rule entry"""
        entries = config_dict.get('rules', {})

        unknown = sorted(rule_id for rule_id in entries if rule_id not in registry)
        if unknown:
            known = ', '.join(registry.rule_ids())
            raise ConfigError(
                f"Unknown rule identifier(s): {', '.join(unknown)}. Known rules: {known}"
            )

        rules: Dict[str, Optional[Dict[str, Any]]] = {}
        for rule_id in registry.rule_ids():
            entry = entries.get(rule_id, True)
            if entry is False or entry is None:
                rules[rule_id] = None
                continue
            if entry is True:
                options: Dict[str, Any] = {}
            elif isinstance(entry, dict):
                options = dict(entry)
            else:
                raise ConfigError(
                    f"Rule '{rule_id}' must be set to false, true or an options mapping, "
                    f"got {entry!r}"
                )
            try:
                rules[rule_id] = registry.instantiate(rule_id, options).options
            except ValueError as e:
                raise ConfigError(str(e))

        try:
            return LintConfig(
                rules=rules,
                include=list(config_dict.get('include') or []),
                exclude=list(config_dict.get('exclude') or []),
            )
        except ValueError as e:
            raise ConfigError(str(e))

    @classmethod
    def _deep_copy_dict(cls, d: Dict[str, Any]) -> Dict[str, Any]:
        """Deep copy a dictionary"""
        result = {}
        for key, value in d.items():
            if isinstance(value, dict):
                result[key] = cls._deep_copy_dict(value)
            elif isinstance(value, list):
                result[key] = value.copy()
            else:
                result[key] = value
        return result

    @classmethod
    def create_default_config_file(cls, filepath: str) -> None:
        """Create a default configuration file"""
        config_template = """# styleaudit configuration
#
# Each rule is set to false (disabled), true (enabled with defaults)
# or a mapping of options. Every rule accepts a `severity` option
# (warning or error).

rules:
  max-selector-depth:
    max: 3
  no-id-selector: true
  no-tag-qualified-id-or-class: true
  zero-needs-no-unit: true
  prefer-shorthand: true
  restrict-nesting-purpose: true
  commented-out-code-block: true

# Files picked up when a directory is linted
include:
  - "*.scss"
  - "*.css"

# Glob patterns (matched against the path) to skip
exclude:
  - "*/vendor/*"
  - "*/node_modules/*"
"""

        path = Path(filepath)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, 'w', encoding='utf-8') as f:
            f.write(config_template)


def rule_summary(config: LintConfig, registry: RuleRegistry = DEFAULT_REGISTRY) -> List[Dict[str, Any]]:
    """Describe every registered rule with its effective state"""
    summary = []
    for rule_id in registry.rule_ids():
        rule_class = registry[rule_id]
        options = config.rules.get(rule_id)
        definition = rule_class.definition
        summary.append({
            'rule': rule_id,
            'enabled': options is not None,
            'severity': (options or {}).get('severity') or definition.severity,
            'node_kind': definition.node_kind,
            'description': definition.description,
            'options': {k: v for k, v in (options or {}).items() if k != 'severity'},
        })
    return summary
