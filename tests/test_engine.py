"""Tests for the lint engine"""

import logging
from pathlib import Path

import pytest

from styleaudit.config import ConfigManager
from styleaudit.engine import LintEngine, configure_logging
from styleaudit.models import LintConfig, StyleRule
from styleaudit.rules import DEFAULT_REGISTRY, RULE_CLASSES, LintRule, RuleRegistry


class ExplodingRule(LintRule):
    """Rule that always fails, for isolation tests"""

    definition = StyleRule(
        rule_id='exploding',
        message='never rendered',
        severity='error',
        node_kind='selector',
    )

    def check(self, node, context):
        raise RuntimeError("boom")


class TestLintText:
    """Test linting in-memory source"""

    def test_clean_stylesheet(self, engine):
        """Test a stylesheet that follows every rule"""
        source = (
            "$gutter: 10px;\n"
            "/* Navigation */\n"
            ".nav {\n"
            "  margin: 0 auto;\n"
            "  &:hover { color: red; }\n"
            "}\n"
        )
        result = engine.lint_text(source, 'clean.scss')
        assert result.violations == []
        assert result.checked

    def test_parse_error_becomes_violation(self, engine):
        """Test an unparseable file yields one parse-error violation"""
        result = engine.lint_text(".a { color: red;", 'broken.scss')
        assert not result.checked
        assert len(result.violations) == 1
        violation = result.violations[0]
        assert violation.rule_id == 'parse-error'
        assert violation.severity == 'error'
        assert violation.path == 'broken.scss'

    def test_only_enabled_rules_run(self):
        """Test disabled rules produce nothing"""
        config = ConfigManager.load_config(cli_overrides={'disable': ['no-id-selector']})
        engine = LintEngine(config)
        assert 'no-id-selector' not in engine.list_rules()
        assert engine.lint_text("#a { }").violations == []

    def test_scss_variables_and_class_selectors(self, engine):
        """Test a typical SCSS file parses and every selector rule can fire"""
        source = (
            "$gutter: 10px;\n"
            "ul.nav {\n"
            "  padding: $gutter !important;\n"
            "  .item { }\n"
            "}\n"
            ".a .b .c .d .e { }\n"
        )
        result = engine.lint_text(source, 'nav.scss')
        assert result.checked
        found = sorted((v.rule_id, v.line) for v in result.violations)
        assert found == [
            ('max-selector-depth', 6),
            ('no-tag-qualified-id-or-class', 2),
            ('restrict-nesting-purpose', 4),
        ]

    def test_default_config_enables_every_rule(self):
        """Test an engine built from a bare LintConfig runs all rules"""
        engine = LintEngine(LintConfig())
        assert engine.list_rules() == DEFAULT_REGISTRY.rule_ids()
        assert engine.lint_text("#a { }").violations[0].rule_id == 'no-id-selector'

    def test_main_navigation_scenario(self, engine):
        """Test '#main-navigation ul' yields one id violation and no depth violation"""
        violations = engine.lint_text("#main-navigation ul { }\n", 'nav.scss').violations
        rule_ids = [v.rule_id for v in violations]
        assert rule_ids.count('no-id-selector') == 1
        assert 'max-selector-depth' not in rule_ids
        assert violations[rule_ids.index('no-id-selector')].line == 1


class TestRuleIsolation:
    """Test a failing rule does not stop the others"""

    def test_failing_rule_is_skipped(self, caplog):
        """Test exceptions are logged and other rules still report"""
        registry = RuleRegistry(RULE_CLASSES + (ExplodingRule,))
        config = ConfigManager.load_config(registry=registry)
        engine = LintEngine(config, registry=registry)

        with caplog.at_level(logging.ERROR, logger='styleaudit'):
            result = engine.lint_text("#a { } #b { }", 'x.scss')

        assert [v.rule_id for v in result.violations] == ['no-id-selector', 'no-id-selector']
        failures = [r for r in caplog.records if 'exploding' in r.getMessage()]
        assert len(failures) == 1
        assert 'x.scss:1' in failures[0].getMessage()


class TestLintPaths:
    """Test linting files and directories"""

    def test_directory_walk(self, engine, write_stylesheet):
        """Test directories are walked and filtered by pattern"""
        write_stylesheet('a.scss', "#a { }")
        write_stylesheet('sub/b.css', ".b { margin: 0px; }")
        write_stylesheet('notes.txt', "#not-a-stylesheet { }")
        root = str(Path(write_stylesheet('c.scss', ".c { }")).parent)

        results = engine.lint_paths([root], jobs=2)
        names = [Path(r.path).name for r in results]
        assert names == ['a.scss', 'c.scss', 'b.css']
        assert [r.path for r in results] == sorted(r.path for r in results)

    def test_explicit_file_always_linted(self, engine, write_stylesheet):
        """Test a file given by name bypasses include patterns"""
        path = write_stylesheet('theme.less.txt', "#a { }")
        results = engine.lint_paths([path])
        assert len(results) == 1
        assert results[0].violations[0].rule_id == 'no-id-selector'

    def test_exclude_patterns(self, write_stylesheet):
        """Test exclude globs"""
        keep = write_stylesheet('src/a.scss', ".a { }")
        write_stylesheet('vendor/b.scss', ".b { }")
        root = str(Path(keep).parent.parent)
        config = ConfigManager.load_config()
        config.exclude = ['*/vendor/*']
        results = LintEngine(config).lint_paths([root])
        assert [r.path for r in results] == [keep]

    def test_parse_error_does_not_abort_run(self, engine, write_stylesheet):
        """Test other files are still linted when one fails to parse"""
        broken = write_stylesheet('broken.scss', ".a {")
        good = write_stylesheet('good.scss', "#b { }")
        results = {r.path: r for r in engine.lint_paths([broken, good])}
        assert not results[broken].checked
        assert results[good].checked
        assert results[good].violations[0].rule_id == 'no-id-selector'

    def test_cancel_before_run(self, engine, write_stylesheet):
        """Test a cancelled engine lints no further files"""
        path = write_stylesheet('a.scss', "#a { }")
        engine.cancel()
        assert engine.cancelled
        assert engine.lint_paths([path]) == []

    def test_empty_input(self, engine, temp_dir):
        """Test a directory with no stylesheets"""
        assert engine.lint_paths([temp_dir]) == []


class TestLogging:
    """Test logging configuration"""

    def test_configure_logging_sets_level(self):
        """Test the package logger level follows the requested level"""
        configure_logging('DEBUG')
        assert logging.getLogger('styleaudit').level == logging.DEBUG
        configure_logging('WARNING')
        assert logging.getLogger('styleaudit').level == logging.WARNING
