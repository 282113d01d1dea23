"""Shared pytest fixtures and configuration for styleaudit tests"""

import shutil
import tempfile
from pathlib import Path

import pytest

from styleaudit.config import ConfigManager
from styleaudit.engine import LintEngine
from styleaudit.parser import parse_stylesheet


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing"""
    tmpdir = tempfile.mkdtemp(prefix='styleaudit_test_')
    yield tmpdir
    shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def write_stylesheet(temp_dir):
    """Fixture that writes stylesheet source into the temp directory"""
    def _write(name, content):
        path = Path(temp_dir) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')
        return str(path)
    return _write


@pytest.fixture
def write_config(temp_dir):
    """Fixture that writes a configuration file into the temp directory"""
    def _write(content, name='config.yml'):
        path = Path(temp_dir) / name
        path.write_text(content, encoding='utf-8')
        return str(path)
    return _write


@pytest.fixture
def default_config():
    """Configuration with every rule enabled at its defaults"""
    return ConfigManager.load_config()


@pytest.fixture
def engine(default_config):
    """Engine running every rule at its defaults"""
    return LintEngine(default_config)


def only_rule(rule_id, **options):
    """Engine running a single rule"""
    config = ConfigManager.load_config()
    for other in list(config.rules):
        if other != rule_id:
            config.rules[other] = None
    if options:
        config.rules[rule_id] = dict(config.rules[rule_id], **options)
    return LintEngine(config)


def lint(source, rule_id=None, **options):
    """Lint source text and return its violations"""
    engine = only_rule(rule_id, **options) if rule_id else LintEngine(ConfigManager.load_config())
    return engine.lint_text(source, 'test.scss').violations


def first_rule(source):
    """Parse source and return its first top-level rule node"""
    return parse_stylesheet(source).children[0]


def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
