"""Lint engine that parses files and runs the enabled rules over them"""

import fnmatch
import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Dict, Iterable, List, Optional

from styleaudit.models import (
    AtRuleNode,
    CommentNode,
    DeclarationNode,
    FileResult,
    LintConfig,
    RuleNode,
    Stylesheet,
    Violation,
)
from styleaudit.parser import ParseError, parse_file, parse_stylesheet
from styleaudit.rules import DEFAULT_REGISTRY, PARSE_ERROR_RULE, LintRule, RuleContext, RuleRegistry


logger = logging.getLogger(__name__)

# Node kinds each tree node type is dispatched under
_NODE_KINDS = {
    RuleNode: ('selector',),
    DeclarationNode: ('declaration', 'value'),
    CommentNode: ('comment',),
}


def configure_logging(log_level: str = 'WARNING') -> None:
    """
    Configure logging for the styleaudit package.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.WARNING)

    package_logger = logging.getLogger('styleaudit')
    package_logger.setLevel(numeric_level)

    if not package_logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        ))
        package_logger.addHandler(handler)

    for handler in package_logger.handlers:
        handler.setLevel(numeric_level)


class LintEngine:
    """
    Runs every enabled rule against every node of each stylesheet.

    Rules never mutate the tree, so files are linted independently and in
    parallel; a file's violations are only merged once all of its rules
    have finished.
    """

    def __init__(self, config: LintConfig, registry: RuleRegistry = DEFAULT_REGISTRY):
        """
        Initialize the engine

        Args:
            config: Effective configuration from ConfigManager
            registry: Registry the enabled rules are instantiated from
        """
        self.config = config
        self.registry = registry
        self.rules: List[LintRule] = [
            registry.instantiate(rule_id, config.options_for(rule_id))
            for rule_id in config.enabled_rules
            if rule_id in registry
        ]
        self._cancelled = threading.Event()
        logger.debug(f"LintEngine initialized with rules: {[r.rule_name for r in self.rules]}")

    def cancel(self) -> None:
        """Stop the run before the next file starts"""
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def list_rules(self) -> List[str]:
        return [rule.rule_name for rule in self.rules]

    def lint_text(self, text: str, path: str = '<string>') -> FileResult:
        """Lint stylesheet source held in memory"""
        try:
            sheet = parse_stylesheet(text, path)
        except ParseError as e:
            return self._unchecked(e)
        return FileResult(path=path, violations=self.check_stylesheet(sheet))

    def lint_file(self, path: str) -> FileResult:
        """
        Lint one file

        A parse failure is reported as a single `parse-error` violation and
        the file is marked unchecked.
        """
        try:
            sheet = parse_file(path)
        except ParseError as e:
            return self._unchecked(e)
        return FileResult(path=path, violations=self.check_stylesheet(sheet))

    def _unchecked(self, error: ParseError) -> FileResult:
        logger.warning(f"Could not parse {error.path}: {error.message}")
        violation = Violation(
            path=error.path,
            line=error.line,
            column=error.column,
            rule_id=PARSE_ERROR_RULE,
            message=error.message,
            severity='error',
        )
        return FileResult(path=error.path, violations=[violation], checked=False)

    def check_stylesheet(self, sheet: Stylesheet) -> List[Violation]:
        """
        Run the enabled rules over a parsed stylesheet

        Args:
            sheet: Parsed stylesheet

        Returns:
            Violations in traversal order
        """
        by_kind: Dict[str, List[LintRule]] = {}
        for rule in self.rules:
            by_kind.setdefault(rule.node_kind, []).append(rule)

        failed = set()
        violations: List[Violation] = []

        def run(rule: LintRule, node, context: RuleContext) -> None:
            if rule.rule_name in failed:
                return
            try:
                violations.extend(rule.check(node, context))
            except Exception as e:
                failed.add(rule.rule_name)
                logger.error(
                    f"Rule '{rule.rule_name}' failed on {sheet.path}:{getattr(node, 'line', '?')} "
                    f"({type(node).__name__}), skipping it for this file: {e}",
                    exc_info=True
                )

        for node, ancestors in sheet.walk():
            if isinstance(node, AtRuleNode):
                continue
            kinds = _NODE_KINDS.get(type(node), ())
            context = RuleContext(path=sheet.path, ancestors=ancestors)
            for kind in kinds:
                for rule in by_kind.get(kind, []):
                    run(rule, node, context)

        top_level = RuleContext(path=sheet.path)
        for comment in sheet.comments:
            for rule in by_kind.get('comment', []):
                run(rule, comment, top_level)

        return violations

    def collect_files(self, paths: Iterable[str]) -> List[str]:
        """
        Expand paths into the stylesheet files to lint

        Files given explicitly are always linted; directories are walked
        recursively and filtered by the include/exclude patterns.

        Args:
            paths: Files and directories

        Returns:
            Sorted, de-duplicated file paths
        """
        files = set()
        for path in paths:
            if os.path.isdir(path):
                for root, dirs, names in os.walk(path):
                    dirs.sort()
                    for name in names:
                        file_path = os.path.join(root, name)
                        if self._selected(file_path):
                            files.add(file_path)
            else:
                files.add(path)
        return sorted(files)

    def _selected(self, file_path: str) -> bool:
        name = os.path.basename(file_path)
        if not any(fnmatch.fnmatch(name, pattern) for pattern in self.config.include):
            return False
        return not any(fnmatch.fnmatch(file_path, pattern) for pattern in self.config.exclude)

    def lint_paths(self, paths: Iterable[str], jobs: Optional[int] = None) -> List[FileResult]:
        """
        Lint files and directories

        Args:
            paths: Files and directories to lint
            jobs: Number of worker threads (defaults to the CPU count)

        Returns:
            One FileResult per completed file, sorted by path
        """
        files = self.collect_files(paths)
        logger.info(f"Linting {len(files)} file(s)")
        results: List[FileResult] = []

        if not files:
            return results

        workers = max(1, min(jobs or os.cpu_count() or 1, len(files)))

        def run_file(path: str) -> Optional[FileResult]:
            if self.cancelled:
                return None
            return self.lint_file(path)

        with ThreadPoolExecutor(max_workers=workers) as pool:
            futures = {pool.submit(run_file, path): path for path in files}
            for future in as_completed(futures):
                result = future.result()
                if result is not None:
                    results.append(result)

        if self.cancelled:
            logger.warning(f"Run cancelled after {len(results)} of {len(files)} file(s)")

        results.sort(key=lambda r: r.path)
        return results
