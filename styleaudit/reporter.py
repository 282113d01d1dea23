"""Lint report generation"""

import json
import sys
from typing import List, Optional, TextIO

from styleaudit.models import FileResult, Violation


FORMATS = ('text', 'line', 'json')


class LintReporter:
    """Orders violations deterministically and renders them in various formats"""

    def __init__(self, results: List[FileResult]):
        """
        Initialize reporter with per-file results

        Args:
            results: FileResults from the engine, in any order
        """
        self.results = sorted(results, key=lambda r: r.path)
        self.violations: List[Violation] = sorted(
            (v for r in results for v in r.violations),
            key=Violation.sort_key,
        )

    @property
    def errors(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == 'error']

    @property
    def warnings(self) -> List[Violation]:
        return [v for v in self.violations if v.severity == 'warning']

    @property
    def unchecked(self) -> List[str]:
        return [r.path for r in self.results if not r.checked]

    def exit_code(self) -> int:
        """1 when any error-severity violation exists, 0 otherwise"""
        return 1 if self.errors else 0

    def generate_line_report(self) -> str:
        """
        Generate the machine format: one `path:line:column: [severity] rule-id message` per line

        Returns:
            Report text, empty when there are no violations
        """
        return ''.join(v.to_line() + '\n' for v in self.violations)

    def generate_text_report(self) -> str:
        """
        Generate a human readable report grouped by file

        Returns:
            Report as plain text string
        """
        if not self.violations:
            return f"No violations found in {len(self.results)} file(s).\n"

        lines = []
        current = None
        for violation in self.violations:
            if violation.path != current:
                if current is not None:
                    lines.append("")
                current = violation.path
                lines.append(current)
            lines.append(
                f"  {violation.line}:{violation.column}  {violation.severity:<7}  "
                f"{violation.message}  ({violation.rule_id})"
            )

        lines.append("")
        lines.append("-" * 70)
        lines.append(
            f"{len(self.violations)} violation(s): {len(self.errors)} error(s), "
            f"{len(self.warnings)} warning(s) in {len(self.results)} file(s)"
        )
        if self.unchecked:
            lines.append(f"Unchecked (could not be parsed): {', '.join(self.unchecked)}")

        return "\n".join(lines) + "\n"

    def generate_json_report(self) -> str:
        """
        Generate a JSON format report

        Returns:
            Report as JSON string with stable key order
        """
        report = {
            "summary": {
                "files": len(self.results),
                "violations": len(self.violations),
                "errors": len(self.errors),
                "warnings": len(self.warnings),
            },
            "unchecked": self.unchecked,
            "violations": [v.to_dict() for v in self.violations],
        }

        return json.dumps(report, indent=2, sort_keys=True) + "\n"

    def generate_report(self, format: str = 'text') -> str:
        """
        Generate report in specified format

        Args:
            format: Report format ('text', 'line' or 'json')

        Returns:
            Report as string

        Raises:
            ValueError: If format is not supported
        """
        format = format.lower()

        if format == 'text':
            return self.generate_text_report()
        elif format == 'line':
            return self.generate_line_report()
        elif format == 'json':
            return self.generate_json_report()
        else:
            raise ValueError(f"Unsupported format: {format}. Use 'text', 'line' or 'json'")

    def write(self, stream: Optional[TextIO] = None, format: str = 'text') -> None:
        """Write the report to a stream (stdout by default)"""
        stream = stream or sys.stdout
        stream.write(self.generate_report(format))
        stream.flush()

    def save_report(self, output_path: str, format: str = 'text') -> None:
        """
        Generate and save report to file

        Args:
            output_path: Path to save the report
            format: Report format ('text', 'line' or 'json')
        """
        report = self.generate_report(format)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(report)
