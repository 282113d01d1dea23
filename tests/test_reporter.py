"""Tests for lint report generation"""

import io
import json

import pytest

from styleaudit.models import FileResult, Violation
from styleaudit.reporter import LintReporter


def make_violation(path='a.scss', line=1, column=1, rule_id='no-id-selector',
                   message='Avoid id selector', severity='error'):
    return Violation(path=path, line=line, column=column, rule_id=rule_id,
                     message=message, severity=severity)


@pytest.fixture
def sample_results():
    """Results from two files, deliberately out of order"""
    return [
        FileResult('b.scss', [
            make_violation('b.scss', 3, 1, 'zero-needs-no-unit', "'0px' needs no unit", 'warning'),
        ]),
        FileResult('a.scss', [
            make_violation('a.scss', 5, 2, 'prefer-shorthand', 'Use margin: 0', 'warning'),
            make_violation('a.scss', 2, 7),
            make_violation('a.scss', 2, 7, 'max-selector-depth', 'too deep', 'warning'),
        ]),
        FileResult('c.scss', [
            make_violation('c.scss', 1, 5, 'parse-error', "Unclosed '{'"),
        ], checked=False),
    ]


class TestOrdering:
    """Test deterministic ordering"""

    def test_sorted_by_path_line_column_rule(self, sample_results):
        """Test violations sort by file, line, column, then rule id"""
        reporter = LintReporter(sample_results)
        keys = [(v.path, v.line, v.column, v.rule_id) for v in reporter.violations]
        assert keys == [
            ('a.scss', 2, 7, 'max-selector-depth'),
            ('a.scss', 2, 7, 'no-id-selector'),
            ('a.scss', 5, 2, 'prefer-shorthand'),
            ('b.scss', 3, 1, 'zero-needs-no-unit'),
            ('c.scss', 1, 5, 'parse-error'),
        ]

    def test_input_order_does_not_matter(self, sample_results):
        """Test byte-identical output regardless of result order"""
        forward = LintReporter(sample_results)
        backward = LintReporter(list(reversed(sample_results)))
        for format in ('text', 'line', 'json'):
            assert forward.generate_report(format) == backward.generate_report(format)


class TestFormats:
    """Test report formats"""

    def test_line_format(self, sample_results):
        """Test one record per violation in path:line:column format"""
        report = LintReporter(sample_results).generate_line_report()
        lines = report.splitlines()
        assert len(lines) == 5
        assert lines[1] == "a.scss:2:7: [error] no-id-selector Avoid id selector"
        assert report.endswith('\n')

    def test_line_format_empty(self):
        """Test no output when there are no violations"""
        assert LintReporter([FileResult('a.scss')]).generate_line_report() == ''

    def test_text_format(self, sample_results):
        """Test human readable report with summary"""
        report = LintReporter(sample_results).generate_text_report()
        assert report.startswith('a.scss\n')
        assert '2:7' in report
        assert '2 error(s), 3 warning(s) in 3 file(s)' in report
        assert 'Unchecked (could not be parsed): c.scss' in report

    def test_text_format_clean(self):
        """Test the clean-run message"""
        report = LintReporter([FileResult('a.scss')]).generate_text_report()
        assert report == "No violations found in 1 file(s).\n"

    def test_json_format(self, sample_results):
        """Test JSON structure"""
        data = json.loads(LintReporter(sample_results).generate_json_report())
        assert data['summary'] == {'files': 3, 'violations': 5, 'errors': 2, 'warnings': 3}
        assert data['unchecked'] == ['c.scss']
        assert data['violations'][0]['rule'] == 'max-selector-depth'

    def test_unsupported_format(self, sample_results):
        """Test unknown format raises ValueError"""
        with pytest.raises(ValueError):
            LintReporter(sample_results).generate_report('html')

    def test_write_to_stream(self, sample_results):
        """Test writing to an output sink"""
        stream = io.StringIO()
        LintReporter(sample_results).write(stream, format='line')
        assert stream.getvalue().count('\n') == 5

    def test_save_report(self, sample_results, temp_dir):
        """Test saving to a file"""
        path = temp_dir + '/report.json'
        LintReporter(sample_results).save_report(path, format='json')
        with open(path) as f:
            assert json.load(f)['summary']['violations'] == 5


class TestExitCode:
    """Test the exit status contract"""

    def test_errors_fail(self, sample_results):
        """Test error-severity violations give a non-zero exit code"""
        assert LintReporter(sample_results).exit_code() == 1

    def test_warnings_only_succeed(self):
        """Test warning-only runs succeed"""
        results = [FileResult('a.scss', [make_violation(severity='warning')])]
        assert LintReporter(results).exit_code() == 0

    def test_clean_succeeds(self):
        """Test a clean run succeeds"""
        assert LintReporter([]).exit_code() == 0
