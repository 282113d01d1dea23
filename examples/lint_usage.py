"""Example usage of the stylesheet linter"""

import os
import tempfile

from styleaudit.config import ConfigManager
from styleaudit.engine import LintEngine
from styleaudit.reporter import LintReporter


SAMPLE = """\
#main-navigation ul {
  margin-top: 0px;
  margin-right: 10px;
  margin-bottom: 0;
  margin-left: 10px;
}

div.card {
  .title { font-weight: bold; }
  &:hover { color: red; }
}

/* .legacy { display: none; } */
"""


def main():
    """Demonstrate linting functionality"""

    with tempfile.TemporaryDirectory() as tmpdir:
        print(f"Linting stylesheets in: {tmpdir}\n")

        path = os.path.join(tmpdir, 'main.scss')
        with open(path, 'w') as f:
            f.write(SAMPLE)

        # Defaults, with a stricter depth limit
        config = ConfigManager.load_config(cli_overrides={'max_depth': 1})
        engine = LintEngine(config)

        print("Enabled rules:")
        for rule_id in engine.list_rules():
            print(f"  - {rule_id}")
        print()

        results = engine.lint_paths([tmpdir])
        reporter = LintReporter(results)

        print("=" * 80)
        print("TEXT REPORT")
        print("=" * 80)
        print(reporter.generate_report('text'))

        print("=" * 80)
        print("LINE REPORT")
        print("=" * 80)
        print(reporter.generate_report('line'))

        report_file = os.path.join(tmpdir, 'report.json')
        reporter.save_report(report_file, format='json')
        print(f"JSON report saved to: {report_file}")
        print(f"Exit code would be: {reporter.exit_code()}")


if __name__ == '__main__':
    main()
