"""CLI interface for the styleaudit stylesheet linter"""
import click
import os
import sys
import traceback
from pathlib import Path

from styleaudit import __version__
from styleaudit.config import ConfigError, ConfigManager, rule_summary
from styleaudit.engine import LintEngine, configure_logging
from styleaudit.reporter import FORMATS, LintReporter


EXIT_CONFIG_ERROR = 2


def handle_error(error, verbose=False):
    """Handle and display errors in a user-friendly way"""
    error_msg = str(error)

    if isinstance(error, PermissionError):
        click.echo(f"✗ Permission denied: {error_msg}", err=True)
    elif isinstance(error, FileNotFoundError):
        click.echo(f"✗ File or directory not found: {error_msg}", err=True)
    else:
        click.echo(f"✗ Error: {error_msg}", err=True)

    if verbose:
        click.echo("\nDetailed traceback:", err=True)
        traceback.print_exc()


def load_config_or_exit(config_file, cli_overrides=None):
    """Resolve configuration, exit with status 2 on a configuration error"""
    if not config_file:
        config_file = ConfigManager.find_config_file()

    try:
        return ConfigManager.load_config(config_file=config_file, cli_overrides=cli_overrides)
    except ConfigError as e:
        click.echo(f"✗ Configuration error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose output', envvar='STYLEAUDIT_VERBOSE')
@click.pass_context
def cli(ctx, verbose):
    """Stylesheet style-rule linter

    Checks CSS/SCSS files against mechanically verifiable style
    conventions: selector depth, id selectors, tag qualification,
    zero units, shorthand usage, nesting purpose and commented-out code.

    Environment Variables:
        STYLEAUDIT_VERBOSE: Enable verbose output (1, true, yes)

    Examples:
        styleaudit check src/styles
        styleaudit check --format line main.scss
        styleaudit rules
    """
    ctx.ensure_object(dict)
    ctx.obj['verbose'] = verbose
    configure_logging('DEBUG' if verbose else 'WARNING')


@cli.command()
@click.argument('paths', nargs=-1, required=True, type=click.Path(exists=True))
@click.option('--config', 'config_file', type=click.Path(), help='Path to configuration file')
@click.option('--format', type=click.Choice(FORMATS, case_sensitive=False),
              default='text', help='Report format (default: text)')
@click.option('--output', '-o', help='Output file (default: stdout)')
@click.option('--disable', multiple=True, help='Disable a rule (can be specified multiple times)')
@click.option('--enable', multiple=True, help='Enable a rule (can be specified multiple times)')
@click.option('--max-depth', type=int, help='Override max-selector-depth threshold')
@click.option('--jobs', '-j', type=click.IntRange(min=1), help='Number of files linted in parallel')
@click.pass_context
def check(ctx, paths, config_file, format, output, disable, enable, max_depth, jobs):
    """Lint stylesheet files and directories

    Exits with status 1 when any error-severity violation is found,
    2 on a configuration error, 0 otherwise.

    Examples:
        styleaudit check src/styles --config .styleaudit.yml
        styleaudit check main.scss --disable prefer-shorthand --max-depth 4
    """
    verbose = ctx.obj.get('verbose', False)

    config = load_config_or_exit(config_file, {
        'enable': list(enable),
        'disable': list(disable),
        'max_depth': max_depth,
    })

    try:
        engine = LintEngine(config)
        results = engine.lint_paths(paths, jobs=jobs)
        reporter = LintReporter(results)

        if output:
            reporter.save_report(output, format)
            click.echo(f"✓ Report saved to {output}", err=True)
        else:
            click.echo(reporter.generate_report(format), nl=False)
    except Exception as e:
        handle_error(e, verbose=verbose)
        sys.exit(1)

    sys.exit(reporter.exit_code())


@cli.command()
@click.option('--config', 'config_file', type=click.Path(), help='Path to configuration file')
def rules(config_file):
    """List available rules and their effective state

    Example:
        styleaudit rules --config .styleaudit.yml
    """
    config = load_config_or_exit(config_file)

    for entry in rule_summary(config):
        state = click.style('on ', fg='green') if entry['enabled'] else click.style('off', fg='red')
        options = ', '.join(f"{k}={v}" for k, v in sorted(entry['options'].items()))
        suffix = f" [{options}]" if options else ''
        click.echo(
            f"{state} {entry['rule']:<30} {entry['severity']:<8} {entry['node_kind']:<12}"
            f"{entry['description']}{suffix}"
        )


@cli.command()
@click.option('--path', 'config_path', default=ConfigManager.DEFAULT_CONFIG_FILES[0],
              help='Where to write the configuration file (default: .styleaudit.yml)')
@click.option('--force', is_flag=True, help='Overwrite an existing file')
@click.pass_context
def init(ctx, config_path, force):
    """Create a default configuration file

    Example:
        styleaudit init --path .styleaudit.yml
    """
    verbose = ctx.obj.get('verbose', False)

    if os.path.exists(config_path) and not force:
        click.echo(f"✗ {config_path} already exists, use --force to overwrite", err=True)
        sys.exit(1)

    try:
        ConfigManager.create_default_config_file(config_path)
    except Exception as e:
        handle_error(e, verbose=verbose)
        sys.exit(1)

    click.echo(f"✓ Configuration file created at {Path(config_path)}")


if __name__ == '__main__':
    cli()
