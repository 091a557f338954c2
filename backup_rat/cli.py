"""Command-line interface for backup-rat."""

import json
import logging
import os
import sys
from typing import Optional

import click

from . import __version__
from .config.config_manager import APP_NAME, ConfigManager
from .core.resolver import ALL_SELECTOR, resolve_targets, resolve_thread_count
from .core.runner import BackupRunner
from .reporters.text_reporter import TextReporter, summary_to_dict

BANNER = r"""
     (\,/)
     oo   '''//,        _
   ,/_;~,        \,    / '
   "'   \    (    \    !
         ',|  \    |__.'
         '~  '~----''
      BACKING UP DATA.
      PLEASE STAND-BY.
"""


def setup_logging(level: str, log_file: Optional[str] = None, stream=None):
    """Set up logging configuration."""
    # Convert string level to logging constant
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f'Invalid log level: {level}')

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(stream or sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)
        except OSError as e:
            click.echo(f"Warning: Could not set up file logging: {e}", err=True)


def _load_config(ctx, stream=None) -> ConfigManager:
    """Load configuration and apply its logging settings."""
    config_manager = ConfigManager(ctx.obj.get('config_path'))
    config_manager.load_config()

    logging_config = config_manager.get_logging_config()
    level = ctx.obj.get('log_level') or logging_config.get('level', 'INFO')
    if ctx.obj.get('verbose') or config_manager.get_settings().verbose:
        level = 'DEBUG'
    setup_logging(level, ctx.obj.get('log_file') or logging_config.get('file'), stream)

    return config_manager


@click.group()
@click.option('--config', '-c', 'config_path',
              help='Path to configuration file')
@click.option('--log-level', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
              help='Logging level (default: from config, else INFO)')
@click.option('--log-file',
              help='Log file path')
@click.option('--verbose', '-v', is_flag=True,
              help='Shortcut for --log-level DEBUG')
@click.version_option(version=__version__, prog_name=APP_NAME)
@click.pass_context
def cli(ctx, config_path: Optional[str], log_level: Optional[str], log_file: Optional[str],
        verbose: bool):
    """backup-rat - A versatile backup program."""
    ctx.ensure_object(dict)

    # Log config problems before the config itself is available
    setup_logging(log_level or 'WARNING', log_file)

    ctx.obj['config_path'] = config_path
    ctx.obj['log_level'] = log_level
    ctx.obj['log_file'] = log_file
    ctx.obj['verbose'] = verbose


@cli.command()
@click.argument('selector', default=ALL_SELECTOR)
@click.option('--output', '-o', type=click.Choice(['text', 'json']), default='text',
              help='Output format')
@click.pass_context
def backup(ctx, selector: str, output: str):
    """Back up SELECTOR: a target tag, or "all" for every non-optional target."""
    try:
        # Keep stdout clean for JSON consumers
        config_manager = _load_config(ctx, stream=sys.stderr if output == 'json' else None)
    except Exception as e:
        click.echo(f"❌ Could not load configuration: {e}", err=True)
        sys.exit(1)

    settings = config_manager.get_settings()
    runner = BackupRunner(settings, config_manager.get_targets())
    reporter = TextReporter(color=settings.color)

    on_report = None
    if output == 'text':
        if settings.fancy_text:
            click.echo(BANNER)

        def on_report(report):
            click.echo(reporter.render_target(report))

    summary = runner.run(selector, on_report=on_report)

    if output == 'json':
        click.echo(json.dumps(summary_to_dict(summary), indent=2))
    else:
        click.echo(reporter.render_summary(summary))

    sys.exit(summary.exit_code)


cli.add_command(backup, name='bu')


@cli.command('list-targets')
@click.pass_context
def list_targets(ctx):
    """Show configured targets and how "all" treats them."""
    try:
        config_manager = _load_config(ctx)
    except Exception as e:
        click.echo(f"❌ Could not load configuration: {e}", err=True)
        sys.exit(1)

    settings = config_manager.get_settings()
    targets = config_manager.get_targets()
    included = set(id(target) for target in resolve_targets(ALL_SELECTOR, targets))

    if not targets:
        click.echo("No targets configured")
        return

    for i, target in enumerate(targets, 1):
        mode = f"versioned, keep {target.keep_num}" if target.versioned else "mirror"
        scope = "all" if id(target) in included else "optional"
        threads = resolve_thread_count(target, settings)
        click.echo(f"{i}. {target.display_name} [{scope}]")
        click.echo(f"   {target.source_path} -> {target.destination_root} ({mode}, {threads} threads)")
        if target.ignore_files or target.ignore_folders:
            click.echo(f"   Ignoring {len(target.ignore_files)} file and "
                       f"{len(target.ignore_folders)} folder patterns")


@cli.command('validate-config')
@click.pass_context
def validate_config(ctx):
    """Validate configuration file."""
    try:
        config_manager = _load_config(ctx)
        settings = config_manager.get_settings()
        targets = config_manager.get_targets()
    except Exception as e:
        click.echo(f"❌ Configuration validation failed: {e}", err=True)
        if isinstance(e, FileNotFoundError) and not ctx.obj.get('config_path'):
            click.echo("Searched:", err=True)
            for location in ConfigManager.DEFAULT_CONFIG_LOCATIONS:
                click.echo(f"   {os.path.abspath(location)}", err=True)
        sys.exit(1)

    click.echo(f"✅ Configuration loaded successfully: {config_manager.config_path}")
    click.echo(f"\n📊 Configuration Summary:")
    click.echo(f"   Targets: {len(targets)}")
    click.echo(f"   Multi-threaded: {settings.multi_threaded} ({settings.thread_count} threads)")
    tags = sorted(set(target.tag for target in targets if target.tag))
    if tags:
        click.echo(f"   Tags: {', '.join(tags)}")


@cli.command()
@click.argument('shell', type=click.Choice(['bash', 'zsh', 'fish']))
def completion(shell: str):
    """Print the shell completion script for SHELL."""
    from click.shell_completion import get_completion_class

    completion_class = get_completion_class(shell)
    script = completion_class(cli, {}, APP_NAME, "_BACKUP_RAT_COMPLETE").source()
    click.echo(script)


def main():
    """Main CLI entry point."""
    cli()


if __name__ == '__main__':
    main()
