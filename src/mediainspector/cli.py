"""Command-line interface for MediaInspector."""

import sys
from pathlib import Path

import click

from mediainspector import __version__
from mediainspector.config import load_config
from mediainspector.core.service import RemediationService
from mediainspector.errors import MediaInspectorError
from mediainspector.models.plan import RemediationAction
from mediainspector.utils.language import LANGUAGE_OPTIONS
from mediainspector.utils.logger import setup_logging


def _format_duration(seconds: float) -> str:
    hours, remainder = divmod(int(seconds), 3600)
    return f"{hours}h {remainder // 60}m" if hours else f"{remainder // 60}m"


def _parse_assignments(values: tuple[str, ...]) -> dict[str, str]:
    """Turn ``--set audio_0=eng`` options into a request mapping."""
    languages = {}
    for value in values:
        key, sep, language = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=LANG, got {value!r}", param_hint="--set")
        key = key.strip()
        if key in languages:
            raise click.BadParameter(f"{key} is set more than once", param_hint="--set")
        languages[key] = language.strip()
    return languages


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to configuration file (defaults to built-in defaults)",
)
@click.pass_context
def cli(ctx, config):
    """MediaInspector - find and fix media files needing remux or re-encode."""
    try:
        cfg = load_config(config)
        ctx.ensure_object(dict)
        ctx.obj["config"] = cfg

        setup_logging(cfg.logging)

    except Exception as e:
        click.echo(f"Error loading configuration: {e}", err=True)
        sys.exit(1)


@cli.command()
@click.argument("directory")
@click.option("--issues-only", is_flag=True, help="Only list files needing attention")
@click.pass_context
def scan(ctx, directory, issues_only):
    """Scan a directory and show what each file needs."""
    service = RemediationService(ctx.obj["config"])

    try:
        reports = service.scan(directory)
    except (MediaInspectorError, OSError, ValueError) as e:
        click.secho(f"✗ Error scanning: {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(f"Found {len(reports)} file(s)")
    click.echo("")

    for report in reports:
        if issues_only and not report.classification.needs_attention:
            continue

        file = report.file
        marker = click.style("!", fg="yellow") if report.classification.needs_attention else click.style(
            "✓", fg="green"
        )
        click.echo(f"{marker} {file.name}")
        click.echo(
            f"    {file.display_format}  {file.size_gb:.1f} GB  {_format_duration(file.duration)}  "
            f"{len(file.audio_tracks)} audio / {len(file.subtitle_tracks)} subtitle"
        )
        for action in (RemediationAction.REMUX, RemediationAction.REENCODE):
            for reason in report.classification.reason_texts(action):
                click.secho(f"    [{action.value}] {reason}", fg="yellow")

    attention = sum(1 for r in reports if r.classification.needs_attention)
    click.echo("")
    click.echo(f"{attention} file(s) need attention")


@cli.command()
@click.argument("directory")
@click.argument("file_path")
@click.option(
    "--set",
    "-s",
    "assignments",
    multiple=True,
    help="Language for an unknown track, e.g. --set audio_0=eng --set subtitle_2=ger",
)
@click.option(
    "--leave-unknown",
    is_flag=True,
    help="Confirm leaving unknown tracks untouched when no --set is given",
)
@click.pass_context
def remux(ctx, directory, file_path, assignments, leave_unknown):
    """Fix unknown language tags on FILE_PATH from DIRECTORY."""
    service = RemediationService(ctx.obj["config"])
    languages = _parse_assignments(assignments)

    try:
        result = service.remux(directory, file_path, languages, allow_empty=leave_unknown)
    except MediaInspectorError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    if result.status == "success":
        click.secho(str(result), fg="green")
    elif result.status == "dry_run":
        click.secho(str(result), fg="cyan")
    else:
        click.secho(str(result), fg="yellow")


@cli.command()
@click.argument("directory")
@click.argument("file_path")
@click.option("--no-browser", is_flag=True, help="Print the handoff URL without opening it")
@click.pass_context
def reencode(ctx, directory, file_path, no_browser):
    """Open FILE_PATH in the HandBrake web UI."""
    service = RemediationService(ctx.obj["config"])
    service.launcher.open_browser = not no_browser

    try:
        url = service.reencode(directory, file_path)
    except MediaInspectorError as e:
        click.secho(f"✗ {e}", fg="red", err=True)
        sys.exit(1)

    click.echo(url)


@cli.command()
def languages():
    """List the language codes offered for unknown tracks."""
    for code, name in LANGUAGE_OPTIONS.items():
        click.echo(f"{code}  {name}")


@cli.command()
@click.pass_context
def serve(ctx):
    """Start the HTTP API."""
    config = ctx.obj["config"]

    click.echo("Starting MediaInspector API...")
    click.echo(f"Listening on {config.api.host}:{config.api.port}")
    click.echo(f"  - API docs: http://{config.api.host}:{config.api.port}/docs")
    click.echo("")

    from mediainspector.daemon import start_daemon

    try:
        start_daemon(config)
    except KeyboardInterrupt:
        click.echo("\n\nServer stopped")
        sys.exit(0)


@cli.command()
def version():
    """Show version information."""
    click.echo(f"MediaInspector v{__version__}")


def main():
    """Entry point for the CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
