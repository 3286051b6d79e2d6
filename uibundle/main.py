"""
UI Bundle Builder — CLI entrypoint.

Usage:
    uibundle --help
    uibundle lint
    uibundle build-preview --watch
    uibundle bundle
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from uibundle import __version__
from uibundle.core.observability.logging_config import setup_logging


@click.group()
@click.version_option(version=__version__, prog_name="uibundle")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    help="Path to ui-build.yml (default: auto-detect).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    debug: bool,
    config_path: str | None,
) -> None:
    """UI Bundle Builder — lint, build, preview and pack a site UI."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    ctx.obj["config_path"] = Path(config_path) if config_path else None

    # ── Logging setup (once, at process start) ──────────────────
    if debug:
        level = "DEBUG"
    elif verbose:
        level = "INFO"
    elif quiet:
        level = "ERROR"
    else:
        level = os.environ.get("UIB_LOG_LEVEL", "WARNING")

    setup_logging(
        level=level,
        log_file=os.environ.get("UIB_LOG_FILE"),
        log_file_level=os.environ.get("UIB_LOG_FILE_LEVEL"),
        quiet_third_party=not debug,
    )


def _announce_bundle(bundle_path: str) -> None:
    if not os.environ.get("CI"):
        click.echo(f"📦 UI bundle: {bundle_path}")


def run_task_command(ctx: click.Context, name: str, *, watch: bool = False) -> None:
    """Run one catalog task, print its outcome, exit 1 on failure."""
    from uibundle.adapters.node.tool import node_registry
    from uibundle.core.config.loader import ConfigError, load_config
    from uibundle.core.use_cases.tasks import define_tasks, run_named

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)

    tasks = define_tasks(config, node_registry(config), on_pack=_announce_bundle, watch=watch)
    try:
        outcome = run_named(tasks, name)
    except KeyboardInterrupt:
        click.echo()
        click.secho("Stopped.", fg="yellow")
        return

    if not outcome.ok:
        for error in outcome.errors:
            click.secho(f"❌ {error}", fg="red", err=True)
        sys.exit(1)

    if not ctx.obj.get("quiet"):
        click.secho(f"✅ Finished '{name}' after {outcome.result.duration_ms}ms", fg="green")


@cli.command()
@click.pass_context
def clean(ctx: click.Context) -> None:
    """Clean files and folders generated by build."""
    run_task_command(ctx, "clean")


@cli.command()
@click.pass_context
def lint(ctx: click.Context) -> None:
    """Lint the CSS and JavaScript source files."""
    run_task_command(ctx, "lint")


@cli.command("lint-css")
@click.pass_context
def lint_css(ctx: click.Context) -> None:
    """Lint the CSS source files using Stylelint."""
    run_task_command(ctx, "lint-css")


@cli.command("lint-js")
@click.pass_context
def lint_js(ctx: click.Context) -> None:
    """Lint the JavaScript source files using ESLint."""
    run_task_command(ctx, "lint-js")


@cli.command("format")
@click.pass_context
def format_(ctx: click.Context) -> None:
    """Format the JavaScript source files using Prettier and ESLint."""
    run_task_command(ctx, "format")


@cli.command()
@click.pass_context
def build(ctx: click.Context) -> None:
    """Build and stage the UI assets for bundling."""
    run_task_command(ctx, "build")


@cli.command("build-preview")
@click.option("--watch", is_flag=True, help="Rebuild whenever a source file changes.")
@click.pass_context
def build_preview(ctx: click.Context, watch: bool) -> None:
    """Process and stage the UI assets and generate pages for the preview."""
    run_task_command(ctx, "build-preview", watch=watch)


@cli.command()
@click.pass_context
def pack(ctx: click.Context) -> None:
    """Create a bundle of the staged UI assets for publishing."""
    run_task_command(ctx, "pack")


@cli.command()
@click.pass_context
def bundle(ctx: click.Context) -> None:
    """Clean, lint, build, and bundle the UI for publishing."""
    run_task_command(ctx, "bundle")


from uibundle.ui.cli.tasks import tasks

cli.add_command(tasks)


if __name__ == "__main__":
    cli()
