"""
CLI commands for inspecting the task catalog.

Thin wrappers over ``uibundle.core.use_cases.tasks``.
"""

from __future__ import annotations

import json
import sys

import click


def _load_tasks(ctx: click.Context) -> dict:
    from uibundle.adapters.node.tool import node_registry
    from uibundle.core.config.loader import ConfigError, load_config
    from uibundle.core.use_cases.tasks import define_tasks

    try:
        config = load_config(ctx.obj.get("config_path"))
    except ConfigError as e:
        click.secho(f"❌ {e}", fg="red", err=True)
        sys.exit(1)
    return define_tasks(config, node_registry(config))


@click.group()
def tasks() -> None:
    """Task catalog — list tasks and their composition."""


@tasks.command("list")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def list_tasks(ctx: click.Context, as_json: bool) -> None:
    """List every task with its description and flags."""
    catalog = _load_tasks(ctx)

    if as_json:
        data = [
            {
                "name": task.name,
                "label": task.label,
                "description": task.description,
                "flags": task.flags,
                "children": [child.name for child in task.children],
            }
            for task in catalog.values()
        ]
        click.echo(json.dumps(data, indent=2))
        return

    click.secho(f"🧰 Tasks ({len(catalog)}):", fg="cyan", bold=True)
    for task in catalog.values():
        click.echo(f"   • {task.label or task.name}")
        if task.description:
            click.echo(f"       {task.description}")
        for flag, help_text in task.flags.items():
            click.echo(f"       {flag}  {help_text}")
        for child in task.children:
            click.echo(f"       ├── {child.name}")
    click.echo()
