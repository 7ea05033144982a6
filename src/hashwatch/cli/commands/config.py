"""
Configuration management commands for the hashwatch CLI.

Provides commands to view, validate and initialize configuration files.
"""

from __future__ import annotations

import json
from functools import partial
from pathlib import Path
from typing import Optional

import typer
import yaml
from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hashwatch.config import (
    clear_config,
    get_config_safe,
    global_config_path,
    init_global_config,
    init_project_config,
    load_config,
    project_config_path,
)
from hashwatch.utils.console import console

app = typer.Typer(
    name="config",
    help="🔧 Configuration management for hashwatch",
    rich_markup_mode="rich",
    no_args_is_help=True,
)


@app.command("show")
def show_config(
    format: str = typer.Option(
        "table",
        "--format",
        "-f",
        help="Output format: table, json, yaml"
    ),
) -> None:
    """📋 Show the effective configuration from all sources."""
    try:
        config = get_config_safe()
    except (ValidationError, yaml.YAMLError):
        raise typer.Exit(1)

    data = config.model_dump_display()
    if format.lower() == "json":
        console.console.print_json(json.dumps(data))
    elif format.lower() == "yaml":
        console.print(yaml.safe_dump(data, default_flow_style=False, sort_keys=False), markup=False)
    else:
        console.print(
            Panel(
                _format_config_table(data),
                title="[panel.title]🔧 hashwatch Configuration[/panel.title]",
                title_align="left",
                border_style="panel.border",
                padding=(1, 2),
            )
        )


@app.command("validate")
def validate_config() -> None:
    """✅ Reload configuration from disk and report problems."""
    clear_config()
    try:
        config = load_config()
    except (ValidationError, yaml.YAMLError):
        raise typer.Exit(1)

    console.success("Configuration is valid!")
    history_dir = config.storage.history_dir
    if not history_dir.exists():
        console.info(f"History directory {escape(str(history_dir))} will be created on first check")


@app.command("init")
def init_config(
    global_config: bool = typer.Option(
        False,
        "--global",
        "-g",
        help="Initialize global user configuration"
    ),
    path: Optional[Path] = typer.Option(
        None,
        "--path",
        "-p",
        help="Custom path for configuration file"
    ),
    force: bool = typer.Option(
        False,
        "--force",
        help="Overwrite existing configuration file"
    ),
) -> None:
    """🚀 Initialize a new configuration file with defaults."""
    if global_config:
        target = global_config_path()
        create = init_global_config
    else:
        target = path or project_config_path()
        create = partial(init_project_config, target)

    try:
        if force and target.exists():
            target.unlink()
        config_path = create()
    except FileExistsError as e:
        console.error(escape(str(e)))
        console.info("Use --force to overwrite existing configuration")
        raise typer.Exit(1)
    except OSError as e:
        console.error(f"Failed to create configuration file: {escape(str(e))}")
        raise typer.Exit(1)

    console.success(f"Created {'global' if global_config else 'project'} configuration: {escape(str(config_path))}")


def _format_config_table(data: dict) -> Table:
    """Format configuration data as a Rich table."""
    table = Table(show_header=True, header_style="table.header")
    table.add_column("Section", style="primary", width=10)
    table.add_column("Setting", style="info.text", width=24)
    table.add_column("Value", style="dim")

    for section, content in data.items():
        section_name = section.title()
        for key, value in content.items():
            if isinstance(value, bool):
                display_value = "✅ Yes" if value else "❌ No"
            elif value is None:
                display_value = "[dim]Not set[/dim]"
            else:
                display_value = str(value)
            table.add_row(section_name, key, display_value)
            section_name = ""  # Only show section name for first row

    return table


__all__ = ["app"]
