"""
Command-line interface for cutpath.

Reads and writes paths in the persisted JSON form::

    [{"isClosed": true, "pts": [{"X": 0, "Y": 0}, ...]}, ...]

Provides commands to list operations, generate toolpaths and inspect
geometry.
"""

from pathlib import Path
from typing import Any, Optional

import click
import yaml
from rich.console import Console
from rich.table import Table

from cutpath import __version__
from cutpath.core.config import INTEGER_UNITS_PER_MM, ConfigManager
from cutpath.core.exceptions import CutPathError
from cutpath.core.logging import configure_logging
from cutpath.geometry.path import CutPaths
from cutpath.toolpaths import GENERATOR_REGISTRY, generate_toolpaths, split_paths_over_tabs

console = Console()
err_console = Console(stderr=True)


def _load_paths(path: Path) -> CutPaths:
    return CutPaths.from_json(path.read_text())


def _parse_assignment(text: str) -> tuple[str, Any]:
    if "=" not in text:
        raise click.BadParameter(f"expected key=value, got '{text}'")
    key, value = text.split("=", 1)
    return key.strip(), yaml.safe_load(value)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Minimum log level",
)
@click.option(
    "--geometry-log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Minimum log level for the polygon engine",
)
@click.option("--json-logs", is_flag=True, help="Write logs as JSON lines")
@click.pass_context
def main(ctx: click.Context, log_level: str, geometry_log_level: str, json_logs: bool) -> None:
    """cutpath - toolpaths for 2D CNC machining."""
    ctx.ensure_object(dict)
    configure_logging(
        level=log_level, json_output=json_logs, geometry_level=geometry_log_level
    )


@main.command("operations")
def operations() -> None:
    """List available operations."""
    table = Table(title="Operations")
    table.add_column("Operation", style="cyan")
    table.add_column("Paths")
    table.add_column("Z")
    table.add_column("Requires")
    table.add_column("Description")

    for spec in GENERATOR_REGISTRY.values():
        table.add_row(
            spec.operation.value,
            spec.kinds.value,
            spec.z_mode.value,
            ", ".join(spec.required),
            spec.description,
        )
    console.print(table)


@main.command("generate")
@click.argument("operation")
@click.argument("geometry", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--params",
    "params_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="YAML or JSON file of parameters",
)
@click.option("--preset", help="Operation preset to start from")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default="config",
    help="Configuration directory holding presets",
)
@click.option("--set", "assignments", multiple=True, help="Override a parameter, key=value")
@click.option(
    "--tabs",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="JSON file of holding tab outlines",
)
@click.option("--cut-z", type=float, help="Depth outside tabs")
@click.option("--tab-z", type=float, help="Depth over tabs")
@click.option("--output", "-o", type=click.Path(dir_okay=False, path_type=Path), help="Output file")
def generate(
    operation: str,
    geometry: Path,
    params_file: Optional[Path],
    preset: Optional[str],
    config_dir: Path,
    assignments: tuple[str, ...],
    tabs: Optional[Path],
    cut_z: Optional[float],
    tab_z: Optional[float],
    output: Optional[Path],
) -> None:
    """Generate toolpaths for OPERATION from the paths in GEOMETRY."""
    if tabs is not None and (cut_z is None or tab_z is None):
        raise click.UsageError("--tabs needs both --cut-z and --tab-z")

    try:
        params: dict[str, Any] = {}
        if preset:
            params.update(ConfigManager(config_dir).get_preset(preset).parameters)
        if params_file:
            params.update(yaml.safe_load(params_file.read_text()) or {})
        for text in assignments:
            key, value = _parse_assignment(text)
            params[key] = value

        toolpaths = generate_toolpaths(operation, _load_paths(geometry), params)
        if tabs is not None:
            toolpaths = split_paths_over_tabs(toolpaths, _load_paths(tabs), cut_z, tab_z)
    except (CutPathError, OSError, ValueError, KeyError, yaml.YAMLError) as e:
        err_console.print(f"[red]✗[/red] Failed to generate toolpaths: {e}")
        raise SystemExit(1)

    text = toolpaths.to_json(indent=2)
    if output:
        output.write_text(text)
        err_console.print(f"[green]✓[/green] Wrote {len(toolpaths)} toolpaths to {output}")
    else:
        click.echo(text)


@main.command("info")
@click.argument("geometry", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def info(geometry: Path) -> None:
    """Show path counts, length and bounds of GEOMETRY."""
    try:
        paths = _load_paths(geometry)
    except (OSError, ValueError, KeyError) as e:
        err_console.print(f"[red]✗[/red] Failed to read paths: {e}")
        raise SystemExit(1)

    table = Table(title=f"Paths: {geometry.name}")
    table.add_column("Property", style="cyan")
    table.add_column("Value")

    table.add_row("Paths", str(len(paths)))
    table.add_row("Closed", str(len(paths.closed())))
    table.add_row("Open", str(len(paths.open())))
    table.add_row("Vertices", str(sum(len(p) for p in paths)))
    perimeter = paths.perimeter()
    table.add_row("Length", f"{perimeter:.0f} ({perimeter / INTEGER_UNITS_PER_MM:.3f} mm)")

    box = paths.bbox()
    if box is not None:
        table.add_row("X", f"{box.min_x} .. {box.max_x}")
        table.add_row("Y", f"{box.min_y} .. {box.max_y}")
        if box.min_z is not None:
            table.add_row("Z", f"{box.min_z} .. {box.max_z}")
    console.print(table)


if __name__ == "__main__":
    main()
