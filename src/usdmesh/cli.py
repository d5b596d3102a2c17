"""CLI entry point for usdmesh.

Usage:
    usdmesh export scene.yaml                     # Write data/processed/scene.usda
    usdmesh export scene.yaml -c usd_export.yaml  # With a step config
    usdmesh info scene.yaml                       # Show objects in a scene
    usdmesh schema                                # Print step config JSON schema
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from usdmesh.core.logging import setup_logging

app = typer.Typer(name="usdmesh", help="Polygon meshes to USD (UsdGeom.Mesh + materials)")
console = Console()


@app.command()
def export(
    scene: Path = typer.Argument(..., help="Scene description (.yaml/.yml/.json)"),
    config: Path = typer.Option(None, "--config", "-c", help="Step config YAML"),
    data_root: Path = typer.Option(Path("./data"), help="Output root (USD goes to processed/)"),
    log_level: str = typer.Option("INFO", help="Logging level"),
) -> None:
    """Export a scene file to a USD stage."""
    setup_logging(log_level)
    from usdmesh.core.config_loader import load_config
    from usdmesh.steps.s01_usd_export.config import UsdExportConfig
    from usdmesh.steps.s01_usd_export.contracts import UsdExportInput
    from usdmesh.steps.s01_usd_export.step import UsdExportStep

    step_config = load_config(config, UsdExportConfig)
    step = UsdExportStep(config=step_config, data_root=data_root)
    try:
        output = step.execute(UsdExportInput(scene_path=scene))
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]Done. Output:[/green] {escape(output.model_dump_json(indent=2))}")


@app.command()
def info(scene: Path = typer.Argument(..., help="Scene description (.yaml/.yml/.json)")) -> None:
    """Show scene objects and what would be exported for each."""
    from usdmesh.core.config_loader import load_scene
    from usdmesh.core.mesh import build_scene

    objects = build_scene(load_scene(scene))
    table = Table(title=f"Scene: {scene.name}")
    table.add_column("#", style="dim")
    table.add_column("Object", style="cyan")
    table.add_column("Vertices", justify="right")
    table.add_column("Polygons", justify="right")
    table.add_column("Creased edges", justify="right")
    table.add_column("Material slots", style="green")
    table.add_column("Animated", style="yellow")

    for i, obj in enumerate(objects, 1):
        mesh = obj.mesh
        if mesh is None:
            table.add_row(str(i), obj.name, "-", "-", "-", "-", "[red]no mesh[/red]")
            continue
        slots = ", ".join(m.name if m is not None else "(empty)" for m in mesh.material_slots)
        table.add_row(
            str(i),
            obj.name,
            str(mesh.num_vertices),
            str(mesh.num_polygons),
            str(int((mesh.edge_crease > 0).sum())),
            slots or "-",
            f"Y ({len(obj.keyframes)} keys)" if obj.is_animated else "N",
        )
    console.print(table)


@app.command()
def schema() -> None:
    """Print the JSON schemas of the export step's input, output and config."""
    from usdmesh.steps.s01_usd_export.step import UsdExportStep

    console.print_json(
        json.dumps(
            {
                "input": UsdExportStep.get_input_schema(),
                "output": UsdExportStep.get_output_schema(),
                "config": UsdExportStep.get_config_schema(),
            }
        )
    )


if __name__ == "__main__":
    app()
