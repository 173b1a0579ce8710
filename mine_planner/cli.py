#!/usr/bin/env python3
"""
Mineplan CLI - Command-line interface for the mining layout planner.

This module provides the entry point for the 'mineplan' command installed via pip.

Usage:
    mineplan plan region.json                        # Plan, print JSON
    mineplan plan region.json --strategy dense       # Densest packing
    mineplan plan region.json --emitter beacon       # Add beacons
    mineplan plan region.json --blueprint -o out.txt # Blueprint string to file
    mineplan remove region.json world.json           # List plan ghosts to remove
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from mine_planner import __version__
from mine_planner.src.common.config import PlannerConfig
from mine_planner.src.common.diagnostics import PlanDiagnostics
from mine_planner.src.common.entity_data import EntityCatalog
from mine_planner.src.common.exceptions import PlanningError
from mine_planner.src.emission.blueprint_exporter import BlueprintExporter
from mine_planner.src.emission.plan import Placeholder
from mine_planner.src.layout.region import Region
from mine_planner.src.pipeline import plan_mining_layout, remove_plan_ghosts

logger = logging.getLogger("mine_planner.cli")


def run_plan(
    region_data: Dict[str, Any],
    settings: Dict[str, Any],
    use_blueprint: bool = False,
    use_draftsman_data: bool = False,
    label: Optional[str] = None,
) -> Tuple[bool, str, List[str]]:
    """
    Plan a region described as plain data.

    Args:
        region_data: Region description (points or rows + legend)
        settings: Planner settings, legacy keys accepted
        use_blueprint: Return a blueprint string instead of plan JSON
        use_draftsman_data: Resolve entity stats from draftsman's prototype data
        label: Blueprint label

    Returns:
        (success: bool, result: str, diagnostics: list)
    """
    diagnostics = PlanDiagnostics()
    try:
        region = Region.from_dict(region_data)
        config = PlannerConfig.from_dict(settings)
        catalog = EntityCatalog.from_draftsman() if use_draftsman_data else EntityCatalog.builtin()
        plan = plan_mining_layout(region, config, catalog, diagnostics)
    except PlanningError as exc:
        diagnostics.error(exc.message, stage=exc.stage)
        return False, f"{exc.kind.value}: {exc.message}", diagnostics.get_messages()
    except (KeyError, TypeError, ValueError) as exc:
        diagnostics.error(f"Invalid region description: {exc}", stage="input")
        return False, "Invalid region description", diagnostics.get_messages()

    if use_blueprint:
        exporter = BlueprintExporter(diagnostics)
        result = exporter.to_string(plan, label or "Mining layout")
        if diagnostics.has_errors():
            return False, "Blueprint export failed", diagnostics.get_messages()
    else:
        result = json.dumps(plan.to_dict(), indent=2)

    return True, result, diagnostics.get_messages()


def run_removal(
    region_data: Dict[str, Any], world_data: Any
) -> Tuple[bool, str, List[str]]:
    """Find previously emitted placeholders around a region.

    Returns:
        (success: bool, result: str, diagnostics: list)
    """
    diagnostics = PlanDiagnostics()
    try:
        region = Region.from_dict(region_data)
        entries = world_data.get("placeholders", []) if isinstance(world_data, dict) else world_data
        world = [Placeholder.from_dict(entry) for entry in entries]
    except (KeyError, TypeError, ValueError) as exc:
        diagnostics.error(f"Invalid input: {exc}", stage="input")
        return False, "Invalid input", diagnostics.get_messages()

    removal = remove_plan_ghosts(region, world, diagnostics)
    return True, json.dumps(removal.to_dict(), indent=2), diagnostics.get_messages()


def setup_logging(level: str) -> None:
    """Setup logging configuration."""
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Invalid log level: {level}")
    logging.basicConfig(level=numeric_level, format="%(levelname)s: %(message)s")


def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        click.echo(f"Failed to read {path}: {e}", err=True)
        sys.exit(1)


def _write_result(result: str, output: Optional[Path], verbose: bool) -> None:
    if output:
        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_text(result, encoding="utf-8")
            if verbose:
                click.echo(f"Result saved to {output}")
        except OSError as e:
            click.echo(f"Failed to write output file: {e}", err=True)
            sys.exit(1)
    else:
        click.echo(result)


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    help="Set the logging level",
)
@click.pass_context
def main(ctx: click.Context, log_level: str) -> None:
    """Plan mining layouts and find their placeholders for removal."""
    setup_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = log_level.lower() in ["debug", "info"]


@main.command()
@click.argument("region_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(exists=True, path_type=Path),
    help="JSON settings file (legacy keys accepted)",
)
@click.option(
    "--strategy",
    type=click.Choice(["dense", "staggered"], case_sensitive=False),
    help="Packing strategy",
)
@click.option(
    "--flow",
    type=click.Choice(["north", "east", "south", "west"], case_sensitive=False),
    help="Line flow direction",
)
@click.option("--unit", "unit_type", type=str, help="Extraction unit entity")
@click.option("--segment", "segment_type", type=str, help="Transport segment entity")
@click.option("--node", "node_type", type=str, help="Power node entity")
@click.option("--emitter", "emitter_type", type=str, help="Effect emitter entity")
@click.option("--fluid", "fluid_segment_type", type=str, help="Fluid segment entity")
@click.option("--max-emitters", type=int, help="Emitters allowed per unit (1-12)")
@click.option("--preferred-emitters", type=int, help="Emitters wanted per unit (0 = max)")
@click.option("--material", type=str, help="Only place units on this material")
@click.option("--modules", type=str, help="Comma separated unit modules")
@click.option("--emitter-modules", type=str, help="Comma separated emitter modules")
@click.option("--quality", type=str, help="Quality of every placed entity")
@click.option("--non-destructive", is_flag=True, help="Never remove existing buildings")
@click.option(
    "--draftsman-data",
    is_flag=True,
    help="Read entity stats from draftsman's prototype data instead of the built-in table",
)
@click.option("--blueprint", is_flag=True, help="Output a blueprint string instead of plan JSON")
@click.option("--label", type=str, help="Blueprint label")
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file (default: stdout)",
)
@click.pass_context
def plan(
    ctx: click.Context,
    region_file: Path,
    config_file: Optional[Path],
    output: Optional[Path],
    blueprint: bool,
    label: Optional[str],
    draftsman_data: bool,
    **overrides: Any,
) -> None:
    """Plan the region described in REGION_FILE."""
    verbose = ctx.obj.get("verbose", False)
    settings: Dict[str, Any] = _read_json(config_file) if config_file else {}
    if not overrides.get("non_destructive"):
        overrides.pop("non_destructive", None)
    settings.update({key: value for key, value in overrides.items() if value is not None})
    if "max_emitters" in settings:
        settings["max_emitters_per_unit"] = settings.pop("max_emitters")
    if "preferred_emitters" in settings:
        settings["preferred_emitters_per_unit"] = settings.pop("preferred_emitters")
    if "flow" in settings:
        settings["flow_direction"] = settings.pop("flow")

    if verbose:
        click.echo(f"Planning {region_file}...", err=True)

    success, result, messages = run_plan(
        _read_json(region_file),
        settings,
        use_blueprint=blueprint,
        use_draftsman_data=draftsman_data,
        label=label,
    )
    if not success:
        click.echo(f"Planning failed: {result}", err=True)
        for message in messages:
            click.echo(message, err=True)
        sys.exit(1)

    _write_result(result, output, verbose)
    if verbose:
        click.echo(f"Planning completed with {len(messages)} diagnostic(s).", err=True)


@main.command()
@click.argument("region_file", type=click.Path(exists=True, path_type=Path))
@click.argument("world_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file (default: stdout)",
)
@click.pass_context
def remove(ctx: click.Context, region_file: Path, world_file: Path, output: Optional[Path]) -> None:
    """List planner placeholders from WORLD_FILE lying around REGION_FILE's region."""
    success, result, messages = run_removal(_read_json(region_file), _read_json(world_file))
    if not success:
        click.echo(f"Removal failed: {result}", err=True)
        for message in messages:
            click.echo(message, err=True)
        sys.exit(1)
    _write_result(result, output, ctx.obj.get("verbose", False))


if __name__ == "__main__":
    main()
