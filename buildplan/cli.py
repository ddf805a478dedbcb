"""Command line interface for buildplan."""

import functools
import json
import logging
from pathlib import Path
from typing import Any, Optional, Tuple

import click
from rich.console import Console
from rich.table import Table

from . import __version__
from .config import Config
from .errors import BuildPlanError, DockerfileExistsError, ProjectNotFoundError, handle_exception
from .generators import generate_dockerfile
from .logging_config import configure_logging
from .planners import Plan, plan_project
from .source import LocalSource
from .types import PlanType

console = Console()
logger = logging.getLogger(__name__)

PLAN_TYPE_CHOICES = [plan_type.value for plan_type in PlanType]


def handle_errors(context: str) -> Any:
    """Decorator to display buildplan errors and exit with status 1.

    Args:
        context: Description of what the command was doing.

    Returns:
        Decorator wrapping a command callback.
    """
    def decorator(func: Any) -> Any:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except BuildPlanError as e:
                handle_exception(e, context)
        return wrapper
    return decorator


def load_plan(
    path: Path,
    plan_type: Optional[str] = None,
    config_path: Optional[Path] = None
) -> Tuple[Plan, Config]:
    """Plan a project directory, applying buildplan.json and CLI overrides.

    Args:
        path: Project directory.
        plan_type: Plan type forced on the command line.
        config_path: Explicit configuration file.

    Returns:
        Tuple of (plan, configuration).
    """
    if not path.is_dir():
        raise ProjectNotFoundError(
            f"Project directory not found: {path}",
            ["Pass the path of the project root, e.g. buildplan plan ./my-app"]
        )

    src = LocalSource(path)
    config = Config.from_path(config_path) if config_path else Config.from_source(src)

    forced_type = PlanType(plan_type) if plan_type else config.plan_type
    plan = plan_project(src, forced_type)
    plan.meta = config.apply(plan.meta)
    return plan, config


def display_plan(plan: Plan) -> None:
    """Display a plan as a table.

    Args:
        plan: The plan to display.
    """
    if not plan.meta:
        console.print(f"[bold]Plan type:[/bold] {plan.plan_type.value}")
        console.print("[yellow]No plan metadata, generator defaults apply.[/yellow]")
        return

    table = Table(title=f"Plan: {plan.plan_type.value}", show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan", no_wrap=True)
    table.add_column("Value", style="green")

    for key, value in sorted(plan.meta.items()):
        table.add_row(key, value)

    console.print(table)


@click.group()
@click.version_option(version=__version__)
@click.option('--verbose', '-v', is_flag=True, help='Show how the project was classified')
def main(verbose: bool) -> None:
    """buildplan - generate Dockerfiles from project sources."""
    configure_logging(verbose)


@main.command()
@click.argument('path', default='.', type=click.Path(path_type=Path))
@click.option('--plan-type', type=click.Choice(PLAN_TYPE_CHOICES), help='Skip detection and use this ecosystem')
@click.option('--config', 'config_path', type=click.Path(path_type=Path), help='Configuration file (default: <path>/buildplan.json)')
@click.option('--json', 'as_json', is_flag=True, help='Print the plan as JSON')
@handle_errors("Planning project")
def plan(path: Path, plan_type: Optional[str], config_path: Optional[Path], as_json: bool) -> None:
    """Detect the project ecosystem and show its plan metadata."""
    project_plan, _ = load_plan(path, plan_type, config_path)

    if as_json:
        click.echo(json.dumps({'planType': project_plan.plan_type.value, 'meta': project_plan.meta}, indent=2))
        return

    display_plan(project_plan)


@main.command()
@click.argument('path', default='.', type=click.Path(path_type=Path))
@click.option('--plan-type', type=click.Choice(PLAN_TYPE_CHOICES), help='Skip detection and use this ecosystem')
@click.option('--config', 'config_path', type=click.Path(path_type=Path), help='Configuration file (default: <path>/buildplan.json)')
@click.option('--output', '-o', type=click.Path(dir_okay=False, path_type=Path), help='Write the Dockerfile to this file')
@click.option('--write', '-w', is_flag=True, help='Write the Dockerfile into the project directory')
@click.option('--force', '-f', is_flag=True, help='Overwrite an existing Dockerfile')
@handle_errors("Generating Dockerfile")
def dockerfile(
    path: Path,
    plan_type: Optional[str],
    config_path: Optional[Path],
    output: Optional[Path],
    write: bool,
    force: bool
) -> None:
    """Generate a Dockerfile for the project."""
    project_plan, config = load_plan(path, plan_type, config_path)
    content = generate_dockerfile(project_plan.plan_type, project_plan.meta)

    if output is None and write:
        output = path / config.output

    if output is None:
        click.echo(content)
        return

    if output.exists() and not force:
        raise DockerfileExistsError(
            f"{output} already exists",
            ["Pass --force to overwrite it", "Choose another file with --output"]
        )

    try:
        output.write_text(content.rstrip("\n") + "\n", encoding="utf-8")
    except OSError as e:
        raise BuildPlanError(f"Cannot write {output}: {e}") from e
    logger.info(f"Generated Dockerfile at {output}")
    console.print(f"[green]✓[/green] Wrote {project_plan.plan_type.value} Dockerfile to [cyan]{output}[/cyan]")


if __name__ == '__main__':
    main()
