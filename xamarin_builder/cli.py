"""Thin CLI wrapper for xamarin_builder.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Any, NoReturn

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from xamarin_builder import __version__
from xamarin_builder.builder import Builder
from xamarin_builder.buildtool.command import BuildCommand
from xamarin_builder.buildtool.runner import SubprocessRunner
from xamarin_builder.config import Settings, get_settings, print_settings_json
from xamarin_builder.errors import BuilderError, BuildPassError
from xamarin_builder.solution.models import Project
from xamarin_builder.types import OutputMap, ProjectType

app = typer.Typer(
    name="xamarin-builder",
    help="Xamarin Builder - build, collect and clean Xamarin solutions",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

SolutionArg = Annotated[
    Path,
    typer.Argument(help="Solution description file (.yaml, .yml or .json)"),
]
ConfigurationOpt = Annotated[
    str,
    typer.Option("--configuration", "-c", help="Solution configuration"),
]
PlatformOpt = Annotated[
    str,
    typer.Option("--platform", "-p", help="Solution platform"),
]
ProjectTypesOpt = Annotated[
    list[ProjectType] | None,
    typer.Option("--type", "-t", help="Project type to include (can be repeated)"),
]
ForceMDToolOpt = Annotated[
    bool | None,
    typer.Option(
        "--force-mdtool/--no-force-mdtool",
        help="Build Apple projects with mdtool instead of xbuild",
    ),
]
JsonOpt = Annotated[
    bool,
    typer.Option("--json", help="Output as JSON"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"xamarin-builder version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Send log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    log_level: Annotated[
        str | None,
        typer.Option("--log-level", help="Logging level (overrides settings)"),
    ] = None,
) -> None:
    """Xamarin Builder - build, collect and clean Xamarin solutions."""
    configure_logging(log_level or get_settings().log_level)


def _load_builder(
    solution: Path,
    project_types: list[ProjectType] | None,
    force_mdtool: bool | None,
    settings: Settings,
) -> Builder:
    """Create a Builder, exiting with code 1 on unusable input."""
    whitelist = project_types if project_types else settings.project_types
    force = settings.force_mdtool if force_mdtool is None else force_mdtool
    try:
        return Builder.from_path(
            solution,
            project_type_whitelist=whitelist,
            force_mdtool=force,
            settings=settings,
        )
    except FileNotFoundError as e:
        console.print(f"[red]File not found: {e.filename or solution}[/red]")
        raise typer.Exit(code=1) from None
    except ValidationError as e:
        console.print(f"[red]Invalid solution description:[/red]\n{e}")
        raise typer.Exit(code=1) from None
    except yaml.YAMLError as e:
        console.print(f"[red]Invalid YAML: {e}[/red]")
        raise typer.Exit(code=1) from None
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON: {e}[/red]")
        raise typer.Exit(code=1) from None
    except BuilderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None


def _output_map_to_dict(output_map: OutputMap) -> dict[str, dict[str, str]]:
    return {
        project_type.value: {
            output_type.value: path for output_type, path in outputs.items()
        }
        for project_type, outputs in output_map.items()
    }


def _print_warnings(warnings: list[str]) -> None:
    if warnings:
        console.print("[bold]Warnings:[/bold]")
        for warning in warnings:
            console.print(f"  [yellow]{warning}[/yellow]")


def _print_output_map(output_map: OutputMap) -> None:
    if not output_map:
        console.print("[yellow]No outputs found[/yellow]")
        return
    console.print("[bold]Outputs:[/bold]")
    for project_type, outputs in output_map.items():
        console.print(f"  [green]{project_type.value}[/green]")
        for output_type, path in outputs.items():
            console.print(f"    {output_type.value}: {path}")


def _error_json(e: BuilderError, warnings: list[str] | None = None) -> str:
    data: dict[str, Any] = {"error": {"code": e.code, "message": str(e)}}
    if warnings is not None:
        data["warnings"] = warnings
    return json.dumps(data, indent=2)


def _fail(
    e: BuilderError, json_output: bool, warnings: list[str] | None = None
) -> NoReturn:
    """Report a fatal error with any warnings gathered so far, then exit 1."""
    if json_output:
        typer.echo(_error_json(e, warnings))
    else:
        _print_warnings(warnings or [])
        console.print(f"[red]{e}[/red]")
    raise typer.Exit(code=1) from None


@app.command()
def config(json_output: JsonOpt = False) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
    else:
        log_dir_display = str(settings.log_dir) if settings.log_dir else "(console)"
        timeout_display = (
            str(settings.build_timeout) if settings.build_timeout else "(none)"
        )
        types_display = (
            ", ".join(t.value for t in settings.project_types)
            if settings.project_types
            else "(all)"
        )
        console.print("[bold]Effective Configuration:[/bold]")
        console.print()
        console.print("[bold]Tools:[/bold]")
        console.print(f"  mdtool:              {settings.mdtool_path}")
        console.print(f"  xbuild:              {settings.xbuild_path}")
        console.print()
        console.print("[bold]Paths:[/bold]")
        console.print(f"  Xcode archives:      {settings.xcode_archives_dir}")
        console.print(f"  Log directory:       {log_dir_display}")
        console.print()
        console.print("[bold]Build:[/bold]")
        console.print(f"  Force mdtool:        {settings.force_mdtool}")
        console.print(f"  Project types:       {types_display}")
        console.print(f"  Build timeout:       {timeout_display}")
        console.print(f"  Log level:           {settings.log_level}")


@app.command()
def projects(
    solution: SolutionArg,
    project_types: ProjectTypesOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """List the projects selected by the project type filter."""
    settings = get_settings()
    builder = _load_builder(solution, project_types, None, settings)
    selected = builder.filtered_projects()

    if json_output:
        typer.echo(
            json.dumps(
                [
                    {
                        "name": p.name,
                        "project_type": p.project_type.value,
                        "output_type": p.output_type,
                        "path": str(p.path),
                    }
                    for p in selected
                ],
                indent=2,
            )
        )
        return

    if not selected:
        console.print("[yellow]No projects found[/yellow]")
        return

    console.print(f"[bold]Found {len(selected)} project(s):[/bold]")
    for p in selected:
        console.print(f"  [green]{p.name}[/green] ({p.project_type.value})")
        console.print(f"    Path: {p.path}")


@app.command()
def plan(
    solution: SolutionArg,
    configuration: ConfigurationOpt,
    platform: PlatformOpt,
    project_types: ProjectTypesOpt = None,
    force_mdtool: ForceMDToolOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Show the build commands a build would run, without running them."""
    settings = get_settings()
    builder = _load_builder(solution, project_types, force_mdtool, settings)
    runner = SubprocessRunner(settings)

    try:
        plans, warnings = builder.plan(configuration, platform)
    except BuilderError as e:
        if json_output:
            typer.echo(_error_json(e))
        else:
            console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "projects": [
                        {
                            "name": project.name,
                            "project_type": project.project_type.value,
                            "commands": [
                                command.argv(runner.tool_path(command.toolchain))
                                for command in commands
                            ],
                        }
                        for project, commands in plans
                    ],
                    "warnings": warnings,
                },
                indent=2,
            )
        )
        return

    if not plans:
        console.print("[yellow]Nothing to build[/yellow]")
    for project, commands in plans:
        console.print(f"[green]{project.name}[/green] ({project.project_type.value})")
        for command in commands:
            console.print(
                f"  {command.printable(runner.tool_path(command.toolchain))}",
                markup=False,
                soft_wrap=True,
            )
    _print_warnings(warnings)


@app.command()
def build(
    solution: SolutionArg,
    configuration: ConfigurationOpt,
    platform: PlatformOpt,
    project_types: ProjectTypesOpt = None,
    force_mdtool: ForceMDToolOpt = None,
    extra_args: Annotated[
        list[str] | None,
        typer.Option("--arg", help="Extra argument for every command (repeatable)"),
    ] = None,
    json_output: JsonOpt = False,
) -> None:
    """Build every buildable project, then collect the outputs."""
    settings = get_settings()
    builder = _load_builder(solution, project_types, force_mdtool, settings)
    runner = SubprocessRunner(settings)
    performed: list[dict[str, Any]] = []

    def prepare(project: Project, command: BuildCommand) -> None:
        if extra_args:
            command.extra_args.extend(extra_args)

    def observe(project: Project, command: BuildCommand, already: bool) -> None:
        printable = command.printable(runner.tool_path(command.toolchain))
        performed.append(
            {
                "project": project.name,
                "command": printable,
                "already_performed": already,
            }
        )
        if json_output:
            return
        if already:
            console.print(f"[dim]Already performed ({project.name}):[/dim]")
        else:
            console.print(f"[blue]Running ({project.name}):[/blue]")
        console.print(f"  {printable}", markup=False, soft_wrap=True)

    try:
        warnings = builder.build_all_projects(
            configuration,
            platform,
            prepare=prepare,
            observe=observe,
            runner=runner,
        )
    except BuildPassError as e:
        _fail(e, json_output, e.warnings)
    except BuilderError as e:
        _fail(e, json_output)

    try:
        output_map = builder.collect_output(configuration, platform)
    except BuilderError as e:
        _fail(e, json_output, warnings)

    if json_output:
        typer.echo(
            json.dumps(
                {
                    "commands": performed,
                    "warnings": warnings,
                    "outputs": _output_map_to_dict(output_map),
                },
                indent=2,
            )
        )
        return

    _print_warnings(warnings)
    _print_output_map(output_map)


@app.command()
def outputs(
    solution: SolutionArg,
    configuration: ConfigurationOpt,
    platform: PlatformOpt,
    project_types: ProjectTypesOpt = None,
    force_mdtool: ForceMDToolOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Locate the artifacts of a previous build."""
    settings = get_settings()
    builder = _load_builder(solution, project_types, force_mdtool, settings)

    try:
        output_map = builder.collect_output(configuration, platform)
    except BuilderError as e:
        if json_output:
            typer.echo(_error_json(e))
        else:
            console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(json.dumps(_output_map_to_dict(output_map), indent=2))
    else:
        _print_output_map(output_map)


@app.command()
def clean(
    solution: SolutionArg,
    project_types: ProjectTypesOpt = None,
) -> None:
    """Remove the bin and obj directories of the solution's projects."""
    settings = get_settings()
    builder = _load_builder(solution, project_types, None, settings)
    removed: list[Path] = []

    def observe(project: Project, dir_path: Path) -> None:
        removed.append(dir_path)
        console.print(
            f"Removing ({project.name}): {dir_path}", markup=False, soft_wrap=True
        )

    try:
        builder.clean_all(observe=observe)
    except BuilderError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(code=1) from None

    if not removed:
        console.print("[yellow]Nothing to clean[/yellow]")
    else:
        console.print(f"[green]Removed {len(removed)} directories[/green]")


if __name__ == "__main__":
    app()
