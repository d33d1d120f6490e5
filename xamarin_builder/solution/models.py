"""Pydantic models for the solution description.

A solution owns a map of projects; each project maps solution
configurations (``"<Configuration>|<Platform>"``) onto its own project
configurations. Models are frozen once validated.

Relative paths are resolved against the ``base_dir`` passed in the
validation context (see ``solution.io``).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationInfo,
    field_validator,
    model_validator,
)

from xamarin_builder.errors import InvalidConfigurationError, InvalidSolutionError
from xamarin_builder.types import ProjectType

SOLUTION_EXTENSION = ".sln"

# Project type names used by Xamarin project files, lowercased
PROJECT_TYPE_ALIASES: dict[str, ProjectType] = {
    "xamarin.ios": ProjectType.IOS,
    "xamarin.tvos": ProjectType.TVOS,
    "xamarin.mac": ProjectType.MACOS,
    "xamarin.android": ProjectType.ANDROID,
    "monoandroid": ProjectType.ANDROID,
}


def to_config(configuration: str, platform: str) -> str:
    """Compose a solution configuration key.

    Args:
        configuration: Configuration name (e.g. ``Release``).
        platform: Platform name (e.g. ``iPhone``).

    Returns:
        Key of the form ``"<configuration>|<platform>"``.
    """
    return f"{configuration}|{platform}"


def _resolve_path(value: Path | None, info: ValidationInfo) -> Path | None:
    if value is None or value.is_absolute():
        return value
    base_dir = (info.context or {}).get("base_dir")
    if base_dir is None:
        return value
    return Path(base_dir) / value


class ProjectConfig(BaseModel):
    """A project-local build configuration.

    Attributes:
        configuration: Project configuration name.
        platform: Project platform name.
        output_dir: Directory the configuration writes its products to.
        sign_android: Whether Android packages are signed.
        mtouch_archs: Target architectures of Apple builds.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    configuration: str
    platform: str
    output_dir: Path
    sign_android: bool = False
    mtouch_archs: tuple[str, ...] = ()

    @field_validator("output_dir")
    @classmethod
    def resolve_output_dir(cls, v: Path, info: ValidationInfo) -> Path | None:
        """Resolve a relative output directory."""
        return _resolve_path(v, info)


class Project(BaseModel):
    """A project inside a solution."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str
    path: Path
    project_type: ProjectType = ProjectType.UNKNOWN
    output_type: str = ""
    assembly_name: str = ""
    manifest_path: Path | None = None
    android_application: bool = False
    config_map: dict[str, str] = Field(default_factory=dict)
    configs: dict[str, ProjectConfig] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def default_assembly_name(cls, data: Any) -> Any:
        """Use the project name when no assembly name is given."""
        if isinstance(data, dict) and not data.get("assembly_name"):
            data = {**data, "assembly_name": data.get("name", "")}
        return data

    @field_validator("project_type", mode="before")
    @classmethod
    def parse_project_type(cls, v: Any) -> Any:
        """Map unrecognized project type names to UNKNOWN."""
        if isinstance(v, ProjectType) or v is None:
            return v or ProjectType.UNKNOWN
        name = str(v).strip().lower()
        if name in PROJECT_TYPE_ALIASES:
            return PROJECT_TYPE_ALIASES[name]
        try:
            return ProjectType(name)
        except ValueError:
            return ProjectType.UNKNOWN

    @field_validator("path", "manifest_path")
    @classmethod
    def resolve_paths(cls, v: Path | None, info: ValidationInfo) -> Path | None:
        """Resolve relative project paths."""
        return _resolve_path(v, info)


class Solution(BaseModel):
    """A solution and its projects.

    Attributes:
        path: Path to the ``.sln`` file.
        configurations: Declared solution configuration keys.
        projects: Project map keyed by project identity, in declaration order.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: Path
    configurations: list[str] = Field(default_factory=list)
    projects: dict[str, Project] = Field(default_factory=dict)

    @field_validator("path")
    @classmethod
    def resolve_solution_path(cls, v: Path, info: ValidationInfo) -> Path | None:
        """Resolve a relative solution path."""
        return _resolve_path(v, info)


def validate_solution_path(path: Path) -> None:
    """Check that a path points to an existing solution file.

    Args:
        path: Candidate solution path.

    Raises:
        InvalidSolutionError: If the file is missing or not a solution file.
    """
    if not path.exists():
        raise InvalidSolutionError(f"Solution not exist at: {path}")
    if not path.is_file():
        raise InvalidSolutionError(f"Solution path is not a file: {path}")
    if path.suffix.lower() != SOLUTION_EXTENSION:
        raise InvalidSolutionError(
            f"Path is not a solution file path: {path} "
            f"(expected {SOLUTION_EXTENSION} extension)"
        )


def validate_solution_config(
    solution: Solution,
    configuration: str,
    platform: str,
) -> None:
    """Check that the solution declares a configuration|platform pair.

    Raises:
        InvalidConfigurationError: If the pair is not declared.
    """
    solution_config = to_config(configuration, platform)
    if solution_config not in solution.configurations:
        raise InvalidConfigurationError(solution_config, list(solution.configurations))


__all__ = [
    "PROJECT_TYPE_ALIASES",
    "SOLUTION_EXTENSION",
    "Project",
    "ProjectConfig",
    "Solution",
    "to_config",
    "validate_solution_config",
    "validate_solution_path",
]
