"""Project selection and configuration resolution.

Projects are first filtered by the project type whitelist, then narrowed
to the ones buildable for a solution configuration. Exclusions made while
narrowing are reported as warning strings rather than errors.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence

from xamarin_builder.solution.models import Project, ProjectConfig, Solution, to_config
from xamarin_builder.types import (
    APPLE_PROJECT_TYPES,
    EXECUTABLE_OUTPUT_TYPE,
    ProjectType,
)

logger = logging.getLogger(__name__)


def is_project_type_allowed(
    project_type: ProjectType,
    whitelist: Sequence[ProjectType] | None,
) -> bool:
    """Check a project type against a whitelist.

    An empty or missing whitelist allows every type.
    """
    if not whitelist:
        return True
    return project_type in whitelist


def filtered_projects(
    solution: Solution,
    whitelist: Sequence[ProjectType] | None = None,
) -> list[Project]:
    """Return the known-type projects allowed by the whitelist.

    Order follows the solution's project map.
    """
    return [
        project
        for project in solution.projects.values()
        if is_project_type_allowed(project.project_type, whitelist)
        and project.project_type != ProjectType.UNKNOWN
    ]


def buildable_projects(
    projects: Iterable[Project],
    configuration: str,
    platform: str,
) -> tuple[list[Project], list[str]]:
    """Narrow projects to those buildable for a solution configuration.

    Args:
        projects: Candidate projects, usually from filtered_projects().
        configuration: Requested solution configuration.
        platform: Requested solution platform.

    Returns:
        Tuple of (buildable projects, warnings).
    """
    solution_config = to_config(configuration, platform)
    buildable: list[Project] = []
    warnings: list[str] = []

    for project in projects:
        if solution_config not in project.config_map:
            warnings.append(
                f"project ({project.name}) has no config for solution config "
                f"({solution_config}), skipping..."
            )
            continue

        if (
            project.project_type in APPLE_PROJECT_TYPES
            and project.output_type.lower() != EXECUTABLE_OUTPUT_TYPE
        ):
            warnings.append(
                f"project ({project.name}) is not archivable based on output type "
                f"({project.output_type}), skipping..."
            )
            continue

        if (
            project.project_type == ProjectType.ANDROID
            and not project.android_application
        ):
            warnings.append(
                f"project ({project.name}) is not an android application project, "
                "skipping..."
            )
            continue

        if project.project_type != ProjectType.UNKNOWN:
            buildable.append(project)

    for warning in warnings:
        logger.warning(warning)

    return buildable, warnings


def resolve_project_config(
    project: Project,
    configuration: str,
    platform: str,
) -> tuple[ProjectConfig | None, str | None]:
    """Resolve the project configuration a solution configuration maps to.

    Returns:
        Tuple of (project config, warning). Exactly one of them is None.
    """
    solution_config = to_config(configuration, platform)

    project_config_key = project.config_map.get(solution_config)
    if project_config_key is None:
        return None, (
            f"project ({project.name}) has no config for solution config "
            f"({solution_config}), skipping..."
        )

    project_config = project.configs.get(project_config_key)
    if project_config is None:
        return None, (
            f"project ({project.name}) contains mapping for solution config "
            f"({solution_config}), but does not have project configuration"
        )

    return project_config, None


__all__ = [
    "buildable_projects",
    "filtered_projects",
    "is_project_type_allowed",
    "resolve_project_config",
]
