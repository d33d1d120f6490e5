"""Build service module.

This module provides the high-level build API:
- Builder.build_all_projects(): plan and run a whole build pass
- Builder.plan(): dry-run planning with warnings
- Builder.collect_output(): locate the artifacts of a pass
- Builder.clean_all(): remove bin/obj directories of the solution's projects
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from xamarin_builder.builder.cleanup import CleanHook, clean_projects
from xamarin_builder.builder.executor import CommandExecutor, ObserveHook, PrepareHook
from xamarin_builder.builder.outputs import collect_output
from xamarin_builder.builder.planner import select_planner
from xamarin_builder.builder.selection import (
    buildable_projects,
    filtered_projects,
    resolve_project_config,
)
from xamarin_builder.buildtool.command import BuildCommand
from xamarin_builder.buildtool.runner import (
    CommandExecutionError,
    CommandRunner,
    SubprocessRunner,
)
from xamarin_builder.config import Settings, get_settings
from xamarin_builder.errors import BuildPassError
from xamarin_builder.solution.io import load_solution
from xamarin_builder.solution.models import (
    Project,
    Solution,
    validate_solution_config,
    validate_solution_path,
)
from xamarin_builder.types import OutputMap, ProjectType

logger = logging.getLogger(__name__)

ProjectPlan = tuple[Project, list[BuildCommand]]


class Builder:
    """Orchestrate builds of a solution's projects.

    Args:
        solution: Loaded solution model.
        project_type_whitelist: Project types to build (empty = all known).
        force_mdtool: Plan Apple projects with mdtool instead of xbuild.
        settings: Application settings.

    Raises:
        InvalidSolutionError: If the solution path is not a solution file.
    """

    def __init__(
        self,
        solution: Solution,
        project_type_whitelist: Sequence[ProjectType] | None = None,
        force_mdtool: bool = False,
        settings: Settings | None = None,
    ) -> None:
        validate_solution_path(solution.path)

        self.solution = solution
        self.project_type_whitelist = list(project_type_whitelist or [])
        self.force_mdtool = force_mdtool
        self.settings = settings if settings is not None else get_settings()

    @classmethod
    def from_path(
        cls,
        description_path: Path,
        project_type_whitelist: Sequence[ProjectType] | None = None,
        force_mdtool: bool = False,
        settings: Settings | None = None,
    ) -> Builder:
        """Create a builder from a solution description file."""
        solution = load_solution(description_path)
        return cls(
            solution,
            project_type_whitelist=project_type_whitelist,
            force_mdtool=force_mdtool,
            settings=settings,
        )

    def filtered_projects(self) -> list[Project]:
        """Return the whitelisted projects of known type."""
        return filtered_projects(self.solution, self.project_type_whitelist)

    def buildable_projects(
        self, configuration: str, platform: str
    ) -> tuple[list[Project], list[str]]:
        """Return the projects buildable for a configuration, with warnings."""
        return buildable_projects(self.filtered_projects(), configuration, platform)

    def plan(
        self, configuration: str, platform: str
    ) -> tuple[list[ProjectPlan], list[str]]:
        """Plan the build commands of every buildable project.

        Returns:
            Tuple of (per-project plans in build order, warnings).

        Raises:
            InvalidConfigurationError: If the solution does not declare the
                configuration|platform pair.
        """
        validate_solution_config(self.solution, configuration, platform)

        projects, warnings = self.buildable_projects(configuration, platform)
        planner = select_planner(
            self.solution.path, configuration, platform, force_mdtool=self.force_mdtool
        )

        plans: list[ProjectPlan] = []
        for project in projects:
            project_config, warning = resolve_project_config(
                project, configuration, platform
            )
            if project_config is None:
                if warning:
                    logger.warning(warning)
                    warnings.append(warning)
                continue

            plans.append((project, planner.plan(project, project_config)))

        return plans, warnings

    def build_all_projects(
        self,
        configuration: str,
        platform: str,
        prepare: PrepareHook | None = None,
        observe: ObserveHook | None = None,
        runner: CommandRunner | None = None,
    ) -> list[str]:
        """Build every buildable project of the solution.

        Identical commands run once per pass, even across projects.

        Args:
            configuration: Solution configuration to build.
            platform: Solution platform to build.
            prepare: Called with each command before it runs; may edit
                ``extra_args`` and ``env``.
            observe: Called with each command and whether it already ran.
            runner: Command runner (defaults to a SubprocessRunner).

        Returns:
            Warnings about skipped projects.

        Raises:
            InvalidConfigurationError: If the configuration is not declared.
            BuildPassError: On the first failing command; carries the
                warnings collected so far.
        """
        plans, warnings = self.plan(configuration, platform)
        if not plans:
            logger.info("No buildable projects for %s|%s", configuration, platform)
            return warnings

        executor = CommandExecutor(runner or SubprocessRunner(self.settings))

        for project, commands in plans:
            logger.info("Building %s (%s)", project.name, project.project_type.value)
            try:
                executor.execute(commands, project, observe=observe, prepare=prepare)
            except CommandExecutionError as e:
                raise BuildPassError(
                    f"Build of {project.name} failed: {e}",
                    warnings=warnings,
                    cause_code=e.code,
                ) from e

        return warnings

    def collect_output(self, configuration: str, platform: str) -> OutputMap:
        """Locate the artifacts produced for a configuration.

        Raises:
            OutputCollectionError: On I/O or manifest failures.
        """
        projects, _ = self.buildable_projects(configuration, platform)
        return collect_output(
            projects,
            configuration,
            platform,
            archives_dir=self.settings.xcode_archives_dir,
            force_mdtool=self.force_mdtool,
        )

    def clean_all(self, observe: CleanHook | None = None) -> None:
        """Remove bin and obj directories of the whitelisted projects.

        Raises:
            CleanupError: On the first directory that cannot be removed.
        """
        clean_projects(self.filtered_projects(), observe=observe)


__all__ = ["Builder", "ProjectPlan"]
