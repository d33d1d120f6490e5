"""Build command planning.

Each buildable project is turned into an ordered list of BuildCommands.
Apple projects are planned by one of two strategies, selected once per
pass: mdtool (``force_mdtool``) or xbuild. Android projects are always
planned with xbuild against the project file.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from pathlib import Path

from xamarin_builder.buildtool.command import (
    MDTOOL_ARCHIVE,
    MDTOOL_BUILD,
    XBUILD_BUILD,
    XBUILD_PACKAGE_FOR_ANDROID,
    XBUILD_SIGN_ANDROID_PACKAGE,
    BuildCommand,
)
from xamarin_builder.solution.models import Project, ProjectConfig
from xamarin_builder.types import ProjectType, Toolchain

logger = logging.getLogger(__name__)

# Architectures that only target the iOS/tvOS simulator
SIMULATOR_ARCHITECTURES = frozenset({"i386", "x86_64"})

ANY_CPU_PLATFORMS = frozenset({"anycpu", "any cpu"})

PlanFunc = Callable[[Project, ProjectConfig], list[BuildCommand]]


def is_architecture_archivable(architectures: Iterable[str]) -> bool:
    """Check whether an architecture list can be archived.

    A list is archivable when it is non-empty and names at least one
    device (non-simulator) architecture.
    """
    archs = [arch.strip().lower() for arch in architectures if arch.strip()]
    if not archs:
        return False
    return any(arch not in SIMULATOR_ARCHITECTURES for arch in archs)


def is_platform_any_cpu(platform: str) -> bool:
    """Check whether a platform is the AnyCPU wildcard."""
    return platform.strip().lower() in ANY_CPU_PLATFORMS


class CommandPlanner(ABC):
    """Plan build commands for the projects of one solution.

    Args:
        solution_path: Solution file Apple commands are pointed at.
        configuration: Requested solution configuration.
        platform: Requested solution platform.
    """

    toolchain: Toolchain

    def __init__(self, solution_path: Path, configuration: str, platform: str) -> None:
        self.solution_path = solution_path
        self.configuration = configuration
        self.platform = platform

    def handlers(self) -> dict[ProjectType, PlanFunc]:
        """Return the planning function for every project type."""
        return {
            ProjectType.IOS: self.plan_ios,
            ProjectType.TVOS: self.plan_ios,
            ProjectType.MACOS: self.plan_macos,
            ProjectType.ANDROID: self.plan_android,
            ProjectType.UNKNOWN: self.plan_nothing,
        }

    def plan(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        """Plan the ordered build commands for a project."""
        commands = self.handlers()[project.project_type](project, project_config)
        for command in commands:
            logger.debug("Planned for %s: %s", project.name, command.printable())
        return commands

    @abstractmethod
    def plan_ios(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        """Plan an iOS or tvOS application."""

    @abstractmethod
    def plan_macos(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        """Plan a macOS application."""

    def plan_android(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        """Plan an Android application package against its project file."""
        if project_config.sign_android:
            target = XBUILD_SIGN_ANDROID_PACKAGE
        else:
            target = XBUILD_PACKAGE_FOR_ANDROID

        platform: str | None = None
        if not is_platform_any_cpu(project_config.platform):
            platform = project_config.platform

        return [
            BuildCommand(
                toolchain=Toolchain.XBUILD,
                build_path=project.path,
                target=target,
                configuration=project_config.configuration,
                platform=platform,
            )
        ]

    def plan_nothing(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        """Projects of unknown type are never built."""
        return []


class MDToolPlanner(CommandPlanner):
    """Plan Apple projects as mdtool build and archive commands."""

    toolchain = Toolchain.MDTOOL

    def _mdtool_command(
        self, target: str, project: Project, project_config: ProjectConfig
    ) -> BuildCommand:
        return BuildCommand(
            toolchain=Toolchain.MDTOOL,
            build_path=self.solution_path,
            target=target,
            configuration=project_config.configuration,
            platform=project_config.platform,
            project_name=project.name,
        )

    def plan_ios(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        commands = [self._mdtool_command(MDTOOL_BUILD, project, project_config)]
        if is_architecture_archivable(project_config.mtouch_archs):
            commands.append(
                self._mdtool_command(MDTOOL_ARCHIVE, project, project_config)
            )
        return commands

    def plan_macos(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        return [
            self._mdtool_command(MDTOOL_BUILD, project, project_config),
            self._mdtool_command(MDTOOL_ARCHIVE, project, project_config),
        ]


class XBuildPlanner(CommandPlanner):
    """Plan Apple projects as a single solution-wide xbuild command."""

    toolchain = Toolchain.XBUILD

    def _xbuild_command(self) -> BuildCommand:
        return BuildCommand(
            toolchain=Toolchain.XBUILD,
            build_path=self.solution_path,
            target=XBUILD_BUILD,
            configuration=self.configuration,
            platform=self.platform,
        )

    def plan_ios(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        command = self._xbuild_command()
        if is_architecture_archivable(project_config.mtouch_archs):
            command.build_ipa = True
            command.archive_on_build = True
        return [command]

    def plan_macos(
        self, project: Project, project_config: ProjectConfig
    ) -> list[BuildCommand]:
        command = self._xbuild_command()
        command.archive_on_build = True
        return [command]


def select_planner(
    solution_path: Path,
    configuration: str,
    platform: str,
    force_mdtool: bool = False,
) -> CommandPlanner:
    """Select the planning strategy for a build pass."""
    planner_cls: type[CommandPlanner] = MDToolPlanner if force_mdtool else XBuildPlanner
    return planner_cls(solution_path, configuration, platform)


__all__ = [
    "ANY_CPU_PLATFORMS",
    "SIMULATOR_ARCHITECTURES",
    "CommandPlanner",
    "MDToolPlanner",
    "XBuildPlanner",
    "is_architecture_archivable",
    "is_platform_any_cpu",
    "select_planner",
]
