"""Build command value type.

A BuildCommand describes one mdtool or xbuild invocation. Equality covers
only the identity fields the planner sets; ``extra_args`` and ``env`` may be
edited by callers without affecting deduplication.
"""

from __future__ import annotations

import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import NamedTuple

from xamarin_builder.types import Toolchain

# mdtool targets
MDTOOL_BUILD = "build"
MDTOOL_ARCHIVE = "archive"

# xbuild targets
XBUILD_BUILD = "Build"
XBUILD_SIGN_ANDROID_PACKAGE = "SignAndroidPackage"
XBUILD_PACKAGE_FOR_ANDROID = "PackageForAndroid"


class CommandKey(NamedTuple):
    """Identity of a build command."""

    toolchain: Toolchain
    build_path: str
    target: str
    configuration: str
    platform: str | None
    project_name: str | None
    build_ipa: bool
    archive_on_build: bool


@dataclass(eq=False)
class BuildCommand:
    """A single build tool invocation.

    Attributes:
        toolchain: Tool family the command runs with.
        build_path: Solution or project file the tool is pointed at.
        target: Tool target (action).
        configuration: Configuration name.
        platform: Platform name, or None to let the tool decide.
        project_name: Restrict the build to one project of the solution.
        build_ipa: Produce an .ipa while building (xbuild only).
        archive_on_build: Produce an .xcarchive while building (xbuild only).
        extra_args: Additional arguments appended to the command line.
        env: Environment overrides for the process.
    """

    toolchain: Toolchain
    build_path: Path
    target: str
    configuration: str
    platform: str | None = None
    project_name: str | None = None
    build_ipa: bool = False
    archive_on_build: bool = False
    extra_args: list[str] = field(default_factory=list)
    env: dict[str, str] = field(default_factory=dict)

    @property
    def key(self) -> CommandKey:
        """Return the identity fields as an immutable tuple."""
        return CommandKey(
            toolchain=self.toolchain,
            build_path=str(self.build_path),
            target=self.target,
            configuration=self.configuration,
            platform=self.platform,
            project_name=self.project_name,
            build_ipa=self.build_ipa,
            archive_on_build=self.archive_on_build,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, BuildCommand):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def argv(self, tool_path: str) -> list[str]:
        """Compose the command line for this command.

        Args:
            tool_path: Executable to run.

        Returns:
            Command as list of strings suitable for subprocess.
        """
        if self.toolchain == Toolchain.MDTOOL:
            cmd = compose_mdtool_command(self, tool_path)
        else:
            cmd = compose_xbuild_command(self, tool_path)
        cmd.extend(self.extra_args)
        return cmd

    def printable(self, tool_path: str | None = None) -> str:
        """Return the shell-quoted command line."""
        return shlex.join(self.argv(tool_path or self.toolchain.value))


def compose_mdtool_command(command: BuildCommand, tool_path: str) -> list[str]:
    """Compose an mdtool command line (without extra arguments)."""
    cmd = [tool_path, command.target]

    config = command.configuration
    if command.platform:
        config = f"{config}|{command.platform}"
    cmd.append(f"-c:{config}")

    cmd.append(str(command.build_path))

    if command.project_name:
        cmd.append(f"-p:{command.project_name}")

    return cmd


def compose_xbuild_command(command: BuildCommand, tool_path: str) -> list[str]:
    """Compose an xbuild command line (without extra arguments)."""
    cmd = [tool_path, str(command.build_path)]

    cmd.append(f"/t:{command.target}")
    cmd.append(f"/p:Configuration={command.configuration}")

    if command.platform:
        cmd.append(f"/p:Platform={command.platform}")

    if command.build_ipa:
        cmd.append("/p:BuildIpa=true")

    if command.archive_on_build:
        cmd.append("/p:ArchiveOnBuild=true")

    cmd.extend(["/verbosity:minimal", "/nologo"])
    return cmd


__all__ = [
    "MDTOOL_ARCHIVE",
    "MDTOOL_BUILD",
    "XBUILD_BUILD",
    "XBUILD_PACKAGE_FOR_ANDROID",
    "XBUILD_SIGN_ANDROID_PACKAGE",
    "BuildCommand",
    "CommandKey",
    "compose_mdtool_command",
    "compose_xbuild_command",
]
