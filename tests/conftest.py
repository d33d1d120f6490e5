"""Shared fixtures for xamarin_builder tests."""

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from xamarin_builder.buildtool.command import BuildCommand
from xamarin_builder.buildtool.runner import CommandExecutionError
from xamarin_builder.solution.models import Project, ProjectConfig, Solution
from xamarin_builder.types import ProjectType

RELEASE_IPHONE = "Release|iPhone"


class FakeRunner:
    """Command runner that records commands instead of running them."""

    def __init__(self, fail_on: Callable[[BuildCommand], bool] | None = None) -> None:
        self.commands: list[BuildCommand] = []
        self.fail_on = fail_on

    def run(self, command: BuildCommand) -> None:
        if self.fail_on is not None and self.fail_on(command):
            raise CommandExecutionError("boom", exit_code=1)
        self.commands.append(command)


@pytest.fixture
def fake_runner() -> FakeRunner:
    """Create a recording runner."""
    return FakeRunner()


@pytest.fixture
def solution_path(tmp_path: Path) -> Path:
    """Create an empty .sln file."""
    path = tmp_path / "App.sln"
    path.write_text("Microsoft Visual Studio Solution File\n")
    return path


@pytest.fixture
def make_project(tmp_path: Path) -> Callable[..., Project]:
    """Return a factory for projects mapped to a single configuration."""

    def factory(
        name: str = "App.iOS",
        project_type: ProjectType = ProjectType.IOS,
        output_type: str = "exe",
        solution_config: str = RELEASE_IPHONE,
        configuration: str = "Release",
        platform: str = "iPhone",
        mtouch_archs: tuple[str, ...] = ("arm64",),
        sign_android: bool = False,
        android_application: bool = False,
        mapped: bool = True,
        **kwargs: Any,
    ) -> Project:
        project_dir = tmp_path / name
        project_config_key = f"{configuration}|{platform}"
        config = ProjectConfig(
            configuration=configuration,
            platform=platform,
            output_dir=project_dir / "bin" / platform / configuration,
            sign_android=sign_android,
            mtouch_archs=mtouch_archs,
        )
        return Project(
            name=name,
            path=project_dir / f"{name}.csproj",
            project_type=project_type,
            output_type=output_type,
            android_application=android_application,
            config_map={solution_config: project_config_key} if mapped else {},
            configs={project_config_key: config},
            **kwargs,
        )

    return factory


@pytest.fixture
def make_solution(solution_path: Path) -> Callable[..., Solution]:
    """Return a factory for solutions around the given projects."""

    def factory(
        *projects: Project,
        configurations: tuple[str, ...] = (RELEASE_IPHONE,),
    ) -> Solution:
        return Solution(
            path=solution_path,
            configurations=list(configurations),
            projects={p.name: p for p in projects},
        )

    return factory


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Return the recording runner class for custom failure rules."""
    return FakeRunner
