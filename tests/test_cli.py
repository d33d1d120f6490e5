"""Tests for the CLI.

These tests drive the Typer app against solution descriptions written
to a temporary directory. Build tools are mocked, or stood in for by echo.
"""

import json
import os
import shutil
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from typer.testing import CliRunner

from xamarin_builder import __version__
from xamarin_builder.buildtool.runner import CommandExecutionError
from xamarin_builder.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path):
    """Point settings at the temporary directory."""
    with patch.dict(
        os.environ,
        {"XAMARIN_BUILDER_XCODE_ARCHIVES_DIR": str(tmp_path / "Archives")},
    ):
        yield


@pytest.fixture
def description(tmp_path: Path) -> Path:
    """Write a solution with an iOS app, an iOS library and an Android app."""
    (tmp_path / "App.sln").write_text("")
    (tmp_path / "App.Droid").mkdir()
    (tmp_path / "App.Droid" / "AndroidManifest.xml").write_text(
        '<manifest package="com.example.app" />'
    )
    data = {
        "path": "App.sln",
        "configurations": ["Release|iPhone"],
        "projects": {
            "App.iOS": {
                "name": "App.iOS",
                "path": "App.iOS/App.iOS.csproj",
                "project_type": "ios",
                "output_type": "Exe",
                "config_map": {"Release|iPhone": "Release|iPhone"},
                "configs": {
                    "Release|iPhone": {
                        "configuration": "Release",
                        "platform": "iPhone",
                        "output_dir": "App.iOS/bin/iPhone/Release",
                        "mtouch_archs": ["arm64"],
                    }
                },
            },
            "App.Core": {
                "name": "App.Core",
                "path": "App.Core/App.Core.csproj",
                "project_type": "ios",
                "output_type": "Library",
                "config_map": {"Release|iPhone": "Release|AnyCPU"},
            },
            "App.Droid": {
                "name": "App.Droid",
                "path": "App.Droid/App.Droid.csproj",
                "project_type": "Xamarin.Android",
                "output_type": "Library",
                "android_application": True,
                "manifest_path": "App.Droid/AndroidManifest.xml",
                "config_map": {"Release|iPhone": "Release|AnyCPU"},
                "configs": {
                    "Release|AnyCPU": {
                        "configuration": "Release",
                        "platform": "AnyCPU",
                        "output_dir": "App.Droid/bin/Release",
                        "sign_android": True,
                    }
                },
            },
        },
    }
    path = tmp_path / "solution.yaml"
    path.write_text(yaml.safe_dump(data, sort_keys=False))
    return path


def invoke(*args: str):
    return runner.invoke(app, ["--log-level", "ERROR", *args])


class TestCLIHelp:
    """Test CLI help and version commands."""

    def test_help_returns_zero(self) -> None:
        """CLI --help should return exit code 0."""
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "Xamarin Builder" in result.stdout

    def test_version_flag(self) -> None:
        """CLI --version should print version and exit 0."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_short_version_flag(self) -> None:
        """CLI -V should print version and exit 0."""
        result = runner.invoke(app, ["-V"])
        assert result.exit_code == 0
        assert __version__ in result.stdout

    @pytest.mark.parametrize(
        "command", ["config", "projects", "plan", "build", "outputs", "clean"]
    )
    def test_subcommand_help(self, command: str) -> None:
        """Every subcommand should have help."""
        result = runner.invoke(app, [command, "--help"])
        assert result.exit_code == 0
        assert "Usage" in result.stdout


class TestCLIConfig:
    """Test CLI config command."""

    def test_config_command_shows_all_settings(self) -> None:
        """CLI config should show all configuration sections."""
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "Tools:" in result.stdout
        assert "Paths:" in result.stdout
        assert "Build:" in result.stdout
        assert "Xcode archives" in result.stdout

    def test_config_json(self, tmp_path: Path) -> None:
        """CLI config --json should contain all config fields."""
        result = invoke("config", "--json")
        assert result.exit_code == 0
        config_data = json.loads(result.stdout)
        for key in (
            "mdtool_path",
            "xbuild_path",
            "xcode_archives_dir",
            "log_dir",
            "force_mdtool",
            "project_types",
            "log_level",
            "build_timeout",
        ):
            assert key in config_data, f"Missing key: {key}"
        assert config_data["xcode_archives_dir"] == str(tmp_path / "Archives")


class TestCLIProjects:
    """Test CLI projects command."""

    def test_projects_json(self, description: Path) -> None:
        """All known-type projects should be listed in order."""
        result = invoke("projects", str(description), "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert [p["name"] for p in data] == ["App.iOS", "App.Core", "App.Droid"]
        assert data[2]["project_type"] == "android"

    def test_projects_type_filter(self, description: Path) -> None:
        """--type should narrow the listing."""
        result = invoke("projects", str(description), "--type", "android", "--json")
        assert result.exit_code == 0
        assert [p["name"] for p in json.loads(result.stdout)] == ["App.Droid"]

    def test_missing_description(self, tmp_path: Path) -> None:
        """A missing description file should exit 1."""
        result = invoke("projects", str(tmp_path / "missing.yaml"))
        assert result.exit_code == 1

    def test_missing_solution_file(self, description: Path) -> None:
        """A description pointing at a missing .sln should exit 1."""
        (description.parent / "App.sln").unlink()
        result = invoke("projects", str(description))
        assert result.exit_code == 1
        assert "Solution not exist" in result.stdout

    def test_unsupported_extension(self, tmp_path: Path) -> None:
        """A description with an unknown extension should exit 1."""
        path = tmp_path / "solution.toml"
        path.write_text("")
        result = invoke("projects", str(path))
        assert result.exit_code == 1


class TestCLIPlan:
    """Test CLI plan command."""

    def test_plan_json(self, description: Path) -> None:
        """Plan should show argv lists and the skipped library warning."""
        result = invoke(
            "plan", str(description), "-c", "Release", "-p", "iPhone", "--json"
        )
        assert result.exit_code == 0
        data = json.loads(result.stdout)

        ios, droid = data["projects"]
        assert ios["name"] == "App.iOS"
        assert ios["commands"][0][0] == "xbuild"
        assert "/p:BuildIpa=true" in ios["commands"][0]
        assert "/p:ArchiveOnBuild=true" in ios["commands"][0]
        assert droid["commands"][0][2] == "/t:SignAndroidPackage"
        assert len(data["warnings"]) == 1
        assert "App.Core" in data["warnings"][0]

    def test_plan_force_mdtool(self, description: Path) -> None:
        """--force-mdtool should plan mdtool build and archive."""
        result = invoke(
            "plan",
            str(description),
            "-c",
            "Release",
            "-p",
            "iPhone",
            "--type",
            "ios",
            "--force-mdtool",
            "--json",
        )
        assert result.exit_code == 0
        commands = json.loads(result.stdout)["projects"][0]["commands"]
        assert [c[1] for c in commands] == ["build", "archive"]
        assert commands[0][2] == "-c:Release|iPhone"

    def test_plan_invalid_configuration(self, description: Path) -> None:
        """An undeclared configuration should exit 1 with a JSON error."""
        result = invoke(
            "plan", str(description), "-c", "Debug", "-p", "iPhone", "--json"
        )
        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"]["code"] == "invalid_configuration"


class TestCLIBuild:
    """Test CLI build command."""

    def test_build_json(self, description: Path) -> None:
        """Build should run each command and report outputs."""
        apk_dir = description.parent / "App.Droid" / "bin" / "Release"
        apk_dir.mkdir(parents=True)
        (apk_dir / "com.example.app-Signed.apk").write_bytes(b"")

        with patch("xamarin_builder.cli.SubprocessRunner.run") as mock_run:
            result = invoke(
                "build",
                str(description),
                "-c",
                "Release",
                "-p",
                "iPhone",
                "--arg",
                "/p:Extra=1",
                "--json",
            )

        assert result.exit_code == 0
        assert mock_run.call_count == 2
        for call in mock_run.call_args_list:
            assert call.args[0].extra_args == ["/p:Extra=1"]

        data = json.loads(result.stdout)
        assert [c["project"] for c in data["commands"]] == ["App.iOS", "App.Droid"]
        assert not any(c["already_performed"] for c in data["commands"])
        assert data["outputs"]["android"]["apk"].endswith("-Signed.apk")
        assert len(data["warnings"]) == 1

    def test_build_failure(self, description: Path) -> None:
        """A failing command should exit 1 and report the error."""
        with patch(
            "xamarin_builder.cli.SubprocessRunner.run",
            side_effect=CommandExecutionError("exit 1", exit_code=1),
        ):
            result = invoke(
                "build", str(description), "-c", "Release", "-p", "iPhone", "--json"
            )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"]["code"] == "build_failed"
        assert len(data["warnings"]) == 1

    def test_build_output_error_keeps_warnings(self, description: Path) -> None:
        """An output collection failure should still report the warnings."""
        (description.parent / "App.Droid" / "AndroidManifest.xml").write_text("<")
        with patch("xamarin_builder.cli.SubprocessRunner.run"):
            result = invoke(
                "build", str(description), "-c", "Release", "-p", "iPhone", "--json"
            )

        assert result.exit_code == 1
        data = json.loads(result.stdout)
        assert data["error"]["code"] == "output_collection_error"
        assert len(data["warnings"]) == 1
        assert "App.Core" in data["warnings"][0]

    @pytest.mark.skipif(shutil.which("echo") is None, reason="echo not available")
    def test_build_json_with_real_tool(self, description: Path) -> None:
        """Tool output should not end up in the JSON document on stdout."""
        env = dict(os.environ, XAMARIN_BUILDER_XBUILD_PATH=shutil.which("echo"))
        env.pop("XAMARIN_BUILDER_LOG_DIR", None)
        result = subprocess.run(
            [
                sys.executable,
                "-m",
                "xamarin_builder",
                "--log-level",
                "ERROR",
                "build",
                str(description),
                "-c",
                "Release",
                "-p",
                "iPhone",
                "--json",
            ],
            capture_output=True,
            text=True,
            env=env,
        )

        assert result.returncode == 0, result.stderr
        data = json.loads(result.stdout)
        assert [c["project"] for c in data["commands"]] == ["App.iOS", "App.Droid"]
        assert "/t:SignAndroidPackage" in result.stderr

    def test_build_text_output(self, description: Path) -> None:
        """Text mode should announce each command."""
        with patch("xamarin_builder.cli.SubprocessRunner.run"):
            result = invoke(
                "build", str(description), "-c", "Release", "-p", "iPhone"
            )

        assert result.exit_code == 0
        assert "Running (App.iOS):" in result.stdout
        assert "No outputs found" in result.stdout


class TestCLIOutputs:
    """Test CLI outputs command."""

    def test_outputs_json(self, description: Path) -> None:
        """Outputs should list discovered artifacts by project type."""
        dsym = description.parent / "App.iOS" / "bin" / "iPhone" / "Release"
        (dsym / "App.iOS.app.dSYM").mkdir(parents=True)

        result = invoke(
            "outputs", str(description), "-c", "Release", "-p", "iPhone", "--json"
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["ios"]["dsym"] == str(dsym / "App.iOS.app.dSYM")

    def test_outputs_manifest_error(self, description: Path) -> None:
        """A broken manifest should exit 1."""
        (description.parent / "App.Droid" / "AndroidManifest.xml").write_text("<")
        result = invoke(
            "outputs", str(description), "-c", "Release", "-p", "iPhone", "--json"
        )
        assert result.exit_code == 1
        assert json.loads(result.stdout)["error"]["code"] == "output_collection_error"


class TestCLIClean:
    """Test CLI clean command."""

    def test_clean(self, description: Path) -> None:
        """Clean should remove bin and obj directories."""
        for name in ("bin", "obj"):
            (description.parent / "App.iOS" / name).mkdir(parents=True)

        result = invoke("clean", str(description))

        assert result.exit_code == 0
        assert "Removed 2 directories" in result.stdout
        assert not (description.parent / "App.iOS" / "bin").exists()

    def test_nothing_to_clean(self, description: Path) -> None:
        """Clean without outputs should say so."""
        result = invoke("clean", str(description))
        assert result.exit_code == 0
        assert "Nothing to clean" in result.stdout


class TestModuleEntryPoint:
    """Test python -m xamarin_builder entry point."""

    def test_module_version(self) -> None:
        """python -m xamarin_builder --version should work."""
        result = subprocess.run(
            [sys.executable, "-m", "xamarin_builder", "--version"],
            capture_output=True,
            text=True,
        )
        assert result.returncode == 0
        assert __version__ in result.stdout
