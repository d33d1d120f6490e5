"""Artifact discovery after a build pass.

This module handles:
- Locating the newest .xcarchive in the Xcode archive store
- Locating .ipa, .app.dSYM, .app and .pkg products in output directories
- Reading the Android package name from AndroidManifest.xml
- Locating the newest (preferably signed) .apk

A probe that finds nothing returns None. Only I/O and manifest parse
failures raise OutputCollectionError.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET
from collections.abc import Iterable
from pathlib import Path

from xamarin_builder.builder.selection import resolve_project_config
from xamarin_builder.errors import OutputCollectionError
from xamarin_builder.solution.models import Project
from xamarin_builder.types import OutputMap, OutputType, ProjectType

logger = logging.getLogger(__name__)

SIGNED_APK_SUFFIX = "-Signed.apk"


def _latest(paths: Iterable[Path]) -> Path | None:
    """Return the most recently modified path, or None."""
    latest: Path | None = None
    latest_mtime = 0.0
    for path in paths:
        mtime = path.stat().st_mtime
        if latest is None or mtime > latest_mtime:
            latest, latest_mtime = path, mtime
    return latest


def _find_latest(directory: Path, pattern: str, recursive: bool = False) -> str | None:
    """Find the newest entry matching a glob pattern under a directory.

    Raises:
        OutputCollectionError: If the directory cannot be read.
    """
    try:
        if not directory.is_dir():
            logger.debug("Output directory does not exist: %s", directory)
            return None
        matches = directory.rglob(pattern) if recursive else directory.glob(pattern)
        latest = _latest(matches)
    except OSError as e:
        raise OutputCollectionError(
            f"Failed to search {directory} for {pattern}: {e}"
        ) from e

    if latest is None:
        logger.debug("No match for %s in %s", pattern, directory)
        return None
    return str(latest)


def latest_xcarchive(archives_dir: Path, assembly_name: str) -> str | None:
    """Find the newest .xcarchive for an app in the Xcode archive store."""
    return _find_latest(archives_dir, f"{assembly_name}*.xcarchive", recursive=True)


def latest_ipa(output_dir: Path, assembly_name: str) -> str | None:
    """Find the newest .ipa for an app under its output directory."""
    return _find_latest(output_dir, f"{assembly_name}*.ipa", recursive=True)


def app_dsym(output_dir: Path, assembly_name: str) -> str | None:
    """Find the .app.dSYM bundle of an app in its output directory."""
    dsym_path = output_dir / f"{assembly_name}.app.dSYM"
    try:
        if dsym_path.is_dir():
            return str(dsym_path)
    except OSError as e:
        raise OutputCollectionError(f"Failed to check {dsym_path}: {e}") from e
    logger.debug("No dSYM found at %s", dsym_path)
    return None


def latest_app(output_dir: Path, assembly_name: str) -> str | None:
    """Find the newest .app bundle in an output directory."""
    return _find_latest(output_dir, f"{assembly_name}*.app")


def latest_pkg(output_dir: Path, assembly_name: str) -> str | None:
    """Find the newest installer .pkg in an output directory."""
    return _find_latest(output_dir, f"{assembly_name}*.pkg")


def android_package_name(manifest_path: Path | None) -> str:
    """Read the package name declared by an AndroidManifest.xml.

    Raises:
        OutputCollectionError: If the manifest is missing, unreadable,
            malformed, or declares no package.
    """
    if manifest_path is None:
        raise OutputCollectionError("Android project has no manifest path")

    try:
        root = ET.parse(manifest_path).getroot()
    except OSError as e:
        raise OutputCollectionError(
            f"Failed to read manifest {manifest_path}: {e}"
        ) from e
    except ET.ParseError as e:
        raise OutputCollectionError(
            f"Failed to parse manifest {manifest_path}: {e}"
        ) from e

    package_name = root.get("package")
    if not package_name:
        raise OutputCollectionError(f"No package name found in {manifest_path}")
    return package_name


def latest_apk(output_dir: Path, package_name: str) -> str | None:
    """Find the newest .apk for a package, preferring signed packages."""
    signed = _find_latest(output_dir, f"{package_name}*{SIGNED_APK_SUFFIX}")
    if signed is not None:
        return signed
    return _find_latest(output_dir, f"{package_name}*.apk")


def _put(
    outputs: dict[OutputType, str],
    output_type: OutputType,
    path: str | None,
) -> None:
    if path is not None:
        logger.info("Found %s: %s", output_type.value, path)
        outputs[output_type] = path


def collect_output(
    projects: Iterable[Project],
    configuration: str,
    platform: str,
    archives_dir: Path,
    force_mdtool: bool = False,
) -> OutputMap:
    """Collect the artifacts of buildable projects.

    Args:
        projects: Buildable projects.
        configuration: Solution configuration the projects were built with.
        platform: Solution platform the projects were built with.
        archives_dir: Xcode archive store.
        force_mdtool: Whether mdtool was used (macOS archives only exist then).

    Returns:
        Map of project type to discovered artifact paths. Project types with
        no artifacts are omitted.

    Raises:
        OutputCollectionError: On I/O or manifest failures.
    """
    output_map: OutputMap = {}

    for project in projects:
        project_config, _ = resolve_project_config(project, configuration, platform)
        if project_config is None:
            continue

        outputs = dict(output_map.get(project.project_type, {}))
        output_dir = project_config.output_dir
        name = project.assembly_name

        if project.project_type in (ProjectType.IOS, ProjectType.TVOS):
            _put(outputs, OutputType.XCARCHIVE, latest_xcarchive(archives_dir, name))
            _put(outputs, OutputType.IPA, latest_ipa(output_dir, name))
            _put(outputs, OutputType.DSYM, app_dsym(output_dir, name))
        elif project.project_type == ProjectType.MACOS:
            if force_mdtool:
                _put(
                    outputs, OutputType.XCARCHIVE, latest_xcarchive(archives_dir, name)
                )
            _put(outputs, OutputType.APP, latest_app(output_dir, name))
            _put(outputs, OutputType.PKG, latest_pkg(output_dir, name))
        elif project.project_type == ProjectType.ANDROID:
            package_name = android_package_name(project.manifest_path)
            _put(outputs, OutputType.APK, latest_apk(output_dir, package_name))

        if outputs:
            output_map[project.project_type] = outputs

    return output_map


__all__ = [
    "SIGNED_APK_SUFFIX",
    "android_package_name",
    "app_dsym",
    "collect_output",
    "latest_apk",
    "latest_app",
    "latest_ipa",
    "latest_pkg",
    "latest_xcarchive",
]
