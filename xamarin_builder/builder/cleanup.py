"""Removal of per-project build output directories."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable, Iterable
from pathlib import Path

from xamarin_builder.errors import CleanupError
from xamarin_builder.solution.models import Project

logger = logging.getLogger(__name__)

# Checked beside each project file, in this order
OUTPUT_DIR_NAMES = ("bin", "obj")

CleanHook = Callable[[Project, Path], None]


def clean_projects(
    projects: Iterable[Project],
    observe: CleanHook | None = None,
) -> None:
    """Remove the bin and obj directories next to each project file.

    A symlinked directory is removed as a link; its target is left alone.

    Args:
        projects: Projects to clean.
        observe: Called with each directory just before it is removed.

    Raises:
        CleanupError: On the first directory that cannot be checked or removed.
    """
    for project in projects:
        project_dir = project.path.parent

        for dir_name in OUTPUT_DIR_NAMES:
            dir_path = project_dir / dir_name
            try:
                exists = dir_path.is_dir()
            except OSError as e:
                raise CleanupError(
                    f"Failed to check {dir_path}: {e}", str(dir_path)
                ) from e
            if not exists:
                continue

            if observe is not None:
                observe(project, dir_path)

            logger.info("Removing %s", dir_path)
            try:
                if dir_path.is_symlink():
                    dir_path.unlink()
                else:
                    shutil.rmtree(dir_path)
            except OSError as e:
                raise CleanupError(
                    f"Failed to remove {dir_path}: {e}", str(dir_path)
                ) from e


__all__ = ["OUTPUT_DIR_NAMES", "CleanHook", "clean_projects"]
