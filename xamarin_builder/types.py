"""Shared type definitions for xamarin_builder.

This module contains enums and type aliases shared across subpackages
to avoid circular imports.
"""

from enum import Enum


class ProjectType(str, Enum):
    """Platform family of a project in a solution."""

    IOS = "ios"
    TVOS = "tvos"
    MACOS = "macos"
    ANDROID = "android"
    UNKNOWN = "unknown"


class OutputType(str, Enum):
    """Kind of artifact a build produces."""

    XCARCHIVE = "xcarchive"
    IPA = "ipa"
    DSYM = "dsym"
    APP = "app"
    PKG = "pkg"
    APK = "apk"


class Toolchain(str, Enum):
    """External build tool family a command is run with."""

    MDTOOL = "mdtool"
    XBUILD = "xbuild"


APPLE_PROJECT_TYPES = frozenset({ProjectType.IOS, ProjectType.TVOS, ProjectType.MACOS})

# Output type a project must declare to be built as an Apple application
EXECUTABLE_OUTPUT_TYPE = "exe"

OutputMap = dict[ProjectType, dict[OutputType, str]]


__all__ = [
    "APPLE_PROJECT_TYPES",
    "EXECUTABLE_OUTPUT_TYPE",
    "OutputMap",
    "OutputType",
    "ProjectType",
    "Toolchain",
]
