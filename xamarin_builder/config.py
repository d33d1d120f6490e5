"""Configuration settings for xamarin_builder.

Uses pydantic-settings for config parsing from environment variables
and defaults. Configuration precedence: CLI flags > env vars > defaults.
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from xamarin_builder.types import ProjectType

DEFAULT_MDTOOL_PATH = "/Applications/Xamarin Studio.app/Contents/MacOS/mdtool"


def _default_xcode_archives_dir() -> Path:
    """Return the default Xcode archive store."""
    return Path.home() / "Library" / "Developer" / "Xcode" / "Archives"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the XAMARIN_BUILDER_
    prefix. CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="XAMARIN_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Tools
    mdtool_path: str = Field(
        default=DEFAULT_MDTOOL_PATH,
        description="Path to the mdtool executable",
    )
    xbuild_path: str = Field(
        default="xbuild",
        description="Path to the xbuild executable",
    )

    # Paths
    xcode_archives_dir: Path = Field(
        default_factory=_default_xcode_archives_dir,
        description="Directory Xcode stores .xcarchive bundles in",
    )
    log_dir: Path | None = Field(
        default=None,
        description="Directory for per-command build logs (console if not set)",
    )

    # Build behaviour
    force_mdtool: bool = Field(
        default=False,
        description="Use mdtool instead of xbuild for Apple projects",
    )
    project_types: list[ProjectType] = Field(
        default_factory=list,
        description="Project types to build (empty = all known types)",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # Timeouts (in seconds)
    build_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout for a single build command (no timeout if not set)",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["DEFAULT_MDTOOL_PATH", "Settings", "get_settings", "print_settings_json"]
