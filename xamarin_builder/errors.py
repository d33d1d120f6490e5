"""Error types for xamarin_builder.

Every error carries a stable ``code`` so callers (CLI, JSON output) can
handle failures programmatically.
"""

from __future__ import annotations


class BuilderError(Exception):
    """Base error for build orchestration operations."""

    def __init__(self, message: str, code: str = "builder_error") -> None:
        super().__init__(message)
        self.code = code


class InvalidSolutionError(BuilderError):
    """Raised when the solution path or description is not usable."""

    def __init__(self, message: str, code: str = "invalid_solution") -> None:
        super().__init__(message, code=code)


class InvalidConfigurationError(BuilderError):
    """Raised when a configuration|platform pair is not declared by the solution."""

    def __init__(
        self,
        solution_config: str,
        available: list[str],
        code: str = "invalid_configuration",
    ) -> None:
        super().__init__(
            f"Invalid solution config: {solution_config}, "
            f"available: {', '.join(available) or '(none)'}",
            code=code,
        )
        self.solution_config = solution_config
        self.available = available


class OutputCollectionError(BuilderError):
    """Raised when artifact discovery hits an I/O or parse failure."""

    def __init__(self, message: str, code: str = "output_collection_error") -> None:
        super().__init__(message, code=code)


class CleanupError(BuilderError):
    """Raised when an output directory cannot be inspected or removed."""

    def __init__(self, message: str, path: str, code: str = "cleanup_error") -> None:
        super().__init__(message, code=code)
        self.path = path


class BuildPassError(BuilderError):
    """Raised when a build pass stops on a failing command.

    Attributes:
        warnings: Non-fatal warnings collected before the failure.
        cause_code: Code of the underlying command error.
    """

    def __init__(
        self,
        message: str,
        warnings: list[str] | None = None,
        cause_code: str | None = None,
        code: str = "build_failed",
    ) -> None:
        super().__init__(message, code=code)
        self.warnings = list(warnings or [])
        self.cause_code = cause_code


__all__ = [
    "BuildPassError",
    "BuilderError",
    "CleanupError",
    "InvalidConfigurationError",
    "InvalidSolutionError",
    "OutputCollectionError",
]
