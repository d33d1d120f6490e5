"""Runner for executing build tool commands.

This module handles:
- Resolving the executable for a command's toolchain
- Executing commands with subprocess
- Capturing stdout/stderr to log files when a log directory is configured,
  or to stderr otherwise
- Enforcing command timeouts
"""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, TYPE_CHECKING, Protocol

from xamarin_builder.errors import BuilderError
from xamarin_builder.types import Toolchain

if TYPE_CHECKING:
    from xamarin_builder.buildtool.command import BuildCommand
    from xamarin_builder.config import Settings

logger = logging.getLogger(__name__)

# Without a log file, tool output goes to the process stderr so stdout stays
# free for machine-readable output
CONSOLE_FD = 2


class CommandExecutionError(BuilderError):
    """Raised when a build command fails to run or exits non-zero."""

    def __init__(
        self,
        message: str,
        exit_code: int | None = None,
        code: str = "command_failed",
        log_path: Path | None = None,
    ) -> None:
        super().__init__(message, code=code)
        self.exit_code = exit_code
        self.log_path = log_path


class CommandRunner(Protocol):
    """Capability that runs a single build command."""

    def run(self, command: BuildCommand) -> None:
        """Run the command, raising CommandExecutionError on failure."""
        ...


class SubprocessRunner:
    """Run build commands as child processes.

    Args:
        settings: Settings providing tool paths, log directory and timeout.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings

    def tool_path(self, toolchain: Toolchain) -> str:
        """Return the executable configured for a toolchain."""
        if toolchain == Toolchain.MDTOOL:
            return self.settings.mdtool_path
        return self.settings.xbuild_path

    def log_path_for(self, command: BuildCommand, started_at: datetime) -> Path | None:
        """Return the log file a command writes to, if logging to files."""
        if self.settings.log_dir is None:
            return None
        name = (
            f"{started_at:%Y%m%dT%H%M%S}_{command.toolchain.value}_"
            f"{command.target}_{uuid.uuid4().hex[:8]}.log"
        )
        return self.settings.log_dir / name

    def run(self, command: BuildCommand) -> None:
        """Execute a build command.

        Raises:
            CommandExecutionError: If the command cannot be started, times out
                or exits with a non-zero code.
        """
        cmd = command.argv(self.tool_path(command.toolchain))
        cmd_str = shlex.join(cmd)
        timeout = self.settings.build_timeout

        started_at = datetime.now(timezone.utc)
        log_path = self.log_path_for(command, started_at)
        logger.info("Executing: %s", cmd_str)

        env: dict[str, str] | None = None
        if command.env:
            env = dict(os.environ)
            env.update(command.env)

        try:
            if log_path is not None:
                log_path.parent.mkdir(parents=True, exist_ok=True)
                with log_path.open("w") as log_file:
                    log_file.write(f"# Command: {cmd_str}\n")
                    log_file.write(f"# Started: {started_at.isoformat()}\n")
                    log_file.write("# " + "=" * 70 + "\n\n")
                    log_file.flush()
                    exit_code = self._execute(cmd, env, timeout, log_file)
            else:
                exit_code = self._execute(cmd, env, timeout, None)

        except subprocess.TimeoutExpired as e:
            error_message = f"Command timed out after {timeout} seconds: {cmd_str}"
            logger.error(error_message)
            if log_path is not None:
                with log_path.open("a") as log_file:
                    log_file.write(f"\n# TIMEOUT after {timeout} seconds\n")
            raise CommandExecutionError(
                error_message,
                exit_code=-1,
                code="command_timeout",
                log_path=log_path,
            ) from e

        except OSError as e:
            error_message = f"Failed to execute command: {e}"
            logger.error(error_message)
            raise CommandExecutionError(
                error_message,
                exit_code=None,
                code="execution_error",
                log_path=log_path,
            ) from e

        finished_at = datetime.now(timezone.utc)
        if log_path is not None:
            with log_path.open("a") as log_file:
                log_file.write(f"\n# Finished: {finished_at.isoformat()}\n")
                log_file.write(f"# Exit code: {exit_code}\n")
                duration = (finished_at - started_at).total_seconds()
                log_file.write(f"# Duration: {duration:.1f}s\n")

        if exit_code != 0:
            error_message = f"Command failed with exit code {exit_code}: {cmd_str}"
            if log_path is not None:
                logger.error("%s. See log: %s", error_message, log_path)
            else:
                logger.error(error_message)
            raise CommandExecutionError(
                error_message,
                exit_code=exit_code,
                log_path=log_path,
            )

    def _execute(
        self,
        cmd: list[str],
        env: dict[str, str] | None,
        timeout: int | None,
        log_file: IO[str] | None,
    ) -> int:
        if log_file is None:
            stdout: IO[str] | int = CONSOLE_FD
        else:
            stdout = log_file
        result = subprocess.run(
            cmd,
            stdout=stdout,
            stderr=subprocess.STDOUT,
            env=env,
            timeout=timeout,
            check=False,
        )
        return result.returncode


__all__ = ["CommandExecutionError", "CommandRunner", "SubprocessRunner"]
