"""Build command execution with at-most-once semantics.

One executor lives for a whole build pass. A command equal to one that
already ran earlier in the pass, for any project, is reported to the
observe hook and skipped.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from xamarin_builder.buildtool.command import BuildCommand, CommandKey
from xamarin_builder.buildtool.runner import CommandRunner
from xamarin_builder.solution.models import Project

logger = logging.getLogger(__name__)

PrepareHook = Callable[[Project, BuildCommand], None]
ObserveHook = Callable[[Project, BuildCommand, bool], None]


class CommandExecutor:
    """Run planned commands in order, each distinct command once.

    Args:
        runner: Capability that actually runs a command.
    """

    def __init__(self, runner: CommandRunner) -> None:
        self.runner = runner
        self.performed: list[CommandKey] = []

    def is_performed(self, key: CommandKey) -> bool:
        """Check whether a command with this identity already ran."""
        return key in self.performed

    def execute(
        self,
        commands: Iterable[BuildCommand],
        project: Project,
        observe: ObserveHook | None = None,
        prepare: PrepareHook | None = None,
    ) -> None:
        """Execute a project's planned commands.

        The command identity is taken before the prepare hook runs, so edits
        made by the hook do not change deduplication.

        Args:
            commands: Ordered commands planned for the project.
            project: Project the commands belong to.
            observe: Called for every command, before it would run.
            prepare: Called for every command to let the caller edit it.

        Raises:
            CommandExecutionError: On the first failing command. Remaining
                commands are not attempted.
        """
        for command in commands:
            key = command.key

            if prepare is not None:
                prepare(project, command)

            already_performed = self.is_performed(key)

            if observe is not None:
                observe(project, command, already_performed)

            if already_performed:
                logger.info(
                    "Skipping already performed command for %s: %s",
                    project.name,
                    command.printable(),
                )
                continue

            self.runner.run(command)
            self.performed.append(key)


__all__ = ["CommandExecutor", "ObserveHook", "PrepareHook"]
