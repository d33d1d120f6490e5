"""Build tool commands.

This module handles:
- The BuildCommand value type and its identity for deduplication
- Composing mdtool and xbuild command lines
- Running commands as child processes
"""

from xamarin_builder.buildtool.command import BuildCommand, CommandKey
from xamarin_builder.buildtool.runner import (
    CommandExecutionError,
    CommandRunner,
    SubprocessRunner,
)

__all__ = [
    "BuildCommand",
    "CommandExecutionError",
    "CommandKey",
    "CommandRunner",
    "SubprocessRunner",
]
