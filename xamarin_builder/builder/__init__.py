"""Build orchestration module.

This module handles:
- Project filtering and configuration resolution
- Planning mdtool/xbuild commands per project type
- Running commands once per build pass
- Artifact discovery and output directory cleanup
"""

from xamarin_builder.builder.service import Builder

__all__ = ["Builder"]
