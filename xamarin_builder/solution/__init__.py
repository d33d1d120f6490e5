"""Solution model.

This module handles:
- Solution, project and project configuration models
- Solution configuration keys and validation
- Loading solution descriptions from YAML/JSON
"""

from xamarin_builder.solution.models import Project, ProjectConfig, Solution, to_config

__all__ = ["Project", "ProjectConfig", "Solution", "to_config"]
