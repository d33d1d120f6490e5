"""Solution description loading.

Solution descriptions are YAML or JSON documents listing the solution file,
its declared configurations, and each project with its configuration
mapping. Paths inside the description are relative to the file itself.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from xamarin_builder.solution.models import Solution


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed YAML content as a dictionary.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def parse_solution_data(data: dict[str, Any], base_dir: Path | None = None) -> Solution:
    """Parse and validate solution data.

    Args:
        data: Dictionary containing the solution description.
        base_dir: Directory relative paths are resolved against.

    Returns:
        Validated Solution instance.

    Raises:
        pydantic.ValidationError: If data does not match the schema.
    """
    context = {"base_dir": base_dir} if base_dir is not None else None
    return Solution.model_validate(data, context=context)


def load_solution(path: Path) -> Solution:
    """Load and validate a solution description (YAML or JSON).

    File format is determined by extension (.yaml, .yml for YAML,
    .json for JSON).

    Raises:
        ValueError: If file extension is not supported.
        FileNotFoundError: If the file does not exist.
        pydantic.ValidationError: If data does not match the schema.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = load_yaml(path)
    elif suffix == ".json":
        data = load_json(path)
    else:
        raise ValueError(
            f"Unsupported file extension '{suffix}'. Use .yaml, .yml, or .json"
        )
    return parse_solution_data(data, base_dir=path.resolve().parent)


def solution_to_dict(solution: Solution) -> dict[str, Any]:
    """Convert a solution to a JSON-serializable dict."""
    return solution.model_dump(mode="json")


__all__ = [
    "load_json",
    "load_solution",
    "load_yaml",
    "parse_solution_data",
    "solution_to_dict",
]
