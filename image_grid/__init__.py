"""Arrange images into a single grid image from a JSON or YAML layout."""

from .compositor import build_grid, composite, parse_color
from .config import (
    DEFAULT_CONFIGURATION,
    DEFAULT_STRING,
    Configuration,
    OuterMargin,
    Shadow,
    parse,
    to_dict,
    to_json_string,
    to_yaml_string,
    validate,
)
from .layout import Geometry, calculate, iter_cells

__all__ = [
    "DEFAULT_CONFIGURATION",
    "DEFAULT_STRING",
    "Configuration",
    "Geometry",
    "OuterMargin",
    "Shadow",
    "build_grid",
    "calculate",
    "composite",
    "iter_cells",
    "parse",
    "parse_color",
    "to_dict",
    "to_json_string",
    "to_yaml_string",
    "validate",
]
