"""
Grid configuration: parsing, validation and serialization.

Configuration text is untrusted and hand-edited. It is decoded as JSON when it
starts with '{' and as YAML otherwise, then every field is resolved on its own
to a concrete, in-range value. Nothing here raises for bad input: unusable text
yields DEFAULT_CONFIGURATION, unusable fields yield that field's default.
"""

from __future__ import annotations

import json
import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any, Union

import yaml

logger = logging.getLogger(__name__)

# Loose tree produced by the decoders, after unsupported values are dropped.
Tree = Union[bool, int, float, str, list["Tree"], dict[str, "Tree"], None]

NUMBER_MIN = -10000
NUMBER_MAX = 10000


@dataclass(frozen=True)
class OuterMargin:
    top: int = 0
    bottom: int = 0
    left: int = 0
    right: int = 0


@dataclass(frozen=True)
class Shadow:
    color: str = "rgba(0, 0, 0, 0)"
    blur: int = 0
    offset_x: int = 0
    offset_y: int = 0


@dataclass(frozen=True)
class Configuration:
    """Validated grid layout. Every field is always present and in range."""

    file_name: str = "image-grid.png"
    width: int = 1080
    height: int = 1080
    columns: int = 2
    rows: int = 2
    outer_margin: OuterMargin = field(default_factory=OuterMargin)
    inner_margin: int = 0
    background_color_code: str = "#FFFFFF00"
    shadow: Shadow = field(default_factory=Shadow)


DEFAULT_CONFIGURATION = Configuration()


# --- Loose tree ---


def to_tree(value: Any, keep_booleans: bool = False) -> Tree:
    """
    Reduce a decoded value to the Tree union.

    Keeps finite numbers, strings, lists and mappings. Nulls, non-finite
    floats and anything else a decoder may produce (dates, bytes, sets)
    become None, and None entries are dropped from mappings. Booleans are
    dropped too unless keep_booleans is set.
    """
    if isinstance(value, bool):
        return value if keep_booleans else None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        return [to_tree(v, keep_booleans) for v in value]
    if isinstance(value, dict):
        tree = {}
        for k, v in value.items():
            item = to_tree(v, keep_booleans)
            if item is not None:
                tree[str(k)] = item
        return tree
    return None


# --- Field validators ---

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")
_BARE_HEX_COLOR = re.compile(
    r"[0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8}"
)


def _to_int(value: Any) -> int | None:
    # Leading-integer semantics: "12px" -> 12, 3.9 -> 3, "abc" -> None
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if math.isfinite(value) else None
    if isinstance(value, str):
        m = _LEADING_INT.match(value)
        if not m:
            return None
        try:
            return int(m.group(1))
        except ValueError:
            # Beyond the interpreter's digit limit, so far out of range anyway
            return None
    return None


def _to_text(value: Any) -> str | None:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, str):
        return value
    return None


def validate_number(
    value: Any,
    default: int,
    min_value: int = NUMBER_MIN,
    max_value: int = NUMBER_MAX,
) -> int:
    n = _to_int(value)
    if n is None or not (min_value <= n <= max_value):
        if value is not None:
            logger.debug("Number %r rejected, using %r", value, default)
        return default
    return n


def validate_string(value: Any, default: str, max_length: int = 100) -> str:
    s = _to_text(value)
    if s is None or not (1 <= len(s) <= max_length):
        if value is not None:
            logger.debug("String %r rejected, using %r", value, default)
        return default
    return s


def validate_color_code(value: Any, default: str) -> str:
    """
    Prefix bare hex codes ('ff0000', 'fff8') with '#'.

    Any other text is passed through untouched so named colors and
    'rgba(...)' forms survive; only values with no text form use 'default'.
    """
    s = _to_text(value)
    if s is None:
        return default
    if _BARE_HEX_COLOR.fullmatch(s):
        return f"#{s}"
    return s


def validate_outer_margin(value: Any) -> OuterMargin:
    default = DEFAULT_CONFIGURATION.outer_margin

    # A bare number applies to all four sides
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        margin = validate_number(value, default.top)
        return OuterMargin(top=margin, bottom=margin, left=margin, right=margin)

    if not isinstance(value, dict):
        return default

    return OuterMargin(
        top=validate_number(value.get("top"), default.top),
        bottom=validate_number(value.get("bottom"), default.bottom),
        left=validate_number(value.get("left"), default.left),
        right=validate_number(value.get("right"), default.right),
    )


def validate_shadow(value: Any) -> Shadow:
    default = DEFAULT_CONFIGURATION.shadow
    if not isinstance(value, dict):
        return default

    return Shadow(
        color=validate_string(value.get("color"), default.color),
        blur=validate_number(value.get("blur"), default.blur),
        offset_x=validate_number(value.get("offsetX"), default.offset_x),
        offset_y=validate_number(value.get("offsetY"), default.offset_y),
    )


def validate(tree: Tree) -> Configuration:
    """Resolve every field of 'tree' independently against its default."""
    d = DEFAULT_CONFIGURATION
    if not isinstance(tree, dict):
        return d

    return Configuration(
        file_name=validate_string(tree.get("fileName"), d.file_name, 255),
        width=validate_number(tree.get("width"), d.width, 1),
        height=validate_number(tree.get("height"), d.height, 1),
        columns=validate_number(tree.get("columns"), d.columns, 1),
        rows=validate_number(tree.get("rows"), d.rows, 1),
        outer_margin=validate_outer_margin(tree.get("outerMargin")),
        inner_margin=validate_number(tree.get("innerMargin"), d.inner_margin),
        background_color_code=validate_color_code(
            tree.get("backgroundColorCode"),
            d.background_color_code,
        ),
        shadow=validate_shadow(tree.get("shadow")),
    )


# --- Parsing ---


def _load_json(text: str) -> Tree:
    return to_tree(json.loads(text))


def _load_yaml(text: str) -> Tree:
    # Only JSON goes through the reviver; YAML booleans stay as values
    return to_tree(yaml.safe_load(text), keep_booleans=True)


def parse(text: Any) -> Configuration:
    """
    Parse configuration text into a Configuration.

    Text starting with '{' is read as JSON, anything else as YAML. A decode
    or validation failure returns DEFAULT_CONFIGURATION as a whole; there is
    no merge of partially decoded input.
    """
    if not isinstance(text, str):
        return DEFAULT_CONFIGURATION
    trimmed = text.strip()

    try:
        if trimmed[:1] == "{":
            tree = _load_json(trimmed)
        else:
            tree = _load_yaml(trimmed)
        return validate(tree)
    except Exception as exc:
        logger.debug("Unusable configuration text (%s), using defaults", exc)
        return DEFAULT_CONFIGURATION


# --- Serialization ---


def to_dict(config: Configuration) -> dict[str, Any]:
    """Plain mapping with the same keys the parser reads."""
    m = config.outer_margin
    s = config.shadow
    return {
        "fileName": config.file_name,
        "width": config.width,
        "height": config.height,
        "columns": config.columns,
        "rows": config.rows,
        "outerMargin": {
            "top": m.top,
            "bottom": m.bottom,
            "left": m.left,
            "right": m.right,
        },
        "innerMargin": config.inner_margin,
        "backgroundColorCode": config.background_color_code,
        "shadow": {
            "color": s.color,
            "blur": s.blur,
            "offsetX": s.offset_x,
            "offsetY": s.offset_y,
        },
    }


def to_json_string(config: Configuration) -> str:
    return json.dumps(to_dict(config), indent=2)


def to_yaml_string(config: Configuration) -> str:
    return yaml.safe_dump(
        to_dict(config),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )


DEFAULT_STRING = to_yaml_string(DEFAULT_CONFIGURATION)
