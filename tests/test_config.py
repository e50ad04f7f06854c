import dataclasses
import json

import pytest
import yaml

from image_grid.config import (
    DEFAULT_CONFIGURATION,
    DEFAULT_STRING,
    Configuration,
    OuterMargin,
    Shadow,
    parse,
    to_dict,
    to_json_string,
    to_tree,
    to_yaml_string,
    validate,
    validate_color_code,
    validate_number,
    validate_outer_margin,
    validate_shadow,
    validate_string,
)


def test_defaults():
    d = DEFAULT_CONFIGURATION
    assert d.file_name == "image-grid.png"
    assert (d.width, d.height) == (1080, 1080)
    assert (d.columns, d.rows) == (2, 2)
    assert d.outer_margin == OuterMargin(0, 0, 0, 0)
    assert d.inner_margin == 0
    assert d.background_color_code == "#FFFFFF00"
    assert d.shadow == Shadow("rgba(0, 0, 0, 0)", 0, 0, 0)


def test_configuration_is_frozen():
    with pytest.raises(dataclasses.FrozenInstanceError):
        DEFAULT_CONFIGURATION.width = 10


@pytest.mark.parametrize(
    "value, expected",
    [
        (42, 42),
        ("42", 42),
        ("12px", 12),
        (" -4", -4),
        (3.9, 3),
        (-10000, -10000),
        (10000, 10000),
        (10001, 7),
        (-10001, 7),
        (None, 7),
        (True, 7),
        ("abc", 7),
        ("", 7),
        (float("nan"), 7),
        (float("inf"), 7),
        ([3], 7),
        ({"a": 1}, 7),
    ],
)
def test_validate_number(value, expected):
    assert validate_number(value, 7) == expected


def test_validate_number_custom_min():
    assert validate_number(0, 2, 1) == 2
    assert validate_number(1, 2, 1) == 1


def test_validate_string():
    assert validate_string("abc", "d") == "abc"
    assert validate_string("", "d") == "d"
    assert validate_string(None, "d") == "d"
    assert validate_string("x" * 100, "d") == "x" * 100
    assert validate_string("x" * 101, "d") == "d"
    assert validate_string("x" * 255, "d", 255) == "x" * 255
    assert validate_string(5, "d") == "5"
    assert validate_string(2.0, "d") == "2"
    assert validate_string(["a"], "d") == "d"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("ff0000", "#ff0000"),
        ("FFF8", "#FFF8"),
        ("abc", "#abc"),
        ("12345678", "#12345678"),
        (123, "#123"),
        ("12345", "12345"),
        ("#ff0000", "#ff0000"),
        ("rgba(1,2,3,0.5)", "rgba(1,2,3,0.5)"),
        ("red", "red"),
        ("ggg", "ggg"),
        (None, "dflt"),
        ({"r": 1}, "dflt"),
    ],
)
def test_validate_color_code(value, expected):
    assert validate_color_code(value, "dflt") == expected


def test_outer_margin_number_applies_to_all_sides():
    assert validate_outer_margin(5) == OuterMargin(5, 5, 5, 5)
    assert validate_outer_margin(-3.5) == OuterMargin(-3, -3, -3, -3)


def test_outer_margin_out_of_range_number():
    assert validate_outer_margin(20000) == OuterMargin(0, 0, 0, 0)


def test_outer_margin_mapping_per_side():
    m = validate_outer_margin({"top": 1, "bottom": "2", "left": "x", "right": 99999})
    assert m == OuterMargin(top=1, bottom=2, left=0, right=0)


def test_outer_margin_other_values():
    assert validate_outer_margin(None) == DEFAULT_CONFIGURATION.outer_margin
    assert validate_outer_margin("5") == DEFAULT_CONFIGURATION.outer_margin
    assert validate_outer_margin([1, 2]) == DEFAULT_CONFIGURATION.outer_margin


def test_validate_shadow():
    s = validate_shadow({"color": "red", "blur": "4", "offsetX": -3, "offsetY": "?"})
    assert s == Shadow(color="red", blur=4, offset_x=-3, offset_y=0)
    assert validate_shadow(None) == DEFAULT_CONFIGURATION.shadow
    assert validate_shadow({"color": ""}).color == "rgba(0, 0, 0, 0)"


def test_validate_non_mapping():
    assert validate(None) == DEFAULT_CONFIGURATION
    assert validate([1, 2]) == DEFAULT_CONFIGURATION
    assert validate("text") == DEFAULT_CONFIGURATION


def test_validate_fields_are_independent():
    c = validate({"width": 0, "height": 500, "columns": "x", "rows": 4})
    assert c.width == 1080
    assert c.height == 500
    assert c.columns == 2
    assert c.rows == 4


def test_validate_file_name_length():
    assert validate({"fileName": "a" * 255}).file_name == "a" * 255
    assert validate({"fileName": "a" * 256}).file_name == "image-grid.png"


def test_to_tree_drops_unsupported_values():
    tree = to_tree({"a": True, "b": None, "c": float("nan"), "d": 1.5, "e": [1, False], 3: "x"})
    assert tree == {"d": 1.5, "e": [1, None], "3": "x"}


@pytest.mark.parametrize("text", [None, 42, b"{}", ["width: 5"]])
def test_parse_non_text(text):
    assert parse(text) == DEFAULT_CONFIGURATION


@pytest.mark.parametrize(
    "text",
    [
        "",
        "   ",
        "{not json",
        '{"width": 500, "rows": }',
        "width: [1, 2",
        "just a sentence",
        "- 1\n- 2\n",
        "{}",
    ],
)
def test_parse_unusable_text_gives_defaults(text):
    assert parse(text) == DEFAULT_CONFIGURATION


def test_parse_json():
    text = """
    {
      "fileName": "out.jpg",
      "width": 900,
      "height": "600",
      "columns": 3,
      "rows": 3,
      "outerMargin": {"top": 10, "left": 20},
      "innerMargin": 4,
      "backgroundColorCode": "000",
      "shadow": {"color": "rgba(0, 0, 0, 0.5)", "blur": 8, "offsetX": 2, "offsetY": 3},
      "unknown": "ignored"
    }
    """
    c = parse(text)
    assert c == Configuration(
        file_name="out.jpg",
        width=900,
        height=600,
        columns=3,
        rows=3,
        outer_margin=OuterMargin(top=10, bottom=0, left=20, right=0),
        inner_margin=4,
        background_color_code="#000",
        shadow=Shadow("rgba(0, 0, 0, 0.5)", 8, 2, 3),
    )


def test_parse_json_rejects_booleans_nulls_and_non_finite():
    c = parse('{"fileName": null, "width": NaN, "innerMargin": true, "rows": 3}')
    assert c.file_name == "image-grid.png"
    assert c.width == 1080
    assert c.inner_margin == 0
    assert c.rows == 3


def test_parse_yaml():
    text = """
fileName: grid.png
width: 600
height: 400
columns: 3
rows: 1
outerMargin: 5
backgroundColorCode: ffffff
shadow:
  color: black
  blur: 2
"""
    c = parse(text)
    assert c.file_name == "grid.png"
    assert (c.width, c.height, c.columns, c.rows) == (600, 400, 3, 1)
    assert c.outer_margin == OuterMargin(5, 5, 5, 5)
    assert c.background_color_code == "#ffffff"
    assert c.shadow == Shadow("black", 2, 0, 0)


def test_parse_yaml_numeric_color():
    assert parse("backgroundColorCode: 123456").background_color_code == "#123456"


def test_default_string_describes_defaults():
    assert parse(DEFAULT_STRING) == DEFAULT_CONFIGURATION
    assert yaml.safe_load(DEFAULT_STRING)["backgroundColorCode"] == "#FFFFFF00"


def test_to_dict_uses_config_keys():
    d = to_dict(DEFAULT_CONFIGURATION)
    assert list(d) == [
        "fileName",
        "width",
        "height",
        "columns",
        "rows",
        "outerMargin",
        "innerMargin",
        "backgroundColorCode",
        "shadow",
    ]
    assert d["shadow"] == {"color": "rgba(0, 0, 0, 0)", "blur": 0, "offsetX": 0, "offsetY": 0}


def test_json_string_is_indented():
    text = to_json_string(DEFAULT_CONFIGURATION)
    assert text.startswith('{\n  "fileName"')
    assert json.loads(text) == to_dict(DEFAULT_CONFIGURATION)


CUSTOM = Configuration(
    file_name="123",
    width=1,
    height=10000,
    columns=7,
    rows=1,
    outer_margin=OuterMargin(-10000, 10000, 3, -4),
    inner_margin=-12,
    background_color_code="#abc",
    shadow=Shadow("true", 9, -1, 1),
)


@pytest.mark.parametrize("config", [DEFAULT_CONFIGURATION, CUSTOM])
def test_serialization_round_trip(config):
    assert parse(to_json_string(config)) == config
    assert parse(to_yaml_string(config)) == config


@pytest.mark.parametrize(
    "tree",
    [
        {},
        {"width": "77px", "outerMargin": 3, "backgroundColorCode": "fff"},
        {"columns": -1, "shadow": {"blur": 1.7, "color": 5}, "fileName": 12},
    ],
)
def test_validate_is_idempotent(tree):
    once = validate(tree)
    assert validate(to_dict(once)) == once


def test_validate_number_beyond_digit_limit():
    assert validate_number("9" * 5000, 7) == 7
    assert validate_number("-" + "9" * 5000, 7) == 7


def test_oversized_number_does_not_reset_siblings():
    c = parse('{"width": "' + "9" * 5000 + '", "rows": 3}')
    assert c.width == 1080
    assert c.rows == 3


def test_yaml_booleans_are_values():
    c = parse("fileName: true\nwidth: true\nshadow:\n  color: false\n")
    assert c.file_name == "true"
    assert c.width == 1080
    assert c.shadow.color == "false"


def test_json_booleans_are_dropped():
    assert parse('{"fileName": true}').file_name == "image-grid.png"
