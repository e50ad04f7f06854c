"""
Pixel geometry derived from a Configuration.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from .config import Configuration

LAYOUTS = ("canvas", "content")


@dataclass(frozen=True)
class Geometry:
    content_width: int
    content_height: int
    content_left_x: int
    content_top_y: int
    content_right_x: int
    content_bottom_y: int
    # Content box split evenly, inner margin ignored
    column_width: float
    row_height: float
    # Content box split after removing the inner margins between cells
    cell_width: float
    cell_height: float


def _check_grid(config: Configuration) -> None:
    if config.columns < 1 or config.rows < 1:
        raise ValueError("rows and columns must be positive integers.")
    if config.width < 1 or config.height < 1:
        raise ValueError("width and height must be positive integers.")


def calculate(config: Configuration) -> Geometry:
    _check_grid(config)
    m = config.outer_margin
    columns, rows, inner = config.columns, config.rows, config.inner_margin

    content_width = config.width - m.left - m.right
    content_height = config.height - m.top - m.bottom

    return Geometry(
        content_width=content_width,
        content_height=content_height,
        content_left_x=m.left,
        content_top_y=m.top,
        content_right_x=config.width - m.right,
        content_bottom_y=config.height - m.bottom,
        column_width=content_width / columns,
        row_height=content_height / rows,
        cell_width=(content_width - (columns - 1) * inner) / columns,
        cell_height=(content_height - (rows - 1) * inner) / rows,
    )


def iter_cells(
    config: Configuration,
    layout: str = "canvas",
) -> Iterator[tuple[int, int, tuple[int, int, int, int]]]:
    """
    Yield (row, column, (x0, y0, x1, y1)) for every cell, row-major.

    layout='canvas' splits the whole canvas into width/columns by
    height/rows cells and ignores both margins. layout='content' places
    cell_width by cell_height cells inside the content box with the inner
    margin between them. Edges are rounded to whole pixels; boxes may be
    empty or extend past the canvas when margins are extreme.
    """
    if layout not in LAYOUTS:
        raise ValueError(f"Unknown layout {layout!r}; expected one of {LAYOUTS}")
    geometry = calculate(config)

    if layout == "canvas":
        step_x = width = config.width / config.columns
        step_y = height = config.height / config.rows
        origin_x = origin_y = 0
    else:
        width, height = geometry.cell_width, geometry.cell_height
        step_x = width + config.inner_margin
        step_y = height + config.inner_margin
        origin_x, origin_y = geometry.content_left_x, geometry.content_top_y

    for r in range(config.rows):
        y = origin_y + r * step_y
        for c in range(config.columns):
            x = origin_x + c * step_x
            yield r, c, (round(x), round(y), round(x + width), round(y + height))
