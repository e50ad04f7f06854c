"""
Draw an ordered list of images into the cells of a grid canvas.
"""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Iterable

from PIL import Image, ImageColor, ImageFilter, ImageOps

from .config import Configuration, parse
from .layout import Geometry, calculate, iter_cells

logger = logging.getLogger(__name__)

FITS = ("fill", "contain")

TRANSPARENT = (0, 0, 0, 0)

_FUNCTIONAL_COLOR = re.compile(r"^rgba?\((.*)\)$", re.IGNORECASE)


def _clamp8(x: float) -> int:
    if not math.isfinite(x):
        raise ValueError(f"non-finite channel value {x!r}")
    return max(0, min(255, int(round(x))))


def _channel(p: str) -> float:
    if p.endswith("%"):
        return float(p[:-1]) * 255.0 / 100.0
    return float(p)


def _alpha01(p: str) -> float:
    if p.endswith("%"):
        return float(p[:-1]) / 100.0
    return float(p)


def parse_color(
    s: str,
    default: tuple[int, int, int, int] = (0, 0, 0, 255),
) -> tuple[int, int, int, int]:
    """
    Parse color strings into RGBA.

    Accepts:
      - CSS functional: 'rgb(255,255,255)', 'rgba(0, 0, 0, 0.5)', 'rgb(100% 0% 0% / 50%)'
      - Named colors: 'white', 'red', ...
      - Hex: '#fff', '#fff8', '#ffffff', '#ffffffff'
      - CSV/tuple: '255,255,255', '(255,255,255)', '(255,255,255,128)'

    Returns RGBA tuple or 'default' on failure.
    """
    if not s:
        return default

    s = s.strip()

    # Strip surrounding quotes if present
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1].strip()

    # CSS functional notation: alpha is 0..1 (or a percentage), not 0..255
    m = _FUNCTIONAL_COLOR.match(s)
    if m:
        body = m.group(1).replace("/", " ").replace(",", " ")
        parts = body.split()
        if len(parts) not in (3, 4):
            return default
        try:
            r, g, b = (_clamp8(_channel(p)) for p in parts[:3])
            a = _clamp8(_alpha01(parts[3]) * 255.0) if len(parts) == 4 else 255
        except ValueError:
            return default
        return (r, g, b, a)

    # Pillow handles named colors and hex
    try:
        r, g, b, a = ImageColor.getcolor(s, "RGBA")
        return (r, g, b, a)
    except ValueError:
        pass

    # Comma-separated numeric formats: 255,255,255[,a] or with brackets/parens
    try:
        t = s
        if t and t[0] in "([{":
            t = t[1:]
        if t and t[-1] in ")]}":
            t = t[:-1]
        parts = [p.strip() for p in t.split(",") if p.strip() != ""]
        if 3 <= len(parts) <= 4:
            vals: list[int] = []
            for i, p in enumerate(parts):
                if i == 3 and (("." in p) or ("e" in p.lower())):
                    # alpha as float 0..1
                    vals.append(_clamp8(float(p) * 255.0))
                else:
                    vals.append(_clamp8(float(p)))
            if len(vals) == 3:
                vals.append(255)
            r, g, b, a = vals[:4]
            return (r, g, b, a)
    except ValueError:
        pass

    logger.debug("Unrecognised color %r, using %r", s, default)
    return default


def fit_image_into_cell(
    img: Image.Image,
    cell_rect: tuple[int, int, int, int],
    fit: str = "fill",
) -> tuple[Image.Image, tuple[int, int]]:
    """
    Resize img for cell_rect.

    'fill' stretches it to exactly the cell size; 'contain' preserves the
    aspect ratio and centers it. Returns the (resized_img, top_left_position)
    for pasting. The source image is not modified.
    """
    x0, y0, x1, y1 = cell_rect
    cell_w = x1 - x0
    cell_h = y1 - y0

    rgba = img.convert("RGBA")
    if fit == "fill":
        return rgba.resize((cell_w, cell_h), Image.Resampling.LANCZOS), (x0, y0)

    fitted = ImageOps.contain(rgba, (cell_w, cell_h), method=Image.Resampling.LANCZOS)
    fw, fh = fitted.size
    px = x0 + (cell_w - fw) // 2
    py = y0 + (cell_h - fh) // 2
    return fitted, (px, py)


def make_shadow(
    img: Image.Image,
    color: tuple[int, int, int, int],
    blur: int,
) -> tuple[Image.Image, int]:
    """
    Build a drop shadow shaped like img's alpha channel.

    Returns the shadow and the padding added on each side for the blur, so
    the caller pastes it at (x + offset_x - pad, y + offset_y - pad).
    """
    # Blur beyond the image's own size adds padding but no visible difference
    blur = min(max(0, blur), max(img.size))
    pad = blur * 2
    r, g, b, a = color

    mask = img.getchannel("A").point(lambda v: v * a // 255)
    alpha = Image.new("L", (img.width + 2 * pad, img.height + 2 * pad), 0)
    alpha.paste(mask, (pad, pad))

    shadow = Image.new("RGBA", alpha.size, (r, g, b, 0))
    shadow.putalpha(alpha)
    if blur > 0:
        # Canvas-style blur radius is roughly twice the gaussian sigma
        shadow = shadow.filter(ImageFilter.GaussianBlur(blur / 2))
    return shadow, pad


def alpha_paste(canvas: Image.Image, img: Image.Image, x: int, y: int) -> None:
    """Alpha-composite img onto canvas at (x, y), clipping to the canvas."""
    sx0, sy0 = max(0, -x), max(0, -y)
    sx1 = min(img.width, canvas.width - x)
    sy1 = min(img.height, canvas.height - y)
    if sx1 <= sx0 or sy1 <= sy0:
        return
    canvas.alpha_composite(
        img,
        dest=(max(0, x), max(0, y)),
        source=(sx0, sy0, sx1, sy1),
    )


def composite(
    images: Iterable[Image.Image],
    config: Configuration,
    layout: str = "canvas",
    fit: str = "fill",
) -> tuple[Geometry, Image.Image]:
    """
    Render images row-major into a new width x height RGBA canvas.

    Drawing stops as soon as the images run out; remaining cells keep the
    background. Extra images are ignored. A ValueError is raised for a
    grid with fewer than one row or column, since validated configurations
    never contain one.
    """
    if fit not in FITS:
        raise ValueError(f"Unknown fit {fit!r}; expected one of {FITS}")
    geometry = calculate(config)
    cells = iter_cells(config, layout)

    bg_color = parse_color(config.background_color_code, default=TRANSPARENT)
    canvas = Image.new("RGBA", (config.width, config.height), color=bg_color)

    shadow = config.shadow
    shadow_color = parse_color(shadow.color, default=TRANSPARENT)
    draw_shadow = shadow_color[3] > 0

    remaining = iter(images)
    for r, c, cell_rect in cells:
        img = next(remaining, None)
        if img is None:
            break

        x0, y0, x1, y1 = cell_rect
        if x1 <= x0 or y1 <= y0:
            logger.debug("Cell (%d, %d) has no area, image skipped", r, c)
            continue

        fitted, (px, py) = fit_image_into_cell(img, cell_rect, fit)
        if draw_shadow:
            shade, pad = make_shadow(fitted, shadow_color, shadow.blur)
            alpha_paste(canvas, shade, px + shadow.offset_x - pad, py + shadow.offset_y - pad)
        alpha_paste(canvas, fitted, px, py)

    return geometry, canvas


def build_grid(
    text: str,
    images: Iterable[Image.Image],
    layout: str = "canvas",
    fit: str = "fill",
) -> tuple[Configuration, Geometry, Image.Image]:
    """Parse configuration text and composite images with it."""
    config = parse(text)
    geometry, canvas = composite(images, config, layout=layout, fit=fit)
    return config, geometry, canvas
