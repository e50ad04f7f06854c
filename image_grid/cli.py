"""
Command-line front end: collect photos from a folder, build the grid, save it.
"""

from __future__ import annotations

import argparse
import logging
import os
import random
import sys

from PIL import Image, UnidentifiedImageError

from .compositor import FITS, build_grid
from .config import DEFAULT_CONFIGURATION, DEFAULT_STRING, to_json_string
from .layout import LAYOUTS

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".bmp", ".gif", ".tiff", ".tif", ".webp")


def find_image_files(photos_dir: str) -> list[str]:
    """Relative paths of image files under photos_dir, sorted."""
    present_files = []
    for root, _, files in os.walk(photos_dir):
        for file in files:
            if file.lower().endswith(IMAGE_EXTENSIONS):
                rel_path = os.path.relpath(os.path.join(root, file), photos_dir)
                present_files.append(rel_path)
    return sorted(present_files)


def collect_images(
    photos_dir: str,
    shuffle: bool = False,
    seed: int | None = None,
) -> list[Image.Image]:
    if not os.path.isdir(photos_dir):
        raise FileNotFoundError(f"photos folder not found at {photos_dir}")

    paths = find_image_files(photos_dir)
    if shuffle:
        random.Random(seed).shuffle(paths)

    images = []
    for rel_path in paths:
        fpath = os.path.join(photos_dir, rel_path)
        try:
            with Image.open(fpath) as im:
                images.append(im.convert("RGBA"))
        except (OSError, UnidentifiedImageError) as exc:
            # Unreadable file, skip it
            logger.warning("Skipping %s: %s", fpath, exc)
    return images


def save_image(
    image: Image.Image,
    out_path: str,
    dpi: int = 300,
    jpeg_quality: int = 95,
    png_compress_level: int = 6,
) -> None:
    ext = os.path.splitext(out_path)[1].lower()

    save_kwargs = {}
    dpi = max(72, min(1200, dpi))
    save_kwargs["dpi"] = (dpi, dpi)

    if ext in [".jpg", ".jpeg"]:
        out_img = image.convert("RGB")
        save_kwargs.update(
            {
                "quality": max(70, min(100, jpeg_quality)),
                "optimize": True,
                "progressive": True,
            },
        )
    else:
        out_img = image
        # PNG compression (does not affect resolution)
        save_kwargs["compress_level"] = max(0, min(9, png_compress_level))

    # Names without a known extension are written as PNG
    fmt = None if ext in Image.registered_extensions() else "PNG"
    out_img.save(out_path, format=fmt, **save_kwargs)


def build_collage(
    config_path: str | None,
    photos_dir: str,
    output_dir: str,
    layout: str = "canvas",
    fit: str = "fill",
    shuffle: bool = False,
    seed: int | None = None,
    dpi: int = 300,
    jpeg_quality: int = 95,
    png_compress_level: int = 6,
) -> str:
    """Build the grid image and return the path it was saved to."""
    text = DEFAULT_STRING
    if config_path is not None:
        # Undecodable bytes become U+FFFD and degrade like any other bad text
        with open(config_path, encoding="utf-8", errors="replace") as f:
            text = f.read()

    images = collect_images(photos_dir, shuffle=shuffle, seed=seed)
    config, _, canvas = build_grid(text, images, layout=layout, fit=fit)

    # The file name is user text; keep only its last path component
    file_name = os.path.basename(config.file_name)
    if file_name in ("", ".", ".."):
        file_name = DEFAULT_CONFIGURATION.file_name
    os.makedirs(output_dir, exist_ok=True)
    out_path = os.path.join(output_dir, file_name)
    save_image(
        canvas,
        out_path,
        dpi=dpi,
        jpeg_quality=jpeg_quality,
        png_compress_level=png_compress_level,
    )
    print(
        f"Saved image grid to: {out_path}  "
        f"({canvas.width}x{canvas.height}px, {len(images)} images, "
        f"{config.rows}x{config.columns} grid)",
    )
    return out_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="image-grid",
        description="Arrange the images in a folder into a single grid image.",
    )
    parser.add_argument(
        "config",
        nargs="?",
        help="JSON or YAML layout file (defaults are used when omitted)",
    )
    parser.add_argument("--photos", default="photos", help="folder of input images")
    parser.add_argument("--output-dir", default=".", help="where the grid is saved")
    parser.add_argument("--layout", choices=LAYOUTS, default="canvas")
    parser.add_argument("--fit", choices=FITS, default="fill")
    parser.add_argument("--shuffle", action="store_true", help="randomise image order")
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--dpi", type=int, default=300)
    parser.add_argument("--jpeg-quality", type=int, default=95)
    parser.add_argument("--png-compress-level", type=int, default=6)
    parser.add_argument(
        "--print-default",
        action="store_true",
        help="print the default configuration and exit",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="with --print-default, print JSON instead of YAML",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.print_default:
        if args.json:
            print(to_json_string(DEFAULT_CONFIGURATION))
        else:
            print(DEFAULT_STRING, end="")
        return 0

    if args.config is not None and not os.path.isfile(args.config):
        print(f"Config file not found: {args.config}", file=sys.stderr)
        return 1

    try:
        build_collage(
            args.config,
            args.photos,
            args.output_dir,
            layout=args.layout,
            fit=args.fit,
            shuffle=args.shuffle,
            seed=args.seed,
            dpi=args.dpi,
            jpeg_quality=args.jpeg_quality,
            png_compress_level=args.png_compress_level,
        )
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
