"""
Render a layer configuration to a PNG file.

Usage:
    python -m textstag preset.json out.png --text "Hello" --scale 2
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
import sys
from typing import Optional, Sequence

from .config import settings
from .exceptions import TextStagError
from .renderer import RenderRequest, render_image
from .serialize import import_config

logger = logging.getLogger(__name__)

MIN_FONT_SIZE = 8.0
MAX_FONT_SIZE = 500.0
MAX_PADDING = 300.0


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="textstag", description="Render styled text to a PNG image")
    parser.add_argument("config", type=Path, help="Layer configuration (JSON)")
    parser.add_argument("output", type=Path, help="PNG file to write")
    parser.add_argument("--text", "-t", default="Text", help="Text to render, \\n for line breaks")
    parser.add_argument(
        "--font-size",
        type=float,
        default=None,
        help=f"Font size in pixels (default: {settings.DEFAULT_FONT_SIZE:g}, env: TEXTSTAG_DEFAULT_FONT_SIZE)",
    )
    parser.add_argument(
        "--scale", "-s",
        type=float,
        default=1.0,
        help=f"Export scale, 1 to {settings.MAX_EXPORT_SCALE:g} (default: 1)",
    )
    parser.add_argument("--scale-x", type=float, default=1.0, help="Horizontal text scale")
    parser.add_argument("--scale-y", type=float, default=1.0, help="Vertical text scale")
    parser.add_argument("--align", choices=("left", "center", "right"), default="center")
    parser.add_argument(
        "--padding",
        type=float,
        default=None,
        help=f"Padding in pixels (default: {settings.DEFAULT_PADDING:g}, env: TEXTSTAG_DEFAULT_PADDING)",
    )
    parser.add_argument("--arc", type=float, default=0.0, help="Arc bend in percent (0-100)")
    parser.add_argument("--width", type=float, default=None, help="Fixed canvas width (unscaled pixels)")
    parser.add_argument("--height", type=float, default=None, help="Fixed canvas height (unscaled pixels)")
    parser.add_argument("--anchor", choices=("topleft", "center"), default="topleft")
    parser.add_argument("--offset-x", type=float, default=0.0)
    parser.add_argument("--offset-y", type=float, default=0.0)
    parser.add_argument(
        "--background",
        nargs="?",
        const=settings.BACKGROUND_COLOR,
        default=None,
        metavar="COLOR",
        help=f"Fill the background (default color: {settings.BACKGROUND_COLOR})",
    )
    parser.add_argument("--font", type=Path, default=None, help="Font file, overrides TEXTSTAG_FONT_PATH")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log render details")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command line tool. Returns the process exit code."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # CLI args > env vars > defaults (via settings)
    font_size = args.font_size if args.font_size is not None else settings.DEFAULT_FONT_SIZE
    padding = args.padding if args.padding is not None else settings.DEFAULT_PADDING

    style = settings.style()
    if args.font is not None:
        style = style.model_copy(update={"font_path": args.font})

    try:
        config = import_config(args.config.read_text(encoding="utf-8"))
    except OSError as e:
        logger.error(f"Cannot read {args.config}: {e}")
        return 1
    except TextStagError as e:
        logger.error(str(e))
        return 1

    request = RenderRequest(
        text=args.text.replace("\\n", "\n"),
        font_size=_clamp(font_size, MIN_FONT_SIZE, MAX_FONT_SIZE),
        scale_x=args.scale_x,
        scale_y=args.scale_y,
        alignment=args.align,
        padding=_clamp(padding, 0.0, MAX_PADDING),
        arc_pct=args.arc,
        scale=_clamp(args.scale, 1.0, settings.MAX_EXPORT_SCALE),
        target_width=args.width,
        target_height=args.height,
        anchor=args.anchor,
        offset_x=args.offset_x,
        offset_y=args.offset_y,
        show_background=args.background is not None,
        background_color=args.background or settings.BACKGROUND_COLOR,
    )

    try:
        image = render_image(request, config.layers, style)
    except TextStagError as e:
        logger.error(f"Render failed: {e}")
        return 1

    image.save(args.output, format="PNG")
    logger.info(f"Wrote {args.output} ({image.width}x{image.height})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
