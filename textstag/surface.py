"""
Raster surface the compositor draws on.

A Surface holds premultiplied RGBA pixels as float32 (0.0-1.0), shape (H, W, 4).
Glyphs are rasterized with Pillow in the unscaled text space and resampled by
(scale_x, scale_y), so blur radii and stroke widths scale exactly like glyph
geometry.

Compositing operators:
- source-over: standard alpha compositing
- multiply: W3C separable multiply blend, then source-over
- erase: destination-out with an alpha mask (exact subtraction, no blending)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING, Optional, Sequence

import numpy as np
from PIL import Image, ImageDraw, ImageFilter

if TYPE_CHECKING:
    from .text_layout import TextPlacement

SOURCE_OVER = 'source-over'
MULTIPLY = 'multiply'


class Surface:
    """
    A resizable RGBA raster.

    Example:
        >>> surface = Surface(200, 100)
        >>> surface.fill_rect((255, 0, 0))
        >>> surface.get_pixels()[0, 0]
        array([255,   0,   0, 255], dtype=uint8)
    """

    def __init__(self, width: int = 1, height: int = 1):
        self.pixels = np.zeros((1, 1, 4), dtype=np.float32)
        self.resize(width, height)

    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def resize(self, width: float, height: float) -> None:
        """Resize to floor(width) x floor(height), at least 1x1. Clears the surface."""
        w = max(1, int(math.floor(width)))
        h = max(1, int(math.floor(height)))
        self.pixels = np.zeros((h, w, 4), dtype=np.float32)

    def create_scratch(self) -> Optional['Surface']:
        """A new transparent surface of the same size."""
        return Surface(self.width, self.height)

    # =========================================================================
    # Masks
    # =========================================================================

    def glyph_mask(
        self,
        placement: 'TextPlacement',
        dx: float = 0.0,
        dy: float = 0.0,
        stroke_width: float = 0.0,
        blur_radius: float = 0.0,
    ) -> np.ndarray:
        """
        Coverage of the text glyphs, shape (H, W), float32 0..1.

        Args:
            placement: Glyph positions
            dx: Horizontal offset in device pixels
            dy: Vertical offset in device pixels
            stroke_width: Outline line width in unscaled pixels. The line is
                centered on the glyph outline, so the mask grows by half of it.
            blur_radius: Gaussian blur radius in unscaled pixels

        Returns:
            Device-space coverage mask
        """
        sx, sy = placement.scale_x, placement.scale_y
        local_w = max(1, int(math.ceil(self.width / sx)))
        local_h = max(1, int(math.ceil(self.height / sy)))

        mask = Image.new('L', (local_w, local_h), 0)
        draw = ImageDraw.Draw(mask)
        stroke = max(0.0, stroke_width) / 2
        for line, x, y in placement.line_positions(dx, dy):
            if not line:
                continue
            draw.text(
                (x, y),
                line,
                font=placement.font,
                fill=255,
                anchor=placement.pil_anchor,
                stroke_width=stroke,
                stroke_fill=255,
            )

        if blur_radius > 0:
            mask = mask.filter(ImageFilter.GaussianBlur(radius=blur_radius))

        if (local_w, local_h) != (self.width, self.height):
            scaled_size = (
                max(1, int(round(local_w * sx))),
                max(1, int(round(local_h * sy))),
            )
            if scaled_size != (local_w, local_h):
                mask = mask.resize(scaled_size, Image.Resampling.BILINEAR)
            mask = mask.crop((0, 0, self.width, self.height))

        return np.asarray(mask, dtype=np.float32) / 255.0

    # =========================================================================
    # Drawing
    # =========================================================================

    def fill_rect(self, rgb: Sequence[int], alpha: float = 1.0) -> None:
        """Fill the whole surface with a color (source-over)."""
        src = np.empty_like(self.pixels)
        src[..., :3] = np.asarray(rgb[:3], dtype=np.float32) / 255.0 * alpha
        src[..., 3] = alpha
        self.composite(src)

    def fill_behind(self, rgb: Sequence[int]) -> None:
        """Put an opaque color behind the current content (destination-over)."""
        color = np.asarray(rgb[:3], dtype=np.float32) / 255.0
        inv = 1.0 - self.pixels[..., 3:4]
        self.pixels[..., :3] += color * inv
        self.pixels[..., 3:4] += inv

    def fill_mask(
        self,
        mask: np.ndarray,
        rgb: Sequence[int],
        alpha: float = 1.0,
        mode: str = SOURCE_OVER,
    ) -> None:
        """Composite a solid color through a coverage mask."""
        color = np.asarray(rgb[:3], dtype=np.float32) / 255.0
        self.fill_mask_with(mask, np.broadcast_to(color, (*mask.shape, 3)), alpha, mode)

    def fill_mask_with(
        self,
        mask: np.ndarray,
        colors: np.ndarray,
        alpha: float = 1.0,
        mode: str = SOURCE_OVER,
    ) -> None:
        """Composite a per-pixel color field (H, W, 3), straight 0..1, through a mask."""
        a = (mask * alpha).astype(np.float32)[..., None]
        src = np.empty_like(self.pixels)
        src[..., :3] = colors * a
        src[..., 3:4] = a
        self.composite(src, mode)

    def erase(self, mask: np.ndarray) -> None:
        """Subtract coverage: every channel scales by (1 - mask) (destination-out)."""
        self.pixels *= (1.0 - mask.astype(np.float32))[..., None]

    def draw_surface(self, other: 'Surface', mode: str = SOURCE_OVER) -> None:
        """Composite another surface of the same size onto this one."""
        self.composite(other.pixels, mode)

    def composite(self, src: np.ndarray, mode: str = SOURCE_OVER) -> None:
        """
        Composite premultiplied ``src`` onto this surface in place.

        out_a = as + ad (1 - as)
        out_c = cs (1 - ad) + cd (1 - as) + as ad B(Cd, Cs)

        With B = Cs this reduces to plain source-over.
        """
        dst = self.pixels
        sa = src[..., 3:4]
        da = dst[..., 3:4]
        sc = src[..., :3]
        dc = dst[..., :3]
        if mode == MULTIPLY:
            # as*ad*Cs*Cd == premultiplied product
            color = sc * (1.0 - da) + dc * (1.0 - sa) + sc * dc
        else:
            color = sc + dc * (1.0 - sa)
        alpha = sa + da * (1.0 - sa)
        dst[..., :3] = color
        dst[..., 3:4] = alpha
        np.clip(dst, 0.0, 1.0, out=dst)

    # =========================================================================
    # Pixel access
    # =========================================================================

    def get_pixels(self) -> np.ndarray:
        """Straight (unpremultiplied) RGBA uint8 copy, shape (H, W, 4)."""
        alpha = self.pixels[..., 3:4]
        safe = np.where(alpha > 0, alpha, 1.0)
        straight = np.where(alpha > 0, self.pixels[..., :3] / safe, 0.0)
        out = np.empty(self.pixels.shape, dtype=np.uint8)
        out[..., :3] = np.clip(np.rint(straight * 255.0), 0, 255).astype(np.uint8)
        out[..., 3] = np.clip(np.rint(alpha[..., 0] * 255.0), 0, 255).astype(np.uint8)
        return out

    def put_pixels(self, pixels: np.ndarray) -> None:
        """Replace the content with premultiplied float32 pixels; adopts their size."""
        if pixels.ndim != 3 or pixels.shape[2] != 4:
            raise ValueError(f"Expected (H, W, 4) pixels, got shape {pixels.shape}")
        self.pixels = np.ascontiguousarray(pixels, dtype=np.float32)

    def to_pil(self) -> Image.Image:
        return Image.fromarray(self.get_pixels())

    def __repr__(self) -> str:
        return f"Surface({self.width}x{self.height})"
