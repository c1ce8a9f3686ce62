"""
Font registry for the text renderer.

This module provides a font registry that:
1. Uses fonts registered by the application (file path or raw bytes, per weight)
2. Falls back to system fonts found by family name
3. Falls back to Pillow's bundled default font as the last resort
4. Caches font handles per size and weight
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from threading import RLock

from PIL import ImageFont

from .config import Style
from .exceptions import FontNotReadyError

logger = logging.getLogger(__name__)

FONT_EXTENSIONS = (".ttf", ".otf")

# Size used to probe that a style's font can be loaded at all
PROBE_SIZE = 20


class RegisteredFont:
    """
    A registered font contains information about a single available font face
    and its weight variations.

    Upon request it can be used to create a Pillow font handle at a given size
    and weight.
    """

    def __init__(
        self,
        font_face: str,
        base_path: str | None = None,
        variations: list[tuple[str, int]] | None = None,
        font_data: bytes | None = None,
    ):
        """
        Initialize a registered font.

        :param font_face: The font's face name, e.g. Mikado
        :param base_path: Base file name without extension,
            e.g. /home/user/myProject/fonts/Mikado
        :param variations: The weight variations as (file name suffix, weight),
            e.g. ("-Black", 900)
        :param font_data: Raw font data bytes (alternative to base_path)
        """
        self.font_face = font_face
        self.base_path = base_path
        self.variations = variations or [("", 400)]
        self.font_data = font_data
        self._cached_fonts: dict[tuple[float, int], ImageFont.FreeTypeFont] = {}
        self._cache_lock = RLock()

    def _variation_for(self, weight: int) -> tuple[str, int]:
        return min(self.variations, key=lambda v: abs(v[1] - weight))

    def get_handle(self, size: float, weight: int = 400) -> ImageFont.FreeTypeFont | None:
        """
        Tries to create a font handle for this font.

        :param size: The font's size in pixels
        :param weight: CSS-style weight; the nearest registered variation is used
        :return: On success the handle of the font
        """
        cache_key = (round(float(size), 3), weight)

        with self._cache_lock:
            if cache_key in self._cached_fonts:
                return self._cached_fonts[cache_key]

        font = None

        if self.font_data is not None:
            try:
                font = ImageFont.truetype(io.BytesIO(self.font_data), size)
            except OSError as e:
                logger.warning(f"Failed to load font {self.font_face} from data: {e}")

        if font is None and self.base_path is not None:
            suffix, _ = self._variation_for(weight)
            for extension in FONT_EXTENSIONS:
                full_name = Path(self.base_path + suffix + extension)
                if full_name.exists():
                    try:
                        font = ImageFont.truetype(str(full_name), size)
                        break
                    except OSError as e:
                        logger.warning(f"Failed to load font from {full_name}: {e}")

        if font is not None:
            with self._cache_lock:
                self._cached_fonts[cache_key] = font

        return font


class FontRegistry:
    """
    Manages all fonts the renderer can draw with.

    Resolution order for a style: explicit ``font_path``, registered fonts,
    system fonts by family name, Pillow's default font.
    """

    access_lock = RLock()
    "Multi-thread access lock"
    fonts: dict[str, RegisteredFont] = {}
    "Dictionary of registered fonts"
    _system_fonts: dict[tuple[str, float], ImageFont.FreeTypeFont | None] = {}
    "System font lookups by (name, size), including misses"
    _fallback_warned: set[str] = set()
    "Families for which the default-font fallback was already reported"

    @classmethod
    def register_font(
        cls,
        font_face: str,
        base_path: str | None = None,
        variations: list[tuple[str, int]] | None = None,
        font_data: bytes | None = None,
    ):
        """
        Registers a single font.

        :param font_face: The font's face name, e.g. Mikado
        :param base_path: Base file name without extension
        :param variations: The weight variations
        :param font_data: Raw font data bytes (alternative to base_path)
        """
        with cls.access_lock:
            if font_face in cls.fonts:
                raise ValueError(f"Font '{font_face}' was already registered")
            cls.fonts[font_face] = RegisteredFont(
                font_face=font_face,
                base_path=base_path,
                variations=variations,
                font_data=font_data,
            )

    @classmethod
    def unregister_font(cls, font_face: str) -> None:
        with cls.access_lock:
            cls.fonts.pop(font_face, None)

    @classmethod
    def get_font(cls, font_face: str, size: float, weight: int = 400) -> ImageFont.FreeTypeFont | None:
        """
        Tries to create a font handle for a registered font.

        :param font_face: The font's face
        :param size: The font's size in pixels
        :param weight: CSS-style weight
        :return: On success the handle of the font
        """
        with cls.access_lock:
            reg_font = cls.fonts.get(font_face)
        if reg_font is None:
            return None
        return reg_font.get_handle(size, weight)

    @classmethod
    def _try_system_font(cls, font_names: list[str], size: float) -> ImageFont.FreeTypeFont | None:
        """Try to load a system font by name."""
        for name in font_names:
            key = (name, round(float(size), 3))
            with cls.access_lock:
                if key in cls._system_fonts:
                    font = cls._system_fonts[key]
                    if font is not None:
                        return font
                    continue
            try:
                # PIL searches the system font paths
                font = ImageFont.truetype(name, size)
            except OSError:
                font = None
            with cls.access_lock:
                cls._system_fonts[key] = font
            if font is not None:
                return font
        return None

    @classmethod
    def resolve(cls, style: Style, size: float) -> ImageFont.FreeTypeFont:
        """
        Font handle for ``style`` at ``size`` pixels, never None.

        Falls back to Pillow's bundled default font (logged once per family).
        """
        if style.font_path is not None:
            try:
                return ImageFont.truetype(str(style.font_path), size)
            except OSError as e:
                logger.warning(f"Failed to load font from {style.font_path}: {e}")

        font = cls.get_font(style.font_family, size, style.font_weight)
        if font is not None:
            return font

        family = style.font_family.strip('"\'')
        font = cls._try_system_font(
            [family] + [family + extension for extension in FONT_EXTENSIONS],
            size,
        )
        if font is not None:
            return font

        with cls.access_lock:
            if family not in cls._fallback_warned:
                cls._fallback_warned.add(family)
                logger.warning(f"Font '{family}' not available, using the default font")
        return ImageFont.load_default(size)

    @classmethod
    def ensure_ready(cls, style: Style) -> ImageFont.FreeTypeFont:
        """
        Loads the style's font once before the first paint.

        :raises FontNotReadyError: If not even the default font can be loaded
        """
        try:
            font = cls.resolve(style, PROBE_SIZE)
        except OSError as e:
            raise FontNotReadyError(f"No font available for '{style.font_family}': {e}") from e
        if not isinstance(font, ImageFont.FreeTypeFont):
            raise FontNotReadyError(
                f"No scalable font available for '{style.font_family}' (FreeType support missing)"
            )
        return font


__all__ = ["FontRegistry", "RegisteredFont"]
