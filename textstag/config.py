"""Application configuration."""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings


class Style(BaseModel):
    """
    Process-wide text style.

    Read-only once created. ``effect_pad`` is the margin always reserved beyond
    the user padding so every effect has room to breathe.
    """

    model_config = ConfigDict(frozen=True)

    font_family: str = Field(default='Mikado')
    font_weight: int = Field(default=900)
    font_path: Optional[Path] = Field(default=None)
    line_height: float = Field(default=1.05, gt=0.0)
    effect_pad: float = Field(default=30.0, ge=0.0)


class Settings(BaseSettings):
    """Application settings."""

    # Typography
    FONT_FAMILY: str = "Mikado"
    FONT_WEIGHT: int = 900
    FONT_PATH: Optional[Path] = None  # Explicit .ttf/.otf, bypasses the registry
    LINE_HEIGHT: float = 1.05
    EFFECT_PAD: float = 30.0

    # Render defaults
    DEFAULT_FONT_SIZE: float = 143.0
    DEFAULT_PADDING: float = 24.0
    MAX_EXPORT_SCALE: float = 8.0
    BACKGROUND_COLOR: str = "#7D2ED7"

    model_config = {"env_prefix": "TEXTSTAG_"}

    def style(self) -> Style:
        """Build the text style described by these settings."""
        return Style(
            font_family=self.FONT_FAMILY,
            font_weight=self.FONT_WEIGHT,
            font_path=self.FONT_PATH,
            line_height=self.LINE_HEIGHT,
            effect_pad=self.EFFECT_PAD,
        )


settings = Settings()
