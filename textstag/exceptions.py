"""Exception classes for the text renderer."""


class TextStagError(Exception):
    """Base exception for textstag errors."""

    pass


class SurfaceUnavailableError(TextStagError):
    """Raised when the raster surface (or a scratch surface) cannot be obtained."""

    pass


class FontNotReadyError(TextStagError):
    """Raised when no font at all could be loaded for the configured style."""

    pass


class ConfigError(TextStagError):
    """Raised for layer configuration documents that cannot be parsed."""

    pass
