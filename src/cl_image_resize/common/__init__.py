"""Common module - errors, schemas and settings."""

from .errors import (
    ChannelBootstrapError,
    ConfigError,
    EmptySourceError,
    EncodeError,
    GeometryError,
    RenderError,
    ResizeError,
    SourceError,
    UnsupportedSourceError,
)
from .schemas import (
    FitGeometry,
    FitMode,
    RenderStrategy,
    ResizeOptions,
    ResizeResult,
    SmoothingOutcome,
    SourceDimensions,
)
from .settings import ResizeSettings, get_settings

__all__ = [
    "ChannelBootstrapError",
    "ConfigError",
    "EmptySourceError",
    "EncodeError",
    "GeometryError",
    "RenderError",
    "ResizeError",
    "SourceError",
    "UnsupportedSourceError",
    "FitGeometry",
    "FitMode",
    "RenderStrategy",
    "ResizeOptions",
    "ResizeResult",
    "SmoothingOutcome",
    "SourceDimensions",
    "ResizeSettings",
    "get_settings",
]
