"""cl_image_resize - fit-aware image resize and encode with a background worker."""

from .algo.geometry import resolve_fit
from .common.errors import (
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
from .common.schemas import (
    FitGeometry,
    FitMode,
    RenderStrategy,
    ResizeOptions,
    ResizeResult,
    SmoothingOutcome,
    SourceDimensions,
)
from .common.settings import ResizeSettings, get_settings
from .options import normalize_options
from .resize import resize, resize_with_report
from .sources import PixelBuffer, resolve_source
from .worker import get_worker_channel, shutdown_worker_channel

__version__ = "0.1.0"

__all__ = [
    "resize",
    "resize_with_report",
    "normalize_options",
    "resolve_fit",
    "resolve_source",
    "PixelBuffer",
    "FitGeometry",
    "FitMode",
    "RenderStrategy",
    "ResizeOptions",
    "ResizeResult",
    "SmoothingOutcome",
    "SourceDimensions",
    "ResizeSettings",
    "get_settings",
    "get_worker_channel",
    "shutdown_worker_channel",
    "ChannelBootstrapError",
    "ConfigError",
    "EmptySourceError",
    "EncodeError",
    "GeometryError",
    "RenderError",
    "ResizeError",
    "SourceError",
    "UnsupportedSourceError",
    "__version__",
]
