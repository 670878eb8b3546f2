"""Draw-and-encode core shared by the worker and direct strategies."""

from dataclasses import dataclass

from PIL import Image

from ..common.schemas import FitGeometry, ResizeOptions, SmoothingOutcome
from .smoothing import apply_smoothing
from .surface import create_surface, draw, encode, fill


@dataclass(frozen=True)
class RenderedSurface:
    surface: Image.Image
    smoothing: SmoothingOutcome


@dataclass(frozen=True)
class EncodedImage:
    data: bytes
    smoothing: SmoothingOutcome


def render_to_surface(drawable: Image.Image, geometry: FitGeometry, options: ResizeOptions) -> RenderedSurface:
    """Paint ``drawable`` onto a fresh canvas at the resolved geometry."""
    surface = create_surface(geometry.canvas_width, geometry.canvas_height, options.supports_alpha)

    if options.background is not None:
        fill(surface, options.background, 0, 0, geometry.canvas_width, geometry.canvas_height)

    smoothed = apply_smoothing(drawable, geometry, options)
    resample = Image.Resampling.LANCZOS if options.smoothen else Image.Resampling.BILINEAR

    draw(
        surface,
        smoothed.image,
        geometry.offset_x,
        geometry.offset_y,
        geometry.image_width,
        geometry.image_height,
        resample,
    )
    return RenderedSurface(surface, smoothed.outcome)


def render_to_bytes(drawable: Image.Image, geometry: FitGeometry, options: ResizeOptions) -> EncodedImage:
    """Render and encode; raises ``EncodeError`` if encoding fails."""
    rendered = render_to_surface(drawable, geometry, options)
    data = encode(rendered.surface, options.output_type, options.quality)
    return EncodedImage(data, rendered.smoothing)
