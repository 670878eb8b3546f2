"""Geometry, smoothing, drawing and encoding algorithms."""

from .geometry import resolve_fit, round_half_up
from .render import EncodedImage, RenderedSurface, render_to_bytes, render_to_surface
from .smoothing import SmoothingPass, apply_smoothing, blur_sigma
from .surface import create_surface, draw, encode, fill, get_pil_format

__all__ = [
    "resolve_fit",
    "round_half_up",
    "EncodedImage",
    "RenderedSurface",
    "render_to_bytes",
    "render_to_surface",
    "SmoothingPass",
    "apply_smoothing",
    "blur_sigma",
    "create_surface",
    "draw",
    "encode",
    "fill",
    "get_pil_format",
]
