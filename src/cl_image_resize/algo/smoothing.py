"""Blur pre-pass applied before a smoothed downscale.

A single Gaussian blur at source resolution approximates a higher quality
downsampling filter. Sigma is tuned to roughly match how browsers render an
image reduced with CSS.
"""

from dataclasses import dataclass

from loguru import logger
from PIL import Image

from ..common.schemas import FitGeometry, ResizeOptions, SmoothingOutcome
from .surface import apply_blur

BLUR_FACTOR = 0.375


@dataclass(frozen=True)
class SmoothingPass:
    image: Image.Image
    outcome: SmoothingOutcome
    sigma: float = 0.0


def blur_sigma(geometry: FitGeometry) -> float:
    """Blur radius for the downscale described by ``geometry``; <= 0 means none."""
    if geometry.image_width <= 0 or geometry.image_height <= 0:
        return 0.0
    scale = min(
        geometry.source_width / geometry.image_width,
        geometry.source_height / geometry.image_height,
    )
    return (scale - 1) * BLUR_FACTOR


def apply_smoothing(drawable: Image.Image, geometry: FitGeometry, options: ResizeOptions) -> SmoothingPass:
    """Return the (possibly blurred) image to draw from.

    Best effort: if the filter cannot be applied the original drawable is
    returned with a ``SKIPPED`` outcome instead of failing the render.
    """
    if not options.smoothen:
        return SmoothingPass(drawable, SmoothingOutcome.NOT_REQUESTED)

    sigma = blur_sigma(geometry)
    if sigma <= 0:
        return SmoothingPass(drawable, SmoothingOutcome.NOT_NEEDED)

    try:
        intermediate = drawable if drawable.mode == "RGBA" else drawable.convert("RGBA")
        blurred = apply_blur(intermediate, sigma)
    except (ValueError, OSError) as e:
        logger.warning(f"Smoothing skipped, blur filter unavailable for {drawable.mode} image: {e}")
        return SmoothingPass(drawable, SmoothingOutcome.SKIPPED)

    return SmoothingPass(blurred, SmoothingOutcome.APPLIED, sigma)
