"""Pure fit geometry computation logic."""

import math

from ..common.errors import GeometryError
from ..common.schemas import ICO_MAX_SIZE, FitGeometry, FitMode, ResizeOptions, SourceDimensions


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +infinity."""
    return math.floor(value + 0.5)


def resolve_fit(options: ResizeOptions, dimensions: SourceDimensions | None) -> FitGeometry:
    """
    Compute canvas size, placed image size and offset for one resize.

    Values are kept as floats throughout and rounded once at the end.

    Args:
        options: Canonical resize options
        dimensions: Pixel size of the resolved source

    Returns:
        FitGeometry with integer sizes and offsets

    Raises:
        GeometryError: If the source size is unknown, or the canvas exceeds
            the ICO size cap
    """
    if dimensions is None or not dimensions.width or not dimensions.height:
        raise GeometryError("Image dimensions could not be determined")

    width = dimensions.width
    height = dimensions.height

    cw: float = options.width
    ch: float = options.height
    iw: float = width
    ih: float = height
    fit = options.fit

    # Missing target dimension: derive it from the source aspect ratio
    if not cw or not ch:
        fit = FitMode.STRETCH
        if cw:
            ch = (cw / iw) * ih
        elif ch:
            cw = (ch / ih) * iw
        else:
            cw = iw
            ch = ih

    if fit in (FitMode.OUTSIDE, FitMode.COVER):
        scale = max(cw / iw, ch / ih)
        iw *= scale
        ih *= scale
    elif fit in (FitMode.INSIDE, FitMode.CONTAIN):
        scale = min(cw / iw, ch / ih)
        iw *= scale
        ih *= scale
    else:
        iw = cw
        ih = ch

    if fit.uncropped:
        cw = iw
        ch = ih

    if options.no_enlarge and iw > 0 and ih > 0:
        scale = min(width / iw, height / ih)
        if scale < 1:
            iw *= scale
            ih *= scale
            cw *= scale
            ch *= scale

    ix = (cw - iw) * 0.5 * (options.gravity_x + 1)
    iy = (ch - ih) * 0.5 * (options.gravity_y + 1)

    geometry = FitGeometry(
        source_width=width,
        source_height=height,
        canvas_width=round_half_up(cw),
        canvas_height=round_half_up(ch),
        image_width=round_half_up(iw),
        image_height=round_half_up(ih),
        offset_x=round_half_up(ix),
        offset_y=round_half_up(iy),
    )

    if options.is_ico and (geometry.canvas_width > ICO_MAX_SIZE or geometry.canvas_height > ICO_MAX_SIZE):
        raise GeometryError(f"Exceeds max ICO size ({ICO_MAX_SIZE}x{ICO_MAX_SIZE})")

    return geometry
