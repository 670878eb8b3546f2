"""Normalization of user-supplied resize options."""

import math
from collections.abc import Mapping

from loguru import logger
from PIL import ImageColor

from .algo.geometry import round_half_up
from .common.schemas import JPEG_TYPES, Color, FitMode, ResizeOptions

DEFAULT_OUTPUT_TYPE = "image/jpeg"

KNOWN_KEYS = frozenset(
    {
        "type",
        "width",
        "height",
        "quality",
        "gravity",
        "fit",
        "noEnlarge",
        "no_enlarge",
        "smoothen",
        "background",
    }
)


def parse_number_arg(value: object, default: float = 0) -> float:
    """Parse a numeric option; anything unusable yields ``default``."""
    if value is None:
        return default
    if isinstance(value, str):
        value = value.strip() or 0
    try:
        number = float(value)  # pyright: ignore[reportArgumentType]
    except (TypeError, ValueError, OverflowError):
        return default
    if not math.isfinite(number):
        return default
    return number


def type_supports_alpha(output_type: str) -> bool:
    return output_type not in JPEG_TYPES


def vertical_gravity(gravity: object) -> int:
    """north/top -> -1, south/bottom -> 1, else 0."""
    if isinstance(gravity, str):
        gravity = gravity.lower()
        if "north" in gravity or "top" in gravity:
            return -1
        elif "south" in gravity or "bottom" in gravity:
            return 1
    return 0


def horizontal_gravity(gravity: object) -> int:
    """east/left -> -1, west/right -> 1, else 0."""
    if isinstance(gravity, str):
        gravity = gravity.lower()
        if "east" in gravity or "left" in gravity:
            return -1
        elif "west" in gravity or "right" in gravity:
            return 1
    return 0


def normalize_background(value: object) -> Color | None:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        try:
            _ = ImageColor.getrgb(value)
        except ValueError:
            logger.warning(f"Ignoring unrecognised background colour {value!r}")
            return None
        return value
    if (
        isinstance(value, (tuple, list))
        and len(value) in (3, 4)
        and all(isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 255 for c in value)
    ):
        return tuple(value)  # pyright: ignore[reportReturnType]
    logger.warning(f"Ignoring unrecognised background colour {value!r}")
    return None


def normalize_options(options: Mapping[str, object] | ResizeOptions | None = None) -> ResizeOptions:
    """Fill in defaults and coerce user options into ``ResizeOptions``.

    Malformed values are defaulted rather than rejected, so this never raises
    for a mapping input.

    Args:
        options: Mapping using the public option names (``type``, ``width``,
            ``height``, ``quality``, ``gravity``, ``fit``, ``noEnlarge``,
            ``smoothen``, ``background``), an already canonical
            ``ResizeOptions``, or None.

    Returns:
        Canonical, frozen ``ResizeOptions``
    """
    if isinstance(options, ResizeOptions):
        return options

    opts: Mapping[str, object] = options or {}

    unknown = set(opts) - KNOWN_KEYS
    if unknown:
        logger.debug(f"Ignoring unknown resize options: {sorted(unknown)}")

    raw_type = opts.get("type")
    output_type = (
        raw_type.strip().lower()
        if isinstance(raw_type, str) and raw_type.strip()
        else DEFAULT_OUTPUT_TYPE
    )

    no_enlarge = opts.get("noEnlarge", opts.get("no_enlarge"))

    return ResizeOptions(
        output_type=output_type,
        supports_alpha=type_supports_alpha(output_type),
        width=max(round_half_up(parse_number_arg(opts.get("width"))), 0),
        height=max(round_half_up(parse_number_arg(opts.get("height"))), 0),
        quality=min(max(parse_number_arg(opts.get("quality"), 1), 0), 1),
        gravity_x=horizontal_gravity(opts.get("gravity")),
        gravity_y=vertical_gravity(opts.get("gravity")),
        fit=FitMode.parse(opts.get("fit")),
        no_enlarge=no_enlarge is True,
        smoothen=opts.get("smoothen") is True,
        background=normalize_background(opts.get("background")),
    )
