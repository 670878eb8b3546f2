"""Unit tests for option normalization.

Tests defaults, numeric coercion, gravity parsing, fit parsing, alpha
derivation and background colour handling.
"""

import math

import pytest
from pydantic import ValidationError

from cl_image_resize.common.schemas import FitMode, ResizeOptions
from cl_image_resize.options import (
    horizontal_gravity,
    normalize_options,
    parse_number_arg,
    type_supports_alpha,
    vertical_gravity,
)

# ============================================================================
# DEFAULTS
# ============================================================================


def test_normalize_options_defaults():
    """Test absent options produce the canonical defaults."""
    opts = normalize_options(None)

    assert opts.output_type == "image/jpeg"
    assert opts.supports_alpha is False
    assert opts.width == 0
    assert opts.height == 0
    assert opts.quality == 1
    assert opts.gravity_x == 0
    assert opts.gravity_y == 0
    assert opts.fit == FitMode.STRETCH
    assert opts.no_enlarge is False
    assert opts.smoothen is False
    assert opts.background is None


def test_normalize_options_empty_mapping_matches_none():
    assert normalize_options({}) == normalize_options(None)


def test_normalize_options_passes_canonical_options_through():
    opts = ResizeOptions(width=10, height=20)
    assert normalize_options(opts) is opts


def test_resize_options_are_frozen():
    """Test canonical options cannot be mutated after construction."""
    opts = normalize_options({"width": 100})

    with pytest.raises(ValidationError):
        opts.width = 200  # type: ignore[misc]


def test_resize_options_variant_via_model_copy():
    """Test the smoothing variant is a new object and the original is untouched."""
    opts = normalize_options({"width": 100, "height": 50})
    smooth = opts.model_copy(update={"smoothen": True})

    assert smooth.smoothen is True
    assert opts.smoothen is False
    assert smooth.width == opts.width


# ============================================================================
# NUMERIC PARSING
# ============================================================================


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (None, 0),
        (12, 12),
        ("12", 12),
        (" 7.5 ", 7.5),
        ("", 0),
        ("12px", 0),
        ("abc", 0),
        (float("nan"), 0),
        (float("inf"), 0),
        ([1, 2], 0),
        (object(), 0),
        (True, 1),
    ],
)
def test_parse_number_arg(value: object, expected: float):
    assert parse_number_arg(value) == expected


def test_parse_number_arg_custom_default():
    assert parse_number_arg("nope", 1) == 1
    assert parse_number_arg(None, 1) == 1


def test_width_height_are_rounded_and_non_negative():
    opts = normalize_options({"width": "99.5", "height": -40})

    assert opts.width == 100
    assert opts.height == 0


def test_non_numeric_dimensions_default_to_zero():
    opts = normalize_options({"width": "wide", "height": {"h": 1}})

    assert opts.width == 0
    assert opts.height == 0


@pytest.mark.parametrize(
    ("value", "expected"),
    [(None, 1.0), (0.5, 0.5), ("0.25", 0.25), (-3, 0.0), (7, 1.0), ("bad", 1.0)],
)
def test_quality_is_clamped(value: object, expected: float):
    opts = normalize_options({"quality": value})
    assert math.isclose(opts.quality, expected)


# ============================================================================
# GRAVITY
# ============================================================================


@pytest.mark.parametrize(
    ("gravity", "expected"),
    [
        ("north", -1),
        ("TOP", -1),
        ("northwest", -1),
        ("south", 1),
        ("Bottom-Right", 1),
        ("center", 0),
        ("east", 0),
        (None, 0),
        (5, 0),
    ],
)
def test_vertical_gravity(gravity: object, expected: int):
    assert vertical_gravity(gravity) == expected


@pytest.mark.parametrize(
    ("gravity", "expected"),
    [
        ("east", -1),
        ("LEFT", -1),
        ("west", 1),
        ("top-right", 1),
        ("north", 0),
        ("", 0),
        (None, 0),
    ],
)
def test_horizontal_gravity(gravity: object, expected: int):
    assert horizontal_gravity(gravity) == expected


def test_gravity_assigns_vertical_and_horizontal_axes():
    """Test north/south drive the y axis and east/west drive the x axis."""
    opts = normalize_options({"gravity": "southwest"})

    assert opts.gravity_y == 1
    assert opts.gravity_x == 1

    opts = normalize_options({"gravity": "top left"})

    assert opts.gravity_y == -1
    assert opts.gravity_x == -1


# ============================================================================
# TYPE / FIT / FLAGS
# ============================================================================


def test_alpha_support_derived_from_output_type():
    assert type_supports_alpha("image/jpeg") is False
    assert type_supports_alpha("image/jpg") is False
    assert type_supports_alpha("image/png") is True
    assert type_supports_alpha("image/webp") is True

    assert normalize_options({"type": "image/png"}).supports_alpha is True
    assert normalize_options({"type": "IMAGE/JPEG"}).supports_alpha is False


def test_output_type_defaults_when_empty():
    assert normalize_options({"type": ""}).output_type == "image/jpeg"
    assert normalize_options({"type": 42}).output_type == "image/jpeg"


@pytest.mark.parametrize(
    ("fit", "expected"),
    [
        ("cover", FitMode.COVER),
        ("OUTSIDE", FitMode.OUTSIDE),
        ("Contain", FitMode.CONTAIN),
        ("inside", FitMode.INSIDE),
        ("stretch", FitMode.STRETCH),
        ("", FitMode.STRETCH),
        (None, FitMode.STRETCH),
        ("fill", FitMode.STRETCH),
    ],
)
def test_fit_mode_parsing(fit: object, expected: FitMode):
    assert normalize_options({"fit": fit}).fit == expected


def test_flags_require_true():
    """Test noEnlarge and smoothen are only enabled by an actual True."""
    assert normalize_options({"noEnlarge": True}).no_enlarge is True
    assert normalize_options({"no_enlarge": True}).no_enlarge is True
    assert normalize_options({"noEnlarge": "true"}).no_enlarge is False
    assert normalize_options({"noEnlarge": 1}).no_enlarge is False
    assert normalize_options({"smoothen": True}).smoothen is True
    assert normalize_options({"smoothen": "yes"}).smoothen is False


def test_unknown_keys_are_ignored():
    opts = normalize_options({"width": 10, "crop": "yes"})
    assert opts.width == 10


# ============================================================================
# BACKGROUND
# ============================================================================


def test_background_colour_string_accepted():
    assert normalize_options({"background": "#ff0000"}).background == "#ff0000"
    assert normalize_options({"background": "white"}).background == "white"


def test_background_colour_tuple_accepted():
    assert normalize_options({"background": (10, 20, 30)}).background == (10, 20, 30)
    assert normalize_options({"background": [10, 20, 30, 40]}).background == (10, 20, 30, 40)


@pytest.mark.parametrize("value", ["not-a-colour", (300, 0, 0), (1, 2), 12, ""])
def test_invalid_background_is_dropped(value: object):
    assert normalize_options({"background": value}).background is None
