"""Pydantic schemas shared across the resize pipeline."""

from enum import StrEnum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict, Field

JPEG_TYPES = frozenset({"image/jpeg", "image/jpg"})
ICO_TYPES = frozenset({"image/vnd.microsoft.icon", "image/x-icon"})
ICO_MAX_SIZE = 256

Color = str | tuple[int, int, int] | tuple[int, int, int, int]


# ─────────────────────────────────────────────────────────────
# Enums
# ─────────────────────────────────────────────────────────────


class FitMode(StrEnum):
    STRETCH = "stretch"
    COVER = "cover"
    OUTSIDE = "outside"
    CONTAIN = "contain"
    INSIDE = "inside"

    @classmethod
    def parse(cls, value: object) -> "FitMode":
        """Case-folded lookup; anything unrecognised means stretch."""
        if isinstance(value, str) and value:
            try:
                return cls(value.lower())
            except ValueError:
                return cls.STRETCH
        return cls.STRETCH

    @property
    def uncropped(self) -> bool:
        """Canvas snaps to the placed image size (no letterboxing)."""
        return self in (FitMode.OUTSIDE, FitMode.INSIDE)


class RenderStrategy(StrEnum):
    WORKER = "worker"
    DIRECT = "direct"


class SmoothingOutcome(StrEnum):
    NOT_REQUESTED = "not_requested"
    NOT_NEEDED = "not_needed"
    APPLIED = "applied"
    SKIPPED = "skipped"


# ─────────────────────────────────────────────────────────────
# Options & geometry
# ─────────────────────────────────────────────────────────────


class ResizeOptions(BaseModel):
    """Canonical, fully populated resize options.

    Built once per call by ``normalize_options``. Variants (e.g. the same
    options with smoothing on) are derived with ``model_copy(update=...)``.
    """

    output_type: str = "image/jpeg"
    supports_alpha: bool = False
    width: int = Field(default=0, ge=0, description="Target width, 0 = unspecified")
    height: int = Field(default=0, ge=0, description="Target height, 0 = unspecified")
    quality: float = Field(default=1.0, ge=0.0, le=1.0)
    gravity_x: int = Field(default=0, ge=-1, le=1)
    gravity_y: int = Field(default=0, ge=-1, le=1)
    fit: FitMode = FitMode.STRETCH
    no_enlarge: bool = False
    smoothen: bool = False
    background: Color | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="forbid")

    @property
    def is_ico(self) -> bool:
        return self.output_type in ICO_TYPES


class SourceDimensions(BaseModel):
    width: int = Field(..., gt=0)
    height: int = Field(..., gt=0)

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)


class FitGeometry(BaseModel):
    """Resolved placement of the source image on the output canvas."""

    source_width: int
    source_height: int
    canvas_width: int
    canvas_height: int
    image_width: int
    image_height: int
    offset_x: int
    offset_y: int

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def canvas_size(self) -> tuple[int, int]:
        return self.canvas_width, self.canvas_height

    @property
    def image_size(self) -> tuple[int, int]:
        return self.image_width, self.image_height


# ─────────────────────────────────────────────────────────────
# Results
# ─────────────────────────────────────────────────────────────


class ResizeResult(BaseModel):
    """Encoded output plus a report of how it was produced."""

    data: bytes
    geometry: FitGeometry
    strategy: RenderStrategy
    smoothing: SmoothingOutcome = SmoothingOutcome.NOT_REQUESTED
    fallback_reason: str | None = Field(
        default=None,
        description="Why the worker strategy failed or was unavailable",
    )

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @property
    def degraded(self) -> bool:
        return self.fallback_reason is not None or self.smoothing == SmoothingOutcome.SKIPPED
