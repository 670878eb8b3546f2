"""Messages exchanged with the background worker."""

from typing import ClassVar

from PIL import Image
from pydantic import BaseModel, ConfigDict, model_validator

from ..common.schemas import FitGeometry, ResizeOptions, SmoothingOutcome


class WorkerRequest(BaseModel):
    """Request posted to the worker.

    A probe carries no payload; the worker must answer it with an empty
    response bearing the same id.
    """

    id: int
    probe: bool = False
    image: Image.Image | None = None
    geometry: FitGeometry | None = None
    options: ResizeOptions | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    @model_validator(mode="after")
    def validate_payload(self) -> "WorkerRequest":
        if not self.probe and (self.image is None or self.geometry is None or self.options is None):
            raise ValueError("Render requests need image, geometry and options")
        return self

    @classmethod
    def make_probe(cls, id: int) -> "WorkerRequest":
        return cls(id=id, probe=True)


class WorkerResponse(BaseModel):
    """Response to a ``WorkerRequest`` with the same id."""

    id: int
    result: bytes | None = None
    smoothing: SmoothingOutcome | None = None
    error: str | None = None

    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def validate_exclusive(self) -> "WorkerResponse":
        if self.result is not None and self.error is not None:
            raise ValueError("Response carries either a result or an error, never both")
        return self

    @property
    def ok(self) -> bool:
        return self.error is None
