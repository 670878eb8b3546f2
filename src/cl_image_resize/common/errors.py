"""Error hierarchy for resize operations."""

from typing_extensions import override


class ResizeError(Exception):
    """Base class for all resize errors."""

    def __init__(self, message: str = "Resize failed"):
        self.message: str = message
        super().__init__(self.message)

    @override
    def __str__(self):
        return self.message


class ConfigError(ResizeError):
    """The call itself is structurally invalid (e.g. no source given)."""


class GeometryError(ResizeError):
    """Source dimensions are unknown or the output exceeds a format cap."""


class SourceError(ResizeError):
    """Base class for drawable resolution failures."""


class UnsupportedSourceError(SourceError):
    pass


class EmptySourceError(SourceError):
    pass


class ChannelBootstrapError(ResizeError):
    """The background worker channel is unusable.

    Never surfaced to callers of ``resize``; the executor falls back to the
    direct strategy when it sees this.
    """

    def __init__(self, message: str = "Worker is not loaded", cause: BaseException | None = None):
        self.cause: BaseException | None = cause
        super().__init__(message)


class RenderError(ResizeError):
    """Transport or drawing failure in either render strategy."""

    def __init__(self, message: str = "Render failed", request_id: int | None = None):
        self.request_id: int | None = request_id
        super().__init__(message)


class EncodeError(ResizeError):
    """Surface could not be encoded to bytes."""
