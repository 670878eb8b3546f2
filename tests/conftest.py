"""Test configuration and fixtures for cl_image_resize.

This module provides:
- Synthetic test images generated with PIL (no media files on disk)
- Settings fixtures for worker / direct-only runs
- Fake worker transports for channel tests
- Automatic reset of the process-wide worker channel between tests
"""

from collections.abc import Callable, Iterator
from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image, ImageDraw
from typing_extensions import override

from cl_image_resize.common.settings import ResizeSettings, reset_settings
from cl_image_resize.worker.channel_instance import shutdown_worker_channel
from cl_image_resize.worker.messages import WorkerRequest, WorkerResponse
from cl_image_resize.worker.transport import (
    ErrorHandler,
    MessageHandler,
    WorkerTransport,
    handle_request,
)

# ============================================================================
# Global state reset
# ============================================================================


@pytest.fixture(autouse=True)
def reset_worker_channel() -> Iterator[None]:
    """Each test starts with an uninitialized worker channel."""
    shutdown_worker_channel()
    reset_settings()
    yield
    shutdown_worker_channel()
    reset_settings()


# ============================================================================
# Settings
# ============================================================================


@pytest.fixture
def worker_settings() -> ResizeSettings:
    return ResizeSettings(use_worker=True, probe_timeout=2.0)


@pytest.fixture
def direct_settings() -> ResizeSettings:
    return ResizeSettings(use_worker=False)


# ============================================================================
# Synthetic images
# ============================================================================


def make_image(width: int, height: int, mode: str = "RGB") -> Image.Image:
    """Gradient with a grid, so resampling differences are visible."""
    img = Image.new(mode, (width, height), color=(73, 109, 137) if mode == "RGB" else (73, 109, 137, 255))
    draw = ImageDraw.Draw(img)
    for x in range(0, width, 10):
        draw.line([(x, 0), (x, height)], fill=(255, 255, 255) if mode == "RGB" else (255, 255, 255, 255), width=1)
    for y in range(0, height, 10):
        draw.line([(0, y), (width, y)], fill=(200, 100, 100) if mode == "RGB" else (200, 100, 100, 128), width=1)
    return img


@pytest.fixture
def landscape_image() -> Image.Image:
    """200x100 RGB image."""
    return make_image(200, 100)


@pytest.fixture
def square_image() -> Image.Image:
    """50x50 RGB image."""
    return make_image(50, 50)


@pytest.fixture
def rgba_image() -> Image.Image:
    """120x80 RGBA image with semi-transparent lines."""
    return make_image(120, 80, mode="RGBA")


@pytest.fixture
def jpeg_bytes(landscape_image: Image.Image) -> bytes:
    buffer = BytesIO()
    landscape_image.save(buffer, "JPEG", quality=90)
    return buffer.getvalue()


@pytest.fixture
def png_bytes(rgba_image: Image.Image) -> bytes:
    buffer = BytesIO()
    rgba_image.save(buffer, "PNG")
    return buffer.getvalue()


@pytest.fixture
def jpeg_file(tmp_path: Path, jpeg_bytes: bytes) -> Path:
    path = tmp_path / "input.jpg"
    _ = path.write_bytes(jpeg_bytes)
    return path


def open_output(data: bytes) -> Image.Image:
    img = Image.open(BytesIO(data))
    img.load()
    return img


@pytest.fixture
def decode() -> Callable[[bytes], Image.Image]:
    """Decode encoded output bytes into a loaded PIL image."""
    return open_output


# ============================================================================
# Fake worker transports
# ============================================================================


class FakeTransport(WorkerTransport):
    """Synchronous in-process transport with scriptable misbehaviour.

    Args:
        respond_to_probe: Answer probes at all
        fail_on_start: Raise from start()
        fail_renders: Answer render requests with an error payload
        duplicate: Deliver each response twice
        stray_ids: Extra response ids to deliver before each real response
        hold: Keep render requests instead of answering them
    """

    def __init__(
        self,
        *,
        respond_to_probe: bool = True,
        fail_on_start: bool = False,
        fail_renders: bool = False,
        duplicate: bool = False,
        stray_ids: tuple[int, ...] = (),
        hold: bool = False,
    ):
        self.respond_to_probe: bool = respond_to_probe
        self.fail_on_start: bool = fail_on_start
        self.fail_renders: bool = fail_renders
        self.duplicate: bool = duplicate
        self.stray_ids: tuple[int, ...] = stray_ids
        self.hold: bool = hold

        self.posted: list[WorkerRequest] = []
        self.held: list[WorkerRequest] = []
        self.started: bool = False
        self.closed: bool = False
        self.on_message: MessageHandler | None = None
        self.on_error: ErrorHandler | None = None

    @override
    def start(self, on_message: MessageHandler, on_error: ErrorHandler) -> None:
        if self.fail_on_start:
            raise RuntimeError("cannot spawn worker")
        self.started = True
        self.on_message = on_message
        self.on_error = on_error

    @override
    def post(self, request: WorkerRequest) -> None:
        assert self.on_message is not None
        self.posted.append(request)

        if request.probe:
            if self.respond_to_probe:
                self.on_message(WorkerResponse(id=request.id))
            return

        if self.hold:
            self.held.append(request)
            return

        for stray in self.stray_ids:
            self.on_message(WorkerResponse(id=stray, error="stray"))

        if self.fail_renders:
            response = WorkerResponse(id=request.id, error="worker exploded")
        else:
            response = handle_request(request)

        self.on_message(response)
        if self.duplicate:
            self.on_message(WorkerResponse(id=request.id, error="duplicate"))

    def release(self) -> None:
        """Answer every held request."""
        assert self.on_message is not None
        held, self.held = self.held, []
        for request in held:
            self.on_message(handle_request(request))

    def crash(self, error: BaseException) -> None:
        assert self.on_error is not None
        self.on_error(error)

    @override
    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_transport_factory() -> Callable[..., FakeTransport]:
    """Build a FakeTransport with the given behaviour flags."""

    def factory(**kwargs: bool | tuple[int, ...]) -> FakeTransport:
        return FakeTransport(**kwargs)  # type: ignore[arg-type]

    return factory
