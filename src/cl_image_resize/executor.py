"""Render executor: worker strategy first, direct strategy as fallback."""

from dataclasses import dataclass, replace

from loguru import logger
from PIL import Image

from .algo.render import render_to_bytes
from .common.errors import ChannelBootstrapError, EncodeError, RenderError
from .common.schemas import FitGeometry, RenderStrategy, ResizeOptions, SmoothingOutcome
from .common.settings import ResizeSettings, get_settings
from .worker.channel import WorkerChannel
from .worker.channel_instance import get_worker_channel


@dataclass(frozen=True)
class RenderOutcome:
    data: bytes
    strategy: RenderStrategy
    smoothing: SmoothingOutcome
    fallback_reason: str | None = None


async def render_direct(drawable: Image.Image, geometry: FitGeometry, options: ResizeOptions) -> RenderOutcome:
    """Render and encode on the calling thread.

    Raises:
        EncodeError: If the surface cannot be encoded
        RenderError: If drawing fails
    """
    try:
        encoded = render_to_bytes(drawable, geometry, options)
    except EncodeError:
        raise
    except (ValueError, OSError) as e:
        raise RenderError(f"Render failed: {e}") from e
    return RenderOutcome(encoded.data, RenderStrategy.DIRECT, encoded.smoothing)


async def render_with_worker(
    channel: WorkerChannel,
    drawable: Image.Image,
    geometry: FitGeometry,
    options: ResizeOptions,
) -> RenderOutcome:
    """Render on the background worker.

    The worker gets its own decoded snapshot of ``drawable`` so the caller's
    image stays usable. The snapshot is closed whether or not the round trip
    succeeds.
    """
    await channel.ensure_ready()

    snapshot = drawable.copy()
    try:
        response = await channel.request(snapshot, geometry, options)
    finally:
        snapshot.close()

    if not response.result:
        raise EncodeError("Could not create Blob")
    return RenderOutcome(
        response.result,
        RenderStrategy.WORKER,
        response.smoothing or SmoothingOutcome.NOT_REQUESTED,
    )


async def render(
    drawable: Image.Image,
    geometry: FitGeometry,
    options: ResizeOptions,
    *,
    settings: ResizeSettings | None = None,
    channel: WorkerChannel | None = None,
) -> RenderOutcome:
    """
    Produce encoded bytes for one resize.

    The worker strategy is tried first unless disabled or permanently
    failed. Any failure on that path is recorded as ``fallback_reason`` and
    the direct strategy renders the same request instead.

    Args:
        drawable: Resolved source image
        geometry: Resolved fit geometry
        options: Canonical options
        settings: Optional settings; defaults to the environment
        channel: Optional channel; defaults to the process-wide one

    Returns:
        RenderOutcome with the encoded bytes and the strategy that produced them

    Raises:
        RenderError: If the direct strategy fails to draw
        EncodeError: If the direct strategy fails to encode
    """
    settings = settings or get_settings()
    fallback_reason: str | None = None

    if settings.use_worker:
        channel = channel or get_worker_channel(settings)
        if channel.failed:
            fallback_reason = f"worker unavailable: {channel.error}"
        else:
            try:
                return await render_with_worker(channel, drawable, geometry, options)
            except ChannelBootstrapError as e:
                fallback_reason = f"worker unavailable: {e}"
            except (RenderError, EncodeError) as e:
                fallback_reason = f"worker render failed: {e}"
            except Exception as e:
                fallback_reason = f"worker render failed: {type(e).__name__}: {e}"
            logger.warning(f"Falling back to direct rendering ({fallback_reason})")

    outcome = await render_direct(drawable, geometry, options)
    return replace(outcome, fallback_reason=fallback_reason)
