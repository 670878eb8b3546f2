"""Public resize entry points."""

from collections.abc import Mapping

import httpx
from loguru import logger

from .algo.geometry import resolve_fit
from .common.schemas import ResizeOptions, ResizeResult
from .common.settings import ResizeSettings
from .executor import render
from .options import normalize_options
from .sources import resolve_source
from .worker.channel import WorkerChannel


async def resize_with_report(
    source: object,
    options: Mapping[str, object] | ResizeOptions | None = None,
    *,
    settings: ResizeSettings | None = None,
    client: httpx.AsyncClient | None = None,
    channel: WorkerChannel | None = None,
) -> ResizeResult:
    """
    Resize ``source`` and report how the output was produced.

    Args:
        source: Anything ``resolve_source`` accepts
        options: Resize options (see ``normalize_options``)
        settings: Optional settings; defaults to the environment
        client: Optional httpx client for remote URL sources
        channel: Optional worker channel; defaults to the process-wide one

    Returns:
        ResizeResult with encoded bytes, geometry, strategy and fallback info

    Raises:
        ConfigError: If no source is given
        UnsupportedSourceError / EmptySourceError: If the source cannot be resolved
        GeometryError: If dimensions are unknown or exceed a format cap
        RenderError / EncodeError: If direct rendering fails
    """
    opts = normalize_options(options)
    resolved = await resolve_source(source, client=client, settings=settings)
    geometry = resolve_fit(opts, resolved.dimensions)

    logger.debug(
        f"Resizing {geometry.source_width}x{geometry.source_height} -> "
        f"canvas {geometry.canvas_width}x{geometry.canvas_height} "
        f"({opts.fit}, {opts.output_type})"
    )

    outcome = await render(resolved.image, geometry, opts, settings=settings, channel=channel)

    return ResizeResult(
        data=outcome.data,
        geometry=geometry,
        strategy=outcome.strategy,
        smoothing=outcome.smoothing,
        fallback_reason=outcome.fallback_reason,
    )


async def resize(
    source: object,
    options: Mapping[str, object] | ResizeOptions | None = None,
    *,
    settings: ResizeSettings | None = None,
) -> bytes:
    """Resize ``source`` and return the encoded image bytes."""
    result = await resize_with_report(source, options, settings=settings)
    return result.data
