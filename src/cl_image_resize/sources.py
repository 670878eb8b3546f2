"""Drawable resolution: turn any supported input into a loaded Pillow image.

Inputs are classified once, at the boundary, into a closed set of source
variants; the rest of the pipeline only ever sees a ``PIL.Image.Image``.
"""

import base64
import binascii
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from urllib.parse import unquote_to_bytes

import httpx
import numpy as np
from loguru import logger
from numpy.typing import NDArray
from PIL import Image, UnidentifiedImageError

from .common.errors import ConfigError, EmptySourceError, UnsupportedSourceError
from .common.schemas import SourceDimensions
from .common.settings import ResizeSettings, get_settings

# ---------------------------------------------------------------------------
# Source variants
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DecodedSurface:
    image: Image.Image


@dataclass(frozen=True)
class PixelBuffer:
    """Raw, uncompressed pixels.

    Either ``array`` (H x W [x C] uint8) or ``mode``/``size``/``data`` in the
    layout ``Image.frombytes`` expects.
    """

    mode: str = "RGBA"
    size: tuple[int, int] = (0, 0)
    data: bytes = b""
    array: NDArray[np.uint8] | None = None


@dataclass(frozen=True)
class EncodedBuffer:
    data: bytes


@dataclass(frozen=True)
class UrlSource:
    url: str


@dataclass(frozen=True)
class FileSource:
    path: Path


SourceVariant = DecodedSurface | PixelBuffer | EncodedBuffer | UrlSource | FileSource


@dataclass(frozen=True)
class ResolvedSource:
    image: Image.Image
    dimensions: SourceDimensions | None


def classify_source(source: object) -> SourceVariant:
    """Map a caller-supplied value onto one of the source variants.

    Raises:
        ConfigError: If no source was given
        UnsupportedSourceError: If the value is not a recognised kind
    """
    if source is None:
        raise ConfigError("Image is required")

    if isinstance(source, (DecodedSurface, PixelBuffer, EncodedBuffer, UrlSource, FileSource)):
        return source
    if isinstance(source, Image.Image):
        return DecodedSurface(source)
    if isinstance(source, np.ndarray):
        return PixelBuffer(array=source)
    if isinstance(source, (bytes, bytearray, memoryview)):
        return EncodedBuffer(bytes(source))
    if isinstance(source, BytesIO):
        return EncodedBuffer(source.getvalue())
    if isinstance(source, Path):
        return FileSource(source)
    if isinstance(source, str):
        if source.startswith(("http://", "https://", "data:")):
            return UrlSource(source)
        if source:
            return FileSource(Path(source))
        raise EmptySourceError("Image source is empty")

    raise UnsupportedSourceError(f"Cannot make drawable from {type(source).__name__}")


# ---------------------------------------------------------------------------
# Loaders
# ---------------------------------------------------------------------------


def _decode(data: bytes, what: str = "Blob") -> Image.Image:
    if not data:
        raise EmptySourceError(f"{what} is empty")
    try:
        image = Image.open(BytesIO(data))
        image.load()
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise UnsupportedSourceError("Image could not be loaded") from e
    if image.width <= 0 or image.height <= 0:
        raise EmptySourceError("Image is empty")
    return image


def _load_pixels(buffer: PixelBuffer) -> Image.Image:
    if buffer.array is not None:
        array = buffer.array
        if array.size == 0:
            raise EmptySourceError("Pixel buffer is empty")
        if array.dtype != np.uint8 or array.ndim not in (2, 3):
            raise UnsupportedSourceError(
                f"Unsupported pixel array {array.dtype} with shape {array.shape}"
            )
        if array.ndim == 3 and array.shape[2] not in (3, 4):
            raise UnsupportedSourceError(f"Unsupported channel count {array.shape[2]}")
        return Image.fromarray(array)

    if not buffer.data:
        raise EmptySourceError("Pixel buffer is empty")
    try:
        return Image.frombytes(buffer.mode, buffer.size, buffer.data)
    except ValueError as e:
        raise UnsupportedSourceError(f"Invalid pixel buffer: {e}") from e


def _decode_data_url(url: str) -> bytes:
    header, sep, payload = url.partition(",")
    if not sep:
        raise UnsupportedSourceError("Malformed data URL")
    if header.endswith(";base64"):
        try:
            return base64.b64decode(payload, validate=False)
        except (binascii.Error, ValueError) as e:
            raise UnsupportedSourceError("Malformed data URL") from e
    return unquote_to_bytes(payload)


async def _fetch(url: str, client: httpx.AsyncClient | None, timeout: float) -> bytes:
    logger.debug(f"Fetching image source {url}")
    try:
        if client is not None:
            response = await client.get(url, follow_redirects=True)
        else:
            async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as owned:
                response = await owned.get(url)
        _ = response.raise_for_status()
    except httpx.HTTPError as e:
        raise UnsupportedSourceError("Image could not be loaded") from e
    return response.content


def _load_file(path: Path) -> bytes:
    try:
        return path.expanduser().read_bytes()
    except FileNotFoundError as e:
        raise UnsupportedSourceError(f"Image file not found: {path}") from e
    except IsADirectoryError as e:
        raise UnsupportedSourceError(f"Image path is a directory: {path}") from e
    except OSError as e:
        raise UnsupportedSourceError(f"Image file could not be read: {path}") from e


async def load_variant(
    variant: SourceVariant,
    *,
    client: httpx.AsyncClient | None = None,
    settings: ResizeSettings | None = None,
) -> Image.Image:
    match variant:
        case DecodedSurface(image=image):
            return image
        case PixelBuffer():
            return _load_pixels(variant)
        case EncodedBuffer(data=data):
            return _decode(data)
        case UrlSource(url=url) if url.startswith("data:"):
            return _decode(_decode_data_url(url), "Image")
        case UrlSource(url=url):
            timeout = (settings or get_settings()).fetch_timeout
            return _decode(await _fetch(url, client, timeout), "Image")
        case FileSource(path=path):
            return _decode(_load_file(path), "Image file")
        case _:
            raise UnsupportedSourceError(f"Cannot make drawable from {type(variant).__name__}")


def get_image_dimensions(image: Image.Image) -> SourceDimensions | None:
    """Pixel size of ``image``, or None when it has no area."""
    width, height = image.size
    if width <= 0 or height <= 0:
        return None
    return SourceDimensions(width=width, height=height)


async def resolve_source(
    source: object,
    *,
    client: httpx.AsyncClient | None = None,
    settings: ResizeSettings | None = None,
) -> ResolvedSource:
    """
    Resolve ``source`` into a drawable image with known dimensions.

    Args:
        source: PIL image, numpy array, ``PixelBuffer``, encoded bytes,
            ``BytesIO``, URL (``http(s)://`` or ``data:``) or file path
        client: Optional httpx client used for remote URLs
        settings: Optional settings (fetch timeout)

    Returns:
        ResolvedSource with the loaded image and its dimensions (None for an
        already decoded surface without area; geometry rejects that)

    Raises:
        ConfigError: If ``source`` is None
        EmptySourceError: If the input has no bytes or no pixels
        UnsupportedSourceError: If the input kind is unknown or cannot be decoded
    """
    variant = classify_source(source)
    image = await load_variant(variant, client=client, settings=settings)
    return ResolvedSource(image=image, dimensions=get_image_dimensions(image))
