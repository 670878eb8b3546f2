"""Pillow-backed drawing surface and encoder."""

from io import BytesIO

from loguru import logger
from PIL import Image, ImageColor, ImageFilter, features

from ..common.errors import EncodeError
from ..common.schemas import ICO_TYPES, JPEG_TYPES, Color

FALLBACK_FORMAT = "PNG"

MIME_TO_PIL: dict[str, str] = {
    "image/jpeg": "JPEG",
    "image/jpg": "JPEG",
    "image/png": "PNG",
    "image/webp": "WEBP",
    "image/gif": "GIF",
    "image/bmp": "BMP",
    "image/tiff": "TIFF",
    "image/avif": "AVIF",
    "image/vnd.microsoft.icon": "ICO",
    "image/x-icon": "ICO",
}

LOSSY_FORMATS = frozenset({"JPEG", "WEBP", "AVIF"})


def get_pil_format(output_type: str) -> str:
    """Map a MIME type to a Pillow format name.

    Unknown or unavailable formats map to PNG, the way a canvas encoder
    silently falls back for types it cannot produce.
    """
    fmt = MIME_TO_PIL.get(output_type.lower())
    if fmt is None:
        logger.warning(f"Unsupported output type {output_type!r}, encoding as {FALLBACK_FORMAT}")
        return FALLBACK_FORMAT
    if fmt == "AVIF" and not features.check("avif"):
        logger.warning(f"Pillow build has no AVIF support, encoding as {FALLBACK_FORMAT}")
        return FALLBACK_FORMAT
    return fmt


def create_surface(width: int, height: int, alpha: bool) -> Image.Image:
    if alpha:
        return Image.new("RGBA", (width, height), (0, 0, 0, 0))
    return Image.new("RGB", (width, height), (0, 0, 0))


def fill(surface: Image.Image, color: Color, x: int, y: int, width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        return
    rgba = ImageColor.getcolor(color, "RGBA") if isinstance(color, str) else color
    surface.paste(rgba if surface.mode == "RGBA" else rgba[:3], (x, y, x + width, y + height))  # pyright: ignore[reportArgumentType]


def draw(
    surface: Image.Image,
    drawable: Image.Image,
    x: int,
    y: int,
    width: int,
    height: int,
    resample: Image.Resampling = Image.Resampling.BILINEAR,
) -> None:
    """Scale ``drawable`` to ``width x height`` and paint it at ``(x, y)``.

    Offsets may be negative; whatever falls outside the surface is clipped.
    Zero-area draws do nothing.
    """
    if width <= 0 or height <= 0 or surface.width <= 0 or surface.height <= 0:
        return

    has_alpha = drawable.mode in ("RGBA", "LA", "PA") or (
        drawable.mode == "P" and "transparency" in drawable.info
    )
    source = drawable.convert("RGBA" if has_alpha else "RGB")
    if source.size != (width, height):
        source = source.resize((width, height), resample)

    if has_alpha:
        if surface.mode == "RGBA":
            layer = Image.new("RGBA", surface.size, (0, 0, 0, 0))
            layer.paste(source, (x, y))
            surface.alpha_composite(layer)
        else:
            surface.paste(source, (x, y), source)
    else:
        surface.paste(source if surface.mode == "RGB" else source.convert(surface.mode), (x, y))


def apply_blur(image: Image.Image, sigma: float) -> Image.Image:
    return image.filter(ImageFilter.GaussianBlur(sigma))


def encode(surface: Image.Image, output_type: str, quality: float) -> bytes:
    """
    Encode a surface to bytes.

    Args:
        surface: Rendered canvas
        output_type: MIME type of the output
        quality: 0..1, used by lossy formats only

    Returns:
        Encoded image bytes

    Raises:
        EncodeError: If Pillow cannot encode the surface or produced nothing
    """
    fmt = get_pil_format(output_type)

    image = surface
    if fmt == "JPEG" or output_type in JPEG_TYPES:
        image = image.convert("RGB")

    save_kwargs: dict[str, object] = {}
    if fmt in LOSSY_FORMATS:
        save_kwargs["quality"] = max(0, min(100, round(quality * 100)))
    if fmt == "ICO" or output_type in ICO_TYPES:
        save_kwargs["sizes"] = [image.size]

    buffer = BytesIO()
    try:
        image.save(buffer, format=fmt, **save_kwargs)
    except (OSError, ValueError, SystemError) as e:
        raise EncodeError("Could not create Blob") from e

    data = buffer.getvalue()
    if not data:
        raise EncodeError("Could not create Blob")
    return data
