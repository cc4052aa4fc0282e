# backend/tubemaster/imaging.py

import asyncio
import base64
import io
import logging

from PIL import Image, UnidentifiedImageError

from .errors import DegradedInputError
from .logging_config import inc_metric
from .models import ImageAsset

log = logging.getLogger("tubemaster")

MAX_EDGE = 1024
JPEG_QUALITY = 70
DECODE_TIMEOUT_SECONDS = 4.0


def fit_within(width: int, height: int, max_edge: int = MAX_EDGE) -> tuple:
    """Scale (width, height) down so the longest edge is at most max_edge."""
    longest = max(width, height)
    if longest <= max_edge:
        return width, height
    scale = max_edge / longest
    return max(1, round(width * scale)), max(1, round(height * scale))


def _normalize_sync(asset: ImageAsset, max_edge: int, quality: int) -> ImageAsset:
    try:
        with Image.open(io.BytesIO(asset.raw_bytes())) as img:
            img.load()
            rgba = img.convert("RGBA")
    except (UnidentifiedImageError, OSError, ValueError, Image.DecompressionBombError) as e:
        raise DegradedInputError(f"Could not decode image: {e}") from e

    size = fit_within(rgba.width, rgba.height, max_edge)
    if size != rgba.size:
        rgba = rgba.resize(size, Image.Resampling.LANCZOS)

    # JPEG has no alpha; flatten onto white.
    canvas = Image.new("RGB", rgba.size, (255, 255, 255))
    canvas.paste(rgba, mask=rgba.getchannel("A"))

    buf = io.BytesIO()
    canvas.save(buf, format="JPEG", quality=quality, optimize=True)
    return ImageAsset(
        mime_type="image/jpeg",
        data=base64.b64encode(buf.getvalue()).decode("ascii"),
        width=canvas.width,
        height=canvas.height,
    )


async def normalize_image(
    asset: ImageAsset,
    *,
    max_edge: int = MAX_EDGE,
    quality: int = JPEG_QUALITY,
    timeout: float = DECODE_TIMEOUT_SECONDS,
) -> ImageAsset:
    """
    Downsample and re-encode an image for the vision model.

    Fails open: if decoding fails or takes longer than `timeout` seconds the
    original asset is returned untouched.
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(_normalize_sync, asset, max_edge, quality),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        log.warning("Image normalization timed out after %.1fs, sending original", timeout)
        inc_metric("image_normalize_fallbacks")
        return asset
    except DegradedInputError as e:
        log.warning("Image normalization failed, sending original: %s", e)
        inc_metric("image_normalize_fallbacks")
        return asset
