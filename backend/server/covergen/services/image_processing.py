"""
Image post-processing: payload decoding, cover-fit resize and PNG encoding
"""
import base64
import binascii
import io
from typing import Optional, Tuple

import requests
from PIL import Image, ImageOps, UnidentifiedImageError

from covergen.services.ai_providers.base import ImageEncoding, RawImage
from covergen.services.ai_providers.exceptions import InvalidImageError
from covergen.services.prompt_builder import AspectRatio, get_aspect_ratio

OUTPUT_FORMAT = "PNG"
OUTPUT_MIME_TYPE = "image/png"


def decode_payload(
    raw: RawImage,
    session: Optional[requests.Session] = None,
    timeout: Optional[float] = None,
) -> bytes:
    """
    Turn a provider payload into image bytes.

    Strings are handled by content: data URLs are split and base64 decoded,
    http(s) URLs are fetched, anything else is treated as plain base64.
    """
    if raw.encoding == ImageEncoding.BYTES or isinstance(raw.data, (bytes, bytearray)):
        return bytes(raw.data)

    value = raw.data.strip()
    if value.startswith("data:"):
        _, _, value = value.partition(",")
    elif value.startswith(("http://", "https://")):
        session = session or requests.Session()
        try:
            response = session.get(value, timeout=timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise InvalidImageError(f"Failed to fetch generated image: {e}") from e
        return response.content

    try:
        return base64.b64decode(value, validate=False)
    except (binascii.Error, ValueError) as e:
        raise InvalidImageError(f"Invalid base64 image payload: {e}") from e


def read_dimensions(data: bytes, default: Tuple[int, int] = (1024, 1024)) -> Tuple[int, int]:
    """Pixel size of an encoded image, or the default when it cannot be read"""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width or default[0], img.height or default[1]
    except (UnidentifiedImageError, OSError, ValueError):
        return default


def detect_mime_type(data: bytes) -> Optional[str]:
    """MIME type from the image header, or None if Pillow cannot identify it"""
    try:
        with Image.open(io.BytesIO(data)) as img:
            return Image.MIME.get(img.format)
    except (UnidentifiedImageError, OSError, ValueError):
        return None


def cover_fit(data: bytes, size: AspectRatio) -> Tuple[bytes, int, int]:
    """Scale to fill the target box, crop the overflow around the center and encode PNG"""
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            has_alpha = "A" in img.getbands() or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")
            fitted = ImageOps.fit(
                img,
                (size.width, size.height),
                method=Image.LANCZOS,
                centering=(0.5, 0.5),
            )
            buffer = io.BytesIO()
            fitted.save(buffer, format=OUTPUT_FORMAT)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        raise InvalidImageError(f"Could not process generated image: {e}") from e

    return buffer.getvalue(), fitted.width, fitted.height


def normalize(data: bytes, target_store) -> Tuple[bytes, int, int]:
    """
    Resize a generated image to the canonical size for its store.

    Unknown stores get the square size. Returns (png_bytes, width, height).
    """
    return cover_fit(data, get_aspect_ratio(target_store))
