"""
Response parser for image generation APIs.

The Google image endpoints answer in several JSON shapes depending on the
product surface that served the call. Each recognized shape has exactly one
extractor; a body that matches no shape yields no images.
"""
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from .base import ImageEncoding, RawImage

DEFAULT_MIME_TYPE = "image/png"


class ResponseShape(str, Enum):
    GENERATED_IMAGES = "generated_images"  # {"generatedImages": [...]}
    PREDICTIONS = "predictions"            # Vertex AI {"predictions": [...]}
    DIRECT = "direct"                      # top-level imageUri / url / base64
    CANDIDATES = "candidates"              # Gemini {"candidates": [{"content": {"parts": [...]}}]}


def _string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def _url(value: str) -> RawImage:
    return RawImage(encoding=ImageEncoding.URL, data=value, mime_type=DEFAULT_MIME_TYPE)


def _base64(value: str, mime_type: str = DEFAULT_MIME_TYPE) -> RawImage:
    return RawImage(encoding=ImageEncoding.BASE64, data=value, mime_type=mime_type)


def _from_generated_image(item: Dict[str, Any]) -> Optional[RawImage]:
    if _string(item.get("imageUri")):
        return _url(item["imageUri"])
    if _string(item.get("base64")):
        return _base64(item["base64"])
    if _string(item.get("url")):
        return _url(item["url"])
    if _string(item.get("bytesBase64Encoded")):
        return _base64(item["bytesBase64Encoded"])
    nested = item.get("image")
    if isinstance(nested, dict):
        encoded = _string(nested.get("imageBytes")) or _string(nested.get("bytesBase64Encoded"))
        if encoded:
            return _base64(encoded, _string(nested.get("mimeType")) or DEFAULT_MIME_TYPE)
    return None


def _from_prediction(item: Dict[str, Any]) -> Optional[RawImage]:
    if _string(item.get("bytesBase64Encoded")):
        return _base64(item["bytesBase64Encoded"], _string(item.get("mimeType")) or DEFAULT_MIME_TYPE)
    if _string(item.get("imageUri")):
        return _url(item["imageUri"])
    if _string(item.get("base64")):
        return _base64(item["base64"])
    return None


def _dict_items(values: Any) -> Iterable[Dict[str, Any]]:
    if not isinstance(values, list):
        return []
    return [value for value in values if isinstance(value, dict)]


def _extract_generated_images(body: Dict[str, Any]) -> List[RawImage]:
    images = (_from_generated_image(item) for item in _dict_items(body.get("generatedImages")))
    return [image for image in images if image is not None]


def _extract_predictions(body: Dict[str, Any]) -> List[RawImage]:
    images = (_from_prediction(item) for item in _dict_items(body.get("predictions")))
    return [image for image in images if image is not None]


def _extract_direct(body: Dict[str, Any]) -> List[RawImage]:
    images = []
    if _string(body.get("imageUri")):
        images.append(_url(body["imageUri"]))
    if _string(body.get("url")):
        images.append(_url(body["url"]))
    if _string(body.get("base64")):
        images.append(_base64(body["base64"]))
    return images


def _extract_candidates(body: Dict[str, Any]) -> List[RawImage]:
    images = []
    for candidate in _dict_items(body.get("candidates")):
        content = candidate.get("content")
        if not isinstance(content, dict):
            continue
        for part in _dict_items(content.get("parts")):
            inline = part.get("inlineData") or part.get("inline_data")
            if not isinstance(inline, dict):
                continue
            mime_type = _string(inline.get("mimeType")) or _string(inline.get("mime_type")) or ""
            data = _string(inline.get("data"))
            if mime_type.startswith("image/") and data:
                images.append(_base64(data, mime_type))
    return images


_EXTRACTORS: Dict[ResponseShape, Callable[[Dict[str, Any]], List[RawImage]]] = {
    ResponseShape.GENERATED_IMAGES: _extract_generated_images,
    ResponseShape.PREDICTIONS: _extract_predictions,
    ResponseShape.DIRECT: _extract_direct,
    ResponseShape.CANDIDATES: _extract_candidates,
}


def detect_shapes(body: Any) -> List[ResponseShape]:
    """Return every recognized shape present in a response body, in extraction order"""
    if not isinstance(body, dict):
        return []

    shapes = []
    if isinstance(body.get("generatedImages"), list):
        shapes.append(ResponseShape.GENERATED_IMAGES)
    if isinstance(body.get("predictions"), list):
        shapes.append(ResponseShape.PREDICTIONS)
    if any(_string(body.get(field)) for field in ("imageUri", "url", "base64")):
        shapes.append(ResponseShape.DIRECT)
    if isinstance(body.get("candidates"), list):
        shapes.append(ResponseShape.CANDIDATES)
    return shapes


def extract_images(body: Any, shapes: Optional[Iterable[ResponseShape]] = None) -> List[RawImage]:
    """
    Collect all images from a response body.

    Args:
        body: Decoded JSON response
        shapes: Restrict extraction to these shapes; defaults to every shape

    Returns:
        Images from each recognized shape, concatenated in shape order
    """
    allowed = set(shapes) if shapes is not None else set(ResponseShape)
    images: List[RawImage] = []
    for shape in detect_shapes(body):
        if shape in allowed:
            images.extend(_EXTRACTORS[shape](body))
    return images
