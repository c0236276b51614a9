"""
Google Gemini image provider: multimodal, one request per variation
"""
import base64
from typing import Any, Dict, List, Optional

import structlog

from .base import ImageGenerationProvider, InlineImage, ModelClass, RawImage
from .exceptions import AIProviderError
from .response_parser import ResponseShape, extract_images

logger = structlog.get_logger()

GEMINI_IMAGE_MODEL = "gemini-2.5-flash-image"
GENERATIVE_LANGUAGE_URL = "https://generativelanguage.googleapis.com/v1beta"

GENERATION_CONFIG = {
    "temperature": 0.7,
    "topK": 40,
    "topP": 0.95,
    "maxOutputTokens": 8192,
}


def _inline_part(image: InlineImage) -> Dict[str, Any]:
    return {
        "inlineData": {
            "mimeType": image.mime_type,
            "data": base64.b64encode(image.data).decode("ascii"),
        }
    }


def build_image_prompt(prompt: str, aspect_ratio: str) -> str:
    """Add the aspect ratio hint and the no-text directive"""
    if aspect_ratio == "1:1":
        prompt += " Square format, 1024x1024px. Perfect for App Store covers."
    elif aspect_ratio == "1024:500":
        prompt += " Wide banner format, 1024x500px. Perfect for Play Store feature graphics."
    prompt += " High quality, professional app store cover design. No text overlays in the image itself."
    return prompt


class GeminiImageProvider(ImageGenerationProvider):
    """Gemini image generation through generateContent"""

    def __init__(self, api_key: Optional[str], model: str = GEMINI_IMAGE_MODEL, **kwargs):
        super().__init__(api_key, **kwargs)
        self.model = model or GEMINI_IMAGE_MODEL

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def endpoint(self) -> str:
        return f"{GENERATIVE_LANGUAGE_URL}/models/{self.model}:generateContent"

    def build_request(
        self,
        prompt: str,
        aspect_ratio: str,
        reference_images: Optional[List[InlineImage]] = None,
        screenshots: Optional[List[InlineImage]] = None,
    ) -> Dict[str, Any]:
        # Reference images first, then screenshots, then the text prompt
        parts = [_inline_part(image) for image in reference_images or []]
        parts.extend(_inline_part(image) for image in screenshots or [])
        parts.append({"text": build_image_prompt(prompt, aspect_ratio)})
        return {
            "contents": [{"role": "user", "parts": parts}],
            "generationConfig": dict(GENERATION_CONFIG),
        }

    def generate(
        self,
        prompt: str,
        model_class: ModelClass,
        num_variations: int,
        aspect_ratio: str,
        target_store: Optional[str] = None,
        reference_images: Optional[List[InlineImage]] = None,
        screenshots: Optional[List[InlineImage]] = None,
    ) -> List[RawImage]:
        """
        Issue one request per variation, sequentially.

        A failure on the first variation aborts the call. Later failures are
        logged and skipped so already generated variants are kept.
        """
        self.require_api_key()
        payload = self.build_request(prompt, aspect_ratio, reference_images, screenshots)
        images: List[RawImage] = []

        for index in range(num_variations):
            try:
                body = self._post_json(self.endpoint, payload)
            except AIProviderError as e:
                if index == 0:
                    raise AIProviderError(
                        f"Failed to generate images with Gemini API (model: {self.model}): {e}"
                    ) from e
                logger.warning(
                    "Gemini variation failed, continuing with remaining variations",
                    provider=self.provider_name,
                    variation=index + 1,
                    error=str(e)
                )
                continue

            variation_images = extract_images(body, shapes=[ResponseShape.CANDIDATES])
            if not variation_images:
                logger.warning(
                    "No images returned for variation",
                    provider=self.provider_name,
                    variation=index + 1
                )
            images.extend(variation_images)

        if not images:
            raise AIProviderError(
                f"Gemini API did not return any images. Model: {self.model}. "
                "The model may not support image generation or the prompt needs adjustment."
            )

        logger.info(
            "Gemini generation finished",
            provider=self.provider_name,
            model=self.model,
            requested=num_variations,
            returned=len(images)
        )
        return images
