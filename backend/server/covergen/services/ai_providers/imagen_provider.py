"""
Google Imagen provider: one batched request for all variations,
trying each known endpoint until one returns images
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import structlog

from .base import ImageGenerationProvider, InlineImage, ModelClass, RawImage
from .exceptions import EndpointError, ProviderExhaustedError
from .response_parser import detect_shapes, extract_images

logger = structlog.get_logger()

GENERATIVE_LANGUAGE_URL = "https://generativelanguage.googleapis.com/v1beta"

IMAGEN_MODELS = {
    ModelClass.NANO: "imagen-3.0-generate-001",
    ModelClass.BANANA: "imagen-3.0-generate-002",
    ModelClass.PRO: "imagen-3.0-generate-002",
}

IOS_STYLE_SUFFIX = (
    " iOS App Store cover style: minimal, clean, modern design with elegant typography. "
    "Square format. Professional, sophisticated aesthetic. High quality app store cover."
)
ANDROID_STYLE_SUFFIX = (
    " Google Play Store feature graphic style: vibrant, colorful, engaging design. "
    "Wide banner format 1024x500px. Eye-catching and dynamic. High quality play store feature graphic."
)


@dataclass
class Endpoint:
    name: str
    url: str
    body: Dict[str, Any]


def apply_store_style(prompt: str, target_store: Optional[str]) -> str:
    """Append the store-specific style hint to a prompt"""
    if target_store in ("ios", "appstore"):
        return prompt + IOS_STYLE_SUFFIX
    if target_store in ("android", "playstore"):
        return prompt + ANDROID_STYLE_SUFFIX
    return prompt


class ImagenProvider(ImageGenerationProvider):
    """Google Imagen via the Generative Language API, with Vertex AI as a second candidate"""

    def __init__(
        self,
        api_key: Optional[str],
        project_id: Optional[str] = None,
        location: str = "us-central1",
        **kwargs
    ):
        super().__init__(api_key, **kwargs)
        self.project_id = project_id
        self.location = location or "us-central1"

    @property
    def provider_name(self) -> str:
        return "imagen"

    def build_endpoints(self, model_name: str, prompt: str, num_variations: int, aspect_ratio: str) -> List[Endpoint]:
        """Ordered endpoint candidates; Vertex AI only when a cloud project is configured"""
        endpoints = [
            Endpoint(
                name="generativelanguage",
                url=f"{GENERATIVE_LANGUAGE_URL}/models/{model_name}:generateImages",
                body={
                    "prompt": prompt,
                    "number_of_images": num_variations,
                    "aspect_ratio": aspect_ratio,
                    "safety_filter_level": "block_some",
                },
            )
        ]
        if self.project_id:
            endpoints.append(Endpoint(
                name="vertex",
                url=(
                    f"https://{self.location}-aiplatform.googleapis.com/v1/projects/{self.project_id}"
                    f"/locations/{self.location}/publishers/google/models/{model_name}:predict"
                ),
                body={
                    "instances": [
                        {
                            "prompt": prompt,
                            "number_of_images": num_variations,
                            "aspect_ratio": aspect_ratio,
                        }
                    ],
                    "parameters": {"sampleCount": num_variations},
                },
            ))
        return endpoints

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
        """Generate all variations with one request per endpoint candidate"""
        self.require_api_key()
        model_name = IMAGEN_MODELS.get(model_class, IMAGEN_MODELS[ModelClass.NANO])
        styled_prompt = apply_store_style(prompt, target_store)
        endpoints = self.build_endpoints(model_name, styled_prompt, num_variations, aspect_ratio)

        last_error: Optional[Exception] = None
        for endpoint in endpoints:
            logger.info(
                "Calling Imagen endpoint",
                provider=self.provider_name,
                endpoint=endpoint.name,
                model=model_name,
                num_variations=num_variations
            )
            try:
                body = self._post_json(endpoint.url, endpoint.body)
            except EndpointError as e:
                logger.warning(
                    "Imagen endpoint failed",
                    provider=self.provider_name,
                    endpoint=endpoint.name,
                    error=str(e)
                )
                last_error = e
                continue

            images = extract_images(body)
            if images:
                logger.info(
                    "Imagen endpoint returned images",
                    provider=self.provider_name,
                    endpoint=endpoint.name,
                    image_count=len(images),
                    shapes=[shape.value for shape in detect_shapes(body)]
                )
                return images

            last_error = EndpointError(f"Endpoint {endpoint.name} returned no images")
            logger.warning(
                "Imagen endpoint returned no images",
                provider=self.provider_name,
                endpoint=endpoint.name
            )

        raise ProviderExhaustedError(
            "Failed to generate images with Google Imagen API. "
            f"Tried {len(endpoints)} endpoint(s). "
            f"Last error: {last_error if last_error else 'Unknown error'}.",
            attempts=len(endpoints),
            last_error=last_error,
        )
