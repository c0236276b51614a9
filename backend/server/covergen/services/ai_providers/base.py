"""
Base image generation provider interface and data models
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import requests
import structlog

from .exceptions import EndpointError, ProviderConfigurationError

logger = structlog.get_logger()

ERROR_BODY_LIMIT = 300


class ImageEncoding(str, Enum):
    """How a generated image payload is carried"""
    URL = "url"
    BASE64 = "base64"
    BYTES = "bytes"


class ModelClass(str, Enum):
    """Quality tier requested for a job"""
    NANO = "nano"
    BANANA = "banana"
    PRO = "pro"


@dataclass
class RawImage:
    """One image as returned by a provider, before decoding"""
    encoding: ImageEncoding
    data: Union[str, bytes]
    mime_type: str = "image/png"


@dataclass
class InlineImage:
    """An input image sent to a multimodal provider"""
    mime_type: str
    data: bytes


def resolve_model_class(model_name: Optional[str]) -> ModelClass:
    """Map a stored model identifier onto a quality tier"""
    name = model_name or ""
    if "pro" in name and "1.5-pro" not in name:
        return ModelClass.PRO
    if "banana" in name or "1.5-pro" in name:
        return ModelClass.BANANA
    return ModelClass.NANO


def _looks_like_html(text: str) -> bool:
    return "<!DOCTYPE" in text or "<html" in text


class ImageGenerationProvider(ABC):
    """Abstract base class for image generation providers"""

    def __init__(
        self,
        api_key: Optional[str],
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
        **kwargs
    ):
        self.api_key = api_key
        self.session = session or requests.Session()
        self.timeout = timeout
        self.config = kwargs

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of this provider"""
        pass

    @abstractmethod
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
        Generate cover images for a prompt

        Args:
            prompt: Fully built generation prompt
            model_class: Requested quality tier
            num_variations: Number of images requested
            aspect_ratio: Aspect ratio string such as "1:1" or "1024:500"
            target_store: Store identifier used for style hints
            reference_images: Style references for multimodal providers
            screenshots: App screenshots for multimodal providers

        Returns:
            List of raw images, possibly fewer than requested

        Raises:
            ProviderConfigurationError: If the API key is missing
            AIProviderError: If no image could be generated
        """
        pass

    def require_api_key(self) -> str:
        if not self.api_key:
            raise ProviderConfigurationError(
                f"No API key configured for image provider '{self.provider_name}'"
            )
        return self.api_key

    def _post_json(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST a JSON payload and return the decoded JSON body.

        Transport failures, non-2xx statuses, non-JSON bodies and
        unparseable JSON all raise EndpointError.
        """
        api_key = self.require_api_key()
        separator = "&" if "?" in url else "?"

        try:
            response = self.session.post(
                f"{url}{separator}key={api_key}",
                headers={"Content-Type": "application/json"},
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise EndpointError(f"Request to {url} failed: {e}") from e

        content_type = response.headers.get("content-type", "")

        if not 200 <= response.status_code < 300:
            error_text = response.text or ""
            if "application/json" not in content_type and _looks_like_html(error_text):
                error_text = (
                    f"API returned HTML instead of JSON. Status: {response.status_code}. "
                    "This usually means the endpoint doesn't exist or requires different authentication."
                )
            logger.warning(
                "Image provider endpoint returned an error",
                provider=self.provider_name,
                url=url,
                status_code=response.status_code
            )
            raise EndpointError(
                f"HTTP {response.status_code}: {error_text[:ERROR_BODY_LIMIT]}",
                status_code=response.status_code,
            )

        if "application/json" not in content_type:
            text = response.text or ""
            if _looks_like_html(text):
                raise EndpointError(
                    "API returned HTML instead of JSON. The endpoint URL, API key, region "
                    f"or model name is likely wrong. Response preview: {text[:200]}",
                    status_code=response.status_code,
                )
            raise EndpointError(f"Expected JSON but got {content_type or 'no content type'}")

        try:
            return response.json()
        except ValueError as e:
            raise EndpointError(f"Failed to parse JSON response: {(response.text or '')[:200]}") from e
