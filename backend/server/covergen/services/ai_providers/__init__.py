"""
Image generation provider layer
"""
from .base import ImageGenerationProvider, ImageEncoding, InlineImage, ModelClass, RawImage, resolve_model_class
from .config import ProviderConfig, load_provider_config
from .exceptions import (
    AIProviderError,
    EndpointError,
    InvalidImageError,
    ProviderConfigurationError,
    ProviderExhaustedError,
)
from .factory import AIProviderFactory, create_provider_from_settings
from .response_parser import ResponseShape, detect_shapes, extract_images
from .prompt_enhancer import PromptEnhancer

from .imagen_provider import ImagenProvider
from .gemini_provider import GeminiImageProvider

# Register providers
AIProviderFactory.register_provider("imagen", ImagenProvider)
AIProviderFactory.register_provider("gemini", GeminiImageProvider)

__all__ = [
    "ImageGenerationProvider",
    "ImageEncoding",
    "InlineImage",
    "ModelClass",
    "RawImage",
    "resolve_model_class",
    "ProviderConfig",
    "load_provider_config",
    "AIProviderError",
    "EndpointError",
    "InvalidImageError",
    "ProviderConfigurationError",
    "ProviderExhaustedError",
    "AIProviderFactory",
    "create_provider_from_settings",
    "ResponseShape",
    "detect_shapes",
    "extract_images",
    "PromptEnhancer",
    "ImagenProvider",
    "GeminiImageProvider",
]
