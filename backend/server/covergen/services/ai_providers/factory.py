"""
Image provider factory
"""
from typing import Dict, List, Optional, Type

import requests

from .base import ImageGenerationProvider
from .config import ProviderConfig, load_provider_config
from .exceptions import ProviderConfigurationError


class AIProviderFactory:
    """Creates provider instances from an explicit configuration"""

    _providers: Dict[str, Type[ImageGenerationProvider]] = {}

    @classmethod
    def register_provider(cls, name: str, provider_class: Type[ImageGenerationProvider]):
        """Register a new provider class"""
        cls._providers[name] = provider_class

    @classmethod
    def create_provider(
        cls,
        config: ProviderConfig,
        session: Optional[requests.Session] = None,
    ) -> ImageGenerationProvider:
        """
        Create a provider instance

        Args:
            config: Provider configuration with API key and options
            session: HTTP session shared with the caller

        Returns:
            ImageGenerationProvider instance

        Raises:
            ProviderConfigurationError: If the provider name is not registered
        """
        if config.name not in cls._providers:
            available = ", ".join(cls._providers.keys())
            raise ProviderConfigurationError(
                f"Unsupported provider type: {config.name}. "
                f"Available providers: {available}"
            )

        provider_class = cls._providers[config.name]
        return provider_class(session=session, **config.as_kwargs())

    @classmethod
    def list_providers(cls) -> List[str]:
        """List all registered provider types"""
        return list(cls._providers.keys())


def create_provider_from_settings(
    provider_name: str,
    model: Optional[str] = None,
    session: Optional[requests.Session] = None,
) -> ImageGenerationProvider:
    """Provider factory used by the job orchestrator in production"""
    config = load_provider_config(provider_name)
    if model:
        config.model = model
    return AIProviderFactory.create_provider(config, session=session)
