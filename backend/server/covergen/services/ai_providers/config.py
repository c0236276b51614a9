"""
Image provider configuration built from application settings
"""
from dataclasses import dataclass
from typing import Dict, Optional

from covergen.core.config import Settings, settings


@dataclass
class ProviderConfig:
    """Configuration for an image generation provider"""
    name: str
    api_key: Optional[str]
    model: Optional[str] = None
    timeout: Optional[float] = None
    project_id: Optional[str] = None
    location: str = "us-central1"

    def as_kwargs(self) -> Dict:
        """Constructor arguments for the provider class"""
        kwargs = {"api_key": self.api_key, "timeout": self.timeout}
        if self.name == "gemini" and self.model:
            kwargs["model"] = self.model
        if self.name == "imagen":
            kwargs["project_id"] = self.project_id
            kwargs["location"] = self.location
        return kwargs


def load_provider_config(provider_name: str, app_settings: Optional[Settings] = None) -> ProviderConfig:
    """
    Resolve the API key and options for a provider.

    Gemini reads GOOGLE_API_KEY; Imagen reads GOOGLE_IMAGEN_API_KEY and
    falls back to GEMINI_API_KEY. A missing key is reported by the provider
    when it is used, not here.
    """
    app_settings = app_settings or settings

    if provider_name == "imagen":
        return ProviderConfig(
            name="imagen",
            api_key=app_settings.GOOGLE_IMAGEN_API_KEY or app_settings.GEMINI_API_KEY,
            timeout=app_settings.PROVIDER_TIMEOUT_SECONDS,
            project_id=app_settings.GOOGLE_CLOUD_PROJECT_ID,
            location=app_settings.GOOGLE_CLOUD_LOCATION,
        )

    return ProviderConfig(
        name=provider_name,
        api_key=app_settings.GOOGLE_API_KEY,
        timeout=app_settings.PROVIDER_TIMEOUT_SECONDS,
    )
