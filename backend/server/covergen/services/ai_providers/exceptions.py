"""
AI Provider specific exceptions
"""
from typing import Optional


class AIProviderError(Exception):
    """Base exception for AI provider errors"""
    pass


class ProviderConfigurationError(AIProviderError):
    """Raised when a provider is missing its API key or other required settings"""
    pass


class EndpointError(AIProviderError):
    """Raised when one endpoint candidate fails; the caller may try the next one"""
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ProviderExhaustedError(AIProviderError):
    """Raised when every endpoint candidate failed to produce an image"""
    def __init__(self, message: str, attempts: int = 0, last_error: Optional[Exception] = None):
        super().__init__(message)
        self.attempts = attempts
        self.last_error = last_error


class InvalidImageError(AIProviderError):
    """Raised when image format or content is invalid"""
    pass
