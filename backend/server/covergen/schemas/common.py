"""
Common schemas used across the application
"""
from typing import Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Body of every error response"""
    code: int
    message: Any
    details: Optional[Any] = None
