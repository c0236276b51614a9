"""
Identifier helpers
"""
import uuid
from typing import Optional, Union


def to_uuid(value: Union[str, uuid.UUID, None]) -> Optional[uuid.UUID]:
    """Coerce a string id to UUID; returns None for values that are not valid UUIDs"""
    if value is None or isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except ValueError:
        return None
