"""
Security utilities for password hashing, JWT access tokens and signed storage URLs
"""
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from passlib.context import CryptContext
from covergen.core.config import settings

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

STORAGE_TOKEN_SCOPE = "storage"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against its hash"""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Generate password hash"""
    return pwd_context.hash(password)


def create_access_token(subject: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token whose subject is the user id"""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    expire = datetime.now(timezone.utc) + expires_delta
    to_encode = {"sub": subject, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_token(token: str) -> Optional[str]:
    """Verify JWT access token and return the user id it was issued for"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None
    if payload.get("scope") == STORAGE_TOKEN_SCOPE:
        return None
    return payload.get("sub")


def create_storage_token(key: str, ttl_seconds: int) -> str:
    """Create a short-lived token that grants read access to one storage key"""
    expire = datetime.now(timezone.utc) + timedelta(seconds=ttl_seconds)
    to_encode = {"sub": key, "scope": STORAGE_TOKEN_SCOPE, "exp": expire}
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_storage_token(token: str, key: str) -> bool:
    """Check that a storage token is valid, unexpired and issued for the key"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return False
    return payload.get("scope") == STORAGE_TOKEN_SCOPE and payload.get("sub") == key
