"""
Configuration settings for the CoverGen backend
"""
import os
from typing import List, Optional
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


class Settings(BaseSettings):
    # API Configuration
    API_V1_STR: str = "/api/v1"
    PROJECT_NAME: str = "CoverGen Backend"
    VERSION: str = "0.1.0"

    # Database Configuration
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_DB: str = "covergen"
    POSTGRES_PORT: str = "5432"
    DATABASE_URL_OVERRIDE: Optional[str] = os.getenv("DATABASE_URL")

    @property
    def DATABASE_URL(self) -> str:
        if self.DATABASE_URL_OVERRIDE:
            return self.DATABASE_URL_OVERRIDE
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    # JWT Configuration
    SECRET_KEY: str = os.getenv("SECRET_KEY", "your-secret-key-change-in-production")
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    # CORS Configuration
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:8000"

    @property
    def CORS_ORIGINS(self) -> List[str]:
        if isinstance(self.BACKEND_CORS_ORIGINS, str):
            return [origin.strip() for origin in self.BACKEND_CORS_ORIGINS.split(",")]
        return self.BACKEND_CORS_ORIGINS

    # Blob Storage Configuration
    STORAGE_DIR: str = os.getenv("STORAGE_DIR", "./storage")
    STORAGE_PROVIDER: str = "local"
    SIGNED_URL_TTL_SECONDS: int = 3600
    PUBLIC_BASE_URL: str = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000")
    MAX_FILE_SIZE: int = int(os.getenv("MAX_FILE_SIZE", "20000000"))  # 20MB
    ALLOWED_FILE_TYPES: List[str] = [".jpg", ".jpeg", ".png", ".webp"]

    # Image Provider Configuration
    DEFAULT_PROVIDER: str = os.getenv("DEFAULT_PROVIDER", "gemini")
    AVAILABLE_PROVIDERS: List[str] = ["gemini", "imagen"]
    GOOGLE_API_KEY: Optional[str] = os.getenv("GOOGLE_API_KEY")
    GEMINI_API_KEY: Optional[str] = os.getenv("GEMINI_API_KEY")
    GOOGLE_IMAGEN_API_KEY: Optional[str] = os.getenv("GOOGLE_IMAGEN_API_KEY")
    GOOGLE_CLOUD_PROJECT_ID: Optional[str] = os.getenv("GOOGLE_CLOUD_PROJECT_ID")
    GOOGLE_CLOUD_LOCATION: str = os.getenv("GOOGLE_CLOUD_LOCATION", "us-central1")
    PROVIDER_TIMEOUT_SECONDS: Optional[float] = None
    PROMPT_ENHANCEMENT_ENABLED: bool = True
    PROMPT_ENHANCEMENT_MODEL: str = "gemini-1.5-flash"

    # Generation limits
    MAX_JOBS_PER_USER: int = 5
    MAX_VARIATIONS: int = 10

    # Celery Configuration
    CELERY_BROKER_URL: str = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
    CELERY_RESULT_BACKEND: str = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/1")
    CELERY_TASK_ALWAYS_EAGER: bool = False

    class Config:
        case_sensitive = True
        env_file = ".env"
        extra = "ignore"


settings = Settings()
