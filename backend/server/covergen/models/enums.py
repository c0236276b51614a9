"""
Enums for the CoverGen backend
"""
import enum


class TargetPlatform(str, enum.Enum):
    IOS = "ios"
    ANDROID = "android"
    BOTH = "both"


class TargetStore(str, enum.Enum):
    APPSTORE = "appstore"
    PLAYSTORE = "playstore"
    BOTH = "both"


class AssetType(str, enum.Enum):
    REFERENCE_COVER = "reference_cover"
    APP_SCREENSHOT = "app_screenshot"
    BRAND_LOGO = "brand_logo"
    OTHER = "other"


class JobAssetRole(str, enum.Enum):
    REFERENCE_COVER = "reference_cover"
    APP_SCREENSHOT = "app_screenshot"
    BRAND_LOGO = "brand_logo"


class JobStatus(str, enum.Enum):
    QUEUED = "queued"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ErrorCode(str, enum.Enum):
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    STORAGE_ERROR = "STORAGE_ERROR"
    DATABASE_ERROR = "DATABASE_ERROR"
    GENERATION_ERROR = "GENERATION_ERROR"


class CoverGoal(str, enum.Enum):
    ATTENTION = "attention"
    CLARITY = "clarity"
    TRUST = "trust"
    PREMIUM = "premium"
    PLAYFUL = "playful"
