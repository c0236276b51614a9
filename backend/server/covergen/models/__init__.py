# Database models
from covergen.models.user import User
from covergen.models.project import Project
from covergen.models.asset import Asset
from covergen.models.generation import GenerationJob, JobAsset
from covergen.models.output import GeneratedOutput
from covergen.models.enums import (
    TargetPlatform,
    TargetStore,
    AssetType,
    JobAssetRole,
    JobStatus,
    ErrorCode,
    CoverGoal,
)

__all__ = [
    "User",
    "Project",
    "Asset",
    "GenerationJob",
    "JobAsset",
    "GeneratedOutput",
    "TargetPlatform",
    "TargetStore",
    "AssetType",
    "JobAssetRole",
    "JobStatus",
    "ErrorCode",
    "CoverGoal",
]
