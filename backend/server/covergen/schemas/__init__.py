# Pydantic schemas
from covergen.schemas.user import User, UserCreate, UserLogin, Token
from covergen.schemas.project import Project, ProjectCreate, ProjectUpdate
from covergen.schemas.asset import Asset, SignedUrl
from covergen.schemas.generation import (
    SelectedAsset, VariantToggle, JobConfig, JobCreateRequest,
    CritiqueIssue, CritiqueResult, PromptPreview,
    GenerationJob, GenerationJobStatus, GeneratedOutput,
)
from covergen.schemas.common import ErrorResponse

__all__ = [
    # User schemas
    "User", "UserCreate", "UserLogin", "Token",
    # Project schemas
    "Project", "ProjectCreate", "ProjectUpdate",
    # Asset schemas
    "Asset", "SignedUrl",
    # Generation schemas
    "SelectedAsset", "VariantToggle", "JobConfig", "JobCreateRequest",
    "CritiqueIssue", "CritiqueResult", "PromptPreview",
    "GenerationJob", "GenerationJobStatus", "GeneratedOutput",
    # Common schemas
    "ErrorResponse",
]
