"""
Generation-related Pydantic schemas
"""
from typing import List, Optional, Dict, Any
from pydantic import BaseModel, Field, UUID4
from datetime import datetime

from covergen.models.enums import CoverGoal, JobAssetRole, TargetStore


class SelectedAsset(BaseModel):
    """An asset chosen in the wizard together with the role it plays"""
    asset_id: UUID4
    role: JobAssetRole


class VariantToggle(BaseModel):
    """A variant slot that can be switched on or off"""
    id: str
    enabled: bool = True


class JobConfig(BaseModel):
    """Wizard configuration used to build the prompt and critique"""
    target_store: TargetStore = TargetStore.APPSTORE
    goal: CoverGoal = CoverGoal.ATTENTION
    app_category: str = Field(default="mobile", max_length=100)
    main_message: str = Field(default="", max_length=500)
    style_preset: str = "minimal"
    selected_assets: List[SelectedAsset] = Field(default_factory=list)
    variants: List[VariantToggle] = Field(default_factory=list)

    def enabled_variants(self) -> List[VariantToggle]:
        return [variant for variant in self.variants if variant.enabled]


class JobCreateRequest(BaseModel):
    """Request schema for creating a job from the wizard configuration"""
    config: JobConfig
    model: Optional[str] = Field(default=None, description="Provider model name")
    provider: Optional[str] = Field(default=None, description="Image provider, defaults to the configured one")


class CritiqueIssue(BaseModel):
    severity: str  # error, warning, info
    category: str  # assets, layout, content, style, technical
    message: str
    suggestion: Optional[str] = None


class CritiqueResult(BaseModel):
    score: int = Field(..., ge=0, le=100)
    issues: List[CritiqueIssue]
    summary: str


class PromptPreview(BaseModel):
    """Prompt and critique for a configuration, without creating a job"""
    prompt: str
    aspect_ratio: str
    critique: CritiqueResult


class GenerationJob(BaseModel):
    """Generation job information"""
    id: UUID4
    project_id: UUID4
    user_id: UUID4
    status: str
    provider: str
    model: Optional[str] = None
    prompt: Optional[str] = None
    target_store: Optional[str] = None
    num_variations: int
    aspect_ratio: Optional[str] = None
    requested_outputs: Optional[Dict[str, Any]] = None
    critique: Optional[str] = None
    created_at: Optional[datetime] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
    error_message: Optional[str] = None
    error_code: Optional[str] = None

    class Config:
        from_attributes = True


class GenerationJobStatus(BaseModel):
    """Job status response for polling endpoints"""
    id: UUID4
    status: str
    output_count: int = 0
    error_message: Optional[str] = None
    error_code: Optional[str] = None


class GeneratedOutput(BaseModel):
    id: UUID4
    job_id: UUID4
    project_id: UUID4
    variant_index: int
    label: Optional[str] = None
    mime_type: Optional[str] = None
    size_bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    storage_key: str
    storage_provider: Optional[str] = None
    checksum_sha256: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
