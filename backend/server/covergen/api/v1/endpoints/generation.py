"""
Generation job and output endpoints
"""
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session
from typing import List
from uuid import UUID
from covergen.core.config import settings
from covergen.core.deps import get_blob_storage, get_current_user
from covergen.db.session import get_db
from covergen.models.user import User
from covergen.schemas.asset import SignedUrl
from covergen.schemas.generation import (
    GeneratedOutput as GeneratedOutputSchema,
    GenerationJob as GenerationJobSchema,
    GenerationJobStatus,
    JobConfig,
    JobCreateRequest,
    PromptPreview,
)
from covergen.services.generation import GenerationService
from covergen.services.storage import BlobStorage
from covergen.workers.generation import dispatch_generation_job

router = APIRouter()


@router.get("/providers")
async def get_ai_providers():
    """
    List the image providers jobs can use
    """
    return {"providers": settings.AVAILABLE_PROVIDERS, "default": settings.DEFAULT_PROVIDER}


@router.post("/projects/{project_id}/jobs/preview", response_model=PromptPreview)
async def preview_job(
    project_id: UUID,
    config: JobConfig,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Build the prompt and critique for a wizard configuration without creating a job
    """
    generation_service = GenerationService(db)
    return generation_service.preview(project_id, current_user.id, config)


@router.post("/projects/{project_id}/jobs", response_model=GenerationJobSchema, status_code=status.HTTP_202_ACCEPTED)
async def create_job(
    project_id: UUID,
    request: JobCreateRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a generation job from a wizard configuration and queue it.
    Returns 202 Accepted; poll the job to follow its status.
    """
    generation_service = GenerationService(db)
    job = generation_service.create_job(project_id, current_user.id, request)
    dispatch_generation_job(job.id)
    return job


@router.get("/projects/{project_id}/jobs", response_model=List[GenerationJobSchema])
async def get_project_jobs(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    generation_service = GenerationService(db)
    return generation_service.get_project_jobs(project_id, current_user.id)


@router.get("/jobs/{job_id}", response_model=GenerationJobSchema)
async def get_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    generation_service = GenerationService(db)
    return generation_service.get_job(job_id, current_user.id)


@router.get("/jobs/{job_id}/status", response_model=GenerationJobStatus)
async def get_job_status(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Lightweight status for polling
    """
    generation_service = GenerationService(db)
    job = generation_service.get_job(job_id, current_user.id)
    return GenerationJobStatus(
        id=job.id,
        status=job.status,
        output_count=generation_service.count_job_outputs(job.id),
        error_message=job.error_message,
        error_code=job.error_code
    )


@router.post("/jobs/{job_id}/generate", response_model=GenerationJobSchema, status_code=status.HTTP_202_ACCEPTED)
async def start_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Start generation for a job. Failed and cancelled jobs are restarted first.
    """
    generation_service = GenerationService(db)
    job = generation_service.prepare_start(job_id, current_user.id)
    dispatch_generation_job(job.id)
    return job


@router.post("/jobs/{job_id}/restart", response_model=GenerationJobSchema, status_code=status.HTTP_202_ACCEPTED)
async def restart_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Requeue a failed or cancelled job
    """
    generation_service = GenerationService(db)
    job = generation_service.restart_job(job_id, current_user.id)
    dispatch_generation_job(job.id)
    return job


@router.patch("/jobs/{job_id}/cancel", response_model=GenerationJobSchema)
async def cancel_job(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Cancel a queued or running job. A running job stops before its next variant.
    """
    generation_service = GenerationService(db)
    return generation_service.cancel_job(job_id, current_user.id)


@router.get("/jobs/{job_id}/outputs", response_model=List[GeneratedOutputSchema])
async def get_job_outputs(
    job_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    generation_service = GenerationService(db)
    return generation_service.get_job_outputs(job_id, current_user.id)


@router.get("/projects/{project_id}/outputs", response_model=List[GeneratedOutputSchema])
async def get_project_outputs(
    project_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    generation_service = GenerationService(db)
    return generation_service.get_project_outputs(project_id, current_user.id)


@router.get("/outputs/{output_id}/signed-url", response_model=SignedUrl)
async def get_output_signed_url(
    output_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    generation_service = GenerationService(db)
    output = generation_service.get_output(output_id, current_user.id)
    url = storage.create_signed_url(output.storage_key, settings.SIGNED_URL_TTL_SECONDS)
    return SignedUrl(url=url, expires_in=settings.SIGNED_URL_TTL_SECONDS)


@router.delete("/outputs/{output_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_output(
    output_id: UUID,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    storage: BlobStorage = Depends(get_blob_storage)
):
    generation_service = GenerationService(db)
    generation_service.delete_output(output_id, current_user.id, storage)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
