"""
Generation service for managing cover generation jobs and their outputs
"""
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple
from uuid import UUID

from sqlalchemy.orm import Session
import structlog

from covergen.core.config import settings
from covergen.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from covergen.models.asset import Asset
from covergen.models.enums import JobStatus
from covergen.models.generation import GenerationJob, JobAsset
from covergen.models.output import GeneratedOutput
from covergen.models.project import Project
from covergen.schemas.generation import CritiqueResult, JobConfig, JobCreateRequest, PromptPreview
from covergen.services.ai_providers.gemini_provider import GEMINI_IMAGE_MODEL
from covergen.services.ai_providers.imagen_provider import IMAGEN_MODELS
from covergen.services.ai_providers.base import ModelClass
from covergen.services.critique import count_selected_roles, critique_cover_config
from covergen.services.prompt_builder import build_cover_prompt, get_aspect_ratio
from covergen.services.storage import BlobStorage

logger = structlog.get_logger()

CANCELLED_MESSAGE = "Cancelled by user"

DEFAULT_MODELS = {
    "gemini": GEMINI_IMAGE_MODEL,
    "imagen": IMAGEN_MODELS[ModelClass.NANO],
}

CANCELLABLE_STATUSES = (JobStatus.QUEUED.value, JobStatus.RUNNING.value)
RESTARTABLE_STATUSES = (JobStatus.FAILED.value, JobStatus.CANCELLED.value)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class GenerationService:
    def __init__(self, db: Session):
        self.db = db

    # Job creation

    def _get_project(self, project_id: UUID, user_id: UUID) -> Project:
        project = self.db.query(Project).filter(
            Project.id == project_id, Project.user_id == user_id
        ).first()
        if not project:
            raise NotFoundError("Project not found")
        return project

    def _live_project_assets(self, project_id: UUID) -> List[Asset]:
        return (
            self.db.query(Asset)
            .filter(Asset.project_id == project_id, Asset.deleted_at.is_(None))
            .all()
        )

    def _live_selections(self, config: JobConfig, assets: List[Asset]):
        """Selections that point at live assets of the project, first role wins per asset"""
        live_ids = {asset.id for asset in assets}
        seen = set()
        selections = []
        for selection in config.selected_assets:
            if selection.asset_id not in live_ids:
                logger.warning("Ignoring selection of unknown or deleted asset", asset_id=str(selection.asset_id))
                continue
            if selection.asset_id in seen:
                continue
            seen.add(selection.asset_id)
            selections.append(selection)
        return selections

    def _prepare(self, project_id: UUID, user_id: UUID, config: JobConfig) -> Tuple[JobConfig, str, CritiqueResult]:
        self._get_project(project_id, user_id)
        assets = self._live_project_assets(project_id)
        selections = self._live_selections(config, assets)
        config = config.model_copy(update={"selected_assets": selections})
        prompt = build_cover_prompt(config, assets)
        critique = critique_cover_config(config, count_selected_roles(selections))
        return config, prompt, critique

    def preview(self, project_id: UUID, user_id: UUID, config: JobConfig) -> PromptPreview:
        """Prompt and critique for a configuration without creating a job"""
        config, prompt, critique = self._prepare(project_id, user_id, config)
        return PromptPreview(
            prompt=prompt,
            aspect_ratio=get_aspect_ratio(config.target_store).ratio,
            critique=critique,
        )

    def count_user_jobs(self, user_id: UUID) -> int:
        return self.db.query(GenerationJob).filter(GenerationJob.user_id == user_id).count()

    def create_job(self, project_id: UUID, user_id: UUID, request: JobCreateRequest) -> GenerationJob:
        """Create a queued job from a wizard configuration"""
        logger.info("create_job called", project_id=str(project_id), user_id=str(user_id))

        limit = settings.MAX_JOBS_PER_USER
        if limit and self.count_user_jobs(user_id) >= limit:
            logger.warning("Job limit reached", user_id=str(user_id), limit=limit)
            raise ForbiddenError(
                f"You have reached the maximum limit of {limit} generations. "
                "Please delete some generations to create new ones."
            )

        provider = request.provider or settings.DEFAULT_PROVIDER
        if provider not in settings.AVAILABLE_PROVIDERS:
            raise ValidationError(f"Unsupported provider: {provider}")

        enabled = request.config.enabled_variants()
        if not enabled:
            raise ValidationError("Enable at least one variant to generate covers")
        if len(enabled) > settings.MAX_VARIATIONS:
            raise ValidationError(f"At most {settings.MAX_VARIATIONS} variants can be generated per job")

        config, prompt, critique = self._prepare(project_id, user_id, request.config)
        config = config.model_copy(update={"variants": enabled})
        target_store = config.target_store.value

        job = GenerationJob(
            project_id=project_id,
            user_id=user_id,
            status=JobStatus.QUEUED.value,
            provider=provider,
            model=request.model or DEFAULT_MODELS.get(provider),
            prompt=prompt,
            target_store=target_store,
            num_variations=len(enabled),
            aspect_ratio=get_aspect_ratio(target_store).ratio,
            requested_outputs={"variants": [variant.id for variant in enabled]},
            job_config=config.model_dump(mode="json"),
            critique=critique.summary,
        )
        self.db.add(job)
        self.db.flush()

        for selection in config.selected_assets:
            self.db.add(JobAsset(job_id=job.id, asset_id=selection.asset_id, role=selection.role.value))

        self.db.commit()
        self.db.refresh(job)
        logger.info(
            "Generation job created",
            job_id=str(job.id),
            project_id=str(project_id),
            provider=provider,
            num_variations=job.num_variations,
            critique_score=critique.score
        )
        return job

    # Lookups

    def get_job_by_id(self, job_id: UUID) -> Optional[GenerationJob]:
        """Get generation job by ID (worker-only, bypasses user validation)"""
        return self.db.query(GenerationJob).filter(GenerationJob.id == job_id).first()

    def get_job(self, job_id: UUID, user_id: UUID) -> GenerationJob:
        """Get generation job for a specific user"""
        job = (
            self.db.query(GenerationJob)
            .filter(GenerationJob.id == job_id, GenerationJob.user_id == user_id)
            .first()
        )
        if not job:
            raise NotFoundError("Job not found")
        return job

    def get_current_status(self, job_id: UUID) -> Optional[str]:
        """Read the status straight from the database, bypassing the identity map"""
        row = self.db.query(GenerationJob.status).filter(GenerationJob.id == job_id).first()
        return row[0] if row else None

    def get_project_jobs(self, project_id: UUID, user_id: UUID) -> List[GenerationJob]:
        self._get_project(project_id, user_id)
        return (
            self.db.query(GenerationJob)
            .filter(GenerationJob.project_id == project_id)
            .order_by(GenerationJob.created_at.desc())
            .all()
        )

    def get_job_assets(self, job_id: UUID) -> List[Tuple[JobAsset, Asset]]:
        """Role snapshots of a job joined with their assets, skipping tombstoned assets"""
        return (
            self.db.query(JobAsset, Asset)
            .join(Asset, JobAsset.asset_id == Asset.id)
            .filter(JobAsset.job_id == job_id, Asset.deleted_at.is_(None))
            .all()
        )

    # Status transitions

    def _transition(self, job_id: UUID, from_statuses, values: Dict) -> bool:
        """Conditional UPDATE; returns True only if the row was in one of from_statuses"""
        updated = (
            self.db.query(GenerationJob)
            .filter(GenerationJob.id == job_id, GenerationJob.status.in_(from_statuses))
            .update(values, synchronize_session=False)
        )
        self.db.commit()
        return updated == 1

    def claim_job(self, job_id: UUID) -> bool:
        """queued -> running. Only one caller can win for a given job."""
        claimed = self._transition(
            job_id,
            (JobStatus.QUEUED.value,),
            {"status": JobStatus.RUNNING.value, "started_at": _now()},
        )
        logger.info("claim_job", job_id=str(job_id), claimed=claimed)
        return claimed

    def mark_succeeded(self, job_id: UUID) -> bool:
        """running -> succeeded; a cancellation recorded meanwhile is kept"""
        return self._transition(
            job_id,
            (JobStatus.RUNNING.value,),
            {"status": JobStatus.SUCCEEDED.value, "finished_at": _now()},
        )

    def mark_failed(self, job_id: UUID, message: str, error_code: str) -> bool:
        """running -> failed with the error recorded verbatim"""
        return self._transition(
            job_id,
            (JobStatus.RUNNING.value,),
            {
                "status": JobStatus.FAILED.value,
                "finished_at": _now(),
                "error_message": message,
                "error_code": error_code,
            },
        )

    def cancel_job(self, job_id: UUID, user_id: UUID) -> GenerationJob:
        """queued|running -> cancelled"""
        job = self.get_job(job_id, user_id)
        cancelled = self._transition(
            job.id,
            CANCELLABLE_STATUSES,
            {
                "status": JobStatus.CANCELLED.value,
                "finished_at": _now(),
                "error_message": CANCELLED_MESSAGE,
            },
        )
        self.db.refresh(job)
        if not cancelled:
            raise InvalidStateError(f"Cannot cancel job with status: {job.status}", current_status=job.status)
        logger.info("Job cancelled", job_id=str(job.id), user_id=str(user_id))
        return job

    def restart_job(self, job_id: UUID, user_id: UUID) -> GenerationJob:
        """failed|cancelled -> queued, clearing error fields and timestamps"""
        job = self.get_job(job_id, user_id)
        restarted = self._transition(
            job.id,
            RESTARTABLE_STATUSES,
            {
                "status": JobStatus.QUEUED.value,
                "error_message": None,
                "error_code": None,
                "started_at": None,
                "finished_at": None,
            },
        )
        self.db.refresh(job)
        if not restarted:
            raise InvalidStateError(f"Job is {job.status}, cannot restart", current_status=job.status)
        logger.info("Job restarted", job_id=str(job.id), user_id=str(user_id))
        return job

    def prepare_start(self, job_id: UUID, user_id: UUID) -> GenerationJob:
        """
        Make a job ready to be dispatched: queued jobs are left as is,
        failed and cancelled jobs are restarted first.
        """
        job = self.get_job(job_id, user_id)
        if job.status == JobStatus.QUEUED.value:
            return job
        if job.status in RESTARTABLE_STATUSES:
            return self.restart_job(job_id, user_id)
        raise InvalidStateError(f"Job is {job.status}, cannot regenerate", current_status=job.status)

    # Outputs

    def create_output(
        self,
        job: GenerationJob,
        output_id: UUID,
        variant_index: int,
        storage_key: str,
        mime_type: str,
        size_bytes: int,
        width: int,
        height: int,
        checksum_sha256: str,
        storage_provider: str,
    ) -> GeneratedOutput:
        output = GeneratedOutput(
            id=output_id,
            job_id=job.id,
            project_id=job.project_id,
            user_id=job.user_id,
            variant_index=variant_index,
            label=f"Variant {variant_index + 1}",
            mime_type=mime_type,
            size_bytes=size_bytes,
            width=width,
            height=height,
            storage_key=storage_key,
            storage_provider=storage_provider,
            checksum_sha256=checksum_sha256,
        )
        self.db.add(output)
        self.db.commit()
        return output

    def count_job_outputs(self, job_id: UUID) -> int:
        return self.db.query(GeneratedOutput).filter(GeneratedOutput.job_id == job_id).count()

    def get_job_outputs(self, job_id: UUID, user_id: UUID) -> List[GeneratedOutput]:
        job = self.get_job(job_id, user_id)
        return (
            self.db.query(GeneratedOutput)
            .filter(GeneratedOutput.job_id == job.id)
            .order_by(GeneratedOutput.variant_index)
            .all()
        )

    def get_project_outputs(self, project_id: UUID, user_id: UUID) -> List[GeneratedOutput]:
        self._get_project(project_id, user_id)
        return (
            self.db.query(GeneratedOutput)
            .filter(GeneratedOutput.project_id == project_id)
            .order_by(GeneratedOutput.created_at.desc(), GeneratedOutput.variant_index)
            .all()
        )

    def get_output(self, output_id: UUID, user_id: UUID) -> GeneratedOutput:
        output = (
            self.db.query(GeneratedOutput)
            .filter(GeneratedOutput.id == output_id, GeneratedOutput.user_id == user_id)
            .first()
        )
        if not output:
            raise NotFoundError("Output not found")
        return output

    def delete_output(self, output_id: UUID, user_id: UUID, storage: BlobStorage) -> None:
        """Delete the output blob, then its row"""
        output = self.get_output(output_id, user_id)
        storage.delete([output.storage_key])
        self.db.delete(output)
        self.db.commit()
        logger.info("Output deleted", output_id=str(output_id), user_id=str(user_id))
