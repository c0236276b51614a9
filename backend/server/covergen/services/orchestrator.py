"""
Job orchestrator: drives one generation job from queued to a terminal status.

The orchestrator is the only writer of the running -> succeeded|failed
transitions. It never lets an exception escape without first recording
the failure on the job row.
"""
import hashlib
import uuid
from typing import Callable, List, Optional, Tuple, Union
from uuid import UUID

import requests
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
import structlog

from covergen.core.config import settings
from covergen.core.exceptions import NotFoundError, StorageError
from covergen.core.ids import to_uuid
from covergen.models.enums import ErrorCode, JobAssetRole, JobStatus
from covergen.models.generation import GenerationJob
from covergen.services.ai_providers import (
    AIProviderError,
    ImageGenerationProvider,
    InlineImage,
    InvalidImageError,
    PromptEnhancer,
    ProviderConfigurationError,
    RawImage,
    create_provider_from_settings,
    resolve_model_class,
)
from covergen.services.generation import GenerationService
from covergen.services.image_processing import OUTPUT_MIME_TYPE, decode_payload, normalize, read_dimensions
from covergen.services.prompt_builder import get_target_size_for_ratio
from covergen.services.storage import BlobStorage, output_storage_key

logger = structlog.get_logger()

ProviderFactory = Callable[..., ImageGenerationProvider]

REFERENCE_ROLES = (JobAssetRole.REFERENCE_COVER.value, JobAssetRole.BRAND_LOGO.value)
SCREENSHOT_ROLES = (JobAssetRole.APP_SCREENSHOT.value,)


def error_code_for(error: Exception) -> str:
    """Fixed error code recorded for a failure"""
    if isinstance(error, ProviderConfigurationError):
        return ErrorCode.CONFIGURATION_ERROR.value
    if isinstance(error, AIProviderError):
        return ErrorCode.PROVIDER_ERROR.value
    if isinstance(error, StorageError):
        return ErrorCode.STORAGE_ERROR.value
    if isinstance(error, SQLAlchemyError):
        return ErrorCode.DATABASE_ERROR.value
    return ErrorCode.GENERATION_ERROR.value


class JobOrchestrator:
    """Runs generation jobs against an injected provider factory and blob storage"""

    def __init__(
        self,
        db: Session,
        storage: BlobStorage,
        provider_factory: ProviderFactory = create_provider_from_settings,
        http_session: Optional[requests.Session] = None,
        enhancer: Optional[PromptEnhancer] = None,
        fetch_timeout: Optional[float] = None,
    ):
        self.db = db
        self.storage = storage
        self.provider_factory = provider_factory
        self.http_session = http_session or requests.Session()
        self.enhancer = enhancer
        self.fetch_timeout = fetch_timeout if fetch_timeout is not None else settings.PROVIDER_TIMEOUT_SECONDS
        self.jobs = GenerationService(db)

    def run(self, job_id: Union[UUID, str]) -> Optional[str]:
        """
        Claim and process a job.

        Returns the job status after the run, or None if the job does not exist.
        A job that is not queued is left untouched.
        """
        job_id = to_uuid(job_id)
        job = self.jobs.get_job_by_id(job_id) if job_id else None
        if job is None:
            logger.warning("Generation job not found", job_id=str(job_id))
            return None

        if not self.jobs.claim_job(job_id):
            status = self.jobs.get_current_status(job_id)
            logger.info("Job not claimable, skipping", job_id=str(job_id), status=status)
            return status

        try:
            self.db.refresh(job)
            self._process(job)
        except Exception as e:
            self._record_failure(job_id, e)

        return self.jobs.get_current_status(job_id)

    def _record_failure(self, job_id: UUID, error: Exception) -> None:
        code = error_code_for(error)
        logger.error(
            "Generation job failed",
            job_id=str(job_id),
            error=str(error),
            error_type=type(error).__name__,
            error_code=code
        )
        if isinstance(error, SQLAlchemyError):
            self.db.rollback()
        self.jobs.mark_failed(job_id, str(error), code)

    def _load_images(self, job: GenerationJob) -> Tuple[List[InlineImage], List[InlineImage]]:
        """Download the job's selected assets, split into style references and screenshots"""
        reference_images: List[InlineImage] = []
        screenshots: List[InlineImage] = []
        for job_asset, asset in self.jobs.get_job_assets(job.id):
            try:
                data = self.storage.download(asset.storage_key)
            except (NotFoundError, StorageError) as e:
                logger.warning(
                    "Skipping unreadable job asset",
                    job_id=str(job.id),
                    asset_id=str(asset.id),
                    error=str(e)
                )
                continue
            image = InlineImage(mime_type=asset.mime_type or OUTPUT_MIME_TYPE, data=data)
            if job_asset.role in REFERENCE_ROLES:
                reference_images.append(image)
            elif job_asset.role in SCREENSHOT_ROLES:
                screenshots.append(image)
        return reference_images, screenshots

    def _enhance_prompt(self, job: GenerationJob, reference_images, screenshots) -> str:
        prompt = job.prompt or ""
        if not self.enhancer or not (reference_images or screenshots):
            return prompt
        context = f"Reference covers: {len(reference_images)}, Screenshots: {len(screenshots)}"
        return self.enhancer.enhance(prompt, context=context, reference_images=reference_images)

    def _process(self, job: GenerationJob) -> None:
        logger.info(
            "Processing generation job",
            job_id=str(job.id),
            provider=job.provider,
            model=job.model,
            num_variations=job.num_variations
        )
        provider = self.provider_factory(job.provider, model=job.model, session=self.http_session)

        reference_images, screenshots = self._load_images(job)
        prompt = self._enhance_prompt(job, reference_images, screenshots)

        images = provider.generate(
            prompt=prompt,
            model_class=resolve_model_class(job.model),
            num_variations=job.num_variations,
            aspect_ratio=job.aspect_ratio or "1:1",
            target_store=job.target_store,
            reference_images=reference_images,
            screenshots=screenshots,
        )
        if not images:
            raise AIProviderError(f"Provider {job.provider} returned no images")

        persisted = 0
        for index, raw in enumerate(images[:job.num_variations]):
            if self.jobs.get_current_status(job.id) != JobStatus.RUNNING.value:
                logger.info("Job no longer running, stopping", job_id=str(job.id), persisted=persisted)
                return
            self._persist_output(job, index, raw)
            persisted += 1

        if self.jobs.mark_succeeded(job.id):
            logger.info("Generation job succeeded", job_id=str(job.id), output_count=persisted)

    def _persist_output(self, job: GenerationJob, variant_index: int, raw: RawImage) -> None:
        try:
            data = decode_payload(raw, session=self.http_session, timeout=self.fetch_timeout)
        except InvalidImageError as e:
            logger.warning("Could not decode image payload, storing raw data", job_id=str(job.id), error=str(e))
            data = raw.data if isinstance(raw.data, bytes) else raw.data.encode("utf-8")

        mime_type = OUTPUT_MIME_TYPE
        try:
            data, width, height = normalize(data, job.target_store)
        except InvalidImageError as e:
            logger.warning("Could not normalize image, storing original bytes", job_id=str(job.id), error=str(e))
            size = get_target_size_for_ratio(job.aspect_ratio)
            width, height = read_dimensions(data, default=(size.width, size.height))
            mime_type = raw.mime_type or OUTPUT_MIME_TYPE

        output_id = uuid.uuid4()
        storage_key = output_storage_key(job.project_id, job.id, output_id)
        self.storage.upload(storage_key, data, mime_type)

        self.jobs.create_output(
            job,
            output_id=output_id,
            variant_index=variant_index,
            storage_key=storage_key,
            mime_type=mime_type,
            size_bytes=len(data),
            width=width,
            height=height,
            checksum_sha256=hashlib.sha256(data).hexdigest(),
            storage_provider=self.storage.provider_name,
        )
        logger.info(
            "Output stored",
            job_id=str(job.id),
            output_id=str(output_id),
            variant_index=variant_index,
            size_bytes=len(data)
        )
