"""
Celery worker that runs cover generation jobs
"""
import logging
from typing import Optional

import requests
from celery import Task

from covergen.core.config import settings
from covergen.core.ids import to_uuid
from covergen.db.base import SessionLocal
from covergen.services.ai_providers import PromptEnhancer
from covergen.services.orchestrator import JobOrchestrator
from covergen.services.storage import get_storage
from covergen.workers.celery_app import celery_app

logger = logging.getLogger(__name__)


class BaseGenerationTask(Task):
    """Base task class with common logging for generation tasks"""

    def on_failure(self, exc, task_id, args, kwargs, einfo):
        logger.error(f"Generation task {task_id} failed: {exc}")

    def on_success(self, retval, task_id, args, kwargs):
        logger.info(f"Generation task {task_id} finished with status {retval}")


def build_orchestrator(db) -> JobOrchestrator:
    """Orchestrator wired with the configured storage, HTTP session and prompt enhancer"""
    enhancer = PromptEnhancer(
        settings.GOOGLE_API_KEY,
        model=settings.PROMPT_ENHANCEMENT_MODEL,
        enabled=settings.PROMPT_ENHANCEMENT_ENABLED,
    )
    return JobOrchestrator(
        db,
        get_storage(),
        http_session=requests.Session(),
        enhancer=enhancer,
    )


def run_job(job_id: str) -> Optional[str]:
    """Run one job in a fresh database session and return its final status"""
    job_uuid = to_uuid(job_id)
    if job_uuid is None:
        logger.error(f"Invalid generation job id: {job_id}")
        return None

    db = SessionLocal()
    try:
        return build_orchestrator(db).run(job_uuid)
    finally:
        db.close()


@celery_app.task(bind=True, base=BaseGenerationTask, name="covergen.workers.generation.run_generation_job", max_retries=0)
def run_generation_job(self, job_id: str) -> Optional[str]:
    """
    Process a queued generation job

    Args:
        job_id: Generation job ID

    Returns:
        Final job status, or None when the job does not exist
    """
    logger.info(f"Starting generation job {job_id}")
    return run_job(job_id)


def dispatch_generation_job(job_id) -> None:
    """Queue a job for processing on the generation queue"""
    run_generation_job.delay(str(job_id))
    logger.info(f"Generation job {job_id} dispatched")
