"""Unit tests for job dispatch and the inline job runner script."""

import runpy
import uuid
from pathlib import Path

import pytest

from covergen.workers import generation as worker

RUN_JOB_SCRIPT = Path(__file__).resolve().parents[2] / "scripts" / "run_job.py"


def test_dispatch_queues_job_id_as_string(monkeypatch):
    queued = []
    monkeypatch.setattr(worker.run_generation_job, "delay", lambda job_id: queued.append(job_id))

    job_id = uuid.uuid4()
    worker.dispatch_generation_job(job_id)

    assert queued == [str(job_id)]


def test_task_does_not_retry():
    assert worker.run_generation_job.max_retries == 0
    assert worker.run_generation_job.name == "covergen.workers.generation.run_generation_job"


def test_run_job_rejects_malformed_id():
    assert worker.run_job("not-a-job-id") is None


@pytest.mark.parametrize(
    "status,exit_code",
    [("succeeded", 0), ("failed", 2), ("cancelled", 2), (None, 1)],
)
def test_run_job_script_exit_codes(monkeypatch, status, exit_code):
    calls = []

    def fake_run_job(job_id):
        calls.append(job_id)
        return status

    monkeypatch.setattr(worker, "run_job", fake_run_job)
    script = runpy.run_path(str(RUN_JOB_SCRIPT))

    assert script["main"](["6a1c7a6e-1111-4c2b-8e8e-000000000000"]) == exit_code
    assert calls == ["6a1c7a6e-1111-4c2b-8e8e-000000000000"]
