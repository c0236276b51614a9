"""Integration tests for job creation, status transitions and outputs."""

import uuid

import pytest

from conftest import FakeProvider, png_payload, provider_factory_for
from covergen.core.config import settings
from covergen.core.exceptions import ForbiddenError, InvalidStateError, NotFoundError, ValidationError
from covergen.models import GeneratedOutput, JobAsset
from covergen.models.enums import AssetType, JobAssetRole, TargetStore
from covergen.schemas.generation import JobConfig, JobCreateRequest, SelectedAsset, VariantToggle
from covergen.services.asset import AssetService
from covergen.services.generation import GenerationService
from covergen.services.orchestrator import JobOrchestrator


class TestCreateJob:
    def test_job_snapshot(self, db_session, create_job, upload_asset):
        shot = upload_asset(AssetType.APP_SCREENSHOT)
        job = create_job(variants=2, target_store=TargetStore.PLAYSTORE, selected=[(shot, "app_screenshot")])

        assert job.status == "queued"
        assert job.provider == "gemini"
        assert job.model == "gemini-2.5-flash-image"
        assert job.num_variations == 2
        assert job.aspect_ratio == "1024:500"
        assert job.target_store == "playstore"
        assert job.requested_outputs == {"variants": ["v0", "v1"]}
        assert job.job_config["target_store"] == "playstore"
        assert "Show one screenshot prominently." in job.prompt
        assert job.critique

        snapshot = db_session.query(JobAsset).filter(JobAsset.job_id == job.id).all()
        assert [(row.asset_id, row.role) for row in snapshot] == [(shot.id, "app_screenshot")]

    def test_imagen_default_model(self, create_job):
        job = create_job(variants=1, provider="imagen")
        assert job.model == "imagen-3.0-generate-001"

    def test_disabled_variants_are_not_requested(self, db_session, project, user):
        config = JobConfig(variants=[
            VariantToggle(id="a", enabled=True),
            VariantToggle(id="b", enabled=False),
            VariantToggle(id="c", enabled=True),
        ])
        job = GenerationService(db_session).create_job(project.id, user.id, JobCreateRequest(config=config))
        assert job.num_variations == 2
        assert job.requested_outputs == {"variants": ["a", "c"]}

    def test_no_enabled_variant_is_rejected(self, create_job):
        with pytest.raises(ValidationError):
            create_job(variants=0)

    def test_unknown_provider_is_rejected(self, create_job):
        with pytest.raises(ValidationError):
            create_job(variants=1, provider="dalle")

    def test_deleted_and_foreign_assets_are_dropped(self, db_session, storage, create_job, upload_asset, user):
        kept = upload_asset(AssetType.APP_SCREENSHOT, "kept.png")
        removed = upload_asset(AssetType.APP_SCREENSHOT, "removed.png")
        AssetService(db_session, storage).soft_delete_asset(removed.id, user.id)

        class Stranger:
            id = uuid.uuid4()

        job = create_job(
            variants=1,
            selected=[
                (kept, "app_screenshot"),
                (kept, "reference_cover"),
                (removed, "app_screenshot"),
                (Stranger, "app_screenshot"),
            ],
        )
        snapshot = db_session.query(JobAsset).filter(JobAsset.job_id == job.id).all()
        assert [(row.asset_id, row.role) for row in snapshot] == [(kept.id, "app_screenshot")]

    def test_project_of_another_user(self, db_session, project, other_user):
        request = JobCreateRequest(config=JobConfig(variants=[VariantToggle(id="a")]))
        with pytest.raises(NotFoundError):
            GenerationService(db_session).create_job(project.id, other_user.id, request)

    def test_job_limit(self, monkeypatch, create_job):
        monkeypatch.setattr(settings, "MAX_JOBS_PER_USER", 2)
        create_job(variants=1)
        create_job(variants=1)
        with pytest.raises(ForbiddenError):
            create_job(variants=1)

    def test_job_limit_disabled(self, monkeypatch, create_job):
        monkeypatch.setattr(settings, "MAX_JOBS_PER_USER", 0)
        for _ in range(7):
            create_job(variants=1)

    def test_too_many_variants(self, monkeypatch, create_job):
        monkeypatch.setattr(settings, "MAX_VARIATIONS", 3)
        with pytest.raises(ValidationError):
            create_job(variants=4)


class TestPreview:
    def test_preview_counts_live_selected_assets(self, db_session, project, user, upload_asset):
        cover = upload_asset(AssetType.REFERENCE_COVER, "cover.png")
        shots = [upload_asset(AssetType.APP_SCREENSHOT, f"s{i}.png") for i in range(2)]
        config = JobConfig(
            main_message="Your habits, simplified",
            selected_assets=[SelectedAsset(asset_id=cover.id, role=JobAssetRole.REFERENCE_COVER)]
            + [SelectedAsset(asset_id=s.id, role=JobAssetRole.APP_SCREENSHOT) for s in shots],
            variants=[VariantToggle(id="a")],
        )
        preview = GenerationService(db_session).preview(project.id, user.id, config)

        assert preview.aspect_ratio == "1:1"
        assert preview.critique.score == 100
        assert "Show two screenshots in a balanced composition." in preview.prompt

    def test_preview_does_not_create_jobs(self, db_session, project, user):
        service = GenerationService(db_session)
        service.preview(project.id, user.id, JobConfig())
        assert service.count_user_jobs(user.id) == 0


class TestTransitions:
    def run_with(self, db_session, storage, job, provider):
        return JobOrchestrator(db_session, storage, provider_factory_for(provider)).run(job.id)

    def test_cancel_finished_job_is_illegal(self, db_session, storage, create_job, user):
        job = create_job(variants=1)
        self.run_with(db_session, storage, job, FakeProvider(images=[png_payload()]))
        with pytest.raises(InvalidStateError) as exc_info:
            GenerationService(db_session).cancel_job(job.id, user.id)
        assert exc_info.value.current_status == "succeeded"

    def test_restart_failed_job_clears_errors(self, db_session, storage, create_job, user):
        job = create_job(variants=1)
        self.run_with(db_session, storage, job, FakeProvider(error=RuntimeError("boom")))

        job = GenerationService(db_session).restart_job(job.id, user.id)

        assert job.status == "queued"
        assert job.error_message is None
        assert job.error_code is None
        assert job.started_at is None
        assert job.finished_at is None

        assert self.run_with(db_session, storage, job, FakeProvider(images=[png_payload()])) == "succeeded"

    def test_restart_queued_job_is_illegal(self, db_session, create_job, user):
        job = create_job(variants=1)
        with pytest.raises(InvalidStateError):
            GenerationService(db_session).restart_job(job.id, user.id)

    def test_prepare_start(self, db_session, storage, create_job, user):
        service = GenerationService(db_session)
        job = create_job(variants=1)
        assert service.prepare_start(job.id, user.id).status == "queued"

        service.cancel_job(job.id, user.id)
        assert service.prepare_start(job.id, user.id).status == "queued"

        self.run_with(db_session, storage, job, FakeProvider(images=[png_payload()]))
        with pytest.raises(InvalidStateError):
            service.prepare_start(job.id, user.id)

    def test_jobs_are_scoped_to_their_owner(self, db_session, create_job, other_user):
        job = create_job(variants=1)
        with pytest.raises(NotFoundError):
            GenerationService(db_session).get_job(job.id, other_user.id)


class TestOutputs:
    def test_delete_output_removes_blob_and_row(self, db_session, storage, create_job, user):
        job = create_job(variants=2)
        JobOrchestrator(
            db_session, storage, provider_factory_for(FakeProvider(images=[png_payload(), png_payload()]))
        ).run(job.id)
        service = GenerationService(db_session)
        outputs = service.get_job_outputs(job.id, user.id)
        target = outputs[0]
        key = target.storage_key

        service.delete_output(target.id, user.id, storage)

        assert db_session.query(GeneratedOutput).filter(GeneratedOutput.id == target.id).first() is None
        with pytest.raises(NotFoundError):
            storage.download(key)
        assert len(service.get_project_outputs(job.project_id, user.id)) == 1

    def test_output_of_another_user(self, db_session, storage, create_job, other_user):
        job = create_job(variants=1)
        JobOrchestrator(db_session, storage, provider_factory_for(FakeProvider(images=[png_payload()]))).run(job.id)
        output = db_session.query(GeneratedOutput).first()
        with pytest.raises(NotFoundError):
            GenerationService(db_session).get_output(output.id, other_user.id)
