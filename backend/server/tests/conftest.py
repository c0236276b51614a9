"""Shared pytest fixtures for CoverGen tests."""

import base64
import io
import os
import tempfile

# Settings are read at import time, so the test environment is set up first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("STORAGE_DIR", tempfile.mkdtemp(prefix="covergen-blobs-"))
os.environ["GOOGLE_API_KEY"] = ""
os.environ["PROMPT_ENHANCEMENT_ENABLED"] = "false"

from typing import Callable, Dict, Generator, List, Optional

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from covergen.core.deps import get_blob_storage
from covergen.core.security import create_access_token, get_password_hash
from covergen.db.base import Base
from covergen.db.session import get_db
from covergen.models import Project, User
from covergen.models.enums import AssetType, JobAssetRole, TargetStore
from covergen.schemas.generation import JobConfig, JobCreateRequest, SelectedAsset, VariantToggle
from covergen.services.ai_providers import ImageEncoding, ImageGenerationProvider, ModelClass, RawImage
from covergen.services.asset import AssetService
from covergen.services.generation import GenerationService
from covergen.services.storage import LocalBlobStorage


def make_png(width: int = 640, height: int = 480, color=(30, 144, 255)) -> bytes:
    """Encode a solid-color PNG of the given size."""
    buffer = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buffer, format="PNG")
    return buffer.getvalue()


def png_payload(width: int = 640, height: int = 480) -> RawImage:
    """A provider payload carrying a base64 PNG."""
    encoded = base64.b64encode(make_png(width, height)).decode("ascii")
    return RawImage(encoding=ImageEncoding.BASE64, data=encoded, mime_type="image/png")


class FakeProvider(ImageGenerationProvider):
    """In-memory provider returning canned payloads or raising a canned error.

    Every call is recorded in ``calls`` so tests can inspect what the
    orchestrator sent.
    """

    def __init__(self, images: Optional[List[RawImage]] = None, error: Optional[Exception] = None):
        super().__init__(api_key="fake-key")
        self.images = images or []
        self.error = error
        self.calls: List[Dict] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    def generate(
        self,
        prompt: str,
        model_class: ModelClass,
        num_variations: int,
        aspect_ratio: str,
        target_store: Optional[str] = None,
        reference_images=None,
        screenshots=None,
    ) -> List[RawImage]:
        self.calls.append({
            "prompt": prompt,
            "model_class": model_class,
            "num_variations": num_variations,
            "aspect_ratio": aspect_ratio,
            "target_store": target_store,
            "reference_images": list(reference_images or []),
            "screenshots": list(screenshots or []),
        })
        if self.error is not None:
            raise self.error
        return list(self.images)


def provider_factory_for(provider: ImageGenerationProvider) -> Callable[..., ImageGenerationProvider]:
    """Factory callable that always hands out the given provider."""

    def factory(provider_name, model=None, session=None):
        return provider

    return factory


@pytest.fixture
def engine():
    """In-memory SQLite engine shared by every session of a test."""
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=test_engine)
    try:
        yield test_engine
    finally:
        Base.metadata.drop_all(bind=test_engine)
        test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def storage(tmp_path) -> LocalBlobStorage:
    """Filesystem blob storage rooted in a temporary directory."""
    return LocalBlobStorage(str(tmp_path / "blobs"), "http://testserver", "/api/v1")


@pytest.fixture
def user(db_session) -> User:
    db_user = User(
        username="alice",
        email="alice@example.com",
        hashed_password=get_password_hash("correct-horse"),
    )
    db_session.add(db_user)
    db_session.commit()
    db_session.refresh(db_user)
    return db_user


@pytest.fixture
def other_user(db_session) -> User:
    db_user = User(
        username="mallory",
        email="mallory@example.com",
        hashed_password=get_password_hash("battery-staple"),
    )
    db_session.add(db_user)
    db_session.commit()
    db_session.refresh(db_user)
    return db_user


@pytest.fixture
def project(db_session, user) -> Project:
    db_project = Project(user_id=user.id, title="Habit Tracker covers", app_name="Habitly")
    db_session.add(db_project)
    db_session.commit()
    db_session.refresh(db_project)
    return db_project


@pytest.fixture
def upload_asset(db_session, storage, project, user):
    """Upload a PNG asset of the given type to the test project."""

    def upload(asset_type: AssetType = AssetType.APP_SCREENSHOT, filename: str = "image.png", data: bytes = None):
        service = AssetService(db_session, storage)
        return service.create_asset_from_upload(
            project_id=project.id,
            user_id=user.id,
            filename=filename,
            data=data if data is not None else make_png(),
            asset_type=asset_type,
        )

    return upload


@pytest.fixture
def create_job(db_session, project, user):
    """Create a queued job through the generation service."""

    def create(
        variants: int = 2,
        target_store: TargetStore = TargetStore.APPSTORE,
        selected: Optional[List] = None,
        provider: str = "gemini",
        main_message: str = "Build better habits",
    ):
        config = JobConfig(
            target_store=target_store,
            main_message=main_message,
            selected_assets=[
                SelectedAsset(asset_id=asset.id, role=JobAssetRole(role))
                for asset, role in (selected or [])
            ],
            variants=[VariantToggle(id=f"v{i}", enabled=True) for i in range(variants)],
        )
        request = JobCreateRequest(config=config, provider=provider)
        return GenerationService(db_session).create_job(project.id, user.id, request)

    return create


@pytest.fixture
def auth_headers(user) -> Dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(user.id))}"}


@pytest.fixture
def dispatched(monkeypatch) -> List[str]:
    """Capture job dispatches instead of sending them to Celery."""
    calls: List[str] = []
    monkeypatch.setattr(
        "covergen.api.v1.endpoints.generation.dispatch_generation_job",
        lambda job_id: calls.append(str(job_id)),
    )
    return calls


@pytest.fixture
def test_client(session_factory, storage, dispatched) -> Generator[TestClient, None, None]:
    """FastAPI TestClient wired to the test database and storage."""
    from covergen.main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_blob_storage] = lambda: storage
    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()
