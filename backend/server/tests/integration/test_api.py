"""Integration tests for the HTTP API.

All tests use the FastAPI TestClient against an in-memory SQLite database
and temporary blob storage. Job dispatch is captured instead of queued, so
no Celery broker is needed.
"""

from urllib.parse import urlparse

import pytest

from conftest import FakeProvider, make_png, png_payload, provider_factory_for
from covergen.core.security import create_access_token
from covergen.services.orchestrator import JobOrchestrator

API = "/api/v1"


def wizard_payload(**config_overrides) -> dict:
    config = {
        "target_store": "appstore",
        "goal": "clarity",
        "app_category": "productivity",
        "main_message": "Plan your day in seconds",
        "style_preset": "modern-saas",
        "selected_assets": [],
        "variants": [{"id": "a", "enabled": True}, {"id": "b", "enabled": True}],
    }
    config.update(config_overrides)
    return {"config": config}


@pytest.fixture
def api_project(test_client, auth_headers) -> dict:
    resp = test_client.post(
        f"{API}/projects",
        json={"title": "Planner covers", "target_platform": "ios", "app_name": "Plano"},
        headers=auth_headers,
    )
    assert resp.status_code == 201
    return resp.json()


# ---------------------------------------------------------------------------
# Authentication
# ---------------------------------------------------------------------------


class TestAuth:
    def test_register_and_login(self, test_client):
        resp = test_client.post(
            f"{API}/auth/register",
            json={"username": "bob", "email": "bob@example.com", "password": "sup3r-secret"},
        )
        assert resp.status_code == 201
        assert resp.json()["username"] == "bob"
        assert "password" not in resp.json()

        resp = test_client.post(f"{API}/auth/login", json={"username": "bob", "password": "sup3r-secret"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["token_type"] == "bearer"

        resp = test_client.get(f"{API}/projects", headers={"Authorization": f"Bearer {body['access_token']}"})
        assert resp.status_code == 200
        assert resp.json() == []

    def test_duplicate_username(self, test_client, user):
        resp = test_client.post(
            f"{API}/auth/register",
            json={"username": "alice", "email": "other@example.com", "password": "sup3r-secret"},
        )
        assert resp.status_code == 422
        assert resp.json()["message"] == "Username already registered"

    def test_wrong_password(self, test_client, user):
        resp = test_client.post(f"{API}/auth/login", json={"username": "alice", "password": "nope-nope"})
        assert resp.status_code == 401

    def test_missing_token(self, test_client):
        assert test_client.get(f"{API}/projects").status_code == 401

    def test_token_for_unknown_user(self, test_client):
        headers = {"Authorization": f"Bearer {create_access_token('0b6f3a4e-8f55-4c1e-9d7a-111111111111')}"}
        assert test_client.get(f"{API}/projects", headers=headers).status_code == 401


# ---------------------------------------------------------------------------
# Projects and assets
# ---------------------------------------------------------------------------


class TestProjects:
    def test_crud(self, test_client, auth_headers, api_project):
        project_id = api_project["id"]
        assert api_project["target_platform"] == "ios"

        resp = test_client.patch(f"{API}/projects/{project_id}", json={"notes": "Q3 launch"}, headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["notes"] == "Q3 launch"
        assert resp.json()["title"] == "Planner covers"

        resp = test_client.get(f"{API}/projects", headers=auth_headers)
        assert [project["id"] for project in resp.json()] == [project_id]

        assert test_client.delete(f"{API}/projects/{project_id}", headers=auth_headers).status_code == 204
        assert test_client.get(f"{API}/projects/{project_id}", headers=auth_headers).status_code == 404

    def test_other_users_project_is_not_found(self, test_client, api_project, other_user):
        headers = {"Authorization": f"Bearer {create_access_token(str(other_user.id))}"}
        resp = test_client.get(f"{API}/projects/{api_project['id']}", headers=headers)
        assert resp.status_code == 404
        assert resp.json() == {"code": 404, "message": "Project not found"}

    def test_invalid_body(self, test_client, auth_headers):
        resp = test_client.post(f"{API}/projects", json={"title": ""}, headers=auth_headers)
        assert resp.status_code == 422
        assert resp.json()["details"][0]["loc"][-1] == "title"


class TestAssets:
    def upload(self, client, headers, project_id, asset_type="app_screenshot", filename="shot.png", data=None):
        return client.post(
            f"{API}/projects/{project_id}/assets",
            files={"file": (filename, data if data is not None else make_png(300, 600), "image/png")},
            data={"type": asset_type},
            headers=headers,
        )

    def test_upload_list_and_download(self, test_client, auth_headers, api_project):
        resp = self.upload(test_client, auth_headers, api_project["id"])
        assert resp.status_code == 201
        asset = resp.json()
        assert asset["type"] == "app_screenshot"
        assert (asset["width"], asset["height"]) == (300, 600)
        assert asset["mime_type"] == "image/png"

        resp = test_client.get(f"{API}/projects/{api_project['id']}/assets", headers=auth_headers)
        assert [item["id"] for item in resp.json()] == [asset["id"]]

        resp = test_client.get(f"{API}/assets/{asset['id']}/signed-url", headers=auth_headers)
        assert resp.status_code == 200
        url = urlparse(resp.json()["url"])
        download = test_client.get(f"{url.path}?{url.query}")
        assert download.status_code == 200
        assert download.headers["content-type"] == "image/png"
        assert download.content[:4] == b"\x89PNG"

    def test_tampered_signed_url(self, test_client, auth_headers, api_project):
        asset = self.upload(test_client, auth_headers, api_project["id"]).json()
        resp = test_client.get(f"{API}/storage/{asset['storage_key']}?token=forged")
        assert resp.status_code == 401

    def test_rejects_unsupported_extension(self, test_client, auth_headers, api_project):
        resp = self.upload(test_client, auth_headers, api_project["id"], filename="notes.txt", data=b"hello")
        assert resp.status_code == 422
        assert "Unsupported file type" in resp.json()["message"]

    def test_rejects_non_image_content(self, test_client, auth_headers, api_project):
        resp = self.upload(test_client, auth_headers, api_project["id"], data=b"definitely not a png")
        assert resp.status_code == 422

    def test_soft_delete_hides_asset(self, test_client, auth_headers, api_project):
        asset = self.upload(test_client, auth_headers, api_project["id"]).json()
        assert test_client.delete(f"{API}/assets/{asset['id']}", headers=auth_headers).status_code == 204
        resp = test_client.get(f"{API}/projects/{api_project['id']}/assets", headers=auth_headers)
        assert resp.json() == []
        assert test_client.get(f"{API}/assets/{asset['id']}/signed-url", headers=auth_headers).status_code == 404


# ---------------------------------------------------------------------------
# Jobs and outputs
# ---------------------------------------------------------------------------


class TestJobs:
    def test_preview(self, test_client, auth_headers, api_project):
        resp = test_client.post(
            f"{API}/projects/{api_project['id']}/jobs/preview",
            json=wizard_payload()["config"],
            headers=auth_headers,
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["aspect_ratio"] == "1:1"
        assert body["prompt"].startswith("Create a professional app store cover image for a productivity app.")
        assert body["critique"]["issues"][0]["message"] == "No reference covers selected"

    def test_create_dispatches_job(self, test_client, auth_headers, api_project, dispatched):
        resp = test_client.post(f"{API}/projects/{api_project['id']}/jobs", json=wizard_payload(), headers=auth_headers)
        assert resp.status_code == 202
        job = resp.json()
        assert job["status"] == "queued"
        assert job["num_variations"] == 2
        assert dispatched == [job["id"]]

        resp = test_client.get(f"{API}/projects/{api_project['id']}/jobs", headers=auth_headers)
        assert [item["id"] for item in resp.json()] == [job["id"]]

    def test_create_without_variants(self, test_client, auth_headers, api_project, dispatched):
        resp = test_client.post(
            f"{API}/projects/{api_project['id']}/jobs",
            json=wizard_payload(variants=[{"id": "a", "enabled": False}]),
            headers=auth_headers,
        )
        assert resp.status_code == 422
        assert dispatched == []

    def test_cancel_queued_job(self, test_client, auth_headers, api_project):
        job = test_client.post(
            f"{API}/projects/{api_project['id']}/jobs", json=wizard_payload(), headers=auth_headers
        ).json()

        resp = test_client.patch(f"{API}/jobs/{job['id']}/cancel", headers=auth_headers)
        assert resp.status_code == 200
        assert resp.json()["status"] == "cancelled"
        assert resp.json()["started_at"] is None

        resp = test_client.patch(f"{API}/jobs/{job['id']}/cancel", headers=auth_headers)
        assert resp.status_code == 400
        assert resp.json()["details"] == {"current_status": "cancelled"}

    def test_restart_and_generate(self, test_client, auth_headers, api_project, dispatched):
        job = test_client.post(
            f"{API}/projects/{api_project['id']}/jobs", json=wizard_payload(), headers=auth_headers
        ).json()
        assert test_client.post(f"{API}/jobs/{job['id']}/restart", headers=auth_headers).status_code == 400

        test_client.patch(f"{API}/jobs/{job['id']}/cancel", headers=auth_headers)
        resp = test_client.post(f"{API}/jobs/{job['id']}/generate", headers=auth_headers)
        assert resp.status_code == 202
        assert resp.json()["status"] == "queued"
        assert dispatched == [job["id"], job["id"]]

    def test_job_limit(self, test_client, auth_headers, api_project, monkeypatch):
        from covergen.core.config import settings

        monkeypatch.setattr(settings, "MAX_JOBS_PER_USER", 1)
        url = f"{API}/projects/{api_project['id']}/jobs"
        assert test_client.post(url, json=wizard_payload(), headers=auth_headers).status_code == 202
        resp = test_client.post(url, json=wizard_payload(), headers=auth_headers)
        assert resp.status_code == 403

    def test_full_generation_flow(self, test_client, auth_headers, api_project, session_factory, storage):
        job = test_client.post(
            f"{API}/projects/{api_project['id']}/jobs", json=wizard_payload(), headers=auth_headers
        ).json()

        provider = FakeProvider(images=[png_payload(), png_payload()])
        session = session_factory()
        try:
            status = JobOrchestrator(session, storage, provider_factory_for(provider)).run(job["id"])
        finally:
            session.close()
        assert status == "succeeded"

        resp = test_client.get(f"{API}/jobs/{job['id']}/status", headers=auth_headers)
        assert resp.json()["status"] == "succeeded"
        assert resp.json()["output_count"] == 2

        outputs = test_client.get(f"{API}/jobs/{job['id']}/outputs", headers=auth_headers).json()
        assert [output["variant_index"] for output in outputs] == [0, 1]
        assert all(output["width"] == 1024 and output["height"] == 1024 for output in outputs)

        resp = test_client.get(f"{API}/outputs/{outputs[0]['id']}/signed-url", headers=auth_headers)
        url = urlparse(resp.json()["url"])
        assert test_client.get(f"{url.path}?{url.query}").status_code == 200

        assert test_client.delete(f"{API}/outputs/{outputs[0]['id']}", headers=auth_headers).status_code == 204
        remaining = test_client.get(f"{API}/projects/{api_project['id']}/outputs", headers=auth_headers).json()
        assert [output["id"] for output in remaining] == [outputs[1]["id"]]

    def test_unknown_job(self, test_client, auth_headers):
        resp = test_client.get(f"{API}/jobs/6a1c7a6e-1111-4c2b-8e8e-000000000000", headers=auth_headers)
        assert resp.status_code == 404
