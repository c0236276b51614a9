"""Unit tests for local blob storage, storage keys and token helpers."""

import uuid
from datetime import timedelta
from urllib.parse import parse_qs, urlparse

import pytest

from covergen.core.exceptions import NotFoundError, StorageError
from covergen.core.ids import to_uuid
from covergen.core.security import (
    create_access_token,
    create_storage_token,
    get_password_hash,
    verify_password,
    verify_storage_token,
    verify_token,
)
from covergen.services.storage import asset_storage_key, output_storage_key


class TestStorageKeys:
    def test_asset_key(self):
        project_id, asset_id = uuid.uuid4(), uuid.uuid4()
        assert asset_storage_key(project_id, asset_id, ".PNG") == f"projects/{project_id}/assets/{asset_id}.png"

    def test_output_key(self):
        p, j, o = uuid.uuid4(), uuid.uuid4(), uuid.uuid4()
        assert output_storage_key(p, j, o) == f"projects/{p}/outputs/{j}/{o}.png"


class TestLocalBlobStorage:
    def test_upload_then_download(self, storage):
        storage.upload("projects/p/assets/a.png", b"data", "image/png")
        assert storage.download("projects/p/assets/a.png") == b"data"

    def test_upload_never_overwrites(self, storage):
        storage.upload("k/one.png", b"first", "image/png")
        with pytest.raises(StorageError):
            storage.upload("k/one.png", b"second", "image/png")
        assert storage.download("k/one.png") == b"first"

    def test_missing_key(self, storage):
        with pytest.raises(NotFoundError):
            storage.download("nope/missing.png")

    def test_delete_ignores_missing_keys(self, storage):
        storage.upload("k/a.png", b"a", "image/png")
        storage.delete(["k/a.png", "k/never-existed.png"])
        with pytest.raises(NotFoundError):
            storage.download("k/a.png")

    def test_path_traversal_rejected(self, storage):
        with pytest.raises(StorageError):
            storage.upload("../escape.png", b"x", "image/png")

    def test_signed_url_carries_valid_token(self, storage):
        url = storage.create_signed_url("projects/p/assets/a.png", 60)
        parsed = urlparse(url)
        assert parsed.path == "/api/v1/storage/projects/p/assets/a.png"
        token = parse_qs(parsed.query)["token"][0]
        assert verify_storage_token(token, "projects/p/assets/a.png")
        assert not verify_storage_token(token, "projects/p/assets/other.png")


class TestTokens:
    def test_access_token_round_trip(self):
        user_id = str(uuid.uuid4())
        assert verify_token(create_access_token(user_id)) == user_id

    def test_expired_access_token(self):
        token = create_access_token("someone", expires_delta=timedelta(seconds=-5))
        assert verify_token(token) is None

    def test_storage_token_is_not_an_access_token(self):
        assert verify_token(create_storage_token("some/key.png", 60)) is None

    def test_expired_storage_token(self):
        assert not verify_storage_token(create_storage_token("k.png", -5), "k.png")

    def test_password_hashing(self):
        hashed = get_password_hash("correct-horse")
        assert verify_password("correct-horse", hashed)
        assert not verify_password("wrong", hashed)


class TestIds:
    def test_to_uuid(self):
        value = uuid.uuid4()
        assert to_uuid(str(value)) == value
        assert to_uuid(value) is value
        assert to_uuid("not-a-uuid") is None
        assert to_uuid(None) is None
