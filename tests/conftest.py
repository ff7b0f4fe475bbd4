"""Pytest configuration and shared fixtures."""

from pathlib import Path
from typing import BinaryIO

import pytest
from fastapi.testclient import TestClient

from edurelay.core.config import Settings
from edurelay.main import create_app
from edurelay.storage.base import ObjectStore, StoredObject
from edurelay.storage.staging import StagingArea


class FakeObjectStore(ObjectStore):
    """In-memory object store recording every PUT and presign request."""

    def __init__(self, error: Exception | None = None, presigned_url: str = "https://bucket.test/signed"):
        self.error = error
        self.presigned_url = presigned_url
        self.objects: dict[str, dict] = {}
        self.presigned: list[dict] = []

    async def put_object(
        self, key: str, file_data: BinaryIO, content_type: str, size_bytes: int
    ) -> StoredObject:
        if self.error is not None:
            raise self.error
        self.objects[key] = {
            "content_type": content_type,
            "size_bytes": size_bytes,
            "data": file_data.read(),
        }
        return StoredObject(key=key, content_type=content_type, size_bytes=size_bytes)

    def generate_presigned_put_url(self, key: str, content_type: str, expires_in: int) -> str:
        if self.error is not None:
            raise self.error
        self.presigned.append({"key": key, "content_type": content_type, "expires_in": expires_in})
        return f"{self.presigned_url}?key={key}"

    def get_backend_name(self) -> str:
        return "fake"


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment and any .env file."""
    return Settings(
        _env_file=None,
        ENV="local",
        STORAGE_BACKEND="local",
        LOCAL_STORAGE_PATH=str(tmp_path / "objects"),
        STAGING_DIR=str(tmp_path / "staging"),
        PUBLIC_BASE_URL="https://cdn.test/",
        PRESIGN_EXPIRATION_SECONDS=900,
    )


@pytest.fixture
def fake_store() -> FakeObjectStore:
    return FakeObjectStore()


@pytest.fixture
def staging_dir(tmp_path: Path) -> Path:
    return tmp_path / "staging"


@pytest.fixture
def make_client(test_settings: Settings, staging_dir: Path):
    """Build a TestClient around a relay app using the given store."""

    def _make(store: ObjectStore, staging: StagingArea | None = None) -> TestClient:
        app = create_app(
            settings=test_settings,
            store=store,
            staging=staging or StagingArea(staging_dir),
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, fake_store: FakeObjectStore) -> TestClient:
    return make_client(fake_store)
