"""Tests for presigned upload URL generation."""

from edurelay.core.exceptions import TransferError
from edurelay.storage.local import LocalObjectStore
from tests.conftest import FakeObjectStore


def test_generate_upload_url(client, fake_store):
    """Test minting a presigned URL for a direct upload."""
    response = client.post(
        "/generate-upload-url",
        json={"filename": "lecture 1.mp4", "contentType": "video/mp4"},
    )

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["presignedUrl"].startswith("https://bucket.test/signed")
    assert data["publicUrl"] == "https://cdn.test/lecture%201.mp4"

    assert fake_store.presigned == [
        {"key": "lecture 1.mp4", "content_type": "video/mp4", "expires_in": 900}
    ]
    assert fake_store.objects == {}


def test_generate_upload_url_missing_content_type(client, fake_store):
    """Test that a request without contentType is rejected."""
    response = client.post("/generate-upload-url", json={"filename": "a.png"})

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert "contentType" in data["error"]
    assert fake_store.presigned == []


def test_generate_upload_url_empty_filename(client):
    """Test that an empty filename is rejected."""
    response = client.post(
        "/generate-upload-url", json={"filename": "", "contentType": "image/png"}
    )

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_generate_upload_url_local_backend(make_client, tmp_path):
    """Test that the local backend cannot presign."""
    client = make_client(LocalObjectStore(tmp_path / "objects"))

    response = client.post(
        "/generate-upload-url", json={"filename": "a.png", "contentType": "image/png"}
    )

    assert response.status_code == 400
    data = response.json()
    assert data["success"] is False
    assert "local" in data["error"]


def test_generate_upload_url_signing_failure(make_client):
    """Test that a signing failure is a 500."""
    client = make_client(FakeObjectStore(error=TransferError("Failed to generate presigned URL: boom")))

    response = client.post(
        "/generate-upload-url", json={"filename": "a.png", "contentType": "image/png"}
    )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to generate presigned URL: boom",
    }


def test_generate_upload_url_unexpected_store_error(make_client):
    """Test that a non-storage error while signing still gets a JSON 500."""
    client = make_client(FakeObjectStore(error=ValueError("Invalid endpoint: r2.invalid")))

    response = client.post(
        "/generate-upload-url", json={"filename": "a.png", "contentType": "image/png"}
    )

    assert response.status_code == 500
    assert response.json() == {
        "success": False,
        "error": "Failed to generate presigned URL: Invalid endpoint: r2.invalid",
    }
