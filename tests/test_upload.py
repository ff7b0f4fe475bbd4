"""Tests for the relay's multipart upload endpoint."""

import io
from pathlib import Path
from unittest.mock import patch

from edurelay.core.exceptions import TransferError
from edurelay.services.relay import build_public_url
from edurelay.storage.staging import StagingArea
from tests.conftest import FakeObjectStore


def staged_files(staging_dir: Path) -> list[Path]:
    if not staging_dir.exists():
        return []
    return list(staging_dir.iterdir())


def test_upload_without_file_part(client):
    """Test that a request without a file part is rejected."""
    response = client.post("/upload")

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_upload_with_other_form_fields_only(client):
    """Test that form fields without a file are treated as no file."""
    response = client.post("/upload", data={"title": "Lecture 1"})

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}


def test_upload_with_text_file_field(client, fake_store):
    """Test that a plain text "file" field is treated as no file."""
    response = client.post("/upload", data={"file": "not-a-file"})

    assert response.status_code == 400
    assert response.json() == {"error": "No file uploaded"}
    assert fake_store.objects == {}


def test_upload_staging_directory_unusable(make_client, fake_store, tmp_path):
    """Test that a staging directory that cannot be created is a JSON 500."""
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory")
    client = make_client(fake_store, staging=StagingArea(blocker / "staging"))

    response = client.post("/upload", files={"file": ("a.txt", io.BytesIO(b"x"), "text/plain")})

    assert response.status_code == 500
    data = response.json()
    assert data["success"] is False
    assert data["error"].startswith("Failed to stage upload")
    assert fake_store.objects == {}


def test_upload_forwards_file_and_returns_public_url(client, fake_store, staging_dir):
    """Test uploading a small text file whose name needs encoding."""
    files = {"file": ("a b.txt", io.BytesIO(b"0123456789"), "text/plain")}

    response = client.post("/upload", files=files)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["video_url"] == "https://cdn.test/a%20b.txt"
    assert data["video_url"].endswith("a%20b.txt")
    assert data["thumbnail_url"] == ""
    assert data["duration"] == ""

    stored = fake_store.objects["a b.txt"]
    assert stored["content_type"] == "text/plain"
    assert stored["size_bytes"] == 10
    assert stored["data"] == b"0123456789"

    assert staged_files(staging_dir) == []


def test_upload_uses_original_filename_as_key(client, fake_store):
    """Test that the object key is the unsanitized original name."""
    files = {"file": ("Lecture #1 (final).mp4", io.BytesIO(b"video"), "video/mp4")}

    response = client.post("/upload", files=files)

    assert response.status_code == 200
    assert "Lecture #1 (final).mp4" in fake_store.objects
    assert response.json()["video_url"] == "https://cdn.test/Lecture%20%231%20(final).mp4"


def test_upload_same_name_overwrites(client, fake_store):
    """Test that re-uploading a name replaces the previous object."""
    client.post("/upload", files={"file": ("cover.png", io.BytesIO(b"old"), "image/png")})
    client.post("/upload", files={"file": ("cover.png", io.BytesIO(b"new"), "image/png")})

    assert len(fake_store.objects) == 1
    assert fake_store.objects["cover.png"]["data"] == b"new"


def test_upload_store_network_error(make_client, staging_dir):
    """Test that an object store failure is reported and the staged file removed."""
    client = make_client(FakeObjectStore(error=ConnectionError("simulated network error")))
    files = {"file": ("a b.txt", io.BytesIO(b"0123456789"), "text/plain")}

    response = client.post("/upload", files=files)

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "simulated network error"}
    assert staged_files(staging_dir) == []


def test_upload_store_rejection(make_client, staging_dir):
    """Test that a TransferError keeps its message."""
    client = make_client(FakeObjectStore(error=TransferError("Object store rejected upload: Access Denied")))
    files = {"file": ("clip.mp4", io.BytesIO(b"data"), "video/mp4")}

    response = client.post("/upload", files=files)

    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "Access Denied" in response.json()["error"]
    assert staged_files(staging_dir) == []


def test_upload_staged_file_missing(make_client, fake_store, staging_dir):
    """Test that a staged file vanishing before the forward is a 500."""

    class VanishingStagingArea(StagingArea):
        async def stage(self, upload):
            staged = await super().stage(upload)
            staged.path.unlink()
            return staged

    client = make_client(fake_store, staging=VanishingStagingArea(staging_dir))

    response = client.post("/upload", files={"file": ("a.txt", io.BytesIO(b"x"), "text/plain")})

    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Uploaded file not found on disk"}
    assert fake_store.objects == {}


def test_upload_cleanup_failure_does_not_mask_success(client, fake_store):
    """Test that failing to delete the staged file still returns 200."""
    with patch.object(Path, "unlink", side_effect=PermissionError("locked")):
        response = client.post(
            "/upload", files={"file": ("a.txt", io.BytesIO(b"x"), "text/plain")}
        )

    assert response.status_code == 200
    assert response.json()["video_url"] == "https://cdn.test/a.txt"
    assert "a.txt" in fake_store.objects


def test_upload_form_page(client):
    """Test that the root page serves an upload form."""
    response = client.get("/")

    assert response.status_code == 200
    assert "text/html" in response.headers["content-type"]
    assert 'action="/upload"' in response.text
    assert 'name="file"' in response.text


def test_cors_allows_configured_origin(client):
    """Test CORS preflight from the admin panel dev server."""
    response = client.options(
        "/upload",
        headers={
            "Origin": "http://localhost:5173",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "http://localhost:5173"


def test_cors_rejects_unknown_origin(client):
    """Test CORS preflight from an unlisted origin."""
    response = client.options(
        "/upload",
        headers={
            "Origin": "https://evil.example",
            "Access-Control-Request-Method": "POST",
        },
    )

    assert "access-control-allow-origin" not in response.headers


def test_build_public_url_encoding():
    """Test public URL escaping of object keys."""
    assert build_public_url("https://cdn.test/", "a b.txt") == "https://cdn.test/a%20b.txt"
    assert build_public_url("https://cdn.test", "dir/clip.mp4") == "https://cdn.test/dir%2Fclip.mp4"
    assert build_public_url("https://cdn.test", "it's(1)!.png") == "https://cdn.test/it's(1)!.png"
    assert build_public_url("https://cdn.test", "ü.png") == "https://cdn.test/%C3%BC.png"
