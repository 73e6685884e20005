# =============================================================================
# tests/test_content.py - Labs, GitHub Reader, Storage and Health Tests
# =============================================================================
# Run with: pytest tests/test_content.py -v
# =============================================================================

import io
from unittest.mock import MagicMock, patch

import pytest
from PIL import Image

from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from core.models.lab import LabUpdate
from core.services.github_service import GitHubReaderError, GitHubService, parse_github_url
from core.services.lab_service import LabService
from core.services.storage_service import StorageService


def png_bytes(width: int, height: int, mode: str = "RGBA") -> bytes:
    buffer = io.BytesIO()
    Image.new(mode, (width, height), (10, 20, 30, 0) if mode == "RGBA" else (10, 20, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestLabs:
    """Tests for LabService."""

    def test_anonymous_sees_published_only(self, fake_db):
        LabService.list_labs(viewer=None, status="draft", featured=True)

        query = fake_db.queries_for("labs")[0]
        assert query.called("eq") == [(("status", "published"), {}), (("featured", True), {})]

    def test_draft_hidden_from_viewer(self, fake_db, viewer_profile):
        fake_db.queue("labs", data={"slug": "lead-bot", "status": "draft"})

        with pytest.raises(NotFoundError):
            LabService.get_lab("lead-bot", viewer=viewer_profile)

    def test_editor_cannot_update_others_lab(self, fake_db, editor_profile):
        fake_db.queue("labs", data={"slug": "lead-bot", "author_id": "someone-else"})

        with pytest.raises(PermissionDeniedError):
            LabService.update_lab("lead-bot", LabUpdate(title="New"), editor=editor_profile)

    def test_absent_fields_keep_stored_values(self, fake_db, editor_profile):
        existing = {"slug": "lead-bot", "author_id": editor_profile.user_id, "title": "Old"}
        fake_db.queue("labs", data=existing)

        lab = LabService.update_lab("lead-bot", LabUpdate(title="New", status="published"), editor=editor_profile)

        changes = fake_db.payloads("labs", "update")[0]
        assert set(changes) == {"title", "updated_at"}
        assert lab["title"] == "New"

    def test_delete_missing(self, fake_db):
        fake_db.queue("labs", data=[])

        with pytest.raises(NotFoundError):
            LabService.delete_lab("nope")


class TestGitHubReader:
    """Tests for GitHub URL parsing and repository reads."""

    @pytest.mark.parametrize("url, expected", [
        ("https://github.com/acme/tools", ("acme", "tools")),
        ("https://github.com/acme/tools.git", ("acme", "tools")),
        ("git@github.com:acme/tools.git", ("acme", "tools")),
        ("https://github.com/acme/tools?tab=readme", ("acme", "tools")),
        ("https://gitlab.com/acme/tools", None),
    ])
    def test_parse(self, url, expected):
        assert parse_github_url(url) == expected

    def test_rejects_non_github_url(self):
        with pytest.raises(ValidationFailedError):
            GitHubService.read_repository("https://gitlab.com/acme/tools")

    def test_unreadable_repository(self):
        with patch.object(GitHubService, "fetch_metadata", return_value=None), \
                patch.object(GitHubService, "fetch_readme", return_value=None):
            with pytest.raises(GitHubReaderError) as exc_info:
                GitHubService.read_repository("https://github.com/acme/private")

        assert exc_info.value.code == "GITHUB_ERROR"
        assert exc_info.value.status_code == 502

    def test_readme_only(self):
        with patch.object(GitHubService, "fetch_metadata", return_value=None), \
                patch.object(GitHubService, "fetch_readme", return_value="# Tools") as fetch_readme:
            repository = GitHubService.read_repository("https://github.com/acme/tools")

        fetch_readme.assert_called_once_with("acme", "tools", None)
        assert repository["readme"] == "# Tools"
        assert repository["metadata"]["full_name"] == "acme/tools"


class TestStorage:
    """Tests for image validation and resizing."""

    def test_rejects_type(self):
        with pytest.raises(InvalidFileTypeError):
            StorageService.validate_upload(b"%PDF", "application/pdf", ["image/png"])

    def test_rejects_size(self):
        content = b"x" * (5 * 1024 * 1024 + 1)

        with pytest.raises(FileTooLargeError) as exc_info:
            StorageService.validate_upload(content, "image/png", ["image/png"])

        assert exc_info.value.status_code == 413

    def test_resize_flattens_and_shrinks(self):
        jpeg = StorageService.resize_to_jpeg(png_bytes(2400, 1200), 1200)

        image = Image.open(io.BytesIO(jpeg))
        assert image.format == "JPEG"
        assert image.size == (1200, 600)
        assert image.getpixel((0, 0)) == (255, 255, 255)

    def test_small_image_not_enlarged(self):
        jpeg = StorageService.resize_to_jpeg(png_bytes(300, 200, mode="RGB"), 800)

        assert Image.open(io.BytesIO(jpeg)).size == (300, 200)

    def test_unreadable_image(self):
        with pytest.raises(ValidationFailedError):
            StorageService.resize_to_jpeg(b"not an image", 400)

    def test_oversized_dimensions_rejected(self, monkeypatch):
        content = png_bytes(40, 40, mode="RGB")
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

        with pytest.raises(ValidationFailedError) as exc_info:
            StorageService.resize_to_jpeg(content, 400)

        assert exc_info.value.status_code == 400
        assert exc_info.value.message.startswith("Image dimensions too large")

    def test_blog_image_variants(self):
        with patch.object(StorageService, "upload_bytes", side_effect=lambda b, p, c, t: f"https://cdn/{p}") as upload:
            result = StorageService.upload_blog_image(png_bytes(1600, 900), "image/png", slug="post")

        assert upload.call_count == 3
        assert result["url"].endswith(".jpg")
        assert result["medium_url"].endswith("-medium.jpg")
        assert result["small_url"].endswith("-small.jpg")
        assert result["path"].startswith("uploads/post-")

    def test_svg_stored_as_is(self):
        svg = b"<svg xmlns='http://www.w3.org/2000/svg'/>"

        with patch.object(StorageService, "upload_bytes", return_value="https://cdn/x.svg") as upload:
            result = StorageService.upload_lab_image(svg, "image/svg+xml", slug="lead-bot")

        bucket, path, content, content_type = upload.call_args.args
        assert bucket == "lab-images"
        assert path.endswith(".svg")
        assert content == svg
        assert content_type == "image/svg+xml"
        assert result["url"] == "https://cdn/x.svg"


class TestHealth:
    """Tests for /api/v1/health endpoints."""

    def test_health(self, api_client):
        body = api_client.get("/api/v1/health").json()

        assert body["status"] == "healthy"
        assert body["version"] == "1.0.0"

    def test_ready(self, api_client, fake_db):
        response = api_client.get("/api/v1/health/ready")

        assert response.json()["status"] == "ready"
        assert response.json()["checks"] == {"database": "healthy", "storage": "healthy"}

    def test_degraded_when_storage_down(self, api_client, fake_db):
        fake_db.storage.list_buckets = MagicMock(side_effect=RuntimeError("storage offline"))

        body = api_client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["storage"] == "unhealthy"
