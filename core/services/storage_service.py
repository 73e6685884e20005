# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles image uploads to Supabase Storage:
# - blog-images: header images, resized into three JPEG variants
# - lab-images: workflow diagrams (raster resized, SVG stored as-is)
# =============================================================================

import io
import logging
import uuid
from typing import Any

from PIL import Image, UnidentifiedImageError

from app.config import settings
from app.exceptions import (
    FileTooLargeError,
    InvalidFileTypeError,
    StorageUploadError,
    ValidationFailedError,
)
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Storage bucket names
BLOG_BUCKET = "blog-images"
LAB_BUCKET = "lab-images"

RASTER_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp", "image/gif"]
SVG_TYPE = "image/svg+xml"

# (suffix, width) pairs for blog header variants
BLOG_VARIANTS = [("", 1200), ("-medium", 800), ("-small", 400)]
LAB_MAX_WIDTH = 1200
JPEG_QUALITY = 85


class StorageService:
    """
    Service for Supabase Storage operations.

    Validates, resizes and uploads images, returning public URLs.
    """

    @staticmethod
    def validate_upload(content: bytes, content_type: str | None, allowed: list[str]) -> None:
        """
        Check type and size of an uploaded file.

        Raises:
            InvalidFileTypeError: Content type not in `allowed`
            FileTooLargeError: Larger than MAX_IMAGE_SIZE_MB
        """
        if content_type not in allowed:
            raise InvalidFileTypeError(content_type, allowed)

        if len(content) > settings.max_image_size_bytes:
            raise FileTooLargeError(
                size_mb=round(len(content) / (1024 * 1024), 2),
                max_mb=settings.MAX_IMAGE_SIZE_MB,
            )

    @staticmethod
    def resize_to_jpeg(content: bytes, width: int) -> bytes:
        """
        Resize an image to at most `width` pixels wide and encode as JPEG.

        Images narrower than `width` are not enlarged. Transparency is
        flattened onto white.
        """
        try:
            image = Image.open(io.BytesIO(content))
            image.load()
        except Image.DecompressionBombError as e:
            raise ValidationFailedError(
                message=f"Image dimensions too large: {e}",
                suggestion="Resize the image before uploading it",
                details={"max_pixels": Image.MAX_IMAGE_PIXELS},
            )
        except (UnidentifiedImageError, OSError) as e:
            raise ValidationFailedError(
                message=f"Could not read image: {e}",
                suggestion="Upload a valid JPEG, PNG, WebP or GIF file",
            )

        if image.mode in ("RGBA", "LA", "P"):
            image = image.convert("RGBA")
            background = Image.new("RGB", image.size, (255, 255, 255))
            background.paste(image, mask=image.split()[-1])
            image = background
        elif image.mode != "RGB":
            image = image.convert("RGB")

        if image.width > width:
            height = round(image.height * width / image.width)
            image = image.resize((width, height), Image.LANCZOS)

        buffer = io.BytesIO()
        image.save(buffer, format="JPEG", quality=JPEG_QUALITY, progressive=True, optimize=True)
        return buffer.getvalue()

    @staticmethod
    def upload_bytes(bucket: str, path: str, content: bytes, content_type: str) -> str:
        """
        Upload raw bytes and return the object's public URL.

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={"content-type": content_type, "cache-control": "3600", "upsert": "false"},
            )
        except Exception as e:
            logger.error(f"Storage upload failed for {bucket}/{path}: {e}")
            raise StorageUploadError(str(e))

        logger.info(f"Uploaded file to storage: {bucket}/{path}")
        return client.storage.from_(bucket).get_public_url(path)

    @staticmethod
    def upload_blog_image(content: bytes, content_type: str | None, slug: str | None = None) -> dict[str, Any]:
        """
        Upload a blog header image in three sizes.

        Returns:
            {"url", "medium_url", "small_url", "path"}
        """
        StorageService.validate_upload(content, content_type, RASTER_TYPES)

        base = f"uploads/{slug or 'blog'}-{uuid.uuid4()}"
        urls: dict[str, str] = {}
        for suffix, width in BLOG_VARIANTS:
            path = f"{base}{suffix}.jpg"
            resized = StorageService.resize_to_jpeg(content, width)
            urls[suffix] = StorageService.upload_bytes(BLOG_BUCKET, path, resized, "image/jpeg")

        return {
            "url": urls[""],
            "medium_url": urls["-medium"],
            "small_url": urls["-small"],
            "path": f"{base}.jpg",
        }

    @staticmethod
    def upload_lab_image(content: bytes, content_type: str | None, slug: str | None = None) -> dict[str, Any]:
        """
        Upload a lab workflow image.

        SVGs are stored unprocessed; raster images are resized to 1200px
        and stored as JPEG.

        Returns:
            {"url", "path"}
        """
        StorageService.validate_upload(content, content_type, RASTER_TYPES + [SVG_TYPE])

        base = f"workflows/{slug or 'workflow'}-{uuid.uuid4()}"
        if content_type == SVG_TYPE:
            path = f"{base}.svg"
            url = StorageService.upload_bytes(LAB_BUCKET, path, content, SVG_TYPE)
        else:
            path = f"{base}.jpg"
            resized = StorageService.resize_to_jpeg(content, LAB_MAX_WIDTH)
            url = StorageService.upload_bytes(LAB_BUCKET, path, resized, "image/jpeg")

        return {"url": url, "path": path}

    @staticmethod
    def check_connection() -> bool:
        """Storage ping used by the readiness probe."""
        client = SupabaseClient.get_client()
        try:
            client.storage.list_buckets()
            return True
        except Exception as e:
            logger.warning(f"Storage health check failed: {e}")
            return False
