# =============================================================================
# core/services/image_service.py - Unsplash Image Search
# =============================================================================
# Header images for generated posts and the /ai/generate-image endpoint.
# Photos must be attributed and their downloads tracked per the Unsplash
# API guidelines.
# =============================================================================

import logging
from typing import Any

import httpx

from app.config import settings
from app.exceptions import ServiceNotConfiguredError, UpstreamServiceError

logger = logging.getLogger(__name__)

UNSPLASH_SEARCH_URL = "https://api.unsplash.com/search/photos"
UNSPLASH_TIMEOUT = 15


def _auth_headers() -> dict[str, str]:
    return {
        "Authorization": f"Client-ID {settings.UNSPLASH_ACCESS_KEY}",
        "Accept-Version": "v1",
    }


class ImageService:
    """Unsplash search and attribution helpers."""

    @staticmethod
    def search(query: str, count: int = 5) -> list[dict[str, Any]]:
        """
        Search landscape photos with the strict content filter.

        Raises:
            ServiceNotConfiguredError: UNSPLASH_ACCESS_KEY missing
            UpstreamServiceError: Unsplash API error
        """
        if not settings.UNSPLASH_ACCESS_KEY:
            raise ServiceNotConfiguredError("Unsplash", "UNSPLASH_ACCESS_KEY")

        try:
            response = httpx.get(
                UNSPLASH_SEARCH_URL,
                params={
                    "query": query,
                    "per_page": count,
                    "orientation": "landscape",
                    "content_filter": "high",
                },
                headers=_auth_headers(),
                timeout=UNSPLASH_TIMEOUT,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Unsplash search error: {e}")
            raise UpstreamServiceError("Unsplash", str(e))

        return [
            {
                "id": photo["id"],
                "url": photo["urls"]["regular"],
                "download_url": photo["links"]["download_location"],
                "photographer": photo["user"]["name"],
                "photographer_url": photo["user"]["links"]["html"],
                "description": photo.get("description"),
                "alt_description": photo.get("alt_description"),
            }
            for photo in response.json().get("results", [])
        ]

    @staticmethod
    def track_download(download_url: str) -> None:
        if not settings.UNSPLASH_ACCESS_KEY or not download_url:
            return
        try:
            httpx.get(download_url, headers=_auth_headers(), timeout=UNSPLASH_TIMEOUT)
        except httpx.HTTPError as e:
            logger.warning(f"Error tracking Unsplash download: {e}")

    @staticmethod
    def header_image(topic: str, keywords: list[str]) -> dict[str, Any] | None:
        """
        Pick a header image for a post, or None.

        Never raises; a post without an image is still publishable.
        """
        query = f"{topic} {' '.join(keywords[:2])}" if keywords else topic
        try:
            images = ImageService.search(query, 5)
        except (ServiceNotConfiguredError, UpstreamServiceError) as e:
            logger.warning(f"Skipping header image: {e.message}")
            return None

        if not images:
            logger.warning(f"No images found for query: {query}")
            return None

        image = images[0]
        ImageService.track_download(image["download_url"])
        return image

    @staticmethod
    def alt_text(image: dict[str, Any], topic: str) -> str:
        return image.get("alt_description") or image.get("description") or f"Header image for {topic}"

    @staticmethod
    def attribution(image: dict[str, Any]) -> dict[str, Any]:
        return {
            "photographer": image["photographer"],
            "photographerUrl": image["photographer_url"],
            "unsplashUrl": "https://unsplash.com",
        }
