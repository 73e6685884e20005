# =============================================================================
# tests/test_ai.py - AI Generation Endpoint Tests
# =============================================================================
# Research helpers run on in-memory articles; the generation pipeline and
# external APIs are patched.
#
# Run with: pytest tests/test_ai.py -v
# =============================================================================

import inspect
from unittest.mock import MagicMock, patch

import httpx
import pytest

from app.config import settings
from app.exceptions import ServiceNotConfiguredError, UpstreamServiceError
from app.routers import ai as ai_router
from app.routers import cron as cron_router
from app.routers import jarvis as jarvis_router
from app.routers import labs as labs_router
from core.services.content_service import ContentService
from core.services.image_service import ImageService
from core.services.research_service import ResearchService

ARTICLES = [
    {"title": "Automation helps plumbers", "content": "Scheduling software automation", "source": "TechCrunch"},
    {"title": "Chip prices fall", "content": "Semiconductors", "source": "VentureBeat"},
    {"title": "Small teams adopt chatbots", "content": "Automation for small business", "source": "Forbes Small Business"},
]

RSS = b"""<?xml version="1.0"?>
<rss version="2.0"><channel><title>Feed</title>
<item><title>Automation for plumbers</title><link>https://news/1</link>
<description>Scheduling software</description><pubDate>Mon, 19 Oct 2026 09:00:00 GMT</pubDate></item>
</channel></rss>"""


class TestResearchHelpers:
    """Tests for ResearchService filtering and keyword extraction."""

    def test_relevance_by_topic_or_keyword(self):
        assert ResearchService.is_relevant(ARTICLES[0], "automation", [])
        assert not ResearchService.is_relevant(ARTICLES[1], "automation", ["plumbers"])
        assert ResearchService.is_relevant(ARTICLES[2], "robots", ["chatbots"])

    def test_keywords_skip_short_and_common_words(self):
        keywords = ResearchService.extract_keywords(ARTICLES)

        assert keywords[0] == "automation"
        assert "for" not in keywords
        assert "about" not in keywords
        assert all(len(word) > 4 for word in keywords)

    def test_web_search_skipped_without_key(self, monkeypatch):
        monkeypatch.setattr(settings, "BRAVE_API_KEY", "")

        with patch("core.services.research_service.httpx.get") as get:
            assert ResearchService.search_web("automation") == []

        get.assert_not_called()

    def test_feed_fetched_with_timeout(self):
        response = MagicMock(content=RSS)

        with patch("core.services.research_service.httpx.get", return_value=response) as get:
            articles = ResearchService.fetch_feed("https://feeds/tc", "TechCrunch")

        assert get.call_args.kwargs["timeout"] == 10
        assert [a["title"] for a in articles] == ["Automation for plumbers"]
        assert articles[0]["source"] == "TechCrunch"

    def test_stalled_feed_skipped(self):
        good = MagicMock(content=RSS)

        def fetch(url, **kwargs):
            if "technologyreview" in url:
                raise httpx.ReadTimeout("stalled")
            return good

        with patch("core.services.research_service.httpx.get", side_effect=fetch):
            articles = ResearchService.aggregate_feeds()

        assert len(articles) == 3
        assert "MIT Technology Review" not in {a["source"] for a in articles}

    def test_research_merges_sources(self):
        web = [{"title": "Automation ROI", "link": "https://a", "snippet": "automation savings", "source": "Brave Search"}]

        with patch.object(ResearchService, "search_web", return_value=web), \
                patch.object(ResearchService, "aggregate_feeds", return_value=[dict(a) for a in ARTICLES]):
            research = ResearchService.research_topic("automation", ["plumbing"])

        assert [a["source"] for a in research["articles"]] == ["Brave Search", "TechCrunch", "Forbes Small Business"]
        assert research["keywords"][0] == "plumbing"
        assert research["summary"].startswith('Research on "automation" includes 3 articles from:')


class TestImageSearch:
    """Tests for ImageService."""

    def test_not_configured(self, monkeypatch):
        monkeypatch.setattr(settings, "UNSPLASH_ACCESS_KEY", "")

        with pytest.raises(ServiceNotConfiguredError):
            ImageService.search("office")

    def test_header_image_never_raises(self, monkeypatch):
        monkeypatch.setattr(settings, "UNSPLASH_ACCESS_KEY", "")

        assert ImageService.header_image("AI for clinics", ["automation"]) is None

    def test_results_mapped(self, monkeypatch):
        monkeypatch.setattr(settings, "UNSPLASH_ACCESS_KEY", "key")
        photo = {
            "id": "p1",
            "urls": {"regular": "https://images/p1"},
            "links": {"download_location": "https://api/p1/download"},
            "user": {"name": "Ana", "links": {"html": "https://unsplash.com/@ana"}},
            "description": None,
            "alt_description": "desk with laptop",
        }
        response = MagicMock()
        response.json.return_value = {"results": [photo]}

        with patch("core.services.image_service.httpx.get", return_value=response) as get:
            images = ImageService.search("office", 3)

        assert images == [{
            "id": "p1",
            "url": "https://images/p1",
            "download_url": "https://api/p1/download",
            "photographer": "Ana",
            "photographer_url": "https://unsplash.com/@ana",
            "description": None,
            "alt_description": "desk with laptop",
        }]
        params = get.call_args.kwargs["params"]
        assert params["orientation"] == "landscape"
        assert params["content_filter"] == "high"

    def test_upstream_error(self, monkeypatch):
        monkeypatch.setattr(settings, "UNSPLASH_ACCESS_KEY", "key")

        with patch("core.services.image_service.httpx.get", side_effect=httpx.ConnectError("down")):
            with pytest.raises(UpstreamServiceError) as exc_info:
                ImageService.search("office")

        assert exc_info.value.code == "UPSTREAM_ERROR"


class TestAIRoutes:
    """Tests for /api/v1/ai."""

    def test_generate_post_needs_topic_or_keywords(self, api_client, login, editor_profile):
        login(editor_profile)

        response = api_client.post("/api/v1/ai/generate-post", json={"topic": "  "})

        assert response.status_code == 400
        assert response.json()["detail"] == "Either topic or keywords must be provided"

    def test_generate_post(self, api_client, login, editor_profile):
        login(editor_profile)
        result = {"post_id": "post-1", "slug": "ai-for-clinics", "generation_data": {}}

        with patch.object(ContentService, "generate_blog_post", return_value=result) as generate:
            response = api_client.post("/api/v1/ai/generate-post", json={"keywords": ["clinics"]})

        assert response.json()["slug"] == "ai-for-clinics"
        assert generate.call_args.kwargs == {"topic": None, "keywords": ["clinics"]}

    def test_viewer_forbidden(self, api_client, login, viewer_profile):
        login(viewer_profile)

        response = api_client.post("/api/v1/ai/generate-image", json={"query": "office"})

        assert response.status_code == 403


class TestLongRunningHandlers:
    """External-API pipelines must not run on the event loop."""

    @pytest.mark.parametrize("handler", [
        ai_router.generate_post,
        ai_router.research_topic,
        ai_router.generate_image,
        labs_router.generate_lab,
        cron_router.generate_weekly_post,
        cron_router.sync_voicemails,
        jarvis_router.transcribe_voicemail,
    ])
    def test_runs_in_threadpool(self, handler):
        assert not inspect.iscoroutinefunction(handler)
