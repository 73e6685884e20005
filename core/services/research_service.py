# =============================================================================
# core/services/research_service.py - Topic Research
# =============================================================================
# Gathers background material for AI blog posts:
# - Brave web search (skipped when BRAVE_API_KEY is unset)
# - Tech news RSS feeds, filtered by topic relevance
#
# Sources fail independently; a dead feed or search outage yields fewer
# articles, never an error.
# =============================================================================

import logging
from collections import Counter
from time import mktime
from typing import Any

import feedparser
import httpx

from app.config import settings

logger = logging.getLogger(__name__)

BRAVE_SEARCH_URL = "https://api.search.brave.com/res/v1/web/search"
SEARCH_TIMEOUT = 15
FEED_TIMEOUT = 10

RSS_FEEDS = [
    ("MIT Technology Review", "https://www.technologyreview.com/feed/"),
    ("VentureBeat", "https://venturebeat.com/feed/"),
    ("TechCrunch", "https://techcrunch.com/feed/"),
    ("Forbes Small Business", "https://www.forbes.com/small-business/feed/"),
]
ITEMS_PER_FEED = 5
MAX_ARTICLES = 15
MAX_KEYWORDS = 10

COMMON_WORDS = {
    "the", "and", "for", "with", "this", "that", "from", "have", "been",
    "will", "their", "about", "would", "there", "which", "these", "other",
    "some", "what", "than", "more", "into", "through", "during", "before",
    "after",
}


class ResearchService:
    """Web search and RSS aggregation for content generation."""

    @staticmethod
    def search_web(query: str, count: int = 10) -> list[dict[str, Any]]:
        """Brave web search results as article dicts."""
        if not settings.BRAVE_API_KEY:
            logger.warning("BRAVE_API_KEY not set, skipping web search")
            return []

        try:
            response = httpx.get(
                BRAVE_SEARCH_URL,
                params={"q": query, "count": count},
                headers={
                    "Accept": "application/json",
                    "X-Subscription-Token": settings.BRAVE_API_KEY,
                },
                timeout=SEARCH_TIMEOUT,
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Web search error: {e}")
            return []

        results = (response.json().get("web") or {}).get("results") or []
        return [
            {
                "title": result.get("title", ""),
                "link": result.get("url", ""),
                "snippet": result.get("description"),
                "source": "Brave Search",
            }
            for result in results
        ]

    @staticmethod
    def fetch_feed(url: str, source: str) -> list[dict[str, Any]]:
        """Latest items of one RSS feed."""
        try:
            response = httpx.get(url, timeout=FEED_TIMEOUT, follow_redirects=True)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"RSS fetch error for {source}: {e}")
            return []

        feed = feedparser.parse(response.content)
        if feed.get("bozo") and not feed.entries:
            logger.error(f"RSS feed error for {source}: {feed.get('bozo_exception')}")
            return []

        articles = []
        for entry in feed.entries[:ITEMS_PER_FEED]:
            published = entry.get("published_parsed")
            articles.append({
                "title": entry.get("title", ""),
                "link": entry.get("link", ""),
                "pub_date": entry.get("published"),
                "content": entry.get("summary", ""),
                "source": source,
                "_timestamp": mktime(published) if published else 0,
            })
        return articles

    @staticmethod
    def aggregate_feeds() -> list[dict[str, Any]]:
        """All feeds merged, newest first."""
        articles = []
        for source, url in RSS_FEEDS:
            articles.extend(ResearchService.fetch_feed(url, source))

        articles.sort(key=lambda a: a["_timestamp"], reverse=True)
        for article in articles:
            del article["_timestamp"]
        return articles

    @staticmethod
    def is_relevant(article: dict[str, Any], topic: str, keywords: list[str]) -> bool:
        title = (article.get("title") or "").lower()
        content = (article.get("content") or "").lower()
        topic = topic.lower()
        return (
            topic in title
            or topic in content
            or any(keyword.lower() in title for keyword in keywords)
        )

    @staticmethod
    def extract_keywords(articles: list[dict[str, Any]]) -> list[str]:
        """Most frequent words longer than 4 chars, excluding common words."""
        frequency: Counter[str] = Counter()
        for article in articles:
            text = f"{article.get('title', '')} {article.get('snippet') or article.get('content') or ''}"
            frequency.update(
                word for word in text.lower().split()
                if len(word) > 4 and word not in COMMON_WORDS
            )
        return [word for word, _ in frequency.most_common(MAX_KEYWORDS)]

    @staticmethod
    def build_summary(articles: list[dict[str, Any]], topic: str) -> str:
        sources = list(dict.fromkeys(a["source"] for a in articles))
        lines = [
            f'Research on "{topic}" includes {len(articles)} articles from:',
            f"- {', '.join(sources)}",
        ]
        if articles:
            lines.append("\nRecent articles:")
            lines.extend(f'- "{a["title"]}" ({a["source"]})' for a in articles[:5])
        return "\n".join(lines)

    @staticmethod
    def research_topic(topic: str, keywords: list[str] | None = None) -> dict[str, Any]:
        """
        Research a topic from web search and RSS feeds.

        Returns:
            {"topic", "articles" (<=15), "summary", "keywords" (<=10)}
        """
        keywords = keywords or []
        logger.info(f"Researching topic: {topic}")

        query = f"{topic} {' '.join(keywords)}" if keywords else topic
        web_results = ResearchService.search_web(query, 10)
        relevant = [
            article for article in ResearchService.aggregate_feeds()
            if ResearchService.is_relevant(article, topic, keywords)
        ]
        articles = web_results + relevant

        combined = list(dict.fromkeys(keywords + ResearchService.extract_keywords(articles)))
        logger.info(f"Research complete: {len(articles)} articles found")

        return {
            "topic": topic,
            "articles": articles[:MAX_ARTICLES],
            "summary": ResearchService.build_summary(articles, topic),
            "keywords": combined[:MAX_KEYWORDS],
        }
