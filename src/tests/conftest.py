from __future__ import annotations

from datetime import datetime, timezone

import pytest

from news_reader.datamodels import Article


@pytest.fixture
def article_factory():
    def make(
        article_id: str,
        source_name: str = "Wire",
        published_at: datetime | None = datetime(2024, 1, 10, 12, 0, tzinfo=timezone.utc),
        url: str | None = None,
    ) -> Article:
        return Article(
            id=article_id,
            title=f"Story {article_id}",
            description="Description",
            content="Content",
            url=url or f"https://news.example.com/{article_id}",
            image_url="https://img.example.com/1.png",
            published_at=published_at,
            author="Reporter",
            source_name=source_name,
        )

    return make


@pytest.fixture
def payload_factory():
    def make(count: int = 10, total: int = 95, prefix: str = "a") -> dict:
        return {
            "status": "ok",
            "totalResults": total,
            "articles": [
                {
                    "source": {"id": None, "name": "Wire"},
                    "author": "Reporter",
                    "title": f"{prefix} story {i}",
                    "description": f"About {prefix} {i}",
                    "url": f"https://news.example.com/{prefix}/{i}",
                    "urlToImage": None,
                    "publishedAt": "2024-01-10T12:00:00Z",
                    "content": f"Body {i}",
                }
                for i in range(count)
            ],
        }

    return make
