from __future__ import annotations

from typing import Dict, Iterator, List

from .datamodels import Article


def favorite_key(article: Article) -> str:
    """Articles are matched by URL; those without one fall back to their id."""
    return article.url or f"id:{article.id}"


class FavoritesStore:
    """Session-only set of favorite articles."""

    def __init__(self) -> None:
        self._items: Dict[str, Article] = {}

    def toggle(self, article: Article) -> bool:
        """Add or remove ``article``; returns whether it is now a favorite."""
        key = favorite_key(article)
        if key in self._items:
            del self._items[key]
            return False
        self._items[key] = article
        return True

    def is_favorite(self, article: Article) -> bool:
        return favorite_key(article) in self._items

    def remove(self, key: str) -> None:
        self._items.pop(key, None)

    def articles(self) -> List[Article]:
        return list(self._items.values())

    def __iter__(self) -> Iterator[Article]:
        return iter(list(self._items.values()))

    def __len__(self) -> int:
        return len(self._items)
