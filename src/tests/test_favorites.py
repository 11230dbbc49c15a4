from __future__ import annotations

from dataclasses import replace

from news_reader.favorites import FavoritesStore, favorite_key


def test_toggle_adds_and_removes(article_factory):
    store = FavoritesStore()
    article = article_factory("1")
    assert store.toggle(article) is True
    assert store.is_favorite(article)
    assert store.toggle(article) is False
    assert not store.is_favorite(article)
    assert len(store) == 0


def test_membership_is_by_url(article_factory):
    store = FavoritesStore()
    article = article_factory("1")
    store.toggle(article)
    refetched = replace(article, id="1700000000000-1-0")
    assert store.is_favorite(refetched)
    store.toggle(refetched)
    assert len(store) == 0


def test_iteration_and_remove(article_factory):
    store = FavoritesStore()
    first, second = article_factory("1"), article_factory("2")
    store.toggle(first)
    store.toggle(second)
    assert [a.id for a in store] == ["1", "2"]
    store.remove(first.url)
    store.remove("https://unknown.example")
    assert store.articles() == [second]


def test_articles_without_url_are_kept_apart(article_factory):
    store = FavoritesStore()
    first = replace(article_factory("1"), url="")
    second = replace(article_factory("2"), url="")
    assert store.toggle(first) is True
    assert store.is_favorite(first)
    assert not store.is_favorite(second)

    store.toggle(second)
    store.remove(favorite_key(first))
    assert store.articles() == [second]
