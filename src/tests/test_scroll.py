from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from news_reader.scroll import InfiniteScrollTrigger


@pytest.fixture
def fired():
    return MagicMock()


@pytest.fixture
def loading():
    return {"value": False}


@pytest.fixture
def trigger(fired, loading):
    return InfiniteScrollTrigger(fired, is_loading=lambda: loading["value"])


def test_fires_once_when_last_item_becomes_visible(trigger, fired):
    trigger.observe("item-9")
    assert trigger.set_visible("item-9", False) is False
    assert trigger.set_visible("item-9", True) is True
    assert trigger.set_visible("item-9", True) is False
    fired.assert_called_once()


def test_fires_again_on_a_new_visibility_transition(trigger, fired):
    trigger.observe("item-9")
    trigger.set_visible("item-9", True)
    trigger.set_visible("item-9", False)
    trigger.set_visible("item-9", True)
    assert fired.call_count == 2


def test_does_not_fire_while_loading(trigger, fired, loading):
    trigger.observe("item-9")
    loading["value"] = True
    assert trigger.set_visible("item-9", True) is False
    fired.assert_not_called()


def test_reports_for_other_items_are_ignored(trigger, fired):
    trigger.observe("item-19")
    assert trigger.set_visible("item-9", True) is False
    fired.assert_not_called()


def test_new_last_item_replaces_target(trigger, fired):
    trigger.observe("item-9")
    trigger.set_visible("item-9", True)
    trigger.observe("item-19")
    assert trigger.target == "item-19"
    assert trigger.set_visible("item-9", True) is False
    assert trigger.set_visible("item-19", True) is True
    assert fired.call_count == 2


def test_observing_same_item_keeps_state(trigger, fired):
    trigger.observe("item-9")
    trigger.set_visible("item-9", True)
    trigger.observe("item-9")
    assert trigger.set_visible("item-9", True) is False
    fired.assert_called_once()


def test_rearm_allows_refire_when_still_visible(trigger, fired):
    trigger.observe("item-9")
    trigger.set_visible("item-9", True)
    trigger.rearm()
    assert trigger.set_visible("item-9", True) is True
    assert fired.call_count == 2


def test_empty_list_disconnects(trigger, fired):
    trigger.observe("item-9")
    trigger.observe(None)
    assert trigger.connected is False
    assert trigger.set_visible("item-9", True) is False
    fired.assert_not_called()
