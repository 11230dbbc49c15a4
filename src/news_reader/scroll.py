from __future__ import annotations

import logging
from typing import Callable, Hashable, Optional

logger = logging.getLogger("news_reader")


class InfiniteScrollTrigger:
    """Calls ``on_trigger`` when the last rendered item scrolls into view.

    The trigger watches a single target, the key of the last item, and
    fires on each hidden-to-visible transition of that target, never while
    ``is_loading()`` is true. Calling :meth:`observe` with a different key
    detaches from the old target.
    """

    def __init__(
        self,
        on_trigger: Callable[[], None],
        is_loading: Callable[[], bool] = lambda: False,
    ):
        self.on_trigger = on_trigger
        self.is_loading = is_loading
        self.target: Optional[Hashable] = None
        self._visible = False

    @property
    def connected(self) -> bool:
        return self.target is not None

    def observe(self, last_key: Optional[Hashable]) -> None:
        if last_key == self.target:
            return
        self.disconnect()
        if last_key is not None:
            logger.debug("Scroll trigger observing %s", last_key)
            self.target = last_key

    def disconnect(self) -> None:
        self.target = None
        self._visible = False

    def rearm(self) -> None:
        """Forget the last reported visibility so the next report counts as a transition."""
        self._visible = False

    def set_visible(self, key: Hashable, visible: bool) -> bool:
        """Report the visibility of ``key``; returns True if the trigger fired."""
        if not self.connected or key != self.target:
            return False
        became_visible = visible and not self._visible
        self._visible = visible
        if not became_visible or self.is_loading():
            return False
        logger.debug("Scroll trigger fired for %s", key)
        self.on_trigger()
        return True
