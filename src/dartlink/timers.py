from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


class PulseTimers:
    """Delayed callbacks keyed by name, at most one pending per key.

    Scheduling a key cancels whatever was pending for that key first, so a
    newer pulse always wins. Distinct keys never touch each other's timers.
    """

    def __init__(self) -> None:
        self._log = logging.getLogger("PulseTimers")
        self._handles: dict[str, asyncio.TimerHandle] = {}

    def schedule(self, key: str, delay_s: float, callback: Callable[[], None]) -> None:
        """Run `callback` after `delay_s` seconds unless `key` is rescheduled or cancelled.

        Must be called from inside the running event loop.
        """

        self.cancel(key)
        loop = asyncio.get_running_loop()
        self._handles[key] = loop.call_later(delay_s, self._fire, key, callback)

    def cancel(self, key: str) -> bool:
        """Cancel the pending timer for `key`. Return True if one was pending."""

        handle = self._handles.pop(key, None)
        if handle is None:
            return False

        handle.cancel()
        return True

    def cancel_all(self) -> int:
        """Cancel every pending timer. Return how many were cancelled."""

        count = 0
        for key in list(self._handles):
            count += self.cancel(key)

        if count:
            self._log.debug("Cancelled %d pending timer(s)", count)
        return count

    def __contains__(self, key: object) -> bool:
        return key in self._handles

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._handles))

    def __len__(self) -> int:
        return len(self._handles)

    def _fire(self, key: str, callback: Callable[[], None]) -> None:
        self._handles.pop(key, None)
        try:
            callback()
        except Exception:
            self._log.exception("Timer [cyan]%s[/] failed", key)
