"""Per-bridge mutable state shared by the throw, tools and config handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .timers import PulseTimers

if TYPE_CHECKING:
    from .settings import Settings
    from .store import StateStore


@dataclass
class Thresholds:
    """Runtime-overridable thresholds.

    Seeded from settings at startup; overrides live until the process exits.
    """

    triple_min_score: float = 1
    triple_max_score: float = 20
    trigger_reset_sec: float = 0  # 0 = flags stay set until the next write

    @classmethod
    def from_settings(cls, settings: Settings) -> Thresholds:
        return cls(
            triple_min_score=settings.triple_min_score,
            triple_max_score=settings.triple_max_score,
            trigger_reset_sec=settings.trigger_reset_sec,
        )

    def score_range(self) -> tuple[float, float]:
        """Return (min, max) with an inverted range swapped back into order."""

        lo, hi = self.triple_min_score, self.triple_max_score
        return (hi, lo) if lo > hi else (lo, hi)


@dataclass
class Context:
    """Everything a handler needs: where to write, current thresholds, pending resets."""

    store: StateStore
    thresholds: Thresholds = field(default_factory=Thresholds)
    timers: PulseTimers = field(default_factory=PulseTimers)

    def pulse(self, state_id: str, active: bool) -> None:
        """Write a boolean flag; a set flag reverts to False after `trigger_reset_sec`.

        Any reset still pending for `state_id` is cancelled first.
        """

        self.store.set_state(state_id, active, ack=True)
        self.timers.cancel(state_id)

        delay = self.thresholds.trigger_reset_sec
        if active and delay > 0:
            self.timers.schedule(state_id, delay, lambda: self._reset(state_id))

    def _reset(self, state_id: str) -> None:
        logging.getLogger("Context").debug("Auto-reset [cyan]%s[/]", state_id)
        self.store.set_state(state_id, False, ack=True)
