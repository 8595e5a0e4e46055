"""
Key-value state store with change subscriptions.

State ids are dotted paths (e.g. ``visit.score``). Every write carries an
``ack`` flag: ``ack=True`` marks an authoritative value written by the bridge,
``ack=False`` marks a request from outside (user, automation, HTTP callback)
that a handler is expected to act on.

Foreign ids belong to other systems (e.g. a smart plug) and live in their own
namespace; the bridge only proxies values to and from them.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol

from .misc import time_now_ms

if TYPE_CHECKING:
    from collections.abc import Callable
    from logging import Logger

    from .types import StateValue

    type StateCallback = Callable[[str, State], None]


@dataclass(frozen=True, slots=True)
class State:
    """A single stored value."""

    val: StateValue
    ack: bool = True
    ts: int = field(default_factory=time_now_ms)  # Unix timestamp (ms)


class StateStore(Protocol):
    def set_state(self, state_id: str, val: StateValue, *, ack: bool = True) -> State:
        """Write a value and notify subscribers of `state_id`."""
        ...

    def get_state(self, state_id: str) -> State | None:
        """Return the last value written to `state_id` (None if never written)."""
        ...

    def subscribe(self, state_id: str, callback: StateCallback) -> None:
        """Call `callback(state_id, state)` on every write to `state_id`."""
        ...

    def set_foreign_state(self, foreign_id: str, val: StateValue) -> None:
        """Write a value to a state owned by another system."""
        ...

    def subscribe_foreign(self, foreign_id: str, callback: StateCallback) -> None:
        """Call `callback(foreign_id, state)` whenever the foreign state changes."""
        ...


class MemoryStateStore:
    """In-process state store. Callbacks run synchronously inside `set_state`."""

    _log: Logger

    def __init__(self) -> None:
        self._log = logging.getLogger(type(self).__name__)
        self._states: dict[str, State] = {}
        self._foreign: dict[str, State] = {}
        self._subs: defaultdict[str, list[StateCallback]] = defaultdict(list)
        self._foreign_subs: defaultdict[str, list[StateCallback]] = defaultdict(list)

    def set_state(self, state_id: str, val: StateValue, *, ack: bool = True) -> State:
        state = State(val=val, ack=ack)
        self._states[state_id] = state
        self._notify(self._subs, state_id, state)
        return state

    def get_state(self, state_id: str) -> State | None:
        return self._states.get(state_id)

    def subscribe(self, state_id: str, callback: StateCallback) -> None:
        self._subs[state_id].append(callback)

    def set_foreign_state(self, foreign_id: str, val: StateValue) -> None:
        self.receive_foreign(foreign_id, val)

    def subscribe_foreign(self, foreign_id: str, callback: StateCallback) -> None:
        self._foreign_subs[foreign_id].append(callback)

    def get_foreign_state(self, foreign_id: str) -> State | None:
        return self._foreign.get(foreign_id)

    # ==================== Delivery ====================

    def receive(self, state_id: str, val: StateValue) -> None:
        """Apply a write that arrived from outside the bridge (always unacknowledged)."""

        state = State(val=val, ack=False)
        self._states[state_id] = state
        self._notify(self._subs, state_id, state)

    def receive_foreign(self, foreign_id: str, val: StateValue) -> None:
        state = State(val=val, ack=True)
        self._foreign[foreign_id] = state
        self._notify(self._foreign_subs, foreign_id, state)

    def _notify(self, subs: dict[str, list[StateCallback]], state_id: str, state: State) -> None:
        for callback in subs.get(state_id, ()):
            try:
                callback(state_id, state)
            except Exception:
                self._log.exception("Handler for [cyan]%s[/] failed", state_id)
