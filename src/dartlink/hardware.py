"""
Board light / power switches proxied to states owned by other systems.

A write to ``system.hardware.light`` (or ``power``) is forwarded to the
configured foreign id; changes of the foreign id are mirrored back.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .settings import Settings
    from .store import State, StateStore
    from .types import StateValue

log = logging.getLogger(__name__)

LIGHT_STATE: Final = "system.hardware.light"
POWER_STATE: Final = "system.hardware.power"

_TRUTHY: Final = frozenset({"1", "true", "on", "yes"})
_FALSY: Final = frozenset({"0", "false", "off", "no", ""})


def as_switch(val: StateValue) -> StateValue:
    """Coerce textual switch values (``"on"``, ``"false"``, ...) to bool; leave others as-is."""

    if isinstance(val, str):
        low = val.strip().lower()
        if low in _TRUTHY:
            return True
        if low in _FALSY:
            return False
    return val


def targets(settings: Settings) -> dict[str, str | None]:
    """Return switch state id -> foreign id (None if not configured)."""
    return {LIGHT_STATE: settings.light_target_id, POWER_STATE: settings.power_target_id}


def handle_write(store: StateStore, settings: Settings, state_id: str, val: StateValue) -> None:
    """Forward a switch write to its foreign target."""

    target = targets(settings)[state_id]
    if target is None:
        log.warning("%s changed, but no target id is configured", state_id)
        return

    log.info("Forwarding %s = %s to [bright_green]%s[/]", state_id, as_switch(val), target)
    store.set_foreign_state(target, as_switch(val))


def subscribe_foreign(store: StateStore, settings: Settings) -> None:
    """Mirror configured foreign targets back into the switch states."""

    for state_id, target in targets(settings).items():
        if target is None:
            continue

        def mirror(_foreign_id: str, state: State, state_id: str = state_id) -> None:
            store.set_state(state_id, as_switch(state.val), ack=True)

        store.subscribe_foreign(target, mirror)
