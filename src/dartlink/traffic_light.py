from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from .store import StateStore
    from .types import TrafficLight

log = logging.getLogger(__name__)

COLOR_STATE: Final = "status.trafficLightColor"
LABEL_STATE: Final = "status.trafficLightState"

COLORS: Final[dict[TrafficLight, str]] = {
    "green": "#00FF00",  # Player may throw
    "yellow": "#FFFF00",  # Remove darts
    "red": "#FF0000",  # Board error / offline
}

# Board status -> light; other statuses leave the light as it is
BOARD_STATUS_LIGHTS: Final[dict[str, TrafficLight]] = {
    "Throw": "green",
    "Takeout": "yellow",
}


def for_board_status(status: object) -> TrafficLight | None:
    """Return the light implied by a board ``status``, None to keep the current one."""
    return BOARD_STATUS_LIGHTS.get(status) if isinstance(status, str) else None


def set_status(store: StateStore, status: str) -> TrafficLight:
    """Publish color and label of the traffic light. Unknown statuses fall back to red."""

    if status not in COLORS:
        log.warning("Unknown traffic light status %r, using red", status)
        status = "red"

    light: TrafficLight = status  # type: ignore[assignment]
    store.set_state(COLOR_STATE, COLORS[light], ack=True)
    store.set_state(LABEL_STATE, light, ack=True)
    return light
