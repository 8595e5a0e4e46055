"""
Raw tools events.

External tools (callers, overlays, home automation) report game events as
free text written to ``tools.RAW``. Known words pulse a matching flag;
anything else is ignored.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import TYPE_CHECKING, Final
from urllib.parse import quote

from .misc import excerpt

if TYPE_CHECKING:
    from .context import Context
    from .settings import Settings
    from .store import StateStore
    from .types import StateValue

log = logging.getLogger(__name__)

RAW_STATE: Final = "tools.RAW"


class ToolEvent(StrEnum):
    BUSTED = "busted"
    GAMEON = "gameon"
    GAMESHOT = "gameshot"
    MATCHON = "matchon"
    MATCHSHOT = "matchshot"
    ONE_EIGHTY = "180"

    @classmethod
    def parse(cls, text: StateValue) -> ToolEvent | None:
        """Return the event named by `text` (case-insensitive), None if unknown."""

        if text is None or isinstance(text, bool):
            return None
        try:
            return cls(str(text).strip().lower())
        except ValueError:
            return None

    @property
    def flag(self) -> str:
        return EVENT_FLAGS[self]

    @property
    def url_state(self) -> str:
        return f"tools.url.{self.value}"


EVENT_FLAGS: Final[dict[ToolEvent, str]] = {
    ToolEvent.BUSTED: "tools.isBusted",
    ToolEvent.GAMEON: "tools.isGameon",
    ToolEvent.GAMESHOT: "tools.isGameshot",
    ToolEvent.MATCHON: "tools.isMatchon",
    ToolEvent.MATCHSHOT: "tools.isMatchshot",
    ToolEvent.ONE_EIGHTY: "tools.is180",
}


def callback_url(settings: Settings, event: ToolEvent) -> str:
    """URL an external tool calls to report `event` (simple-API ``/set`` style)."""

    return (
        f"http://{settings.tools_ip}:{settings.tools_port}"
        f"/set/{settings.instance}.{RAW_STATE}?value={quote(event.value)}"
    )


def init(store: StateStore, settings: Settings) -> None:
    """Reset the raw input and every flag, and publish the callback URLs."""

    store.set_state(RAW_STATE, "", ack=True)
    for event in ToolEvent:
        store.set_state(event.flag, False, ack=True)
        store.set_state(event.url_state, callback_url(settings, event), ack=True)


def handle_raw(ctx: Context, text: StateValue) -> ToolEvent | None:
    """Acknowledge a ``tools.RAW`` write and pulse the flag it names.

    Returns:
        The recognised event, None if the text was ignored
    """

    ctx.store.set_state(RAW_STATE, text, ack=True)

    event = ToolEvent.parse(text)
    if event is None:
        log.debug("Ignoring unknown tools event %s", excerpt(repr(text)))
        return None

    log.info("Tools event [bright_green]%s[/]", event.value)
    ctx.pulse(event.flag, True)
    return event
