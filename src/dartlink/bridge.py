"""
Autodarts board manager -> state store bridge.

Polls the board manager's HTTP API and publishes what it sees as named
states (see `MqttStateStore` for the MQTT side).

Data Flow:
    Board -> GET /api/state -> Bridge -> throw / visit / status states
    tools.RAW, config.*, system.hardware.* writes -> Bridge -> pulses / overrides / foreign ids

Connection Handling:
    - Poll every `interval` secs while connected, every `offline_interval` while not
    - The next poll is scheduled only after the current one finished (never overlaps)
    - Disconnect is logged once on entry, repeats only at debug level
    - Metadata (host info, cameras) refreshed every 5 min, failures are non-critical
    - Graceful shutdown cancels every pending task and timer
"""

from __future__ import annotations

import asyncio
import hashlib
import json
import logging
from typing import TYPE_CHECKING, Final

from . import hardware, runtime_config, system_info, tools, traffic_light
from .board_api import STATE_PATH, load_json_object
from .context import Context, Thresholds
from .errors import NETWORK_ERRORS, PayloadParseError
from .misc import excerpt
from .throws import Dart, update_throw
from .visit import update_visit

if TYPE_CHECKING:
    from logging import Logger

    from .board_api import BoardApi
    from .hooks import ToolsServer
    from .settings import Settings
    from .store import State, StateStore
    from .types import BoardStateJson

ONLINE_STATE: Final = "online"
BOARD_STATUS_STATE: Final = "status.boardStatus"
OFFLINE_STATUS: Final = "offline"


def parse_board_state(body: str) -> BoardStateJson:
    """Decode an ``/api/state`` body.

    Raises:
        PayloadParseError: Not JSON, or not a JSON object
    """

    return load_json_object(body)  # type: ignore[return-value]


def darts_of(board_state: BoardStateJson) -> list[Dart]:
    throws = board_state.get("throws")
    if not isinstance(throws, list):
        return []
    return [Dart.from_json(t) for t in throws]


def signature(darts: list[Dart]) -> str:
    """Fingerprint of the ordered (segment name, multiplier) pairs of `darts`."""

    pairs = [(d.segment_name or "", d.multiplier or 0) for d in darts]
    return hashlib.sha1(json.dumps(pairs).encode(), usedforsecurity=False).hexdigest()


class Bridge:
    """
    Bridges the board manager to the state store.

    Manages the full lifecycle:
        1. Seed states (offline, red light, thresholds, tools flags)
        2. Subscribe to inbound writes (tools, config overrides, hardware switches)
        3. Poll ``/api/state`` on an adaptive interval, refresh metadata periodically
        4. Cancel everything on shutdown
    """

    settings: Settings
    ctx: Context
    connected: bool | None  # None until the first poll finished

    _log: Logger
    _store: StateStore
    _api: BoardApi

    def __init__(
        self,
        settings: Settings,
        *,
        store: StateStore,
        api: BoardApi,
        tools_server: ToolsServer | None = None,
    ) -> None:
        self.settings = settings
        self.ctx = Context(store=store, thresholds=Thresholds.from_settings(settings))
        self.connected = None

        self._log = logging.getLogger("Bridge")
        self._store = store
        self._api = api
        self._tools_server = tools_server
        self._last_signature = ""
        self._last_count = 0
        self._tasks: list[asyncio.Task[None]] = []
        self._stop = asyncio.Event()
        self._closed = False

    # ==================== Public API ====================

    async def run(self) -> None:
        """Run until `stop()` is called (or the task is cancelled), then clean up."""

        self.start()
        try:
            await self._stop.wait()
        finally:
            await self.shutdown()
            self._log.info("Shutdown complete")

    def start(self) -> None:
        """Seed states, subscribe to inbound writes and start the background tasks."""

        self._log.info(
            "Polling board manager at [bright_magenta]%s:%d[/] every %ss (offline: %ss)",
            self.settings.host,
            self.settings.port,
            self.settings.interval,
            self.settings.offline_interval,
        )
        self._init_states()
        self._subscribe()

        self._tasks = [
            asyncio.create_task(self._poll_forever(), name="poll"),
            asyncio.create_task(self._refresh_metadata_forever(), name="metadata"),
        ]
        if self._tools_server is not None:
            self._tools_server.start()

    def stop(self) -> None:
        self._stop.set()

    async def shutdown(self) -> None:
        """Cancel the poll loop, metadata refresh and every pending pulse reset.

        Inbound writes arriving from here on are dropped, so no new reset can be
        scheduled once the pending ones are cancelled.
        """

        if self._tools_server is not None:
            await self._tools_server.stop()
        self._closed = True

        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []

        self.ctx.timers.cancel_all()

        self._store.set_state(ONLINE_STATE, False, ack=True)

    @property
    def poll_interval(self) -> float:
        """Secs until the next poll, depending on the connectivity state."""
        return self.settings.interval if self.connected else self.settings.offline_interval

    async def poll_once(self) -> None:
        """Run one poll cycle. Fetch and parse faults are absorbed and logged."""

        try:
            body = await self._api.fetch(STATE_PATH)
        except NETWORK_ERRORS as e:
            self._on_unreachable(e)
            return
        except Exception:
            self._log.exception("Unexpected error while polling board manager")
            return

        self._on_reachable()
        try:
            board_state = parse_board_state(body)
        except PayloadParseError as e:
            # Board answered, so it stays online; just skip this payload
            self._log.warning("Invalid board state (%s) | data: %s", excerpt(str(e)), excerpt(body))
            return

        self._process(board_state)

    # ==================== Connectivity ====================

    def _on_reachable(self) -> None:
        if self.connected is False:
            self._log.info("Board manager reachable again")
        elif self.connected is None:
            self._log.info("Connected to board manager")

        self.connected = True
        self._store.set_state(ONLINE_STATE, True, ack=True)

    def _on_unreachable(self, error: Exception) -> None:
        if self.connected is False:
            self._log.debug("Board manager still not reachable: %s", excerpt(str(error)))
        else:
            self._log.warning("Board manager not reachable: %s", excerpt(str(error)))

        self.connected = False
        self._store.set_state(ONLINE_STATE, False, ack=True)
        self._store.set_state(BOARD_STATUS_STATE, OFFLINE_STATUS, ack=True)
        traffic_light.set_status(self._store, "red")

    # ==================== Event Processing ====================

    def _process(self, board_state: BoardStateJson) -> None:
        """Publish board status, then throw and visit states if the darts changed."""

        status = board_state.get("status")
        event = board_state.get("event")
        board_status = event if isinstance(event, str) and event else status
        if isinstance(board_status, str):
            self._store.set_state(BOARD_STATUS_STATE, board_status, ack=True)

        if (light := traffic_light.for_board_status(status)) is not None:
            traffic_light.set_status(self._store, light)

        darts = darts_of(board_state)
        sig = signature(darts)
        if sig == self._last_signature:
            return
        self._last_signature = sig

        if darts:
            update_throw(self.ctx, darts[-1])
        self._last_count = update_visit(self.ctx, darts, self._last_count)

    def _init_states(self) -> None:
        store = self._store
        store.set_state(ONLINE_STATE, False, ack=True)
        store.set_state(BOARD_STATUS_STATE, OFFLINE_STATUS, ack=True)
        traffic_light.set_status(store, "red")
        runtime_config.init(self.ctx)
        tools.init(store, self.settings)

    # ==================== Inbound Writes ====================

    def _subscribe(self) -> None:
        ids = [tools.RAW_STATE, *runtime_config.OVERRIDES, hardware.LIGHT_STATE, hardware.POWER_STATE]
        for state_id in ids:
            self._store.subscribe(state_id, self._on_state_change)

        hardware.subscribe_foreign(self._store, self.settings)

    def _on_state_change(self, state_id: str, state: State) -> None:
        """Route unacknowledged writes to their handler (acknowledged echoes are ignored)."""

        if state.ack:
            return
        if self._closed:
            self._log.debug("Shutting down, dropping write to %s", state_id)
            return

        match state_id:
            case tools.RAW_STATE:
                tools.handle_raw(self.ctx, state.val)
            case hardware.LIGHT_STATE | hardware.POWER_STATE:
                hardware.handle_write(self._store, self.settings, state_id, state.val)
            case _ if state_id in runtime_config.OVERRIDES:
                runtime_config.handle_write(self.ctx, state_id, state.val)
            case _:
                self._log.debug("No handler for %s", state_id)

    # ==================== Background Tasks ====================

    async def _poll_forever(self) -> None:
        while True:
            try:
                await self.poll_once()
            except Exception:
                self._log.exception("Poll cycle failed")
            await asyncio.sleep(self.poll_interval)

    async def _refresh_metadata_forever(self) -> None:
        while True:
            try:
                await system_info.refresh(self._api, self._store)
            except Exception:
                self._log.exception("Unexpected error while refreshing metadata")
            await asyncio.sleep(self.settings.metadata_interval)

