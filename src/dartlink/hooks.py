"""
Tools callback endpoint.

A tiny simple-API style surface so external tools can report events without
speaking MQTT:

    GET /set/<instance>.tools.RAW?value=busted
    GET /get/<instance>.visit.score

Only the bridge's inbound states are writable. Writes are delivered exactly
like an MQTT ``/set`` message (unacknowledged change).
"""

import asyncio
import logging
from typing import Any, Final

import uvicorn
from fastapi import FastAPI, HTTPException

from .hardware import LIGHT_STATE, POWER_STATE
from .runtime_config import OVERRIDES
from .store import MemoryStateStore
from .tools import RAW_STATE
from .types import StatusOk

WRITABLE: Final = frozenset({RAW_STATE, LIGHT_STATE, POWER_STATE, *OVERRIDES})


def create_app(store: MemoryStateStore, *, instance: str) -> FastAPI:
    """Build the callback app for `store`. State ids may carry the ``<instance>.`` prefix."""

    app = FastAPI(title="dartlink tools")
    prefix = f"{instance}."

    @app.get("/set/{state_id}")
    async def set_state(state_id: str, value: str = "") -> StatusOk:
        """Write `value` to an inbound state (e.g. ``tools.RAW``)."""
        state_id = state_id.removeprefix(prefix)
        if state_id not in WRITABLE:
            raise HTTPException(status_code=404, detail=f"{state_id} is not writable")

        store.receive(state_id, value)
        return {"ok": True}

    @app.get("/get/{state_id}")
    async def get_state(state_id: str) -> dict[str, Any]:
        """Return the cached state of `state_id`."""
        state_id = state_id.removeprefix(prefix)
        state = store.get_state(state_id)
        if state is None:
            raise HTTPException(status_code=404, detail=f"{state_id} not found")

        return {"id": state_id, "val": state.val, "ack": state.ack, "ts": state.ts}

    return app


class ToolsServer:
    """Runs the callback app with uvicorn on the bridge's event loop."""

    def __init__(self, store: MemoryStateStore, *, instance: str, port: int) -> None:
        self.port = port
        self._log = logging.getLogger("ToolsServer")
        config = uvicorn.Config(
            create_app(store, instance=instance),
            host="0.0.0.0",  # noqa: S104
            port=port,
            log_level="warning",
            lifespan="off",
        )
        self._server = uvicorn.Server(config)
        self._task: asyncio.Task[None] | None = None

    def start(self) -> None:
        self._log.info("Serving tools callbacks on port [bright_magenta]%d[/]", self.port)
        self._task = asyncio.create_task(self._server.serve(), name="tools-server")

    async def stop(self) -> None:
        if self._task is None:
            return

        self._server.should_exit = True
        await self._task
        self._task = None
