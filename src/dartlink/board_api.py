from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Final, Self

import aiohttp

from .errors import DeviceConnectionError, DeviceTimeoutError, PayloadParseError

if TYPE_CHECKING:
    from logging import Logger
    from types import TracebackType

DEFAULT_TIMEOUT_MS: Final = 1500
STATE_PATH: Final = "/api/state"


def load_json_object(body: str) -> dict[str, Any]:
    """Decode a response body that must be a JSON object.

    Raises:
        PayloadParseError: Not JSON, or not a JSON object
    """

    try:
        data = json.loads(body)
    except (ValueError, RecursionError) as e:
        raise PayloadParseError(str(e)) from e

    if not isinstance(data, dict):
        msg = f"expected object, got {type(data).__name__}"
        raise PayloadParseError(msg)

    return data


class BoardApi:
    """HTTP client for the Autodarts board manager (one GET at a time per caller).

    Use as an async context manager so the underlying session is closed:

        async with BoardApi("127.0.0.1", 3180) as api:
            body = await api.fetch("/api/state")
    """

    host: str
    port: int

    _log: Logger
    _session: aiohttp.ClientSession | None

    def __init__(self, host: str, port: int) -> None:
        self.host = host
        self.port = port

        self._log = logging.getLogger("BoardApi")
        self._session = None

    async def __aenter__(self) -> Self:
        self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def open(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    async def fetch(self, path: str, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> str:
        """GET `path` and return the full body as text, whatever the HTTP status.

        Args:
            path: API path (e.g. ``/api/state``)
            timeout_ms: Budget for the whole request; the request is aborted when it runs out

        Raises:
            DeviceTimeoutError: No complete response within `timeout_ms`
            DeviceConnectionError: Socket-level failure (cause chained)
        """

        session = self.open()
        url = f"{self.base_url}{path}"
        timeout = aiohttp.ClientTimeout(total=timeout_ms / 1000)
        try:
            async with session.get(url, timeout=timeout) as resp:
                body = await resp.text(errors="replace")
        except TimeoutError as e:
            msg = f"GET {path} timed out after {timeout_ms} ms"
            raise DeviceTimeoutError(msg) from e
        except aiohttp.ClientError as e:
            msg = f"GET {path} failed: {e}"
            raise DeviceConnectionError(msg) from e

        self._log.debug("GET %s -> %d (%d bytes)", path, resp.status, len(body))
        return body
