"""Descriptive board metadata (software versions, host hardware, cameras)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any, Final

from .board_api import load_json_object
from .errors import DeviceError, PayloadParseError

if TYPE_CHECKING:
    from .board_api import BoardApi
    from .store import StateStore
    from .types import CamJson, HostJson

log = logging.getLogger(__name__)

HOST_PATH: Final = "/api/host"
CONFIG_PATH: Final = "/api/config"

CAM_STATES: Final = ("system.cams.cam0", "system.cams.cam1", "system.cams.cam2")
CAM_DEFAULTS: Final[CamJson] = {"width": 1280, "height": 720, "fps": 20}


def _text(val: object) -> str:
    return val if isinstance(val, str) else ""


def host_states(host: HostJson) -> dict[str, str]:
    """Map an ``/api/host`` payload to state id -> value (missing fields -> "")."""

    cpu = host.get("cpu")
    return {
        "system.software.boardVersion": _text(host.get("clientVersion")),
        "system.software.desktopVersion": _text(host.get("desktopVersion")),
        "system.software.platform": _text(host.get("platform")),
        "system.software.os": _text(host.get("os")),
        "system.hardware.kernelArch": _text(host.get("kernelArch")),
        "system.hardware.cpuModel": _text(cpu.get("model") if isinstance(cpu, dict) else None),
        "system.hardware.hostname": _text(host.get("hostname")),
    }


def cam_info(config: dict[str, Any]) -> CamJson:
    """Camera parameters of an ``/api/config`` payload; missing or null fields take the defaults."""

    cam = config.get("cam")
    cam = cam if isinstance(cam, dict) else {}
    info = CAM_DEFAULTS.copy()
    for key in info:
        if cam.get(key) is not None:
            info[key] = cam[key]  # type: ignore[literal-required]
    return info


async def fetch_host(api: BoardApi, store: StateStore) -> None:
    """Mirror ``/api/host`` into ``system.software.*`` / ``system.hardware.*``."""

    host: HostJson = load_json_object(await api.fetch(HOST_PATH))  # type: ignore[assignment]
    for state_id, val in host_states(host).items():
        store.set_state(state_id, val, ack=True)


async def fetch_config(api: BoardApi, store: StateStore) -> None:
    """Mirror the camera parameters of ``/api/config`` into ``system.cams.*``."""

    pload = json.dumps(cam_info(load_json_object(await api.fetch(CONFIG_PATH))))
    for state_id in CAM_STATES:
        store.set_state(state_id, pload, ack=True)


async def refresh(api: BoardApi, store: StateStore) -> None:
    """Refresh all metadata. Failures are not critical and only logged at debug level."""

    for fetch in (fetch_host, fetch_config):
        try:
            await fetch(api, store)
        except (DeviceError, PayloadParseError) as e:
            log.debug("Could not refresh metadata (%s): %s", fetch.__name__, e)
