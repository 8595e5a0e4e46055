import math
import os
import sys
from typing import Final, TypedDict

from dotenv import load_dotenv

from dartlink import __prog__

from .utils import cerr

_PORT_MIN: Final = 1
_PORT_MAX: Final = 65535


class _EnvConf(TypedDict):
    mqtt_broker: str
    mqtt_port: int
    instance: str
    offline_interval: float
    triple_min_score: float
    triple_max_score: float
    trigger_reset_sec: float
    tools_ip: str
    tools_port: int
    light_target_id: str | None
    power_target_id: str | None


def _ensure_valid_port(name: str, default: int | None = None) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        if default is not None:
            return default
        msg = f"[cyan]{name}[/] is not set"
        raise ValueError(msg)

    try:
        port = int(val)
    except ValueError as e:
        msg = f"[cyan]{name}[/] is not an integer: {val}"
        raise ValueError(msg) from e
    else:
        if not (_PORT_MIN <= port <= _PORT_MAX):
            msg = f"[cyan]{name}[/] is out of range: {val}"
            raise ValueError(msg)

    return port


def _ensure_valid_broker(name: str) -> str:
    val = os.getenv(name)
    if val is None or not val.strip():
        msg = f"[cyan]{name}[/] is not set"
        raise ValueError(msg)

    return val


def _ensure_valid_number(name: str, default: float, *, allow_zero: bool = False) -> float:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default

    try:
        num = float(val)
    except ValueError as e:
        msg = f"[cyan]{name}[/] is not a number: {val}"
        raise ValueError(msg) from e

    if not math.isfinite(num) or num < 0 or (num == 0 and not allow_zero):
        bound = ">= 0" if allow_zero else "> 0"
        msg = f"[cyan]{name}[/] must be {bound}: {val}"
        raise ValueError(msg)

    return num


def _ensure_valid_instance(name: str) -> str:
    val = os.getenv(name, "autodarts.0").strip()
    if not val or any(c in val for c in "/#+ "):
        msg = f"[cyan]{name}[/] is not a valid instance id: {val!r}"
        raise ValueError(msg)

    return val


def _optional(name: str) -> str | None:
    val = os.getenv(name)
    return val.strip() if val and val.strip() else None


def get_env_vars() -> _EnvConf:
    load_dotenv()

    errs: list[str] = []
    conf: dict[str, object] = {}

    checks = (
        ("mqtt_broker", lambda: _ensure_valid_broker("MQTT_BROKER")),
        ("mqtt_port", lambda: _ensure_valid_port("MQTT_PORT")),
        ("instance", lambda: _ensure_valid_instance("INSTANCE")),
        ("offline_interval", lambda: _ensure_valid_number("OFFLINE_INTERVAL", 5.0)),
        ("triple_min_score", lambda: _ensure_valid_number("TRIPLE_MIN_SCORE", 1)),
        ("triple_max_score", lambda: _ensure_valid_number("TRIPLE_MAX_SCORE", 20)),
        ("trigger_reset_sec", lambda: _ensure_valid_number("TRIGGER_RESET_SEC", 0, allow_zero=True)),
        ("tools_port", lambda: _ensure_valid_port("TOOLS_PORT", 8087)),
    )

    for key, check in checks:
        try:
            conf[key] = check()
        except ValueError as e:
            errs.append(str(e))

    if errs:
        cerr.print("".join(f"[bold bright_red]{__prog__}: env-error:[/] {e}\n" for e in errs), end="")
        sys.exit(1)

    return {
        "mqtt_broker": conf["mqtt_broker"],  # type: ignore[typeddict-item]
        "mqtt_port": conf["mqtt_port"],  # type: ignore[typeddict-item]
        "instance": conf["instance"],  # type: ignore[typeddict-item]
        "offline_interval": conf["offline_interval"],  # type: ignore[typeddict-item]
        "triple_min_score": conf["triple_min_score"],  # type: ignore[typeddict-item]
        "triple_max_score": conf["triple_max_score"],  # type: ignore[typeddict-item]
        "trigger_reset_sec": conf["trigger_reset_sec"],  # type: ignore[typeddict-item]
        "tools_ip": os.getenv("TOOLS_IP", "127.0.0.1").strip() or "127.0.0.1",
        "tools_port": conf["tools_port"],  # type: ignore[typeddict-item]
        "light_target_id": _optional("LIGHT_TARGET_ID"),
        "power_target_id": _optional("POWER_TARGET_ID"),
    }
