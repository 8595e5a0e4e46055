"""Static bridge settings (command line + environment)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Final

# Metadata (host info, camera config) changes rarely; refresh every 5 min
METADATA_INTERVAL: Final = 5 * 60


@dataclass(frozen=True, kw_only=True)
class Settings:
    """Everything the bridge needs to know before it starts.

    `triple_min_score`, `triple_max_score` and `trigger_reset_sec` only seed the
    runtime thresholds; live overrides never write back here.
    """

    mqtt_broker: str = "localhost"
    mqtt_port: int = 1883
    instance: str = "autodarts.0"

    host: str = "127.0.0.1"
    port: int = 3180
    interval: float = 1.0  # Secs between polls while online
    offline_interval: float = 5.0  # Secs between polls while offline
    metadata_interval: float = METADATA_INTERVAL

    triple_min_score: float = 1
    triple_max_score: float = 20
    trigger_reset_sec: float = 0

    tools_ip: str = "127.0.0.1"
    tools_port: int = 8087
    serve_tools: bool = False

    light_target_id: str | None = None
    power_target_id: str | None = None
