"""Autodarts board manager -> MQTT state bridge."""

from typing import Final

__prog__: Final = "dartlink"
__version__: Final = "0.1.0"
