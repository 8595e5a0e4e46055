from __future__ import annotations

import asyncio
import json
from json import JSONDecodeError
from typing import TYPE_CHECKING, Any, ClassVar, override

from paho.mqtt.client import Client, ConnectFlags, DisconnectFlags, MQTTMessage
from paho.mqtt.enums import CallbackAPIVersion, MQTTErrorCode

from .misc import excerpt
from .store import MemoryStateStore, State

if TYPE_CHECKING:
    from paho.mqtt.properties import Properties
    from paho.mqtt.reasoncodes import ReasonCode

    from .store import StateCallback
    from .types import StateValue


def base_topic(instance: str) -> str:
    """Return the MQTT base topic of an instance id (``autodarts.0`` -> ``autodarts/0``)."""
    return instance.replace(".", "/")


def state_topic(base: str, state_id: str) -> str:
    return f"{base}/{state_id.replace('.', '/')}"


def state_id_from_set_topic(base: str, topic: str) -> str | None:
    """Return the state id addressed by a ``<base>/<id>/set`` topic, else None."""

    prefix = f"{base}/"
    if not topic.startswith(prefix) or not topic.endswith("/set"):
        return None

    path = topic[len(prefix) : -len("/set")]
    return path.replace("/", ".") if path else None


def decode_value(payload: bytes) -> StateValue:
    """Decode an inbound payload: JSON scalar, ``{"val": ...}`` object or raw text."""

    text = payload.decode("utf-8", errors="replace").strip()
    try:
        val = json.loads(text)
    except JSONDecodeError:
        return text

    if isinstance(val, dict):
        return val.get("val")
    if isinstance(val, list):
        return text
    return val


class MqttStateStore(MemoryStateStore):
    """State store mirrored to an MQTT broker.

    Topics (``<base>`` is the instance id with dots as slashes):
        <base>/<id>      retained ``{"val", "ack", "ts"}`` of every write
        <base>/<id>/set  inbound writes, delivered as ``ack=False`` changes
        <foreign id>     foreign states are plain topics
    """

    KEEPALIVE: ClassVar = 30

    broker: str
    port: int
    base: str

    _client: Client
    _loop: asyncio.AbstractEventLoop | None

    def __init__(self, *, broker: str, port: int, instance: str) -> None:
        super().__init__()
        self.broker = broker
        self.port = port
        self.base = base_topic(instance)

        self._loop = None
        self._client = Client(
            client_id=f"dartlink-{instance}",
            callback_api_version=CallbackAPIVersion.VERSION2,
        )
        self._client.on_message = self._on_message
        self._client.on_connect = self._on_connect
        self._client.on_disconnect = self._on_disconnect
        self._client.reconnect_delay_set(min_delay=1, max_delay=30)

        # Broker flags the board offline if the bridge dies without a clean shutdown
        pload = json.dumps({"val": False, "ack": True})
        self._client.will_set(state_topic(self.base, "online"), payload=pload, qos=1, retain=True)

    def connect(self) -> bool:
        """Connect to MQTT broker. Return True on success.

        Must be called from the event loop that should receive inbound writes.
        """

        self._loop = asyncio.get_running_loop()
        self._log.debug("Connecting to MQTT broker [bright_magenta]%s:%d[/]", self.broker, self.port)
        try:
            res1 = self._client.connect(self.broker, self.port, keepalive=MqttStateStore.KEEPALIVE)
        except OSError as e:
            self._log.critical("MQTT connect failed: %s", e)
            return False

        if res1 != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.critical("MQTT connect failed with rc=%s", res1)
            return False

        if (res2 := self._client.loop_start()) != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.critical("MQTT connect (loop start) failed with rc=%s", res2)
            return False

        self._log.info("Connected to [bright_magenta]%s:%d[/]", self.broker, self.port)
        return True

    def disconnect(self) -> None:
        """Disconnect from MQTT broker and stop loop."""

        self._log.debug("Disconnecting from MQTT broker [bright_magenta]%s:%d[/]", self.broker, self.port)
        res1 = self._client.disconnect()

        if res1 != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.error("MQTT disconnect failed with rc=%s", res1)

        if (res2 := self._client.loop_stop()) != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.error("MQTT disconnect (loop stop) failed with rc=%s", res2)
            return

        self._log.info("Disconnected from [bright_magenta]%s:%d[/]", self.broker, self.port)

    # ==================== StateStore ====================

    @override
    def set_state(self, state_id: str, val: StateValue, *, ack: bool = True) -> State:
        state = State(val=val, ack=ack)
        self._states[state_id] = state
        self._pub(state_topic(self.base, state_id), {"val": val, "ack": ack, "ts": state.ts}, retain=True)
        self._notify(self._subs, state_id, state)
        return state

    @override
    def set_foreign_state(self, foreign_id: str, val: StateValue) -> None:
        self._pub(foreign_id, val, retain=False)

    @override
    def subscribe_foreign(self, foreign_id: str, callback: StateCallback) -> None:
        first = foreign_id not in self._foreign_subs
        super().subscribe_foreign(foreign_id, callback)
        if first and self._client.is_connected():
            self._sub(self._client, foreign_id)

    ################################################# Utility Methods ##################################################

    def _pub(self, topic: str, pload: Any, *, retain: bool) -> None:  # noqa: ANN401
        self._log.debug("[bright_white on grey30][Bridge -> MQTT][/] %s %s", topic, excerpt(json.dumps(pload)))
        res = self._client.publish(topic, json.dumps(pload), qos=1, retain=retain)

        if res.rc != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.error("MQTT publish to %s failed with rc=%s", topic, res.rc)

    def _sub(self, client: Client, topic: str) -> None:
        self._log.debug("Subscribing to topic: [bright_green]%s[/]", topic)
        res, _ = client.subscribe(topic, qos=1)

        if res != MQTTErrorCode.MQTT_ERR_SUCCESS:
            self._log.error("MQTT subscribe failed with rc=%s", res)
            return

        self._log.info("Subscribed to topic: [bright_green]%s[/]", topic)

    def _dispatch(self, topic: str, payload: bytes) -> None:
        """Route an inbound message (runs on the event loop)."""

        val = decode_value(payload)
        if topic in self._foreign_subs:
            self.receive_foreign(topic, val)
            return

        state_id = state_id_from_set_topic(self.base, topic)
        if state_id is None:
            return

        self._log.debug("[bright_white on grey30][MQTT -> Bridge][/] %s = %s", state_id, excerpt(repr(val)))
        self.receive(state_id, val)

    ############################################### Paho MQTT Callbacks ################################################

    def _on_connect(
        self,
        client: Client,
        userdata: Any,  # noqa: ANN401
        connect_flags: ConnectFlags,
        reason_code: ReasonCode,
        properties: Properties | None = None,
    ) -> None:
        """Handle MQTT (re)connection."""

        if reason_code.is_failure:
            self._log.warning("MQTT connect failed with rc=%s", reason_code)
            return

        self._sub(client, f"{self.base}/#")
        for foreign_id in list(self._foreign_subs):
            self._sub(client, foreign_id)
        _ = userdata, connect_flags, properties

    def _on_disconnect(
        self,
        client: Client,
        userdata: Any,  # noqa: ANN401
        disconnect_flags: DisconnectFlags,
        reason_code: ReasonCode,
        properties: Properties | None = None,
    ) -> None:
        """Handle MQTT disconnection."""

        if reason_code.is_failure:
            self._log.warning("MQTT disconnected unexpectedly (rc=%s), will reconnect", reason_code)

        _ = client, userdata, disconnect_flags, properties

    def _on_message(self, client: Client, userdata: Any, message: MQTTMessage) -> None:  # noqa: ANN401
        """Hand the message over to the event loop (paho runs this on its own thread)."""

        if self._loop is None or self._loop.is_closed():
            return

        self._loop.call_soon_threadsafe(self._dispatch, message.topic, message.payload)
        _ = client, userdata
