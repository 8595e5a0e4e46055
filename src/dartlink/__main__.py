import asyncio
import contextlib
import signal

from .board_api import BoardApi
from .bridge import Bridge
from .hooks import ToolsServer
from .misc import get_cli_args, get_env_vars, init_logging
from .mqtt import MqttStateStore
from .settings import Settings


async def serve(settings: Settings) -> None:
    """Connect the state store and run the bridge until SIGTERM / Ctrl+C."""

    store = MqttStateStore(broker=settings.mqtt_broker, port=settings.mqtt_port, instance=settings.instance)
    if not store.connect():
        return

    tools_server = None
    if settings.serve_tools:
        tools_server = ToolsServer(store, instance=settings.instance, port=settings.tools_port)

    try:
        async with BoardApi(settings.host, settings.port) as api:
            bridge = Bridge(settings, store=store, api=api, tools_server=tools_server)
            asyncio.get_running_loop().add_signal_handler(signal.SIGTERM, bridge.stop)
            await bridge.run()
    finally:
        store.disconnect()


def main() -> None:
    args = get_cli_args()
    init_logging(args.log_level)
    settings = Settings(
        **get_env_vars(),
        host=args.host,
        port=args.port,
        interval=args.interval,
        serve_tools=args.serve_tools,
    )

    with contextlib.suppress(KeyboardInterrupt):
        asyncio.run(serve(settings))


if __name__ == "__main__":
    main()
