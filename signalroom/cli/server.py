"""CLI for running the signaling relay."""

import asyncio
import signal
import sys

import click
from rich.console import Console

from signalroom.config import settings
from signalroom.logger import logger, set_log_level
from signalroom.api.server import APIServer
from signalroom.ws.server import SignalingWebSocketServer

console = Console()


@click.group()
@click.version_option("0.1.0", prog_name="signalroom")
def cli():
    """Signalroom WebRTC signaling relay"""


@cli.command()
@click.option('--host', default=settings.host, show_default=True, help='Listen address')
@click.option('--port', type=int, default=settings.port, show_default=True, help='Signaling websocket port')
@click.option('--http-port', type=int, default=settings.http_port, show_default=True, help='Extra status API port (adds /rooms)')
@click.option('--no-http', is_flag=True, help='Do not start the extra status API')
@click.option('--max-room-size', type=int, default=settings.max_room_size, show_default=True,
              help='Maximum members per room (0 = unlimited)')
@click.option('--log-level', default=settings.log_level, show_default=True,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False))
def serve(host, port, http_port, no_http, max_room_size, log_level):
    """Run the signaling server (and the status API)."""
    set_log_level(log_level)

    async def _serve():
        signaling = SignalingWebSocketServer(
            host=host,
            port=port,
            max_room_size=max_room_size,
            ping_interval=settings.ping_interval,
            ping_timeout=settings.ping_timeout,
            max_message_size=settings.max_message_size,
        )
        api_server = None if no_http else APIServer(signaling, cors_origins=settings.cors_origins)

        shutdown_task = None

        def handle_shutdown():
            nonlocal shutdown_task
            if shutdown_task is not None:
                return
            console.print("\n🛑 Shutting down...", style="yellow")
            if api_server is not None:
                api_server.stop()
            shutdown_task = asyncio.get_running_loop().create_task(signaling.shutdown())

        if sys.platform != 'win32':
            loop = asyncio.get_running_loop()
            loop.add_signal_handler(signal.SIGINT, handle_shutdown)
            loop.add_signal_handler(signal.SIGTERM, handle_shutdown)

        console.print("🚀 Signalroom started", style="green")
        console.print(f"   Signaling: ws://{host}:{port}")
        console.print(f"   Health: http://{host}:{port}/health")
        if api_server is not None:
            console.print(f"   Status API: http://{host}:{http_port}")
        console.print(f"   CORS origins: {', '.join(settings.cors_origins)}")
        console.print(f"   Max room size: {max_room_size or 'unlimited'}")

        tasks = [asyncio.create_task(signaling.start_server(), name="signaling")]
        if api_server is not None:
            tasks.append(asyncio.create_task(api_server.start(host, http_port), name="status-api"))

        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        handle_shutdown()
        await shutdown_task
        await asyncio.gather(*pending, return_exceptions=True)

        for task in done:
            if task.exception() is not None:
                raise task.exception()

    try:
        asyncio.run(_serve())
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.error(f"Fatal error: {e}")
        console.print(f"❌ Fatal error: {e}", style="red")
        sys.exit(1)
    console.print("✅ Signalroom stopped", style="green")


if __name__ == '__main__':
    cli()
