"""CLI entrypoint for the Marathon exporter."""

from __future__ import annotations

import argparse
import logging
import sys

from prometheus_client import CollectorRegistry
from rich.logging import RichHandler

from marathon_exporter import __version__
from marathon_exporter.config import Settings, get_settings
from marathon_exporter.errors import ListenerBindError, StartupConfigError
from marathon_exporter.marathon import MarathonClient
from marathon_exporter.metrics import MarathonCollector
from marathon_exporter.server import bind, create_app
from marathon_exporter.supervisor import ensure_reachable

logger = logging.getLogger("marathon_exporter")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Marathon Exporter: publish Marathon cluster state as Prometheus metrics.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--web.listen-address",
        dest="web_listen_address",
        default=None,
        help="Address to listen on for web interface and telemetry [env: WEB_LISTEN_ADDRESS] (default: :9088)",
    )
    parser.add_argument(
        "--web.telemetry-path",
        dest="web_telemetry_path",
        default=None,
        help="Path under which to expose metrics [env: WEB_TELEMETRY_PATH] (default: /metrics)",
    )
    parser.add_argument(
        "--marathon.uri",
        dest="marathon_uri",
        default=None,
        help="URI of Marathon [env: MARATHON_URI] (default: http://marathon.mesos:8080)",
    )
    parser.add_argument(
        "--marathon.timeout",
        dest="marathon_timeout",
        type=float,
        default=None,
        help="Timeout for each Marathon request in seconds [env: MARATHON_TIMEOUT] (default: 10)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    return parser.parse_args(argv)


def build_registry(client: MarathonClient, settings: Settings) -> CollectorRegistry:
    """Private registry holding only the Marathon collector."""
    registry = CollectorRegistry()
    registry.register(MarathonCollector(client, fetch_timeout=settings.scrape_timeout))
    return registry


def main(argv: list[str] | None = None) -> int:
    """Entrypoint for marathon-exporter CLI."""
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True)],
    )

    try:
        settings = get_settings(
            web_listen_address=args.web_listen_address,
            web_telemetry_path=args.web_telemetry_path,
            marathon_uri=args.marathon_uri,
            marathon_timeout=args.marathon_timeout,
        )
    except StartupConfigError as e:
        logger.error("Invalid configuration: %s", e)
        return 2

    client = MarathonClient.from_uri(settings.marathon_uri, timeout=settings.marathon_timeout)
    try:
        result = ensure_reachable(
            client,
            retry_interval=settings.connect_retry_interval,
            max_attempts=settings.connect_max_attempts,
        )
        if not result.ok:
            logger.error("Giving up on Marathon after %d attempts: %s", result.attempts, result.error)
            return 1

        app = create_app(build_registry(client, settings), settings.web_telemetry_path)
        try:
            server = bind(app, settings.web_listen_address)
        except ListenerBindError as e:
            logger.error("%s", e)
            return 1

        logger.info("Starting Server: %s", settings.web_listen_address)
        with server:
            try:
                server.serve_forever()
            except KeyboardInterrupt:
                logger.info("Shutting down")
        return 0
    finally:
        client.close()


if __name__ == "__main__":
    sys.exit(main())
