"""HTTP surface: landing page plus the Prometheus metrics endpoint."""

from __future__ import annotations

import html
import logging
import socket
from collections.abc import Callable, Iterable
from socketserver import ThreadingMixIn
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app

from marathon_exporter.config import parse_listen_address
from marathon_exporter.errors import ListenerBindError

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

LANDING_PAGE = """<html>
<head><title>Marathon Exporter</title></head>
<body>
<h1>Marathon Exporter</h1>
<p><a href='{metrics_path}'>Metrics</a></p>
</body>
</html>
"""


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """One thread per request so overlapping scrapes are not serialized."""

    daemon_threads = True


class _ThreadingWSGIServerV6(_ThreadingWSGIServer):
    address_family = socket.AF_INET6


class _LoggingRequestHandler(WSGIRequestHandler):
    """Route wsgiref's access log to our logger instead of stderr."""

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> WSGIApp:
    """Return a WSGI app serving ``registry`` at ``metrics_path`` and the landing page elsewhere."""
    metrics_app = make_wsgi_app(registry)
    landing = LANDING_PAGE.format(metrics_path=html.escape(metrics_path, quote=True)).encode("utf-8")

    def app(environ: dict[str, Any], start_response: Callable[..., Any]) -> Iterable[bytes]:
        if environ.get("PATH_INFO") == metrics_path:
            return metrics_app(environ, start_response)
        # Every other path gets the landing page, like a catch-all "/" route
        start_response(
            "200 OK",
            [("Content-Type", "text/html; charset=utf-8"), ("Content-Length", str(len(landing)))],
        )
        return [landing]

    return app


def bind(app: WSGIApp, listen_address: str) -> WSGIServer:
    """Bind a threaded WSGI server; raises ListenerBindError if the address is unusable."""
    host, port = parse_listen_address(listen_address)
    server_class = _ThreadingWSGIServerV6 if ":" in host else _ThreadingWSGIServer
    try:
        return make_server(host, port, app, server_class=server_class, handler_class=_LoggingRequestHandler)
    except OSError as e:
        raise ListenerBindError(f"cannot listen on {listen_address}: {e}") from e
