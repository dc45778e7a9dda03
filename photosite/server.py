"""HTTP server settings and the blocking serve loop."""

import logging
from dataclasses import dataclass
from socketserver import ThreadingMixIn
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServerSettings:
    """Where to listen and the socket timeouts in seconds."""

    host: str
    port: int
    read_timeout: int
    write_timeout: int

    @property
    def address(self):
        return f"{self.host}:{self.port}"


class _ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    daemon_threads = True


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        """Send server lines to the debug log; access lines come from the application."""
        _log.debug("%s - %s", self.address_string(), format % args)


def server_settings(cfg):
    """Server settings taken from the configuration."""
    return ServerSettings(
        host="",
        port=cfg.app.port,
        read_timeout=cfg.server.read_timeout,
        write_timeout=cfg.server.write_timeout,
    )


def serve(settings, app):
    """Serve ``app`` until interrupted."""
    timeout = max(settings.read_timeout, settings.write_timeout)

    class Handler(_QuietHandler):
        pass

    Handler.timeout = timeout if timeout > 0 else None

    with make_server(
        settings.host,
        settings.port,
        app,
        server_class=_ThreadingWSGIServer,
        handler_class=Handler,
    ) as server:
        server.serve_forever()