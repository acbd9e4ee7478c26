"""Serve a frozen app under a real server.

ASGI is served by pounce with the live App object; WSGI by the stdlib
``wsgiref`` server with one thread per connection.
"""

import logging
import socketserver
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

logger = logging.getLogger("setlist.server")


def run_asgi_server(app: object, host: str, port: int, *, reload: bool = False) -> None:
    """Start a pounce server with the given ASGI callable.

    Pounce's ``run()`` takes an import string, but setlist has a live
    ``App`` object, so ``pounce.Server`` is used directly.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app)
    server.run()


class ThreadingWSGIServer(socketserver.ThreadingMixIn, WSGIServer):
    """``wsgiref`` server handling each connection in its own thread."""

    daemon_threads = True


class _LoggingHandler(WSGIRequestHandler):
    # Request lines are logged by the pipeline; keep stderr quiet.
    def log_message(self, format: str, *args: object) -> None:  # noqa: A002
        logger.debug("wsgiref: " + format, *args)


def make_wsgi_server(
    wsgi_app: object,
    host: str,
    port: int,
) -> ThreadingWSGIServer:
    """Bind a threaded ``wsgiref`` server for *wsgi_app*."""
    return make_server(  # type: ignore[return-value]
        host,
        port,
        wsgi_app,  # type: ignore[arg-type]
        server_class=ThreadingWSGIServer,
        handler_class=_LoggingHandler,
    )


def run_wsgi_server(wsgi_app: object, host: str, port: int) -> None:
    """Serve *wsgi_app* until interrupted."""
    server = make_wsgi_server(wsgi_app, host, port)
    logger.info("Serving WSGI on http://%s:%d", host, port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
