"""
Pure-stdlib HTTP server.

Routes:
  GET  /              → serves index.html
  HEAD /              → same headers as GET, no body
  *    anything else  → 404 (unknown path) or 405 (unsupported method)

``start`` serves in the foreground; ``serve`` / ``running_server`` bind a
listener and serve it from a background thread so callers (tests, mostly)
can acquire and release a port around a block of code.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from contextlib import contextmanager
from http.server import ThreadingHTTPServer, BaseHTTPRequestHandler
from typing import Any, Iterator
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_APP_DIR = os.path.dirname(os.path.abspath(__file__))
_TEMPLATES = os.path.join(_APP_DIR, "templates")

MIME = {
    ".html": "text/html; charset=utf-8",
    ".json": "application/json; charset=utf-8",
    ".txt": "text/plain; charset=utf-8",
}

ALLOWED_METHODS = "GET, HEAD"
INDEX_PATHS = ("/", "/index.html")


class Handler(BaseHTTPRequestHandler):
    """Single-class request handler for all routes."""

    _response_started = False

    # Access lines go to the module logger; enable DEBUG to see them
    def log_message(self, fmt: str, *args: Any) -> None:
        logger.debug("%s - %s", self.address_string(), fmt % args)

    # ── GET / HEAD ────────────────────────────────────────────────────────

    def do_GET(self) -> None:
        self._dispatch(head=False)

    def do_HEAD(self) -> None:
        self._dispatch(head=True)

    # ── Everything else ───────────────────────────────────────────────────

    def _method_not_allowed(self) -> None:
        self._send_error(405, "Method not allowed", extra_headers={"Allow": ALLOWED_METHODS})

    do_POST = _method_not_allowed
    do_PUT = _method_not_allowed
    do_PATCH = _method_not_allowed
    do_DELETE = _method_not_allowed

    # ── Internal helpers ──────────────────────────────────────────────────

    def _dispatch(self, head: bool) -> None:
        self._response_started = False
        try:
            path = urlsplit(self.path).path
            if path in INDEX_PATHS:
                self._serve_file(os.path.join(_TEMPLATES, "index.html"), ".html", head=head)
            else:
                self._send_error(404, "Not found", head=head)
        except Exception as exc:
            # Status line already sent; no second response on this connection
            if self._response_started:
                raise
            logger.exception("Unhandled error serving %s %s", self.command, self.path)
            self._send_json(500, {"error": str(exc)}, head=head)

    def _serve_file(self, filepath: str, ext: str, head: bool = False) -> None:
        if not os.path.isfile(filepath):
            self._send_error(404, "File not found", head=head)
            return
        with open(filepath, "rb") as f:
            content = f.read()
        self._send(200, MIME.get(ext, "application/octet-stream"), content, head=head)

    def _send_json(self, code: int, obj: Any, head: bool = False) -> None:
        body = json.dumps(obj).encode("utf-8")
        self._send(code, MIME[".json"], body, head=head)

    def _send_error(
        self,
        code: int,
        msg: str,
        head: bool = False,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self._send(code, MIME[".txt"], msg.encode("utf-8"), head=head, extra_headers=extra_headers)

    def _send(
        self,
        code: int,
        content_type: str,
        body: bytes,
        head: bool = False,
        extra_headers: dict[str, str] | None = None,
    ) -> None:
        self._response_started = True
        self.send_response(code)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        for name, value in (extra_headers or {}).items():
            self.send_header(name, value)
        self.end_headers()
        if not head:
            self.wfile.write(body)


class Listener:
    """A bound server socket plus the daemon thread serving it."""

    def __init__(self, server: ThreadingHTTPServer) -> None:
        self._server = server
        self._thread = threading.Thread(
            target=server.serve_forever,
            name=f"webapp-listener-{self.port}",
            daemon=True,
        )
        self._lock = threading.Lock()
        self._closed = False

    @property
    def host(self) -> str:
        return self._server.server_address[0]

    @property
    def port(self) -> int:
        return self._server.server_address[1]

    @property
    def url(self) -> str:
        # A wildcard bind is reachable on loopback
        host = "127.0.0.1" if self.host in ("0.0.0.0", "") else self.host
        return f"http://{host}:{self.port}"

    @property
    def closed(self) -> bool:
        return self._closed

    def _start(self) -> None:
        self._thread.start()
        logger.info("Listening on %s", self.url)

    def close(self) -> None:
        """Stop serving and release the port. Safe to call more than once."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
        self._server.shutdown()
        self._thread.join()
        self._server.server_close()
        logger.info("Closed listener on port %d", self.port)

    def __enter__(self) -> Listener:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<Listener {self.url} {state}>"


def serve(host: str = "127.0.0.1", port: int = 0) -> Listener:
    """Bind *host*:*port* and serve from a background thread.

    ``port=0`` picks an ephemeral port; read it back from ``Listener.port``.
    Bind failures raise ``OSError`` before any thread is started.
    """
    server = ThreadingHTTPServer((host, port), Handler)
    listener = Listener(server)
    try:
        listener._start()
    except BaseException:
        server.server_close()
        raise
    return listener


@contextmanager
def running_server(host: str = "127.0.0.1", port: int = 0) -> Iterator[Listener]:
    """Serve for the duration of the ``with`` block, then release the port."""
    listener = serve(host, port)
    try:
        yield listener
    finally:
        listener.close()


def start(host: str = "0.0.0.0", port: int = 8080) -> None:
    """Start the HTTP server."""
    server = ThreadingHTTPServer((host, port), Handler)
    logger.info("Server running at http://localhost:%d", server.server_address[1])
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down.")
    finally:
        server.server_close()
