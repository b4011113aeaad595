"""
Loopback credentials server.

The Granola desktop app keeps its session tokens in a file outside the vault.
This short-lived server exposes that single file on the loopback interface so
the sync can read it over HTTP, then shuts down again.
"""

import atexit
import logging
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from pathlib import Path
from typing import Optional, Tuple, Type


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 2590
SERVED_PATHS = ("/", "/supabase.json")


def _handler_for(source_path: Path) -> Type[BaseHTTPRequestHandler]:
    class CredentialsHandler(BaseHTTPRequestHandler):
        def do_GET(self):
            if self.path not in SERVED_PATHS:
                self._reply(404, "text/plain", b"Not found")
                return
            try:
                payload = source_path.read_bytes()
            except OSError:
                self._reply(404, "text/plain", b"File not found")
                return
            self._reply(200, "application/json", payload)

        def _reply(self, status: int, content_type: str, body: bytes):
            self.send_response(status)
            self.send_header("Content-Type", content_type)
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            logging.debug(f"Credentials server: {format % args}")

    return CredentialsHandler


class CredentialServer:
    """
    Serves one credentials file on the loopback interface.

    Usable as a context manager; it is also stopped at interpreter exit if the
    caller never stops it.
    """

    def __init__(self, source_path: str, host: str = DEFAULT_HOST, port: int = DEFAULT_PORT):
        """
        Initialize the server.

        Args:
            source_path: The credentials file to serve
            host: Interface to bind (loopback by default)
            port: Port to bind; 0 picks a free port
        """
        self.source_path = Path(source_path).expanduser()
        self.host = host
        self.port = port
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def address(self) -> Tuple[str, int]:
        if self._server is None:
            return self.host, self.port
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    @property
    def url(self) -> str:
        host, port = self.address
        return f"http://{host}:{port}/"

    @property
    def running(self) -> bool:
        return self._server is not None

    def start(self) -> None:
        if self._server is not None:
            return
        logging.debug("Starting Granola credentials server...")
        self._server = HTTPServer((self.host, self.port), _handler_for(self.source_path))
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            name="granola-credentials-server",
            daemon=True
        )
        self._thread.start()
        atexit.register(self.stop)
        logging.debug(f"Granola credentials server running at {self.url}")

    def stop(self) -> None:
        if self._server is None:
            return
        self._server.shutdown()
        self._server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=5)
        self._server = None
        self._thread = None
        atexit.unregister(self.stop)
        logging.debug("Granola credentials server shut down.")

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
