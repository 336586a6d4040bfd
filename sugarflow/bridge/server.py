"""HTTP transport for the panel bridge.

GET /health, GET /state (messages for a freshly loaded panel), GET
/messages (drain refresh outbox), POST /messages (one inbound message,
replies in the response body).
"""

import json
import logging
import queue
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List

from sugarflow.bridge.dispatcher import MessageBridge
from sugarflow.bridge.refresher import start_refresh_thread
from sugarflow.config import AppConfig

LOG = logging.getLogger("sugarflow.bridge.server")

MESSAGES_PATH = "/messages"


def drain(outbox: "queue.Queue[Dict[str, Any]]") -> List[Dict[str, Any]]:
    """Take everything currently in outbox without blocking."""
    items: List[Dict[str, Any]] = []
    while True:
        try:
            items.append(outbox.get_nowait())
        except queue.Empty:
            return items


class BridgeHandler(BaseHTTPRequestHandler):
    """Serve panel messages over JSON."""

    bridge: MessageBridge
    outbox: "queue.Queue[Dict[str, Any]]"

    def _send_json(self, status: int, payload: Any) -> None:
        body = json.dumps(payload).encode()
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def do_GET(self) -> None:
        if self.path == "/health" or self.path == "/":
            self._send_json(200, {"status": "ok", "service": "sugarflow"})
            return
        if self.path == "/state":
            self._send_json(200, {"messages": self.bridge.initial_messages()})
            return
        if self.path == MESSAGES_PATH:
            self._send_json(200, {"messages": drain(self.outbox)})
            return
        self.send_response(404)
        self.end_headers()

    def do_POST(self) -> None:
        if self.path != MESSAGES_PATH:
            self.send_response(404)
            self.end_headers()
            return
        try:
            length = int(self.headers.get("Content-Length", 0))
            if length < 0:
                raise ValueError(length)
        except ValueError:
            self._send_json(400, {"error": "invalid Content-Length"})
            return
        body = self.rfile.read(length) if length else b""
        try:
            payload = json.loads(body.decode()) if body else {}
        except (json.JSONDecodeError, UnicodeDecodeError):
            LOG.warning("Invalid panel message JSON: %s", body.decode("utf-8", errors="replace"))
            self._send_json(400, {"error": "invalid JSON"})
            return
        self._send_json(200, {"messages": self.bridge.dispatch(payload)})

    def log_message(self, format: str, *args: Any) -> None:
        LOG.debug(format, *args)


def make_server(
    bridge: MessageBridge,
    host: str,
    port: int,
    outbox: "queue.Queue[Dict[str, Any]] | None" = None,
) -> ThreadingHTTPServer:
    """Build a server bound to host:port; handler state lives on a per-server subclass."""
    handler = type(
        "BoundBridgeHandler",
        (BridgeHandler,),
        {"bridge": bridge, "outbox": outbox if outbox is not None else queue.Queue()},
    )
    return ThreadingHTTPServer((host, port), handler)


def run_bridge_server(config: AppConfig, bridge: MessageBridge) -> None:
    """Run the HTTP bridge and the periodic changed-files refresh."""
    outbox: "queue.Queue[Dict[str, Any]]" = queue.Queue()
    server = make_server(bridge, config.bridge.host, config.bridge.port, outbox)
    start_refresh_thread(bridge, outbox, interval_seconds=config.bridge.refresh_interval_seconds)
    LOG.info("Panel bridge listening on %s:%s", config.bridge.host, config.bridge.port)
    try:
        server.serve_forever()
    finally:
        server.server_close()
