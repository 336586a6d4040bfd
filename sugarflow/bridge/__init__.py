"""Panel bridge: message contract, dispatcher, HTTP transport."""

from sugarflow.bridge.dispatcher import MessageBridge
from sugarflow.bridge.server import make_server, run_bridge_server

__all__ = ["MessageBridge", "make_server", "run_bridge_server"]
