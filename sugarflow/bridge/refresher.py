"""Periodic changed-files refresh pushed to the panel outbox."""

import logging
import queue
import threading
import time
from typing import Any, Dict

from sugarflow.bridge.dispatcher import MessageBridge

LOG = logging.getLogger("sugarflow.bridge.refresher")


def _discard_pending(outbox: "queue.Queue[Dict[str, Any]]") -> None:
    while True:
        try:
            outbox.get_nowait()
        except queue.Empty:
            return


def run_refresh_loop(
    bridge: MessageBridge,
    outbox: "queue.Queue[Dict[str, Any]]",
    interval_seconds: int = 5,
    stop: threading.Event | None = None,
) -> None:
    """Loop: every interval_seconds, replace the outbox content with fresh refresh messages.

    Each tick replaces the panel's whole file list, so only the latest tick
    is kept while nobody polls, and a tick racing a stage/unstage action is
    corrected by the next one.
    """
    while stop is None or not stop.is_set():
        try:
            messages = bridge.refresh_messages()
            _discard_pending(outbox)
            for message in messages:
                outbox.put(message)
        except Exception as e:
            LOG.exception("Refresh tick error: %s", e)
        time.sleep(interval_seconds)


def start_refresh_thread(
    bridge: MessageBridge,
    outbox: "queue.Queue[Dict[str, Any]]",
    interval_seconds: int = 5,
    stop: threading.Event | None = None,
) -> threading.Thread:
    """Start the refresh loop in a daemon thread; it ends with the process or stop."""
    thread = threading.Thread(
        target=run_refresh_loop,
        args=(bridge, outbox),
        kwargs={"interval_seconds": interval_seconds, "stop": stop},
        daemon=True,
    )
    thread.start()
    return thread
