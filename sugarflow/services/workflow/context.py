"""Session object passed into every workflow entry point."""

import logging
from typing import List, Literal

from pydantic import BaseModel

from sugarflow.services.state import ACTIVE_TICKET_KEY, StateStore

NotificationLevel = Literal["info", "warning", "error"]

LOG = logging.getLogger("sugarflow.workflow")

_LOG_LEVELS = {"info": logging.INFO, "warning": logging.WARNING, "error": logging.ERROR}


class Notification(BaseModel):
    """User-visible toast produced by a workflow step."""

    level: NotificationLevel
    text: str


class WorkflowContext:
    """Active ticket pointer, acting user and pending notifications of one session."""

    def __init__(self, store: StateStore, username: str) -> None:
        self.store = store
        self.username = username
        self._notifications: List[Notification] = []

    @property
    def active_ticket(self) -> str | None:
        value = self.store.get(ACTIVE_TICKET_KEY)
        return str(value) if value else None

    @active_ticket.setter
    def active_ticket(self, key: str | None) -> None:
        self.store.set(ACTIVE_TICKET_KEY, key)

    def notify(self, level: NotificationLevel, text: str) -> None:
        """Queue a notification for the panel and log it."""
        LOG.log(_LOG_LEVELS[level], text)
        self._notifications.append(Notification(level=level, text=text))

    def info(self, text: str) -> None:
        self.notify("info", text)

    def error(self, text: str) -> None:
        self.notify("error", text)

    def drain_notifications(self) -> List[Notification]:
        """Return and forget queued notifications."""
        pending, self._notifications = self._notifications, []
        return pending
