"""Route panel messages to the workflow pipeline and collect replies."""

import logging
import threading
from typing import Any, Callable, Dict, List

from pydantic import ValidationError

from sugarflow.bridge import messages as m
from sugarflow.services.workflow import WorkflowContext, WorkflowPipeline

LOG = logging.getLogger("sugarflow.bridge")

Outbound = List[Dict[str, Any]]


class MessageBridge:
    """One panel session: a pipeline plus the context it runs in.

    ``dispatch`` never raises; failures come back as ``notify`` messages.
    Calls are serialized so each reply carries only its own notifications.
    """

    def __init__(self, pipeline: WorkflowPipeline, ctx: WorkflowContext) -> None:
        self.pipeline = pipeline
        self.ctx = ctx
        self._lock = threading.Lock()
        self._handlers: Dict[str, Callable[[Any], Outbound]] = {
            "searchJira": self._search_jira,
            "startWork": self._start_work,
            "createPR": self._create_pr,
            "createBuild": self._create_build,
            "stageFile": self._stage_file,
            "unstageFile": self._unstage_file,
            "viewChanges": self._view_changes,
            "buildDockerImage": self._build_docker_image,
            "runDockerContainer": self._run_docker_container,
        }

    def dispatch(self, raw: Dict[str, Any]) -> Outbound:
        """Handle one inbound message; return outbound messages then notifications."""
        command = raw.get("command") if isinstance(raw, dict) else None
        try:
            message = m.parse_inbound(raw)
        except ValidationError as e:
            LOG.warning("Rejected panel message %r: %s", command, e)
            with self._lock:
                self.ctx.error(f"Unsupported message: {command!r}")
                return self._with_notifications([])
        LOG.debug("Panel message: %s", command)
        with self._lock:
            try:
                out = self._handlers[message.command](message)
            except Exception as e:
                LOG.exception("Panel message %s failed: %s", command, e)
                self.ctx.error(f"Failed to handle {command}: {e}")
                out = []
            return self._with_notifications(out)

    def initial_messages(self) -> Outbound:
        """Messages the panel needs when it (re)loads."""
        with self._lock:
            try:
                out = self._active_ticket_messages()
            except Exception as e:
                LOG.exception("Loading active ticket failed: %s", e)
                self.ctx.error(f"Failed to load active ticket: {e}")
                out = []
            out.append(m.display_changed_files(self.pipeline.changed_files()))
            return self._with_notifications(out)

    def refresh_messages(self) -> Outbound:
        """Periodic refresh: current staged/unstaged files."""
        return [m.display_changed_files(self.pipeline.changed_files())]

    def _with_notifications(self, out: Outbound) -> Outbound:
        return out + [m.notify(n) for n in self.ctx.drain_notifications()]

    def _active_ticket_messages(self) -> Outbound:
        view = self.pipeline.describe_active_ticket(self.ctx)
        return [m.display_in_progress(view)] if view is not None else []

    def _search_jira(self, message: m.SearchJira) -> Outbound:
        return [m.display_ticket_details(self.pipeline.search_ticket(self.ctx, message.ticket))]

    def _start_work(self, message: m.StartWork) -> Outbound:
        self.pipeline.start_work(self.ctx, message.ticket)
        return self._active_ticket_messages()

    def _create_pr(self, message: m.CreatePR) -> Outbound:
        result = self.pipeline.submit_for_review(self.ctx)
        return self._active_ticket_messages() if result.ok else []

    def _create_build(self, message: m.CreateBuild) -> Outbound:
        self.pipeline.create_build(self.ctx)
        return []

    def _stage_file(self, message: m.StageFile) -> Outbound:
        self.pipeline.stage(self.ctx, message.file)
        return self.refresh_messages()

    def _unstage_file(self, message: m.UnstageFile) -> Outbound:
        self.pipeline.unstage(self.ctx, message.file)
        return self.refresh_messages()

    def _view_changes(self, message: m.ViewChanges) -> Outbound:
        diff = self.pipeline.view_changes(self.ctx, message.file)
        return [m.display_diff(message.file, diff)] if diff is not None else []

    def _build_docker_image(self, message: m.BuildDockerImage) -> Outbound:
        self.pipeline.build_dev_image(self.ctx)
        return []

    def _run_docker_container(self, message: m.RunDockerContainer) -> Outbound:
        self.pipeline.run_dev_container(self.ctx, message.version)
        return []
