"""Ticket-to-pull-request workflow pipeline."""

from sugarflow.services.workflow.context import Notification, WorkflowContext
from sugarflow.services.workflow.errors import WorkflowError
from sugarflow.services.workflow.pipeline import (
    ActiveTicketView,
    StartWorkResult,
    StartWorkState,
    SubmitResult,
    SubmitStep,
    TicketDetails,
    WorkflowPipeline,
    commit_message_for,
    pull_request_body,
)

__all__ = [
    "ActiveTicketView",
    "Notification",
    "StartWorkResult",
    "StartWorkState",
    "SubmitResult",
    "SubmitStep",
    "TicketDetails",
    "WorkflowContext",
    "WorkflowError",
    "WorkflowPipeline",
    "commit_message_for",
    "pull_request_body",
]
