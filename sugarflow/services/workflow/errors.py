"""Workflow failures, one class per pipeline step.

Each carries the user-facing message; ``code`` names the failure in
results and panel messages.
"""


class WorkflowError(Exception):
    """Raised inside a pipeline when a step fails; never leaves the pipeline."""

    code = "WorkflowError"


class NoActiveTicket(WorkflowError):
    code = "NoActiveTicket"


class MissingCredentials(WorkflowError):
    code = "MissingCredentials"


class AssigneeResolutionFailed(WorkflowError):
    code = "AssigneeResolutionFailed"


class AssignmentFailed(WorkflowError):
    code = "AssignmentFailed"


class TransitionFailed(WorkflowError):
    code = "TransitionFailed"


class BranchCreationFailed(WorkflowError):
    code = "BranchCreationFailed"


class TicketLookupFailed(WorkflowError):
    code = "TicketLookupFailed"


class CommitFailed(WorkflowError):
    code = "CommitFailed"


class BranchLookupFailed(WorkflowError):
    code = "BranchLookupFailed"


class PushFailed(WorkflowError):
    code = "PushFailed"


class PullRequestFailed(WorkflowError):
    code = "PullRequestFailed"


class WritebackFailed(WorkflowError):
    code = "WritebackFailed"


class ContainerFailed(WorkflowError):
    code = "ContainerFailed"
