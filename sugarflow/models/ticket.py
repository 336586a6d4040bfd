"""Issue tracker ticket and workflow transition models."""

from pydantic import BaseModel


class Ticket(BaseModel):
    """Issue tracker work item, e.g. ABC-123."""

    key: str
    summary: str = ""
    description: str | None = None
    status: str = ""
    assignee_email: str | None = None


class Transition(BaseModel):
    """Workflow transition available on a ticket."""

    id: str
    name: str
    to_status: str = ""
