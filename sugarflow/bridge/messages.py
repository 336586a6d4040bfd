"""Panel message contract.

Inbound messages are JSON objects discriminated by ``command``. Outbound
messages are plain dicts in the shape the panel script reads
(camelCase keys).
"""

from typing import Annotated, Any, Dict, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter

from sugarflow.models import ChangedFiles
from sugarflow.services.workflow import ActiveTicketView, Notification, TicketDetails


class SearchJira(BaseModel):
    command: Literal["searchJira"]
    ticket: str


class StartWork(BaseModel):
    command: Literal["startWork"]
    ticket: str
    summary: str = ""


class CreatePR(BaseModel):
    command: Literal["createPR"]


class CreateBuild(BaseModel):
    command: Literal["createBuild"]


class StageFile(BaseModel):
    command: Literal["stageFile"]
    file: str


class UnstageFile(BaseModel):
    command: Literal["unstageFile"]
    file: str


class ViewChanges(BaseModel):
    command: Literal["viewChanges"]
    file: str


class BuildDockerImage(BaseModel):
    command: Literal["buildDockerImage"]


class RunDockerContainer(BaseModel):
    command: Literal["runDockerContainer"]
    version: str | None = None


InboundMessage = Annotated[
    Union[
        SearchJira,
        StartWork,
        CreatePR,
        CreateBuild,
        StageFile,
        UnstageFile,
        ViewChanges,
        BuildDockerImage,
        RunDockerContainer,
    ],
    Field(discriminator="command"),
]

_INBOUND_ADAPTER: TypeAdapter[InboundMessage] = TypeAdapter(InboundMessage)


def parse_inbound(raw: Dict[str, Any]) -> InboundMessage:
    """Validate a raw panel message; raises pydantic.ValidationError."""
    return _INBOUND_ADAPTER.validate_python(raw)


def display_ticket_details(details: TicketDetails | None) -> Dict[str, Any]:
    return {
        "command": "displayTicketDetails",
        "ticketDetails": details.model_dump() if details is not None else None,
    }


def display_in_progress(view: ActiveTicketView) -> Dict[str, Any]:
    return {
        "command": "displayInProgress",
        "message": view.message,
        "displayButtons": view.display_buttons,
        "gitLink": view.git_link,
    }


def display_changed_files(changes: ChangedFiles) -> Dict[str, Any]:
    return {"command": "displayChangedFiles", "changedFiles": changes.model_dump()}


def display_diff(file: str, diff: str) -> Dict[str, Any]:
    return {"command": "displayDiff", "file": file, "diff": diff}


def notify(notification: Notification) -> Dict[str, Any]:
    return {"command": "notify", "level": notification.level, "text": notification.text}
