"""Data models for tickets, pull requests and working tree changes (Pydantic)."""

from sugarflow.models.changes import ChangedFiles
from sugarflow.models.pr import PR
from sugarflow.models.ticket import Ticket, Transition

__all__ = ["ChangedFiles", "PR", "Ticket", "Transition"]
