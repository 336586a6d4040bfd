"""Abstract bases for the issue tracker and code host adapters."""

from abc import ABC, abstractmethod
from typing import Any, List

from sugarflow.models import PR, Ticket, Transition


class IssueTrackerError(Exception):
    """Raised when an issue tracker API call fails (transport or auth)."""

    pass


class NotFoundError(IssueTrackerError):
    """Raised when the requested ticket or user does not exist."""

    pass


class CodeHostError(Exception):
    """Raised when a code hosting API call fails."""

    pass


class IssueTrackerAdapter(ABC):
    """Abstract interface for issue trackers (Jira)."""

    @abstractmethod
    def get_issue(self, key: str, fields: List[str]) -> Ticket:
        """Fetch ticket by key, restricted to the given fields."""
        ...

    @abstractmethod
    def get_field(self, key: str, field_id: str) -> Any:
        """Return the raw value of one field, or None if unset."""
        ...

    @abstractmethod
    def find_user_by_email(self, email: str) -> str:
        """Return the account id of the first user matching email."""
        ...

    @abstractmethod
    def assign_issue(self, key: str, account_id: str) -> None:
        """Set the ticket assignee."""
        ...

    @abstractmethod
    def list_transitions(self, key: str) -> List[Transition]:
        """List transitions available on the ticket."""
        ...

    def find_transition_id(self, key: str, name: str) -> str | None:
        """Return the id of the transition whose name or target status matches name."""
        wanted = name.strip().lower()
        for transition in self.list_transitions(key):
            if wanted in (transition.name.lower(), transition.to_status.lower()):
                return transition.id
        return None

    @abstractmethod
    def transition_issue(self, key: str, transition_id: str) -> None:
        """Apply a workflow transition."""
        ...

    @abstractmethod
    def set_custom_field(self, key: str, field_id: str, value: Any) -> None:
        """Update a single (custom) field."""
        ...

    @abstractmethod
    def browse_url(self, key: str) -> str:
        """Human-facing URL of the ticket."""
        ...


class CodeHostAdapter(ABC):
    """Abstract interface for code hosting platforms (GitHub)."""

    @abstractmethod
    def create_pr(
        self,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> PR:
        """Create a pull request."""
        ...
