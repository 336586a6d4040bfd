"""Issue tracker and code host adapters."""

from sugarflow.adapters.base import (
    CodeHostAdapter,
    CodeHostError,
    IssueTrackerAdapter,
    IssueTrackerError,
    NotFoundError,
)
from sugarflow.adapters.github import GitHubAdapter
from sugarflow.adapters.jira import JiraAdapter

__all__ = [
    "CodeHostAdapter",
    "CodeHostError",
    "GitHubAdapter",
    "IssueTrackerAdapter",
    "IssueTrackerError",
    "JiraAdapter",
    "NotFoundError",
]
