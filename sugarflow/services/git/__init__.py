"""Git operations: status, index, branches, commits, push."""

from sugarflow.services.git._run import GitRunnerError
from sugarflow.services.git.branches import (
    branch_name_from_ticket,
    create_tracking_branch,
    current_branch,
    is_valid_branch_name,
)
from sugarflow.services.git.commits import commit_staged
from sugarflow.services.git.index import diff_against_head, show_file_at_head, stage_file, unstage_file
from sugarflow.services.git.push_pull import push_branch
from sugarflow.services.git.status import get_changed_files, parse_status

__all__ = [
    "GitRunnerError",
    "branch_name_from_ticket",
    "commit_staged",
    "create_tracking_branch",
    "current_branch",
    "diff_against_head",
    "get_changed_files",
    "is_valid_branch_name",
    "parse_status",
    "push_branch",
    "show_file_at_head",
    "stage_file",
    "unstage_file",
]
