"""Ticket branch names and local branch operations (current branch, create)."""

import logging
import re
from pathlib import Path

from sugarflow.services.git._run import _run_git

# Subset of git check-ref-format rules: ASCII letters, digits, dash, dot, underscore, slash
_BRANCH_RE = re.compile(r"^[A-Za-z0-9._/\-]+$")


def is_valid_branch_name(name: str) -> bool:
    """Check that a name can be used as a local branch.

    Valid: non-empty, only letters, digits, "-", ".", "_" and "/"; no
    "..", "//" or "@{"; does not start with "-", "." or "/"; does not end
    with "/", "." or ".lock".

    Args:
        name: Branch name to validate.

    Returns:
        True if git would accept the name as a branch.
    """
    if not name or not _BRANCH_RE.match(name):
        return False
    if ".." in name or "//" in name or "@{" in name:
        return False
    if name[0] in "-./" or name[-1] in "/.":
        return False
    return not name.endswith(".lock")


def branch_name_from_ticket(ticket_key: str) -> str:
    """Branch name for a ticket: the ticket key itself, e.g. "ABC-123".

    Raises:
        ValueError: If the key is not a valid branch name.
    """
    name = (ticket_key or "").strip()
    if not is_valid_branch_name(name):
        raise ValueError(f"Ticket key is not a valid branch name: {ticket_key!r}")
    return name


def current_branch(
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Return the name of the checked out branch."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    return _run_git(["rev-parse", "--abbrev-ref", "HEAD"], cwd=cwd, log=log).strip()


def create_tracking_branch(
    branch_name: str,
    upstream: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Create and check out branch_name tracking upstream (e.g. upstream/master)."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["checkout", "-b", branch_name, "--track", upstream], cwd=cwd, log=log)
    if log:
        log.info("Created branch %s tracking %s", branch_name, upstream)
