"""Working tree status: which paths are staged and which are unstaged."""

import logging
from pathlib import Path

from sugarflow.models import ChangedFiles
from sugarflow.services.git._run import _run_git

# First status column (index) values that count as staged
_STAGED_CODES = ("M", "A")
# Second status column (worktree) values that count as unstaged
_UNSTAGED_CODES = ("M",)


def parse_status(output: str) -> ChangedFiles:
    """Parse ``git status --porcelain`` output into staged and unstaged paths.

    Each line is a two-character status code, a space, and the path. A
    path is staged when the first character is M or A, and unstaged when
    the second character is M; "MM" puts the path in both lists. Other
    codes (untracked, deleted, renamed) are ignored.

    Args:
        output: Raw porcelain output.

    Returns:
        ChangedFiles with paths in the order git printed them.
    """
    staged: list[str] = []
    unstaged: list[str] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        code = line[:2]
        path = line[3:].strip()
        if not path:
            continue
        if code[0] in _STAGED_CODES:
            staged.append(path)
        if len(code) > 1 and code[1] in _UNSTAGED_CODES:
            unstaged.append(path)
    return ChangedFiles(staged=staged, unstaged=unstaged)


def get_changed_files(
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> ChangedFiles:
    """Run git status in the repository and return staged/unstaged paths."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    output = _run_git(["status", "--porcelain"], cwd=cwd, log=log)
    return parse_status(output)
