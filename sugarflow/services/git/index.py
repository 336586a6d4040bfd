"""Stage, unstage and inspect single files."""

import difflib
import logging
from pathlib import Path

from sugarflow.services.git._run import _run_git, _run_git_bytes


def stage_file(
    path: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Add one path to the index."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["add", "--", path], cwd=cwd, log=log)
    if log:
        log.info("Staged file %s", path)


def unstage_file(
    path: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Remove one path from the index, keeping working tree changes."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["reset", "--", path], cwd=cwd, log=log)
    if log:
        log.info("Unstaged file %s", path)


def show_file_at_head(
    path: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> bytes:
    """Return the last committed content of path."""
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    return _run_git_bytes(["show", f"HEAD:{path}"], cwd=cwd, log=log)


def diff_against_head(
    path: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> str:
    """Unified diff between the committed and the working tree version of path.

    A file deleted from the working tree diffs against empty content.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    old = show_file_at_head(path, repo_dir=cwd, log=log).decode("utf-8", errors="replace")
    work_path = cwd / path
    new = work_path.read_text(encoding="utf-8", errors="replace") if work_path.is_file() else ""
    return "".join(
        difflib.unified_diff(
            old.splitlines(keepends=True),
            new.splitlines(keepends=True),
            fromfile=f"a/{path}",
            tofile=f"b/{path}",
        )
    )
