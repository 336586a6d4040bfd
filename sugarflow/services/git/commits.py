"""Commit staged changes."""

import logging
from pathlib import Path

from sugarflow.services.git._run import _run_git


def commit_staged(
    commit_message: str,
    repo_dir: Path | None = None,
    log: logging.Logger | None = None,
) -> None:
    """Commit what is currently in the index with the given message.

    Nothing is staged implicitly. Raises GitRunnerError when git refuses,
    including when there is nothing to commit.
    """
    cwd = Path(repo_dir) if repo_dir is not None else Path.cwd()
    _run_git(["commit", "-m", commit_message], cwd=cwd, log=log)
    if log:
        log.info("Created commit: %s", commit_message)
