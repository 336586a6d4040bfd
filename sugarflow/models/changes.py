"""Staged and unstaged paths of the working tree."""

from typing import List

from pydantic import BaseModel, Field


class ChangedFiles(BaseModel):
    """Repository-relative paths by index state; a path may be in both lists."""

    staged: List[str] = Field(default_factory=list)
    unstaged: List[str] = Field(default_factory=list)
