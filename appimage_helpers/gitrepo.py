"""Locating the git repository that contains a directory."""

from __future__ import annotations

import os
from pathlib import Path


class NotAGitRepositoryError(Exception):
    """Raised when no git repository encloses the given directory."""


def find_git_repository(start: str | os.PathLike | None = None) -> Path:
    """Return the root of the git repository enclosing *start* (default: the cwd).

    Parent directories are searched for a ``.git`` entry, which may be a
    directory or a file.
    """
    origin = os.path.abspath(os.getcwd() if start is None else os.fspath(start))
    path = origin
    while True:
        if os.path.lexists(os.path.join(path, ".git")):
            return Path(path)
        parent = os.path.dirname(path)
        if parent == path:
            raise NotAGitRepositoryError(
                "Could not open repository. Please execute this command from "
                "within a git repository. " + origin
            )
        path = parent