# bundler/core/paths.py
from __future__ import annotations
import os
from os import PathLike
from pathlib import Path

from fastapi import HTTPException

__all__ = ["fs2web", "isInside", "resolveSafe"]



def fs2web(path: str) -> str:
    """Converts a file system path to a web path."""
    if os.sep == "/":
        return path
    return "/".join(path.split(os.sep))



def isInside(path: str | PathLike[str], root: str | PathLike[str]) -> bool:
    """
    Textual containment check on normalized paths.
    True when `path` is `root` itself or nested under it.
    """
    path = os.path.normpath(os.fspath(path))
    root = os.path.normpath(os.fspath(root))
    return path == root or path.startswith(os.path.join(root, ""))



def resolveSafe(root: Path, requested: str | PathLike[str] | None, *, allowSymlinks: bool = False) -> Path:
    """
    Returns a path under `root` for `requested`, rejecting traversal and (optionally) symlinks.
    Raises HTTPException(403) if the path leaves root or violates the symlink policy.
    """
    if not isinstance(root, Path):
        root = Path(root)

    requested = requested or "."
    raw = root.joinpath(requested)

    resolved = raw.resolve(strict=False) # Don't raise if file doesn't exist yet
    rootResolved = root.resolve(strict=True) # Raises if root doesn't exist

    # Must remain inside the component root
    if not resolved.is_relative_to(rootResolved):
        raise HTTPException(403, "Asset path points outside of component root directory")

    if not allowSymlinks:
        if resolved == rootResolved:
            return resolved

        # Neither the leaf nor its parent chain may be a symlink
        path = raw
        while True:
            if path.is_symlink():
                raise HTTPException(403, "Asset path symlinks not allowed")

            if path.resolve(strict=False) == rootResolved:
                break

            parent = path.parent
            if parent == path: # Filesystem root guard
                break
            path = parent
    return resolved
