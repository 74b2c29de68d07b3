# bundler/assets/asset_paths.py
from __future__ import annotations
from collections.abc import Iterable, Iterator
from typing import NamedTuple

from bundler.core.errors import NotFoundError

__all__ = ["AssetPathEntry", "AssetPaths"]



class AssetPathEntry(NamedTuple):
    path: str
    component: str | None
    bundle: str



class AssetPaths:
    """
    A list of asset paths (path, component, bundle) with set semantics on path.
    """

    def __init__(self) -> None:
        self.list: list[AssetPathEntry] = []
        self.memo: set[str] = set()

    def __len__(self) -> int:
        return len(self.list)

    def __iter__(self) -> Iterator[AssetPathEntry]:
        return iter(self.list)

    def __contains__(self, path: object) -> bool:
        return path in self.memo

    def paths(self) -> list[str]:
        return [entry.path for entry in self.list]

    def index(self, path: str, bundle: str) -> int:
        """Returns the index of the given path in the current assets list."""
        if path not in self.memo:
            raise NotFoundError(path, bundle)
        for index, entry in enumerate(self.list):
            if entry.path == path:
                return index
        # memo and list out of sync
        raise NotFoundError(path, bundle)

    def push(self, paths: Iterable[str], component: str | None, bundle: str) -> None:
        """Appends the given paths to the current list, skipping members."""
        for path in paths:
            if path not in self.memo:
                self.list.append(AssetPathEntry(path, component, bundle))
                self.memo.add(path)

    def insert(self, paths: Iterable[str], component: str | None, bundle: str, index: int) -> None:
        """Inserts the given paths to the current list at the given position."""
        toInsert: list[AssetPathEntry] = []
        for path in paths:
            if path not in self.memo:
                toInsert.append(AssetPathEntry(path, component, bundle))
                self.memo.add(path)
        self.list[index:index] = toInsert

    def remove(self, pathsToRemove: Iterable[str], component: str | None, bundle: str) -> None:
        """
        Removes the given paths from the current list.

        Paths that are not members are ignored as long as at least one
        requested path is; if none is, NotFoundError is raised.
        """
        pathsToRemove = list(pathsToRemove)
        present = {path for path in pathsToRemove if path in self.memo}
        if present:
            self.list = [entry for entry in self.list if entry.path not in present]
            self.memo -= present
            return

        if pathsToRemove:
            raise NotFoundError(pathsToRemove, bundle)
