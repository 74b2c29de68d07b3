# bundler/core/errors.py
from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "BundleError",
    "AccessDeniedError",
    "NotFoundError",
    "CircularBundleError",
    "CycleError",
    "ManifestError",
]



class BundleError(RuntimeError):
    """Base class for asset bundle resolution errors."""



class AccessDeniedError(BundleError):
    """Raised when a path expression targets a known component that is not installed."""

    def __init__(self, component: str) -> None:
        super().__init__(f"Unallowed to fetch files from component {component!r}")
        self.component = component



class NotFoundError(BundleError):
    """Raised when a directive references paths missing from the bundle being assembled."""

    def __init__(self, paths: str | Iterable[str], bundle: str) -> None:
        if isinstance(paths, str):
            paths = [paths]
        self.paths: tuple[str, ...] = tuple(paths)
        self.bundle = bundle
        super().__init__(f"File(s) {list(self.paths)!r} not found in bundle {bundle!r}")



class CircularBundleError(BundleError):
    """Raised when an include directive revisits a bundle already in the chain."""

    def __init__(self, chain: Iterable[str]) -> None:
        self.chain: list[str] = list(chain)
        super().__init__(f"Circular assets bundle declaration: {' > '.join(self.chain)}")



class CycleError(BundleError):
    """Raised when the dependency graph between components is not acyclic."""

    def __init__(self, cycle: Iterable[str]) -> None:
        self.cycle: list[str] = list(cycle)
        super().__init__(f"Cycle detected in component dependency graph: {' -> '.join(self.cycle)}")



class ManifestError(BundleError):
    """Raised when a component manifest or override file cannot be loaded."""
