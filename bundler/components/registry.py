# bundler/components/registry.py
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from threading import RLock

import json5
from pydantic import ValidationError

from bundler.app.config import config
from bundler.components.manifest import ComponentManifest
from bundler.core.errors import ManifestError
from bundler.core.logging import getComponentLogger

logger = logging.getLogger(__name__)

__all__ = [
    "MANIFEST_NAMES",
    "RegistryListener",
    "loadManifest",
    "ComponentRegistry",
]



MANIFEST_NAMES: tuple[str, ...] = ("manifest.json5", "manifest.json")

RegistryListener = Callable[[str], None]



def loadManifest(manifestPath: Path, *, name: str | None = None) -> ComponentManifest:
    """
    Read and validate a component manifest. The component name defaults to
    the name of the directory holding the manifest and must match it.
    """
    name = name or manifestPath.parent.name
    try:
        raw = json5.loads(manifestPath.read_text(encoding="utf-8"))
    except (OSError, ValueError) as err:
        raise ManifestError(f"Cannot read component manifest '{manifestPath}': {err}") from err
    if not isinstance(raw, dict):
        raise ManifestError(f"Component manifest '{manifestPath}' must contain an object")

    raw.setdefault("name", name)
    if raw["name"] != name:
        raise ManifestError(
            f"Component manifest '{manifestPath}' declares name {raw['name']!r} "
            f"but lives in directory {name!r}"
        )
    try:
        return ComponentManifest.model_validate(raw)
    except ValidationError as err:
        raise ManifestError(f"Invalid component manifest '{manifestPath}': {err}") from err



def _findManifest(componentDir: Path) -> Path | None:
    for fileName in MANIFEST_NAMES:
        candidate = componentDir / fileName
        if candidate.is_file():
            return candidate
    return None



class ComponentRegistry:
    """
    Process-wide view of known components: their manifests, the directory
    they live in and which of them are installed.

    Subscribers are notified on every change that can alter bundle
    resolution (registration, install, uninstall, active set changes).
    """

    def __init__(self, *, serverWide: Iterable[str] | None = None) -> None:
        if serverWide is None:
            serverWide = config("components.serverWide", ["base"])
        self._serverWide: tuple[str, ...] = tuple(serverWide)
        self._manifests: dict[str, ComponentManifest] = {}
        self._componentsRoots: dict[str, Path] = {}
        self._installed: set[str] = set()
        self._active: tuple[str, ...] | None = None
        self._listeners: list[RegistryListener] = []
        self._lock = RLock()

    # ----- Registration -----

    def register(self, manifest: ComponentManifest, componentsRoot: str | Path, *, install: bool = True) -> None:
        """Register a component living at componentsRoot / manifest.name."""
        with self._lock:
            self._manifests[manifest.name] = manifest
            self._componentsRoots[manifest.name] = Path(componentsRoot).resolve(strict=False)
            if install:
                self._installed.add(manifest.name)
        getComponentLogger(manifest.name).debug(
            "Registered component %s %s (installed=%s)", manifest.name, manifest.version, install
        )
        self._notify("register")

    def discover(self, roots: Iterable[str | Path], *, install: bool = True) -> list[str]:
        """
        Scan each root for <root>/<component>/manifest.json5 (or manifest.json).
        Earlier roots win on name collisions; invalid manifests are skipped.
        Returns the names of the registered components.
        """
        roots = [Path(root).expanduser() for root in roots]
        found: list[str] = []
        for root in roots:
            if not root.is_dir():
                logger.warning("Component root '%s' does not exist or is not a directory", root)
                continue
            for componentDir in sorted(path for path in root.iterdir() if path.is_dir()):
                manifestPath = _findManifest(componentDir)
                if manifestPath is None:
                    continue
                try:
                    manifest = loadManifest(manifestPath)
                except ManifestError as err:
                    logger.warning("Skipping component manifest: %s", err)
                    continue
                if manifest.name in found or manifest.name in self._manifests:
                    logger.warning(
                        "Component %r at '%s' shadowed by an earlier registration",
                        manifest.name,
                        componentDir,
                    )
                    continue
                self.register(manifest, root, install=install)
                found.append(manifest.name)

        logger.info("Components discovered: %d (rootCount=%d)", len(found), len(roots))
        return found

    # ----- Install state -----

    def install(self, *names: str) -> None:
        with self._lock:
            unknown = [name for name in names if name not in self._manifests]
            if unknown:
                raise KeyError(f"Cannot install unknown component(s): {unknown}")
            self._installed.update(names)
        self._notify("install")

    def uninstall(self, *names: str) -> None:
        with self._lock:
            self._installed.difference_update(names)
            if self._active is not None:
                self._active = tuple(name for name in self._active if name not in names)
        self._notify("uninstall")

    def setActiveComponents(self, names: Iterable[str] | None) -> None:
        """Restrict the default component set used for resolution (None resets)."""
        with self._lock:
            self._active = tuple(names) if names is not None else None
        self._notify("active")

    def installedComponents(self) -> list[str]:
        """Installed components plus the server-wide ones, sorted by name."""
        with self._lock:
            return sorted(self._installed.union(self._serverWide))

    def activeComponents(self) -> list[str]:
        with self._lock:
            if self._active is not None:
                return list(self._active)
        return self.installedComponents()

    # ----- Lookup -----

    def knownComponents(self) -> list[str]:
        with self._lock:
            return sorted(self._manifests)

    def isKnown(self, name: str) -> bool:
        return name in self._manifests

    def manifestOf(self, name: str) -> ComponentManifest | None:
        return self._manifests.get(name)

    def componentsRoot(self, name: str) -> Path:
        """Directory that contains the component directory."""
        try:
            return self._componentsRoots[name]
        except KeyError:
            raise KeyError(f"Unknown component {name!r}") from None

    def componentRoot(self, name: str) -> Path:
        return self.componentsRoot(name) / name

    # ----- Change notification -----

    def subscribe(self, fn: RegistryListener) -> Callable[[], None]:
        self._listeners.append(fn)
        def _unsub() -> None:
            try:
                self._listeners.remove(fn)
            except ValueError:
                pass
        return _unsub

    def _notify(self, reason: str) -> None:
        for fn in list(self._listeners):
            fn(reason)
