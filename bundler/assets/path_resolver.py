# bundler/assets/path_resolver.py
from __future__ import annotations
import glob
import logging
import os
from collections.abc import Collection, Iterable
from urllib.parse import urlparse

from bundler.app.config import config, configBool
from bundler.assets.constants import (
    ASSET_EXTENSIONS,
    STATIC_DIRNAME,
    TEMPLATE_EXTENSIONS,
    WILDCARD_CHARACTERS,
)
from bundler.components.registry import ComponentRegistry
from bundler.core.errors import AccessDeniedError
from bundler.core.paths import fs2web, isInside

logger = logging.getLogger(__name__)

__all__ = [
    "extensionOf",
    "isWildcardGlob",
    "canAggregate",
    "PathResolver",
]



def extensionOf(path: str) -> str:
    return path.rpartition(".")[2]



def isWildcardGlob(path: str) -> bool:
    """
    Determine whether a path is a wildcarded glob eg: "/web/file[14].*"
    or a genuine single file path "/web/myfile.scss".
    """
    return not WILDCARD_CHARACTERS.isdisjoint(path)



def canAggregate(url: str, nonAggregablePrefixes: Iterable[str] = ()) -> bool:
    """Local content that can be served as part of a bundle (no scheme, no host)."""
    parsed = urlparse(url)
    if parsed.scheme or parsed.netloc:
        return False
    return not any(url.startswith(prefix) for prefix in nonAggregablePrefixes)



class PathResolver:
    """
    Turns a path definition ("<component>/static/src/**/*.js", a literal file
    or an external URL) into the list of files it designates.

    Script and style files come back as root-relative web paths
    ("/<component>/static/..."); templates as absolute filesystem paths since
    they are read server-side.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        *,
        allowSymlinks: bool | None = None,
        nonAggregablePrefixes: Iterable[str] | None = None,
    ) -> None:
        self._registry = registry
        if allowSymlinks is None:
            allowSymlinks = configBool("assets.allowSymlinks", False)
        if nonAggregablePrefixes is None:
            nonAggregablePrefixes = config("assets.nonAggregablePrefixes", [])
        self.allowSymlinks = allowSymlinks
        self.nonAggregablePrefixes: tuple[str, ...] = tuple(nonAggregablePrefixes)

    def resolve(
        self,
        pathDef: str,
        installed: Collection[str],
        extensions: Collection[str] | None = None,
    ) -> tuple[str | None, list[str]]:
        """
        Returns the component targeted by `pathDef` (None when it is not a
        component path or is unsafe) and the files it matches, filtered on
        `extensions` when given. If no file matches, the definition itself is
        returned when it may be a URL or a plain file reference.

        Raises AccessDeniedError when `pathDef` points into a known component
        that is not installed.
        """
        paths: list[str] = []
        pathUrl = fs2web(pathDef)
        pathParts = [part for part in pathUrl.split("/") if part]
        component: str | None = pathParts[0] if pathParts else None

        safePath = True
        if component is not None and self._registry.isKnown(component):
            if component not in installed:
                raise AccessDeniedError(component)

            componentsRoot = os.fspath(self._registry.componentsRoot(component))
            componentRoot = os.path.join(componentsRoot, component)
            fullPath = os.path.normpath(os.path.join(componentsRoot, *pathParts))

            # "comp/../othercomp" and siblings named like the component are rejected
            if not isInside(fullPath, componentRoot):
                component = None
                safePath = False
            else:
                paths = self._expand(componentsRoot, fullPath)
                matched = len(paths)
                paths = [path for path in paths if self._isSafeFile(path, componentRoot)]
                safePath = matched == len(paths)
                paths = [
                    path if extensionOf(path) in TEMPLATE_EXTENSIONS
                    else fs2web(path[len(componentsRoot):])
                    for path in paths
                ]
        else:
            component = None

        if not paths and (
            not canAggregate(pathUrl, self.nonAggregablePrefixes)
            or (safePath and not isWildcardGlob(pathUrl))
        ):
            # Nothing on disk; pathDef may be a URL
            paths = [pathUrl]

        if not paths:
            msg = f'The path "{pathDef}" did not resolve to anything.'
            if not safePath:
                msg += " It may be due to security reasons."
            logger.warning(msg)

        if extensions:
            paths = [path for path in paths if extensionOf(path) in extensions]
        return component, paths

    # ----- Helpers -----

    def _expand(self, componentsRoot: str, fullPath: str) -> list[str]:
        # "*" stays in one directory level, "**" recurses. Only the part below
        # componentsRoot is a pattern: the install path may contain "[" or "?"
        pattern = os.path.relpath(fullPath, componentsRoot)
        matches = glob.glob(pattern, root_dir=componentsRoot, recursive=True)
        paths = [os.path.join(componentsRoot, match) for match in sorted(matches)]
        return [path for path in paths if os.path.isfile(path)]

    def _isSafeFile(self, path: str, componentRoot: str) -> bool:
        if extensionOf(path) not in ASSET_EXTENSIONS:
            return False
        if not isInside(path, componentRoot):
            return False
        if not self.allowSymlinks and not isInside(os.path.realpath(path), os.path.realpath(componentRoot)):
            return False
        if extensionOf(path) in TEMPLATE_EXTENSIONS:
            # Templates outside static/ are private view definitions
            return isInside(path, os.path.join(componentRoot, STATIC_DIRNAME))
        return True
