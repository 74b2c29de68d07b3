# bundler/assets/bundle_resolver.py
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from bundler.assets.asset_paths import AssetPathEntry, AssetPaths
from bundler.assets.constants import SCRIPT_EXTENSIONS, STYLE_EXTENSIONS, TEMPLATE_EXTENSIONS
from bundler.assets.directives import Command, Directive, isComment, normalizeCommand
from bundler.assets.ordering import DependencyOrderer
from bundler.assets.path_resolver import PathResolver, extensionOf
from bundler.components.registry import ComponentRegistry
from bundler.core.errors import CircularBundleError
from bundler.core.logging import logContext
from bundler.overrides.records import OverrideRecord
from bundler.overrides.store import OverrideStore

logger = logging.getLogger(__name__)

__all__ = ["extensionsFor", "BundleResolver"]



def extensionsFor(*, css: bool, js: bool, xml: bool) -> tuple[str, ...]:
    exts: list[str] = []
    if js:
        exts.extend(SCRIPT_EXTENSIONS)
    if css:
        exts.extend(STYLE_EXTENSIONS)
    if xml:
        exts.extend(TEMPLATE_EXTENSIONS)
    return tuple(exts)



@dataclass(slots=True)
class _FillContext:
    """Everything one bundle's directives need; the include chain is passed by value."""
    bundle: str
    components: tuple[str, ...]
    installed: frozenset[str]
    extensions: tuple[str, ...]
    assetPaths: AssetPaths
    seen: tuple[str, ...]
    # Prepends land here: the start of the current bundle's contribution,
    # moved past the content of each completed include
    bundleStart: int



class BundleResolver:
    """
    Computes the ordered list of files of a bundle.

    Asset loading is performed as follows:

    1. Active override records of the bundle with a priority strictly below
       DEFAULT_PRIORITY (16) are applied.
    2. The manifests of the given components are read in dependency order and
       their commands for the bundle are applied to the current list.
    3. The remaining active override records of the bundle are applied.

    `include` directives recurse into another bundle, sharing the same list.
    """

    def __init__(
        self,
        registry: ComponentRegistry,
        store: OverrideStore,
        *,
        orderer: DependencyOrderer | None = None,
        pathResolver: PathResolver | None = None,
    ) -> None:
        self.registry = registry
        self.store = store
        self.orderer = orderer or DependencyOrderer(registry)
        self.pathResolver = pathResolver or PathResolver(registry)
        self._unsubscribers = [
            registry.subscribe(self.orderer.invalidate),
            store.subscribe(self.orderer.invalidate),
        ]
        self._handlers: dict[Directive, Callable[[_FillContext, Command], None]] = {
            Directive.APPEND: self._applyAppend,
            Directive.PREPEND: self._applyPrepend,
            Directive.AFTER: self._applyAfter,
            Directive.BEFORE: self._applyBefore,
            Directive.REMOVE: self._applyRemove,
            Directive.REPLACE: self._applyReplace,
            Directive.INCLUDE: self._applyInclude,
        }

    def close(self) -> None:
        """Detach the order cache from registry and store notifications."""
        for unsub in self._unsubscribers:
            unsub()
        self._unsubscribers = []

    # ----- Public API -----

    def resolve(
        self,
        bundle: str,
        components: Iterable[str] | None = None,
        *,
        css: bool = True,
        js: bool = True,
        xml: bool = True,
    ) -> list[AssetPathEntry]:
        """
        Returns the (path, component, bundle) entries of `bundle`.

        `components` restricts which manifests contribute (defaults to the
        registry's active components); files may still be fetched from any
        installed component.
        """
        if not bundle:
            raise ValueError("Bundle name must not be empty")
        extensions = extensionsFor(css=css, js=js, xml=xml)
        if not extensions:
            logger.debug("No asset class requested for bundle %r; nothing to resolve", bundle)
            return []

        installed = frozenset(self.registry.installedComponents())
        if components is None:
            components = self.registry.activeComponents()
        assetPaths = AssetPaths()
        self.fill(bundle, tuple(components), installed, extensions, assetPaths, ())
        return list(assetPaths.list)

    def fill(
        self,
        bundle: str,
        components: tuple[str, ...],
        installed: frozenset[str],
        extensions: tuple[str, ...],
        assetPaths: AssetPaths,
        seen: tuple[str, ...],
    ) -> None:
        """
        Apply the override records and manifest commands of `bundle` to
        `assetPaths`. `seen` is the chain of bundles currently being filled.
        """
        if bundle in seen:
            raise CircularBundleError([*seen, bundle])

        with logContext(bundle=bundle):
            records = [record for record in self._relatedOverrides(bundle) if record.active]
            ctx = _FillContext(
                bundle=bundle,
                components=components,
                installed=installed,
                extensions=extensions,
                assetPaths=assetPaths,
                seen=seen,
                bundleStart=len(assetPaths),
            )

            # 1. Override records that run before the manifests
            for record in records:
                if record.appliesBeforeManifests:
                    self._apply(ctx, record.toCommand())

            # 2. Component manifests, dependencies first
            for component in self.orderer.order(components):
                manifest = self.registry.manifestOf(component)
                if manifest is None:
                    continue
                for command in manifest.commandsFor(bundle):
                    if isComment(command):
                        continue
                    self._apply(ctx, normalizeCommand(command))

            # 3. Remaining override records
            for record in records:
                if not record.appliesBeforeManifests:
                    self._apply(ctx, record.toCommand())

        logger.debug("Bundle %r filled: %d asset(s) so far", bundle, len(assetPaths))

    def relatedBundle(self, targetPathDef: str, rootBundle: str) -> str:
        """
        Returns the first bundle (rootBundle or one of its includes) that
        contributes the file targeted by `targetPathDef`. Useful to pick the
        bundle an override record should target. Falls back to rootBundle.
        """
        ext = extensionOf(targetPathDef)
        installed = self.registry.installedComponents()
        _component, targetPaths = self.pathResolver.resolve(targetPathDef, installed)
        if not targetPaths:
            return rootBundle
        targetPath = targetPaths[0]

        entries = self.resolve(
            rootBundle,
            css=ext in STYLE_EXTENSIONS,
            js=ext in SCRIPT_EXTENSIONS,
            xml=ext in TEMPLATE_EXTENSIONS,
        )
        for entry in entries:
            if entry.path == targetPath:
                return entry.bundle
        return rootBundle

    # ----- Directive application -----

    def _relatedOverrides(self, bundle: str) -> list[OverrideRecord]:
        """All records of the bundle, inactive included. Subclasses may filter."""
        return self.store.listOverrides(bundle)

    def _apply(self, ctx: _FillContext, command: Command) -> None:
        self._handlers[command.directive](ctx, command)

    def _paths(self, ctx: _FillContext, pathDef: str) -> tuple[str | None, list[str]]:
        return self.pathResolver.resolve(pathDef, ctx.installed, ctx.extensions)

    def _targetIndex(self, ctx: _FillContext, command: Command) -> tuple[int, list[str]] | None:
        """
        Index of the command target in the current list, with the target's
        resolved paths. None when the target is irrelevant to the requested
        asset classes.
        """
        if command.target is None:
            raise ValueError(f"Directive {command.directive.value!r} requires a target (path {command.path!r})")
        _component, targetPaths = self._paths(ctx, command.target)
        if not targetPaths and extensionOf(command.target) not in ctx.extensions:
            # Wrong asset class for this resolution: nothing to do
            return None
        targetToIndex = targetPaths[0] if targetPaths else command.target
        return ctx.assetPaths.index(targetToIndex, ctx.bundle), targetPaths

    def _applyAppend(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        ctx.assetPaths.push(paths, component, ctx.bundle)

    def _applyPrepend(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        ctx.assetPaths.insert(paths, component, ctx.bundle, ctx.bundleStart)

    def _applyAfter(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        target = self._targetIndex(ctx, command)
        if target is None:
            return
        index, _targetPaths = target
        ctx.assetPaths.insert(paths, component, ctx.bundle, index + 1)

    def _applyBefore(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        target = self._targetIndex(ctx, command)
        if target is None:
            return
        index, _targetPaths = target
        ctx.assetPaths.insert(paths, component, ctx.bundle, index)

    def _applyRemove(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        ctx.assetPaths.remove(paths, component, ctx.bundle)

    def _applyReplace(self, ctx: _FillContext, command: Command) -> None:
        component, paths = self._paths(ctx, command.path)
        target = self._targetIndex(ctx, command)
        if target is None:
            return
        index, targetPaths = target
        ctx.assetPaths.insert(paths, component, ctx.bundle, index)
        ctx.assetPaths.remove(targetPaths, component, ctx.bundle)

    def _applyInclude(self, ctx: _FillContext, command: Command) -> None:
        self.fill(
            command.path,
            ctx.components,
            ctx.installed,
            ctx.extensions,
            ctx.assetPaths,
            (*ctx.seen, ctx.bundle),
        )
        ctx.bundleStart = len(ctx.assetPaths)
