# bundler/app/factory.py
from __future__ import annotations
import logging
from collections.abc import Sequence
from pathlib import Path

from fastapi import APIRouter, FastAPI

from bundler.app.config import config, initConfig
from bundler.assets.bundle_resolver import BundleResolver
from bundler.components.registry import ComponentRegistry
from bundler.core.logging import configureLogging
from bundler.http.routes import makeBundleRouter
from bundler.overrides.store import OverrideStore



def buildResolver() -> BundleResolver:
    """Registry, override store and resolver wired from the current config."""
    logger = logging.getLogger(__name__)

    registry = ComponentRegistry()
    registry.discover(config("components.roots", []))
    installed = config("components.installed", None)
    if installed is not None:
        unknown = [name for name in installed if not registry.isKnown(name)]
        if unknown:
            logger.warning("components.installed lists undiscovered component(s), skipped: %s", ", ".join(unknown))
        registry.uninstall(*registry.knownComponents())
        registry.install(*(name for name in installed if registry.isKnown(name)))

    store = OverrideStore()
    overridesFile = config("overrides.file", None)
    if overridesFile:
        store.loadFile(Path(overridesFile))

    logger.info(
        "Resolver ready: %d component(s) known, %d installed, %d override record(s)",
        len(registry.knownComponents()),
        len(registry.installedComponents()),
        len(store),
    )
    return BundleResolver(registry, store)



def createApp(
    *,
    configPath: str | Path | None = None,
    resolver: BundleResolver | None = None,
    extraRouters: Sequence[APIRouter] = (),
) -> FastAPI:
    initConfig(configPath)
    configureLogging()
    logger = logging.getLogger(__name__)

    if resolver is None:
        resolver = buildResolver()

    app = FastAPI()
    app.state.resolver = resolver
    app.include_router(makeBundleRouter(resolver))
    for router in extraRouters:
        app.include_router(router)

    logger.info("Bundler initialized with %d extra routers(s)", len(extraRouters))
    return app
