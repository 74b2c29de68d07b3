# bundler/http/routes.py
from __future__ import annotations
import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from bundler.assets.bundle_resolver import BundleResolver
from bundler.assets.constants import SCRIPT_EXTENSIONS, STATIC_DIRNAME, STYLE_EXTENSIONS
from bundler.assets.path_resolver import extensionOf
from bundler.core.errors import AccessDeniedError, BundleError
from bundler.core.paths import resolveSafe

logger = logging.getLogger(__name__)

__all__ = ["makeBundleIndex", "makeBundleRouter"]



def makeBundleIndex(resolver: BundleResolver, bundle: str, *, css: bool, js: bool, xml: bool) -> dict:
    try:
        entries = resolver.resolve(bundle, css=css, js=js, xml=xml)
    except AccessDeniedError as err:
        raise HTTPException(status_code=403, detail=str(err)) from err
    except BundleError as err:
        logger.error("Bundle %r failed to resolve: %s", bundle, err)
        raise HTTPException(status_code=500, detail=str(err)) from err

    assets = [
        {"path": entry.path, "component": entry.component, "bundle": entry.bundle}
        for entry in entries
    ]
    return {
        "bundle": bundle,
        "assets": assets,
        "meta": {
            "count": len(assets),
            "bundles": sorted({entry.bundle for entry in entries}),
        },
    }



def makeBundleRouter(resolver: BundleResolver) -> APIRouter:
    router = APIRouter()
    registry = resolver.registry

    @router.get("/bundles/{bundle}")
    def listBundleAssets(bundle: str, css: bool = True, js: bool = True, xml: bool = False) -> dict:
        logger.info("Bundle index requested: %s (css=%s, js=%s, xml=%s)", bundle, css, js, xml)
        return makeBundleIndex(resolver, bundle, css=css, js=js, xml=xml)

    @router.get("/bundles/{bundle}/related")
    def relatedBundle(bundle: str, path: str) -> dict:
        try:
            return {"bundle": resolver.relatedBundle(path, bundle)}
        except AccessDeniedError as err:
            raise HTTPException(status_code=403, detail=str(err)) from err
        except BundleError as err:
            raise HTTPException(status_code=500, detail=str(err)) from err

    @router.get("/assets/{component}/{path:path}")
    def serveComponentAsset(component: str, path: str) -> FileResponse:
        if component not in registry.installedComponents() or not registry.isKnown(component):
            raise HTTPException(404, "Unknown component.")
        if extensionOf(path) not in SCRIPT_EXTENSIONS + STYLE_EXTENSIONS:
            raise HTTPException(404, "Not a web asset.")
        staticRoot = registry.componentRoot(component) / STATIC_DIRNAME
        if not staticRoot.is_dir():
            raise HTTPException(404, "Component has no static files.")
        if not path.startswith(f"{STATIC_DIRNAME}/"):
            raise HTTPException(404, "Only static files are served.")
        safe = resolveSafe(
            staticRoot,
            path[len(STATIC_DIRNAME) + 1:],
            allowSymlinks=resolver.pathResolver.allowSymlinks,
        )
        if not safe.exists() or not safe.is_file():
            raise HTTPException(404, "Requested path doesn't exist or is not a file.")
        response = FileResponse(safe)
        response.headers["Cache-Control"] = "no-store"
        return response

    return router
