# bundler/assets/constants.py
from __future__ import annotations

__all__ = [
    "SCRIPT_EXTENSIONS", "STYLE_EXTENSIONS", "TEMPLATE_EXTENSIONS",
    "ASSET_EXTENSIONS", "DEFAULT_PRIORITY", "WILDCARD_CHARACTERS",
    "STATIC_DIRNAME",
]



# File classes a bundle can carry. Templates are read server-side.
SCRIPT_EXTENSIONS: tuple[str, ...] = ("js",)
STYLE_EXTENSIONS: tuple[str, ...] = ("css", "scss", "sass", "less")
TEMPLATE_EXTENSIONS: tuple[str, ...] = ("xml",)
ASSET_EXTENSIONS: tuple[str, ...] = SCRIPT_EXTENSIONS + STYLE_EXTENSIONS + TEMPLATE_EXTENSIONS

# Override records below this priority run before component manifests.
DEFAULT_PRIORITY = 16

WILDCARD_CHARACTERS = frozenset("*?[]")

# Only templates under <component>/static/ are public.
STATIC_DIRNAME = "static"
