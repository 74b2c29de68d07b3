import sys
from pathlib import Path
from typing import Any

import json5
import pytest

from bundler.app.config import CONFIG_ENV_VAR, resetConfig
from bundler.assets.bundle_resolver import BundleResolver
from bundler.components.registry import ComponentRegistry
from bundler.overrides.store import OverrideStore



def pytest_configure(config: pytest.Config) -> None:
    if sys.flags.optimize:
        raise RuntimeError("Assertions are disabled (optimize > 0)")



@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
    resetConfig()
    yield
    resetConfig()



class ComponentTree:
    """Builds component directories (manifest + files) under one root."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(self, name: str, *, files: tuple[str, ...] | list[str] = (), **manifest: Any) -> Path:
        componentDir = self.root / name
        componentDir.mkdir(parents=True, exist_ok=True)
        payload = {"name": name, **manifest}
        (componentDir / "manifest.json5").write_text(
            json5.dumps(payload, ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        for rel in files:
            target = componentDir / rel
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"/* {name}/{rel} */\n", encoding="utf-8")
        return componentDir

    def registry(self, *, serverWide: tuple[str, ...] = (), install: bool = True) -> ComponentRegistry:
        registry = ComponentRegistry(serverWide=serverWide)
        registry.discover([self.root], install=install)
        return registry

    def resolver(self, records: list[dict[str, Any]] | None = None, **kwargs: Any) -> BundleResolver:
        return BundleResolver(self.registry(**kwargs), OverrideStore(records or []))



@pytest.fixture()
def tree(tmp_path) -> ComponentTree:
    return ComponentTree(tmp_path / "components")



@pytest.fixture()
def treeAt(tmp_path):
    """Factory for component trees at a chosen location under tmp_path."""
    def _make(*parts: str) -> ComponentTree:
        return ComponentTree(tmp_path.joinpath(*parts))
    return _make
