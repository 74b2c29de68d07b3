# tests/bundler/components/test_registry.py
from __future__ import annotations
import logging

import pytest

from bundler.app.config import initConfig
from bundler.components.manifest import ComponentManifest
from bundler.components.registry import ComponentRegistry, loadManifest
from bundler.core.errors import ManifestError


# -------- manifests --------

def test_manifest_defaults():
    manifest = ComponentManifest(name="shop")
    assert manifest.dependsOn == ["base"]
    assert manifest.priority == 100
    assert manifest.isApplication is False
    assert manifest.commandsFor("web.assets") == []


def test_manifest_rejects_bad_commands():
    with pytest.raises(ValueError, match="web.assets"):
        ComponentManifest(name="shop", assets={"web.assets": [["shuffle", "a.js"]]})


def test_manifest_rejects_unknown_keys():
    with pytest.raises(ValueError):
        ComponentManifest(name="shop", dependencies=["base"])


def test_load_manifest_json5(tmp_path):
    componentDir = tmp_path / "shop"
    componentDir.mkdir()
    path = componentDir / "manifest.json5"
    path.write_text(
        """
        {
          // name defaults to the directory
          dependsOn: ['base'],
          assets: {
            'web.assets': ['shop/static/src/**/*', ['after', 'base/a.js', 'shop/b.js']],
          },
        }
        """,
        encoding="utf-8",
    )
    manifest = loadManifest(path)
    assert manifest.name == "shop"
    assert manifest.commandsFor("web.assets")[1] == ["after", "base/a.js", "shop/b.js"]


def test_load_manifest_name_mismatch(tmp_path):
    componentDir = tmp_path / "shop"
    componentDir.mkdir()
    (componentDir / "manifest.json").write_text('{"name": "crm"}', encoding="utf-8")
    with pytest.raises(ManifestError, match="crm"):
        loadManifest(componentDir / "manifest.json")


def test_load_manifest_syntax_error(tmp_path):
    componentDir = tmp_path / "shop"
    componentDir.mkdir()
    (componentDir / "manifest.json5").write_text("{ oops", encoding="utf-8")
    with pytest.raises(ManifestError):
        loadManifest(componentDir / "manifest.json5")


# -------- discovery --------

def test_discover_registers_components(tree):
    tree.add("base", dependsOn=[])
    tree.add("shop")
    (tree.root / "not_a_component").mkdir()

    registry = ComponentRegistry(serverWide=())
    assert registry.discover([tree.root]) == ["base", "shop"]
    assert registry.knownComponents() == ["base", "shop"]
    assert registry.installedComponents() == ["base", "shop"]
    assert registry.componentsRoot("shop") == tree.root.resolve()
    assert registry.componentRoot("shop") == tree.root.resolve() / "shop"


def test_discover_skips_invalid_manifest(tree, caplog):
    tree.add("base", dependsOn=[])
    broken = tree.root / "broken"
    broken.mkdir()
    (broken / "manifest.json5").write_text("{ nope", encoding="utf-8")

    registry = ComponentRegistry(serverWide=())
    with caplog.at_level(logging.WARNING):
        assert registry.discover([tree.root]) == ["base"]
    assert "Skipping component manifest" in caplog.text


def test_first_root_wins(tree, tmp_path, caplog):
    tree.add("shop", priority=1)
    secondRoot = tmp_path / "second"
    (secondRoot / "shop").mkdir(parents=True)
    (secondRoot / "shop" / "manifest.json").write_text('{"priority": 2}', encoding="utf-8")

    registry = ComponentRegistry(serverWide=())
    with caplog.at_level(logging.WARNING):
        registry.discover([tree.root, secondRoot, tmp_path / "missing"])
    assert registry.manifestOf("shop").priority == 1
    assert "shadowed" in caplog.text
    assert "does not exist" in caplog.text


def test_discover_without_install(tree):
    tree.add("base", dependsOn=[])
    registry = ComponentRegistry(serverWide=())
    registry.discover([tree.root], install=False)
    assert registry.isKnown("base")
    assert registry.installedComponents() == []


# -------- install state --------

def test_server_wide_components_are_always_installed(tree):
    tree.add("shop")
    registry = ComponentRegistry(serverWide=("base",))
    registry.discover([tree.root], install=False)
    assert registry.installedComponents() == ["base"]
    registry.install("shop")
    assert registry.installedComponents() == ["base", "shop"]


def test_server_wide_default_comes_from_config():
    initConfig(overrides={"components": {"serverWide": ["base", "web"]}})
    assert ComponentRegistry().installedComponents() == ["base", "web"]


def test_install_unknown_component_rejected():
    registry = ComponentRegistry(serverWide=())
    with pytest.raises(KeyError):
        registry.install("ghost")


def test_active_components(tree):
    tree.add("base", dependsOn=[])
    tree.add("shop")
    tree.add("crm")
    registry = tree.registry()
    assert registry.activeComponents() == ["base", "crm", "shop"]

    registry.setActiveComponents(["shop", "base"])
    assert registry.activeComponents() == ["shop", "base"]
    registry.uninstall("shop")
    assert registry.activeComponents() == ["base"]

    registry.setActiveComponents(None)
    assert registry.activeComponents() == ["base", "crm"]


def test_subscribers_are_notified(tree):
    tree.add("base", dependsOn=[])
    registry = tree.registry()
    reasons: list[str] = []
    unsubscribe = registry.subscribe(reasons.append)

    registry.uninstall("base")
    registry.install("base")
    registry.setActiveComponents(["base"])
    assert reasons == ["uninstall", "install", "active"]

    unsubscribe()
    unsubscribe()
    registry.setActiveComponents(None)
    assert reasons == ["uninstall", "install", "active"]
