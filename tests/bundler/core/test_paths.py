# tests/bundler/core/test_paths.py
from __future__ import annotations
import os

import pytest
from fastapi import HTTPException

from bundler.core.paths import fs2web, isInside, resolveSafe


def test_fs2web_keeps_posix_paths():
    assert fs2web("/base/static/src/app.js") == "/base/static/src/app.js"


def test_isInside():
    assert isInside("/srv/components/base/static", "/srv/components/base")
    assert isInside("/srv/components/base", "/srv/components/base")
    assert isInside("/srv/components/base/../base/x.js", "/srv/components/base")
    assert not isInside("/srv/components/base_evil/x.js", "/srv/components/base")
    assert not isInside("/srv/components/base/../shop/x.js", "/srv/components/base")


def test_resolveSafe_inside_root(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "a.js").write_text("a", encoding="utf-8")
    assert resolveSafe(tmp_path, "src/a.js") == (tmp_path / "src" / "a.js").resolve()
    assert resolveSafe(tmp_path, None) == tmp_path.resolve()


def test_resolveSafe_rejects_traversal(tmp_path):
    root = tmp_path / "root"
    root.mkdir()
    with pytest.raises(HTTPException) as excinfo:
        resolveSafe(root, "../outside.js")
    assert excinfo.value.status_code == 403


def test_resolveSafe_symlink_policy(tmp_path):
    root = tmp_path / "root"
    (root / "real").mkdir(parents=True)
    (root / "real" / "a.js").write_text("a", encoding="utf-8")
    os.symlink(root / "real", root / "link")

    with pytest.raises(HTTPException) as excinfo:
        resolveSafe(root, "link/a.js")
    assert excinfo.value.status_code == 403

    assert resolveSafe(root, "link/a.js", allowSymlinks=True) == (root / "real" / "a.js").resolve()
