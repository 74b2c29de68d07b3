# bundler/core/config_stack.py
from __future__ import annotations
from typing import Any, Literal
from collections.abc import Mapping
from dataclasses import dataclass, field
import copy

__all__ = [
    "ConfigScope", "mergeDeep", "getByPath",
    "ConfigLayer", "ConfigStack",
]



ConfigScope = Literal["defaults", "file", "runtime"]
# Precedence: defaults → file → runtime
_SCOPE_ORDER: tuple[str, ...] = ("defaults", "file", "runtime")



def mergeDeep(left: Any, right: Any) -> Any:
    """
    Deep merge of JSON-like values:
      - dicts: recurse key by key
      - lists and scalars: right replaces left (copied, never aliased)
    """
    if isinstance(left, Mapping) and isinstance(right, Mapping):
        out: dict[str, Any] = {**left}
        for key, rightValue in right.items():
            leftValue = out.get(key)
            if isinstance(leftValue, Mapping) and isinstance(rightValue, Mapping):
                out[key] = mergeDeep(leftValue, rightValue)
            else:
                out[key] = copy.deepcopy(rightValue)
        return out
    return copy.deepcopy(right)



def getByPath(obj: Any, path: str, default: Any = None) -> Any:
    """
    Returns the value at dotted `path` from nested mappings, or `default`
    when any hop is missing.
    """
    current: Any = obj
    for part in (path or "").split("."):
        if not part:
            return default
        if isinstance(current, Mapping) and part in current:
            current = current[part]
            continue
        return default
    return current



@dataclass(frozen=True)
class ConfigLayer:
    """
    One immutable configuration layer.
    - name: human readable
    - scope: "defaults" | "file" | "runtime"
    - data: plain JSON-like dict
    """
    name: str
    scope: ConfigScope
    data: dict[str, Any] = field(default_factory=dict)



class ConfigStack:
    """
    An ordered set of layers with fixed scope precedence. The merged document
    is cached and recomputed whenever the stack version changes.
    """
    def __init__(self, layers: list[ConfigLayer] | None = None):
        self._layers: list[ConfigLayer] = list(layers or [])
        self._version: int = 0
        self._effective: dict[str, Any] | None = None
        self._effectiveVersion: int = -1

    def setLayers(self, layers: list[ConfigLayer]) -> None:
        # Replace entire stack atomically
        self._layers = list(layers)
        self._version += 1

    def addLayer(self, layer: ConfigLayer) -> None:
        self._layers.append(layer)
        self._version += 1

    def removeLayer(self, name: str) -> bool:
        idx = next((index for index, layer in enumerate(self._layers) if layer.name == name), -1)
        if idx >= 0:
            del self._layers[idx]
            self._version += 1
            return True
        return False

    def layers(self) -> list[ConfigLayer]:
        return list(self._layers)

    def version(self) -> int:
        return self._version

    def effective(self) -> dict[str, Any]:
        if self._effective is not None and self._effectiveVersion == self._version:
            return self._effective
        merged: dict[str, Any] = {}
        for scope in _SCOPE_ORDER:
            for layer in self._layers:
                if layer.scope != scope:
                    continue
                merged = mergeDeep(merged, layer.data)
                if not isinstance(merged, dict):
                    raise TypeError(
                        f'Layer "{layer.name}" (scope="{layer.scope}") produced non-dict at root. '
                        'Configs must remain object-shaped at the top level.'
                    )
        self._effective = merged
        self._effectiveVersion = self._version
        return merged

    def get(self, path: str, default: Any = None) -> Any:
        value = getByPath(self.effective(), path)
        return default if value is None else value

    def set(self, path: str, value: Any) -> None:
        """Set a value in the runtime layer, creating it when missing."""
        runtime = next((layer for layer in self._layers if layer.scope == "runtime"), None)
        data = copy.deepcopy(runtime.data) if runtime is not None else {}
        current = data
        parts = path.split(".")
        for part in parts[:-1]:
            nxt = current.get(part)
            if not isinstance(nxt, dict):
                nxt = {}
                current[part] = nxt
            current = nxt
        current[parts[-1]] = value
        newLayer = ConfigLayer(name=runtime.name if runtime else "runtime", scope="runtime", data=data)
        if runtime is None:
            self._layers.append(newLayer)
        else:
            self._layers = [newLayer if layer is runtime else layer for layer in self._layers]
        self._version += 1
