# bundler/assets/ordering.py
from __future__ import annotations
import heapq
import logging
from collections.abc import Iterable
from threading import RLock

from bundler.components.manifest import DEFAULT_COMPONENT_PRIORITY
from bundler.components.registry import ComponentRegistry
from bundler.core.errors import CycleError

logger = logging.getLogger(__name__)

__all__ = ["SortKey", "DependencyOrderer", "toposort"]



SortKey = tuple[bool, int, str]



def _findCycle(graph: dict[str, list[str]], remaining: set[str]) -> list[str]:
    """
    Walk dependency edges among `remaining` nodes (each has at least one
    unresolved dependency) until a node repeats; returns the closed cycle.
    """
    node = min(remaining)
    path: list[str] = []
    position: dict[str, int] = {}
    while node not in position:
        position[node] = len(path)
        path.append(node)
        node = min(dep for dep in graph[node] if dep in remaining)
    return path[position[node]:] + [node]



def toposort(graph: dict[str, list[str]], keys: dict[str, SortKey]) -> list[str]:
    """
    Kahn's algorithm over ``node -> [dependencies]``. Among the nodes whose
    dependencies are all placed, the one with the lowest key goes next.
    Dependencies that are not nodes of the graph are ignored.
    """
    dependents: dict[str, list[str]] = {node: [] for node in graph}
    indegree: dict[str, int] = {node: 0 for node in graph}
    for node, deps in graph.items():
        for dep in set(deps):
            if dep not in graph:
                continue
            dependents[dep].append(node)
            indegree[node] += 1

    ready = [(keys[node], node) for node, degree in indegree.items() if degree == 0]
    heapq.heapify(ready)
    order: list[str] = []
    while ready:
        _key, node = heapq.heappop(ready)
        order.append(node)
        for dependent in dependents[node]:
            indegree[dependent] -= 1
            if indegree[dependent] == 0:
                heapq.heappush(ready, (keys[dependent], dependent))

    if len(order) != len(graph):
        remaining = {node for node, degree in indegree.items() if degree > 0}
        raise CycleError(_findCycle(graph, remaining))
    return order



class DependencyOrderer:
    """
    Orders components so that dependencies come before their dependents.
    Ties are broken by (not isApplication, priority, name).

    Results are memoized per distinct component set; `invalidate` drops the
    memo and is meant to be wired to registry and override store changes.
    """

    def __init__(self, registry: ComponentRegistry) -> None:
        self._registry = registry
        self._cache: dict[frozenset[str], tuple[str, ...]] = {}
        self._lock = RLock()

    def order(self, components: Iterable[str]) -> list[str]:
        key = frozenset(components)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return list(cached)

        graph, keys = self._buildGraph(key)
        ordered = tuple(toposort(graph, keys))
        with self._lock:
            self._cache[key] = ordered
        logger.debug("Component order computed for %d component(s): %s", len(ordered), ", ".join(ordered))
        return list(ordered)

    def invalidate(self, *_args: object) -> None:
        with self._lock:
            dropped = len(self._cache)
            self._cache.clear()
        if dropped:
            logger.debug("Component order cache invalidated (%d entries)", dropped)

    def cacheSize(self) -> int:
        with self._lock:
            return len(self._cache)

    def _buildGraph(self, components: frozenset[str]) -> tuple[dict[str, list[str]], dict[str, SortKey]]:
        graph: dict[str, list[str]] = {}
        keys: dict[str, SortKey] = {}
        for name in components:
            manifest = self._registry.manifestOf(name)
            if manifest is None:
                depends, priority, isApplication = ["base"], DEFAULT_COMPONENT_PRIORITY, False
            else:
                depends, priority, isApplication = manifest.dependsOn, manifest.priority, manifest.isApplication
            # A component never waits on itself
            graph[name] = [dep for dep in depends if dep != name]
            keys[name] = (not isApplication, priority, name)
        return graph, keys
