# bundler/core/logging/context.py
from __future__ import annotations
import contextvars
from collections.abc import Iterator
from contextlib import contextmanager

# All log context lives here. Enriched per bundle resolution.
_logContextVar: contextvars.ContextVar[dict[str, object] | None] = contextvars.ContextVar("bundler.logctx", default=None)

def setLogContext(**kvs):
    """Set or update per-log context values (bundle, component, etc.)."""
    current = dict(_logContextVar.get() or {}) # use copy
    for key, value in kvs.items():
        if value is not None:
            current[key] = value
    _logContextVar.set(current)

def clearLogContext():
    """Clear context after a resolution is fully handled."""
    _logContextVar.set(None)

def getLogContext():
    """Return current content dict or None."""
    return _logContextVar.get()

@contextmanager
def logContext(**kvs) -> Iterator[None]:
    """Scoped variant of setLogContext; restores the previous context on exit."""
    current = dict(_logContextVar.get() or {})
    current.update({key: value for key, value in kvs.items() if value is not None})
    token = _logContextVar.set(current)
    try:
        yield
    finally:
        _logContextVar.reset(token)
