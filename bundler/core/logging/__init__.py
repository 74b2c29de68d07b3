from __future__ import annotations

from .context import setLogContext, clearLogContext, getLogContext, logContext
from .setup import configureLogging
from .util import getLogger, getComponentLogger

__all__ = [
    "configureLogging",
    "getLogger",
    "getComponentLogger",
    "setLogContext",
    "clearLogContext",
    "getLogContext",
    "logContext",
]
