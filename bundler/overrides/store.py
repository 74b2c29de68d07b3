# bundler/overrides/store.py
from __future__ import annotations
import logging
from collections.abc import Callable, Iterable
from pathlib import Path
from threading import RLock
from typing import Any

import json5
from pydantic import ValidationError

from bundler.core.errors import ManifestError
from bundler.overrides.records import OverrideRecord

logger = logging.getLogger(__name__)

__all__ = ["StoreListener", "OverrideStore"]



# (operation, affected records)
StoreListener = Callable[[str, list[OverrideRecord]], None]



class OverrideStore:
    """
    In-memory store of override records.

    - create/write/unlink validate through OverrideRecord and notify subscribers
    - listings are ordered by (priority, id)
    """

    def __init__(self, records: Iterable[OverrideRecord | dict[str, Any]] = ()) -> None:
        self._records: dict[int, OverrideRecord] = {}
        self._nextId = 1
        self._listeners: list[StoreListener] = []
        self._lock = RLock()
        if records:
            self.create(list(records))

    # ----- Loading -----

    @classmethod
    def fromFile(cls, path: str | Path) -> OverrideStore:
        store = cls()
        store.loadFile(path)
        return store

    def loadFile(self, path: str | Path) -> list[OverrideRecord]:
        """
        Load records from a JSON5 document: either a list of records or
        {"overrides": [...]}.
        """
        path = Path(path)
        try:
            raw = json5.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as err:
            raise ManifestError(f"Cannot read override file '{path}': {err}") from err
        if isinstance(raw, dict):
            raw = raw.get("overrides", [])
        if not isinstance(raw, list):
            raise ManifestError(f"Override file '{path}' must contain a list of records")
        try:
            created = self.create(raw)
        except ValidationError as err:
            raise ManifestError(f"Invalid override record in '{path}': {err}") from err
        logger.info("Loaded %d override record(s) from '%s'", len(created), path)
        return created

    # ----- CRUD -----

    def create(self, valsList: Iterable[OverrideRecord | dict[str, Any]]) -> list[OverrideRecord]:
        created: list[OverrideRecord] = []
        with self._lock:
            for vals in valsList:
                if isinstance(vals, OverrideRecord):
                    vals = vals.model_dump()
                vals = {**vals, "id": self._nextId}
                record = OverrideRecord.model_validate(vals)
                created.append(record)
                self._nextId += 1
            for record in created:
                self._records[record.id] = record
        self._notify("create", created)
        return created

    def write(self, recordId: int, **values: Any) -> OverrideRecord:
        with self._lock:
            current = self.get(recordId)
            values.pop("id", None)
            record = OverrideRecord.model_validate({**current.model_dump(), **values})
            self._records[recordId] = record
        self._notify("write", [record])
        return record

    def unlink(self, *recordIds: int) -> None:
        with self._lock:
            removed = [self._records.pop(recordId) for recordId in recordIds if recordId in self._records]
        self._notify("unlink", removed)

    def get(self, recordId: int) -> OverrideRecord:
        try:
            return self._records[recordId]
        except KeyError:
            raise KeyError(f"Unknown override record {recordId}") from None

    # ----- Queries -----

    def listOverrides(self, bundle: str) -> list[OverrideRecord]:
        """Every record of the bundle regardless of its active state."""
        with self._lock:
            records = [record for record in self._records.values() if record.bundle == bundle]
        records.sort(key=lambda record: (record.priority, record.id))
        return records

    def listActiveOverrides(self, bundle: str) -> list[OverrideRecord]:
        return [record for record in self.listOverrides(bundle) if record.active]

    def __len__(self) -> int:
        return len(self._records)

    # ----- Change notification -----

    def subscribe(self, fn: StoreListener) -> Callable[[], None]:
        self._listeners.append(fn)
        def _unsub() -> None:
            try:
                self._listeners.remove(fn)
            except ValueError:
                pass
        return _unsub

    def _notify(self, operation: str, records: list[OverrideRecord]) -> None:
        for fn in list(self._listeners):
            fn(operation, records)
