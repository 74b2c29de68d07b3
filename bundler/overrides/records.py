# bundler/overrides/records.py
from __future__ import annotations
from pydantic import BaseModel, ConfigDict, model_validator

from bundler.assets.constants import DEFAULT_PRIORITY
from bundler.assets.directives import Command, Directive

__all__ = ["OverrideRecord"]



class OverrideRecord(BaseModel):
    """
    An administrator-editable directive applied to one bundle on top of the
    component manifests.
    """
    model_config = ConfigDict(extra="forbid", frozen=True)

    id: int = 0
    name: str
    bundle: str
    directive: Directive = Directive.APPEND
    path: str
    target: str | None = None
    active: bool = True
    priority: int = DEFAULT_PRIORITY

    @model_validator(mode="after")
    def _checkTarget(self) -> OverrideRecord:
        if self.directive.needsTarget and not self.target:
            raise ValueError(f"Directive {self.directive.value!r} requires a target")
        return self

    @property
    def appliesBeforeManifests(self) -> bool:
        return self.priority < DEFAULT_PRIORITY

    def toCommand(self) -> Command:
        return Command(self.directive, self.target or None, self.path)
