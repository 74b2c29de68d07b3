# bundler/components/manifest.py
from __future__ import annotations
from pydantic import BaseModel, Field, ConfigDict, field_validator

from bundler.assets.directives import RawCommand, isComment, normalizeCommand

__all__ = ["ComponentManifest", "DEFAULT_COMPONENT_PRIORITY"]



DEFAULT_COMPONENT_PRIORITY = 100



class ComponentManifest(BaseModel):
    """Represents a validated component manifest."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    name: str
    displayName: str | None = None
    version: str = "1.0.0"
    description: str | None = None
    author: str | None = None
    dependsOn: list[str] = Field(default_factory=lambda: ["base"])
    priority: int = DEFAULT_COMPONENT_PRIORITY
    isApplication: bool = False
    # bundle name -> ordered asset commands
    assets: dict[str, list[str | list[str]]] = Field(default_factory=dict)

    @field_validator("assets")
    @classmethod
    def _checkCommands(cls, value: dict[str, list[RawCommand]]) -> dict[str, list[RawCommand]]:
        for bundle, commands in value.items():
            for command in commands:
                if isComment(command):
                    continue
                try:
                    normalizeCommand(command)
                except ValueError as err:
                    raise ValueError(f"bundle {bundle!r}: {err}") from err
        return value

    def commandsFor(self, bundle: str) -> list[RawCommand]:
        return list(self.assets.get(bundle, ()))
