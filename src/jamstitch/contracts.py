"""Data contracts for projects, transformed modules and bundles."""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ProjectConfig:
    """The parsed pxt.json of a single project."""
    dependencies: dict[str, str] = field(default_factory=dict)
    files: list[str] = field(default_factory=list)
    palette: list[str] | None = None

    @classmethod
    def from_json(cls, text: str) -> "ProjectConfig":
        """Parse pxt.json text. Raises ValueError on malformed input."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("pxt.json must contain an object")
        return cls(
            dependencies=dict(data.get("dependencies", {})),
            files=list(data.get("files", [])),
            palette=list(data["palette"]) if data.get("palette") else None,
        )


@dataclass(frozen=True)
class ProjectMeta:
    """Script metadata returned by the backend."""
    name: str
    description: str = ""
    editor: str = ""
    target: str = ""
    versions: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectMeta":
        """Build from the backend's script JSON."""
        meta = data.get("meta") or {}
        return cls(
            name=data.get("name", ""),
            description=data.get("description", ""),
            editor=data.get("editor", ""),
            target=data.get("target", ""),
            versions=dict(meta.get("versions", {})),
        )


@dataclass(frozen=True)
class SourceProject:
    """One fetched game: its sources, manifest and attribution."""
    url: str
    author: str
    meta: ProjectMeta
    text: dict[str, str]
    config: ProjectConfig

    @property
    def files(self) -> list[str]:
        return self.config.files

    @property
    def palette(self) -> list[str] | None:
        return self.config.palette

    @property
    def dependencies(self) -> dict[str, str]:
        return self.config.dependencies


@dataclass(frozen=True)
class TileRecord:
    """A tile constant renamed to a run-wide unique identifier."""
    old_id: str
    new_id: str
    payload: Any = None


class LiteralType(Enum):
    """Type inferred from the shape of an initializer literal."""
    NUMBER = "number"
    BOOLEAN = "boolean"
    STRING = "string"
    ARRAY = "any[]"
    UNRESOLVED = "any"

    @property
    def is_resolved(self) -> bool:
        return self is not LiteralType.UNRESOLVED


@dataclass(frozen=True)
class Declaration:
    """A hoisted top-level variable declaration."""
    name: str
    annotation: str | None = None
    inferred: LiteralType | None = None
    initializer: str | None = None

    @property
    def type_text(self) -> str:
        if self.annotation:
            return self.annotation
        return (self.inferred or LiteralType.UNRESOLVED).value

    def to_source(self) -> str:
        return f"let {self.name}: {self.type_text};"


@dataclass(frozen=True)
class LoweredFunction:
    """A top-level function rewritten as an assigned arrow function."""
    name: str
    params: str
    body: str

    def to_source(self) -> str:
        return f"const {self.name} = {self.params} => {self.body}"


@dataclass(frozen=True)
class AssembledModule:
    """The single wrapped source block produced for one program."""
    index: int
    author: str
    source: str
    tile_source: str = ""
    sprite_kinds: tuple[str, ...] = ()
    status_bar_kinds: tuple[str, ...] = ()
    tiles: tuple[TileRecord, ...] = ()

    @property
    def wrapper_name(self) -> str:
        return f"game{self.index}"

    @property
    def filename(self) -> str:
        return f"{self.wrapper_name}.ts"


@dataclass
class Bundle:
    """The merged multi-file artifact handed to the publisher."""
    name: str
    files: dict[str, str]
    manifest: dict[str, Any]
    resources: dict[str, Any]
    sprite_kinds: list[str] = field(default_factory=list)
    status_bar_kinds: list[str] = field(default_factory=list)
    dependencies: dict[str, str] = field(default_factory=dict)

    def write_to(self, directory: Path) -> list[Path]:
        """Write every bundle file into directory, returning the written paths."""
        directory.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for filename, text in self.files.items():
            path = directory / filename
            path.write_text(text, encoding="utf-8")
            written.append(path)
        return written
