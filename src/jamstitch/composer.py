"""Compose all assembled programs into one publishable bundle."""

import copy
import json
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .assembler import ModuleAssembler
from .config import StitchConfig
from .contracts import AssembledModule, Bundle, SourceProject
from .transform import merge_names

RESOURCE_MANIFEST = "tilemap.jres"
RESOURCE_SOURCE = "tilemap.ts"
KINDS_SOURCE = "kinds.ts"
RUNTIME_LIBRARY = "lib.ts"
REGISTRATION_SOURCE = "main.ts"
MANIFEST = "pxt.json"

RESOURCE_ENVELOPE = {
    "*": {
        "mimeType": "image/x-mkcd-f4",
        "dataEncoding": "base64",
        "namespace": "myTiles",
    }
}


@dataclass
class MergeState:
    """Run-wide accumulation, folded one program at a time in input order."""
    resources: dict[str, Any] = field(default_factory=lambda: copy.deepcopy(RESOURCE_ENVELOPE))
    resource_source: str = ""
    sprite_kinds: list[str] = field(default_factory=list)
    status_bar_kinds: list[str] = field(default_factory=list)
    registrations: list[str] = field(default_factory=list)
    modules: list[AssembledModule] = field(default_factory=list)


class ProgramComposer:
    """Drives assembly of every program and merges their contributions."""

    def __init__(self, config: StitchConfig | None = None, runtime_library: str = "") -> None:
        self.config = config or StitchConfig()
        self.runtime_library = runtime_library
        self.assembler = ModuleAssembler(max_scan_steps=self.config.max_scan_steps)
        self.logger = logging.getLogger(self.__class__.__name__)

    @classmethod
    def from_config(cls, config: StitchConfig, project_path: Path) -> "ProgramComposer":
        """Build a composer whose runtime library is read from the configured location."""
        library_path = config.runtime_library_path(project_path)
        return cls(config, library_path.read_text(encoding="utf-8"))

    def compose(self, projects: list[SourceProject]) -> Bundle:
        """
        Assemble and merge projects into a bundle.

        Raises:
            UnbalancedScanError: any program fails to assemble; no bundle is produced.
        """
        modules = self._assemble_all(projects)

        state = MergeState()
        for project, module in zip(projects, modules):
            self._merge(state, project, module)
        state.registrations.append("GameJam.init();")

        return self._build_bundle(state, self.merge_dependencies(projects))

    def _assemble_all(self, projects: list[SourceProject]) -> list[AssembledModule]:
        """Assemble every project; order of the result matches input order."""
        if not self.config.parallel_assembly or len(projects) < 2:
            return [self.assembler.assemble(p, i) for i, p in enumerate(projects)]

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            return list(executor.map(self.assembler.assemble, projects, range(len(projects))))

    def _merge(self, state: MergeState, project: SourceProject, module: AssembledModule) -> None:
        for tile in module.tiles:
            state.resources[tile.new_id] = tile.payload
        state.resource_source += module.tile_source

        skipped = merge_names(state.sprite_kinds, module.sprite_kinds)
        skipped += merge_names(state.status_bar_kinds, module.status_bar_kinds)
        if skipped:
            self.logger.debug("%s reuses kinds already declared: %s", module.wrapper_name, ", ".join(skipped))

        state.registrations.append(
            f"GameJam.registerGame({json.dumps(project.author)}, {module.wrapper_name});"
        )
        state.modules.append(module)

    def merge_dependencies(self, projects: list[SourceProject]) -> dict[str, str]:
        """Injected dependencies first, then each project's in order; first writer wins."""
        dependencies = dict(self.config.injected_dependencies)
        excluded = set(self.config.excluded_dependencies)

        for project in projects:
            for name, version in project.dependencies.items():
                if name in excluded:
                    continue
                if name not in dependencies:
                    dependencies[name] = version
                elif dependencies[name] != version:
                    self.logger.warning(
                        "Dependency %s: keeping %s, ignoring %s from %s",
                        name, dependencies[name], version, project.author,
                    )
        return dependencies

    def _build_bundle(self, state: MergeState, dependencies: dict[str, str]) -> Bundle:
        game_files = [module.filename for module in state.modules]
        manifest = {
            "name": self.config.project_name,
            "description": "",
            "dependencies": dependencies,
            "files": [
                RESOURCE_MANIFEST,
                RESOURCE_SOURCE,
                KINDS_SOURCE,
                RUNTIME_LIBRARY,
                *game_files,
                REGISTRATION_SOURCE,
            ],
            "preferredEditor": self.config.editor,
        }

        files: dict[str, str] = {
            MANIFEST: json.dumps(manifest, indent=4),
            RESOURCE_MANIFEST: json.dumps(state.resources, separators=(",", ":")),
            RESOURCE_SOURCE: state.resource_source,
            KINDS_SOURCE: kinds_source(state.sprite_kinds, state.status_bar_kinds),
            RUNTIME_LIBRARY: self.runtime_library,
        }
        for module in state.modules:
            files[module.filename] = module.source
        files[REGISTRATION_SOURCE] = "".join(line + "\n" for line in state.registrations)

        self.logger.info(
            "Composed %d programs: %d resources, %d sprite kinds, %d status bar kinds",
            len(state.modules), len(state.resources) - 1,
            len(state.sprite_kinds), len(state.status_bar_kinds),
        )
        return Bundle(
            name=self.config.project_name,
            files=files,
            manifest=manifest,
            resources=state.resources,
            sprite_kinds=state.sprite_kinds,
            status_bar_kinds=state.status_bar_kinds,
            dependencies=dependencies,
        )


def kinds_source(sprite_kinds: list[str], status_bar_kinds: list[str]) -> str:
    """Declare the merged kinds in their two namespaces."""
    parts = []
    for namespace, kinds in (("SpriteKind", sprite_kinds), ("StatusBarKind", status_bar_kinds)):
        members = "\n".join(f"    export const {kind} = {namespace}.create();" for kind in kinds)
        parts.append(f"namespace {namespace} {{\n{members}\n}}\n")
    return "".join(parts)
