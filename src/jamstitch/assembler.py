"""Assemble one program into a self-contained wrapper function."""

import json
import logging
import re

from .contracts import AssembledModule, SourceProject, TileRecord
from .transform import (
    DeclarationHoister,
    EnumNamespaceExtractor,
    FunctionLowerer,
    TileRenaming,
    TileResourceRenamer,
    merge_names,
    rewrite_tile_references,
)

ENTRY_FILE = "main.ts"
TILE_FILE = "tilemap.g.ts"
TILE_CATALOG_FILE = "tilemap.g.jres"
IMAGE_FILE = "images.g.ts"


def indent(text: str, spaces: int) -> str:
    """Indent every non-empty line of text."""
    prefix = " " * spaces
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


class ModuleAssembler:
    """
    Produces the wrapped source for one program.

    Every program's statements live inside `function game<index>()`, so the
    only names that must be unique across programs are the wrapper itself
    and the shared tile and kind identifiers.
    """

    _IMAGE_NAMESPACE_PATTERN = re.compile(r"namespace\s+myImages\s+")

    def __init__(self, max_scan_steps: int | None = None) -> None:
        self.hoister = DeclarationHoister()
        self.lowerer = FunctionLowerer(max_scan_steps=max_scan_steps)
        self.enum_extractor = EnumNamespaceExtractor()
        self.logger = logging.getLogger(self.__class__.__name__)

    def assemble(self, project: SourceProject, index: int) -> AssembledModule:
        """
        Transform every source file of project and wrap the result.

        Raises:
            UnbalancedScanError: a function body in the project never closes.
        """
        renaming: TileRenaming | None = None
        tile_helpers = ""
        tile_source = ""
        tiles: list[TileRecord] = []
        declarations = ""
        functions = ""
        other_files = ""
        entry = ""
        sprite_kinds: list[str] = []
        status_bar_kinds: list[str] = []

        if TILE_FILE in project.text:
            renaming = TileResourceRenamer(index).rename(
                project.text[TILE_FILE], self._tile_catalog(project)
            )
            tiles = renaming.tiles

        declared: set[str] = set()
        for filename in project.files:
            if not filename.endswith(".ts"):
                continue
            if filename not in project.text:
                self.logger.warning("%s lists %s but it was not fetched", project.url, filename)
                continue

            text = project.text[filename]
            if filename == TILE_FILE and renaming is not None:
                tile_source = renaming.declarations_source
                tile_helpers += renaming.helpers + "\n"
                continue

            if filename == IMAGE_FILE:
                text = self._IMAGE_NAMESPACE_PATTERN.sub("", text, count=1)
            else:
                text = rewrite_tile_references(text, tiles)
                extraction = self.enum_extractor.extract(text)
                merge_names(sprite_kinds, extraction.sprite_kinds)
                merge_names(status_bar_kinds, extraction.status_bar_kinds)

                hoisted = self.hoister.hoist(extraction.text, declared)
                declarations += hoisted.declarations_source

                lowered = self.lowerer.lower(hoisted.body)
                functions += lowered.functions_source
                text = lowered.body

            if filename == ENTRY_FILE:
                entry = text
            else:
                other_files += text + "\n"

        body = (
            tile_helpers
            + declarations
            + functions
            + self._palette_source(project.palette)
            + other_files
            + entry
        )
        source = (
            f"// written by {project.author}\n"
            f"// original link {project.url}\n"
            f"function game{index}() {{\n{indent(body, 4)}\n}}\n"
        )

        self.logger.info(
            "Assembled game%d (%s): %d tiles, %d sprite kinds, %d status bar kinds",
            index, project.author, len(tiles), len(sprite_kinds), len(status_bar_kinds),
        )
        return AssembledModule(
            index=index,
            author=project.author,
            source=source,
            tile_source=tile_source,
            sprite_kinds=tuple(sprite_kinds),
            status_bar_kinds=tuple(status_bar_kinds),
            tiles=tuple(tiles),
        )

    def _tile_catalog(self, project: SourceProject) -> dict:
        raw = project.text.get(TILE_CATALOG_FILE)
        if raw is None:
            self.logger.warning("%s has a tile module but no %s", project.url, TILE_CATALOG_FILE)
            return {}
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            self.logger.warning("Unreadable %s in %s: %s", TILE_CATALOG_FILE, project.url, e)
            return {}

    def _palette_source(self, palette: list[str] | None) -> str:
        if not palette:
            return ""
        return "".join(
            f'color.setColor({i}, color.parseColorString("{color}"));\n'
            for i, color in enumerate(palette)
        )
