"""Rename tile resources so every program's tiles get run-wide unique ids."""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Iterable

from ..contracts import TileRecord
from .scanner import iter_code

TILE_NAMESPACE = "myTiles"
REGISTRATION_MARKER = "_registerFactory"


@dataclass
class TileRenaming:
    """Output of renaming one program's tile module."""
    declarations_source: str
    helpers: str
    tiles: list[TileRecord] = field(default_factory=list)


class TileResourceRenamer:
    """
    Parses the generated tile module of one program.

    Declarations are replaced by placeholders named `game<index>_<id>`; the
    image data travels in the resource catalog instead. Everything from the
    factory registration onwards is helper code that runs inside the
    program's wrapper, with its tile references requalified.
    """

    _DECLARATION_PATTERN = re.compile(r"export\s+const\s+([^\s]+)\s+")

    def __init__(self, index: int) -> None:
        self.index = index
        self.logger = logging.getLogger(self.__class__.__name__)

    def new_id(self, old_id: str) -> str:
        return f"game{self.index}_{old_id}"

    def rename(self, text: str, catalog: dict[str, Any] | None = None) -> TileRenaming:
        """Rename every tile declared in text, looking payloads up in catalog."""
        catalog = catalog or {}
        lines = text.split("\n")
        declarations: list[str] = []
        tiles: list[TileRecord] = []
        helper_lines: list[str] = []
        found_marker = False

        for i, line in enumerate(lines):
            match = self._DECLARATION_PATTERN.search(line)
            if match:
                old_id = match.group(1)
                new_id = self.new_id(old_id)
                declarations.append(f"    export const {new_id} = image.ofBuffer(hex``);")
                if old_id not in catalog:
                    self.logger.warning("Tile '%s' has no catalog entry", old_id)
                tiles.append(TileRecord(old_id=old_id, new_id=new_id, payload=catalog.get(old_id)))
            elif REGISTRATION_MARKER in line:
                helper_lines = [
                    l for l in lines[i:]
                    if not (l.startswith("}") or l.startswith("//"))
                ]
                found_marker = True
                break
            else:
                declarations.append(line)

        if not found_marker:
            self.logger.warning("Tile module of game%d has no factory registration", self.index)

        helpers = rewrite_tile_references("\n".join(helper_lines), tiles, include_bare=True)
        return TileRenaming(
            declarations_source="\n".join(declarations) + "\n\n}\n",
            helpers=helpers,
            tiles=tiles,
        )


def rewrite_tile_references(
    text: str,
    tiles: Iterable[TileRecord],
    include_bare: bool = False,
) -> str:
    """
    Requalify references to renamed tiles.

    `myTiles.OLD` becomes `myTiles.NEW`. With include_bare, every other
    reference to OLD in code also becomes `myTiles.NEW`; helper code used
    to resolve those names inside the tile namespace. Matches inside string
    literals and comments are left alone, and identifier boundaries are
    respected, so `tile1` never matches inside `tile10` or `x.tile1`.
    """
    renames = {tile.old_id: tile.new_id for tile in tiles}
    if not renames:
        return text

    names = "|".join(re.escape(old) for old in sorted(renames, key=len, reverse=True))
    qualifier = rf"(?:{TILE_NAMESPACE}\.)?" if include_bare else rf"{TILE_NAMESPACE}\."
    pattern = re.compile(rf"(?<![\w$.]){qualifier}({names})(?![\w$])")
    code_positions = {i for i, _ in iter_code(text)}

    def replace(match: re.Match[str]) -> str:
        if match.start() not in code_positions:
            return match.group(0)
        return f"{TILE_NAMESPACE}.{renames[match.group(1)]}"

    return pattern.sub(replace, text)
