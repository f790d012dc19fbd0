"""Shared fixtures: small MakeCode projects in the shapes the jam games use."""

import json
from typing import Callable

import pytest

from jamstitch.contracts import ProjectConfig, ProjectMeta, SourceProject


TILE_MODULE = """// Auto-generated code. Do not edit.
namespace myTiles {
    //% fixedInstance jres blockIdentity=images._tile
    export const transparency16 = image.ofBuffer(hex``);
    //% fixedInstance jres blockIdentity=images._tile
    export const tile1 = image.ofBuffer(hex``);
    //% fixedInstance jres blockIdentity=images._tile
    export const tile10 = image.ofBuffer(hex``);

    helpers._registerFactory("tilemap", function(name: string) {
        switch(helpers.stringTrim(name)) {
            case "level1":
            case "level1":return tiles.createTilemap(hex`1000`, img`.`, [myTiles.transparency16,myTiles.tile1,myTiles.tile10], TileScale.Sixteen);
        }
        return null;
    })

    helpers._registerFactory("tile", function(name: string) {
        switch(helpers.stringTrim(name)) {
            case "myTile":
            case "tile1":return tile1;
            case "tile10":return tile10;
        }
        return null;
    })

}
// Auto-generated code. Do not edit.
"""

TILE_CATALOG = {
    "transparency16": {"data": "hwQQABAAAAAA", "mimeType": "image/x-mkcd-f4", "tilemapTile": True},
    "tile1": {"data": "hwQQABAAAAAR", "mimeType": "image/x-mkcd-f4", "tilemapTile": True},
    "tile10": {"data": "hwQQABAAAAAi", "mimeType": "image/x-mkcd-f4", "tilemapTile": True},
    "level1": {"id": "level1", "mimeType": "application/mkcd-tilemap", "data": "MTAwMDEw"},
}


def apple_tile_module() -> str:
    return """namespace myTiles {
    //% fixedInstance jres blockIdentity=images._tile
    export const apple = image.ofBuffer(hex``);

    helpers._registerFactory("tile", function(name: string) {
        switch(helpers.stringTrim(name)) {
            case "apple":return apple;
        }
        return null;
    })

}
"""


ProjectFactory = Callable[..., SourceProject]


@pytest.fixture
def make_project() -> ProjectFactory:
    """Build a SourceProject from a filename -> text mapping."""

    def factory(
        text: dict[str, str],
        files: list[str] | None = None,
        palette: list[str] | None = None,
        dependencies: dict[str, str] | None = None,
        author: str = "alice",
        url: str = "https://arcade.makecode.com/S12345-67890-11111-22222",
    ) -> SourceProject:
        config = ProjectConfig(
            dependencies=dependencies or {"device": "*"},
            files=files if files is not None else list(text),
            palette=palette,
        )
        full_text = dict(text)
        full_text["pxt.json"] = json.dumps({
            "dependencies": config.dependencies,
            "files": config.files,
        })
        return SourceProject(
            url=url,
            author=author,
            meta=ProjectMeta(name=f"{author}'s game", editor="tsprj", target="arcade"),
            text=full_text,
            config=config,
        )

    return factory


@pytest.fixture
def tile_module() -> str:
    return TILE_MODULE


@pytest.fixture
def tile_catalog() -> dict:
    return json.loads(json.dumps(TILE_CATALOG))


@pytest.fixture
def apple_tiles() -> str:
    return apple_tile_module()
