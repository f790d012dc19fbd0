"""Tests for TileResourceRenamer and tile reference rewriting."""

import logging
import re

import pytest

from jamstitch.contracts import TileRecord
from jamstitch.transform.tiles import TileResourceRenamer, rewrite_tile_references


class TestRenaming:
    def test_mints_ids_from_program_index(self, tile_module: str, tile_catalog: dict) -> None:
        result = TileResourceRenamer(3).rename(tile_module, tile_catalog)

        assert [t.old_id for t in result.tiles] == ["transparency16", "tile1", "tile10"]
        assert [t.new_id for t in result.tiles] == [
            "game3_transparency16", "game3_tile1", "game3_tile10",
        ]

    def test_declarations_become_placeholders(self, tile_module: str, tile_catalog: dict) -> None:
        result = TileResourceRenamer(0).rename(tile_module, tile_catalog)
        source = result.declarations_source

        assert "    export const game0_tile1 = image.ofBuffer(hex``);" in source
        assert "export const tile1 " not in source
        assert source.startswith("// Auto-generated code. Do not edit.\nnamespace myTiles {\n")
        assert source.endswith("\n}\n")
        assert "_registerFactory" not in source

    def test_payloads_come_from_catalog(self, tile_module: str, tile_catalog: dict) -> None:
        result = TileResourceRenamer(0).rename(tile_module, tile_catalog)

        payloads = {t.new_id: t.payload for t in result.tiles}
        assert payloads["game0_tile1"] == tile_catalog["tile1"]
        assert "game0_level1" not in payloads

    def test_helpers_start_at_registration(self, tile_module: str, tile_catalog: dict) -> None:
        helpers = TileResourceRenamer(0).rename(tile_module, tile_catalog).helpers

        assert helpers.lstrip().startswith('helpers._registerFactory("tilemap"')
        assert "Auto-generated" not in helpers
        assert not any(line.startswith("}") for line in helpers.split("\n"))

    def test_helper_references_requalified(self, tile_module: str, tile_catalog: dict) -> None:
        helpers = TileResourceRenamer(0).rename(tile_module, tile_catalog).helpers

        assert "[myTiles.game0_transparency16,myTiles.game0_tile1,myTiles.game0_tile10]" in helpers
        assert 'case "tile1":return myTiles.game0_tile1;' in helpers
        assert 'case "tile10":return myTiles.game0_tile10;' in helpers
        assert "return null;" in helpers
        assert re.search(r"myTiles\.tile1\b", helpers) is None
        assert re.search(r"return tile1\b", helpers) is None

    def test_missing_catalog_entry_is_logged(
        self, tile_module: str, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level(logging.WARNING):
            result = TileResourceRenamer(0).rename(tile_module, {})

        assert all(t.payload is None for t in result.tiles)
        assert "no catalog entry" in caplog.text

    def test_module_without_marker(self) -> None:
        text = "namespace myTiles {\n    export const grass = image.ofBuffer(hex``);\n}"
        result = TileResourceRenamer(1).rename(text)

        assert result.helpers == ""
        assert [t.new_id for t in result.tiles] == ["game1_grass"]

    def test_same_tile_in_two_programs_gets_two_ids(self, apple_tiles: str) -> None:
        first = TileResourceRenamer(0).rename(apple_tiles, {"apple": {"data": "A"}})
        second = TileResourceRenamer(1).rename(apple_tiles, {"apple": {"data": "B"}})

        assert first.tiles[0].new_id == "game0_apple"
        assert second.tiles[0].new_id == "game1_apple"
        assert "return myTiles.game0_apple;" in first.helpers
        assert "game1_apple" not in first.helpers


class TestRewriteReferences:
    @pytest.fixture
    def tiles(self) -> list[TileRecord]:
        return [
            TileRecord(old_id="tile1", new_id="game0_tile1"),
            TileRecord(old_id="tile10", new_id="game0_tile10"),
        ]

    def test_qualified_references_rewritten(self, tiles: list[TileRecord]) -> None:
        text = "tiles.setTileAt(loc, myTiles.tile1)\ntiles.setTileAt(loc, myTiles.tile10)"
        result = rewrite_tile_references(text, tiles)

        assert result == (
            "tiles.setTileAt(loc, myTiles.game0_tile1)\n"
            "tiles.setTileAt(loc, myTiles.game0_tile10)"
        )

    def test_bare_names_left_alone_by_default(self, tiles: list[TileRecord]) -> None:
        text = "let tile1 = 3\nreturn tile1"
        assert rewrite_tile_references(text, tiles) == text

    def test_unrelated_identifiers_untouched(self, tiles: list[TileRecord]) -> None:
        text = "myTiles.tile100\nother.myTiles.tile1x\nreturn tile1s"
        assert rewrite_tile_references(text, tiles, include_bare=True) == text

    def test_bare_names_in_expressions_qualified(self, tiles: list[TileRecord]) -> None:
        text = 'case "walk":return [tile1, tile10];\ncase "tile1":return tile1;'
        result = rewrite_tile_references(text, tiles, include_bare=True)

        assert result == (
            'case "walk":return [myTiles.game0_tile1, myTiles.game0_tile10];\n'
            'case "tile1":return myTiles.game0_tile1;'
        )

    def test_strings_and_comments_keep_old_names(self, tiles: list[TileRecord]) -> None:
        text = 'const name = "tile1" // tile10\nlet x = tile1'
        result = rewrite_tile_references(text, tiles, include_bare=True)

        assert result == 'const name = "tile1" // tile10\nlet x = myTiles.game0_tile1'

    def test_qualified_names_not_qualified_twice(self, tiles: list[TileRecord]) -> None:
        text = "f(myTiles.tile1, tile10)"
        result = rewrite_tile_references(text, tiles, include_bare=True)

        assert result == "f(myTiles.game0_tile1, myTiles.game0_tile10)"

    def test_no_tiles_is_identity(self) -> None:
        assert rewrite_tile_references("myTiles.tile1", []) == "myTiles.tile1"
