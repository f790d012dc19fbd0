"""Tests for ModuleAssembler - one program in, one wrapped source block out."""

import json
import logging

import pytest

from jamstitch.assembler import ModuleAssembler, indent
from jamstitch.errors import UnbalancedScanError


@pytest.fixture
def assembler() -> ModuleAssembler:
    return ModuleAssembler()


class TestWrapping:
    def test_single_file_program(self, assembler: ModuleAssembler, make_project) -> None:
        project = make_project({"main.ts": "let score = 0\ngame.splash(score)"})
        module = assembler.assemble(project, 0)

        assert module.source == (
            "// written by alice\n"
            "// original link https://arcade.makecode.com/S12345-67890-11111-22222\n"
            "function game0() {\n"
            "    let score: number;\n"
            "    score = 0\n"
            "    game.splash(score)\n"
            "}\n"
        )
        assert module.wrapper_name == "game0"
        assert module.filename == "game0.ts"

    def test_wrapper_name_follows_index(self, assembler: ModuleAssembler, make_project) -> None:
        project = make_project({"main.ts": "game.over(true)"})

        first = assembler.assemble(project, 0)
        second = assembler.assemble(project, 1)

        assert "function game0() {" in first.source
        assert "function game1() {" in second.source
        assert first.wrapper_name != second.wrapper_name

    def test_indent_skips_empty_lines(self) -> None:
        assert indent("a\n\nb", 2) == "  a\n\n  b"


class TestSectionOrder:
    def test_sections_in_fixed_order(
        self, assembler: ModuleAssembler, make_project, apple_tiles: str
    ) -> None:
        project = make_project(
            {
                "main.ts": "let hp = 3\nfunction hurt() {\n    hp -= 1\n}\nhurt()",
                "util.ts": "let speed = 50\nfunction go() {\n}\n",
                "tilemap.g.ts": apple_tiles,
                "tilemap.g.jres": json.dumps({"apple": {"data": "AAA"}}),
            },
            files=["main.ts", "util.ts", "tilemap.g.ts", "tilemap.g.jres"],
            palette=["#000000", "#ff0000"],
        )
        source = assembler.assemble(project, 0).source

        markers = [
            "_registerFactory",
            "let hp: number;",
            "let speed: number;",
            "const hurt = () => {",
            "const go = () => {",
            'color.setColor(0, color.parseColorString("#000000"));',
            "speed = 50",
            "hp = 3",
            "hurt()\n}",
        ]
        positions = [source.index(marker) for marker in markers]
        assert positions == sorted(positions)
        assert 'color.setColor(1, color.parseColorString("#ff0000"));' in source

    def test_no_top_level_function_left(self, assembler: ModuleAssembler, make_project) -> None:
        project = make_project({"main.ts": "function a() {\n}\nfunction b() {\n    a()\n}\nb()"})
        source = assembler.assemble(project, 0).source

        assert source.count("function ") == 1
        assert "const a = () => {" in source
        assert "const b = () => {" in source


class TestFileSelection:
    def test_non_source_and_missing_files_are_skipped(
        self, assembler: ModuleAssembler, make_project, caplog: pytest.LogCaptureFixture
    ) -> None:
        project = make_project(
            {"main.ts": "game.splash(1)", "assets.json": '{"secret": "ASSET"}'},
            files=["main.ts", "assets.json", "missing.ts"],
        )
        with caplog.at_level(logging.WARNING):
            module = assembler.assemble(project, 0)

        assert "ASSET" not in module.source
        assert "missing.ts" in caplog.text

    def test_image_namespace_prefix_removed(self, assembler: ModuleAssembler, make_project) -> None:
        project = make_project(
            {
                "images.g.ts": "namespace myImages {\n    export const hero = img`.`\n}",
                "main.ts": "game.splash(1)",
            },
            files=["images.g.ts", "main.ts"],
        )
        source = assembler.assemble(project, 0).source

        assert "namespace myImages" not in source
        assert "export const hero = img`.`" in source


class TestProgramContributions:
    def test_enum_members_collected_and_blocks_removed(
        self, assembler: ModuleAssembler, make_project
    ) -> None:
        project = make_project(
            {
                "main.ts": (
                    "namespace SpriteKind {\n    export const Coin = SpriteKind.create()\n}\n"
                    "namespace StatusBarKind {\n    export const Fuel = StatusBarKind.create()\n}\n"
                    "let c = sprites.create(img`.`, SpriteKind.Coin)"
                ),
            }
        )
        module = assembler.assemble(project, 0)

        assert module.sprite_kinds == ("Coin",)
        assert module.status_bar_kinds == ("Fuel",)
        assert "namespace SpriteKind" not in module.source
        assert "SpriteKind.Coin" in module.source

    def test_tiles_renamed_everywhere(
        self, assembler: ModuleAssembler, make_project, apple_tiles: str
    ) -> None:
        project = make_project(
            {
                "tilemap.g.ts": apple_tiles,
                "tilemap.g.jres": json.dumps({"apple": {"data": "AAA"}}),
                "main.ts": "tiles.setTileAt(loc, myTiles.apple)",
            },
            files=["tilemap.g.ts", "tilemap.g.jres", "main.ts"],
        )
        module = assembler.assemble(project, 2)

        assert "tiles.setTileAt(loc, myTiles.game2_apple)" in module.source
        assert "return myTiles.game2_apple;" in module.source
        assert "export const game2_apple = image.ofBuffer(hex``);" in module.tile_source
        assert module.tiles[0].payload == {"data": "AAA"}

    def test_missing_tile_catalog_is_not_fatal(
        self, assembler: ModuleAssembler, make_project, apple_tiles: str,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        project = make_project({"tilemap.g.ts": apple_tiles, "main.ts": "game.splash(1)"})
        with caplog.at_level(logging.WARNING):
            module = assembler.assemble(project, 0)

        assert module.tiles[0].payload is None
        assert "tilemap.g.jres" in caplog.text

    def test_unreadable_tile_catalog_is_not_fatal(
        self, assembler: ModuleAssembler, make_project, apple_tiles: str
    ) -> None:
        project = make_project(
            {"tilemap.g.ts": apple_tiles, "tilemap.g.jres": "{not json", "main.ts": ""},
            files=["tilemap.g.ts", "main.ts"],
        )
        assert assembler.assemble(project, 0).tiles[0].payload is None


    def test_duplicate_across_files_is_logged(
        self, assembler: ModuleAssembler, make_project, caplog: pytest.LogCaptureFixture
    ) -> None:
        project = make_project(
            {"util.ts": "let a = 1", "main.ts": "let a = 2\ngame.splash(a)"},
            files=["util.ts", "main.ts"],
        )
        with caplog.at_level(logging.WARNING):
            module = assembler.assemble(project, 0)

        assert "Duplicate top-level declaration of 'a'" in caplog.text
        assert module.source.count("let a: number;") == 2

    def test_same_name_in_two_programs_is_not_a_duplicate(
        self, assembler: ModuleAssembler, make_project, caplog: pytest.LogCaptureFixture
    ) -> None:
        project = make_project({"main.ts": "let a = 1"})
        with caplog.at_level(logging.WARNING):
            assembler.assemble(project, 0)
            assembler.assemble(project, 1)

        assert "Duplicate" not in caplog.text

class TestFailures:
    def test_unbalanced_function_propagates(self, assembler: ModuleAssembler, make_project) -> None:
        project = make_project({"main.ts": "function broken() {\n    game.splash(1)\n"})

        with pytest.raises(UnbalancedScanError) as exc_info:
            assembler.assemble(project, 0)
        assert exc_info.value.name == "broken"
