import logging
from pathlib import Path

import pytest

from sokoban_game.game import Direction, Position, Tile
from sokoban_game.loader import (
    LEVEL_FILE_ENV_VAR,
    EmptyLevelError,
    InvalidTileError,
    LevelCollectionLoader,
    LevelFormat,
    LevelParseError,
    LevelParser,
    MissingStartError,
    MultipleStartError,
    UnbalancedLevelError,
    describe_levels,
    flood_fill_interior,
    load_bundled_levels,
    load_level_file,
    load_levels,
    resolve_level_file,
)

DETOUR = """\
  ####
###  #
#@$  #
# .$.#
#    #
######"""

TWO_LEVELS = """\
; First
#####
#@$.#
#####

; Second
######
#@ $.#
######
"""


def test_short_rows_are_padded_to_widest_row():
    level = LevelParser().parse(["#####", "#@.#", "###"])

    assert (level.width, level.height) == (5, 3)
    assert all(len(row) == level.width for row in level.tiles)
    assert level.tile_at((4, 1)) is Tile.EXTERIOR_FLOOR
    assert level.tile_at((3, 2)) is Tile.EXTERIOR_FLOOR


def test_trailing_spaces_match_omitted_cells():
    padded = LevelParser().parse(["#####   ", "#@ .#   ", "#####"])
    plain = LevelParser().parse(["#####", "#@ .#", "#####"])

    assert padded.width == plain.width == 5
    assert padded.tiles == plain.tiles


def test_markers_are_resolved_into_floor_and_entities():
    level = LevelParser().parse(["#######", "#+*$. #", "#######"])
    state = level.start_state

    assert state.player.position == (1, 1)
    assert state.boxes == [(2, 1), (3, 1)]
    assert state.goals == {(1, 1), (2, 1), (4, 1)}
    assert [level.tile_at((x, 1)) for x in range(1, 6)] == [Tile.INTERIOR_FLOOR] * 5


def test_invalid_tile_reports_character_and_position():
    with pytest.raises(InvalidTileError) as info:
        LevelParser().parse(["####", "#@x#", "####"])

    assert info.value.char == "x"
    assert info.value.position == (2, 1)
    assert "'x'" in str(info.value)


def test_tile_legend_is_case_sensitive():
    with pytest.raises(InvalidTileError):
        LevelParser().parse(["#@P#"])


def test_empty_level_is_rejected():
    with pytest.raises(EmptyLevelError):
        LevelParser().parse([])
    with pytest.raises(EmptyLevelError):
        LevelParser().parse(["   ", "; only a comment"])


def test_missing_start_is_rejected():
    with pytest.raises(MissingStartError):
        LevelParser().parse(["#####", "#$ .#", "#####"])


def test_second_start_is_rejected():
    with pytest.raises(MultipleStartError):
        LevelParser().parse(["#####", "#@ +#", "#####"])


def test_parse_errors_are_value_errors():
    assert issubclass(LevelParseError, ValueError)
    for error in (EmptyLevelError, InvalidTileError, MissingStartError, MultipleStartError):
        assert issubclass(error, LevelParseError)


def test_flood_fill_separates_outside_floor():
    level = LevelParser().parse(DETOUR.splitlines())

    assert level.tile_at((0, 0)) is Tile.EXTERIOR_FLOOR
    assert level.tile_at((1, 0)) is Tile.EXTERIOR_FLOOR
    assert level.tile_at((1, 2)) is Tile.INTERIOR_FLOOR
    assert level.tile_at((3, 1)) is Tile.INTERIOR_FLOOR
    assert level.tile_at((4, 4)) is Tile.INTERIOR_FLOOR


def test_flood_fill_does_not_cross_walls():
    level = LevelParser().parse(["#######", "#@# # #", "#######"])

    assert list(level.interior_cells()) == [Position(1, 1)]
    assert level.tile_at((3, 1)) is Tile.EXTERIOR_FLOOR
    assert level.tile_at((5, 1)) is Tile.EXTERIOR_FLOOR


def test_interior_region_is_closed_under_floor_adjacency():
    for level in load_bundled_levels():
        interior = set(level.interior_cells())
        assert level.start_state.player.position in interior
        for cell in interior:
            for direction in Direction:
                neighbour = cell.step(direction)
                tile = level.tile_at(neighbour)
                if tile is not None and tile.is_floor:
                    assert tile is Tile.INTERIOR_FLOOR


def test_flood_fill_handles_large_open_grid():
    tiles = [[Tile.EXTERIOR_FLOOR] * 200 for _ in range(200)]

    marked = flood_fill_interior(tiles, Position(0, 0))

    assert marked == 200 * 200
    assert all(tile is Tile.INTERIOR_FLOOR for row in tiles for tile in row)


def test_comments_are_stripped_before_width():
    level = load_levels("#####  ; top wall\n#@ .#;x\n#####")[0]

    assert level.width == 5
    assert level.goals == {(3, 1)}


def test_blank_line_separates_levels():
    levels = load_levels(TWO_LEVELS)

    assert len(levels) == 2
    assert [level.name for level in levels] == ["First", "Second"]
    assert levels[0].start_state.boxes == [(2, 1)]
    assert levels[1].start_state.boxes == [(3, 1)]
    assert levels[1].width == 6


def test_whitespace_only_line_separates_levels():
    levels = load_levels("###\n#@#\n###\n   \n####\n#@ #\n####")

    assert len(levels) == 2
    assert [level.name for level in levels] == ["Level 1", "Level 2"]


def test_error_reports_level_and_line():
    text = TWO_LEVELS + "\n#####\n#@?.#\n#####\n"

    with pytest.raises(InvalidTileError) as info:
        load_levels(text)

    assert info.value.level_index == 3
    assert info.value.line == 11
    assert str(info.value).startswith("Level 3 (line 11): ")


def test_unbalanced_level_warns_by_default(caplog: pytest.LogCaptureFixture):
    with caplog.at_level(logging.WARNING, logger="sokoban_game.loader"):
        levels = load_levels("#####\n#@ .#\n#####")

    assert len(levels) == 1
    assert not levels[0].is_balanced
    assert "0 boxes but 1 goals" in caplog.text


def test_unbalanced_level_rejected_in_strict_mode():
    with pytest.raises(UnbalancedLevelError) as info:
        load_levels("#####\n#@ .#\n#####", strict=True)

    assert (info.value.boxes, info.value.goals) == (0, 1)
    assert info.value.level_index == 1


def test_custom_level_format():
    fmt = LevelFormat(comment_marker="'", default_facing=Direction.UP)
    levels = LevelCollectionLoader(fmt).load("'Quoted\n#####\n#@$.#   ' note\n#####")

    assert levels[0].name == "Quoted"
    assert levels[0].width == 5
    assert levels[0].start_state.player.facing is Direction.UP


def test_bundled_levels_are_balanced():
    levels = load_bundled_levels()

    assert [level.name for level in levels] == [
        "First Steps",
        "Corner",
        "Two Rows",
        "Detour",
        "Warehouse",
    ]
    assert all(level.is_balanced for level in levels)
    assert describe_levels(levels)[0] == "  1. First Steps (5x3)"


def test_load_level_file(tmp_path: Path):
    path = tmp_path / "custom.txt"
    path.write_text("; Custom\n####\n#@.#\n#$ #\n####\n", encoding="utf-8")

    levels = load_level_file(path)

    assert [level.name for level in levels] == ["Custom"]


def test_load_level_file_missing(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        load_level_file(tmp_path / "missing.txt")


def test_resolve_level_file_honours_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.delenv(LEVEL_FILE_ENV_VAR, raising=False)
    assert resolve_level_file() is None

    path = tmp_path / "levels.txt"
    path.write_text("#@#\n", encoding="utf-8")
    monkeypatch.setenv(LEVEL_FILE_ENV_VAR, str(path))
    assert resolve_level_file() == path


def test_resolve_level_file_errors_on_missing_path(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    missing = tmp_path / "nope.txt"
    monkeypatch.setenv(LEVEL_FILE_ENV_VAR, str(missing))

    with pytest.raises(FileNotFoundError):
        resolve_level_file()
    assert resolve_level_file(check_exists=False) == missing
