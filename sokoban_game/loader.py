"""Parsing of the plain text level format."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .game import Direction, GameState, Level, Marker, Player, Position, Tile


logger = logging.getLogger(__name__)

LEVEL_FILE_ENV_VAR = "SOKOBAN_LEVEL_FILE"
BUNDLED_LEVEL_FILE = "classic.txt"


class LevelParseError(ValueError):
    """Raised when level text cannot be turned into a level.

    The collection loader records which level of a file failed via
    :meth:`locate`; the location is prepended to the message.
    """

    level_index: Optional[int] = None
    line: Optional[int] = None

    def locate(self, level_index: int, line: int) -> "LevelParseError":
        self.level_index = level_index
        self.line = line
        return self

    def __str__(self) -> str:
        message = super().__str__()
        if self.level_index is None:
            return message
        return f"Level {self.level_index} (line {self.line}): {message}"


class EmptyLevelError(LevelParseError):
    def __init__(self) -> None:
        super().__init__("Empty level")


class InvalidTileError(LevelParseError):
    def __init__(self, char: str, position: Tuple[int, int]) -> None:
        self.char = char
        self.position = Position(*position)
        super().__init__(f"Invalid tile {char!r} at {tuple(self.position)}")


class MissingStartError(LevelParseError):
    def __init__(self) -> None:
        super().__init__("Level has no starting position")


class MultipleStartError(LevelParseError):
    def __init__(self, first: Position, second: Position) -> None:
        super().__init__(
            f"Level has more than one starting position ({tuple(first)} and {tuple(second)})"
        )


class UnbalancedLevelError(LevelParseError):
    def __init__(self, boxes: int, goals: int) -> None:
        self.boxes = boxes
        self.goals = goals
        super().__init__(f"Level has {boxes} boxes but {goals} goals")


@dataclass(frozen=True)
class LevelFormat:
    """Settings for reading level text."""

    comment_marker: str = ";"
    default_facing: Direction = Direction.DOWN

    def strip_comment(self, line: str) -> str:
        index = line.find(self.comment_marker)
        if index >= 0:
            line = line[:index]
        return line.rstrip()


MARKERS = {marker.value: marker for marker in Marker}


def flood_fill_interior(tiles: List[List[Tile]], start: Position) -> int:
    """Mark floor 4-connected to ``start`` as interior; return the count.

    ``tiles`` is relabelled in place. Only tiles still marked as exterior
    floor are visited, so each cell is relabelled at most once.
    """

    height = len(tiles)
    width = len(tiles[0]) if tiles else 0
    stack = [start]
    marked = 0
    while stack:
        x, y = stack.pop()
        if not (0 <= x < width and 0 <= y < height):
            continue
        if tiles[y][x] is not Tile.EXTERIOR_FLOOR:
            continue
        tiles[y][x] = Tile.INTERIOR_FLOOR
        marked += 1
        for direction in Direction:
            dx, dy = direction.vector
            stack.append(Position(x + dx, y + dy))
    return marked


class LevelParser:
    """Build a :class:`Level` from the rows of a single level."""

    def __init__(self, fmt: Optional[LevelFormat] = None):
        self.format = fmt or LevelFormat()

    def parse(self, lines: Sequence[str], name: str = "") -> Level:
        rows = [self.format.strip_comment(line) for line in lines]
        if not rows or not any(rows):
            raise EmptyLevelError()

        width = max(len(row) for row in rows)
        height = len(rows)
        tiles: List[List[Tile]] = []
        boxes: List[Position] = []
        goals: List[Position] = []
        start: Optional[Position] = None

        for y, row in enumerate(rows):
            tile_row: List[Tile] = []
            for x, char in enumerate(row.ljust(width)):
                marker = MARKERS.get(char)
                if marker is None:
                    raise InvalidTileError(char, (x, y))
                position = Position(x, y)
                if marker.has_player:
                    if start is not None:
                        raise MultipleStartError(start, position)
                    start = position
                if marker.has_box:
                    boxes.append(position)
                if marker.has_goal:
                    goals.append(position)
                tile_row.append(Tile.WALL if marker is Marker.WALL else Tile.EXTERIOR_FLOOR)
            tiles.append(tile_row)

        if start is None:
            raise MissingStartError()

        interior = flood_fill_interior(tiles, start)
        logger.debug(
            "parsed %dx%d level %r: %d boxes, %d goals, %d interior cells",
            width,
            height,
            name,
            len(boxes),
            len(goals),
            interior,
        )
        start_state = GameState(
            player=Player(start, self.format.default_facing),
            boxes=boxes,
            goals=frozenset(goals),
        )
        return Level(
            name=name,
            width=width,
            height=height,
            tiles=tuple(tuple(row) for row in tiles),
            start_state=start_state,
        )


@dataclass
class _PendingLevel:
    title: Optional[str]
    first_line: int
    lines: List[str]


class LevelCollectionLoader:
    """Split a multi-level text blob and parse each level."""

    def __init__(self, fmt: Optional[LevelFormat] = None, *, strict: bool = False):
        self.format = fmt or LevelFormat()
        self.parser = LevelParser(self.format)
        self.strict = strict

    def split(self, text: str) -> List[_PendingLevel]:
        chunks: List[_PendingLevel] = []
        current: Optional[_PendingLevel] = None
        title: Optional[str] = None
        marker = self.format.comment_marker

        for number, raw in enumerate(text.splitlines(), start=1):
            line = self.format.strip_comment(raw)
            if line:
                if current is None:
                    current = _PendingLevel(title=title, first_line=number, lines=[])
                    chunks.append(current)
                    title = None
                current.lines.append(line)
                continue
            current = None
            stripped = raw.strip()
            if stripped.startswith(marker):
                comment = stripped[len(marker):].strip()
                if comment:
                    title = comment
        return chunks

    def load(self, text: str) -> List[Level]:
        levels: List[Level] = []
        for index, chunk in enumerate(self.split(text), start=1):
            name = chunk.title or f"Level {index}"
            try:
                level = self.parser.parse(chunk.lines, name=name)
            except LevelParseError as exc:
                exc.locate(index, chunk.first_line)
                raise
            if not level.is_balanced:
                boxes, goals = len(level.start_state.boxes), len(level.goals)
                if self.strict:
                    raise UnbalancedLevelError(boxes, goals).locate(index, chunk.first_line)
                logger.warning("level %r has %d boxes but %d goals", name, boxes, goals)
            levels.append(level)
        logger.debug("loaded %d levels", len(levels))
        return levels

    def load_file(self, path: Path) -> List[Level]:
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(path)
        return self.load(path.read_text(encoding="utf-8"))


def load_levels(
    text: str, *, fmt: Optional[LevelFormat] = None, strict: bool = False
) -> List[Level]:
    return LevelCollectionLoader(fmt, strict=strict).load(text)


def load_level_file(path: Path, *, fmt: Optional[LevelFormat] = None) -> List[Level]:
    return LevelCollectionLoader(fmt).load_file(path)


def bundled_level_text() -> str:
    return resources.files("sokoban_game").joinpath("levels", BUNDLED_LEVEL_FILE).read_text(
        encoding="utf-8"
    )


def load_bundled_levels(fmt: Optional[LevelFormat] = None) -> List[Level]:
    return LevelCollectionLoader(fmt).load(bundled_level_text())


def resolve_level_file(check_exists: bool = True) -> Optional[Path]:
    """Return the level file chosen via ``SOKOBAN_LEVEL_FILE``.

    ``None`` means the bundled collection should be used. When
    *check_exists* is true a configured but missing file raises
    :class:`FileNotFoundError`.
    """

    value = os.environ.get(LEVEL_FILE_ENV_VAR)
    if not value:
        return None
    path = Path(value).expanduser()
    if check_exists and not path.exists():
        raise FileNotFoundError(f"Level file does not exist: {path}")
    return path


def describe_levels(levels: Iterable[Level]) -> List[str]:
    return [
        f"{index:>3}. {level.name} ({level.width}x{level.height})"
        for index, level in enumerate(levels, start=1)
    ]
