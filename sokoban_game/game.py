"""Core rules for the box pushing puzzle."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Tuple, Union


logger = logging.getLogger(__name__)


class Position(NamedTuple):
    """Grid coordinate with the origin in the top-left corner."""

    x: int
    y: int

    def step(self, direction: "Direction") -> "Position":
        dx, dy = direction.vector
        return Position(self.x + dx, self.y + dy)


class Direction(Enum):
    """Cardinal directions a player can move in."""

    UP = (0, -1)
    DOWN = (0, 1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def vector(self) -> Tuple[int, int]:
        return self.value

    @staticmethod
    def from_name(name: str) -> "Direction":
        name = name.upper()
        try:
            return Direction[name]
        except KeyError as exc:
            raise ValueError(f"Unknown direction: {name}") from exc

    @staticmethod
    def from_char(char: str) -> "Direction":
        """Decode a single LURD move character (pushes may be upper-case)."""

        mapping = {
            "u": Direction.UP,
            "d": Direction.DOWN,
            "l": Direction.LEFT,
            "r": Direction.RIGHT,
        }
        try:
            return mapping[char.lower()]
        except KeyError as exc:
            raise ValueError(f"Unknown move character: {char!r}") from exc

    @property
    def char(self) -> str:
        return self.name[0].lower()

    def reverse(self) -> "Direction":
        mapping = {
            Direction.UP: Direction.DOWN,
            Direction.DOWN: Direction.UP,
            Direction.LEFT: Direction.RIGHT,
            Direction.RIGHT: Direction.LEFT,
        }
        return mapping[self]


class Tile(Enum):
    """Static cell kinds stored on a parsed level."""

    WALL = "wall"
    EXTERIOR_FLOOR = "exterior"
    INTERIOR_FLOOR = "interior"

    @property
    def is_floor(self) -> bool:
        return self is not Tile.WALL


class Marker(Enum):
    """Characters of the level text format.

    Markers only exist while parsing; the player, boxes and goals are lifted
    out of the grid and every non-wall marker ends up as floor.
    """

    WALL = "#"
    FLOOR = " "
    PLAYER = "@"
    PLAYER_ON_GOAL = "+"
    BOX = "$"
    BOX_ON_GOAL = "*"
    GOAL = "."

    @property
    def has_player(self) -> bool:
        return self in (Marker.PLAYER, Marker.PLAYER_ON_GOAL)

    @property
    def has_box(self) -> bool:
        return self in (Marker.BOX, Marker.BOX_ON_GOAL)

    @property
    def has_goal(self) -> bool:
        return self in (Marker.GOAL, Marker.PLAYER_ON_GOAL, Marker.BOX_ON_GOAL)


class MoveResult(Enum):
    """Outcome of a single move attempt."""

    MOVED = "moved"
    PUSHED = "pushed"
    BLOCKED = "blocked"

    @property
    def accepted(self) -> bool:
        return self is not MoveResult.BLOCKED


@dataclass
class Player:
    position: Position
    facing: Direction = Direction.DOWN


@dataclass
class GameState:
    """Mutable per-session state: the player, boxes and step counter."""

    player: Player
    boxes: List[Position] = field(default_factory=list)
    goals: FrozenSet[Position] = frozenset()
    steps: int = 0

    def clone(self) -> "GameState":
        return GameState(
            player=Player(self.player.position, self.player.facing),
            boxes=list(self.boxes),
            goals=self.goals,
            steps=self.steps,
        )

    def box_index(self, position: Position) -> Optional[int]:
        try:
            return self.boxes.index(position)
        except ValueError:
            return None

    def has_box(self, position: Position) -> bool:
        return position in self.boxes


@dataclass(frozen=True)
class Level:
    """Immutable level definition produced by the parser."""

    name: str
    width: int
    height: int
    tiles: Tuple[Tuple[Tile, ...], ...]
    start_state: GameState

    @property
    def goals(self) -> FrozenSet[Position]:
        return self.start_state.goals

    @property
    def metadata(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "dimensions": f"{self.width}x{self.height}",
            "boxes": len(self.start_state.boxes),
            "goals": len(self.goals),
        }

    @property
    def is_balanced(self) -> bool:
        return len(self.start_state.boxes) == len(self.goals)

    def inside(self, position: Tuple[int, int]) -> bool:
        x, y = position
        return 0 <= x < self.width and 0 <= y < self.height

    def tile_at(self, position: Tuple[int, int]) -> Optional[Tile]:
        if not self.inside(position):
            return None
        x, y = position
        return self.tiles[y][x]

    def is_wall(self, position: Tuple[int, int]) -> bool:
        # Out-of-range cells are open; x is bounded by width, y by height.
        return self.tile_at(position) is Tile.WALL

    def interior_cells(self) -> Iterable[Position]:
        for y, row in enumerate(self.tiles):
            for x, tile in enumerate(row):
                if tile is Tile.INTERIOR_FLOOR:
                    yield Position(x, y)


GoalSource = Union[Level, Iterable[Tuple[int, int]]]


def start_session(level: Level) -> GameState:
    """Return a fresh working copy of the level's starting state."""

    return level.start_state.clone()


def resolve_move(state: GameState, direction: Direction, level: Level) -> MoveResult:
    """Apply one player move to ``state`` in place and report what happened."""

    state.player.facing = direction
    target = state.player.position.step(direction)
    if level.is_wall(target):
        logger.debug("move %s blocked by wall at %s", direction.name, target)
        return MoveResult.BLOCKED

    result = MoveResult.MOVED
    index = state.box_index(target)
    if index is not None:
        push_target = target.step(direction)
        if level.is_wall(push_target) or state.has_box(push_target):
            logger.debug("push %s blocked at %s", direction.name, push_target)
            return MoveResult.BLOCKED
        state.boxes[index] = push_target
        result = MoveResult.PUSHED

    state.player.position = target
    state.steps += 1
    return result


def apply_move(state: GameState, direction: Direction, level: Level) -> GameState:
    resolve_move(state, direction, level)
    return state


def is_solved(state: GameState, goals: GoalSource) -> bool:
    """True when the boxes occupy exactly the goal cells."""

    if isinstance(goals, Level):
        goal_set = set(goals.goals)
    else:
        goal_set = {Position(*goal) for goal in goals}
    return set(state.boxes) == goal_set


def parse_moves(text: str) -> List[Direction]:
    """Decode a LURD move string, ignoring whitespace."""

    return [Direction.from_char(char) for char in text if not char.isspace()]


class SokobanGame:
    """A play session on a single level."""

    def __init__(self, level: Level):
        self.level = level
        self.state = start_session(level)
        self.history: List[MoveResult] = []

    @property
    def steps(self) -> int:
        return self.state.steps

    def reset(self) -> None:
        self.state = start_session(self.level)
        self.history = []

    def move(self, direction: Direction) -> MoveResult:
        result = resolve_move(self.state, direction, self.level)
        self.history.append(result)
        return result

    def replay(self, moves: Union[str, Iterable[Direction]]) -> List[MoveResult]:
        if isinstance(moves, str):
            moves = parse_moves(moves)
        return [self.move(direction) for direction in moves]

    def level_complete(self) -> bool:
        return is_solved(self.state, self.level)

    def snapshot(self) -> Dict[str, object]:
        return {
            "metadata": self.level.metadata,
            "steps": self.state.steps,
            "pushes": sum(1 for result in self.history if result is MoveResult.PUSHED),
            "player": tuple(self.state.player.position),
            "facing": self.state.player.facing.name,
            "boxes": [tuple(box) for box in self.state.boxes],
            "solved": self.level_complete(),
        }

    def render_text(self) -> str:
        """Render the current state using the level text legend."""

        boxes = set(self.state.boxes)
        goals = self.state.goals
        player = self.state.player.position
        rows: List[str] = []
        for y, row in enumerate(self.level.tiles):
            chars: List[str] = []
            for x, tile in enumerate(row):
                cell = Position(x, y)
                on_goal = cell in goals
                if tile is Tile.WALL:
                    chars.append(Marker.WALL.value)
                elif cell == player:
                    chars.append((Marker.PLAYER_ON_GOAL if on_goal else Marker.PLAYER).value)
                elif cell in boxes:
                    chars.append((Marker.BOX_ON_GOAL if on_goal else Marker.BOX).value)
                elif on_goal:
                    chars.append(Marker.GOAL.value)
                else:
                    chars.append(Marker.FLOOR.value)
            rows.append("".join(chars).rstrip())
        return "\n".join(rows)


class SolutionValidator:
    """Replay move strings against levels to check them."""

    def __init__(self, levels: Iterable[Level]):
        self.levels = list(levels)

    def apply_solution(self, level: Level, moves: str) -> SokobanGame:
        game = SokobanGame(level)
        game.replay(moves)
        return game

    def validate(self, index: int, moves: str) -> bool:
        try:
            level = self.levels[index]
        except IndexError as exc:
            raise IndexError(f"No level with index {index}") from exc
        return self.apply_solution(level, moves).level_complete()
