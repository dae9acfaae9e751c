"""pygame renderer and key handling for a sokoban session.

The renderer only reads the session state and forwards decoded directions to
:meth:`SokobanGame.move`; all rules live in :mod:`sokoban_game.game`.
"""

from __future__ import annotations

import os
from typing import Dict, Iterable, List, Optional

from ..game import Direction, MoveResult, SokobanGame, Tile
from .layout import BoardGeometry, UIConfig, compute_geometry


# Imported lazily so callers can pick SDL drivers (e.g. ``dummy`` in tests)
# before pygame initialises.
_PYGAME = None


def ensure_pygame():
    global _PYGAME
    if _PYGAME is None:
        os.environ.setdefault("SDL_AUDIODRIVER", "dummy")
        _PYGAME = __import__("pygame")
        _PYGAME.display.init()
        _PYGAME.font.init()
    return _PYGAME


def key_directions() -> Dict[int, Direction]:
    pygame = ensure_pygame()
    return {
        pygame.K_UP: Direction.UP,
        pygame.K_w: Direction.UP,
        pygame.K_DOWN: Direction.DOWN,
        pygame.K_s: Direction.DOWN,
        pygame.K_LEFT: Direction.LEFT,
        pygame.K_a: Direction.LEFT,
        pygame.K_RIGHT: Direction.RIGHT,
        pygame.K_d: Direction.RIGHT,
    }


def direction_for_event(event) -> Optional[Direction]:
    pygame = ensure_pygame()
    if event.type != pygame.KEYDOWN:
        return None
    return key_directions().get(event.key)


class SokobanUI:
    """Draws a :class:`SokobanGame` onto a pygame surface."""

    def __init__(
        self,
        game: SokobanGame,
        *,
        config: Optional[UIConfig] = None,
        surface=None,
        top_margin: int = 0,
    ) -> None:
        pygame = ensure_pygame()
        self.config = config or UIConfig()
        self.surface = surface if surface is not None else pygame.Surface(self.config.window_size)
        self.top_margin = top_margin
        self.game = game
        self.geometry = self._compute_geometry()

    def set_game(self, game: SokobanGame) -> None:
        self.game = game
        self.geometry = self._compute_geometry()

    def _compute_geometry(self) -> BoardGeometry:
        level = self.game.level
        return compute_geometry(
            level.width,
            level.height,
            self.surface.get_size(),
            tile_size=self.config.tile_size,
            top_margin=self.top_margin,
        )

    # ------------------------------------------------------------------
    # Input handling
    def process_events(self, events: Iterable[object]) -> List[MoveResult]:
        results: List[MoveResult] = []
        for event in events:
            direction = direction_for_event(event)
            if direction is not None:
                results.append(self.game.move(direction))
        return results

    # ------------------------------------------------------------------
    # Rendering helpers
    def render(self):
        self.surface.fill(self.config.palette.background)
        self._draw_tiles()
        self._draw_goals()
        self._draw_boxes()
        self._draw_player()
        return self.surface

    def _rect(self, cell):
        pygame = ensure_pygame()
        return pygame.Rect(*self.geometry.cell_rect(cell))

    def _draw_tiles(self) -> None:
        pygame = ensure_pygame()
        palette = self.config.palette
        for y, row in enumerate(self.game.level.tiles):
            for x, tile in enumerate(row):
                rect = self._rect((x, y))
                if tile is Tile.WALL:
                    self.surface.fill(palette.wall, rect)
                    pygame.draw.rect(self.surface, palette.wall_edge, rect, 1)
                elif tile is Tile.INTERIOR_FLOOR:
                    self.surface.fill(palette.interior_floor, rect)
                else:
                    self.surface.fill(palette.exterior_floor, rect)

    def _draw_goals(self) -> None:
        pygame = ensure_pygame()
        radius = max(2, self.geometry.cell_size // 6)
        for goal in self.game.state.goals:
            center = self.geometry.cell_center(goal)
            pygame.draw.circle(self.surface, self.config.palette.goal, center, radius)

    def _draw_boxes(self) -> None:
        pygame = ensure_pygame()
        palette = self.config.palette
        inset = max(1, self.geometry.cell_size // 10)
        goals = self.game.state.goals
        for box in self.game.state.boxes:
            rect = self._rect(box).inflate(-2 * inset, -2 * inset)
            color = palette.box_on_goal if box in goals else palette.box
            self.surface.fill(color, rect)
            pygame.draw.rect(self.surface, palette.box_edge, rect, 2)

    def _draw_player(self) -> None:
        pygame = ensure_pygame()
        palette = self.config.palette
        player = self.game.state.player
        center = self.geometry.cell_center(player.position)
        radius = max(2, self.geometry.cell_size * 2 // 5)
        pygame.draw.circle(self.surface, palette.player, center, radius)
        # Small dot on the side the player is facing.
        dx, dy = player.facing.vector
        offset = radius // 2
        eye = (center[0] + dx * offset, center[1] + dy * offset)
        pygame.draw.circle(self.surface, palette.facing, eye, max(1, radius // 4))


__all__ = ["SokobanUI", "direction_for_event", "ensure_pygame", "key_directions"]
