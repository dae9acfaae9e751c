"""Layout and colour settings for the sokoban UI."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Tuple

Color = Tuple[int, int, int]


@dataclass(frozen=True)
class Palette:
    """Colours used when drawing a level."""

    background: Color = (29, 167, 226)
    wall: Color = (70, 54, 44)
    wall_edge: Color = (40, 30, 24)
    interior_floor: Color = (226, 214, 180)
    exterior_floor: Color = (29, 167, 226)
    goal: Color = (220, 60, 60)
    box: Color = (196, 130, 52)
    box_on_goal: Color = (92, 170, 72)
    box_edge: Color = (90, 58, 24)
    player: Color = (40, 60, 160)
    facing: Color = (250, 250, 250)
    text: Color = (250, 250, 250)


@dataclass(frozen=True)
class UIConfig:
    """Window and drawing settings handed to the app and renderer."""

    window_size: Tuple[int, int] = (800, 600)
    caption: str = "Sokoban"
    fps: int = 60
    tile_size: int = 40
    status_height: int = 36
    font_size: int = 26
    palette: Palette = field(default_factory=Palette)


@dataclass(frozen=True)
class BoardGeometry:
    """Pixel placement of the board inside a surface."""

    origin: Tuple[int, int]
    cell_size: int

    def cell_rect(self, cell: Tuple[int, int]) -> Tuple[int, int, int, int]:
        x, y = cell
        return (
            self.origin[0] + x * self.cell_size,
            self.origin[1] + y * self.cell_size,
            self.cell_size,
            self.cell_size,
        )

    def cell_center(self, cell: Tuple[int, int]) -> Tuple[int, int]:
        left, top, size, _ = self.cell_rect(cell)
        return (left + size // 2, top + size // 2)


def compute_geometry(
    level_width: int,
    level_height: int,
    surface_size: Tuple[int, int],
    *,
    tile_size: int,
    top_margin: int = 0,
) -> BoardGeometry:
    """Centre the board in the surface, shrinking tiles if it does not fit."""

    available_width, available_height = surface_size
    available_height = max(1, available_height - top_margin)
    cell_size = min(
        tile_size,
        available_width // max(1, level_width),
        available_height // max(1, level_height),
    )
    cell_size = max(1, cell_size)

    board_width = level_width * cell_size
    board_height = level_height * cell_size
    origin = (
        (available_width - board_width) // 2,
        top_margin + (available_height - board_height) // 2,
    )
    return BoardGeometry(origin=origin, cell_size=cell_size)
