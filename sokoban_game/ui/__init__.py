"""User interface package for the sokoban game."""

from .layout import BoardGeometry, Palette, UIConfig, compute_geometry
from .main import SokobanApp, main, run
from .toolkit import SokobanUI

__all__ = [
    "BoardGeometry",
    "Palette",
    "SokobanApp",
    "SokobanUI",
    "UIConfig",
    "compute_geometry",
    "main",
    "run",
]
