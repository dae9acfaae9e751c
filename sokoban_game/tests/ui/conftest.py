"""Shared pytest fixtures for UI tests.

The tests force pygame into a headless configuration by using the SDL
``dummy`` video and audio drivers before pygame is first imported.
"""

from __future__ import annotations

import os
from typing import Generator

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")


@pytest.fixture(scope="session")
def pygame_module() -> Generator[object, None, None]:
    pytest.importorskip("pygame")
    from sokoban_game.ui.toolkit import ensure_pygame

    pygame = ensure_pygame()
    try:
        yield pygame
    finally:
        pygame.quit()
