"""Interactive pygame front end and command line launcher."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional, Sequence

from ..game import Direction, Level, MoveResult, SokobanGame
from ..loader import (
    LEVEL_FILE_ENV_VAR,
    LevelParseError,
    describe_levels,
    load_bundled_levels,
    load_level_file,
    resolve_level_file,
)
from .layout import UIConfig
from .toolkit import SokobanUI, direction_for_event, ensure_pygame


logger = logging.getLogger(__name__)


class SokobanApp:
    """pygame host: owns the level set and the active session."""

    def __init__(
        self,
        levels: Sequence[Level],
        *,
        config: Optional[UIConfig] = None,
        start_index: int = 0,
        surface=None,
    ) -> None:
        if not levels:
            raise ValueError("At least one level is required")
        pygame = ensure_pygame()
        self.config = config or UIConfig()
        self.levels = list(levels)
        self.owns_display = surface is None
        if self.owns_display:
            self.screen = pygame.display.set_mode(self.config.window_size)
            pygame.display.set_caption(self.config.caption)
        else:
            self.screen = surface
        self.font = pygame.font.Font(None, self.config.font_size)
        self.clock = pygame.time.Clock()
        self.running = True
        self.index = start_index % len(self.levels)
        self.game = SokobanGame(self.levels[self.index])
        self.ui = SokobanUI(
            self.game,
            config=self.config,
            surface=self.screen,
            top_margin=self.config.status_height,
        )

    @property
    def level(self) -> Level:
        return self.levels[self.index]

    def load_level(self, index: int) -> None:
        self.index = index % len(self.levels)
        self.game = SokobanGame(self.level)
        self.ui.set_game(self.game)
        logger.debug("started level %d: %s", self.index + 1, self.level.name)

    def cycle_level(self, step: int) -> None:
        self.load_level(self.index + step)

    def reset(self) -> None:
        self.game.reset()

    def move(self, direction: Direction) -> MoveResult:
        was_solved = self.game.level_complete()
        result = self.game.move(direction)
        if not was_solved and self.game.level_complete():
            logger.info("level %r solved in %d steps", self.level.name, self.game.steps)
        return result

    def handle_event(self, event) -> None:
        pygame = ensure_pygame()
        if event.type == pygame.QUIT:
            self.running = False
            return
        if event.type != pygame.KEYDOWN:
            return
        if event.key == pygame.K_ESCAPE:
            self.running = False
        elif event.key == pygame.K_r:
            self.reset()
        elif event.key == pygame.K_n:
            self.cycle_level(1)
        elif event.key == pygame.K_p:
            self.cycle_level(-1)
        else:
            direction = direction_for_event(event)
            if direction is not None:
                self.move(direction)

    def status_text(self) -> str:
        text = (
            f"{self.index + 1}/{len(self.levels)} {self.level.name}"
            f"  steps: {self.game.steps}"
        )
        if self.game.level_complete():
            text += "  solved! (n: next level)"
        return text

    def draw(self) -> None:
        pygame = ensure_pygame()
        self.ui.render()
        label = self.font.render(self.status_text(), True, self.config.palette.text)
        self.screen.blit(label, (10, (self.config.status_height - label.get_height()) // 2))
        if self.owns_display:
            pygame.display.flip()

    # ------------------------------------------------------------------
    # Main loop
    # ------------------------------------------------------------------
    def run(self) -> None:
        pygame = ensure_pygame()
        while self.running:
            for event in pygame.event.get():
                self.handle_event(event)
            self.draw()
            self.clock.tick(self.config.fps)
        pygame.quit()


def run(levels: Sequence[Level], *, start_index: int = 0, config: Optional[UIConfig] = None) -> None:
    """Entry point helper that instantiates and runs the UI."""

    app = SokobanApp(levels, config=config, start_index=start_index)
    app.run()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sokoban launcher")
    parser.add_argument(
        "--file",
        type=Path,
        help=f"Level collection to load (default: ${LEVEL_FILE_ENV_VAR} or the bundled set).",
    )
    parser.add_argument("--level", type=int, default=1, help="1-based level to start on.")
    parser.add_argument(
        "--list-levels",
        action="store_true",
        help="Print the levels of the collection and exit.",
    )
    parser.add_argument(
        "--info",
        action="store_true",
        help="Print the resolved level source and exit without launching the UI.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging.")
    return parser


def load_collection(path: Optional[Path]) -> List[Level]:
    if path is None:
        return load_bundled_levels()
    return load_level_file(path)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        path = args.file if args.file is not None else resolve_level_file()
        levels = load_collection(path)
    except FileNotFoundError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    except LevelParseError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    if args.info:
        print(
            "Sokoban bootstrap\n"
            f"  levels: {path if path is not None else 'bundled collection'}\n"
            f"  count: {len(levels)}\n"
            f"Set {LEVEL_FILE_ENV_VAR} to load a different collection."
        )
        return 0

    if args.list_levels:
        print("Available levels:")
        for line in describe_levels(levels):
            print(line)
        return 0

    if not 1 <= args.level <= len(levels):
        print(f"error: --level must be between 1 and {len(levels)}", file=sys.stderr)
        return 2

    run(levels, start_index=args.level - 1)
    return 0


if __name__ == "__main__":  # pragma: no cover - manual invocation entry point
    sys.exit(main())
