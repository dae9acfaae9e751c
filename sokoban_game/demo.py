"""Simple command line demo for the sokoban rules."""

from .game import SokobanGame
from .loader import load_bundled_levels

CORNER_SOLUTION = "RurD"


def main() -> None:
    levels = load_bundled_levels()
    level = next(level for level in levels if level.name == "Corner")

    game = SokobanGame(level)
    print("=== Sokoban Demo ===")
    print(f"Level: {level.name} ({level.width}x{level.height})")
    print(game.render_text())

    game.replay(CORNER_SOLUTION)
    summary = game.snapshot()

    print(f"After {CORNER_SOLUTION!r}:")
    print(game.render_text())
    print(f"Steps: {summary['steps']}, pushes: {summary['pushes']}")
    print(f"Solved: {summary['solved']}")


if __name__ == "__main__":
    main()
