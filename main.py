"""Launch the sokoban window."""

from __future__ import annotations

import sys

from sokoban_game.ui.main import main


if __name__ == "__main__":
    sys.exit(main())
