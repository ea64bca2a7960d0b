"""
utils.py - Constants, enumerations and board helpers for remote Connect Four

This module provides the board dimensions, the cell/actor and game status
enumerations shared by server and client, and the low-level numpy helpers
used for win detection and ASCII rendering.
"""

from enum import Enum
from typing import List, Optional, Tuple

import numpy as np

# Game constants
ROWS = 6
COLS = 7
CONNECT_N = 4  # Number of pieces in a row to win


class Actor(Enum):
    """Cell states on the board; the non-empty values double as the actor of a move."""
    EMPTY = 0
    HUMAN = 1
    SERVER = 2

    def __str__(self):
        if self == Actor.EMPTY:
            return "."
        elif self == Actor.HUMAN:
            return "X"
        return "O"


class GameStatus(Enum):
    """Outcome of a game session. The string form only exists on the wire."""
    ONGOING = "ongoing"
    HUMAN_WIN = "player_won"
    SERVER_WIN = "server_won"
    DRAW = "draw"

    def is_game_over(self) -> bool:
        return self != GameStatus.ONGOING

    def to_wire(self) -> str:
        return self.value

    @classmethod
    def from_wire(cls, text: str) -> 'GameStatus':
        """
        Parse a status string received over the wire.

        Raises:
            ValueError: if the string is not one of the known statuses
        """
        try:
            return cls(text)
        except ValueError:
            raise ValueError(f"Unknown game status: {text!r}") from None

    @classmethod
    def win_for(cls, actor: Actor) -> 'GameStatus':
        if actor == Actor.HUMAN:
            return cls.HUMAN_WIN
        if actor == Actor.SERVER:
            return cls.SERVER_WIN
        raise ValueError("EMPTY cannot win a game")


# Axis vectors (row, col); each axis is walked in both directions
AXIS_VECTORS = (
    (1, 0),    # Vertical
    (0, 1),    # Horizontal
    (1, 1),    # Diagonal top-left to bottom-right
    (-1, 1),   # Diagonal bottom-left to top-right
)


def empty_grid() -> np.ndarray:
    """Return a new all-empty ROWS x COLS grid."""
    return np.zeros((ROWS, COLS), dtype=np.int8)


def is_valid_position(row: int, col: int) -> bool:
    """Check if a position is within the board boundaries."""
    return 0 <= row < ROWS and 0 <= col < COLS


def is_valid_column(col: int) -> bool:
    return isinstance(col, (int, np.integer)) and not isinstance(col, bool) and 0 <= col < COLS


def lowest_empty_row(grid: np.ndarray, column: int) -> Optional[int]:
    """
    Find the row a disc dropped into ``column`` would land on.

    Args:
        grid: The game grid
        column: Column index

    Returns:
        The lowest empty row index, or None if the column is full
    """
    empty_rows = np.flatnonzero(grid[:, column] == Actor.EMPTY.value)
    if empty_rows.size == 0:
        return None
    return int(empty_rows[-1])


def count_run(grid: np.ndarray, row: int, col: int, dr: int, dc: int, value: int) -> int:
    """Count consecutive ``value`` cells starting next to (row, col) along (dr, dc)."""
    count = 0
    r, c = row + dr, col + dc
    while is_valid_position(r, c) and grid[r, c] == value:
        count += 1
        r += dr
        c += dc
    return count


def scan_for_run(grid: np.ndarray, value: int) -> List[Tuple[int, int]]:
    """
    Brute-force scan of the whole grid for a run of CONNECT_N ``value`` cells.

    Returns:
        The cells of the first run found, or an empty list
    """
    for row in range(ROWS):
        for col in range(COLS):
            for dr, dc in AXIS_VECTORS:
                cells = [(row + i * dr, col + i * dc) for i in range(CONNECT_N)]
                if all(is_valid_position(r, c) and grid[r, c] == value for r, c in cells):
                    return cells
    return []


def render_board_ascii(grid: np.ndarray) -> str:
    """
    Render the grid as ASCII art with column numbers underneath.

    Args:
        grid: The game grid

    Returns:
        ASCII representation of the board
    """
    result = ["|" + "-" * (COLS * 2 - 1) + "|"]

    for row in range(ROWS):
        cells = [str(Actor(int(grid[row, col]))) for col in range(COLS)]
        result.append("|" + " ".join(cells) + "|")

    result.append("|" + "-" * (COLS * 2 - 1) + "|")
    result.append("|" + " ".join(str(i) for i in range(COLS)) + "|")

    return "\n".join(result)
