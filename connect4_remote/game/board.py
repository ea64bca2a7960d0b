"""
board.py - Board representation for remote Connect Four

This module implements the Board class: a fixed 6x7 grid of cells that only
changes through ``drop``. The board knows nothing about whose turn it is or
about move history; sessions, the client view and replays each own their
own Board instance.
"""

from typing import List, Optional, Sequence, Set

import numpy as np

from connect4_remote.debug import debug
from connect4_remote.errors import ColumnFullError, InvalidColumnError
from connect4_remote.utils import (ROWS, COLS, Actor, empty_grid, is_valid_column,
                                   lowest_empty_row, render_board_ascii)


class Board:
    """
    A Connect Four board with gravity.

    Row 0 is the top row. Within every column the occupied cells form a
    contiguous run that starts at the bottom row.
    """

    def __init__(self, grid: Optional[np.ndarray] = None):
        """
        Initialize a board.

        Args:
            grid: Optional grid to take a private copy of (defaults to empty)
        """
        self.grid = empty_grid() if grid is None else np.array(grid, dtype=np.int8, copy=True)

    @classmethod
    def from_matrix(cls, matrix: Sequence[Sequence[int]]) -> 'Board':
        """
        Build a board from a row-major ROWS x COLS matrix of 0/1/2 values.

        Args:
            matrix: Nested sequence, row 0 first

        Returns:
            A new Board

        Raises:
            ValueError: if the shape, the cell values or gravity are wrong
        """
        try:
            cells = np.array(matrix, dtype=object)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Board matrix is not rectangular: {e}") from None

        if cells.shape != (ROWS, COLS):
            raise ValueError(f"Board must be {ROWS}x{COLS}, got shape {cells.shape}")

        # No casting: 1.5 or True must not quietly become a disc
        if not all(isinstance(v, (int, np.integer)) and not isinstance(v, bool) for v in cells.flat):
            raise ValueError("Board cells must be integers")
        grid = cells.astype(np.int64)

        valid_values = [actor.value for actor in Actor]
        if not np.isin(grid, valid_values).all():
            raise ValueError("Board cells must be 0 (empty), 1 (human) or 2 (server)")

        board = cls(grid.astype(np.int8))
        for col in range(COLS):
            if not board.column_has_gravity(col):
                raise ValueError(f"Column {col} has a gap below an occupied cell")
        return board

    def copy(self) -> 'Board':
        """Create an independent copy of the board."""
        return Board(self.grid)

    def cell(self, row: int, col: int) -> Actor:
        return Actor(int(self.grid[row, col]))

    def drop(self, column: int, actor: Actor) -> int:
        """
        Place ``actor``'s disc in the lowest empty row of ``column``.

        Args:
            column: Column index in [0, COLS)
            actor: HUMAN or SERVER

        Returns:
            The row the disc landed on

        Raises:
            InvalidColumnError: if the column is out of range
            ColumnFullError: if the column has no empty row
        """
        if not is_valid_column(column):
            raise InvalidColumnError(column)
        if actor == Actor.EMPTY:
            raise ValueError("Cannot drop an EMPTY disc")

        row = lowest_empty_row(self.grid, column)
        if row is None:
            debug.debug(f"Column {column} is full", "board")
            raise ColumnFullError(column)

        self.grid[row, column] = actor.value
        debug.trace(f"{actor.name} disc placed at ({row}, {column})", "board")
        return row

    def lowest_empty_row(self, column: int) -> Optional[int]:
        if not is_valid_column(column):
            raise InvalidColumnError(column)
        return lowest_empty_row(self.grid, column)

    def is_top_row_full(self) -> bool:
        """True when every column's row 0 is occupied."""
        return bool(np.all(self.grid[0, :] != Actor.EMPTY.value))

    def legal_columns(self) -> Set[int]:
        """All columns whose top cell is still empty."""
        return {int(col) for col in np.flatnonzero(self.grid[0, :] == Actor.EMPTY.value)}

    def column_has_gravity(self, column: int) -> bool:
        occupied = self.grid[:, column] != Actor.EMPTY.value
        # Once a cell is occupied every cell below it must be occupied too
        return bool(np.all(np.maximum.accumulate(occupied) == occupied))

    def disc_count(self, actor: Optional[Actor] = None) -> int:
        if actor is None:
            return int(np.count_nonzero(self.grid))
        return int(np.count_nonzero(self.grid == actor.value))

    def is_empty(self) -> bool:
        return not self.grid.any()

    def snapshot(self) -> List[List[int]]:
        """Row-major copy of the grid as plain ints, suitable for JSON."""
        return self.grid.astype(int).tolist()

    def render(self) -> str:
        return render_board_ascii(self.grid)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return bool(np.array_equal(self.grid, other.grid))

    def __ne__(self, other) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    __hash__ = None

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Board(discs={self.disc_count()})"

