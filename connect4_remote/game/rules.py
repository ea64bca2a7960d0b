"""
rules.py - Win and draw detection for Connect Four

Win detection walks the four axes through the disc that was just dropped.
A full-board scan with identical results is provided for draw detection
and for cross-checking.
"""

from typing import List, Tuple

from connect4_remote.debug import debug
from connect4_remote.game.board import Board
from connect4_remote.utils import (CONNECT_N, AXIS_VECTORS, Actor, count_run,
                                   is_valid_position, scan_for_run)


def has_connect_four(board: Board, actor: Actor, last_row: int, last_col: int) -> bool:
    """
    Check whether ``actor``'s disc at (last_row, last_col) completes a run of four.

    Args:
        board: The board after the drop
        actor: Actor who made the last drop
        last_row: Row the disc landed on
        last_col: Column the disc was dropped into

    Returns:
        True if the drop won the game
    """
    if not is_valid_position(last_row, last_col) or board.cell(last_row, last_col) != actor:
        return False

    for dr, dc in AXIS_VECTORS:
        total = (1 + count_run(board.grid, last_row, last_col, dr, dc, actor.value)
                 + count_run(board.grid, last_row, last_col, -dr, -dc, actor.value))
        if total >= CONNECT_N:
            debug.debug(f"{actor.name} connects {total} through ({last_row}, {last_col})", "rules")
            return True

    return False


def winning_cells(board: Board, actor: Actor) -> List[Tuple[int, int]]:
    """Cells of a run of four for ``actor`` anywhere on the board, or []."""
    return scan_for_run(board.grid, actor.value)


def find_any_connect_four(board: Board, actor: Actor) -> bool:
    """Full-board scan: True if ``actor`` has four in a row anywhere."""
    return bool(winning_cells(board, actor))


def is_draw(board: Board) -> bool:
    """
    A draw is a board whose top row is full while nobody has four in a row.

    A full board that also holds a win is a win, never a draw.
    """
    if not board.is_top_row_full():
        return False
    return not (find_any_connect_four(board, Actor.HUMAN) or find_any_connect_four(board, Actor.SERVER))
