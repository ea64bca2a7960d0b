"""
reconciler.py - Infer moves by diffing two board snapshots

The server answers a move with the resulting board only. The client keeps
the board it had before sending the move and compares it with the new one:
an empty cell that became HUMAN is the human's drop, an empty cell that
became SERVER is the server's reply. Anything else means the two sides have
drifted apart, and the diff refuses to guess.
"""

from dataclasses import dataclass
from typing import List

import numpy as np

from connect4_remote.errors import ReconciliationError
from connect4_remote.game.board import Board
from connect4_remote.utils import Actor, lowest_empty_row


@dataclass(frozen=True)
class InferredDrop:
    """A drop recovered from a snapshot diff."""
    actor: Actor
    row: int
    column: int


def diff_snapshots(before: Board, after: Board) -> List[InferredDrop]:
    """
    Work out which drops turn ``before`` into ``after``.

    Args:
        before: Board the client held before the request
        after: Board returned by the server

    Returns:
        At most two drops, the human's first and the server's second

    Raises:
        ReconciliationError: if a changed cell was not empty before, an
            actor appears to have dropped more than once, or a drop does not
            sit on the lowest free cell of its column
    """
    changed = np.argwhere(before.grid != after.grid)
    drops = {}

    for row, col in changed:
        row, col = int(row), int(col)
        old = Actor(int(before.grid[row, col]))
        new = Actor(int(after.grid[row, col]))
        if old != Actor.EMPTY or new == Actor.EMPTY:
            raise ReconciliationError(
                f"Cell ({row}, {col}) changed from {old.name} to {new.name}; only EMPTY -> disc is possible")
        if new in drops:
            raise ReconciliationError(f"More than one new {new.name} disc between snapshots")
        drops[new] = InferredDrop(actor=new, row=row, column=col)

    ordered = [drops[actor] for actor in (Actor.HUMAN, Actor.SERVER) if actor in drops]
    _check_gravity(before, ordered)
    return ordered


def _check_gravity(before: Board, drops: List[InferredDrop]):
    """Each drop must land on the lowest free cell once the earlier drops are in place."""
    grid = before.grid.copy()
    for drop in drops:
        expected = lowest_empty_row(grid, drop.column)
        if expected != drop.row:
            raise ReconciliationError(
                f"{drop.actor.name} disc at ({drop.row}, {drop.column}) is not where a drop into "
                f"column {drop.column} lands (row {expected})")
        grid[drop.row, drop.column] = drop.actor.value


def apply_drops(board: Board, drops: List[InferredDrop]) -> Board:
    """Replay inferred drops onto a copy of ``board``."""
    result = board.copy()
    for drop in drops:
        result.drop(drop.column, drop.actor)
    return result
