"""
connect4_remote.game - Authoritative game engine

This package contains the board representation, the rule engine,
the per-game session state machine and the move arbiter that answers
each human move with a uniformly random server move.
"""

from connect4_remote.game.board import Board
from connect4_remote.game.session import GameSession, MoveLogEntry
from connect4_remote.game.arbiter import MoveArbiter, MoveOutcome

__all__ = ['Board', 'GameSession', 'MoveLogEntry', 'MoveArbiter', 'MoveOutcome']
