"""
connect4_remote.data - Local data storage

This package holds the locked JSON file helpers and the client-side
recording store used for offline replay.
"""

__all__ = ['RecordingStore', 'RecordedGame', 'RecordedMove']

from connect4_remote.data.recorder import RecordingStore, RecordedGame, RecordedMove
