"""
connect4_remote.interfaces - User interfaces for remote Connect Four

This package contains the command-line interface used to run the server,
play against it and replay recorded games.
"""

# Don't import anything here to avoid circular imports
__all__ = []
