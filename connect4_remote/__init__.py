"""
connect4_remote - Remote Connect Four against a random server opponent

This package provides the authoritative server-side game engine, an HTTP
transport for it, and a thin client that mirrors each game by diffing board
snapshots, records the inferred moves locally and replays them offline.
"""

# Version number
__version__ = '0.2.0'
