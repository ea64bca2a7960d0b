"""
connect4_remote.server - Server side of remote Connect Four

Player directory, game repository, the transport-agnostic game service
and the Flask application exposing it over HTTP.
"""

__all__ = ['GameService', 'create_app']

from connect4_remote.server.service import GameService
from connect4_remote.server.app import create_app
